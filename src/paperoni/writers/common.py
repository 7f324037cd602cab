# ABOUTME: Helpers shared by the EPUB and HTML writers.
# ABOUTME: Stylesheet loading, output file naming and the per-export report.

from dataclasses import dataclass, field
from pathlib import Path

from paperoni.errors import PaperoniError
from paperoni.models import Article, CssConfig

ASSETS_DIR = Path(__file__).parent / "assets"


@dataclass
class WriteReport:
    """Titles written to disk and the articles that could not be exported."""

    written: list[str] = field(default_factory=list)
    errors: list[PaperoniError] = field(default_factory=list)


def load_css(css_config: CssConfig) -> str:
    match css_config:
        case CssConfig.ALL:
            names = ("body.css", "headers.css")
        case CssConfig.NO_HEADERS:
            names = ("body.css",)
        case _:
            names = ()
    return "".join((ASSETS_DIR / name).read_text(encoding="utf-8") for name in names)


def epub_css() -> str:
    return (ASSETS_DIR / "epub.css").read_text(encoding="utf-8")


def safe_title(article: Article) -> str:
    """Article title usable as a file name."""
    return article.title.replace("/", " ").replace("\\", " ").strip()


def unique_path(directory: Path, stem: str, suffix: str, taken: set[Path]) -> Path:
    """`directory/stem.suffix`, or `stem_<n>.suffix` when that name is already used."""
    path = directory / f"{stem}{suffix}"
    if path in taken:
        path = directory / f"{stem}_{len(taken)}{suffix}"
    taken.add(path)
    return path


def merged_path(name: str, suffix: str) -> Path:
    if not name.endswith(suffix):
        name = f"{name}{suffix}"
    return Path(name)

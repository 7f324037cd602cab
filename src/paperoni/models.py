# ABOUTME: Shared schemas for extracted articles and run configuration.
# ABOUTME: Defines article metadata, the extracted Article, export enums and AppConfig.

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from bs4 import Tag
from pydantic import BaseModel, PositiveInt

from paperoni.errors import ImgError

# (src as it appears in the DOM, MIME type once known)
ImageRef = tuple[str, str | None]


class ExportType(StrEnum):
    EPUB = "epub"
    HTML = "html"


class CssConfig(StrEnum):
    ALL = "all"
    NO_HEADERS = "no_headers"
    NONE = "none"


class DownloadStatus(StrEnum):
    SUCCESSFUL = "successful"
    PARTIAL = "partial"
    FAILED = "failed"


class MetaData(BaseModel):
    """Article metadata found by the extractor."""

    title: str = ""
    byline: str | None = None
    direction: str | None = None
    excerpt: str | None = None
    site_name: str | None = None


@dataclass
class Article:
    """An extracted article: cleaned content, its metadata and the images it references."""

    content_root: Tag
    metadata: MetaData
    source_url: str
    image_refs: list[ImageRef] = field(default_factory=list)
    image_errors: list[ImgError] = field(default_factory=list)

    @property
    def title(self) -> str:
        return self.metadata.title or self.source_url

    @property
    def status(self) -> DownloadStatus:
        if self.image_errors:
            return DownloadStatus.PARTIAL
        return DownloadStatus.SUCCESSFUL


class AppConfig(BaseModel):
    """Validated command-line configuration."""

    urls: list[str]
    max_conn: PositiveInt = 8
    merged: str | None = None
    output_directory: Path | None = None
    export_type: ExportType = ExportType.EPUB
    inline_toc: bool = False
    inline_images: bool = False
    css_config: CssConfig = CssConfig.ALL
    verbosity: int = 0
    log_to_file: bool = False

    @property
    def can_disable_progress_bar(self) -> bool:
        """Progress bars are hidden while logs are written to stderr."""
        return self.verbosity > 0 and not self.log_to_file

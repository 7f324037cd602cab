# ABOUTME: Article title and <meta> metadata extraction.
# ABOUTME: Reads dc/og/twitter/weibo meta values and cleans the document <title>.

from bs4 import BeautifulSoup

from paperoni.models import MetaData
from paperoni.readability import dom, regexes


def _word_count(value: str) -> int:
    return len(value.split())


def get_article_title(doc: BeautifulSoup) -> str:
    """Best guess at the article title from <title>, trimming site names and breadcrumbs."""
    title_elem = doc.find("title")
    orig_title = title_elem.get_text().strip() if title_elem else ""
    cur_title = orig_title
    had_hierarchical_separators = False

    if regexes.TITLE_SEPARATOR.search(cur_title):
        had_hierarchical_separators = bool(regexes.HAS_TITLE_SEPARATOR.search(cur_title))
        cur_title = regexes.TITLE_START_SEPARATOR.sub(r"\1", orig_title)
        if _word_count(cur_title) < 3:
            cur_title = regexes.TITLE_END_SEPARATOR.sub(r"\1", orig_title)
    elif ": " in cur_title:
        headings = doc.find_all(["h1", "h2"])
        if not any(heading.get_text().strip() == cur_title for heading in headings):
            cur_title = orig_title[orig_title.rfind(":") + 1 :]
            if _word_count(cur_title) < 3:
                cur_title = orig_title[orig_title.find(":") + 1 :]
            elif _word_count(orig_title[: orig_title.find(":")]) > 5:
                cur_title = orig_title
    elif len(cur_title) > 150 or len(cur_title) < 15:
        h_ones = doc.find_all("h1")
        if len(h_ones) == 1:
            cur_title = dom.inner_text(h_ones[0])

    cur_title = regexes.NORMALIZE.sub(" ", cur_title.strip())
    # Short results are usually over-trimmed, unless the separators were hierarchical.
    word_count = _word_count(cur_title)
    stripped_orig = regexes.TITLE_MULTI_SEPARATOR.sub("", orig_title)
    if (
        orig_title
        and word_count <= 4
        and (not had_hierarchical_separators or word_count != _word_count(stripped_orig) - 1)
    ):
        cur_title = orig_title
    return cur_title


def get_article_metadata(doc: BeautifulSoup) -> MetaData:
    values: dict[str, str] = {}
    for meta in doc.find_all("meta"):
        content = meta.get("content")
        if not content:
            continue
        matched = False
        prop = meta.get("property")
        if prop:
            for match in regexes.PROPERTY_PATTERN.finditer(prop):
                matched = True
                key = "".join(match.group(0).lower().split())
                values[key] = content.strip()
        name = meta.get("name")
        if not matched and name and regexes.NAME_PATTERN.search(name):
            key = "".join(name.lower().split()).replace(".", ":")
            values[key] = content.strip()

    def first(*keys: str) -> str | None:
        for key in keys:
            if values.get(key):
                return regexes.unescape_html_entities(values[key])
        return None

    title = first(
        "dc:title",
        "dcterm:title",
        "og:title",
        "weibo:article:title",
        "weibo:webpage:title",
        "title",
        "twitter:title",
    )
    return MetaData(
        title=title or regexes.unescape_html_entities(get_article_title(doc)),
        byline=first("dc:creator", "dcterm:creator", "author"),
        excerpt=first(
            "dc:description",
            "dcterm:description",
            "og:description",
            "weibo:article:description",
            "weibo:webpage:description",
            "description",
            "twitter:description",
        ),
        site_name=first("og:site_name"),
    )

# ABOUTME: Readability-style extraction of the main article content from an HTML page.
# ABOUTME: Scores candidate nodes, picks the article root, and cleans it for offline reading.

import re
from dataclasses import dataclass
from enum import IntFlag
from typing import NamedTuple
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup, NavigableString, Tag

from paperoni.config import Settings, get_settings
from paperoni.errors import ReadabilityError
from paperoni.models import MetaData
from paperoni.readability import dom, regexes
from paperoni.readability.metadata import get_article_metadata

log = structlog.get_logger()

PAGE_ID = "readability-page-1"
CLASSES_TO_PRESERVE = ("page",)
TAGS_TO_SCORE = frozenset({"section", "h2", "h3", "h4", "h5", "h6", "p", "td", "pre"})
ALTER_TO_DIV_EXCEPTIONS = frozenset({"div", "article", "section", "p"})
PRESENTATIONAL_ATTRIBUTES = (
    "align",
    "background",
    "bgcolor",
    "border",
    "cellpadding",
    "cellspacing",
    "frame",
    "hspace",
    "rules",
    "style",
    "valign",
    "vspace",
)
DEPRECATED_SIZE_ATTRIBUTE_ELEMS = frozenset({"table", "th", "td", "hr", "pre"})
DATA_TABLE_DESCENDANTS = ("col", "colgroup", "tfoot", "thead", "th")
EMPTY_OR_HEADER_TAGS = frozenset({"div", "section", "header", "h1", "h2", "h3", "h4", "h5", "h6"})
URI_ATTRIBUTES = ("src", "poster")
MEDIA_TAGS = ("img", "picture", "figure", "video", "audio", "source")
SRCSET_CANDIDATE = re.compile(r"(\S+)(\s+[\d.]+[xw])?(\s*(?:,|$))")
LEADING_INT = re.compile(r"^\s*(\d+)")


class Flags(IntFlag):
    STRIP_UNLIKELYS = 0x1
    WEIGHT_CLASSES = 0x2
    CLEAN_CONDITIONALLY = 0x4

    @classmethod
    def all(cls) -> "Flags":
        return cls.STRIP_UNLIKELYS | cls.WEIGHT_CLASSES | cls.CLEAN_CONDITIONALLY


# Order in which filters are relaxed when a pass finds too little text.
FLAG_RELAX_ORDER = (Flags.STRIP_UNLIKELYS, Flags.WEIGHT_CLASSES, Flags.CLEAN_CONDITIONALLY)


class SizeInfo(NamedTuple):
    rows: int
    columns: int


class ScoreMap:
    """Readability scores keyed by node identity (bs4 tags compare structurally)."""

    def __init__(self) -> None:
        self._scores: dict[int, tuple[Tag, float]] = {}

    def __contains__(self, node: Tag) -> bool:
        return id(node) in self._scores

    def get(self, node: Tag) -> float:
        return self._scores[id(node)][1]

    def set(self, node: Tag, score: float) -> None:
        self._scores[id(node)] = (node, score)

    def add(self, node: Tag, delta: float) -> None:
        self.set(node, self.get(node) + delta)


@dataclass
class _Attempt:
    content: Tag
    page: Tag
    text_length: int
    direction: str | None


def _parse_int(value: str | None) -> int:
    match = LEADING_INT.match(value or "")
    return int(match.group(1)) if match else 0


class Readability:
    """Extracts the readable article from one HTML document.

    The document is mutated in place; build a new instance per page.
    """

    def __init__(self, html: str, url: str, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.doc: BeautifulSoup = dom.parse_html(html)
        self.url = url
        self.metadata = MetaData()
        self.char_threshold = settings.char_threshold
        self.nb_top_candidates = settings.top_candidates
        self._flags = Flags.all()
        self._scores = ScoreMap()
        self._data_tables: dict[int, Tag] = {}
        self._article_title = ""
        self._article_byline: str | None = None

    # -- entry point ------------------------------------------------------

    def parse(self) -> Tag:
        """Run the whole pipeline and return the cleaned content root."""
        if self.doc.body is None:
            raise ReadabilityError("Document has no <body> element")

        self.unwrap_no_script_tags()
        self.remove_scripts()
        self.prep_document()

        self.metadata = get_article_metadata(self.doc)
        self._article_title = self.metadata.title

        attempt = self.grab_article()
        self.post_process_content(attempt.content)
        page = attempt.page.extract()

        if not self.metadata.excerpt:
            first_paragraph = page.find("p")
            if first_paragraph is not None:
                self.metadata.excerpt = first_paragraph.get_text().strip() or None
        self.metadata.byline = self.metadata.byline or self._article_byline
        self.metadata.direction = attempt.direction

        log.debug("article_parsed", url=self.url, title=self.metadata.title)
        return page

    # -- pre-processing ---------------------------------------------------

    def unwrap_no_script_tags(self) -> None:
        """Swap lazy-loaded placeholder images for the real ones kept in <noscript>."""
        for img in self.doc.find_all("img"):
            if not any(
                name in ("src", "srcset", "data-src", "data-srcset")
                or regexes.IMG_EXT.search(value)
                for name, value in img.attrs.items()
            ):
                img.extract()

        for noscript in self.doc.find_all("noscript"):
            if noscript.parent is None:
                continue
            fragment = dom.parse_html(noscript.decode_contents())
            if not dom.is_single_image(fragment):
                continue
            prev_elem = dom.previous_element_sibling(noscript)
            if prev_elem is None or not dom.is_single_image(prev_elem):
                continue

            prev_img = prev_elem if prev_elem.name == "img" else prev_elem.find("img")
            new_img = fragment.find("img")
            for name, value in prev_img.attrs.items():
                if not value.strip() or new_img.get(name) == value:
                    continue
                if new_img.has_attr(name):
                    name = f"data-old-{name}"
                new_img[name] = value

            prev_elem.replace_with(new_img)
            noscript.extract()

    def remove_scripts(self) -> None:
        for elem in self.doc.find_all(["script", "noscript"]):
            elem.extract()

    def prep_document(self) -> None:
        for elem in self.doc.find_all("style"):
            elem.extract()
        self.replace_brs()
        for font in self.doc.find_all("font"):
            dom.set_node_tag(font, "span")

    def replace_brs(self) -> None:
        """Turn runs of two or more <br> into a paragraph holding the content that follows.

        <div>foo<br>bar<br> <br><br>abc</div> becomes <div>foo<br>bar<p>abc</p></div>
        """
        for br in self.doc.find_all("br"):
            if br.parent is None:
                continue
            replaced = False
            next_node = dom.next_significant(br.next_sibling)
            while dom.tag_name(next_node) == "br":
                replaced = True
                br_sibling = next_node.next_sibling
                next_node.extract()
                next_node = dom.next_significant(br_sibling)
            if not replaced:
                continue

            paragraph = dom.new_tag(self.doc, "p")
            br.replace_with(paragraph)
            next_node = paragraph.next_sibling
            while next_node is not None:
                # A second run of <br>s ends this paragraph.
                if dom.tag_name(next_node) == "br":
                    following = dom.next_significant(next_node.next_sibling)
                    if dom.tag_name(following) == "br":
                        break
                if not dom.is_phrasing_content(next_node):
                    break
                sibling = next_node.next_sibling
                paragraph.append(next_node)
                next_node = sibling

            while paragraph.contents and dom.is_whitespace(paragraph.contents[0]):
                paragraph.contents[0].extract()
            while paragraph.contents and dom.is_whitespace(paragraph.contents[-1]):
                paragraph.contents[-1].extract()

            if dom.tag_name(paragraph.parent) == "p":
                dom.set_node_tag(paragraph.parent, "div")

    # -- scoring helpers --------------------------------------------------

    def _flag_is_active(self, flag: Flags) -> bool:
        return bool(self._flags & flag)

    def class_weight(self, node: Tag) -> int:
        if not self._flag_is_active(Flags.WEIGHT_CLASSES):
            return 0
        weight = 0
        for value in (node.get("class"), node.get("id")):
            if not value:
                continue
            if regexes.NEGATIVE.search(value):
                weight -= 25
            if regexes.POSITIVE.search(value):
                weight += 25
        return weight

    def initialize_node(self, node: Tag) -> None:
        score = self.class_weight(node)
        match node.name:
            case "div":
                score += 5
            case "pre" | "td" | "blockquote":
                score += 3
            case "address" | "ol" | "ul" | "dl" | "dd" | "dt" | "li" | "form":
                score -= 3
            case "h1" | "h2" | "h3" | "h4" | "h5" | "h6" | "th":
                score -= 5
        self._scores.set(node, score)

    def check_byline(self, node: Tag, match_string: str) -> bool:
        """Record the first short author/byline element as the article byline."""
        if self._article_byline:
            return False
        rel = node.get("rel", "")
        itemprop = node.get("itemprop", "")
        if (
            rel == "author"
            or "author" in itemprop
            or regexes.BYLINE.search(match_string)
        ):
            byline = node.get_text().strip()
            if 0 < len(byline) < 100:
                self._article_byline = byline
                return True
        return False

    # -- grabbing ---------------------------------------------------------

    def grab_article(self) -> _Attempt:
        """Find the article content, relaxing filters until enough text is found."""
        page_cache = str(self.doc)
        attempts: list[_Attempt] = []
        pending_relaxations = list(FLAG_RELAX_ORDER)

        while True:
            attempt = self._grab_attempt()
            if attempt.text_length >= self.char_threshold:
                return attempt

            attempts.append(attempt)
            log.debug(
                "readability_retry",
                url=self.url,
                text_length=attempt.text_length,
                flags=int(self._flags),
            )
            if not pending_relaxations:
                best = max(attempts, key=lambda a: a.text_length)
                if best.text_length == 0:
                    raise ReadabilityError(f"Unable to extract content from {self.url}")
                return best

            self._flags &= ~pending_relaxations.pop(0)
            self.doc = dom.parse_html(page_cache)

    def _grab_attempt(self) -> _Attempt:
        page = self.doc.body
        if page is None:
            raise ReadabilityError("Document has no <body> element")
        self._scores = ScoreMap()
        self._data_tables = {}

        elements_to_score = self._collect_elements_to_score()
        candidates = self._score_elements(elements_to_score)
        top_candidate, needed_to_create = self._select_top_candidate(candidates, page)

        article_content = dom.new_tag(self.doc, "div")
        parent_of_top = top_candidate.parent
        top_score = self._scores.get(top_candidate)
        sibling_threshold = max(10, top_score * 0.2)
        top_class = top_candidate.get("class", "")

        for sibling in dom.element_children(parent_of_top):
            append = False
            if sibling is top_candidate:
                append = True
            else:
                bonus = 0.0
                if top_class and sibling.get("class", "") == top_class:
                    bonus = top_score * 0.2
                score = self._scores.get(sibling) if sibling in self._scores else None
                if score is not None and score + bonus >= sibling_threshold:
                    append = True
                elif sibling.name == "p":
                    density = dom.link_density(sibling)
                    content = dom.inner_text(sibling)
                    if len(content) > 80 and density < 0.25:
                        append = True
                    elif (
                        0 < len(content) <= 80
                        and density == 0
                        and regexes.NODE_CONTENT.search(content)
                    ):
                        append = True
            if append:
                if sibling.name not in ALTER_TO_DIV_EXCEPTIONS:
                    dom.set_node_tag(sibling, "div")
                article_content.append(sibling)

        self.prep_article(article_content)

        if needed_to_create:
            top_candidate["id"] = PAGE_ID
            top_candidate["class"] = "page"
            page_div = top_candidate
        else:
            page_div = dom.new_tag(self.doc, "div", {"id": PAGE_ID, "class": "page"})
            for child in list(article_content.contents):
                page_div.append(child)
            article_content.append(page_div)

        direction = None
        for ancestor in [parent_of_top, top_candidate, *dom.node_ancestors(parent_of_top)]:
            if dom.is_element(ancestor) and ancestor.get("dir"):
                direction = ancestor["dir"]
                break

        text_length = len(dom.inner_text(article_content))
        return _Attempt(article_content, page_div, text_length, direction)

    def _collect_elements_to_score(self) -> list[Tag]:
        elements_to_score: list[Tag] = []
        roots = dom.element_children(self.doc)
        node = roots[0] if roots else None

        while node is not None:
            match_string = dom.class_and_id(node)

            if not dom.is_probably_visible(node):
                node = dom.remove_and_get_next(node)
                continue

            if self.check_byline(node, match_string):
                node = dom.remove_and_get_next(node)
                continue

            if self._flag_is_active(Flags.STRIP_UNLIKELYS):
                if (
                    regexes.UNLIKELY_CANDIDATES.search(match_string)
                    and not regexes.OK_MAYBE_CANDIDATE.search(match_string)
                    and not dom.has_ancestor_tag(node, "table")
                    and node.name not in ("body", "a")
                ):
                    log.debug("remove_unlikely_candidate", match_string=match_string)
                    node = dom.remove_and_get_next(node)
                    continue
                if node.get("role") == "complementary":
                    node = dom.remove_and_get_next(node)
                    continue

            if node.name in EMPTY_OR_HEADER_TAGS and dom.is_element_without_content(node):
                node = dom.remove_and_get_next(node)
                continue

            if node.name in TAGS_TO_SCORE:
                elements_to_score.append(node)

            if node.name == "div":
                self._wrap_phrasing_runs(node)
                if (
                    dom.has_single_tag_inside_element(node, "p")
                    and dom.link_density(node) < 0.25
                ):
                    new_node = dom.element_children(node)[0]
                    node.replace_with(new_node)
                    node = new_node
                    elements_to_score.append(node)
                elif not dom.has_child_block_element(node):
                    dom.set_node_tag(node, "p")
                    elements_to_score.append(node)

            node = dom.get_next_node(node)

        return elements_to_score

    def _wrap_phrasing_runs(self, node: Tag) -> None:
        """Put each run of phrasing children of a <div> into its own <p>."""
        paragraph = None
        for child in list(node.contents):
            if dom.is_phrasing_content(child):
                if paragraph is not None:
                    paragraph.append(child)
                elif not dom.is_whitespace(child):
                    paragraph = dom.new_tag(self.doc, "p")
                    child.replace_with(paragraph)
                    paragraph.append(child)
            elif paragraph is not None:
                self._strip_trailing_whitespace(paragraph)
                paragraph = None
        if paragraph is not None:
            self._strip_trailing_whitespace(paragraph)

    @staticmethod
    def _strip_trailing_whitespace(paragraph: Tag) -> None:
        while paragraph.contents and dom.is_whitespace(paragraph.contents[-1]):
            paragraph.contents[-1].extract()

    def _score_elements(self, elements_to_score: list[Tag]) -> list[Tag]:
        candidates: list[Tag] = []
        for element in elements_to_score:
            if element.parent is None or not dom.is_element(element.parent):
                continue
            inner_text = dom.inner_text(element)
            if len(inner_text) < 25:
                continue
            ancestors = dom.node_ancestors(element, 3)
            if not ancestors:
                continue

            content_score = 1 + inner_text.count(",") + min(3, len(inner_text) // 100)

            for level, ancestor in enumerate(ancestors):
                if (
                    not dom.is_element(ancestor)
                    or ancestor.name == "html"
                    or not dom.is_element(ancestor.parent)
                ):
                    continue
                if ancestor not in self._scores:
                    self.initialize_node(ancestor)
                    candidates.append(ancestor)
                if level == 0:
                    divider = 1
                elif level == 1:
                    divider = 2
                else:
                    divider = level * 3
                self._scores.add(ancestor, content_score / divider)

        for candidate in candidates:
            self._scores.set(
                candidate, self._scores.get(candidate) * (1 - dom.link_density(candidate))
            )
        return candidates

    def _select_top_candidate(self, candidates: list[Tag], page: Tag) -> tuple[Tag, bool]:
        top_candidates: list[Tag] = []
        for candidate in candidates:
            score = self._scores.get(candidate)
            for index in range(self.nb_top_candidates):
                if index >= len(top_candidates) or score > self._scores.get(top_candidates[index]):
                    top_candidates.insert(index, candidate)
                    del top_candidates[self.nb_top_candidates :]
                    break

        top_candidate = top_candidates[0] if top_candidates else None
        if top_candidate is None or top_candidate.name == "body":
            # Nothing stood out: treat the whole body as the article.
            top_candidate = dom.new_tag(self.doc, "div")
            for child in list(page.contents):
                top_candidate.append(child)
            page.append(top_candidate)
            self.initialize_node(top_candidate)
            return top_candidate, True

        top_score = self._scores.get(top_candidate)
        alternative_ancestors = [
            dom.node_ancestors(candidate)
            for candidate in top_candidates[1:]
            if top_score and self._scores.get(candidate) / top_score >= 0.75
        ]
        minimum_top_candidates = 3
        if len(alternative_ancestors) >= minimum_top_candidates:
            parent = top_candidate.parent
            while dom.is_element(parent) and parent.name != "body":
                lists_containing = sum(
                    1
                    for ancestors in alternative_ancestors
                    if any(ancestor is parent for ancestor in ancestors)
                )
                if lists_containing >= minimum_top_candidates:
                    top_candidate = parent
                    break
                parent = parent.parent
        if top_candidate not in self._scores:
            self.initialize_node(top_candidate)

        # Climb while the parent scores better; the content may be split across siblings.
        parent = top_candidate.parent
        last_score = self._scores.get(top_candidate)
        score_threshold = last_score / 3
        while dom.is_element(parent) and parent.name != "body":
            if parent not in self._scores:
                parent = parent.parent
                continue
            parent_score = self._scores.get(parent)
            if parent_score < score_threshold:
                break
            if parent_score > last_score:
                top_candidate = parent
                break
            last_score = parent_score
            parent = parent.parent

        parent = top_candidate.parent
        while (
            dom.is_element(parent)
            and parent.name != "body"
            and len(dom.element_children(parent)) == 1
        ):
            top_candidate = parent
            parent = top_candidate.parent
        if top_candidate not in self._scores:
            self.initialize_node(top_candidate)

        return top_candidate, False

    # -- post-processing of the grabbed content ---------------------------

    def prep_article(self, article_content: Tag) -> None:
        """Clean the grabbed content for display."""
        self.clean_styles(article_content)
        self.mark_data_tables(article_content)
        self.fix_lazy_images(article_content)

        for tag in ("form", "fieldset", "table", "ul", "div"):
            self.clean_conditionally(article_content, tag)

        for tag in (
            "object",
            "embed",
            "h1",
            "footer",
            "link",
            "aside",
            "iframe",
            "input",
            "textarea",
            "select",
            "button",
        ):
            self.clean(article_content, tag)

        for child in dom.element_children(article_content):
            self.clean_matched_nodes(
                child,
                lambda node, match_string: bool(regexes.SHARE_ELEMENTS.search(match_string))
                and len(node.get_text()) < self.char_threshold,
            )

        self._remove_title_h2(article_content)
        self.clean_headers(article_content)

        for paragraph in reversed(article_content.find_all("p")):
            media = dom.count_tags(paragraph, "img", "embed", "object", "iframe")
            if media == 0 and not dom.inner_text(paragraph, normalize_spaces=False):
                paragraph.extract()

        for br in article_content.find_all("br"):
            following = dom.next_significant(br.next_sibling)
            if dom.tag_name(following) == "p":
                br.extract()

        self._collapse_single_cell_tables(article_content)

    def clean_styles(self, node: Tag) -> None:
        """Drop presentational attributes everywhere except inside <svg>."""
        if node.name == "svg":
            return
        for attr in PRESENTATIONAL_ATTRIBUTES:
            node.attrs.pop(attr, None)
        if node.name in DEPRECATED_SIZE_ATTRIBUTE_ELEMS:
            node.attrs.pop("width", None)
            node.attrs.pop("height", None)
        for child in dom.element_children(node):
            self.clean_styles(child)

    def is_data_table(self, table: Tag) -> bool:
        return id(table) in self._data_tables

    def mark_data_tables(self, root: Tag) -> None:
        for table in root.find_all("table"):
            if self._judge_data_table(table):
                self._data_tables[id(table)] = table

    def _judge_data_table(self, table: Tag) -> bool:
        if table.get("role") == "presentation":
            return False
        if table.get("datatable") == "0":
            return False
        if table.get("summary"):
            return True
        caption = table.find("caption")
        if caption is not None and caption.contents:
            return True
        if table.find(DATA_TABLE_DESCENDANTS) is not None:
            return True
        # Nested tables indicate a layout table.
        if table.find("table") is not None:
            return False
        size = get_row_and_column_count(table)
        if size.rows >= 10 or size.columns > 4:
            return True
        return size.rows * size.columns > 10

    def fix_lazy_images(self, root: Tag) -> None:
        """Recover real image URLs hidden in data-* attributes by lazy loaders."""
        for elem in root.find_all(["img", "picture", "figure"]):
            src = elem.get("src", "")
            data_url = regexes.B64_DATA_URL.match(src) if src else None
            if data_url and data_url.group(1).lower() != "image/svg+xml":
                src_could_be_removed = any(
                    name != "src" and regexes.IMG_EXT.search(value)
                    for name, value in elem.attrs.items()
                )
                if src_could_be_removed:
                    b64_start = regexes.BASE64.search(src).end()
                    if len(src) - b64_start < 133:
                        del elem["src"]

            srcset = elem.get("srcset", "")
            has_source = bool(elem.get("src")) or (bool(srcset) and srcset != "null")
            if has_source and "lazy" not in elem.get("class", "").lower():
                continue

            copies: dict[str, str] = {}
            for name, value in elem.attrs.items():
                if name in ("src", "srcset", "alt"):
                    continue
                if regexes.SRCSET.search(value):
                    copies.setdefault("srcset", value)
                elif regexes.SRC.search(value):
                    copies.setdefault("src", value)

            for copy_to, value in copies.items():
                if elem.name in ("img", "picture"):
                    elem[copy_to] = value
                elif elem.name == "figure" and not elem.find(["img", "picture"]):
                    elem.append(dom.new_tag(self.doc, "img", {copy_to: value}))

    def clean_conditionally(self, root: Tag, tag: str) -> None:
        """Remove elements of `tag` that look like chrome rather than content."""
        if not self._flag_is_active(Flags.CLEAN_CONDITIONALLY):
            return
        for node in reversed(root.find_all(tag)):
            if node.parent is not None and self._should_clean(node, tag):
                node.extract()

    def _should_clean(self, node: Tag, tag: str) -> bool:
        is_list = tag in ("ul", "ol")
        if tag == "table" and self.is_data_table(node):
            return False
        if dom.has_ancestor_tag(node, "table", self.is_data_table):
            return False

        weight = self.class_weight(node)
        if weight < 0:
            return True
        if dom.char_count(node, ",") >= 10:
            return False

        embeds = node.find_all(["object", "embed", "iframe"])
        for embed in embeds:
            if any(regexes.VIDEOS.search(value) for value in embed.attrs.values()):
                return False
            if embed.name == "object" and regexes.VIDEOS.search(embed.decode_contents()):
                return False
        embed_count = len(embeds)

        p = dom.count_tags(node, "p")
        img = dom.count_tags(node, "img")
        li = dom.count_tags(node, "li") - 100
        inputs = dom.count_tags(node, "input")
        density = dom.link_density(node)
        content_length = len(dom.inner_text(node))
        has_figure_ancestor = dom.has_ancestor_tag(node, "figure")

        return (
            (img > 1 and p / img < 0.5 and not has_figure_ancestor)
            or (not is_list and li > p)
            or (inputs > p / 3)
            or (
                not is_list
                and content_length < 25
                and (img == 0 or img > 2)
                and not has_figure_ancestor
            )
            or (not is_list and weight < 25 and density > 0.2)
            or (weight >= 25 and density > 0.5)
            or (embed_count == 1 and content_length < 75)
            or embed_count > 1
        )

    def clean(self, root: Tag, tag: str) -> None:
        """Remove every `tag` element, keeping embeds that point at known video hosts."""
        is_embed = tag in ("embed", "iframe")
        for node in reversed(root.find_all(tag)):
            if is_embed and any(regexes.VIDEOS.search(value) for value in node.attrs.values()):
                continue
            node.extract()

    def clean_matched_nodes(self, elem: Tag, predicate) -> None:
        end_of_search = dom.get_next_node(elem, ignore_self_and_kids=True)
        next_node = dom.get_next_node(elem)
        while next_node is not None and next_node is not end_of_search:
            if predicate(next_node, dom.class_and_id(next_node)):
                next_node = dom.remove_and_get_next(next_node)
            else:
                next_node = dom.get_next_node(next_node)

    def clean_headers(self, root: Tag) -> None:
        for header in root.find_all(["h1", "h2"]):
            if self.class_weight(header) < 0:
                header.extract()

    def _remove_title_h2(self, root: Tag) -> None:
        """A lone <h2> repeating the title is a header, not a subheading."""
        h2s = root.find_all("h2")
        title = self._article_title
        if len(h2s) != 1 or not title:
            return
        heading = h2s[0].get_text()
        length_similar_rate = (len(heading) - len(title)) / len(title)
        if abs(length_similar_rate) >= 0.5:
            return
        if length_similar_rate > 0:
            titles_match = title in heading
        else:
            titles_match = heading in title
        if titles_match:
            self.clean(root, "h2")

    def _collapse_single_cell_tables(self, root: Tag) -> None:
        for table in root.find_all("table"):
            if table.parent is None:
                continue
            tbody = table
            if dom.has_single_tag_inside_element(table, "tbody"):
                tbody = dom.element_children(table)[0]
            if not dom.has_single_tag_inside_element(tbody, "tr"):
                continue
            row = dom.element_children(tbody)[0]
            if not dom.has_single_tag_inside_element(row, "td"):
                continue
            cell = dom.element_children(row)[0]
            phrasing = all(dom.is_phrasing_content(child) for child in cell.children)
            dom.set_node_tag(cell, "p" if phrasing else "div")
            table.replace_with(cell)

    def post_process_content(self, article_content: Tag) -> None:
        self.fix_relative_uris(article_content)
        self.simplify_nested_elements(article_content)
        self.clean_classes(article_content)

    def _base_url(self) -> str:
        base = self.doc.find("base", href=True)
        if base is None:
            return self.url
        return urljoin(self.url, base["href"])

    def fix_relative_uris(self, article_content: Tag) -> None:
        base_url = self._base_url()

        def to_absolute(uri: str) -> str:
            if base_url == self.url and uri.startswith("#"):
                return uri
            try:
                return urljoin(base_url, uri.strip())
            except ValueError:
                return uri

        for link in article_content.find_all("a", href=True):
            href = link["href"]
            if not href.lower().startswith("javascript:"):
                link["href"] = to_absolute(href)
                continue
            # javascript: links do nothing once the page is offline.
            if len(link.contents) == 1 and dom.is_text(link.contents[0]):
                link.replace_with(NavigableString(link.get_text()))
            else:
                span = dom.new_tag(self.doc, "span")
                for child in list(link.contents):
                    span.append(child)
                link.replace_with(span)

        for media in article_content.find_all(MEDIA_TAGS):
            for attr in URI_ATTRIBUTES:
                if media.get(attr):
                    media[attr] = to_absolute(media[attr])
            if media.get("srcset"):
                media["srcset"] = SRCSET_CANDIDATE.sub(
                    lambda m: to_absolute(m.group(1)) + (m.group(2) or "") + m.group(3),
                    media["srcset"],
                )

    def simplify_nested_elements(self, article_content: Tag) -> None:
        node = article_content
        while node is not None:
            if (
                node.parent is not None
                and node.name in ("div", "section")
                and not node.get("id", "").startswith("readability")
            ):
                if dom.is_element_without_content(node):
                    node = dom.remove_and_get_next(node)
                    continue
                if dom.has_single_tag_inside_element(
                    node, "div"
                ) or dom.has_single_tag_inside_element(node, "section"):
                    child = dom.element_children(node)[0]
                    for name, value in node.attrs.items():
                        child[name] = value
                    node.replace_with(child)
                    node = child
                    continue
            node = dom.get_next_node(node)

    def clean_classes(self, node: Tag) -> None:
        for elem in [node, *node.find_all(True)]:
            classes = [c for c in elem.get("class", "").split() if c in CLASSES_TO_PRESERVE]
            if classes:
                elem["class"] = " ".join(classes)
            else:
                elem.attrs.pop("class", None)


def get_row_and_column_count(table: Tag) -> SizeInfo:
    rows = 0
    columns = 0
    for tr in table.find_all("tr"):
        rows += _parse_int(tr.get("rowspan")) or 1
        columns_in_row = sum(_parse_int(td.get("colspan")) or 1 for td in tr.find_all("td"))
        columns = max(columns, columns_in_row)
    return SizeInfo(rows, columns)

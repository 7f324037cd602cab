# ABOUTME: DOM helpers over BeautifulSoup trees used by the readability extractor.
# ABOUTME: Traversal in document order, phrasing content, visibility and text measures.

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement, PreformattedString

from paperoni.readability import regexes

PARSER = "html.parser"

PHRASING_ELEMS = frozenset(
    {
        "abbr", "audio", "b", "bdo", "br", "button", "cite", "code", "data", "datalist",
        "dfn", "em", "embed", "i", "img", "input", "kbd", "label", "mark", "math", "meter",
        "noscript", "object", "output", "progress", "q", "ruby", "samp", "script", "select",
        "small", "span", "strong", "sub", "sup", "textarea", "time", "var", "wbr",
    }
)  # fmt: skip

BLOCK_ELEMS = frozenset(
    {
        "address", "article", "aside", "blockquote", "details", "dialog", "dd", "div", "dl",
        "dt", "fieldset", "figcaption", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6",
        "header", "hgroup", "hr", "li", "main", "nav", "ol", "p", "pre", "section", "table",
        "ul",
    }
)  # fmt: skip


def parse_html(html: str) -> BeautifulSoup:
    """Parse a document. `class` stays a single string attribute."""
    return BeautifulSoup(html, PARSER, multi_valued_attributes=None)


def new_tag(doc: BeautifulSoup, name: str, attrs: dict[str, str] | None = None) -> Tag:
    return doc.new_tag(name, attrs=attrs or {})


def is_element(node: PageElement | None) -> bool:
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def is_text(node: PageElement | None) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def tag_name(node: PageElement | None) -> str | None:
    return node.name if is_element(node) else None


def element_children(node: Tag) -> list[Tag]:
    return [child for child in node.children if is_element(child)]


def next_element_sibling(node: PageElement) -> Tag | None:
    sibling = node.next_sibling
    while sibling is not None and not is_element(sibling):
        sibling = sibling.next_sibling
    return sibling


def previous_element_sibling(node: PageElement) -> Tag | None:
    sibling = node.previous_sibling
    while sibling is not None and not is_element(sibling):
        sibling = sibling.previous_sibling
    return sibling


def get_next_node(node: Tag, ignore_self_and_kids: bool = False) -> Tag | None:
    """Next element in depth-first document order, optionally skipping `node`'s subtree."""
    if not ignore_self_and_kids:
        children = element_children(node)
        if children:
            return children[0]
    sibling = next_element_sibling(node)
    if sibling is not None:
        return sibling
    parent = node.parent
    while parent is not None:
        sibling = next_element_sibling(parent)
        if sibling is not None:
            return sibling
        parent = parent.parent
    return None


def remove_and_get_next(node: Tag) -> Tag | None:
    next_node = get_next_node(node, ignore_self_and_kids=True)
    node.extract()
    return next_node


def next_significant(node: PageElement | None) -> PageElement | None:
    """Skip whitespace-only text nodes, starting at `node` itself."""
    while node is not None and not is_element(node) and not text_content(node).strip():
        node = node.next_sibling
    return node


def text_content(node: PageElement) -> str:
    if isinstance(node, Tag):
        return node.get_text()
    if is_text(node):
        return str(node)
    return ""


def inner_text(node: PageElement, normalize_spaces: bool = True) -> str:
    text = text_content(node).strip()
    if normalize_spaces:
        return regexes.NORMALIZE.sub(" ", text)
    return text


def char_count(node: PageElement, separator: str = ",") -> int:
    return inner_text(node).count(separator)


def link_density(node: Tag) -> float:
    """Share of the element's text that sits inside <a> descendants."""
    text_length = len(inner_text(node))
    if text_length == 0:
        return 0.0
    link_length = sum(len(inner_text(link)) for link in node.find_all("a"))
    return link_length / text_length


def class_and_id(node: Tag) -> str:
    return f"{node.get('class', '')} {node.get('id', '')}"


def is_phrasing_content(node: PageElement) -> bool:
    if is_text(node):
        return True
    if not is_element(node):
        return False
    if node.name in PHRASING_ELEMS:
        return True
    return node.name in ("a", "del", "ins") and all(
        is_phrasing_content(child) for child in node.children
    )


def is_whitespace(node: PageElement) -> bool:
    if is_text(node):
        return not str(node).strip()
    return tag_name(node) == "br"


def has_content(node: PageElement) -> bool:
    if is_text(node):
        return bool(str(node).strip())
    return is_element(node)


def is_single_image(node: PageElement) -> bool:
    """True for an <img>, or an element whose only content is exactly one image."""
    if not isinstance(node, Tag):
        return False
    if node.name == "img":
        return True
    children = [child for child in node.children if has_content(child)]
    if len(children) != 1 or node.get_text().strip():
        return False
    return is_single_image(children[0])


def is_probably_visible(node: Tag) -> bool:
    if regexes.DISPLAY_HIDDEN.search(node.get("style", "")):
        return False
    if node.has_attr("hidden"):
        return False
    # Wikipedia math images are aria-hidden but carry the fallback-image class.
    if node.get("aria-hidden") == "true":
        return "fallback-image" in node.get("class", "")
    return True


def node_ancestors(node: PageElement, max_depth: int | None = None) -> list[Tag]:
    ancestors = []
    parent = node.parent
    while parent is not None:
        ancestors.append(parent)
        if max_depth and len(ancestors) == max_depth:
            break
        parent = parent.parent
    return ancestors


def has_ancestor_tag(node: PageElement, name: str, predicate=None) -> bool:
    parent = node.parent
    while parent is not None:
        if parent.name == name and (predicate is None or predicate(parent)):
            return True
        parent = parent.parent
    return False


def has_single_tag_inside_element(node: Tag, name: str) -> bool:
    """Exactly one element child, named `name`, and no text of its own."""
    children = element_children(node)
    if len(children) != 1 or children[0].name != name:
        return False
    return not any(
        is_text(child) and regexes.HAS_CONTENT.search(str(child)) for child in node.children
    )


def has_child_block_element(node: Tag) -> bool:
    return any(
        child.name in BLOCK_ELEMS or has_child_block_element(child)
        for child in element_children(node)
    )


def is_element_without_content(node: Tag) -> bool:
    if node.get_text().strip():
        return False
    # Compares direct children with br/hr found at any depth.
    children = len(element_children(node))
    return children == 0 or children == len(node.find_all(["br", "hr"]))


def set_node_tag(node: Tag, name: str) -> Tag:
    """Rename an element in place, keeping its attributes, children and identity."""
    node.name = name
    return node


def count_tags(node: Tag, *names: str) -> int:
    return len(node.find_all(list(names)))

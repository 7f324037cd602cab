# ABOUTME: XHTML serialization of extracted article trees for EPUB content documents.
# ABOUTME: Also assigns stable heading ids and builds the nested heading table of contents.

import hashlib
import re
from dataclasses import dataclass, field

from bs4 import Tag
from bs4.element import PageElement

from paperoni.readability import dom

VALID_ATTR_NAME = re.compile(r"[a-z0-9_-]+")
XHTML_ESCAPES = str.maketrans(
    {"<": "&lt;", ">": "&gt;", "&": "&amp;", '"': "&quot;", "'": "&apos;"}
)
TOC_HEADINGS = ("h1", "h2", "h3", "h4")


def escape(text: str) -> str:
    return text.translate(XHTML_ESCAPES)


def serialize(node: PageElement) -> str:
    """Serialize a subtree as XHTML.

    Void elements get explicit close tags, comments and doctypes are dropped, and
    attributes whose names are not plain lowercase identifiers are filtered out.
    """
    parts: list[str] = []
    _serialize_into(node, parts)
    return "".join(parts)


def _serialize_into(node: PageElement, parts: list[str]) -> None:
    if dom.is_text(node):
        parts.append(escape(str(node)))
        return
    if not isinstance(node, Tag):
        return
    is_document = not dom.is_element(node)
    if not is_document:
        attrs = "".join(
            f' {name}="{escape(value)}"'
            for name, value in node.attrs.items()
            if VALID_ATTR_NAME.fullmatch(name)
        )
        parts.append(f"<{node.name}{attrs}>")
    for child in node.children:
        _serialize_into(child, parts)
    if not is_document:
        parts.append(f"</{node.name}>")


def generate_header_ids(root: Tag) -> None:
    """Give every h1-h4 a selector-safe id derived from the MD5 of its text.

    The id starts with an underscore since the hex digest may start with a digit.
    Headings with the same text get a numeric suffix so every id stays unique.
    """
    used: set[str] = set()
    for header in root.find_all(TOC_HEADINGS):
        current = header.get("id")
        if current and VALID_ATTR_NAME.fullmatch(current):
            used.add(current)
            continue
        text = header.get_text().encode("utf-8")
        digest = hashlib.md5(text, usedforsecurity=False).hexdigest()
        header_id = f"_{digest}"
        suffix = 1
        while header_id in used:
            header_id = f"_{digest}_{suffix}"
            suffix += 1
        header["id"] = header_id
        used.add(header_id)


@dataclass
class TocEntry:
    title: str
    href: str
    children: list["TocEntry"] = field(default_factory=list)


def build_toc(root: Tag, content_url: str) -> list[TocEntry]:
    """Nest h1-h4 headings: each one goes under the closest earlier heading of a higher rank."""
    generate_header_ids(root)
    roots: list[TocEntry] = []
    stack: list[tuple[int, TocEntry]] = []
    for header in root.find_all(TOC_HEADINGS):
        level = int(header.name[1])
        entry = TocEntry(dom.inner_text(header), f"{content_url}#{header['id']}")
        while stack and stack[-1][0] >= level:
            stack.pop()
        if stack:
            stack[-1][1].children.append(entry)
        else:
            roots.append(entry)
        stack.append((level, entry))
    return roots

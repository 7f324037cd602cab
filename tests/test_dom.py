# ABOUTME: Tests for the BeautifulSoup DOM helpers used by the extractor.
# ABOUTME: Covers traversal order, phrasing content, visibility and text measures.

from paperoni.readability import dom


def _first(html: str, name: str):
    return dom.parse_html(html).find(name)


def test_link_density():
    """5 of the 11 characters of 'Hello World' sit inside the link."""
    p = _first('<p>Hello <a href="#">World</a></p>', "p")
    assert dom.link_density(p) == 5 / 11


def test_link_density_without_text():
    assert dom.link_density(_first("<div><img src='a.png'></div>", "div")) == 0.0


def test_get_next_node_walks_in_document_order():
    doc = dom.parse_html(
        '<div id="a"><p id="b"><span id="c"></span></p><p id="d"></p></div><div id="e"></div>'
    )
    node = doc.find(id="a")
    visited = []
    while node is not None:
        visited.append(node["id"])
        node = dom.get_next_node(node)
    assert visited == ["a", "b", "c", "d", "e"]


def test_remove_and_get_next_skips_subtree():
    doc = dom.parse_html('<div id="a"><p id="b"><span id="c"></span></p><p id="d"></p></div>')
    removed = doc.find(id="b")
    next_node = dom.remove_and_get_next(removed)
    assert next_node["id"] == "d"
    assert removed.parent is None
    assert doc.find(id="c") is None


def test_next_significant_skips_whitespace_text():
    doc = dom.parse_html("<div><br>  \n <b>x</b></div>")
    br = doc.find("br")
    assert dom.next_significant(br.next_sibling) is doc.find("b")


def test_is_phrasing_content():
    doc = dom.parse_html(
        "<div>text<span>s</span><a id='inline'><b>x</b></a><a id='block'><p>y</p></a></div>"
    )
    div = doc.div
    assert dom.is_phrasing_content(div.contents[0])
    assert dom.is_phrasing_content(doc.span)
    assert dom.is_phrasing_content(doc.find(id="inline"))
    assert not dom.is_phrasing_content(doc.find(id="block"))
    assert not dom.is_phrasing_content(div)


def test_is_single_image():
    assert dom.is_single_image(_first("<picture> <img src='a.png'> </picture>", "picture"))
    assert not dom.is_single_image(_first("<div><img src='a.png'> caption</div>", "div"))
    assert not dom.is_single_image(_first("<div><img src='a'><img src='b'></div>", "div"))


def test_is_probably_visible():
    assert not dom.is_probably_visible(_first('<p style="display: none">x</p>', "p"))
    assert not dom.is_probably_visible(_first("<p hidden>x</p>", "p"))
    assert not dom.is_probably_visible(_first('<p aria-hidden="true">x</p>', "p"))
    assert dom.is_probably_visible(
        _first('<span aria-hidden="true" class="mwe-math-fallback-image-inline">x</span>', "span")
    )
    assert dom.is_probably_visible(_first('<p style="color: red">x</p>', "p"))


def test_has_single_tag_inside_element():
    assert dom.has_single_tag_inside_element(_first("<div> <p>x</p> </div>", "div"), "p")
    assert not dom.has_single_tag_inside_element(_first("<div>text<p>x</p></div>", "div"), "p")
    assert not dom.has_single_tag_inside_element(_first("<div><p></p><p></p></div>", "div"), "p")
    assert not dom.has_single_tag_inside_element(_first("<div><span>x</span></div>", "div"), "p")


def test_has_child_block_element_is_recursive():
    assert dom.has_child_block_element(_first("<div><span><p>x</p></span></div>", "div"))
    assert not dom.has_child_block_element(_first("<div><span><b>x</b></span></div>", "div"))


def test_is_element_without_content():
    assert dom.is_element_without_content(_first("<div> <br><hr> </div>", "div"))
    assert not dom.is_element_without_content(_first("<div><img src='a.png'></div>", "div"))
    assert not dom.is_element_without_content(_first("<div>text</div>", "div"))
    assert dom.is_element_without_content(_first("<div><span><br></span></div>", "div"))
    assert not dom.is_element_without_content(_first("<div><span></span></div>", "div"))
    assert dom.is_element_without_content(_first("<div></div>", "div"))


def test_has_ancestor_tag_with_predicate():
    doc = dom.parse_html('<table id="outer"><tr><td><table><tr><td><b>x</b></td></tr></table>')
    bold = doc.b
    assert dom.has_ancestor_tag(bold, "table")
    assert dom.has_ancestor_tag(bold, "table", lambda t: t.get("id") == "outer")
    assert not dom.has_ancestor_tag(bold, "table", lambda t: t.get("id") == "missing")


def test_set_node_tag_keeps_identity_attributes_and_children():
    doc = dom.parse_html('<div><font class="x" color="red">a<b>b</b></font></div>')
    font = doc.font
    renamed = dom.set_node_tag(font, "span")
    assert renamed is font
    assert str(doc.div) == '<div><span class="x" color="red">a<b>b</b></span></div>'


def test_class_is_a_single_string():
    p = _first('<p class="one two">x</p>', "p")
    assert p["class"] == "one two"
    assert dom.class_and_id(p) == "one two "


def test_inner_text_normalizes_runs_of_whitespace():
    p = _first("<p>  a   b\n\n c  </p>", "p")
    assert dom.inner_text(p) == "a b c"
    assert dom.inner_text(p, normalize_spaces=False) == "a   b\n\n c"

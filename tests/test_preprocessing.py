# ABOUTME: Tests for document pre-processing before scoring.
# ABOUTME: Covers <br> run collapsing, <noscript> image unwrapping, and script/style removal.

from conftest import PAGE_URL

from paperoni.readability.extractor import Readability


def _reader(body: str, settings, head: str = "") -> Readability:
    return Readability(f"<html><head>{head}</head><body>{body}</body></html>", PAGE_URL, settings)


def test_replace_brs_collapses_double_br_into_paragraph(settings):
    reader = _reader("<div>foo<br>bar<br> <br><br>abc</div>", settings)
    reader.replace_brs()

    div = reader.doc.body.div
    assert str(div) == "<div>foo<br/>bar<p>abc</p></div>"
    assert len(div.find_all("br")) == 1
    assert div.p.get_text() == "abc"


def test_replace_brs_stops_paragraph_at_block_element(settings):
    reader = _reader("<div>intro<br><br>first part <b>bold</b><div>block</div>tail</div>", settings)
    reader.replace_brs()

    paragraph = reader.doc.body.p
    assert paragraph.decode_contents() == "first part <b>bold</b>"
    assert paragraph.find_next_sibling("div").get_text() == "block"


def test_replace_brs_inside_paragraph_turns_parent_into_div(settings):
    reader = _reader("<p>one<br><br>two</p>", settings)
    reader.replace_brs()

    outer = reader.doc.body.contents[0]
    assert outer.name == "div"
    assert outer.p.get_text() == "two"


def test_prep_document_removes_styles_and_renames_fonts(settings):
    reader = _reader(
        '<p><font color="red">warm</font> words</p>',
        settings,
        head="<style>p { color: red; }</style>",
    )
    reader.remove_scripts()
    reader.prep_document()

    assert reader.doc.find("style") is None
    assert reader.doc.find("font") is None
    assert reader.doc.find("span", color="red").get_text() == "warm"


def test_remove_scripts_drops_script_and_noscript(settings):
    reader = _reader(
        "<script>var x = 1;</script><p>text</p><noscript><p>enable js</p></noscript>", settings
    )
    reader.remove_scripts()

    assert reader.doc.find("script") is None
    assert reader.doc.find("noscript") is None
    assert reader.doc.body.get_text() == "text"


def test_preprocessing_is_idempotent(settings):
    body = (
        "<script>track()</script><div>foo<br>bar<br><br>baz <font>qux</font></div>"
        "<p>keep<br><br><br>going</p><noscript>no js</noscript>"
    )
    reader = _reader(body, settings, head="<style>body {}</style>")

    reader.remove_scripts()
    reader.prep_document()
    once = str(reader.doc)
    reader.remove_scripts()
    reader.prep_document()

    assert str(reader.doc) == once


def test_unwrap_noscript_image_merges_attributes(settings):
    reader = _reader(
        '<img src="lazy-load.png" class="lazy" data-x="1">'
        '<noscript><img id="real" src="eager-load.png"></noscript>',
        settings,
    )
    reader.unwrap_no_script_tags()

    images = reader.doc.find_all("img")
    assert len(images) == 1
    img = images[0]
    assert img["id"] == "real"
    assert img["src"] == "eager-load.png"
    assert img["data-old-src"] == "lazy-load.png"
    assert img["class"] == "lazy"
    assert img["data-x"] == "1"
    assert reader.doc.find("noscript") is None


def test_unwrap_noscript_ignores_non_image_content(settings):
    reader = _reader(
        '<img src="a.png"><noscript><p>Please enable JavaScript</p></noscript>', settings
    )
    reader.unwrap_no_script_tags()

    assert reader.doc.find("noscript") is not None
    assert reader.doc.img["src"] == "a.png"


def test_unwrap_noscript_removes_placeholder_images(settings):
    reader = _reader(
        '<img class="spacer"><img data-lazy="photo.jpg"><img src="kept.png">', settings
    )
    reader.unwrap_no_script_tags()

    images = reader.doc.find_all("img")
    assert [img.attrs for img in images] == [{"data-lazy": "photo.jpg"}, {"src": "kept.png"}]

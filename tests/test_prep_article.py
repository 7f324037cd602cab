# ABOUTME: Tests for cleaning the grabbed article content.
# ABOUTME: Covers styles, data tables, lazy images, conditional cleaning and header removal.

from conftest import LOREM, PAGE_URL

from paperoni.readability.extractor import Readability, SizeInfo, get_row_and_column_count


def _reader(body: str, settings) -> Readability:
    return Readability(f"<html><body>{body}</body></html>", PAGE_URL, settings)


def _cells(count: int) -> str:
    return "".join(f"<td>{i}</td>" for i in range(count))


def test_clean_styles_keeps_svg_untouched(settings):
    reader = _reader(
        '<div style="color: red" align="center">'
        '<table width="100" border="1"><tr><td height="3" valign="top">x</td></tr></table>'
        '<img width="10" src="a.png">'
        '<svg width="10" style="fill: red"><rect style="stroke: blue"></rect></svg>'
        "</div>",
        settings,
    )
    root = reader.doc.body
    reader.clean_styles(root)

    assert root.div.attrs == {}
    assert root.table.attrs == {}
    assert root.td.attrs == {}
    assert root.img["width"] == "10"
    assert root.svg["style"] == "fill: red"
    assert root.rect["style"] == "stroke: blue"


def test_row_and_column_count_honors_spans(settings):
    reader = _reader(
        "<table>"
        f"<tr>{_cells(4)}</tr>"
        f"<tr>{_cells(4)}</tr>"
        f'<tr>{_cells(3)}<td rowspan="2">r</td></tr>'
        f"<tr>{_cells(3)}</tr>"
        f'<tr>{_cells(1)}<td colspan="2">c</td>{_cells(1)}</tr>'
        '<tr><td colspan="4">wide</td></tr>'
        "</table>",
        settings,
    )
    assert get_row_and_column_count(reader.doc.table) == SizeInfo(rows=6, columns=4)


def test_row_span_on_row_counts_multiple_rows(settings):
    reader = _reader(f'<table><tr rowspan="3">{_cells(2)}</tr></table>', settings)
    assert get_row_and_column_count(reader.doc.table) == SizeInfo(rows=3, columns=2)


def test_data_table_survives_inside_removed_comment_div(settings):
    rows = "".join(f"<tr><td>name {i}</td><td>{i}</td></tr>" for i in range(3))
    reader = _reader(
        f'<div class="comment"><table><caption>Results</caption>{rows}</table></div>', settings
    )
    root = reader.doc.body
    reader.mark_data_tables(root)
    table = root.table

    reader.clean_conditionally(root, "table")
    assert root.table is table
    assert reader.is_data_table(table)

    reader.clean_conditionally(root, "div")
    assert root.find("div") is None


def test_data_table_heuristics(settings):
    reader = _reader(
        '<table id="presentation" role="presentation"><caption>x</caption></table>'
        '<table id="summary" summary="Quarterly figures"></table>'
        '<table id="header"><thead><tr><th>a</th></tr></thead></table>'
        f'<table id="big">{"".join(f"<tr>{_cells(2)}</tr>" for _ in range(10))}</table>'
        f'<table id="small"><tr>{_cells(2)}</tr></table>',
        settings,
    )
    root = reader.doc.body
    reader.mark_data_tables(root)

    judged = {table["id"]: reader.is_data_table(table) for table in root.find_all("table")}
    assert judged == {
        "presentation": False,
        "summary": True,
        "header": True,
        "big": True,
        "small": False,
    }


def test_small_layout_table_is_removed(settings):
    reader = _reader(
        f"<p>{LOREM}</p>"
        '<table><tr><td><a href="/">Home</a></td><td><a href="/about">About</a></td></tr></table>',
        settings,
    )
    root = reader.doc.body
    reader.mark_data_tables(root)
    reader.clean_conditionally(root, "table")

    assert root.find("table") is None
    assert root.p is not None


def test_fix_lazy_images(settings):
    reader = _reader(
        '<img id="data-src" class="lazy-load" data-src="/images/photo.jpg">'
        '<img id="placeholder" src="data:image/png;base64,AAAA" data-original="real.png">'
        '<img id="srcset" data-srcset="a.jpg 1x, b.jpg 2x">'
        '<img id="svg" src="data:image/svg+xml;base64,PHN2Zz4=" data-original="real.png">'
        '<figure data-src="/pic.webp"><figcaption>Caption</figcaption></figure>',
        settings,
    )
    root = reader.doc.body
    reader.fix_lazy_images(root)

    assert root.find(id="data-src")["src"] == "/images/photo.jpg"
    assert root.find(id="placeholder")["src"] == "real.png"
    assert root.find(id="srcset")["srcset"] == "a.jpg 1x, b.jpg 2x"
    assert root.find(id="svg")["src"].startswith("data:image/svg+xml")
    assert root.figure.img["src"] == "/pic.webp"


def test_link_heavy_div_is_removed(settings):
    reader = _reader(
        f"<p>{LOREM}</p>"
        '<div><a href="/1">Read our other stories</a> and <a href="/2">more here</a></div>',
        settings,
    )
    root = reader.doc.body
    reader.clean_conditionally(root, "div")

    assert root.find("div") is None
    assert root.find("a") is None


def test_comma_rich_div_is_kept_despite_links(settings):
    reader = _reader(f'<div><a href="/x">{LOREM}</a>, {LOREM}, {LOREM}</div>', settings)
    root = reader.doc.body
    reader.clean_conditionally(root, "div")
    assert root.find("div") is not None


def test_prep_article_removes_chrome_and_keeps_videos(settings):
    reader = _reader(
        f'<div class="entry"><p>{LOREM}</p><span class="sharedaddy">Share this</span></div>'
        '<iframe src="https://www.youtube.com/embed/xyz"></iframe>'
        '<iframe src="https://ads.example.com/frame"></iframe>'
        '<object data="movie.swf"></object>'
        "<h1>Page heading</h1>"
        '<form><input type="text"><button>Go</button></form>',
        settings,
    )
    root = reader.doc.body
    reader.prep_article(root)

    iframes = root.find_all("iframe")
    assert [iframe["src"] for iframe in iframes] == ["https://www.youtube.com/embed/xyz"]
    for tag in ("object", "h1", "form", "input", "button"):
        assert root.find(tag) is None
    assert "Share this" not in root.get_text()
    assert LOREM in root.get_text()


def test_prep_article_removes_h2_repeating_title(settings):
    reader = _reader(f"<h2>Understanding Readability Scores</h2><p>{LOREM}</p>", settings)
    reader._article_title = "Understanding Readability Scores"
    root = reader.doc.body
    reader.prep_article(root)

    assert root.find("h2") is None


def test_prep_article_keeps_unrelated_h2(settings):
    reader = _reader(f"<h2>Background</h2><p>{LOREM}</p>", settings)
    reader._article_title = "Understanding Readability Scores"
    root = reader.doc.body
    reader.prep_article(root)

    assert root.h2.get_text() == "Background"


def test_prep_article_removes_negatively_weighted_headers(settings):
    reader = _reader(
        f'<h2>Details</h2><p>{LOREM}</p><h2 class="comment-title">Comments</h2>', settings
    )
    root = reader.doc.body
    reader.prep_article(root)

    assert [h2.get_text() for h2 in root.find_all("h2")] == ["Details"]


def test_prep_article_drops_empty_paragraphs_and_stray_breaks(settings):
    reader = _reader(
        '<p>   </p><p><img src="a.png"></p>'
        f'<div class="entry">text<br> <p>{LOREM}</p></div>',
        settings,
    )
    root = reader.doc.body
    reader.prep_article(root)

    paragraphs = root.find_all("p")
    assert len(paragraphs) == 2
    assert paragraphs[0].img is not None
    assert root.find("br") is None


def test_prep_article_collapses_single_cell_tables(settings):
    reader = _reader(
        f'<table id="inline"><tr><td>{LOREM} <b>bold</b></td></tr></table>'
        f"<table><tbody><tr><td><p>{LOREM}</p></td></tr></tbody></table>",
        settings,
    )
    root = reader.doc.body
    reader.prep_article(root)

    assert root.find("table") is None
    children = [child.name for child in root.find_all(recursive=False)]
    assert children == ["p", "div"]
    assert root.div.p.get_text() == LOREM

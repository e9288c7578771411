"""Tests for the streaming HTML renderer."""

from __future__ import annotations

import io

import pytest
from bs4 import BeautifulSoup

from pagong.generator.renderer import (
    HtmlContentRenderer,
    ImageParagraphFilter,
    escape_href,
    escape_html,
    push_html,
    render_html,
)
from pagong.markdown_parser import EventKind, TagKind, parse_events


def test_heading_gets_title_class_and_anchor() -> None:
    html = render_html("# Hello World")
    assert html == (
        '<h1 class="title" id="hello_world">'
        '<a class="anchor" href="#hello_world">¶</a>Hello World</h1>\n'
    ), "expected the first heading to carry the title class and an anchor"


def test_duplicate_headings_get_numbered_ids() -> None:
    soup = BeautifulSoup(render_html("# x\n\n# x\n\n## x"), "html.parser")
    ids = [tag["id"] for tag in soup.find_all(["h1", "h2"])]
    assert ids == ["x", "x_2", "x_3"], "expected collisions to be suffixed from 2"
    titled = soup.find_all(class_="title")
    assert len(titled) == 1, "only the first heading should carry the title class"


def test_heading_starting_with_markup_takes_id_from_its_text() -> None:
    html = render_html("# **Intro**\n\n## *Usage* notes")
    assert html == (
        '<h1 class="title" id="intro"><a class="anchor" href="#intro">¶</a>'
        "<strong>Intro</strong></h1>\n"
        '<h2 id="usage"><a class="anchor" href="#usage">¶</a>'
        "<em>Usage</em> notes</h2>\n"
    ), "expected the id from the first text and the markup after the anchor"


def test_heading_without_text_gets_empty_id() -> None:
    html = render_html("# ![logo](logo.png)")
    assert html.startswith('<h1 class="title" id=""><a class="anchor" href="#">¶</a><img '), (
        "expected the anchor before the buffered image markup"
    )


def test_heading_ids_are_deterministic_per_render() -> None:
    source = "# Setup\n\n## Setup\n\n## Other, stuff!"
    assert render_html(source) == render_html(source), (
        "rendering twice should give identical identifiers"
    )


def test_heading_starting_with_code_uses_code_text() -> None:
    html = render_html("## `pagong` usage")
    assert 'id="pagong">' in html, "expected the identifier to come from the code span"
    assert "<code>pagong</code> usage</h2>" in html, "expected the heading body intact"


def test_paragraph_and_inline_markup() -> None:
    html = render_html('*a* **b** ~~c~~ `x<y` [link](http://e.com "T")')
    assert html == (
        '<p><em>a</em> <strong>b</strong> <del>c</del> <code>x&lt;y</code> '
        '<a href="http://e.com" title="T">link</a></p>\n'
    ), "expected inline constructs to map onto their tags"


def test_text_is_escaped() -> None:
    assert render_html('a "q" & b') == "<p>a &quot;q&quot; &amp; b</p>\n", (
        "expected quotes and ampersands to be escaped"
    )


def test_breaks_and_rules() -> None:
    assert render_html("a  \nb\nc") == "<p>a<br />\nb\nc</p>\n", (
        "expected a hard break tag and a plain newline for the soft break"
    )
    assert render_html("a\n\n---\n\nb") == "<p>a</p>\n<hr />\n<p>b</p>\n", (
        "expected a horizontal rule between the paragraphs"
    )


def test_lists() -> None:
    assert render_html("- a\n- b") == "<ul>\n<li>a</li>\n<li>b</li>\n</ul>\n", (
        "expected a bullet list"
    )
    assert render_html("1. a") == "<ol>\n<li>a</li>\n</ol>\n", (
        "lists starting at 1 should not carry a start attribute"
    )
    assert render_html("0. a") == '<ol start="0">\n<li>a</li>\n</ol>\n', (
        "a list starting at 0 should keep its start attribute"
    )
    assert render_html("3. a").startswith('<ol start="3">\n'), (
        "expected the start attribute for other start numbers"
    )


def test_task_list_markers() -> None:
    html = render_html("- [x] done\n- [ ] todo")
    assert '<li><input disabled="" type="checkbox" checked=""/>\ndone</li>' in html, (
        "expected a checked, disabled checkbox"
    )
    assert '<li><input disabled="" type="checkbox"/>\ntodo</li>' in html, (
        "expected an unchecked, disabled checkbox"
    )


def test_blockquote() -> None:
    assert render_html("> quoted") == "<blockquote>\n<p>quoted</p>\n</blockquote>\n", (
        "expected the paragraph nested inside the blockquote"
    )


def test_table_alignment_and_sections() -> None:
    html = render_html("| a | b |\n|:-|-:|\n| 1 | 2 |")
    assert html == (
        '<table><thead><tr><th align="left">a</th><th align="right">b</th>'
        "</tr></thead><tbody>\n"
        '<tr><td align="left">1</td><td align="right">2</td></tr>\n'
        "</tbody></table>\n"
    ), "expected header cells in thead and aligned body cells in tbody"


def test_fenced_code_block() -> None:
    assert render_html("```python\nprint(1)\n```") == (
        '<pre><code class="language-python">print(1)\n</code></pre>\n'
    ), "expected the info string's first word as the language class"
    assert render_html("    a < b\n") == "<pre><code>a &lt; b\n</code></pre>\n", (
        "indented code should have no language class"
    )


def test_footnote_reference_precedes_definition() -> None:
    html = render_html("[^n]: The note.\n\nText[^n].")
    assert html == (
        '<p>Text<sup class="footnote-reference" id="r.n"><a href="#f.n">1</a></sup>.</p>\n'
        '<p class="footnote" id="f.n"><sup>1</sup> The note. <a href="#r.n">↩</a></p>\n'
    ), "expected a numbered reference followed by its definition with a back link"
    assert html.index('id="r.n"') < html.index('id="f.n"'), (
        "the reference anchor should come before the definition anchor"
    )


def test_footnotes_are_numbered_in_reference_order() -> None:
    soup = BeautifulSoup(render_html("B[^b] A[^a]\n\n[^a]: a\n\n[^b]: b"), "html.parser")
    numbers = [sup.get_text() for sup in soup.select("sup.footnote-reference")]
    assert numbers == ["1", "2"], "expected numbering in order of first reference"
    assert soup.select_one("sup.footnote-reference")["id"] == "r.b", (
        "expected the first reference to point at label b"
    )


def test_standalone_image_is_wrapped_with_caption() -> None:
    html = render_html('Some text above\n\n![alt](img.png "Cap")\n\nSome text below.')
    soup = BeautifulSoup(html, "html.parser")
    container = soup.select_one("div.image-container")
    assert container is not None, "expected the standalone image to be wrapped"
    image = container.find("img")
    assert image is not None, "expected the image inside the container"
    assert (image["src"], image["alt"], image["title"]) == ("img.png", "alt", "Cap"), (
        "expected the image attributes to be kept"
    )
    caption = container.select_one("div.image-caption")
    assert caption is not None, "expected a caption element"
    assert caption.get_text() == "Cap", "expected the title as caption text"
    assert '<div class="image-caption">Cap</div>\n</div>\n<p>\n' in html, (
        "expected a paragraph to be reopened after the captioned image"
    )


def test_inline_image_is_not_wrapped() -> None:
    html = render_html("See ![alt](a.png) here")
    assert html == '<p>See <img src="a.png" alt="alt" /> here</p>\n', (
        "an image sharing its paragraph should render inline"
    )


def test_image_alt_text_is_flattened() -> None:
    html = render_html("x ![an *emphasised* alt](a.png)")
    assert 'alt="an emphasised alt"' in html, "nested markup should be stripped from alt text"


def test_href_escaping() -> None:
    assert escape_href("a b&c'd") == "a%20b&amp;c&#x27;d", (
        "expected spaces percent-encoded and & and ' entity-encoded"
    )
    assert escape_html('<"&>') == "&lt;&quot;&amp;&gt;", "expected all four characters escaped"


def test_image_filter_keeps_unmatched_events() -> None:
    events = list(parse_events("text ![a](b.png)"))
    filtered = list(ImageParagraphFilter(events))
    assert [event for event, _ in filtered] == events, "partial matches must pass through"
    assert not any(standalone for _, standalone in filtered), "nothing should be standalone"


def test_image_filter_drops_paragraph_around_lone_image() -> None:
    filtered = list(ImageParagraphFilter(parse_events("![a](b.png)")))
    kinds = [(event.kind, event.tag.kind if event.tag else None) for event, _ in filtered]
    assert kinds == [
        (EventKind.START, TagKind.IMAGE),
        (EventKind.TEXT, None),
        (EventKind.END, TagKind.IMAGE),
    ], "expected the surrounding paragraph events to be removed"
    assert filtered[0][1] is True, "expected the image start to be flagged standalone"


def test_push_html_propagates_sink_errors() -> None:
    class BrokenSink:
        def write(self, text: str) -> int:
            raise OSError("disk full")

    with pytest.raises(OSError, match="disk full"):
        push_html(parse_events("hello"), BrokenSink())


def test_push_html_writes_into_buffer() -> None:
    buffer = io.StringIO()
    push_html(parse_events("hi"), buffer)
    assert buffer.getvalue() == "<p>hi</p>\n", "expected the paragraph in the buffer"


def test_content_renderer_highlights_when_enabled() -> None:
    renderer = HtmlContentRenderer(highlight=True)
    html = renderer.markdown("```python\nprint(1)\n```")
    assert '<pre><code class="language-python">' in html, "expected the language class"
    assert '<span class="nb">print</span>' in html, "expected Pygments token spans"
    assert "pre > code" in renderer.stylesheet, "expected styles scoped to code blocks"


def test_content_renderer_escapes_unknown_languages() -> None:
    renderer = HtmlContentRenderer(highlight=True)
    html = renderer.markdown("```nosuchlanguage\na < b\n```")
    assert "a &lt; b\n</code></pre>" in html, "unknown languages should fall back to escaping"


def test_content_renderer_without_highlighting() -> None:
    renderer = HtmlContentRenderer()
    assert renderer.stylesheet == "", "expected no stylesheet when highlighting is off"
    assert not renderer.highlights, "expected highlighting to be off by default"
    assert "<span" not in renderer.markdown("```python\nprint(1)\n```"), (
        "expected plain escaped code"
    )

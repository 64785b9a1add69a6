"""Unit tests for core/render.py"""

import logging

from md2pdf.core.models import PageMetadata
from md2pdf.core.render import highlight_code, make_parser, md_to_html


def test_highlight_code_known_language():
    html = highlight_code('print("hi")\n', "python")
    assert html.startswith('<pre class="highlight"><code class="language-python">')
    assert '<span class="nb">print</span>' in html


def test_highlight_code_unknown_language_falls_back():
    html = highlight_code("x\n", "no-such-lexer")
    assert 'class="language-no-such-lexer"' in html
    assert "x" in html


def test_highlight_code_no_language():
    assert highlight_code("x\n", "").startswith('<pre class="highlight"><code>')


def test_headings_get_slug_anchors():
    html = make_parser().render("## Getting Started\n")
    assert '<h2 id="getting-started">' in html


def test_tables_and_strikethrough():
    html = make_parser().render("| a | b |\n|---|---|\n| 1 | 2 |\n\n~~gone~~\n")
    assert "<table>" in html
    assert "<s>gone</s>" in html


def test_raw_html_passthrough():
    assert '<div class="x">' in make_parser().render('<div class="x">hi</div>\n')


def test_md_to_html_page_shell(tmp_path):
    css = tmp_path / "main.css"
    css.write_text("body {}")
    html = md_to_html("# Hello\n", css, PageMetadata(title="Hello & Co"))
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>Hello &amp; Co</title>" in html
    assert f'<link rel="stylesheet" href="{css}">' in html
    assert ".highlight" in html


def test_md_to_html_missing_stylesheet_omitted(tmp_path):
    html = md_to_html("x\n", tmp_path / "missing.css")
    assert "<link" not in html


def test_md_to_html_toc_default_levels():
    md = "[[toc]]\n\n## Alpha\n\n### Beta\n\n#### Gamma\n"
    html = md_to_html(md)
    assert '<div class="table-of-content">' in html
    assert '<a href="#alpha">Alpha</a>' in html
    assert '<a href="#beta">Beta</a>' in html
    assert '<a href="#gamma">' not in html


def test_md_to_html_toc_custom_levels():
    md = "[[toc]]\n\n## Alpha\n\n#### Gamma\n"
    html = md_to_html(md, metadata=PageMetadata(table_of_content=[4]))
    assert '<a href="#gamma">Gamma</a>' in html
    assert '<a href="#alpha">' not in html


def test_extension_callable_applied():
    def shout(md):
        md.add_render_rule("text", lambda self, tokens, idx, options, env: tokens[idx].content.upper())

    assert "HELLO" in md_to_html("hello\n", extensions=[shout])


def test_extension_with_options():
    seen = {}

    def plugin(md, flag=False):
        seen["flag"] = flag

    make_parser([{"plugin": plugin, "options": {"flag": True}}])
    assert seen == {"flag": True}


def test_invalid_extension_skipped(caplog):
    with caplog.at_level(logging.WARNING):
        html = md_to_html("text\n", extensions=["not-a-plugin"])
    assert "<p>text</p>" in html
    assert "Skipping invalid markdown-it plugin" in caplog.text

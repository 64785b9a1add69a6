"""Markdown to standalone HTML page rendering"""

import logging
from html import escape
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

from markdown_it import MarkdownIt
from mdit_py_plugins.anchors import anchors_plugin
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

from md2pdf.core.models import PageMetadata
from md2pdf.core.plugins import DEFAULT_TOC_LEVELS, callouts_plugin, toc_plugin
from md2pdf.core.utils.slug import slugify


logger = logging.getLogger(__name__)

PYGMENTS_STYLE = "default"
PluginSpec = Union[Callable, dict[str, Any]]

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>{title}</title>
{stylesheet}
<style>
{pygments_css}
</style>
</head>
<body>
{body}
</body>
</html>
"""


def highlight_code(code: str, lang: str, attrs: str = "") -> str:
    """Pygments-highlight a fence; unknown or missing languages fall back to plain text."""
    try:
        lexer = get_lexer_by_name(lang) if lang else TextLexer()
    except ClassNotFound:
        lexer = TextLexer()
    css_lang = f' class="language-{escape(lang)}"' if lang else ""
    body = highlight(code, lexer, HtmlFormatter(nowrap=True))
    return f'<pre class="highlight"><code{css_lang}>{body}</code></pre>\n'


def _apply_extensions(md: MarkdownIt, extensions: Iterable[PluginSpec]) -> None:
    """Apply extra plugins given as callables or {"plugin": fn, "options": ...} mappings."""
    for ext in extensions or ():
        if callable(ext):
            md.use(ext)
        elif isinstance(ext, dict) and callable(ext.get("plugin")):
            options = ext.get("options") or {}
            if isinstance(options, dict):
                md.use(ext["plugin"], **options)
            else:
                md.use(ext["plugin"], *options)
        else:
            logger.warning("Skipping invalid markdown-it plugin: %r", ext)


def make_parser(extensions: Iterable[PluginSpec] = ()) -> MarkdownIt:
    """Build the markdown-it pipeline: highlighting, anchors, callouts, TOC, then extensions."""
    md = MarkdownIt("gfm-like", {"html": True, "typographer": True, "highlight": highlight_code})
    md.use(anchors_plugin, min_level=1, max_level=6, slug_func=slugify, permalink=False)
    md.use(callouts_plugin)
    md.use(toc_plugin, include_levels=DEFAULT_TOC_LEVELS)
    _apply_extensions(md, extensions)
    return md


def md_to_html(
    markdown: str,
    stylesheet_path: Optional[Path] = None,
    metadata: PageMetadata = None,
    extensions: Iterable[PluginSpec] = (),
    ) -> str:
    """Render markdown into a complete HTML page ready for the PDF renderer."""
    metadata = metadata or PageMetadata()
    env = {"toc_levels": metadata.table_of_content}
    body = make_parser(extensions).render(markdown, env)

    stylesheet = ""
    if stylesheet_path and Path(stylesheet_path).is_file():
        stylesheet = f'<link rel="stylesheet" href="{escape(str(stylesheet_path))}">'
    return PAGE_TEMPLATE.format(
        title=escape(metadata.title or ""),
        stylesheet=stylesheet,
        pygments_css=HtmlFormatter(style=PYGMENTS_STYLE).get_style_defs(".highlight"),
        body=body,
    )

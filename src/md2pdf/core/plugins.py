"""markdown-it plugins: callout blocks and table-of-contents placeholder expansion"""

import re
from html import escape

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

from md2pdf.core.metadata import OMIT_FROM_TOC, TOC_PLACEHOLDER


CALLOUT_RE = re.compile(r'^\[!(\w+)\][+-]?[ \t]*(.*)$')
DEFAULT_TOC_LEVELS = (2, 3)
TOC_CONTAINER_CLASS = "table-of-content"
TOC_HEADER_HTML = '<h2 id="table-of-content">Table of Contents</h2>'


# --- callouts ---

def _closing_index(tokens: list[Token], open_idx: int) -> int:
    opener = tokens[open_idx]
    for j in range(open_idx + 1, len(tokens)):
        tok = tokens[j]
        if tok.type == "blockquote_close" and tok.level == opener.level:
            return j
    return -1


def _callouts_rule(state: StateCore) -> None:
    tokens = state.tokens
    for i, tok in enumerate(tokens):
        if tok.type != "blockquote_open" or i + 3 >= len(tokens):
            continue
        para, inline = tokens[i + 1], tokens[i + 2]
        if para.type != "paragraph_open" or inline.type != "inline":
            continue
        first, _, rest = inline.content.partition("\n")
        m = CALLOUT_RE.match(first.strip())
        if not m:
            continue
        close = _closing_index(tokens, i)
        if close < 0:
            continue

        kind = m.group(1).lower()
        tok.tag = tokens[close].tag = "div"
        tok.meta["callout"] = (kind, m.group(2).strip() or kind.capitalize())
        inline.content = rest
        if not rest.strip():
            para.hidden = tokens[i + 3].hidden = True


def _render_callout_open(self, tokens, idx, options, env):
    token = tokens[idx]
    if "callout" not in token.meta:
        return self.renderToken(tokens, idx, options, env)
    kind, title = token.meta["callout"]
    return (f'<div class="callout callout-{escape(kind)}">\n'
            f'<p class="callout-title">{escape(title)}</p>\n')


def callouts_plugin(md: MarkdownIt) -> None:
    """Turn ``> [!note] Title`` blockquotes into ``div.callout`` blocks."""
    md.core.ruler.before("inline", "callouts", _callouts_rule)
    md.add_render_rule("blockquote_open", _render_callout_open)


# --- table of contents ---

def _heading_text(inline: Token) -> str:
    if not inline.children:
        return inline.content
    return "".join(c.content for c in inline.children if c.type in ("text", "code_inline"))


def _collect_headings(tokens: list[Token], levels) -> list[tuple[int, str, str]]:
    headings = []
    for i, tok in enumerate(tokens):
        if tok.type != "heading_open":
            continue
        level = int(tok.tag[1:])
        if level not in levels:
            continue
        prev = tokens[i - 1] if i else None
        if prev is not None and prev.type == "html_block" and OMIT_FROM_TOC in prev.content:
            continue
        headings.append((level, tok.attrGet("id") or "", _heading_text(tokens[i + 1])))
    return headings


def toc_html(headings: list[tuple[int, str, str]]) -> str:
    """Render (level, anchor, text) entries as nested lists inside the TOC container."""
    out = [f'<div class="{TOC_CONTAINER_CLASS}">', TOC_HEADER_HTML]
    stack: list[int] = []
    for level, anchor, text in headings:
        if not stack or level > stack[-1]:
            out.append("<ul>")
            stack.append(level)
        else:
            while len(stack) > 1 and level < stack[-1]:
                out.append("</li></ul>")
                stack.pop()
            out.append("</li>")
        out.append(f'<li><a href="#{escape(anchor)}">{escape(text)}</a>')
    while stack:
        out.append("</li></ul>")
        stack.pop()
    out.append("</div>")
    return "\n".join(out) + "\n"


def toc_plugin(md: MarkdownIt, include_levels=DEFAULT_TOC_LEVELS) -> None:
    """Replace a paragraph holding only the TOC placeholder with a generated table of contents.

    Levels come from ``env["toc_levels"]`` when set, else ``include_levels``.
    Must be registered after the anchors plugin so headings already carry ids.
    """
    def _toc_rule(state: StateCore) -> None:
        tokens = state.tokens
        spots = [
            i for i in range(1, len(tokens) - 1)
            if tokens[i].type == "inline" and tokens[i].content.strip() == TOC_PLACEHOLDER
            and tokens[i - 1].type == "paragraph_open"
        ]
        if not spots:
            return
        levels = set(state.env.get("toc_levels") or include_levels)
        html = toc_html(_collect_headings(tokens, levels))
        for i in reversed(spots):
            block = Token("html_block", "", 0)
            block.content = html
            block.block = True
            tokens[i - 1:i + 2] = [block]

    md.core.ruler.push("toc", _toc_rule)

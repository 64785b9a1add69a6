"""Header, footer, title page and authors blocks generated from page metadata"""

import re
from enum import Enum
from html import escape

from md2pdf.core.models import AuthorRecord, PageMetadata
from md2pdf.core.themes import Theme


PLACEHOLDER_RE = re.compile(r'{{\s*(\w+)\s*}}')
AUTHORS_MARKER_RE = re.compile(r'<!--\s*\[\[\s*authors\s*\]\]\s*-->', re.IGNORECASE)
FOOTER_VARIABLES = '<!-- footerVariables -->'
FOOTER_SEPARATOR = ' <span aria-hidden="true">•</span> '
PAGE_NUMBER_CLASS = 'class="pageNumber"'

DEFAULT_PICTURE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="none" stroke="currentColor" '
    'stroke-width="2" stroke-linecap="round" stroke-linejoin="round" class="author-photo">'
    '<path d="M12 12c2.21 0 4-1.79 4-4s-1.79-4-4-4-4 1.79-4 4 1.79 4 4 4z"/>'
    '<path d="M12 14c-5.33 0-8 2.67-8 8v2h16v-2c0-5.33-2.67-8-8-8z"/></svg>'
)


class PlaceholderPolicy(str, Enum):
    """What to do with a ``{{key}}`` that is not a known metadata field."""
    keep = "keep"
    error = "error"


class TemplateKeyError(KeyError):
    pass


def placeholder_values(metadata: PageMetadata) -> dict[str, str]:
    """The enumerated substitution keys available to header/footer templates."""
    def _text(value) -> str:
        return "" if value is None else escape(str(value))

    return {
        "title":    _text(metadata.title),
        "subtitle": _text(metadata.subtitle),
        "version":  _text(metadata.version),
        "date":     _text(metadata.date),
        "license":  _text(metadata.license),
        "authors":  escape(", ".join(a.name for a in metadata.authors if a.name)),
    }


def render_placeholders(
    template: str,
    metadata: PageMetadata,
    policy: PlaceholderPolicy = PlaceholderPolicy.keep,
    ) -> str:
    """Substitute ``{{key}}`` placeholders; unknown keys follow ``policy``."""
    values = placeholder_values(metadata)

    def _sub(m: re.Match) -> str:
        key = m.group(1)
        if key in values:
            return values[key]
        if PlaceholderPolicy(policy) is PlaceholderPolicy.error:
            raise TemplateKeyError(f"Unknown template placeholder {{{{{key}}}}}; known: {sorted(values)}")
        return m.group(0)

    return PLACEHOLDER_RE.sub(_sub, template)


def footer_items(metadata: PageMetadata) -> str:
    values = placeholder_values(metadata)
    items = [f"<span>{values[k]}</span>" for k in ("title", "version", "date", "license") if values[k]]
    return FOOTER_SEPARATOR.join(items)


def get_header(metadata: PageMetadata, theme: Theme, policy=PlaceholderPolicy.keep) -> str:
    return render_placeholders(theme.header_template.read_text(encoding="utf-8"), metadata, policy)


def get_footer(metadata: PageMetadata, theme: Theme, policy=PlaceholderPolicy.keep) -> str:
    footer = theme.footer_template.read_text(encoding="utf-8")
    footer = footer.replace(FOOTER_VARIABLES, footer_items(metadata))
    return render_placeholders(footer, metadata, policy)


def title_page_footer(footer: str) -> str:
    """The title page carries no page number."""
    return footer.replace(PAGE_NUMBER_CLASS, "")


def title_page_html(metadata: PageMetadata, theme: Theme) -> str:
    title = escape(metadata.title or "")
    subtitle = f"<h2>{escape(metadata.subtitle)}</h2>" if metadata.subtitle else ""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<link rel="stylesheet" href="{escape(str(theme.title_page_stylesheet))}">
</head>
<body>
<div class="title-page">
<h1>{title}</h1>
{subtitle}
</div>
</body>
</html>
"""


def _picture_html(author: AuthorRecord) -> str:
    if author.picture_url:
        return f'<img src="{escape(author.picture_url)}" alt="{escape(author.name)}" class="author-photo" />'
    return DEFAULT_PICTURE_SVG


def authors_block(metadata: PageMetadata) -> str:
    blocks = [
        f"""<div class="author-block">
{_picture_html(a)}
<div>
<h4>{escape(a.name)}</h4>
<p>{escape(' '.join((a.bio or '').split()))}</p>
<p><a href="mailto:{escape(a.email)}">{escape(a.email)}</a></p>
</div></div>"""
        for a in metadata.author_data
    ]
    return "\n## About the authors\n\n" + "\n".join(blocks) + "\n"


def inject_authors_html(metadata: PageMetadata, markdown: str) -> str:
    """Replace the first ``<!-- [[authors]] -->`` marker with the About-the-authors section."""
    if not metadata.author_data:
        return markdown
    return AUTHORS_MARKER_RE.sub(lambda _: authors_block(metadata), markdown, count=1)

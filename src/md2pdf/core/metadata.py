"""Front matter parsing, author enrichment, and structural marker detection"""

import logging
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from md2pdf.config import Settings
from md2pdf.core.authors import AuthorStore
from md2pdf.core.models import (
    Author, AuthorFound, AuthorStubCreated, MessageLog, PageMetadata, ResolvedMarkdown,
)
from md2pdf.core.utils.fences import fenced_ranges, in_ranges


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'\A---[ \t]*\n(.*?)\n?^---[ \t]*$\n?', re.DOTALL | re.MULTILINE)
H1_RE = re.compile(r'^#[ \t]+(.*)$', re.MULTILINE)
TITLE_SPLIT_RE = re.compile(r'[:\-]')
AUTHOR_RE = re.compile(r'^(.*?)<([^>]+)>$')
TITLEPAGE_MARKER = '<!-- [[titlepage]] -->'
TOC_RE = re.compile(r'<!-- \[\[toc\]\](\[\d(?:,\d)*\])? -->')
TOC_PLACEHOLDER = '[[toc]]'
OMIT_FROM_TOC = '<!-- omit from toc -->'

NO_FRONTMATTER = 'No frontmatter block found.'
INVALID_FRONTMATTER = 'Invalid YAML frontmatter.'
NO_AUTHORS = 'No authors were declared in the metadata, the "about the authors" page will not be generated.'
FILL_IN_AUTHORS = 'Please fill in the author metadata fields before generating the PDF.'


def _split_frontmatter(text: str, messages: MessageLog) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body); problems are warnings and yield an empty dict."""
    m = FRONTMATTER_RE.match(text)
    if not m:
        messages.add_warning(NO_FRONTMATTER)
        return {}, text
    body = text[m.end():]
    try:
        fm = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        messages.add_warning(INVALID_FRONTMATTER, [str(e)])
        return {}, body
    if not isinstance(fm, dict):
        messages.add_warning(INVALID_FRONTMATTER, [f"expected a mapping, got {type(fm).__name__}"])
        return {}, body
    return fm, body


def parse_authors(field: Any, messages: MessageLog) -> list[Author]:
    """Normalize a 'Name <email>, ...' string or a list into Author entries."""
    if isinstance(field, str):
        entries = field.split(',')
    elif isinstance(field, list):
        entries = field
    else:
        entries = [field]

    authors = []
    for entry in entries:
        if isinstance(entry, dict):
            authors.append(Author(name=str(entry.get('name') or '').strip(),
                                  email=str(entry.get('email') or '').strip()))
            continue
        raw = str(entry).strip()
        m = AUTHOR_RE.match(raw)
        if m:
            authors.append(Author(name=m.group(1).strip(), email=m.group(2).strip()))
        else:
            messages.add_warning(f'Author entry "{raw}" is not in "Name <email>" format.')
            authors.append(Author(name=raw, email=''))
    return authors


def split_title(heading: str) -> tuple[str, str | None]:
    """Split a heading on its first colon or dash into (title, subtitle)."""
    parts = TITLE_SPLIT_RE.split(heading, maxsplit=1)
    title = parts[0].strip()
    subtitle = parts[1].strip() if len(parts) > 1 else None
    return title, subtitle or None


def _apply_title(markdown: str, metadata: PageMetadata) -> str:
    """Derive title/subtitle from the first H1 outside code and rewrite that heading."""
    ranges = fenced_ranges(markdown)
    for m in H1_RE.finditer(markdown):
        if in_ranges(m.start(), ranges):
            continue
        metadata.title, metadata.subtitle = split_title(m.group(1))
        replacement = f'# {metadata.title}'
        if metadata.subtitle:
            replacement += f'\n\n{OMIT_FROM_TOC}\n## {metadata.subtitle}'
        return markdown[:m.start()] + replacement + markdown[m.end():]
    return markdown


def _apply_toc(markdown: str, metadata: PageMetadata) -> str:
    """Replace TOC markers outside fenced code with the placeholder and record requested levels."""
    ranges = fenced_ranges(markdown)
    parts = []
    last = 0
    for m in TOC_RE.finditer(markdown):
        if in_ranges(m.start(), ranges):
            continue
        if m.group(1):
            metadata.table_of_content = [int(x) for x in m.group(1).strip('[]').split(',')]
        parts.append(markdown[last:m.start()])
        parts.append(TOC_PLACEHOLDER)
        last = m.end()
    parts.append(markdown[last:])
    return ''.join(parts)


def enrich_authors(metadata: PageMetadata, store: AuthorStore, messages: MessageLog) -> None:
    """Validate declared authors and attach their records; create stubs for unknown authors."""
    if not metadata.authors:
        return

    created = []
    for author in metadata.authors:
        if not author.name:
            messages.add_error(f'Author "{author.email}" is missing a "name".')
        if not author.email:
            messages.add_error(f'Author "{author.name}" is missing an "email".')
            continue

        try:
            found = store.resolve(author.name, author.email)
        except (OSError, ValueError) as e:
            messages.add_error(f'Author metadata for "{author.email}" could not be loaded.', [str(e)])
            continue

        if isinstance(found, AuthorStubCreated):
            created.append((author.email, found.path))
        elif isinstance(found, AuthorFound):
            if not (found.record.bio or '').strip():
                messages.add_error(f'Author "{author.email}" is missing a "bio".', [str(found.path)])
            metadata.author_data.append(found.record)

    for email, path in created:
        messages.add_warning(f'Author metadata file not found for "{email}".',
                             [f'Created author metadata file: {path}'])
    if created:
        messages.add_warning(FILL_IN_AUTHORS)


def resolve_markdown(text: str, settings: Settings = None) -> ResolvedMarkdown:
    """Turn raw document text into clean markdown, PageMetadata, and a MessageLog.

    Never raises for malformed input: every problem is recorded in the log,
    and any entry under ``errors`` means the document must not be rendered.
    """
    settings = settings or Settings()
    messages = MessageLog()
    text = text.replace("\r\n", "\n")
    fm, markdown = _split_frontmatter(text, messages)

    authors_field = fm.pop('authors', None)
    fm = {str(k): v for k, v in fm.items()}
    for key in ('title', 'subtitle', 'license'):
        if fm.get(key) is not None:
            fm[key] = str(fm[key])
    try:
        metadata = PageMetadata.model_validate(fm)
    except ValidationError as e:
        messages.add_warning(INVALID_FRONTMATTER, [str(e)])
        metadata = PageMetadata()

    if authors_field:
        metadata.authors = parse_authors(authors_field, messages)
    else:
        messages.add_warning(NO_AUTHORS)

    markdown = _apply_title(markdown, metadata)
    metadata.title_page = TITLEPAGE_MARKER in markdown
    markdown = _apply_toc(markdown, metadata)

    store = AuthorStore(Path(settings.authors_dir),
                        Path(settings.author_template) if settings.author_template else None)
    enrich_authors(metadata, store, messages)

    logger.debug("Resolved metadata: title=%r authors=%d toc=%r",
                 metadata.title, len(metadata.authors), metadata.table_of_content)
    return ResolvedMarkdown(markdown=markdown, metadata=metadata, messages=messages)


def resolve_file(path: Path, settings: Settings = None) -> ResolvedMarkdown:
    """Read and resolve a markdown file; a missing file raises FileNotFoundError."""
    return resolve_markdown(Path(path).read_text(encoding='utf-8'), settings)

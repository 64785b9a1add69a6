"""Pipeline orchestration: markdown file -> metadata -> HTML -> PDF on disk"""

import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Callable, Iterable, Optional

from md2pdf.config import Settings, load_config
from md2pdf.core import assemble
from md2pdf.core.blocks import (
    PlaceholderPolicy, get_footer, get_header, inject_authors_html, title_page_html, title_page_footer,
)
from md2pdf.core.metadata import resolve_file
from md2pdf.core.models import ConversionResult, MessageLog, PageMetadata, PdfOptions
from md2pdf.core.pdf import PdfRenderer, Renderer
from md2pdf.core.postprocess import absolutize_links, inline_images, mark_legal_excerpts
from md2pdf.core.render import md_to_html
from md2pdf.core.themes import Theme, resolve_theme


logger = logging.getLogger(__name__)


class MetadataValidationError(ValueError):
    """Raised before rendering when the metadata message log holds errors."""

    def __init__(self, messages: MessageLog):
        super().__init__("Metadata validation failed")
        self.messages = messages


def inject_script(html: str, script: str) -> str:
    """Embed preprocessor JavaScript verbatim just before ``</body>`` (appended if absent)."""
    tag = f"<script>\n{script}\n</script>\n"
    if "</body>" in html:
        return html.replace("</body>", f"{tag}</body>", 1)
    return f"{html}\n{tag}"


def output_paths(input_path: Path, output: Optional[Path], html: bool) -> tuple[Path, Optional[Path]]:
    """Return (pdf_path, html_path) derived from the input name unless overridden."""
    pdf_path = Path(output) if output else input_path.with_suffix(".pdf")
    return pdf_path, (input_path.with_suffix(".html") if html else None)


def pdf_options_for(theme: Theme, settings: Settings, header: str, footer: str) -> PdfOptions:
    options = theme.pdf_options
    if settings.pdf_options:
        options = options.model_copy(update=settings.pdf_options.model_dump(exclude_unset=True))
    return options.model_copy(update={"header_template": header, "footer_template": footer})


def build_html(markdown: str, metadata: PageMetadata, theme: Theme, base_dir: Path) -> str:
    """Render and post-process the main document HTML (links are not absolutized yet)."""
    html = md_to_html(inject_authors_html(metadata, markdown), theme.main_content_stylesheet, metadata)
    html = mark_legal_excerpts(html)
    return inline_images(html, base_dir)


def should_add_title_page(metadata: PageMetadata, settings: Settings, allowed: bool) -> bool:
    return allowed and (metadata.title_page or settings.title_page)


def convert(
    input_path: Path,
    *,
    output: Optional[Path] = None,
    theme: Optional[str] = None,
    config_path: Optional[str] = None,
    html: bool = False,
    title_page: bool = True,
    renderer: Optional[Renderer] = None,
    settings: Optional[Settings] = None,
    report: Optional[Callable[[MessageLog], None]] = None,
    ) -> ConversionResult:
    """Convert one markdown file to PDF.

    Raises FileNotFoundError for a missing input, MetadataValidationError
    when the metadata has errors (nothing rendered or written), and
    RenderError when the engine fails. ``report`` receives the message log
    as soon as metadata is resolved. A renderer passed in is left open for
    the caller; otherwise one is created and closed around this call.
    """
    input_path = Path(input_path).resolve()
    if not input_path.is_file():
        raise FileNotFoundError(f"Input file not found: {input_path}")
    base_dir = input_path.parent
    settings = settings or load_config(base_dir, config_path)
    resolved_theme = resolve_theme(theme or settings.theme)
    pdf_path, html_path = output_paths(input_path, output, html)

    resolved = resolve_file(input_path, settings)
    metadata, messages = resolved.metadata, resolved.messages
    if report:
        report(messages)
    if messages.has_errors:
        raise MetadataValidationError(messages)

    policy = PlaceholderPolicy(settings.placeholder_policy)
    header = get_header(metadata, resolved_theme, policy)
    footer = get_footer(metadata, resolved_theme, policy)

    page_html = build_html(resolved.markdown, metadata, resolved_theme, base_dir)
    script_path = input_path.with_suffix(".js")
    if script_path.is_file():
        logger.info("Embedding JavaScript preprocessor %s", script_path)
        page_html = inject_script(page_html, script_path.read_text(encoding="utf-8"))
    if html_path:
        html_path.write_text(page_html, encoding="utf-8")
    page_html = absolutize_links(page_html, base_dir, settings.base_url)

    add_title = should_add_title_page(metadata, settings, title_page)
    with ExitStack() as stack:
        if renderer is None:
            renderer = stack.enter_context(PdfRenderer(settings.headless, settings.render_timeout))

        main_pdf = renderer.render(page_html, settings.base_url,
                                   pdf_options_for(resolved_theme, settings, header, footer))
        doc = assemble.load_pdf(main_pdf)
        if add_title:
            title_html = absolutize_links(title_page_html(metadata, resolved_theme), base_dir, settings.base_url)
            title_pdf = renderer.render(title_html, settings.base_url,
                                        pdf_options_for(resolved_theme, settings, header, title_page_footer(footer)))
            assemble.prepend_title_page(doc, title_pdf)
            assemble.reset_page_labels(doc, has_title_page=True)

    assemble.crop_to_a4(doc)
    assemble.set_document_info(doc, metadata.title, [a.name for a in metadata.authors if a.name])
    pdf_path.parent.mkdir(parents=True, exist_ok=True)
    pdf_path.write_bytes(assemble.to_bytes(doc))
    logger.info("Wrote %s (%d pages)", pdf_path, len(doc.pages))

    return ConversionResult(
        output_path=pdf_path,
        html_path=html_path,
        theme=resolved_theme.name,
        messages=messages,
        page_count=len(doc.pages),
    )


def convert_many(paths: Iterable[Path], **options) -> list[ConversionResult]:
    """Convert several files sharing one renderer, closed once; stops at the first failure."""
    settings = options.get("settings") or load_config(Path.cwd(), options.get("config_path"))
    with PdfRenderer(settings.headless, settings.render_timeout) as renderer:
        return [convert(p, renderer=renderer, **options) for p in paths]

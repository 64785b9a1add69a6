"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from md2pdf.core.blocks import TemplateKeyError
from md2pdf.core.models import MessageLog
from md2pdf.core.pdf import RenderError
from md2pdf.core.pipeline import MetadataValidationError, convert_many
from md2pdf.core.project import init_project
from md2pdf.core.themes import ThemeNotFoundError, list_themes


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _echo_messages(messages: MessageLog) -> None:
    """Print metadata warnings and errors with their detail lines to stderr."""
    for title, entries in (("Warnings:", messages.warnings), ("Errors found in metadata:", messages.errors)):
        if not entries:
            continue
        typer.echo(title, err=True)
        for message, details in entries.items():
            typer.echo(f"  - {message}", err=True)
            for detail in details:
                typer.echo(f"      {detail}", err=True)


def convert_cmd(
    files: Annotated[list[Path], typer.Argument(help="Markdown file(s) to convert")],
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Output PDF path (single file only)")] = None,
    theme: Annotated[Optional[str], typer.Option("--theme", "-t", help="Theme to use")] = None,
    config: Annotated[Optional[str], typer.Option("--config", "-c", help="Configuration file path")] = None,
    html: Annotated[bool, typer.Option("--html", help="Also write the intermediate HTML file")] = False,
    title_page: Annotated[bool, typer.Option("--title-page/--no-title-page", help="Allow title page generation")] = True,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
    ):
    """Convert Markdown file(s) to PDF."""
    _setup_logging(verbose)
    if output and len(files) > 1:
        _fail("--output can only be used with a single input file")

    try:
        results = convert_many(
            files, output=output, theme=theme, config_path=config,
            html=html, title_page=title_page, report=_echo_messages,
        )
    except MetadataValidationError:
        _fail("Metadata validation failed")
    except FileNotFoundError as e:
        _fail(str(e))
    except (ValueError, ThemeNotFoundError, TemplateKeyError) as e:
        _fail("Conversion failed", e)
    except RenderError as e:
        _fail("PDF rendering failed", e)

    for result in results:
        typer.echo(f"PDF generated: {result.output_path} ({result.page_count} pages, theme {result.theme})")
        if result.html_path:
            typer.echo(f"HTML saved: {result.html_path}")


def init_cmd(
    name: Annotated[str, typer.Argument(help="Project directory")] = "my-docs",
    theme: Annotated[str, typer.Option("--theme", "-t", help="Theme to use")] = "default",
    ):
    """Initialize a new md2pdf project."""
    try:
        path = init_project(name, theme)
    except OSError as e:
        _fail("Project initialization failed", e)
    typer.echo(f"Project initialized: {path}")


def themes_cmd():
    """List available themes."""
    themes = list_themes()
    if not themes:
        typer.echo("No themes found.")
        raise typer.Exit(1)
    typer.echo("Available themes:")
    for name, origin in themes:
        typer.echo(f"  - {name} ({origin})")

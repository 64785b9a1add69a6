"""CLI entrypoint: Typer app definition and command registration"""

import typer

from md2pdf.cli.commands import convert_cmd, init_cmd, themes_cmd


app = typer.Typer(name="md2pdf", no_args_is_help=True, help="Convert Markdown files to PDFs with themes and templates")

app.command(name="convert")(convert_cmd)
app.command(name="init")(init_cmd)
app.command(name="themes")(themes_cmd)

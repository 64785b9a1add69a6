"""Root test configuration: shared project layout and a renderer that needs no browser"""

from io import BytesIO

import pytest
from pypdf import PdfWriter

from md2pdf.core import pipeline
from md2pdf.core.assemble import A4_HEIGHT, A4_WIDTH


class FakeRenderer:
    """Stands in for PdfRenderer: returns blank A4 PDFs and records every call."""

    def __init__(self, pages: int = 2, error: Exception = None):
        self.pages = pages
        self.error = error
        self.calls = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self.closed = True

    def render(self, html, base_url, options=None) -> bytes:
        self.calls.append((html, base_url, options))
        if self.error:
            raise self.error
        writer = PdfWriter()
        for _ in range(self.pages):
            writer.add_blank_page(width=A4_WIDTH, height=A4_HEIGHT)
        buf = BytesIO()
        writer.write(buf)
        return buf.getvalue()


@pytest.fixture(name="renderer")
def renderer_fixture():
    return FakeRenderer()


@pytest.fixture(name="patched_renderer")
def patched_renderer_fixture(monkeypatch, renderer):
    """Make convert_many build the fake renderer instead of launching Chromium."""
    created = []

    def factory(*args, **kwargs):
        created.append((args, kwargs))
        return renderer

    monkeypatch.setattr(pipeline, "PdfRenderer", factory)
    renderer.created = created
    return renderer


@pytest.fixture(name="project")
def project_fixture(tmp_path, monkeypatch):
    """A docs/ + data/authors/ project with a config pointing at the author store."""
    monkeypatch.chdir(tmp_path)
    for name in ("MD2PDF_THEME", "MD2PDF_TITLE_PAGE", "MD2PDF_AUTHORS_DIR"):
        monkeypatch.delenv(name, raising=False)
    docs = tmp_path / "docs"
    docs.mkdir()
    (tmp_path / "data" / "authors").mkdir(parents=True)
    (docs / "md2pdf.yaml").write_text("authors_dir: ../data/authors\n")
    return tmp_path


@pytest.fixture(name="authors_dir")
def authors_dir_fixture(project):
    return project / "data" / "authors"

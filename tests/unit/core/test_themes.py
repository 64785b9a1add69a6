"""Unit tests for core/themes.py"""

import json
import logging

import pytest

from md2pdf.core import themes
from md2pdf.core.themes import ThemeNotFoundError, list_themes, resolve_theme


def test_resolve_bundled_theme(tmp_path):
    theme = resolve_theme("minimal", tmp_path)
    assert theme.name == "minimal"
    assert theme.header_template.is_file()
    assert theme.main_content_stylesheet.is_file()


def test_resolve_default_theme_pdf_options(tmp_path):
    opts = resolve_theme("default", tmp_path).pdf_options
    assert opts.display_header_footer is True
    assert opts.prefer_css_page_size is True


def test_resolve_local_theme(tmp_path):
    local = tmp_path / "themes" / "corporate"
    local.mkdir(parents=True)
    (local / "theme.json").write_text(json.dumps({
        "headerTemplate": "head.html",
        "pdfOptions": {"printBackground": False, "scale": 0.8},
    }))
    theme = resolve_theme("corporate", tmp_path)
    assert theme.name == "corporate"
    assert theme.header_template == local / "head.html"
    assert theme.footer_template == local / "footer.html"
    assert theme.pdf_options.print_background is False
    assert theme.pdf_options.scale == 0.8


def test_unknown_theme_falls_back_to_default(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        theme = resolve_theme("does-not-exist", tmp_path)
    assert theme.name == "default"
    assert "not found" in caplog.text


def test_legacy_assets_fallback(tmp_path, monkeypatch):
    monkeypatch.setattr(themes, "BUNDLED_THEMES_DIR", tmp_path / "none")
    legacy = tmp_path / "legacy"
    legacy.mkdir()
    (legacy / "header.html").write_text("<div></div>")
    theme = resolve_theme("x", tmp_path, legacy_dir=legacy)
    assert theme.name == "legacy"
    assert theme.header_template == legacy / "header.html"


def test_no_theme_available(tmp_path, monkeypatch):
    monkeypatch.setattr(themes, "BUNDLED_THEMES_DIR", tmp_path / "none")
    with pytest.raises(ThemeNotFoundError):
        resolve_theme("x", tmp_path, legacy_dir=tmp_path / "empty")


def test_invalid_theme_json_uses_defaults(tmp_path, caplog):
    local = tmp_path / "themes" / "broken"
    local.mkdir(parents=True)
    (local / "theme.json").write_text("{not json")
    with caplog.at_level(logging.WARNING):
        theme = resolve_theme("broken", tmp_path)
    assert theme.header_template == local / "header.html"
    assert "Invalid theme config" in caplog.text


def test_list_themes(tmp_path):
    (tmp_path / "themes" / "corporate").mkdir(parents=True)
    found = dict(list_themes(tmp_path))
    assert found["default"] == "built-in"
    assert found["minimal"] == "built-in"
    assert found["corporate"] == "local"

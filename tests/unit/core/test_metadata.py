"""Unit tests for core/metadata.py"""

import pytest

from md2pdf.config import Settings
from md2pdf.core.metadata import (
    FILL_IN_AUTHORS, NO_AUTHORS, NO_FRONTMATTER, OMIT_FROM_TOC, TOC_PLACEHOLDER,
    parse_authors, resolve_file, resolve_markdown, split_title,
)
from md2pdf.core.models import MessageLog


@pytest.fixture(name="settings")
def settings_fixture(tmp_path):
    return Settings(authors_dir=str(tmp_path / "authors"))


def test_split_title_colon():
    assert split_title("User Guide: Installation") == ("User Guide", "Installation")


def test_split_title_dash():
    assert split_title("Report - Q3") == ("Report", "Q3")


def test_split_title_without_separator():
    assert split_title("Plain Title") == ("Plain Title", None)


def test_split_title_only_first_separator():
    assert split_title("A: B: C") == ("A", "B: C")


def test_parse_authors_string():
    messages = MessageLog()
    authors = parse_authors("Jane Roe <jane@x.io>, John Doe <john@x.io>", messages)
    assert [(a.name, a.email) for a in authors] == [("Jane Roe", "jane@x.io"), ("John Doe", "john@x.io")]
    assert not messages.warnings


def test_parse_authors_list_of_mappings():
    authors = parse_authors([{"name": "Jane", "email": "jane@x.io"}], MessageLog())
    assert authors[0].email == "jane@x.io"


def test_parse_authors_malformed_entry_warns():
    messages = MessageLog()
    authors = parse_authors("Just A Name", messages)
    assert authors[0].name == "Just A Name"
    assert authors[0].email == ""
    assert messages.warnings


def test_resolve_strips_frontmatter_and_rewrites_title(settings):
    text = "---\nversion: 1.0\n---\n# User Guide: Installation\n\nBody\n"
    resolved = resolve_markdown(text, settings)
    assert resolved.metadata.title == "User Guide"
    assert resolved.metadata.subtitle == "Installation"
    assert resolved.metadata.version == 1.0
    assert "---" not in resolved.markdown
    assert resolved.markdown.startswith(f"# User Guide\n\n{OMIT_FROM_TOC}\n## Installation")


def test_resolve_no_frontmatter_warns(settings):
    resolved = resolve_markdown("# Title\n", settings)
    assert NO_FRONTMATTER in resolved.messages.warnings
    assert not resolved.messages.has_errors


def test_resolve_invalid_frontmatter_warns(settings):
    resolved = resolve_markdown("---\ntitle: [broken\n---\n# T\n", settings)
    assert resolved.messages.warnings
    assert resolved.metadata.title == "T"


def test_resolve_no_authors_warns(settings):
    resolved = resolve_markdown("---\nversion: 1\n---\n# T\n", settings)
    assert NO_AUTHORS in resolved.messages.warnings


def test_resolve_title_ignores_h1_in_fence(settings):
    text = "```\n# Not the title\n```\n\n# Real Title\n"
    resolved = resolve_markdown(text, settings)
    assert resolved.metadata.title == "Real Title"
    assert "# Not the title" in resolved.markdown


def test_resolve_titlepage_marker(settings):
    resolved = resolve_markdown("<!-- [[titlepage]] -->\n# T\n", settings)
    assert resolved.metadata.title_page is True


def test_resolve_toc_levels(settings):
    resolved = resolve_markdown("# T\n\n<!-- [[toc]][2,3,4] -->\n\n## A\n", settings)
    assert resolved.metadata.table_of_content == [2, 3, 4]
    assert TOC_PLACEHOLDER in resolved.markdown
    assert "<!-- [[toc]]" not in resolved.markdown


def test_resolve_toc_without_levels(settings):
    resolved = resolve_markdown("# T\n\n<!-- [[toc]] -->\n", settings)
    assert resolved.metadata.table_of_content is None
    assert TOC_PLACEHOLDER in resolved.markdown


def test_resolve_toc_inside_fence_untouched(settings):
    text = "# T\n\n```\n<!-- [[toc]][2] -->\n```\n"
    resolved = resolve_markdown(text, settings)
    assert "<!-- [[toc]][2] -->" in resolved.markdown
    assert resolved.metadata.table_of_content is None


def test_resolve_unknown_author_creates_stub(settings, tmp_path):
    """First run: the record is created and only warnings are reported."""
    text = "---\nauthors: Jane Roe <jane@x.io>\n---\n# T\n"
    resolved = resolve_markdown(text, settings)
    assert (tmp_path / "authors" / "jane_x_io.yaml").is_file()
    assert FILL_IN_AUTHORS in resolved.messages.warnings
    assert not resolved.messages.has_errors
    assert resolved.metadata.author_data == []


def test_resolve_stub_without_bio_is_an_error(settings):
    """Second run against the unfilled stub: the missing bio blocks rendering."""
    text = "---\nauthors: Jane Roe <jane@x.io>\n---\n# T\n"
    resolve_markdown(text, settings)
    resolved = resolve_markdown(text, settings)
    assert resolved.messages.has_errors
    assert any("bio" in message for message in resolved.messages.errors)


def test_resolve_complete_author(settings, tmp_path):
    (tmp_path / "authors").mkdir()
    (tmp_path / "authors" / "jane_x_io.yaml").write_text("bio: Writes docs.\n")
    resolved = resolve_markdown("---\nauthors: Jane Roe <jane@x.io>\n---\n# T\n", settings)
    assert not resolved.messages.has_errors
    assert resolved.metadata.author_data[0].name == "Jane Roe"
    assert resolved.metadata.author_data[0].bio == "Writes docs."


def test_resolve_malformed_author_is_an_error(settings):
    resolved = resolve_markdown("---\nauthors: Nobody\n---\n# T\n", settings)
    assert resolved.messages.has_errors


def test_resolve_file_missing(tmp_path, settings):
    with pytest.raises(FileNotFoundError):
        resolve_file(tmp_path / "missing.md", settings)


def test_resolve_crlf_frontmatter(settings):
    """Windows line endings do not hide the front matter block."""
    text = "---\r\nauthors: A <a@x.com>\r\nversion: 2\r\n---\r\n# Hello: World\r\n"
    resolved = resolve_markdown(text, settings)
    assert NO_FRONTMATTER not in resolved.messages.warnings
    assert NO_AUTHORS not in resolved.messages.warnings
    assert resolved.metadata.version == 2
    assert resolved.metadata.authors[0].email == "a@x.com"
    assert resolved.metadata.title == "Hello"
    assert not resolved.markdown.startswith("---")


def test_resolve_backslash_in_author_email_does_not_raise(settings, tmp_path):
    text = "---\nauthors: A <a\\1@x.com>\n---\n# T\n"
    resolved = resolve_markdown(text, settings)
    assert not resolved.messages.has_errors
    assert (tmp_path / "authors" / "a_1_x_com.yaml").stat().st_size > 0


def test_resolve_toc_inside_unclosed_fence_untouched(settings):
    resolved = resolve_markdown("# T\n\n```\n<!-- [[toc]][2] -->\n", settings)
    assert "<!-- [[toc]][2] -->" in resolved.markdown
    assert resolved.metadata.table_of_content is None

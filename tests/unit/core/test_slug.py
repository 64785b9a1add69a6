"""Unit tests for core/utils/slug.py"""

from md2pdf.core.utils.slug import author_id, slugify


def test_slugify_basic():
    assert slugify("Getting Started") == "getting-started"


def test_slugify_collapses_whitespace_and_drops_punctuation():
    assert slugify("  What's   new?  ") == "whats-new"


def test_slugify_keeps_hyphens_and_underscores():
    assert slugify("pre-flight_check") == "pre-flight_check"


def test_author_id_replaces_non_alphanumerics():
    assert author_id("john.doe@example.com") == "john_doe_example_com"


def test_author_id_is_stable_for_plus_addresses():
    assert author_id("a+b@x.io") == "a_b_x_io"

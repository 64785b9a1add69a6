"""Slug generation for heading anchors and author record keys"""

import re


def slugify(text: str) -> str:
    """Lowercase text, collapse whitespace runs to one hyphen, drop anything but word chars and hyphens."""
    text = text.strip().lower()
    text = re.sub(r'\s+', '-', text)
    return re.sub(r'[^\w-]', '', text)


def author_id(email: str) -> str:
    """Filesystem-safe record key for an author email (non-alphanumerics become underscores)."""
    return re.sub(r'[^A-Za-z0-9]', '_', str(email).strip())

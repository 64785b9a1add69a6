"""Project scaffolding for the ``init`` command"""

import logging
from pathlib import Path

import yaml

from md2pdf.config import CONFIG_FILE
from md2pdf.core.authors import BUNDLED_TEMPLATE
from md2pdf.core.utils.slug import author_id


logger = logging.getLogger(__name__)

PROJECT_DIRS = ("docs", "data/authors/pictures", "assets/templates", "themes")
SAMPLE_EMAIL = "john.doe@example.com"

EXAMPLE_DOC = """\
---
version: 1.0
date: 2025-01-01
license: CC BY 4.0
authors: John Doe <john.doe@example.com>
---

<!-- [[titlepage]] -->

# Example Document: Getting started with md2pdf

<!-- [[toc]] -->

## Introduction

Write your content in Markdown.

> [!note] Callouts
> Blockquotes starting with `[!note]` become callout blocks.

<!-- [[legal]] -->
> Quoted legal text is styled as a legal excerpt.

## Code

```python
print("hello")
```

<!-- [[authors]] -->
"""

SAMPLE_AUTHOR = {
    "name": "John Doe",
    "email": SAMPLE_EMAIL,
    "bio": "Software developer and technical writer with expertise in documentation systems.",
    "website": "https://johndoe.dev",
}

README = """\
# {name}

This project was initialized with md2pdf.

- `docs/` - markdown documents (a sibling `.js` file is embedded into the page)
- `data/authors/` - author records, one YAML file per author
- `data/authors/pictures/` - author pictures (`<author id>.jpg` or `.png`)
- `assets/templates/author.yaml` - template for new author records
- `themes/` - local themes
- `{config}` - project configuration

Generate a PDF:

    md2pdf convert docs/example.md --html
"""


def _write_new(path: Path, text: str) -> bool:
    if path.exists():
        logger.info("Keeping existing %s", path)
        return False
    path.write_text(text, encoding="utf-8")
    return True


def init_project(name: str, theme: str = "default") -> Path:
    """Create the project skeleton under ``name``; existing files are left untouched."""
    root = Path(name).resolve()
    for d in PROJECT_DIRS:
        (root / d).mkdir(parents=True, exist_ok=True)

    config = {
        "theme": theme,
        "title_page": False,
        "authors_dir": "../data/authors",
        "author_template": "../assets/templates/author.yaml",
    }
    _write_new(root / "docs" / CONFIG_FILE, yaml.safe_dump(config, sort_keys=False))
    _write_new(root / "assets" / "templates" / "author.yaml", BUNDLED_TEMPLATE.read_text(encoding="utf-8"))
    _write_new(root / "docs" / "example.md", EXAMPLE_DOC)
    _write_new(root / "data" / "authors" / f"{author_id(SAMPLE_EMAIL)}.yaml",
               yaml.safe_dump(SAMPLE_AUTHOR, sort_keys=False))
    _write_new(root / "README.md", README.format(name=Path(name).name, config=f"docs/{CONFIG_FILE}"))
    return root

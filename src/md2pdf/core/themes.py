"""Theme resolution: bundled themes, local overrides, and the legacy asset set"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from md2pdf.core.models import PdfOptions


logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parent.parent
BUNDLED_THEMES_DIR = PACKAGE_ROOT / "themes"
LEGACY_ASSETS_DIR = PACKAGE_ROOT / "assets"
LOCAL_THEMES_DIR = "themes"
DEFAULT_THEME = "default"
THEME_CONFIG = "theme.json"


class ThemeNotFoundError(LookupError):
    pass


class Theme(BaseModel):
    name:                    str
    path:                    Path
    header_template:         Path
    footer_template:         Path
    main_content_stylesheet: Path
    title_page_stylesheet:   Path
    pdf_options:             PdfOptions = Field(default_factory=PdfOptions)


def _theme_from_dir(path: Path, name: str) -> Theme:
    """Build a Theme from a directory; theme.json may override file names and pdfOptions."""
    config: dict = {}
    config_path = path / THEME_CONFIG
    if config_path.is_file():
        try:
            config = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning("Invalid theme config in %s: %s", config_path, e)

    def _file(key: str, default: str) -> Path:
        return path / config.get(key, default)

    return Theme(
        name=name,
        path=path,
        header_template=_file("headerTemplate", "header.html"),
        footer_template=_file("footerTemplate", "footer.html"),
        main_content_stylesheet=_file("mainContentStylesheet", "main-content.css"),
        title_page_stylesheet=_file("titlePageStylesheet", "title-page.css"),
        pdf_options=PdfOptions.model_validate(config.get("pdfOptions") or {}),
    )


def theme_candidates(name: str, cwd: Optional[Path] = None) -> list[tuple[str, Path]]:
    """Ordered (name, directory) fallbacks: bundled, local themes dir, bundled default."""
    cwd = Path(cwd or Path.cwd())
    return [
        (name, BUNDLED_THEMES_DIR / name),
        (name, cwd / LOCAL_THEMES_DIR / name),
        (DEFAULT_THEME, BUNDLED_THEMES_DIR / DEFAULT_THEME),
    ]


def resolve_theme(name: str = DEFAULT_THEME, cwd: Optional[Path] = None, legacy_dir: Path = LEGACY_ASSETS_DIR) -> Theme:
    """Resolve a theme by name, falling back to the default theme and then the legacy assets."""
    for theme_name, path in theme_candidates(name, cwd):
        if path.is_dir():
            if theme_name != name:
                logger.warning("Theme %r not found, using %r", name, theme_name)
            return _theme_from_dir(path, theme_name)

    if (legacy_dir / "header.html").is_file():
        logger.warning("No theme directory found, using legacy assets in %s", legacy_dir)
        return _theme_from_dir(legacy_dir, "legacy")
    raise ThemeNotFoundError(f"Theme {name!r} not found and no fallback assets are available")


def list_themes(cwd: Optional[Path] = None) -> list[tuple[str, str]]:
    """Return sorted (name, origin) pairs for bundled and local themes."""
    cwd = Path(cwd or Path.cwd())
    found: dict[str, str] = {}
    for origin, root in (("built-in", BUNDLED_THEMES_DIR), ("local", cwd / LOCAL_THEMES_DIR)):
        if root.is_dir():
            for p in root.iterdir():
                if p.is_dir() and not p.name.startswith(("_", ".")):
                    found[p.name] = origin
    return sorted(found.items())

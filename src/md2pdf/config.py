"""Application configuration: settings schema and md2pdf.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from md2pdf.core.models import PdfOptions


CONFIG_FILE = "md2pdf.yaml"
ENV_PREFIX = "MD2PDF_"


class Settings(BaseModel):
    theme:           str = Field(default="default", description="Theme name")
    title_page:      bool = Field(default=False, description="Always add a title page, not only when marked")
    authors_dir:     str = Field(default="data/authors", description="Author record store")
    author_template: Optional[str] = Field(default=None, description="Template for new author records")
    base_url:        str = Field(default="http://md2pdf.localhost", description="Origin the engine loads assets from")
    render_timeout:  float = Field(default=60.0, gt=0, description="Seconds before a render is abandoned")
    headless:        bool = True
    placeholder_policy: str = Field(default="keep", pattern="^(keep|error)$", description="Unknown {{key}} handling")
    pdf_options:     Optional[PdfOptions] = None


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config {path}: expected a mapping, got {type(data).__name__}")
    return data


def load_config(
    project_dir: Path = None,
    config_path: Optional[str] = None,
    overrides: dict[str, Any] = None,
    ) -> Settings:
    """Load Settings from md2pdf.yaml, then MD2PDF_<FIELD> env vars, then non-None CLI overrides.

    Relative ``authors_dir`` / ``author_template`` values are resolved against
    ``project_dir`` (the input document's directory).
    """
    project_dir = Path(project_dir or Path.cwd())
    data: dict[str, Any] = {}
    if config_path:
        path = Path(config_path)
        if not path.is_file():
            raise ValueError(f"Invalid config {path}: file not found")
        data = _read_config_file(path)
    elif (project_dir / CONFIG_FILE).is_file():
        data = _read_config_file(project_dir / CONFIG_FILE)

    for name in Settings.model_fields:
        if name == "pdf_options":
            continue
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        settings = Settings(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid config: {e}") from e

    authors_dir = Path(settings.authors_dir)
    if not authors_dir.is_absolute():
        settings.authors_dir = str(project_dir / authors_dir)
    if settings.author_template and not Path(settings.author_template).is_absolute():
        settings.author_template = str(project_dir / settings.author_template)
    return settings

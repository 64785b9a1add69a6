"""Data models shared by the metadata, rendering and assembly steps"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MessageLog(BaseModel):
    """Insertion-ordered errors/warnings keyed by message, each with detail lines."""
    errors:   dict[str, list[str]] = Field(default_factory=dict)
    warnings: dict[str, list[str]] = Field(default_factory=dict)

    def add_error(self, message: str, details: list[str] = None) -> None:
        self.errors.setdefault(message, []).extend(details or [])

    def add_warning(self, message: str, details: list[str] = None) -> None:
        self.warnings.setdefault(message, []).extend(details or [])

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class Author(BaseModel):
    """A declared document author as parsed from front matter."""
    name:  str = ""
    email: str = ""


class AuthorRecord(BaseModel):
    """Persisted per-author data; unknown keys from the record file are kept."""
    model_config = ConfigDict(extra="allow")

    name:        str = ""
    email:       str = ""
    bio:         Optional[str] = None
    picture_url: Optional[str] = None


class PageMetadata(BaseModel):
    """Document metadata built by the resolver and read by every later step."""
    model_config = ConfigDict(extra="allow")

    title:          Optional[str] = None
    subtitle:       Optional[str] = None
    version:        Optional[Any] = None
    date:           Optional[Any] = None
    license:        Optional[str] = None
    authors:        list[Author] = Field(default_factory=list)
    author_data:    list[AuthorRecord] = Field(default_factory=list)
    title_page:     bool = False
    table_of_content: Optional[list[int]] = None    # None: renderer default levels


class PdfOptions(BaseModel):
    """Paged-media options passed to the rendering engine's print call.

    Field names match the engine's keyword arguments; theme files may use the
    camelCase spelling (``printBackground``).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    display_header_footer: bool = True
    print_background:      bool = True
    prefer_css_page_size:  bool = Field(default=True, alias="preferCSSPageSize")
    scale:                 float = Field(default=1.0, ge=0.1, le=2.0)
    header_template:       Optional[str] = None
    footer_template:       Optional[str] = None
    format:                Optional[str] = None
    landscape:             Optional[bool] = None
    margin:                Optional[dict[str, str]] = None

    def to_engine_kwargs(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


@dataclass
class ResolvedMarkdown:
    """Result of metadata resolution: clean body, metadata, and message log."""
    markdown: str
    metadata: PageMetadata
    messages: MessageLog


@dataclass(frozen=True)
class AuthorFound:
    record: AuthorRecord
    path:   Path


@dataclass(frozen=True)
class AuthorStubCreated:
    path: Path


AuthorLookup = Union[AuthorFound, AuthorStubCreated]


@dataclass
class ConversionResult:
    output_path: Path
    html_path:   Optional[Path]
    theme:       str
    messages:    MessageLog
    page_count:  int

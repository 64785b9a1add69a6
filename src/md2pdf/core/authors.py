"""File-backed author record store: lookup, validation, and stub creation"""

import logging
import re
from pathlib import Path
from typing import Optional

import yaml

from md2pdf.core.models import AuthorFound, AuthorLookup, AuthorRecord, AuthorStubCreated
from md2pdf.core.utils.slug import author_id


logger = logging.getLogger(__name__)

BUNDLED_TEMPLATE = Path(__file__).resolve().parent.parent / "assets" / "templates" / "author.yaml"
PICTURES_DIR = "pictures"
PICTURE_EXTENSIONS = (".jpg", ".png")

_PLACEHOLDER_RE = {
    "email":    re.compile(r'{{\s*email\s*}}'),
    "authorId": re.compile(r'{{\s*authorId\s*}}'),
}


class AuthorStore:
    """One ``<author_id>.yaml`` per author under ``directory``, pictures in ``directory/pictures``.

    Records are never deleted or rewritten; a missing record is created once
    from the template (exclusive create, so concurrent creators of the same
    record write it at most once).
    """

    def __init__(self, directory: Path, template: Optional[Path] = None):
        self.directory = Path(directory)
        self.template = Path(template) if template else BUNDLED_TEMPLATE

    def record_path(self, email: str) -> Path:
        return self.directory / f"{author_id(email)}.yaml"

    def picture_path(self, email: str) -> Optional[Path]:
        """Return the first existing picture for the author, or None."""
        base = self.directory / PICTURES_DIR / author_id(email)
        for ext in PICTURE_EXTENSIONS:
            candidate = base.with_suffix(ext)
            if candidate.is_file():
                return candidate
        return None

    def stub_text(self, email: str) -> str:
        text = self.template.read_text(encoding="utf-8")
        text = _PLACEHOLDER_RE["email"].sub(lambda _: email, text)
        return _PLACEHOLDER_RE["authorId"].sub(lambda _: author_id(email), text)

    def load(self, path: Path) -> AuthorRecord:
        """Parse a record file; raises ValueError when it is not a YAML mapping."""
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid author record {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid author record {path}: expected a mapping, got {type(data).__name__}")
        return AuthorRecord.model_validate(data)

    def resolve(self, name: str, email: str) -> AuthorLookup:
        """Return AuthorFound for an existing record, else create a stub and return AuthorStubCreated."""
        path = self.record_path(email)
        if not path.exists():
            text = self.stub_text(email)
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                with path.open("x", encoding="utf-8") as f:
                    f.write(text)
            except FileExistsError:
                logger.debug("Author record %s created concurrently", path)
            else:
                logger.info("Created author record stub %s", path)
                return AuthorStubCreated(path=path)

        record = self.load(path)
        picture = self.picture_path(email)
        record.picture_url = str(picture) if picture else None
        record.name = name
        record.email = email
        return AuthorFound(record=record, path=path)

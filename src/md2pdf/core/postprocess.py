"""HTML DOM post-processing: legal excerpts, image inlining, link absolutization"""

import base64
import logging
import re
from pathlib import Path
from urllib.parse import quote, unquote

from bs4 import BeautifulSoup, Comment, NavigableString, Tag


logger = logging.getLogger(__name__)

LEGAL_MARKER = "[[legal]]"
LEGAL_CLASS = "legal-excerpt"
SCHEME_RE = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.\-]+:')
URL_ATTRS = (
    ("a", "href", {}),
    ("img", "src", {}),
    ("script", "src", {}),
    ("link", "href", {"rel": "stylesheet"}),
)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _next_element_sibling(node):
    """Skip whitespace-only text siblings."""
    nxt = node.next_sibling
    while isinstance(nxt, NavigableString) and not isinstance(nxt, Comment) and not nxt.strip():
        nxt = nxt.next_sibling
    return nxt


def mark_legal_excerpts(html: str) -> str:
    """Add the legal-excerpt class to a blockquote directly following a ``<!-- [[legal]] -->`` comment."""
    soup = _soup(html)
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment) and s.strip() == LEGAL_MARKER):
        nxt = _next_element_sibling(comment)
        if isinstance(nxt, Tag) and nxt.name == "blockquote":
            classes = nxt.get("class", [])
            if LEGAL_CLASS not in classes:
                nxt["class"] = [*classes, LEGAL_CLASS]
    return str(soup)


def _mime_type(path: Path) -> str:
    ext = path.suffix[1:].lower()
    return "image/svg+xml" if ext == "svg" else f"image/{ext}"


def inline_images(html: str, base_dir: Path) -> str:
    """Replace local ``img`` sources with base64 data URIs; missing files are logged and left alone."""
    soup = _soup(html)
    for img in soup.find_all("img", src=True):
        src = img["src"]
        if not src or src.startswith("data:") or src.startswith(("http:", "https:")):
            continue
        local = unquote(src)
        img_path = Path(local) if Path(local).is_absolute() else Path(base_dir) / local
        if not img_path.is_file():
            logger.warning("Image not found: %s", img_path)
            continue
        data = base64.b64encode(img_path.read_bytes()).decode("ascii")
        img["src"] = f"data:{_mime_type(img_path)};base64,{data}"
    return str(soup)


def file_url(value: str, base_dir: Path, base_url: str) -> str:
    """Map a local path to ``base_url`` + the percent-encoded absolute path; fragments are kept."""
    path_part, sep, fragment = value.partition("#")
    path_part = unquote(path_part)
    abs_path = Path(path_part) if Path(path_part).is_absolute() else Path(base_dir).resolve() / path_part
    segments = [quote(seg, safe="") for seg in abs_path.as_posix().split("/") if seg]
    return f"{base_url.rstrip('/')}/{'/'.join(segments)}{sep}{fragment}"


def _is_absolute_url(value: str) -> bool:
    return value.startswith("#") or bool(SCHEME_RE.match(value))


def absolutize_links(html: str, base_dir: Path, base_url: str) -> str:
    """Rewrite relative hrefs/srcs on anchors, images, scripts and stylesheets to absolute URLs."""
    soup = _soup(html)
    for tag_name, attr, extra in URL_ATTRS:
        for el in soup.find_all(tag_name, attrs={attr: True, **extra}):
            value = el[attr].strip()
            if value and not _is_absolute_url(value):
                el[attr] = file_url(value, base_dir, base_url)
    return str(soup)

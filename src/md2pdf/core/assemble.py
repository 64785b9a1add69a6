"""In-memory PDF surgery: title page prepending, page labels, and A4 page boxes"""

import logging
from io import BytesIO
from typing import Union

from pypdf import PdfReader, PdfWriter
from pypdf.generic import (
    ArrayObject, DictionaryObject, NameObject, NumberObject, RectangleObject, TextStringObject,
)


logger = logging.getLogger(__name__)

MM_TO_PT = 2.83465
A4_WIDTH = 210 * MM_TO_PT
A4_HEIGHT = 297 * MM_TO_PT
TITLE_LABEL = "Title"

PdfSource = Union[bytes, PdfReader]


def load_pdf(data: bytes) -> PdfWriter:
    """Load PDF bytes into an editable document."""
    return PdfWriter(clone_from=BytesIO(data))


def to_bytes(doc: PdfWriter) -> bytes:
    buf = BytesIO()
    doc.write(buf)
    return buf.getvalue()


def prepend_title_page(doc: PdfWriter, title_pdf: PdfSource) -> PdfWriter:
    """Insert the first page of ``title_pdf`` at index 0; existing pages shift down unchanged."""
    reader = title_pdf if isinstance(title_pdf, PdfReader) else PdfReader(BytesIO(title_pdf))
    if not reader.pages:
        raise ValueError("Title page PDF has no pages")
    doc.insert_page(reader.pages[0], index=0)
    return doc


def page_labels(page_count: int, has_title_page: bool) -> list[str]:
    """'Title' then 1..N over the body pages, or 1..N over all pages."""
    if has_title_page and page_count:
        return [TITLE_LABEL] + [str(n) for n in range(1, page_count)]
    return [str(n) for n in range(1, page_count + 1)]


def reset_page_labels(doc: PdfWriter, has_title_page: bool) -> list[str]:
    """Rebuild the catalog's /PageLabels table from the current page count; returns the labels."""
    labels = page_labels(len(doc.pages), has_title_page)
    nums = ArrayObject()
    for idx, label in enumerate(labels):
        nums.append(NumberObject(idx))
        nums.append(DictionaryObject({NameObject("/P"): TextStringObject(label)}))
    doc.root_object[NameObject("/PageLabels")] = DictionaryObject({NameObject("/Nums"): nums})
    return labels


def _a4_box() -> RectangleObject:
    return RectangleObject((0, 0, A4_WIDTH, A4_HEIGHT))


def crop_to_a4(doc: PdfWriter) -> PdfWriter:
    """Normalize every page to A4.

    Pages larger than A4 in either dimension first get a crop box centered on
    the page; media, bleed, trim and art boxes are then always set to A4.
    """
    for index, page in enumerate(doc.pages):
        width = float(page.mediabox.width)
        height = float(page.mediabox.height)
        if width > A4_WIDTH or height > A4_HEIGHT:
            x = (width - A4_WIDTH) / 2
            y = (height - A4_HEIGHT) / 2
            page.cropbox = RectangleObject((x, y, x + A4_WIDTH, y + A4_HEIGHT))
        else:
            logger.debug("Page %d already fits A4: %.2fx%.2f", index, width, height)
        page.mediabox = _a4_box()
        page.bleedbox = _a4_box()
        page.trimbox = _a4_box()
        page.artbox = _a4_box()
    return doc


def set_document_info(doc: PdfWriter, title: str = None, authors: list[str] = ()) -> None:
    info = {}
    if title:
        info["/Title"] = title
    if authors:
        info["/Author"] = ", ".join(authors)
    if info:
        doc.add_metadata(info)

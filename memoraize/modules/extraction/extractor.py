"""Plain-text extraction from generation inputs.

``topic`` input is used verbatim; Word documents are read with python-docx and
images go through Tesseract OCR. Parsing runs in a worker thread so the event
loop stays free.
"""

from __future__ import annotations

import asyncio
import io
from typing import Union

import pytesseract
from docx import Document as DocxDocument
from PIL import Image

from memoraize.core.config import settings


class ExtractionError(Exception):
    """Raised when an uploaded file cannot be turned into text."""


def extract_word_text(data: bytes) -> str:
    try:
        doc = DocxDocument(io.BytesIO(data))
    except Exception as e:
        raise ExtractionError(f"Could not read Word document: {e}") from e
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())


def extract_image_text(data: bytes, lang: str | None = None) -> str:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except Exception as e:
        raise ExtractionError(f"Could not open image: {e}") from e
    try:
        return pytesseract.image_to_string(image, lang=lang or settings.extraction.ocr_lang)
    except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
        raise ExtractionError(f"OCR failed: {e}") from e


async def extract_text(kind: str, payload: Union[str, bytes]) -> str:
    """Return the text for an input of the given kind."""
    if kind == "topic":
        if isinstance(payload, bytes):
            try:
                return payload.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ExtractionError(f"Topic text is not valid UTF-8: {e}") from e
        return payload
    if not isinstance(payload, bytes):
        raise ExtractionError(f"{kind} input needs file bytes")
    if kind == "word":
        return await asyncio.to_thread(extract_word_text, payload)
    if kind == "image":
        return await asyncio.to_thread(extract_image_text, payload)
    raise ExtractionError(f"Unsupported input type: {kind}")

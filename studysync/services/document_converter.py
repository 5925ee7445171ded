"""
Document format conversion between PDF, DOCX and plain text.

Conversion is text-level: the source text is extracted (PyMuPDF for PDF,
python-docx for DOCX) and re-emitted in the target format.  Layout, images
and styling are not preserved.

Usage
-----
    converter = DocumentConverter()
    result = await converter.convert("/uploads/ab12.docx", "pdf")
    result.filename   # "converted_<hex>.pdf", stored in UPLOAD_DIR
"""
from __future__ import annotations

import asyncio
import logging
import os
import textwrap
import uuid
from dataclasses import dataclass
from typing import List, Optional

import fitz  # PyMuPDF
from docx import Document as DocxDocument

from studysync.config import settings
from studysync.utils.helpers import get_file_extension, safe_remove

logger = logging.getLogger(__name__)

# PDF page layout (A4, 1-inch margins, Helvetica 11pt)
_PAGE_WIDTH, _PAGE_HEIGHT = fitz.paper_size("a4")
_MARGIN = 72
_FONT_SIZE = 11
_LINE_HEIGHT = 14
_WRAP_COLUMNS = 90


class ConversionError(Exception):
    """The requested conversion is unsupported or the source is unreadable."""


@dataclass
class ConversionResult:
    filename: str
    path: str
    output_format: str


class DocumentConverter:
    """Converts stored uploads between the formats in settings.CONVERSION_FORMATS."""

    def __init__(self, output_dir: Optional[str] = None) -> None:
        self.output_dir = output_dir or settings.UPLOAD_DIR

    async def convert(
        self,
        source_path: str,
        output_format: str,
        source_name: Optional[str] = None,
    ) -> ConversionResult:
        """
        Convert *source_path* into *output_format*.

        Args:
            source_path:   Stored upload.
            output_format: Target extension, e.g. "pdf" (case-insensitive).
            source_name:   Client filename; its extension decides the input format.

        Raises:
            ConversionError: unsupported source/target or unreadable input.
        """
        target = output_format.lower().lstrip(".")
        source = get_file_extension(source_name or source_path)

        if target not in settings.CONVERSION_FORMATS:
            raise ConversionError(f"Unsupported output format: {output_format!r}")
        if source not in settings.CONVERSION_FORMATS:
            raise ConversionError(f"Unsupported input format: {source or 'unknown'!r}")
        if source == target:
            raise ConversionError(f"File is already in {target} format")

        os.makedirs(self.output_dir, exist_ok=True)
        filename = f"converted_{uuid.uuid4().hex}.{target}"
        out_path = os.path.join(self.output_dir, filename)

        try:
            text = await asyncio.to_thread(_extract_text, source_path, source)
            await asyncio.to_thread(_WRITERS[target], text, out_path)
        except ConversionError:
            safe_remove(out_path)
            raise
        except Exception as exc:
            safe_remove(out_path)
            raise ConversionError(f"Conversion {source} -> {target} failed: {exc}") from exc

        logger.info("Converted %s (%s) -> %s", source_name or source_path, source, filename)
        return ConversionResult(filename=filename, path=out_path, output_format=target)


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

def _extract_text(path: str, fmt: str) -> str:
    if fmt == "pdf":
        try:
            doc = fitz.open(path)
        except Exception as exc:
            raise ConversionError(f"Cannot open PDF file: {exc}") from exc
        if doc.needs_pass:
            doc.close()
            raise ConversionError("PDF is password-protected. Please provide an unlocked copy.")
        try:
            return "\n\n".join(page.get_text("text").strip() for page in doc)
        finally:
            doc.close()

    if fmt == "docx":
        try:
            doc = DocxDocument(path)
        except Exception as exc:
            raise ConversionError(f"Cannot open DOCX file: {exc}") from exc
        parts: List[str] = [p.text for p in doc.paragraphs]
        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    parts.append(" | ".join(cells))
        return "\n".join(parts)

    with open(path, "r", encoding="utf-8", errors="replace") as fh:
        return fh.read()


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------

def _write_txt(text: str, path: str) -> None:
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(text)


def _write_docx(text: str, path: str) -> None:
    doc = DocxDocument()
    for paragraph in text.split("\n"):
        doc.add_paragraph(paragraph)
    doc.save(path)


def _write_pdf(text: str, path: str) -> None:
    lines: List[str] = []
    for raw in text.splitlines() or [""]:
        lines.extend(textwrap.wrap(raw, _WRAP_COLUMNS) or [""])

    per_page = int((_PAGE_HEIGHT - 2 * _MARGIN) // _LINE_HEIGHT)
    doc = fitz.open()
    try:
        for start in range(0, len(lines), per_page):
            page = doc.new_page(width=_PAGE_WIDTH, height=_PAGE_HEIGHT)
            y = _MARGIN
            for line in lines[start:start + per_page]:
                if line:
                    page.insert_text((_MARGIN, y), line, fontsize=_FONT_SIZE, fontname="helv")
                y += _LINE_HEIGHT
        doc.save(path)
    finally:
        doc.close()


_WRITERS = {
    "txt": _write_txt,
    "docx": _write_docx,
    "pdf": _write_pdf,
}

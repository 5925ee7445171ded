"""
OCR for scanned pages and photos of documents.

Images are opened with Pillow, normalised to RGB/greyscale, and passed to
Tesseract.  Scanned PDFs are rasterised page by page with PyMuPDF at 2x
scale before OCR.
"""
from __future__ import annotations

import asyncio
import io
import logging
from typing import List

import fitz  # PyMuPDF
import pytesseract
from PIL import Image, UnidentifiedImageError

from studysync.config import settings
from studysync.utils.helpers import get_file_extension

logger = logging.getLogger(__name__)


class ScanError(Exception):
    """The file could not be read as an image or OCR failed."""


class DocumentScanner:
    """Extracts text from image files (and image-only PDFs) with Tesseract."""

    def __init__(self, language: str = "eng") -> None:
        self.language = language
        if settings.TESSERACT_CMD:
            pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD

    async def scan(self, file_path: str, original_name: str = "") -> str:
        """
        OCR a stored upload.

        Args:
            file_path:     Path to the saved file.
            original_name: Client filename, used only to detect PDFs.

        Returns:
            Extracted text, stripped (may be empty for blank pages).

        Raises:
            ScanError: Unreadable image or Tesseract failure.
        """
        ext = get_file_extension(original_name or file_path)
        # Tesseract is a blocking subprocess call; keep it off the event loop
        if ext == "pdf":
            text = await asyncio.to_thread(self._scan_pdf, file_path)
        else:
            text = await asyncio.to_thread(self._scan_image, file_path)
        logger.info("OCR extracted %d characters from %s", len(text), original_name or file_path)
        return text

    def _scan_image(self, file_path: str) -> str:
        try:
            with Image.open(file_path) as img:
                img.load()
                prepared = _prepare(img)
        except (UnidentifiedImageError, OSError) as exc:
            raise ScanError(f"Cannot open image: {exc}") from exc
        return self._ocr(prepared)

    def _scan_pdf(self, file_path: str) -> str:
        try:
            doc = fitz.open(file_path)
        except Exception as exc:
            raise ScanError(f"Cannot open PDF file: {exc}") from exc

        pages: List[str] = []
        try:
            for page in doc:
                pix = page.get_pixmap(matrix=fitz.Matrix(2, 2))
                img = Image.open(io.BytesIO(pix.tobytes("png")))
                text = self._ocr(_prepare(img))
                if text:
                    pages.append(text)
        finally:
            doc.close()
        return "\n\n".join(pages)

    def _ocr(self, img: Image.Image) -> str:
        try:
            return pytesseract.image_to_string(img, lang=self.language).strip()
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            raise ScanError(f"OCR failed: {exc}") from exc


def _prepare(img: Image.Image) -> Image.Image:
    """Flatten transparency and palettes; Tesseract wants L or RGB."""
    if img.mode in ("RGBA", "LA", "P"):
        img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        return background
    if img.mode not in ("L", "RGB"):
        return img.convert("RGB")
    return img

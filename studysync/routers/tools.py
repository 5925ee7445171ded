"""
File and utility tool endpoints.

Route summary
-------------
POST /api/upload               - store a file (multipart ``file``)
POST /api/convert-document     - convert pdf/docx/txt (``file`` + ``output_format``)
GET  /api/download/{filename}  - fetch a stored or converted file
POST /api/scan-document        - OCR an image or scanned PDF (multipart ``image``)
POST /api/generate-qr          - render text / URL / Wi-Fi / contact as a QR PNG
"""
import logging
import os
from typing import Optional, Tuple

import aiofiles
from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse

from studysync.config import settings
from studysync.models.schemas import (
    ConversionResponse,
    QRRequest,
    QRResponse,
    ScanResponse,
    UploadResponse,
)
from studysync.services.document_converter import ConversionError, DocumentConverter
from studysync.services.document_scanner import DocumentScanner, ScanError
from studysync.services.qr import build_qr_payload, generate_qr_data_url
from studysync.utils.helpers import (
    format_file_size,
    get_file_extension,
    safe_filename,
    safe_remove,
    stored_filename,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _save_upload(file: UploadFile) -> Tuple[str, str, int]:
    """
    Stream *file* into UPLOAD_DIR under a random name.

    Returns:
        (stored name, path on disk, size in bytes)

    Raises:
        HTTPException 413 when the upload exceeds MAX_FILE_SIZE.
    """
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    stored_name = stored_filename(file.filename)
    file_path = os.path.join(settings.UPLOAD_DIR, stored_name)
    file_size = 0

    async with aiofiles.open(file_path, "wb") as out:
        while True:
            chunk = await file.read(1024 * 1024)   # 1 MB slices
            if not chunk:
                break
            file_size += len(chunk)
            if file_size > settings.MAX_FILE_SIZE:
                await out.close()
                safe_remove(file_path)
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail=(
                        f"File exceeds the {settings.MAX_FILE_SIZE // (1024 * 1024)} MB "
                        "size limit."
                    ),
                )
            await out.write(chunk)

    logger.info("Saved %r -> %s (%d bytes)", file.filename, file_path, file_size)
    return stored_name, file_path, file_size


def _require_file(file: Optional[UploadFile], message: str) -> UploadFile:
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
    return file


@router.post("/upload", response_model=UploadResponse)
async def upload_file(file: Optional[UploadFile] = File(None)) -> UploadResponse:
    file = _require_file(file, "No file uploaded")
    stored_name, file_path, size = await _save_upload(file)
    return UploadResponse(
        filename=stored_name,
        originalname=file.filename,
        path=file_path,
        size=size,
        size_formatted=format_file_size(size),
        mimetype=file.content_type,
    )


@router.post("/convert-document", response_model=ConversionResponse)
async def convert_document(
    file: Optional[UploadFile] = File(None),
    output_format: Optional[str] = Form(None),
) -> ConversionResponse:
    """
    Convert an uploaded document.  The converted file is kept in UPLOAD_DIR
    and served by ``download_url``; the uploaded source is discarded.
    """
    file = _require_file(file, "No file uploaded")
    if not output_format or not output_format.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Output format is required")

    _, source_path, _ = await _save_upload(file)
    try:
        result = await DocumentConverter().convert(source_path, output_format, source_name=file.filename)
    except ConversionError as exc:
        logger.warning("Conversion of %r failed: %s", file.filename, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    finally:
        safe_remove(source_path)

    return ConversionResponse(
        original_file=file.filename,
        converted_file=result.filename,
        output_format=result.output_format,
        download_url=f"/api/download/{result.filename}",
    )


@router.get("/download/{filename}")
async def download_file(filename: str) -> FileResponse:
    if not safe_filename(filename):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    file_path = os.path.join(settings.UPLOAD_DIR, filename)
    if not os.path.isfile(file_path):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return FileResponse(file_path, filename=filename)


@router.post("/scan-document", response_model=ScanResponse)
async def scan_document(image: Optional[UploadFile] = File(None)) -> ScanResponse:
    """OCR an uploaded photo or scanned PDF.  The upload is kept for download."""
    image = _require_file(image, "No image uploaded")
    ext = get_file_extension(image.filename)
    accepted = [t.lstrip(".") for t in settings.SCAN_IMAGE_TYPES] + ["pdf"]
    if ext not in accepted:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type '.{ext}'. Accepted: {', '.join('.' + t for t in accepted)}",
        )

    stored_name, file_path, _ = await _save_upload(image)
    try:
        text = await DocumentScanner().scan(file_path, image.filename)
    except ScanError as exc:
        safe_remove(file_path)
        logger.warning("Document scan of %r failed: %s", image.filename, exc)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))

    return ScanResponse(
        filename=stored_name,
        original_name=image.filename,
        extracted_text=text,
        url=f"/api/download/{stored_name}",
    )


@router.post("/generate-qr", response_model=QRResponse)
async def generate_qr(body: QRRequest) -> QRResponse:
    try:
        payload = build_qr_payload(
            body.type.value,
            text=body.text,
            url=body.url,
            wifi=body.wifi.model_dump(),
            contact=body.contact.model_dump(),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return QRResponse(qr_code=generate_qr_data_url(payload), text=payload)

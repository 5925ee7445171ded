"""
QR code generation.

Builds the text payload for the supported QR kinds (plain text, URL, Wi-Fi
network, contact card) and renders it as a base64 PNG data URL.
"""
import base64
import io
import logging
from typing import Mapping, Optional

import qrcode
from qrcode.constants import ERROR_CORRECT_L

from studysync.config import settings
from studysync.services.calendar_export import build_vcard

logger = logging.getLogger(__name__)


def build_wifi_payload(ssid: str, password: str = "", security: str = "WPA") -> str:
    """``WIFI:T:<security>;S:<ssid>;P:<password>;;`` as read by phone cameras."""
    return f"WIFI:T:{security};S:{ssid};P:{password};;"


def build_qr_payload(
    kind: str = "text",
    text: str = "",
    url: str = "",
    wifi: Optional[Mapping[str, str]] = None,
    contact: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Resolve the string to encode for *kind*.

    Raises:
        ValueError: when the payload would be empty.
    """
    kind = getattr(kind, "value", kind)
    if kind == "url":
        payload = url.strip() or text.strip()
    elif kind == "wifi":
        wifi = wifi or {}
        ssid = (wifi.get("ssid") or "").strip()
        payload = build_wifi_payload(
            ssid, wifi.get("password") or "", wifi.get("security") or "WPA"
        ) if ssid else ""
    elif kind == "contact":
        contact = contact or {}
        payload = build_vcard(
            name=contact.get("name") or "",
            phone=contact.get("phone") or "",
            email=contact.get("email") or "",
            organization=contact.get("organization") or "",
        ) if any((contact.get(k) or "").strip() for k in ("name", "phone", "email")) else ""
    else:
        payload = text

    if not payload or not payload.strip():
        raise ValueError("Text is required")
    return payload


def generate_qr_data_url(data: str, size: Optional[int] = None) -> str:
    """Render *data* as a square PNG and return it as ``data:image/png;base64,...``."""
    size = size or settings.QR_SIZE
    qr = qrcode.QRCode(
        version=1,
        error_correction=ERROR_CORRECT_L,
        box_size=10,
        border=settings.QR_BORDER,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    img = img.resize((size, size))

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("utf-8")

    logger.info("Generated %dpx QR code for: %.50s", size, data)
    return f"data:image/png;base64,{encoded}"

from __future__ import annotations

import io
import json
import re
from dataclasses import dataclass
from typing import BinaryIO, Optional

import qrcode
from PIL import Image
from pyzbar.pyzbar import decode as pyzbar_decode

# REG-2026-A3K7MN or REG-2026-A3K7MN-1 (attendee index suffix)
QR_PAYLOAD_PATTERN = re.compile(r"^(REG-\d{4}-[A-Z0-9]+?)(?:-(\d+))?$")


@dataclass(frozen=True)
class QRParseResult:
    valid: bool
    registration_id: Optional[str] = None
    attendee_index: Optional[int] = None
    error: Optional[str] = None


def _from_text(text: str) -> Optional[QRParseResult]:
    match = QR_PAYLOAD_PATTERN.match(text.upper())
    if not match:
        return None
    index = int(match.group(2)) if match.group(2) is not None else None
    return QRParseResult(valid=True, registration_id=match.group(1), attendee_index=index)


def parse_qr_code(raw: Optional[str]) -> QRParseResult:
    """Parse a scanned payload.

    Accepts ``REG-YYYY-CODE``, ``REG-YYYY-CODE-N`` or a JSON object with a
    ``registrationId`` (and optional ``attendeeIndex``).
    """

    text = (raw or "").strip()
    if not text:
        return QRParseResult(valid=False, error="Empty QR code")

    if text.upper().startswith("REG-"):
        parsed = _from_text(text)
        return parsed or QRParseResult(valid=False, error="Unrecognized registration code")

    try:
        payload = json.loads(text)
    except ValueError:
        return QRParseResult(valid=False, error="Unrecognized QR code format")

    if not isinstance(payload, dict) or not payload.get("registrationId"):
        return QRParseResult(valid=False, error="QR code has no registration ID")

    parsed = _from_text(str(payload["registrationId"]).strip())
    if not parsed:
        return QRParseResult(valid=False, error="Unrecognized registration code")

    index = payload.get("attendeeIndex", parsed.attendee_index)
    try:
        index = int(index) if index is not None else None
    except (TypeError, ValueError):
        return QRParseResult(valid=False, error="Invalid attendee index")
    return QRParseResult(valid=True, registration_id=parsed.registration_id, attendee_index=index)


def attendee_qr_payload(registration_id: str, attendee_index: int) -> str:
    return f"{registration_id}-{attendee_index}"


def render_qr_png(data: str) -> io.BytesIO:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return buf


def decode_qr_image(stream: BinaryIO) -> list[str]:
    """All QR/barcode payloads found in an uploaded image."""
    img = Image.open(stream).convert("RGB")
    return [d.data.decode("utf-8", errors="replace") for d in pyzbar_decode(img)]

# pyden_site/core/qr.py
from __future__ import annotations
import asyncio
import os
import tempfile
from io import BytesIO
from pathlib import Path

import qrcode
from qrcode.constants import ERROR_CORRECT_M
from PIL import Image

from .config import get_settings
settings = get_settings()

VALIDATE_PATH = "/validate"

def validation_url(public_id: str) -> str:
    return f"{settings.public_base_url}{VALIDATE_PATH}/{public_id}"

def qr_image_url(public_id: str) -> str:
    return f"{settings.qr_image_route.rstrip('/')}/{public_id}.png"

def qr_image_file(public_id: str) -> Path:
    return settings.qr_image_path / f"{public_id}.png"

def render_qr_png(data: str, *, width: int | None = None, border: int | None = None) -> bytes:
    """Encode ``data`` as a square PNG, error correction M, scaled to ``width`` pixels."""
    qr = qrcode.QRCode(
        error_correction=ERROR_CORRECT_M,
        box_size=10,
        border=settings.qr_border if border is None else border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white").get_image().convert("RGB")
    size = width or settings.qr_image_width
    # nearest keeps module edges sharp for scanners
    img = img.resize((size, size), Image.NEAREST)
    b = BytesIO(); img.save(b, format="PNG")
    return b.getvalue()

def _write_png(path: Path, data: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    png = render_qr_png(data)
    fd, tmp_name = tempfile.mkstemp(prefix=".", suffix=".part", dir=path.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(png)
        tmp.replace(path)
    finally:
        # never leave a partial file in the served directory
        tmp.unlink(missing_ok=True)
    return path

async def write_qr_png(public_id: str, data: str) -> Path:
    return await asyncio.to_thread(_write_png, qr_image_file(public_id), data)

def remove_qr_png(public_id: str) -> None:
    qr_image_file(public_id).unlink(missing_ok=True)

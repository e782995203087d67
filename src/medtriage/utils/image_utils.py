# -*- coding: utf-8 -*-
"""Helpers for the base64 scan image carried by analysis results."""

from __future__ import annotations

import base64
import binascii
import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

DEFAULT_MIME_TYPE = "image/png"


def split_data_uri(payload: str) -> tuple[str, str]:
    """Return (mime_type, base64_data) for a data URI or bare base64 text."""
    text = payload.strip()
    if text.startswith("data:") and "," in text:
        header, data = text.split(",", 1)
        mime_type = header[len("data:"):].split(";", 1)[0] or DEFAULT_MIME_TYPE
        return mime_type, data
    return DEFAULT_MIME_TYPE, text


def decode_image_payload(payload: str) -> bytes:
    """Decode the image payload to raw bytes; raises ValueError."""
    _, data = split_data_uri(payload)
    data = "".join(data.split())
    try:
        return base64.b64decode(data.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ValueError(f"Image payload is not valid base64: {exc}") from exc


def write_payload_as_png(payload: str, path: str | Path) -> tuple[Path, tuple[int, int]]:
    """Decode the payload, re-encode it as PNG and return (path, (width, height))."""
    raw = decode_image_payload(payload)
    try:
        with Image.open(io.BytesIO(raw)) as image:
            image.load()
            size = image.size
            if image.mode not in {"1", "L", "LA", "P", "RGB", "RGBA", "I;16"}:
                image = image.convert("RGB")
            file_path = Path(path)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            image.save(file_path, format="PNG")
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError(f"Image payload is not a readable image: {exc}") from exc
    return file_path, size


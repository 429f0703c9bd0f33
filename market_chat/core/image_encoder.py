"""
Image encoding for chat messages.

Images travel as ordinary message content: a data URL
(`data:<mime>;base64,<payload>`), so IMAGE and TEXT messages share one wire
format and differ only by their type tag.
"""

from __future__ import annotations

import asyncio
import base64
import mimetypes
from pathlib import Path
from typing import Optional, Union

from market_chat.core.errors import ImageEncodingError
from market_chat.infra.logging_config import get_logger

logger = get_logger("image_encoder")

DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024

_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)


def sniff_image_type(data: bytes) -> Optional[str]:
    """Detect the image MIME type from magic bytes."""
    for signature, mime_type in _SIGNATURES:
        if data.startswith(signature):
            return mime_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def _too_large(max_bytes: int) -> str:
    return f"图片不能超过 {max_bytes // (1024 * 1024)}MB"


def encode_image_bytes(
    data: bytes,
    mime_type: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
) -> str:
    """Encode raw image bytes as a data URL. Raise ImageEncodingError if not an image."""
    if not data:
        raise ImageEncodingError("图片内容为空")
    if len(data) > max_bytes:
        raise ImageEncodingError(_too_large(max_bytes))
    mime_type = mime_type or sniff_image_type(data)
    if not mime_type or not mime_type.startswith("image/"):
        raise ImageEncodingError("请选择图片文件")
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def _read(path: Path, max_bytes: int) -> bytes:
    try:
        size = path.stat().st_size
        if size > max_bytes:
            raise ImageEncodingError(_too_large(max_bytes))
        return path.read_bytes()
    except OSError as e:
        logger.warning("Could not read image %s: %s", path, e)
        raise ImageEncodingError() from e


async def encode_image(
    path: Union[str, Path], max_bytes: int = DEFAULT_MAX_IMAGE_BYTES
) -> str:
    """Read an image file off the event loop and return it as a data URL."""
    path = Path(path)
    guessed, _ = mimetypes.guess_type(path.name)
    data = await asyncio.to_thread(_read, path, max_bytes)
    mime_type = sniff_image_type(data)
    if mime_type is None and guessed and guessed.startswith("image/"):
        mime_type = guessed
    return encode_image_bytes(data, mime_type=mime_type, max_bytes=max_bytes)

"""
MIME type helpers for pack assets.
"""

import mimetypes
from pathlib import PurePath
from typing import Union

from .data_url import DEFAULT_MIME


def guess_mime(path: Union[str, PurePath], data: bytes = b"") -> str:
    """Guess a MIME type from the file name, then from the leading bytes."""
    mime, _ = mimetypes.guess_type(str(path), strict=False)
    if mime:
        return mime
    return detect_mime(data)


def detect_mime(data: bytes) -> str:
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if data[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:4] == b"OggS":
        return "audio/ogg"
    if data[:4] == b"RIFF" and data[8:12] == b"WAVE":
        return "audio/wav"
    if data[:4] == b"OPAK":
        return "application/x-obsidian-pack"
    return DEFAULT_MIME


def mime_to_ext(mime: str) -> str:
    ext_map = {
        "image/png": ".png",
        "image/jpeg": ".jpg",
        "image/gif": ".gif",
        "image/webp": ".webp",
        "image/svg+xml": ".svg",
        "audio/ogg": ".ogg",
        "audio/wav": ".wav",
        "text/plain": ".txt",
        "application/json": ".json",
        "application/x-obsidian-pack": ".opak",
    }
    if mime in ext_map:
        return ext_map[mime]
    return mimetypes.guess_extension(mime, strict=False) or ".bin"


def format_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.2f} MB"

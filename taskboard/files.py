"""File attachment helpers: mime detection, display categories and upload rules."""

from __future__ import annotations

import math
import mimetypes
import os
from typing import Optional

# Executables and scripts are never accepted as task attachments.
BLOCKED_EXTENSIONS = {
    ".exe", ".bat", ".cmd", ".com", ".scr", ".pif", ".vbs", ".js",
    ".jar", ".class", ".php", ".asp", ".aspx", ".jsp", ".pl",
    ".sh", ".ps1", ".dll", ".sys", ".drv", ".ocx", ".cpl", ".msi",
}

MAX_FILE_SIZE = 10 * 1024 * 1024

CATEGORIES = ["pdf", "image", "document", "spreadsheet", "file"]

_EXTENSION_CATEGORIES = {
    ".pdf": "pdf",
    ".jpg": "image",
    ".jpeg": "image",
    ".png": "image",
    ".gif": "image",
    ".webp": "image",
    ".doc": "document",
    ".docx": "document",
    ".odt": "document",
    ".xls": "spreadsheet",
    ".xlsx": "spreadsheet",
    ".csv": "spreadsheet",
    ".ods": "spreadsheet",
}


def extension_of(name: str) -> str:
    return os.path.splitext(name or "")[1].lower()


def is_extension_blocked(name: str) -> bool:
    return extension_of(name) in BLOCKED_EXTENSIONS


def guess_mime_type(name: str) -> str:
    mime, _ = mimetypes.guess_type(name or "")
    return mime or "application/octet-stream"


def mime_category(name: str = "", mime_type: Optional[str] = None) -> str:
    """Map a file to one of :data:`CATEGORIES`.

    The extension wins; the mime type is only consulted for names without a
    known extension.
    """
    by_ext = _EXTENSION_CATEGORIES.get(extension_of(name))
    if by_ext:
        return by_ext

    mime = (mime_type or "").lower()
    if mime.startswith("image/"):
        return "image"
    if mime == "application/pdf":
        return "pdf"
    if "sheet" in mime or "excel" in mime:
        return "spreadsheet"
    if "word" in mime or "document" in mime:
        return "document"
    return "file"


def format_file_size(size_bytes: int) -> str:
    if size_bytes <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(size_bytes, 1024))), len(units) - 1)
    value = round(size_bytes / math.pow(1024, i), 1)
    if value == int(value):
        value = int(value)
    return f"{value} {units[i]}"

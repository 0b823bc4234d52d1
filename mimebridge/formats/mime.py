"""Mime-type canonicalization and file-name helpers."""

from __future__ import annotations

MIME_ALIASES: dict[str, str] = {
    "audio/x-wav": "audio/wav",
    "audio/vnd.wave": "audio/wav",
    "image/x-icon": "image/vnd.microsoft.icon",
    "image/qoi": "image/x-qoi",
    "video/bink": "video/vnd.radgamettools.bink",
    "video/binka": "audio/vnd.radgamettools.bink",
}

_DOCUMENT_MIMES = {"application/pdf", "application/json", "application/xml"}
_ARCHIVE_MARKERS = ("zip", "tar", "rar", "7z", "gzip", "archive")


def normalize_mime_type(mime: str) -> str:
    """Collapse a mime string to its canonical form.

    Parameters (``; charset=...``) are dropped, case is folded, and legacy
    aliases are mapped through ``MIME_ALIASES``.
    """
    base = mime.split(";", 1)[0].strip().lower()
    return MIME_ALIASES.get(base, base)


def category_from_mime(mime: str) -> str:
    mime = normalize_mime_type(mime)
    if mime.startswith("image/"):
        return "image"
    if mime.startswith("video/"):
        return "video"
    if mime.startswith("audio/"):
        return "audio"
    if mime.startswith("text/") or mime in _DOCUMENT_MIMES:
        return "document"
    if any(marker in mime for marker in _ARCHIVE_MARKERS):
        return "archive"
    return "other"


def base_file_name(name: str) -> str:
    """Strip the last extension; names without one are returned as-is."""
    stem, dot, _ = name.rpartition(".")
    if not dot or not stem:
        return name
    return stem


def with_extension(name: str, extension: str) -> str:
    return f"{base_file_name(name)}.{extension}"

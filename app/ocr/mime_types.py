from pathlib import PurePosixPath

ALLOWED_MIME_TYPES: frozenset[str] = frozenset(
    {"application/pdf", "image/jpeg", "image/jpg", "image/png"}
)

EXTENSION_MIME_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}


def is_allowed_mime_type(mime_type: str | None) -> bool:
    return (mime_type or "").strip().lower() in ALLOWED_MIME_TYPES


def mime_type_from_file_name(file_name: str | None) -> str | None:
    """Map a file name's extension to an allowed MIME type, if any."""
    suffix = PurePosixPath(file_name or "").suffix.lower()
    return EXTENSION_MIME_TYPES.get(suffix)


def resolve_mime_type(mime_type: str | None, file_name: str | None) -> str | None:
    """Prefer the declared MIME type; fall back to the file extension."""
    if is_allowed_mime_type(mime_type):
        return (mime_type or "").strip().lower()
    return mime_type_from_file_name(file_name)

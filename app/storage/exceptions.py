from app.errors.codes import ErrorCode
from app.errors.exceptions import DocumentIntelError


class FileDownloadError(DocumentIntelError):
    """Raised when file bytes cannot be fetched from storage."""

    default_code = ErrorCode.FILE_DOWNLOAD_FAILED


class UnsupportedFileRefError(DocumentIntelError):
    """Raised when a file reference uses an unsupported scheme or host."""

    default_code = ErrorCode.BAD_REQUEST

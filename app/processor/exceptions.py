from app.errors.codes import ErrorCode
from app.errors.exceptions import DocumentIntelError


class ProcessorError(DocumentIntelError):
    """Base exception for upload-processing errors."""


class UnsupportedContentTypeError(ProcessorError):
    """Raised when an uploaded file is not a PDF or a JPG/PNG image."""

    default_code = ErrorCode.BAD_REQUEST


class LaborerNotFoundError(ProcessorError):
    """Raised when the laborer record is missing (e.g. deleted mid-flight)."""

    default_code = ErrorCode.FILE_NOT_FOUND

from app.errors.codes import ErrorCode
from app.errors.exceptions import DocumentIntelError


class OcrError(DocumentIntelError):
    """Raised when text extraction fails; ``code`` names the failure kind."""

    default_code = ErrorCode.OCR_FAILED

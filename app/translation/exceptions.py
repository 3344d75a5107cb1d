from app.errors.codes import ErrorCode
from app.errors.exceptions import DocumentIntelError


class TranslationError(DocumentIntelError):
    """Raised when translating any chunk fails."""

    default_code = ErrorCode.TRANSLATE_FAILED

from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable failure codes surfaced to callers and stored on records."""

    UNAUTHENTICATED = "UNAUTHENTICATED"
    BAD_REQUEST = "BAD_REQUEST"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_DOWNLOAD_FAILED = "FILE_DOWNLOAD_FAILED"

    OCR_API_KEY_MISSING = "OCR_API_KEY_MISSING"
    OCR_QUOTA = "OCR_QUOTA"
    NO_TEXT_DETECTED = "NO_TEXT_DETECTED"
    OCR_TIMEOUT = "OCR_TIMEOUT"
    OCR_AUTH_FAILED = "OCR_AUTH_FAILED"
    OCR_PERMISSION = "OCR_PERMISSION"
    OCR_API_DISABLED = "OCR_API_DISABLED"
    OCR_BAD_REQUEST = "OCR_BAD_REQUEST"
    OCR_PARSE_ERROR = "OCR_PARSE_ERROR"
    OCR_SPACE_ERROR = "OCR_SPACE_ERROR"
    OCR_FAILED = "OCR_FAILED"

    TRANSLATE_PERMISSION = "TRANSLATE_PERMISSION"
    TRANSLATE_AUTH = "TRANSLATE_AUTH"
    TRANSLATE_QUOTA = "TRANSLATE_QUOTA"
    TRANSLATE_API_DISABLED = "TRANSLATE_API_DISABLED"
    TRANSLATE_FAILED = "TRANSLATE_FAILED"

    UNKNOWN = "UNKNOWN"

    def __str__(self) -> str:
        return self.value

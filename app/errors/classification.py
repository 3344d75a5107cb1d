"""Decision tables that map provider failures to error codes.

Each table is an ordered list of rules evaluated top to bottom; the first rule
whose status code or message substring matches wins. Providers embed errors in
response bodies as well as HTTP statuses, so both are inspected.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from app.errors.codes import ErrorCode


@dataclass(frozen=True)
class ErrorRule:
    """One row of a classification table."""

    code: ErrorCode
    message: str
    status_codes: frozenset[int] = field(default_factory=frozenset)
    substrings: tuple[str, ...] = ()

    def matches(self, status: int | None, text: str) -> bool:
        if status is not None and status in self.status_codes:
            return True
        lowered = text.lower()
        return any(fragment in lowered for fragment in self.substrings)


class ErrorClassifier:
    """Evaluates an ordered list of ErrorRule predicates."""

    def __init__(self, rules: Sequence[ErrorRule], fallback: ErrorRule) -> None:
        self._rules = tuple(rules)
        self._fallback = fallback

    @property
    def rules(self) -> tuple[ErrorRule, ...]:
        return self._rules

    def classify(
        self,
        message: str,
        status: int | None = None,
        fallback: ErrorRule | None = None,
    ) -> ErrorRule:
        """Return the first matching rule, or the fallback."""
        for rule in self._rules:
            if rule.matches(status, message or ""):
                return rule
        return fallback or self._fallback


OCR_SPACE_ERRORS = ErrorClassifier(
    rules=[
        ErrorRule(
            ErrorCode.OCR_TIMEOUT,
            "OCR request timed out. The file may be too large. Please try again with a smaller file.",
            status_codes=frozenset({408, 504}),
            substrings=("timed out", "timeout"),
        ),
        ErrorRule(
            ErrorCode.OCR_QUOTA,
            "OCR failed: API quota exceeded. Please try again later.",
            status_codes=frozenset({429}),
            substrings=("quota", "limit", "too many requests"),
        ),
        ErrorRule(
            ErrorCode.OCR_AUTH_FAILED,
            "OCR failed: the OCR service rejected the API key.",
            status_codes=frozenset({401, 403}),
            substrings=("api key", "apikey", "unauthorized"),
        ),
        ErrorRule(
            ErrorCode.OCR_BAD_REQUEST,
            "OCR failed: the OCR service rejected the file.",
            status_codes=frozenset({400}),
            substrings=("invalid file", "not a valid", "unable to recognize the file type"),
        ),
        ErrorRule(
            ErrorCode.NO_TEXT_DETECTED,
            "No text was detected in the document. Please ensure the document contains readable text.",
            substrings=("no text",),
        ),
    ],
    fallback=ErrorRule(ErrorCode.OCR_FAILED, "Failed to extract text from document."),
)

OCR_SPACE_PROCESSING_ERROR = ErrorRule(
    ErrorCode.OCR_SPACE_ERROR,
    "The OCR service could not process the document.",
)

VISION_ERRORS = ErrorClassifier(
    rules=[
        ErrorRule(
            ErrorCode.OCR_API_DISABLED,
            "OCR failed: Google Vision API is not enabled. Please enable it in Google Cloud Console.",
            substrings=("not enabled", "has not been used", "is disabled"),
        ),
        ErrorRule(
            ErrorCode.OCR_PERMISSION,
            "OCR failed: Google Vision API permission denied. Please check IAM roles.",
            status_codes=frozenset({403}),
            substrings=("permission_denied", "permission denied"),
        ),
        ErrorRule(
            ErrorCode.OCR_AUTH_FAILED,
            "OCR failed: Google Vision API authentication failed. Please check credentials.",
            status_codes=frozenset({401}),
            substrings=("unauthenticated",),
        ),
        ErrorRule(
            ErrorCode.OCR_QUOTA,
            "OCR failed: API quota exceeded. Please try again later.",
            status_codes=frozenset({429}),
            substrings=("quota", "limit"),
        ),
        ErrorRule(
            ErrorCode.OCR_TIMEOUT,
            "OCR request timed out. The file may be too large. Please try again with a smaller file.",
            status_codes=frozenset({504}),
            substrings=("deadline", "timed out", "timeout"),
        ),
        ErrorRule(
            ErrorCode.OCR_BAD_REQUEST,
            "OCR failed: the document could not be read by the OCR service.",
            status_codes=frozenset({400}),
        ),
        ErrorRule(
            ErrorCode.NO_TEXT_DETECTED,
            "No text was detected in the document. Please ensure the document contains readable text.",
            substrings=("no text",),
        ),
    ],
    fallback=ErrorRule(ErrorCode.OCR_FAILED, "Failed to extract text from document."),
)

TRANSLATION_ERRORS = ErrorClassifier(
    rules=[
        ErrorRule(
            ErrorCode.TRANSLATE_API_DISABLED,
            "Translation failed: Google Translation API is not enabled. "
            "Please enable it in Google Cloud Console.",
            substrings=("not enabled", "has not been used", "is disabled"),
        ),
        ErrorRule(
            ErrorCode.TRANSLATE_PERMISSION,
            "Translation failed: Google Translation API permission denied. Please check IAM roles.",
            status_codes=frozenset({403}),
            substrings=("permission_denied", "permission denied"),
        ),
        ErrorRule(
            ErrorCode.TRANSLATE_AUTH,
            "Translation failed: Google Translation API authentication failed. Please check credentials.",
            status_codes=frozenset({401}),
            substrings=("unauthenticated",),
        ),
        ErrorRule(
            ErrorCode.TRANSLATE_QUOTA,
            "Translation failed: API quota exceeded. Please try again later.",
            status_codes=frozenset({429}),
            substrings=("quota", "limit"),
        ),
    ],
    fallback=ErrorRule(ErrorCode.TRANSLATE_FAILED, "Failed to translate text."),
)

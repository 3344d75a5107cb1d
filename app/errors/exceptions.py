from typing import ClassVar

from app.errors.codes import ErrorCode


class DocumentIntelError(Exception):
    """Base exception for failures that carry a machine-readable error code.

    ``message`` is safe to show to end users; provider internals stay in the
    exception chain (``__cause__``) and in server-side logs.
    """

    default_code: ClassVar[ErrorCode] = ErrorCode.UNKNOWN

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

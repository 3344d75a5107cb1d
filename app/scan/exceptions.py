from typing import Any, ClassVar

from app.errors.codes import ErrorCode


class ScanError(Exception):
    """Structured failure returned by the contract scan callable.

    ``kind`` follows callable-function error semantics and decides the HTTP
    status; ``code`` is the machine-readable reason clients branch on.
    """

    UNAUTHENTICATED: ClassVar[str] = "unauthenticated"
    INVALID_ARGUMENT: ClassVar[str] = "invalid-argument"
    PERMISSION_DENIED: ClassVar[str] = "permission-denied"
    INTERNAL: ClassVar[str] = "internal"

    HTTP_STATUS: ClassVar[dict[str, int]] = {
        "unauthenticated": 401,
        "invalid-argument": 400,
        "permission-denied": 403,
        "internal": 500,
    }

    def __init__(
        self,
        kind: str,
        code: ErrorCode,
        message: str,
        request_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        if kind not in self.HTTP_STATUS:
            raise ValueError(f"Unknown scan error kind '{kind}'")
        super().__init__(message)
        self.kind = kind
        self.code = code
        self.message = message
        self.request_id = request_id
        self.details = details or {}

    @property
    def http_status(self) -> int:
        return self.HTTP_STATUS[self.kind]

    def to_payload(self, include_details: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "ok": False,
            "errorCode": self.code.value,
            "message": self.message,
            "requestId": self.request_id,
        }
        if include_details and self.details:
            payload["details"] = self.details
        return payload

from dataclasses import dataclass
from typing import Any


def _as_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_str(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


@dataclass(frozen=True)
class ScanRequest:
    """Input of one contract scan; languages default from settings when None."""

    file_ref: str | None
    file_name: str | None = None
    file_type: str | None = None
    file_size_bytes: int | None = None
    requester_id: str | None = None
    source_language: str | None = None
    target_language: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any], requester_id: str | None) -> "ScanRequest":
        """Build from a callable body; ``fileUrl`` and ``fileRef`` are aliases."""
        return cls(
            file_ref=_as_str(payload.get("fileUrl")) or _as_str(payload.get("fileRef")),
            file_name=_as_str(payload.get("fileName")),
            file_type=_as_str(payload.get("fileType")),
            file_size_bytes=_as_int(payload.get("fileSize")),
            requester_id=requester_id,
            source_language=_as_str(payload.get("sourceLanguage")),
            target_language=_as_str(payload.get("targetLanguage")),
        )


@dataclass(frozen=True)
class ScanResult:
    source_text: str
    translated_text: str
    request_id: str
    source_language: str
    target_language: str

    def to_response(self) -> dict[str, Any]:
        # english/spanish mirror originalText/translatedText for older clients
        return {
            "ok": True,
            "english": self.source_text,
            "spanish": self.translated_text,
            "originalText": self.source_text,
            "translatedText": self.translated_text,
            "requestId": self.request_id,
            "sourceLanguage": self.source_language,
            "targetLanguage": self.target_language,
        }

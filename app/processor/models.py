import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

W9_UPLOAD_PATH = re.compile(
    r"^users/(?P<user_id>[^/]+)/laborers/(?P<laborer_id>[^/]+)/documents/w9/(?P<file_name>.+)$"
)
COI_UPLOAD_PATH = re.compile(r"^users/(?P<user_id>[^/]+)/prequal/coi/(?P<file_name>.+)$")


class OcrStatus(str, Enum):
    """W-9 OCR state stored on the laborer record as ``w9OcrStatus``."""

    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETE = "complete"
    NEEDS_REVIEW = "needs_review"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class UploadEvent:
    """A finalized storage object, as delivered by the upload trigger."""

    path: str
    bucket: str
    content_type: str = ""
    media_link: str | None = None

    @classmethod
    def from_resource(cls, resource: dict[str, Any]) -> "UploadEvent":
        """Build from a storage object resource (``name``, ``bucket``, ...)."""
        return cls(
            path=resource.get("name") or "",
            bucket=resource.get("bucket") or "",
            content_type=resource.get("contentType") or "",
            media_link=resource.get("mediaLink"),
        )

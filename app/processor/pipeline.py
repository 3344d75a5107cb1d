from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.extraction.models import CoiPolicies, ParseResult
from app.processor.models import UploadEvent


@dataclass(slots=True)
class PipelineContext:
    event: UploadEvent
    user_id: str
    file_name: str
    laborer_id: str | None = None
    raw_bytes: bytes = b""
    extracted_text: str = ""
    parse_result: ParseResult | None = None
    coi_policies: CoiPolicies | None = None
    error_message: str = ""
    stopped: bool = False


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError

from collections.abc import Callable
from datetime import datetime, timezone

from app.database.repositories.laborer_repository import LaborerRepository
from app.database.repositories.prequal_repository import PrequalRepository
from app.extraction.coi_parser import CoiParser
from app.extraction.w9_parser import W9Parser
from app.logging.logger import Log
from app.ocr.base import BaseOcrClient
from app.ocr.exceptions import OcrError
from app.ocr.mime_types import is_allowed_mime_type
from app.processor.exceptions import LaborerNotFoundError, UnsupportedContentTypeError
from app.processor.merge import build_coi_update, build_w9_update
from app.processor.models import OcrStatus
from app.processor.pipeline import PipelineContext, PipelineStep
from app.storage.file_loader import FileLoader

INVALID_TYPE_MESSAGE = "Invalid file type. Please upload a PDF or image (JPG/PNG)."

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _laborer_id(context: PipelineContext) -> str:
    if context.laborer_id is None:
        raise ValueError("PipelineContext.laborer_id must be set for W-9 steps")
    return context.laborer_id


class ValidateContentTypeStep(PipelineStep):
    """Reject anything but PDF/JPG/PNG before any status change or download.

    With ``strict=False`` the run is stopped quietly instead of failing.
    """

    def __init__(self, strict: bool = True) -> None:
        self._strict = strict

    def run(self, context: PipelineContext) -> PipelineContext:
        content_type = context.event.content_type
        if is_allowed_mime_type(content_type):
            return context
        Log.warning(f"Invalid file type '{content_type}' for {context.event.path}")
        if self._strict:
            raise UnsupportedContentTypeError(INVALID_TYPE_MESSAGE)
        context.stopped = True
        return context


class MarkProcessingStep(PipelineStep):
    def __init__(self, laborer_repo: LaborerRepository) -> None:
        self._laborer_repo = laborer_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        self._laborer_repo.update_ocr_status(
            context.user_id, _laborer_id(context), OcrStatus.PROCESSING
        )
        Log.info(f"Laborer {context.laborer_id} W-9 OCR marked as processing")
        return context


class MarkFailedStep(PipelineStep):
    def __init__(self, laborer_repo: LaborerRepository) -> None:
        self._laborer_repo = laborer_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        self._laborer_repo.update_ocr_status(
            context.user_id,
            _laborer_id(context),
            OcrStatus.FAILED,
            error=context.error_message or "Failed to process W-9 document",
        )
        Log.error(
            f"Laborer {context.laborer_id} W-9 OCR marked as failed: {context.error_message}"
        )
        return context


class LoadUploadStep(PipelineStep):
    def __init__(self, file_loader: FileLoader) -> None:
        self._file_loader = file_loader

    def run(self, context: PipelineContext) -> PipelineContext:
        event = context.event
        context.raw_bytes = self._file_loader.load(event.bucket, event.path)
        Log.info(f"Loaded {len(context.raw_bytes)} bytes from {event.path}")
        return context


class OcrStep(PipelineStep):
    def __init__(self, ocr_client: BaseOcrClient) -> None:
        self._ocr_client = ocr_client

    def run(self, context: PipelineContext) -> PipelineContext:
        text = self._ocr_client.extract(context.raw_bytes, context.event.content_type)
        if not text.strip():
            raise OcrError("No text extracted from document")
        context.extracted_text = text
        Log.info(f"Extracted {len(text)} chars from {context.event.path}")
        return context


class ParseW9Step(PipelineStep):
    def __init__(self, parser: W9Parser) -> None:
        self._parser = parser

    def run(self, context: PipelineContext) -> PipelineContext:
        context.parse_result = self._parser.parse(context.extracted_text)
        Log.info(
            f"Parsed W-9 for laborer {context.laborer_id}: "
            f"{context.parse_result.fields.found_required}/5 required fields, "
            f"confidence {context.parse_result.confidence}"
        )
        return context


class PersistW9Step(PipelineStep):
    def __init__(self, laborer_repo: LaborerRepository, clock: Clock = _utcnow) -> None:
        self._laborer_repo = laborer_repo
        self._clock = clock

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.parse_result is None:
            raise ValueError("PipelineContext.parse_result must be set before persist")
        laborer_id = _laborer_id(context)
        record = self._laborer_repo.find(context.user_id, laborer_id)
        if record is None:
            raise LaborerNotFoundError(
                f"Laborer {laborer_id} not found for user {context.user_id}"
            )
        update = build_w9_update(
            record.data,
            context.parse_result,
            context.event.path,
            self._clock(),
        )
        self._laborer_repo.merge_update(context.user_id, laborer_id, update)
        Log.info(f"Updated laborer {laborer_id} W-9 data: status {update['w9OcrStatus']}")
        return context


class ParseCoiStep(PipelineStep):
    def __init__(self, parser: CoiParser) -> None:
        self._parser = parser

    def run(self, context: PipelineContext) -> PipelineContext:
        context.coi_policies = self._parser.parse(context.extracted_text)
        Log.info(
            f"Parsed COI for user {context.user_id}: "
            f"{len(context.coi_policies.dates())} policy dates found"
        )
        return context


class PersistCoiStep(PipelineStep):
    def __init__(self, prequal_repo: PrequalRepository, clock: Clock = _utcnow) -> None:
        self._prequal_repo = prequal_repo
        self._clock = clock

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.coi_policies is None:
            raise ValueError("PipelineContext.coi_policies must be set before persist")
        record = self._prequal_repo.find(context.user_id)
        update = build_coi_update(
            record.data if record else {},
            context.coi_policies,
            context.user_id,
            context.event.path,
            self._clock(),
        )
        self._prequal_repo.merge(context.user_id, update)
        Log.info(f"Updated prequal COI data for user {context.user_id}")
        return context

import re
from collections.abc import Sequence

from app.config.settings import Settings
from app.database.repositories.laborer_repository import LaborerRepository
from app.database.repositories.prequal_repository import PrequalRepository
from app.extraction.coi_parser import CoiParser
from app.extraction.w9_parser import W9Parser
from app.logging.logger import Log
from app.ocr.factory import OcrClientFactory
from app.processor.exceptions import LaborerNotFoundError
from app.processor.models import COI_UPLOAD_PATH, W9_UPLOAD_PATH, UploadEvent
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.steps import (
    LoadUploadStep,
    MarkFailedStep,
    MarkProcessingStep,
    OcrStep,
    ParseCoiStep,
    ParseW9Step,
    PersistCoiStep,
    PersistW9Step,
    ValidateContentTypeStep,
)
from app.providers import ProviderClients
from app.storage.file_loader import FileLoader


class UploadProcessor:
    """Runs a step pipeline for uploads whose path matches ``path_pattern``.

    Named groups of the pattern seed the pipeline context. ``handle`` never
    raises: failures are logged and handed to ``failed_step`` when one is set.
    """

    def __init__(
        self,
        name: str,
        path_pattern: re.Pattern[str],
        steps: Sequence[PipelineStep],
        failed_step: PipelineStep | None = None,
    ) -> None:
        self._name = name
        self._path_pattern = path_pattern
        self._steps = list(steps)
        self._failed_step = failed_step

    @property
    def name(self) -> str:
        return self._name

    def matches(self, path: str) -> bool:
        return self._path_pattern.match(path) is not None

    def handle(self, event: UploadEvent) -> PipelineContext | None:
        """Process one upload; returns None when the path does not match."""
        match = self._path_pattern.match(event.path)
        if match is None:
            Log.debug(f"Skipping non-{self._name} file: {event.path}")
            return None

        context = PipelineContext(event=event, **match.groupdict())
        Log.info(f"Processing {self._name} upload: {event.path}")
        try:
            for step in self._steps:
                context = step.run(context)
                if context.stopped:
                    Log.info(f"Stopped {self._name} processing for {event.path}")
                    break
        except LaborerNotFoundError as exc:
            Log.warning(f"{exc.message}; skipping {self._name} update for {event.path}")
        except Exception as exc:
            self._handle_failure(context, exc)
        return context

    def _handle_failure(self, context: PipelineContext, exc: Exception) -> None:
        """Record the failure on the owning record, never re-raising."""
        context.error_message = getattr(exc, "message", None) or str(exc)
        Log.error(f"Error processing {self._name} upload {context.event.path}: {exc}")
        if self._failed_step is None:
            return
        try:
            self._failed_step.run(context)
        except LaborerNotFoundError as status_exc:
            Log.warning(f"{status_exc.message}; could not record failure")
        except Exception as status_exc:
            Log.error(f"Error updating {self._name} failure status: {status_exc}")


class UploadDispatcher:
    """Routes a storage event to the first processor whose path matches."""

    def __init__(self, processors: Sequence[UploadProcessor]) -> None:
        self._processors = list(processors)

    def dispatch(self, event: UploadEvent) -> PipelineContext | None:
        for processor in self._processors:
            if processor.matches(event.path):
                return processor.handle(event)
        Log.debug(f"No upload processor for {event.path}")
        return None


def build_w9_processor(
    file_loader: FileLoader,
    ocr_step: OcrStep,
    laborer_repo: LaborerRepository,
) -> UploadProcessor:
    steps = [
        ValidateContentTypeStep(strict=True),
        MarkProcessingStep(laborer_repo),
        LoadUploadStep(file_loader),
        ocr_step,
        ParseW9Step(W9Parser()),
        PersistW9Step(laborer_repo),
    ]
    return UploadProcessor(
        name="W-9",
        path_pattern=W9_UPLOAD_PATH,
        steps=steps,
        failed_step=MarkFailedStep(laborer_repo),
    )


def build_coi_processor(
    file_loader: FileLoader,
    ocr_step: OcrStep,
    prequal_repo: PrequalRepository,
) -> UploadProcessor:
    steps = [
        ValidateContentTypeStep(strict=False),
        LoadUploadStep(file_loader),
        ocr_step,
        ParseCoiStep(CoiParser()),
        PersistCoiStep(prequal_repo),
    ]
    return UploadProcessor(name="COI", path_pattern=COI_UPLOAD_PATH, steps=steps)


def build_upload_dispatcher(settings: Settings, clients: ProviderClients) -> UploadDispatcher:
    """Build the dispatcher with the W-9 and COI processors."""
    file_loader = FileLoader(
        storage_client=clients.storage,
        http_client=clients.http,
        default_bucket=settings.storage_bucket,
        allowed_hosts=settings.allowed_download_hosts,
        timeout_seconds=settings.download_timeout_seconds,
    )
    ocr_step = OcrStep(OcrClientFactory.create(settings.upload_ocr_engine, settings, clients))
    return UploadDispatcher(
        [
            build_w9_processor(file_loader, ocr_step, LaborerRepository()),
            build_coi_processor(file_loader, ocr_step, PrequalRepository()),
        ]
    )

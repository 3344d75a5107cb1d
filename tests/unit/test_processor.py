from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from app.database.models import LaborerRecord, PrequalRecord
from app.database.repositories.laborer_repository import LaborerRepository
from app.database.repositories.prequal_repository import PrequalRepository
from app.errors.codes import ErrorCode
from app.extraction.coi_parser import CoiParser
from app.extraction.w9_parser import W9Parser
from app.ocr.base import BaseOcrClient
from app.ocr.exceptions import OcrError
from app.processor.exceptions import LaborerNotFoundError
from app.processor.models import COI_UPLOAD_PATH, W9_UPLOAD_PATH, OcrStatus, UploadEvent
from app.processor.processor import UploadDispatcher, UploadProcessor
from app.processor.steps import (
    INVALID_TYPE_MESSAGE,
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
from app.storage.file_loader import FileLoader

W9_PATH = "users/u1/laborers/l1/documents/w9/form.pdf"
COI_PATH = "users/u1/prequal/coi/coi.pdf"
NOW = datetime(2025, 3, 1, tzinfo=timezone.utc)


def _event(path: str = W9_PATH, content_type: str = "application/pdf") -> UploadEvent:
    return UploadEvent(path=path, bucket="bucket", content_type=content_type)


def _make_w9_pipeline(
    ocr_text: str = "",
) -> tuple[UploadProcessor, MagicMock, MagicMock, MagicMock]:
    file_loader = MagicMock(spec=FileLoader)
    ocr_client = MagicMock(spec=BaseOcrClient)
    laborer_repo = MagicMock(spec=LaborerRepository)

    file_loader.load.return_value = b"%PDF-fake"
    ocr_client.extract.return_value = ocr_text
    laborer_repo.find.return_value = LaborerRecord(user_id="u1", laborer_id="l1", data={})

    steps = [
        ValidateContentTypeStep(strict=True),
        MarkProcessingStep(laborer_repo),
        LoadUploadStep(file_loader),
        OcrStep(ocr_client),
        ParseW9Step(W9Parser()),
        PersistW9Step(laborer_repo, clock=lambda: NOW),
    ]
    processor = UploadProcessor(
        name="W-9",
        path_pattern=W9_UPLOAD_PATH,
        steps=steps,
        failed_step=MarkFailedStep(laborer_repo),
    )
    return processor, file_loader, ocr_client, laborer_repo


class TestW9UploadProcessor:
    def test_full_run_completes(self, w9_text: str) -> None:
        processor, file_loader, ocr_client, laborer_repo = _make_w9_pipeline(w9_text)

        context = processor.handle(_event())

        assert context is not None
        laborer_repo.update_ocr_status.assert_called_once_with("u1", "l1", OcrStatus.PROCESSING)
        file_loader.load.assert_called_once_with("bucket", W9_PATH)
        ocr_client.extract.assert_called_once_with(b"%PDF-fake", "application/pdf")
        laborer_repo.merge_update.assert_called_once()
        user_id, laborer_id, update = laborer_repo.merge_update.call_args.args
        assert (user_id, laborer_id) == ("u1", "l1")
        assert update["w9OcrStatus"] == "complete"
        assert update["w9Info"]["ein"] == "12-3456789"
        assert update["w9OcrUpdatedAt"] == NOW.isoformat()

    def test_low_confidence_needs_review(self) -> None:
        processor, _, _, laborer_repo = _make_w9_pipeline("illegible scan text")

        processor.handle(_event())

        update = laborer_repo.merge_update.call_args.args[2]
        assert update["w9OcrStatus"] == "needs_review"
        assert update["w9Info"]["needsReview"] is True

    def test_non_matching_path_is_ignored(self) -> None:
        processor, file_loader, _, laborer_repo = _make_w9_pipeline()

        assert processor.handle(_event("users/u1/avatars/me.png", "image/png")) is None
        file_loader.load.assert_not_called()
        laborer_repo.update_ocr_status.assert_not_called()

    def test_invalid_content_type_fails_without_processing(self) -> None:
        processor, file_loader, ocr_client, laborer_repo = _make_w9_pipeline()

        context = processor.handle(_event(content_type="image/gif"))

        assert context is not None
        assert context.error_message == INVALID_TYPE_MESSAGE
        laborer_repo.update_ocr_status.assert_called_once_with(
            "u1", "l1", OcrStatus.FAILED, error=INVALID_TYPE_MESSAGE
        )
        file_loader.load.assert_not_called()
        ocr_client.extract.assert_not_called()

    def test_ocr_error_marks_failed(self) -> None:
        processor, _, ocr_client, laborer_repo = _make_w9_pipeline()
        ocr_client.extract.side_effect = OcrError("No text detected", ErrorCode.NO_TEXT_DETECTED)

        processor.handle(_event())

        assert laborer_repo.update_ocr_status.call_args_list[-1].args[2] is OcrStatus.FAILED
        assert laborer_repo.update_ocr_status.call_args_list[-1].kwargs["error"] == "No text detected"
        laborer_repo.merge_update.assert_not_called()

    def test_blank_ocr_text_marks_failed(self) -> None:
        processor, _, _, laborer_repo = _make_w9_pipeline("   \n ")

        processor.handle(_event())

        assert laborer_repo.update_ocr_status.call_args_list[-1].args[2] is OcrStatus.FAILED
        laborer_repo.merge_update.assert_not_called()

    def test_deleted_laborer_ends_quietly(self, w9_text: str) -> None:
        processor, _, _, laborer_repo = _make_w9_pipeline(w9_text)
        laborer_repo.find.return_value = None

        processor.handle(_event())

        laborer_repo.merge_update.assert_not_called()
        statuses = [c.args[2] for c in laborer_repo.update_ocr_status.call_args_list]
        assert statuses == [OcrStatus.PROCESSING]

    def test_missing_laborer_on_status_update_does_not_raise(self) -> None:
        processor, file_loader, _, laborer_repo = _make_w9_pipeline()
        laborer_repo.update_ocr_status.side_effect = LaborerNotFoundError("gone")

        processor.handle(_event())

        file_loader.load.assert_not_called()

    def test_failure_while_recording_failure_does_not_raise(self) -> None:
        processor, _, ocr_client, laborer_repo = _make_w9_pipeline()
        ocr_client.extract.side_effect = OcrError("boom")
        laborer_repo.update_ocr_status.side_effect = [None, RuntimeError("db down")]

        processor.handle(_event())

        assert laborer_repo.update_ocr_status.call_count == 2


def _make_coi_pipeline(ocr_text: str) -> tuple[UploadProcessor, MagicMock, MagicMock]:
    file_loader = MagicMock(spec=FileLoader)
    ocr_client = MagicMock(spec=BaseOcrClient)
    prequal_repo = MagicMock(spec=PrequalRepository)

    file_loader.load.return_value = b"%PDF-coi"
    ocr_client.extract.return_value = ocr_text
    prequal_repo.find.return_value = PrequalRecord(user_id="u1", data={})

    steps = [
        ValidateContentTypeStep(strict=False),
        LoadUploadStep(file_loader),
        OcrStep(ocr_client),
        ParseCoiStep(CoiParser(today=NOW.date())),
        PersistCoiStep(prequal_repo, clock=lambda: NOW),
    ]
    processor = UploadProcessor(name="COI", path_pattern=COI_UPLOAD_PATH, steps=steps)
    return processor, ocr_client, prequal_repo


class TestCoiUploadProcessor:
    def test_persists_policy_dates(self) -> None:
        processor, _, prequal_repo = _make_coi_pipeline(
            "Workers compensation policy expiration date 08/31/2026"
        )

        processor.handle(_event(COI_PATH))

        user_id, update = prequal_repo.merge.call_args.args
        assert user_id == "u1"
        assert update["coi"]["policies"]["workersCompensation"] == "2026-08-31"
        assert update["coi"]["expiresOn"] == "2026-08-31"

    def test_invalid_type_is_ignored(self) -> None:
        processor, ocr_client, prequal_repo = _make_coi_pipeline("x")

        context = processor.handle(_event(COI_PATH, "text/plain"))

        assert context is not None and context.stopped
        ocr_client.extract.assert_not_called()
        prequal_repo.merge.assert_not_called()

    def test_ocr_failure_is_logged_only(self) -> None:
        processor, ocr_client, prequal_repo = _make_coi_pipeline("x")
        ocr_client.extract.side_effect = OcrError("quota", ErrorCode.OCR_QUOTA)

        context = processor.handle(_event(COI_PATH))

        assert context is not None
        assert context.error_message == "quota"
        prequal_repo.merge.assert_not_called()


class TestUploadDispatcher:
    def test_routes_to_matching_processor(self) -> None:
        w9 = MagicMock(spec=UploadProcessor)
        coi = MagicMock(spec=UploadProcessor)
        w9.matches.return_value = False
        coi.matches.return_value = True
        dispatcher = UploadDispatcher([w9, coi])

        dispatcher.dispatch(_event(COI_PATH))

        w9.handle.assert_not_called()
        coi.handle.assert_called_once()

    def test_unmatched_event_returns_none(self) -> None:
        processor = MagicMock(spec=UploadProcessor)
        processor.matches.return_value = False

        assert UploadDispatcher([processor]).dispatch(_event("tmp/file.pdf")) is None


class TestUploadPathPatterns:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            (W9_PATH, {"user_id": "u1", "laborer_id": "l1", "file_name": "form.pdf"}),
            (
                "users/u1/laborers/l1/documents/w9/sub/dir/x.png",
                {"user_id": "u1", "laborer_id": "l1", "file_name": "sub/dir/x.png"},
            ),
        ],
    )
    def test_w9_pattern_groups(self, path: str, expected: dict[str, str]) -> None:
        match = W9_UPLOAD_PATH.match(path)

        assert match is not None
        assert match.groupdict() == expected

    def test_w9_pattern_rejects_other_documents(self) -> None:
        assert W9_UPLOAD_PATH.match("users/u1/laborers/l1/documents/id/x.pdf") is None

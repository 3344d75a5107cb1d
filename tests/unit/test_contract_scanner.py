import logging
from unittest.mock import MagicMock

import pytest

from app.errors.codes import ErrorCode
from app.logging.logger import Log
from app.ocr.base import BaseOcrClient
from app.ocr.exceptions import OcrError
from app.scan.exceptions import ScanError
from app.scan.models import ScanRequest
from app.scan.scanner import ContractScanner
from app.storage.exceptions import FileDownloadError
from app.storage.file_loader import FileLoader
from app.translation.base import BaseTranslationClient
from app.translation.chunker import TextChunker
from app.translation.exceptions import TranslationError
from app.translation.translator import Translator

BUCKET = "listo-c6a60.firebasestorage.app"
MB = 1024 * 1024


def _request(**overrides: object) -> ScanRequest:
    values: dict[str, object] = {
        "file_ref": "users/u1/contracts/lease.pdf",
        "file_name": "lease.pdf",
        "file_type": "application/pdf",
        "file_size_bytes": 2 * MB,
        "requester_id": "u1",
    }
    values.update(overrides)
    return ScanRequest(**values)  # type: ignore[arg-type]


def _make_scanner() -> tuple[ContractScanner, MagicMock, MagicMock, MagicMock]:
    file_loader = MagicMock(spec=FileLoader)
    ocr_client = MagicMock(spec=BaseOcrClient)
    translator = MagicMock(spec=Translator)

    file_loader.default_bucket = BUCKET
    file_loader.load_ref.return_value = b"%PDF-contract"
    ocr_client.extract.return_value = "The tenant agrees."
    translator.translate_text.return_value = "El inquilino acepta."

    scanner = ContractScanner(
        file_loader=file_loader,
        ocr_client=ocr_client,
        translator=translator,
        max_file_size_bytes=20 * MB,
    )
    return scanner, file_loader, ocr_client, translator


class TestContractScannerSuccess:
    def test_returns_both_texts(self) -> None:
        scanner, file_loader, ocr_client, translator = _make_scanner()

        result = scanner.scan(_request(), request_id="req-1")

        response = result.to_response()
        assert response == {
            "ok": True,
            "english": "The tenant agrees.",
            "spanish": "El inquilino acepta.",
            "originalText": "The tenant agrees.",
            "translatedText": "El inquilino acepta.",
            "requestId": "req-1",
            "sourceLanguage": "en",
            "targetLanguage": "es",
        }
        ocr_client.extract.assert_called_once_with(b"%PDF-contract", "application/pdf")
        translator.translate_text.assert_called_once_with("The tenant agrees.", "en", "es")

    def test_generates_request_id(self) -> None:
        scanner, _, _, _ = _make_scanner()

        assert scanner.scan(_request()).request_id

    def test_languages_can_be_overridden(self) -> None:
        scanner, _, _, translator = _make_scanner()

        result = scanner.scan(_request(source_language="es", target_language="en"))

        translator.translate_text.assert_called_once_with("The tenant agrees.", "es", "en")
        assert result.target_language == "en"

    def test_mime_type_from_extension(self) -> None:
        scanner, _, ocr_client, _ = _make_scanner()

        scanner.scan(_request(file_type="application/octet-stream", file_name="photo.JPG"))

        assert ocr_client.extract.call_args.args[1] == "image/jpeg"

    def test_url_refs_skip_ownership_check(self) -> None:
        scanner, file_loader, _, _ = _make_scanner()

        scanner.scan(_request(file_ref="https://firebasestorage.googleapis.com/v0/b/x/o/y"))

        file_loader.load_ref.assert_called_once()


class TestContractScannerValidation:
    def _assert_rejected(
        self,
        request: ScanRequest,
        kind: str,
        code: ErrorCode,
    ) -> None:
        scanner, file_loader, ocr_client, translator = _make_scanner()

        with pytest.raises(ScanError) as exc_info:
            scanner.scan(request, request_id="req-v")

        assert exc_info.value.kind == kind
        assert exc_info.value.code is code
        assert exc_info.value.request_id == "req-v"
        file_loader.load_ref.assert_not_called()
        ocr_client.extract.assert_not_called()
        translator.translate_text.assert_not_called()

    def test_unauthenticated(self) -> None:
        self._assert_rejected(_request(requester_id=None), "unauthenticated", ErrorCode.UNAUTHENTICATED)

    def test_non_string_file_ref_from_payload(self) -> None:
        request = ScanRequest.from_payload(
            {"fileRef": 123, "fileName": "lease.pdf", "fileType": "application/pdf"},
            requester_id="u1",
        )
        self._assert_rejected(request, "invalid-argument", ErrorCode.BAD_REQUEST)

    def test_non_string_file_type_from_payload(self) -> None:
        request = ScanRequest.from_payload(
            {"fileRef": "users/u1/a.bin", "fileName": 5, "fileType": ["application/pdf"]},
            requester_id="u1",
        )
        self._assert_rejected(request, "invalid-argument", ErrorCode.BAD_REQUEST)

    def test_missing_file_ref(self) -> None:
        self._assert_rejected(_request(file_ref=None), "invalid-argument", ErrorCode.BAD_REQUEST)

    def test_25mb_file_rejected_before_any_call(self) -> None:
        self._assert_rejected(
            _request(file_size_bytes=25 * MB), "invalid-argument", ErrorCode.FILE_TOO_LARGE
        )

    def test_unsupported_type(self) -> None:
        self._assert_rejected(
            _request(file_type="text/plain", file_name="notes.txt"),
            "invalid-argument",
            ErrorCode.BAD_REQUEST,
        )

    def test_unauthenticated_checked_before_size(self) -> None:
        self._assert_rejected(
            _request(requester_id="", file_size_bytes=25 * MB),
            "unauthenticated",
            ErrorCode.UNAUTHENTICATED,
        )

    def test_other_users_path_is_denied(self) -> None:
        self._assert_rejected(
            _request(file_ref="users/u2/contracts/lease.pdf"),
            "permission-denied",
            ErrorCode.PERMISSION_DENIED,
        )

    def test_unsupported_scheme(self) -> None:
        self._assert_rejected(
            _request(file_ref="ftp://host/lease.pdf"), "invalid-argument", ErrorCode.BAD_REQUEST
        )


class TestContractScannerFailures:
    def test_download_failure(self) -> None:
        scanner, file_loader, ocr_client, _ = _make_scanner()
        file_loader.load_ref.side_effect = FileDownloadError("File not found in storage")

        with pytest.raises(ScanError) as exc_info:
            scanner.scan(_request())

        assert exc_info.value.code is ErrorCode.FILE_DOWNLOAD_FAILED
        assert exc_info.value.kind == "internal"
        ocr_client.extract.assert_not_called()

    def test_downloaded_payload_too_large(self) -> None:
        scanner, file_loader, ocr_client, _ = _make_scanner()
        file_loader.load_ref.return_value = b"x" * (20 * MB + 1)

        with pytest.raises(ScanError) as exc_info:
            scanner.scan(_request(file_size_bytes=None))

        assert exc_info.value.code is ErrorCode.FILE_TOO_LARGE
        ocr_client.extract.assert_not_called()

    def test_ocr_error_is_internal_with_code(self) -> None:
        scanner, _, ocr_client, translator = _make_scanner()
        ocr_client.extract.side_effect = OcrError("quota", ErrorCode.OCR_QUOTA)

        with pytest.raises(ScanError) as exc_info:
            scanner.scan(_request())

        assert exc_info.value.kind == "internal"
        assert exc_info.value.code is ErrorCode.OCR_QUOTA
        assert exc_info.value.http_status == 500
        translator.translate_text.assert_not_called()

    def test_translation_error_propagates_code(self) -> None:
        scanner, _, _, translator = _make_scanner()
        translator.translate_text.side_effect = TranslationError(
            "Failed to translate text.", ErrorCode.TRANSLATE_FAILED
        )

        with pytest.raises(ScanError) as exc_info:
            scanner.scan(_request())

        assert exc_info.value.code is ErrorCode.TRANSLATE_FAILED

    def test_unexpected_error_is_unknown(self) -> None:
        scanner, _, ocr_client, _ = _make_scanner()
        ocr_client.extract.side_effect = RuntimeError("segfault-ish")

        with pytest.raises(ScanError) as exc_info:
            scanner.scan(_request(), request_id="req-x")

        assert exc_info.value.code is ErrorCode.UNKNOWN
        assert exc_info.value.request_id == "req-x"
        assert exc_info.value.to_payload() == {
            "ok": False,
            "errorCode": "UNKNOWN",
            "message": "An unexpected error occurred. Please try again.",
            "requestId": "req-x",
        }
        assert "details" in exc_info.value.to_payload(include_details=True)


class TestContractScannerLogging:
    def test_every_record_carries_request_id(self, caplog: pytest.LogCaptureFixture) -> None:
        _, file_loader, ocr_client, _ = _make_scanner()
        translation_client = MagicMock(spec=BaseTranslationClient)
        translation_client.translate_text.side_effect = TranslationError(
            "boom", ErrorCode.TRANSLATE_FAILED
        )
        scanner = ContractScanner(
            file_loader=file_loader,
            ocr_client=ocr_client,
            translator=Translator(translation_client, TextChunker()),
            max_file_size_bytes=20 * MB,
        )
        caplog.set_level(logging.INFO, logger="docintel")

        with pytest.raises(ScanError):
            scanner.scan(_request(), request_id="req-XYZ")

        records = [record for record in caplog.records if record.name == "docintel"]
        messages = [record.getMessage() for record in records]
        assert any(message.startswith("Translating") for message in messages)
        assert any(message.startswith("Translation failed on chunk 1/1") for message in messages)
        assert {record.request_id for record in records} == {"req-XYZ"}

    def test_request_id_is_unbound_after_scan(self, caplog: pytest.LogCaptureFixture) -> None:
        scanner, _, _, _ = _make_scanner()
        caplog.set_level(logging.INFO, logger="docintel")

        scanner.scan(_request(), request_id="req-1")
        caplog.clear()
        Log.info("after scan")

        assert caplog.records[0].request_id == "-"

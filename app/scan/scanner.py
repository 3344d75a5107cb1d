import uuid

from app.config.settings import Settings
from app.errors.codes import ErrorCode
from app.errors.exceptions import DocumentIntelError
from app.logging.logger import Log
from app.ocr.base import BaseOcrClient
from app.ocr.factory import OcrClientFactory
from app.ocr.mime_types import resolve_mime_type
from app.providers import ProviderClients
from app.scan.exceptions import ScanError
from app.scan.models import ScanRequest, ScanResult
from app.storage.exceptions import FileDownloadError, UnsupportedFileRefError
from app.storage.file_loader import FileLoader, FileRef, parse_file_ref
from app.translation.chunker import TextChunker
from app.translation.google_adapter import GoogleTranslateAdapter
from app.translation.translator import Translator

OPERATION = "scanContract"


class ContractScanner:
    """OCR a contract and translate it, returning both texts.

    Every validation runs before the first external call, so rejected
    requests never reach storage, OCR or translation.
    """

    def __init__(
        self,
        file_loader: FileLoader,
        ocr_client: BaseOcrClient,
        translator: Translator,
        max_file_size_bytes: int = 20 * 1024 * 1024,
        source_language: str = "en",
        target_language: str = "es",
    ) -> None:
        self._file_loader = file_loader
        self._ocr_client = ocr_client
        self._translator = translator
        self._max_file_size_bytes = max_file_size_bytes
        self._source_language = source_language
        self._target_language = target_language

    def scan(self, request: ScanRequest, request_id: str | None = None) -> ScanResult:
        """Run the scan; any failure surfaces as a ScanError."""
        request_id = request_id or str(uuid.uuid4())
        token = Log.bind_request_id(request_id)
        try:
            Log.info(
                f"Scan started: file={request.file_name!r} type={request.file_type!r} "
                f"size={request.file_size_bytes}"
            )
            return self._scan(request, request_id)
        except ScanError:
            raise
        except Exception as exc:
            Log.operation_error(request_id, f"{OPERATION}_unexpected", exc)
            raise ScanError(
                ScanError.INTERNAL,
                ErrorCode.UNKNOWN,
                "An unexpected error occurred. Please try again.",
                request_id,
                details={"error": str(exc)},
            ) from exc
        finally:
            Log.reset_request_id(token)

    def _scan(self, request: ScanRequest, request_id: str) -> ScanResult:
        mime_type, file_ref = self._validate(request, request_id)

        try:
            content = self._file_loader.load_ref(file_ref)
        except UnsupportedFileRefError as exc:
            raise self._fail(ScanError.INVALID_ARGUMENT, exc, request_id, "download") from exc
        except FileDownloadError as exc:
            raise self._fail(ScanError.INTERNAL, exc, request_id, "download") from exc

        if len(content) > self._max_file_size_bytes:
            raise self._reject(
                ScanError.INVALID_ARGUMENT,
                ErrorCode.FILE_TOO_LARGE,
                self._too_large_message(),
                request_id,
                downloadedBytes=len(content),
            )

        try:
            source_text = self._ocr_client.extract(content, mime_type)
        except DocumentIntelError as exc:
            raise self._fail(ScanError.INTERNAL, exc, request_id, "ocr") from exc
        Log.info(f"OCR extracted {len(source_text)} chars")

        source_language = request.source_language or self._source_language
        target_language = request.target_language or self._target_language
        try:
            translated_text = self._translator.translate_text(
                source_text, source_language, target_language
            )
        except DocumentIntelError as exc:
            raise self._fail(ScanError.INTERNAL, exc, request_id, "translate") from exc

        Log.info(
            f"Scan complete: {len(source_text)} chars translated "
            f"{source_language}->{target_language}"
        )
        return ScanResult(
            source_text=source_text,
            translated_text=translated_text,
            request_id=request_id,
            source_language=source_language,
            target_language=target_language,
        )

    def _validate(self, request: ScanRequest, request_id: str) -> tuple[str, FileRef]:
        """Check auth and input in a fixed order, returning MIME type and ref."""
        if not request.requester_id:
            raise self._reject(
                ScanError.UNAUTHENTICATED,
                ErrorCode.UNAUTHENTICATED,
                "Please sign in to use this feature.",
                request_id,
            )
        if not request.file_ref:
            raise self._reject(
                ScanError.INVALID_ARGUMENT,
                ErrorCode.BAD_REQUEST,
                "File URL is required.",
                request_id,
            )
        if request.file_size_bytes is not None and request.file_size_bytes > self._max_file_size_bytes:
            raise self._reject(
                ScanError.INVALID_ARGUMENT,
                ErrorCode.FILE_TOO_LARGE,
                self._too_large_message(),
                request_id,
                fileSize=request.file_size_bytes,
            )
        mime_type = resolve_mime_type(request.file_type, request.file_name)
        if mime_type is None:
            raise self._reject(
                ScanError.INVALID_ARGUMENT,
                ErrorCode.BAD_REQUEST,
                "Invalid file type. Please upload a PDF or image (JPG/PNG).",
                request_id,
                fileType=request.file_type,
                fileName=request.file_name,
            )
        try:
            file_ref = parse_file_ref(request.file_ref, self._file_loader.default_bucket)
        except UnsupportedFileRefError as exc:
            raise self._fail(ScanError.INVALID_ARGUMENT, exc, request_id, "validation") from exc

        owner_prefix = f"users/{request.requester_id}/"
        if not file_ref.is_url and not (file_ref.path or "").startswith(owner_prefix):
            raise self._reject(
                ScanError.PERMISSION_DENIED,
                ErrorCode.PERMISSION_DENIED,
                f"Invalid storage path. Files must be in {owner_prefix}",
                request_id,
                path=file_ref.path,
            )
        return mime_type, file_ref

    def _too_large_message(self) -> str:
        limit_mb = self._max_file_size_bytes // (1024 * 1024)
        return f"File is too large. Maximum size is {limit_mb}MB."

    @staticmethod
    def _reject(
        kind: str,
        code: ErrorCode,
        message: str,
        request_id: str,
        **context: object,
    ) -> ScanError:
        error = ScanError(kind, code, message, request_id, details=dict(context))
        Log.operation_error(request_id, f"{OPERATION}_validation", error, **context)
        return error

    @staticmethod
    def _fail(
        kind: str,
        exc: DocumentIntelError,
        request_id: str,
        stage: str,
    ) -> ScanError:
        Log.operation_error(request_id, f"{OPERATION}_{stage}", exc)
        cause = exc.__cause__
        details = {"stage": stage, "cause": str(cause)} if cause else {"stage": stage}
        return ScanError(kind, exc.code, exc.message, request_id, details=details)


def build_scanner(settings: Settings, clients: ProviderClients) -> ContractScanner:
    """Build a ContractScanner from settings and the shared provider handles."""
    file_loader = FileLoader(
        storage_client=clients.storage,
        http_client=clients.http,
        default_bucket=settings.storage_bucket,
        allowed_hosts=settings.allowed_download_hosts,
        timeout_seconds=settings.download_timeout_seconds,
    )
    ocr_client = OcrClientFactory.create(settings.scan_ocr_engine, settings, clients)
    translation_client = GoogleTranslateAdapter(
        clients.translation,
        project_id=clients.project_id,
        location=settings.translation_location,
        timeout_seconds=settings.translation_timeout_seconds,
    )
    translator = Translator(
        translation_client,
        TextChunker(max_size=settings.translation_max_chunk_size),
    )
    return ContractScanner(
        file_loader=file_loader,
        ocr_client=ocr_client,
        translator=translator,
        max_file_size_bytes=settings.max_file_size_bytes,
        source_language=settings.translation_source_language,
        target_language=settings.translation_target_language,
    )

import base64
from typing import Any, ClassVar

import httpx

from app.errors.classification import OCR_SPACE_ERRORS, OCR_SPACE_PROCESSING_ERROR
from app.errors.codes import ErrorCode
from app.logging.logger import Log
from app.ocr.base import BaseOcrClient
from app.ocr.exceptions import OcrError
from app.ocr.mime_types import is_allowed_mime_type


class OcrSpaceAdapter(BaseOcrClient):
    """OCR over HTTP against an OCR.space-compatible endpoint.

    The file is sent base64-encoded in a single form POST. Size and type are
    checked locally first so rejected files never cost a network round-trip.
    """

    FILE_TYPES: ClassVar[dict[str, str]] = {
        "application/pdf": "PDF",
        "image/jpeg": "JPG",
        "image/jpg": "JPG",
        "image/png": "PNG",
    }

    def __init__(
        self,
        *,
        api_key: str,
        http_client: httpx.Client,
        base_url: str = "https://api.ocr.space/parse/image",
        timeout_seconds: float = 30.0,
        max_file_size_bytes: int = 20 * 1024 * 1024,
        language: str = "eng",
        engine: int = 2,
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._base_url = base_url
        self._timeout = timeout_seconds
        self._max_file_size_bytes = max_file_size_bytes
        self._language = language
        self._engine = engine

    def extract(self, content: bytes, mime_type: str) -> str:
        if not self._api_key:
            raise OcrError("OCR service is not configured.", ErrorCode.OCR_API_KEY_MISSING)
        mime_type = (mime_type or "").strip().lower()
        self._validate(content, mime_type)

        body = self._post(content, mime_type)
        text = self._parse_body(body)
        Log.info(f"OCR.space extracted {len(text)} chars")
        return text

    def _validate(self, content: bytes, mime_type: str) -> None:
        if len(content) > self._max_file_size_bytes:
            raise OcrError(
                f"File exceeds the {self._max_file_size_bytes // (1024 * 1024)} MB limit.",
                ErrorCode.FILE_TOO_LARGE,
            )
        if not is_allowed_mime_type(mime_type):
            raise OcrError(
                "Unsupported file type. Please upload a PDF, JPG, or PNG file.",
                ErrorCode.BAD_REQUEST,
            )

    def _post(self, content: bytes, mime_type: str) -> Any:
        encoded = base64.b64encode(content).decode("ascii")
        form = {
            "apikey": self._api_key,
            "base64Image": f"data:{mime_type};base64,{encoded}",
            "filetype": self.FILE_TYPES[mime_type],
            "language": self._language,
            "OCREngine": str(self._engine),
            "isOverlayRequired": "false",
            "detectOrientation": "true",
            "scale": "true",
        }
        try:
            response = self._http.post(self._base_url, data=form, timeout=self._timeout)
        except httpx.TimeoutException as exc:
            raise OcrError(
                "OCR request timed out. The file may be too large. Please try again with a smaller file.",
                ErrorCode.OCR_TIMEOUT,
            ) from exc
        except httpx.HTTPError as exc:
            rule = OCR_SPACE_ERRORS.classify(str(exc))
            raise OcrError(rule.message, rule.code) from exc

        if response.status_code >= 400:
            rule = OCR_SPACE_ERRORS.classify(response.text, status=response.status_code)
            Log.warning(f"OCR.space HTTP {response.status_code}: {response.text[:200]}")
            raise OcrError(rule.message, rule.code)

        try:
            return response.json()
        except ValueError as exc:
            raise OcrError(
                "OCR service returned an unreadable response.",
                ErrorCode.OCR_PARSE_ERROR,
            ) from exc

    def _parse_body(self, body: Any) -> str:
        if not isinstance(body, dict):
            raise OcrError(
                "OCR service returned an unreadable response.",
                ErrorCode.OCR_PARSE_ERROR,
            )

        if body.get("IsErroredOnProcessing"):
            provider_message = self._error_message(body)
            Log.warning(f"OCR.space processing error: {provider_message}")
            rule = OCR_SPACE_ERRORS.classify(
                provider_message, fallback=OCR_SPACE_PROCESSING_ERROR
            )
            raise OcrError(rule.message, rule.code)

        results = body.get("ParsedResults")
        if not isinstance(results, list):
            raise OcrError(
                "OCR service returned an unreadable response.",
                ErrorCode.OCR_PARSE_ERROR,
            )

        pages = [
            str(result.get("ParsedText") or "").strip()
            for result in results
            if isinstance(result, dict)
        ]
        text = "\n\n".join(page for page in pages if page)
        if not text:
            raise OcrError(
                "No text was detected in the document. Please ensure the document contains readable text.",
                ErrorCode.NO_TEXT_DETECTED,
            )
        return text

    @staticmethod
    def _error_message(body: dict[str, Any]) -> str:
        raw = body.get("ErrorMessage") or body.get("ErrorDetails") or ""
        if isinstance(raw, list):
            return " ".join(str(part) for part in raw)
        return str(raw)

from google.api_core import exceptions as gexc
from google.cloud import vision

from app.errors.classification import VISION_ERRORS
from app.errors.codes import ErrorCode
from app.logging.logger import Log
from app.ocr.base import BaseOcrClient
from app.ocr.exceptions import OcrError


class VisionOcrAdapter(BaseOcrClient):
    """Extracts text with Google Cloud Vision.

    Document text detection is tried first since it handles forms better;
    plain text detection is the fallback when it finds nothing. PDFs go
    through the synchronous file annotation API.
    """

    def __init__(
        self,
        client: vision.ImageAnnotatorClient | None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._client = client
        self._timeout = timeout_seconds

    def extract(self, content: bytes, mime_type: str) -> str:
        if self._client is None:
            raise OcrError("Vision client is not initialized", ErrorCode.OCR_FAILED)
        try:
            if (mime_type or "").strip().lower() == "application/pdf":
                text = self._extract_pdf(content)
            else:
                text = self._extract_image(content)
        except gexc.RetryError as exc:
            raise OcrError(
                "OCR request timed out. The file may be too large. Please try again with a smaller file.",
                ErrorCode.OCR_TIMEOUT,
            ) from exc
        except gexc.GoogleAPIError as exc:
            status = getattr(exc, "code", None)
            rule = VISION_ERRORS.classify(
                str(exc),
                status=status if isinstance(status, int) else None,
            )
            raise OcrError(rule.message, rule.code) from exc

        if not text.strip():
            raise OcrError(
                "No text was detected in the document. Please ensure the document contains readable text.",
                ErrorCode.NO_TEXT_DETECTED,
            )
        Log.info(f"Vision extracted {len(text)} chars")
        return text

    def _extract_image(self, content: bytes) -> str:
        image = vision.Image(content=content)
        response = self._client.document_text_detection(image=image, timeout=self._timeout)
        self._raise_for_error(response)
        if response.full_text_annotation and response.full_text_annotation.text:
            return response.full_text_annotation.text

        Log.info("Document text detection found nothing, falling back to text detection")
        fallback = self._client.text_detection(image=image, timeout=self._timeout)
        self._raise_for_error(fallback)
        if fallback.text_annotations:
            return fallback.text_annotations[0].description or ""
        return ""

    def _extract_pdf(self, content: bytes) -> str:
        text = self._annotate_pdf(content, vision.Feature.Type.DOCUMENT_TEXT_DETECTION)
        if text.strip():
            return text
        Log.info("PDF document text detection found nothing, falling back to text detection")
        return self._annotate_pdf(content, vision.Feature.Type.TEXT_DETECTION)

    def _annotate_pdf(self, content: bytes, feature_type: vision.Feature.Type) -> str:
        request = vision.AnnotateFileRequest(
            input_config=vision.InputConfig(content=content, mime_type="application/pdf"),
            features=[vision.Feature(type_=feature_type)],
        )
        response = self._client.batch_annotate_files(requests=[request], timeout=self._timeout)
        pages: list[str] = []
        for file_response in response.responses:
            for page in file_response.responses:
                self._raise_for_error(page)
                if page.full_text_annotation and page.full_text_annotation.text:
                    pages.append(page.full_text_annotation.text)
                elif page.text_annotations:
                    pages.append(page.text_annotations[0].description or "")
        return "\n\n".join(pages).strip()

    @staticmethod
    def _raise_for_error(response: vision.AnnotateImageResponse) -> None:
        message = response.error.message if response.error else ""
        if message:
            rule = VISION_ERRORS.classify(message)
            raise OcrError(rule.message, rule.code)

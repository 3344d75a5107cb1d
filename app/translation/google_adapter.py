from google.api_core import exceptions as gexc
from google.cloud import translate_v3

from app.errors.classification import TRANSLATION_ERRORS
from app.errors.codes import ErrorCode
from app.translation.base import BaseTranslationClient
from app.translation.exceptions import TranslationError


class GoogleTranslateAdapter(BaseTranslationClient):
    """Translation client built on the Cloud Translation v3 API."""

    def __init__(
        self,
        client: translate_v3.TranslationServiceClient | None,
        *,
        project_id: str,
        location: str = "global",
        timeout_seconds: float = 60.0,
    ) -> None:
        self._client = client
        self._project_id = project_id
        self._parent = f"projects/{project_id}/locations/{location}"
        self._timeout = timeout_seconds

    def translate_text(
        self,
        text: str,
        *,
        source_language: str,
        target_language: str,
    ) -> str:
        if self._client is None:
            raise TranslationError(
                "Translation client is not initialized", ErrorCode.TRANSLATE_FAILED
            )
        if not self._project_id:
            raise TranslationError(
                "GCP project id is not configured for translation", ErrorCode.TRANSLATE_FAILED
            )
        try:
            response = self._client.translate_text(
                request={
                    "parent": self._parent,
                    "contents": [text],
                    "mime_type": "text/plain",
                    "source_language_code": source_language,
                    "target_language_code": target_language,
                },
                timeout=self._timeout,
            )
        except gexc.GoogleAPIError as exc:
            status = getattr(exc, "code", None)
            rule = TRANSLATION_ERRORS.classify(
                str(exc),
                status=status if isinstance(status, int) else None,
            )
            raise TranslationError(rule.message, rule.code) from exc

        if not response.translations:
            raise TranslationError(
                "Translation returned empty result",
                ErrorCode.TRANSLATE_FAILED,
            )
        return response.translations[0].translated_text

from abc import ABC, abstractmethod


class BaseTranslationClient(ABC):
    """Contract for provider-specific translation clients."""

    @abstractmethod
    def translate_text(
        self,
        text: str,
        *,
        source_language: str,
        target_language: str,
    ) -> str:
        """Translate one chunk of plain text.

        Raises:
            TranslationError: on any provider failure or empty result.
        """

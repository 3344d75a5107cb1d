from abc import ABC, abstractmethod


class BaseOcrClient(ABC):
    """Contract for all OCR provider adapters."""

    @abstractmethod
    def extract(self, content: bytes, mime_type: str) -> str:
        """Extract plain text from a scanned document.

        Args:
            content: Raw file bytes (PDF or image).
            mime_type: Declared MIME type of the file.

        Returns:
            Extracted text, never empty.

        Raises:
            OcrError: on any provider failure or when no text is found.
        """

from typing import ClassVar

from app.config.settings import Settings
from app.ocr.base import BaseOcrClient
from app.ocr.ocr_space_adapter import OcrSpaceAdapter
from app.ocr.vision_adapter import VisionOcrAdapter
from app.providers import ProviderClients


class OcrClientFactory:
    """Creates the configured OCR adapter from shared provider handles."""

    ENGINES: ClassVar[tuple[str, ...]] = ("vision", "ocr_space")

    @classmethod
    def create(
        cls,
        engine: str,
        settings: Settings,
        clients: ProviderClients,
    ) -> BaseOcrClient:
        engine = engine.lower()
        if engine == "vision":
            return VisionOcrAdapter(
                clients.vision,
                timeout_seconds=settings.ocr_timeout_seconds,
            )
        if engine == "ocr_space":
            return OcrSpaceAdapter(
                api_key=settings.ocr_space_api_key,
                http_client=clients.http,
                base_url=settings.ocr_space_base_url,
                timeout_seconds=settings.ocr_timeout_seconds,
                max_file_size_bytes=settings.max_file_size_bytes,
                language=settings.ocr_space_language,
                engine=settings.ocr_space_engine,
            )
        raise ValueError(
            f"Unknown OCR engine '{engine}'. Choose from: {list(cls.ENGINES)}"
        )

from collections.abc import Sequence

from app.errors.codes import ErrorCode
from app.logging.logger import Log
from app.translation.base import BaseTranslationClient
from app.translation.chunker import TextChunker
from app.translation.exceptions import TranslationError


class Translator:
    """Translates chunked text in order, all or nothing.

    Chunks are sent one at a time; the first failing chunk aborts the whole
    operation and earlier translations are discarded.
    """

    def __init__(self, client: BaseTranslationClient, chunker: TextChunker) -> None:
        self._client = client
        self._chunker = chunker

    def translate(
        self,
        chunks: Sequence[str],
        source_language: str,
        target_language: str,
    ) -> list[str]:
        translated: list[str] = []
        for index, chunk in enumerate(chunks, start=1):
            try:
                translated.append(
                    self._client.translate_text(
                        chunk,
                        source_language=source_language,
                        target_language=target_language,
                    )
                )
            except TranslationError as exc:
                Log.error(
                    f"Translation failed on chunk {index}/{len(chunks)} "
                    f"({exc.code}): {exc.message}"
                )
                raise
            except Exception as exc:
                Log.error(f"Translation failed on chunk {index}/{len(chunks)}: {exc}")
                raise TranslationError(
                    "Failed to translate text.", ErrorCode.TRANSLATE_FAILED
                ) from exc
        return translated

    def translate_text(
        self,
        text: str,
        source_language: str,
        target_language: str,
    ) -> str:
        """Chunk, translate and reassemble a whole document."""
        chunks = self._chunker.split(text)
        Log.info(
            f"Translating {len(text)} chars in {len(chunks)} chunk(s) "
            f"{source_language}->{target_language}"
        )
        return self._chunker.join(self.translate(chunks, source_language, target_language))

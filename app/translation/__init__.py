from app.translation.base import BaseTranslationClient
from app.translation.chunker import TextChunker
from app.translation.translator import Translator

__all__ = ["BaseTranslationClient", "TextChunker", "Translator"]

"""Splits long text into pieces that fit a provider's request size limit."""

import re

_PARAGRAPH_BREAK = re.compile(r"(?:\r?\n){2,}")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


class TextChunker:
    """Greedy, structure-preserving text splitter.

    Paragraphs (blank-line separated) are packed into chunks first. A paragraph
    that is too big on its own is packed sentence by sentence, and a sentence
    that is still too big is cut by character count.
    """

    SEPARATOR = "\n\n"

    def __init__(self, max_size: int = 100_000) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self._max_size = max_size

    @property
    def max_size(self) -> int:
        return self._max_size

    def split(self, text: str) -> list[str]:
        """Return ordered chunks, each at most ``max_size`` characters."""
        if not text:
            return []
        if len(text) <= self._max_size:
            return [text]

        chunks: list[str] = []
        current = ""
        for paragraph in _PARAGRAPH_BREAK.split(text):
            if not paragraph:
                continue
            if len(paragraph) > self._max_size:
                if current:
                    chunks.append(current)
                    current = ""
                chunks.extend(self._split_paragraph(paragraph))
                continue
            candidate = f"{current}{self.SEPARATOR}{paragraph}" if current else paragraph
            if len(candidate) > self._max_size:
                chunks.append(current)
                current = paragraph
            else:
                current = candidate
        if current:
            chunks.append(current)

        if not chunks:
            # Text made only of paragraph breaks.
            chunks = self._hard_split(text)
        return self._enforce_limit(chunks)

    def join(self, chunks: list[str]) -> str:
        return self.SEPARATOR.join(chunks)

    def _split_paragraph(self, paragraph: str) -> list[str]:
        chunks: list[str] = []
        current = ""
        for sentence in self._sentences(paragraph):
            if len(current) + len(sentence) <= self._max_size:
                current += sentence
                continue
            if current:
                chunks.append(current)
                current = ""
            if len(sentence) > self._max_size:
                chunks.extend(self._hard_split(sentence))
            else:
                current = sentence
        if current:
            chunks.append(current)
        return chunks

    @staticmethod
    def _sentences(paragraph: str) -> list[str]:
        """Split after terminal punctuation, keeping the trailing whitespace."""
        sentences: list[str] = []
        start = 0
        for match in _SENTENCE_END.finditer(paragraph):
            sentences.append(paragraph[start:match.end()])
            start = match.end()
        if start < len(paragraph):
            sentences.append(paragraph[start:])
        return sentences

    def _hard_split(self, text: str) -> list[str]:
        return [
            text[i:i + self._max_size] for i in range(0, len(text), self._max_size)
        ]

    def _enforce_limit(self, chunks: list[str]) -> list[str]:
        safe: list[str] = []
        for chunk in chunks:
            if len(chunk) > self._max_size:
                safe.extend(self._hard_split(chunk))
            else:
                safe.append(chunk)
        return safe

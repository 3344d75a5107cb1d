from unittest.mock import MagicMock

import pytest

from app.errors.codes import ErrorCode
from app.translation import BaseTranslationClient, TextChunker, Translator
from app.translation.exceptions import TranslationError


def _echo_client() -> MagicMock:
    client = MagicMock(spec=BaseTranslationClient)
    client.translate_text.side_effect = (
        lambda text, *, source_language, target_language: f"[{target_language}]{text}"
    )
    return client


class TestTranslator:
    def test_translates_chunks_in_order(self) -> None:
        client = _echo_client()
        translator = Translator(client, TextChunker(max_size=10))

        result = translator.translate(["one", "two", "three"], "en", "es")

        assert result == ["[es]one", "[es]two", "[es]three"]
        assert [c.args[0] for c in client.translate_text.call_args_list] == ["one", "two", "three"]

    def test_translate_text_chunks_and_rejoins(self) -> None:
        client = _echo_client()
        translator = Translator(client, TextChunker(max_size=12))

        result = translator.translate_text("first part\n\nsecond one", "en", "fr")

        assert result == "[fr]first part\n\n[fr]second one"
        assert client.translate_text.call_count == 2

    def test_empty_text_makes_no_calls(self) -> None:
        client = _echo_client()

        assert Translator(client, TextChunker()).translate_text("", "en", "es") == ""
        client.translate_text.assert_not_called()

    def test_second_of_three_chunks_failing_fails_everything(self) -> None:
        client = MagicMock(spec=BaseTranslationClient)
        client.translate_text.side_effect = [
            "uno",
            TranslationError("Failed to translate text.", ErrorCode.TRANSLATE_FAILED),
            "tres",
        ]
        translator = Translator(client, TextChunker())

        with pytest.raises(TranslationError) as exc_info:
            translator.translate(["one", "two", "three"], "en", "es")

        assert exc_info.value.code is ErrorCode.TRANSLATE_FAILED
        assert client.translate_text.call_count == 2

    def test_unexpected_error_is_wrapped(self) -> None:
        client = MagicMock(spec=BaseTranslationClient)
        client.translate_text.side_effect = RuntimeError("socket closed")

        with pytest.raises(TranslationError) as exc_info:
            Translator(client, TextChunker()).translate(["one"], "en", "es")

        assert exc_info.value.code is ErrorCode.TRANSLATE_FAILED
        assert isinstance(exc_info.value.__cause__, RuntimeError)

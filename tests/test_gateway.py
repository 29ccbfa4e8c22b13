"""Tests for the OpenAI gateway and its prompts."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from lingua_craft.gateway.base import FALLBACK_FEEDBACK, WordFetchError
from lingua_craft.gateway.openai_gateway import OpenAIGateway
from lingua_craft.gateway.prompts import (
    FEEDBACK_SCHEMA,
    WORD_LIST_SCHEMA,
    build_evaluation_prompt,
    build_word_list_prompt,
)
from lingua_craft.models.vocabulary import EducationLevel, WordItem

WORD = WordItem(
    word="reluctant",
    definition="Unwilling and hesitant (不情愿的)",
    part_of_speech="adjective",
    example="He was reluctant to leave.",
)


def _completion(content: str | None) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


def _word_payload(n: int = 5) -> str:
    return json.dumps({
        "words": [
            {
                "word": f"word{i}",
                "definition": f"meaning {i} (意思)",
                "partOfSpeech": "noun",
                "example": f"Example {i}.",
            }
            for i in range(n)
        ]
    })


@pytest.fixture
def client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client


@pytest.fixture
def gateway(client):
    return OpenAIGateway(api_key="test-key", client=client)


class TestPrompts:
    def test_word_prompt_mentions_level_and_exclusions(self):
        prompt = build_word_list_prompt(EducationLevel.MIDDLE, ["apple", "猫"], count=5)
        assert "Junior High School (初中)" in prompt
        assert '["apple", "猫"]' in prompt
        assert "5 distinct" in prompt

    def test_evaluation_prompt_includes_word_and_sentence(self):
        prompt = build_evaluation_prompt(WORD, "I am reluctant to go.")
        assert '"reluctant"' in prompt
        assert "adjective" in prompt
        assert "I am reluctant to go." in prompt
        assert "简体中文" in prompt

    def test_schemas_are_strict(self):
        assert WORD_LIST_SCHEMA["strict"] is True
        item = WORD_LIST_SCHEMA["schema"]["properties"]["words"]["items"]
        assert item["required"] == ["word", "definition", "partOfSpeech", "example"]
        props = FEEDBACK_SCHEMA["schema"]["properties"]
        assert props["isCorrect"]["type"] == "boolean"
        assert "null" in props["improvedSentence"]["type"]


class TestFetchWords:
    async def test_parses_words(self, gateway, client):
        client.chat.completions.create.return_value = _completion(_word_payload())
        words = await gateway.fetch_words(EducationLevel.HIGH, [])
        assert len(words) == 5
        assert all(isinstance(w, WordItem) for w in words)
        assert words[0].part_of_speech == "noun"

    async def test_request_shape(self, gateway, client):
        client.chat.completions.create.return_value = _completion(_word_payload())
        await gateway.fetch_words(EducationLevel.HIGH, ["apple"])
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.7
        assert kwargs["response_format"]["type"] == "json_schema"
        assert kwargs["response_format"]["json_schema"] is WORD_LIST_SCHEMA
        assert '["apple"]' in kwargs["messages"][0]["content"]

    async def test_duplicates_not_filtered(self, gateway, client):
        payload = json.loads(_word_payload(2))
        payload["words"][1] = payload["words"][0]
        client.chat.completions.create.return_value = _completion(json.dumps(payload))
        words = await gateway.fetch_words(EducationLevel.HIGH, [])
        assert [w.word for w in words] == ["word0", "word0"]

    async def test_empty_response_raises(self, gateway, client):
        client.chat.completions.create.return_value = _completion(None)
        with pytest.raises(WordFetchError):
            await gateway.fetch_words(EducationLevel.HIGH, [])

    async def test_invalid_json_raises(self, gateway, client):
        client.chat.completions.create.return_value = _completion("not json")
        with pytest.raises(WordFetchError):
            await gateway.fetch_words(EducationLevel.HIGH, [])

    async def test_empty_list_raises(self, gateway, client):
        client.chat.completions.create.return_value = _completion('{"words": []}')
        with pytest.raises(WordFetchError):
            await gateway.fetch_words(EducationLevel.HIGH, [])

    async def test_api_error_raises_once(self, gateway, client):
        client.chat.completions.create.side_effect = RuntimeError("network down")
        with pytest.raises(WordFetchError) as excinfo:
            await gateway.fetch_words(EducationLevel.HIGH, [])
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert client.chat.completions.create.await_count == 1


class TestEvaluateSentence:
    async def test_correct_with_improvement(self, gateway, client):
        client.chat.completions.create.return_value = _completion(json.dumps({
            "isCorrect": True,
            "feedback": "非常好！",
            "improvedSentence": "He was reluctant to leave the party.",
        }))
        result = await gateway.evaluate_sentence(WORD, "He was reluctant to leave.")
        assert result.is_correct is True
        assert result.improved_sentence == "He was reluctant to leave the party."

    async def test_incorrect_without_improvement(self, gateway, client):
        client.chat.completions.create.return_value = _completion(json.dumps({
            "isCorrect": False,
            "feedback": "尝试得很棒，但是...",
            "improvedSentence": None,
        }))
        result = await gateway.evaluate_sentence(WORD, "He reluctant.")
        assert result.is_correct is False
        assert result.improved_sentence is None

    async def test_uses_evaluation_settings(self, client):
        gateway = OpenAIGateway(
            api_key="test-key", client=client,
            evaluation_model="gpt-4o", evaluation_temperature=0.2,
        )
        client.chat.completions.create.return_value = _completion(
            '{"isCorrect": true, "feedback": "好", "improvedSentence": null}'
        )
        await gateway.evaluate_sentence(WORD, "He was reluctant.")
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.2
        assert kwargs["response_format"]["json_schema"] is FEEDBACK_SCHEMA

    async def test_api_error_returns_fallback(self, gateway, client):
        client.chat.completions.create.side_effect = RuntimeError("boom")
        result = await gateway.evaluate_sentence(WORD, "He was reluctant.")
        assert result.is_correct is False
        assert result.feedback == FALLBACK_FEEDBACK
        assert result.improved_sentence is None

    async def test_malformed_json_returns_fallback(self, gateway, client):
        client.chat.completions.create.return_value = _completion('{"feedback": "x"}')
        result = await gateway.evaluate_sentence(WORD, "He was reluctant.")
        assert result.feedback == FALLBACK_FEEDBACK

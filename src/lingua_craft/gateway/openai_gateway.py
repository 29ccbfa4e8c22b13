"""OpenAI-backed word source and sentence grader."""

import structlog
from openai import AsyncOpenAI
from pydantic import BaseModel

from lingua_craft.gateway.base import FALLBACK_FEEDBACK, WordFetchError
from lingua_craft.gateway.prompts import (
    FEEDBACK_SCHEMA,
    WORD_LIST_SCHEMA,
    build_evaluation_prompt,
    build_word_list_prompt,
)
from lingua_craft.models.vocabulary import EducationLevel, FeedbackResponse, WordItem

logger = structlog.get_logger()


class _WordList(BaseModel):
    words: list[WordItem]


class OpenAIGateway:
    """Generates words and grades sentences with the Chat Completions API.

    Each call is a single request with a strict JSON schema and no retry.

    Args:
        api_key: OpenAI API key.
        word_model: Model used for word generation.
        evaluation_model: Model used for sentence grading.
        words_per_batch: Number of words requested per fetch.
        word_temperature: Sampling temperature for word generation.
        evaluation_temperature: Sampling temperature for grading.
        base_url: Optional API base URL override.
        timeout: Request timeout in seconds.
        client: Pre-built client, mainly for tests.
    """

    def __init__(
        self,
        api_key: str,
        word_model: str = "gpt-4o-mini",
        evaluation_model: str = "gpt-4o-mini",
        words_per_batch: int = 5,
        word_temperature: float = 0.7,
        evaluation_temperature: float = 0.4,
        base_url: str | None = None,
        timeout: float = 60.0,
        client: AsyncOpenAI | None = None,
    ):
        self.client = client or AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
        )
        self.word_model = word_model
        self.evaluation_model = evaluation_model
        self.words_per_batch = words_per_batch
        self.word_temperature = word_temperature
        self.evaluation_temperature = evaluation_temperature

    async def fetch_words(
        self, level: EducationLevel, exclude_words: list[str]
    ) -> list[WordItem]:
        """Fetch a batch of new words for a level.

        Args:
            level: Learner's education level.
            exclude_words: Words the model should avoid suggesting.

        Returns:
            Words as returned by the model; duplicates are not filtered.

        Raises:
            WordFetchError: On API, empty-response or parse failure.
        """
        prompt = build_word_list_prompt(level, exclude_words, self.words_per_batch)
        try:
            response = await self.client.chat.completions.create(
                model=self.word_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.word_temperature,
                response_format={"type": "json_schema", "json_schema": WORD_LIST_SCHEMA},
            )
            content = response.choices[0].message.content
            if not content:
                raise ValueError("Empty response from AI")
            words = _WordList.model_validate_json(content).words
            if not words:
                raise ValueError("AI returned no words")
        except Exception as exc:
            logger.exception("word_fetch_failed", level=level.name)
            raise WordFetchError(str(exc)) from exc

        logger.info("words_fetched", level=level.name, count=len(words))
        return words

    async def evaluate_sentence(self, word: WordItem, sentence: str) -> FeedbackResponse:
        """Grade a learner sentence for a target word.

        Backend failures are absorbed and replaced with a generic
        "try again later" response marked incorrect.
        """
        prompt = build_evaluation_prompt(word, sentence)
        try:
            response = await self.client.chat.completions.create(
                model=self.evaluation_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.evaluation_temperature,
                response_format={"type": "json_schema", "json_schema": FEEDBACK_SCHEMA},
            )
            content = response.choices[0].message.content
            if not content:
                raise ValueError("Empty response from AI")
            result = FeedbackResponse.model_validate_json(content)
            logger.info("sentence_evaluated", word=word.word, is_correct=result.is_correct)
            return result

        except Exception:
            logger.exception("sentence_evaluation_failed", word=word.word)
            return FeedbackResponse(is_correct=False, feedback=FALLBACK_FEEDBACK)

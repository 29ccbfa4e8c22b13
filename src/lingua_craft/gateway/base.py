"""Gateway protocols and errors."""

from typing import Protocol

from lingua_craft.models.vocabulary import EducationLevel, FeedbackResponse, WordItem

FALLBACK_FEEDBACK = "抱歉，暂时无法验证您的句子，请稍后再试。"


class LinguaCraftError(Exception):
    """Base class for application errors."""


class WordFetchError(LinguaCraftError):
    """The word source could not produce a batch of words."""


class WordSource(Protocol):
    async def fetch_words(
        self, level: EducationLevel, exclude_words: list[str]
    ) -> list[WordItem]:
        """Return new words for ``level``; raise WordFetchError on failure."""
        ...


class SentenceGrader(Protocol):
    async def evaluate_sentence(self, word: WordItem, sentence: str) -> FeedbackResponse:
        """Grade ``sentence`` for ``word``; never raises on backend failure."""
        ...

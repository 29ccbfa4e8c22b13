"""Vocabulary data models."""

import re
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_LABEL_PATTERN = re.compile(r"\((.*?)\)")


class EducationLevel(StrEnum):
    """Proficiency tiers a learner can choose from."""

    PRIMARY = "Primary School (小学)"
    MIDDLE = "Junior High School (初中)"
    HIGH = "Senior High School (高中)"
    UNIVERSITY = "University (大学/四六级)"
    PROFESSIONAL = "Professional/Study Abroad (雅思/托福/职场)"

    @property
    def label(self) -> str:
        """Native-language part of the level name, e.g. "初中"."""
        match = _LABEL_PATTERN.search(self.value)
        return match.group(1) if match else self.value

    @classmethod
    def parse(cls, raw: str) -> "EducationLevel":
        """Resolve a level from its value or member name (case-insensitive)."""
        try:
            return cls(raw)
        except ValueError:
            pass
        try:
            return cls[raw.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown education level: {raw!r}") from None


class Screen(StrEnum):
    """Top-level screens of the application."""

    ONBOARDING = "onboarding"
    LEARNING = "learning"
    REVIEW = "review"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class WordItem(_CamelModel):
    """A vocabulary word produced by the word source."""

    word: str
    definition: str
    part_of_speech: str
    example: str  # reference sentence, shown only as a hint


class MasteredItem(WordItem):
    """A word the learner used correctly, with their sentence."""

    user_sentence: str
    mastered_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_word(cls, word: WordItem, sentence: str) -> "MasteredItem":
        return cls(**word.model_dump(), user_sentence=sentence)


class FeedbackResponse(_CamelModel):
    """Grading result for one sentence attempt."""

    is_correct: bool
    feedback: str
    improved_sentence: str | None = None

    @field_validator("improved_sentence")
    @classmethod
    def _blank_means_absent(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

"""Session data models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from lingua_craft.models.vocabulary import (
    EducationLevel,
    FeedbackResponse,
    MasteredItem,
    Screen,
    WordItem,
)


class SessionSnapshot(BaseModel):
    """Read-only view of the controller state handed to the presentation layer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    screen: Screen
    level: EducationLevel | None = None
    level_label: str | None = None
    is_loading: bool = False
    is_checking: bool = False
    word_queue: list[WordItem] = []
    current_index: int = 0
    current_word: WordItem | None = None
    sentence: str = ""
    feedback: FeedbackResponse | None = None
    show_hint: bool = False
    mastered_items: list[MasteredItem] = []
    notice: str | None = None

    @property
    def can_submit(self) -> bool:
        """Whether the submit control is enabled."""
        return (
            self.current_word is not None
            and not self.is_checking
            and not (self.feedback and self.feedback.is_correct)
            and bool(self.sentence.strip())
        )

    @property
    def can_advance(self) -> bool:
        return bool(self.feedback and self.feedback.is_correct)

"""View-models for the onboarding, learning and review screens.

Pure functions over a SessionSnapshot; the browser front end only renders
what these return and posts intents back to the API.
"""

from typing import Any

from lingua_craft.models.session import SessionSnapshot
from lingua_craft.models.vocabulary import EducationLevel, MasteredItem, Screen

LEVEL_CARDS: list[dict[str, str]] = [
    {"level": EducationLevel.PRIMARY.name, "label": "小学", "sub_label": "基础词汇"},
    {"level": EducationLevel.MIDDLE.name, "label": "初中", "sub_label": "中考必备"},
    {"level": EducationLevel.HIGH.name, "label": "高中", "sub_label": "高考冲刺"},
    {"level": EducationLevel.UNIVERSITY.name, "label": "大学", "sub_label": "四六级 / 考研"},
    {
        "level": EducationLevel.PROFESSIONAL.name,
        "label": "职场 / 留学",
        "sub_label": "雅思 / 托福 / 商务",
    },
]


def level_cards() -> list[dict[str, str]]:
    """Cards shown on the onboarding screen, one per education level."""
    return [
        {**card, "value": EducationLevel[card["level"]].value}
        for card in LEVEL_CARDS
    ]


def progress_dots(queue_length: int, current_index: int) -> list[str]:
    """Progress indicator state for each queued word."""
    dots = []
    for idx in range(queue_length):
        if idx < current_index:
            dots.append("done")
        elif idx == current_index:
            dots.append("current")
        else:
            dots.append("pending")
    return dots


def review_cards(items: list[MasteredItem]) -> list[dict[str, str]]:
    return [
        {
            "word": item.word,
            "part_of_speech": item.part_of_speech,
            "definition": item.definition,
            "user_sentence": item.user_sentence,
            "mastered_on": item.mastered_at.astimezone().date().isoformat(),
        }
        for item in items
    ]


def render_state(snapshot: SessionSnapshot) -> dict[str, Any]:
    """Build the full payload the front end renders for the current screen."""
    payload: dict[str, Any] = {
        "screen": snapshot.screen.value,
        "level": snapshot.level.name if snapshot.level else None,
        "level_label": snapshot.level_label,
        "is_loading": snapshot.is_loading,
        "notice": snapshot.notice,
        "mastered_count": len(snapshot.mastered_items),
    }

    if snapshot.screen == Screen.ONBOARDING:
        payload["levels"] = level_cards()

    elif snapshot.screen == Screen.LEARNING:
        word = snapshot.current_word
        payload["progress"] = progress_dots(len(snapshot.word_queue), snapshot.current_index)
        payload["word"] = word.model_dump() if word else None
        payload["hint"] = word.example if word and snapshot.show_hint else None
        payload["sentence"] = snapshot.sentence
        payload["is_checking"] = snapshot.is_checking
        payload["feedback"] = (
            snapshot.feedback.model_dump() if snapshot.feedback else None
        )
        payload["can_submit"] = snapshot.can_submit
        payload["can_advance"] = snapshot.can_advance

    else:
        payload["mastered"] = review_cards(snapshot.mastered_items)

    return payload

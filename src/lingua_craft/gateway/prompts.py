"""Prompt templates and response schemas for the AI gateway."""

import json

from lingua_craft.models.vocabulary import EducationLevel, WordItem

WORD_LIST_PROMPT = """\
Generate a list of {count} distinct, useful English vocabulary words suitable for \
a student in Mainland China at the "{level}" level.
Ensure the words are not in this exclusion list: {exclusions}.
The words should be challenging enough to learn but appropriate for the level.
For the 'example' field, provide a simple sentence using the word.
For the 'definition' field, provide the English definition followed by the Chinese \
meaning in parentheses. Example: "To run fast (跑，奔跑)".
"""

EVALUATION_PROMPT = """\
The user is a Chinese student learning the English word: "{word}" \
({part_of_speech}, meaning: {definition}).
The user wrote this sentence using the word: "{sentence}".

Task:
1. Determine if the sentence uses the word correctly (context, grammar, spelling).
2. If it is correct and natural: set isCorrect to true. Provide positive feedback in \
Simplified Chinese (简体中文). You may suggest a slightly more native phrasing in \
'improvedSentence' if applicable, otherwise set it to null.
3. If it is incorrect: set isCorrect to false and set improvedSentence to null.
   - Explain the specific error (grammar, wrong meaning, unnatural collocation) in \
Simplified Chinese (简体中文).
   - Do NOT give the full answer immediately. Guide the user to fix it themselves.
   - Use the 'feedback' field to speak directly to the user encouragingly \
(e.g., "尝试得很棒，但是...").

Return JSON matching the schema.
"""

_WORD_ITEM_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "word": {"type": "string"},
        "definition": {"type": "string"},
        "partOfSpeech": {"type": "string"},
        "example": {"type": "string"},
    },
    "required": ["word", "definition", "partOfSpeech", "example"],
    "additionalProperties": False,
}

# Structured outputs need an object at the top level, so the list is wrapped.
WORD_LIST_SCHEMA: dict = {
    "name": "word_list",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "words": {"type": "array", "items": _WORD_ITEM_SCHEMA},
        },
        "required": ["words"],
        "additionalProperties": False,
    },
}

FEEDBACK_SCHEMA: dict = {
    "name": "sentence_feedback",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "isCorrect": {"type": "boolean"},
            "feedback": {"type": "string"},
            "improvedSentence": {"type": ["string", "null"]},
        },
        "required": ["isCorrect", "feedback", "improvedSentence"],
        "additionalProperties": False,
    },
}


def build_word_list_prompt(
    level: EducationLevel, exclude_words: list[str], count: int = 5
) -> str:
    return WORD_LIST_PROMPT.format(
        count=count,
        level=level.value,
        exclusions=json.dumps(exclude_words, ensure_ascii=False),
    )


def build_evaluation_prompt(word: WordItem, sentence: str) -> str:
    return EVALUATION_PROMPT.format(
        word=word.word,
        part_of_speech=word.part_of_speech,
        definition=word.definition,
        sentence=sentence,
    )

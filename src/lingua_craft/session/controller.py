"""Session controller: screen state machine and per-word practice flow."""

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog

from lingua_craft.gateway.base import FALLBACK_FEEDBACK, SentenceGrader, WordSource
from lingua_craft.models.session import SessionSnapshot
from lingua_craft.models.vocabulary import (
    EducationLevel,
    FeedbackResponse,
    MasteredItem,
    Screen,
    WordItem,
)
from lingua_craft.storage.mastered import MasteredRepository

logger = structlog.get_logger()

LEVEL_SELECT_FAILED_NOTICE = "启动失败，请检查您的网络连接或 API Key。"
RETURN_HOME_CONFIRMATION = "确定要返回首页重新选择学段吗？当前的临时练习进度将被重置。"


class SessionController:
    """Sequences onboarding, word fetch, sentence grading and review.

    All intents are coroutines driven from a single event loop. Each
    gateway call runs as a task owned by the controller, and every state
    change that makes a pending response meaningless (level selection,
    return home, moving to another word) bumps a generation counter.
    Responses that come back under an older generation are dropped.

    Args:
        word_source: Supplies new words for a level.
        grader: Grades learner sentences.
        repository: Durable store for the mastered list.
    """

    def __init__(
        self,
        word_source: WordSource,
        grader: SentenceGrader,
        repository: MasteredRepository,
    ):
        self.word_source = word_source
        self.grader = grader
        self.repository = repository

        self.level: EducationLevel | None = None
        self.screen: Screen = Screen.ONBOARDING
        self.word_queue: list[WordItem] = []
        self.current_index: int = 0
        self.mastered_items: list[MasteredItem] = repository.load()
        self.is_loading: bool = False
        self.notice: str | None = None

        # Per-word sub-flow
        self.sentence: str = ""
        self.is_checking: bool = False
        self.feedback: FeedbackResponse | None = None
        self.show_hint: bool = False

        self._generation: int = 0
        self._tasks: dict[str, asyncio.Task] = {}

    @property
    def current_word(self) -> WordItem | None:
        if 0 <= self.current_index < len(self.word_queue):
            return self.word_queue[self.current_index]
        return None

    @property
    def mastered_words(self) -> list[str]:
        return [item.word for item in self.mastered_items]

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            screen=self.screen,
            level=self.level,
            level_label=self.level.label if self.level else None,
            is_loading=self.is_loading,
            is_checking=self.is_checking,
            word_queue=list(self.word_queue),
            current_index=self.current_index,
            current_word=self.current_word,
            sentence=self.sentence,
            feedback=self.feedback,
            show_hint=self.show_hint,
            mastered_items=list(self.mastered_items),
            notice=self.notice,
        )

    # ------------------------------------------------------------------
    # Screen transitions
    # ------------------------------------------------------------------

    async def select_level(self, level: EducationLevel) -> None:
        """Start a session at ``level`` and load the first batch of words."""
        if self.screen != Screen.ONBOARDING or self.is_loading:
            logger.info("level_select_ignored", screen=self.screen.value, level=level.name)
            return

        self._generation += 1
        generation = self._generation
        self.level = level
        self.is_loading = True
        self.notice = None
        logger.info("level_selected", level=level.name)

        try:
            task = await self._run(
                "fetch", self.word_source.fetch_words(level, self.mastered_words)
            )
        except asyncio.CancelledError:
            if generation == self._generation:
                self.is_loading = False
                self.level = None
            raise
        if self._is_stale(task, generation):
            return

        self.is_loading = False
        try:
            words = task.result()
        except Exception:
            logger.exception("level_start_failed", level=level.name)
            self.notice = LEVEL_SELECT_FAILED_NOTICE
            self.level = None
            return

        self.word_queue = list(words)
        self.current_index = 0
        self._clear_word_state()
        self.screen = Screen.LEARNING

    def toggle_review(self) -> None:
        """Switch between the learning and review screens."""
        if self.screen == Screen.LEARNING:
            self.screen = Screen.REVIEW
        elif self.screen == Screen.REVIEW:
            self.screen = Screen.LEARNING

    def return_home(self, confirmed: bool) -> bool:
        """Drop the current level and go back to onboarding.

        The caller must have asked the learner (see RETURN_HOME_CONFIRMATION).

        Returns:
            True if the session was reset.
        """
        if self.screen == Screen.ONBOARDING or not confirmed:
            return False

        self._generation += 1
        for task in self._tasks.values():
            task.cancel()
        self._tasks.clear()

        self.screen = Screen.ONBOARDING
        self.level = None
        self.word_queue = []
        self.current_index = 0
        self.is_loading = False
        self._clear_word_state()
        logger.info("returned_home")
        return True

    def dismiss_notice(self) -> None:
        self.notice = None

    # ------------------------------------------------------------------
    # Per-word flow
    # ------------------------------------------------------------------

    def update_sentence(self, text: str) -> None:
        if self.current_word is None or self.is_checking or self._is_correct():
            return
        self.sentence = text

    def reveal_hint(self) -> None:
        if self.current_word is not None:
            self.show_hint = True

    async def submit_sentence(self, text: str | None = None) -> None:
        """Grade the draft sentence (optionally replacing it with ``text`` first)."""
        word = self.current_word
        if word is None or self.is_loading or self.is_checking or self._is_correct():
            return
        if text is not None:
            self.sentence = text
        if not self.sentence.strip():
            return

        generation = self._generation
        self.is_checking = True
        self.feedback = None

        try:
            task = await self._run(
                "evaluate", self.grader.evaluate_sentence(word, self.sentence)
            )
        except asyncio.CancelledError:
            if generation == self._generation:
                self.is_checking = False
            raise
        if self._is_stale(task, generation):
            return

        self.is_checking = False
        try:
            self.feedback = task.result()
        except Exception:
            logger.exception("sentence_grader_error", word=word.word)
            self.feedback = FeedbackResponse(is_correct=False, feedback=FALLBACK_FEEDBACK)

    async def advance(self) -> None:
        """Record the correctly used word and move on."""
        word = self.current_word
        if word is None or not self._is_correct():
            return

        item = MasteredItem.from_word(word, self.sentence)
        new_items = [item] + self.mastered_items
        self.repository.save_all(new_items)
        self.mastered_items = new_items
        logger.info("word_mastered", word=word.word, total=len(self.mastered_items))
        await self._move_to_next_word()

    async def skip(self) -> None:
        if self.current_word is None or self.is_checking or self.is_loading:
            return
        logger.info("word_skipped", word=self.current_word.word)
        await self._move_to_next_word()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_correct(self) -> bool:
        return self.feedback is not None and self.feedback.is_correct

    def _clear_word_state(self) -> None:
        self.sentence = ""
        self.feedback = None
        self.is_checking = False
        self.show_hint = False

    async def _move_to_next_word(self) -> None:
        self._generation += 1
        self._clear_word_state()

        next_index = self.current_index + 1
        if next_index < len(self.word_queue):
            self.current_index = next_index
            return
        await self._refill_queue()

    async def _refill_queue(self) -> None:
        level = self.level
        if level is None:
            return

        generation = self._generation
        exclude = self.mastered_words + [w.word for w in self.word_queue]
        self.is_loading = True

        try:
            task = await self._run("fetch", self.word_source.fetch_words(level, exclude))
        except asyncio.CancelledError:
            if generation == self._generation:
                self.is_loading = False
            raise
        if self._is_stale(task, generation):
            return

        self.is_loading = False
        try:
            words = task.result()
        except Exception:
            logger.exception("queue_refill_failed", level=level.name)
            self.word_queue = []
            self.current_index = 0
            return

        self.word_queue = list(words)
        self.current_index = 0

    async def _run(self, slot: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run a gateway call as a cancellable task and wait for it to settle."""
        task = asyncio.create_task(coro)
        self._tasks[slot] = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if self._tasks.get(slot) is task:
                del self._tasks[slot]
        return task

    def _is_stale(self, task: asyncio.Task, generation: int) -> bool:
        if task.cancelled() or generation != self._generation:
            if not task.cancelled():
                task.exception()  # mark retrieved
            logger.info("stale_response_discarded", generation=generation)
            return True
        return False

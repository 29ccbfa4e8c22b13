"""Mastered-word persistence (single JSON document, atomic write)."""

import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import TypeAdapter, ValidationError

from lingua_craft.models.vocabulary import MasteredItem

logger = structlog.get_logger()

_ITEMS_ADAPTER = TypeAdapter(list[MasteredItem])


class MasteredRepository(Protocol):
    def load(self) -> list[MasteredItem]: ...

    def save_all(self, items: list[MasteredItem]) -> None: ...


def dump_items(items: list[MasteredItem]) -> bytes:
    return _ITEMS_ADAPTER.dump_json(items, by_alias=True, indent=2)


class JsonMasteredRepository:
    """Stores the whole mastered list as one JSON file.

    The file is read once by the caller at startup and overwritten
    wholesale on every save.
    """

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> list[MasteredItem]:
        if not self.path.exists():
            return []
        try:
            return _ITEMS_ADAPTER.validate_json(self.path.read_bytes())
        except (OSError, ValidationError):
            logger.exception("mastered_store_corrupt", path=str(self.path))
            return []

    def save_all(self, items: list[MasteredItem]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "wb", dir=self.path.parent, delete=False, suffix=".json"
        ) as tmp:
            tmp.write(dump_items(items))
        os.replace(tmp.name, self.path)
        logger.debug("mastered_saved", path=str(self.path), count=len(items))


class InMemoryMasteredRepository:
    """Keeps the mastered list in process memory only."""

    def __init__(self, items: list[MasteredItem] | None = None):
        self._items: list[MasteredItem] = list(items or [])
        self.save_count = 0

    def load(self) -> list[MasteredItem]:
        return list(self._items)

    def save_all(self, items: list[MasteredItem]) -> None:
        self._items = list(items)
        self.save_count += 1

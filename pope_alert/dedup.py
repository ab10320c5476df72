from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Protocol, Union

from .exceptions import StorageWriteError


logger = logging.getLogger(__name__)


class DedupStore(Protocol):
    def read_last_id(self) -> Optional[str]:  # pragma: no cover - interface
        ...

    def write_last_id(self, item_id: str) -> None:  # pragma: no cover - interface
        ...


class FileDedupStore:
    """
    Keeps the id of the last processed feed entry in a single text file.

    A missing or unreadable file means "no history" and reads as None.
    """

    def __init__(self, path: Union[str, Path] = "last_guid.txt") -> None:
        self.path = Path(path)

    def read_last_id(self) -> Optional[str]:
        try:
            value = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s, treating as no history: %s", self.path, e)
            return None
        return value or None

    def write_last_id(self, item_id: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(item_id.strip(), encoding="utf-8")
        except OSError as e:
            raise StorageWriteError(f"Failed to write {self.path}: {e}") from e


class MemoryDedupStore:
    """In-memory DedupStore; records every write."""

    def __init__(self, initial: Optional[str] = None) -> None:
        self.value = initial
        self.writes: List[str] = []

    def read_last_id(self) -> Optional[str]:
        return self.value

    def write_last_id(self, item_id: str) -> None:
        self.value = item_id.strip()
        self.writes.append(self.value)

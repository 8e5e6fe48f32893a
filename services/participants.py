"""Participant sources for the selection ledger."""

from __future__ import annotations

import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Sequence

from cachetools import TTLCache

from core import get_logger, PickerDefaults
from core.exceptions import StorageError

logger = get_logger(__name__)


class ParticipantSource(ABC):
    """Ordered, possibly duplicated, list of participant names or emails."""

    @abstractmethod
    def list_participants(self) -> List[str]:
        ...


class StaticParticipantSource(ParticipantSource):
    def __init__(self, participants: Iterable[str] = ()) -> None:
        self._participants = tuple(participants)

    def list_participants(self) -> List[str]:
        return list(self._participants)


class FileParticipantSource(ParticipantSource):
    """Reads a JSON array of strings, re-reading at most every ``cache_ttl`` seconds.

    A missing file is created with the sample participant list. An unreadable
    or malformed file is logged and treated as an empty list.
    """

    _CACHE_KEY = "participants"

    def __init__(
        self,
        path: str,
        cache_ttl: int = 0,
        seed: Sequence[str] = PickerDefaults.SAMPLE_PARTICIPANTS,
    ) -> None:
        self.path = Path(path)
        self._cache = TTLCache(maxsize=1, ttl=cache_ttl) if cache_ttl > 0 else None
        self._cache_lock = threading.Lock()
        self._ensure_file(seed)

    def _ensure_file(self, seed: Sequence[str]) -> None:
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(list(seed), indent=2), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot create participants file {self.path}: {e}") from e
        logger.info("Created %s with %d sample participants", self.path.name, len(seed))

    def _read(self) -> List[str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Error reading %s, treating as empty: %s", self.path, e)
            return []
        if not isinstance(data, list):
            logger.error("%s does not contain a JSON array, treating as empty", self.path)
            return []
        return [str(item) for item in data]

    def list_participants(self) -> List[str]:
        if self._cache is None:
            return self._read()
        with self._cache_lock:
            participants = self._cache.get(self._CACHE_KEY)
            if participants is None:
                participants = self._cache[self._CACHE_KEY] = self._read()
            return list(participants)

#!/usr/bin/env python3
"""JSON-backed leaderboard store and the core module that exposes it."""

from __future__ import annotations

import json
import logging
import math
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from core.core import CommandHandler
from modules.base import BaseModule
from modules.errors import StorageError, ValidationError


logger = logging.getLogger("leaderboard")

MAX_ENTRIES = 100
TOP_N = 10
NAME_MAX_LENGTH = 15

# ECMAScript WhiteSpace and LineTerminator code points; str.strip() uses a
# different set (it drops \x1c-\x1f and \x85, keeps \ufeff).
NAME_TRIM_CHARS = (
    "\t\n\x0b\x0c\r \xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as UTC ISO-8601 with milliseconds and a ``Z`` suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_name(name: str, max_length: int = NAME_MAX_LENGTH) -> str:
    """Trim, cut to ``max_length`` characters, then drop angle brackets."""
    trimmed = name.strip(NAME_TRIM_CHARS)[:max_length]
    return trimmed.replace("<", "").replace(">", "")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return True


@dataclass(frozen=True)
class ScoreEntry:
    """A single persisted score submission."""

    name: str
    score: int
    player_id: str
    date: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "playerId": self.player_id,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoreEntry":
        name = data["name"]
        score = data["score"]
        player_id = data["playerId"]
        date = data["date"]
        if not isinstance(name, str) or not name:
            raise ValueError("name must be a non-empty string")
        if not isinstance(player_id, str) or not isinstance(date, str):
            raise ValueError("playerId and date must be strings")
        if not _is_number(score):
            raise ValueError("score must be numeric")
        return cls(name=name, score=math.floor(score), player_id=player_id, date=date)


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of an accepted submission; ``rank`` is None when truncated away."""

    entry: ScoreEntry
    rank: Optional[int] = None

    @property
    def ranked(self) -> bool:
        return self.rank is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "rank": self.rank if self.rank is not None else 0,
            "entry": self.entry.to_dict(),
        }


def _by_score(entries: Iterable[ScoreEntry]) -> List[ScoreEntry]:
    return sorted(entries, key=lambda entry: entry.score, reverse=True)


class LeaderboardStore:
    """Bounded, score-ordered collection persisted as one JSON document.

    Every mutation reads the whole record, rewrites it and keeps at most
    ``max_entries`` rows. Submissions made through one store instance are
    serialised; separate processes sharing the file can still race.
    """

    def __init__(
        self,
        path: Union[str, Path],
        *,
        max_entries: int = MAX_ENTRIES,
        top_n: int = TOP_N,
        name_max_length: int = NAME_MAX_LENGTH,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.path = Path(path)
        self.max_entries = max(1, int(max_entries))
        self.top_n = max(1, int(top_n))
        self.name_max_length = max(1, int(name_max_length))
        self._clock = clock or _utc_now
        self._lock = threading.Lock()

    # Persistence ---------------------------------------------------------
    def initialize(self) -> None:
        """Create an empty record if none exists yet."""
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({"scores": []}), encoding="utf-8")
        except OSError as exc:
            logger.error({"evt": "leaderboard_init_error", "path": str(self.path), "error": str(exc)})
            return
        logger.info({"evt": "leaderboard_initialized", "path": str(self.path)})

    def load(self) -> List[ScoreEntry]:
        """Return every stored entry, or an empty list if the record is unreadable."""
        self.initialize()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error({"evt": "leaderboard_load_error", "path": str(self.path), "error": str(exc)})
            return []

        raw_scores = data.get("scores") if isinstance(data, dict) else None
        if not isinstance(raw_scores, list):
            logger.error(
                {"evt": "leaderboard_load_error", "path": str(self.path), "error": "missing 'scores' list"}
            )
            return []

        entries: List[ScoreEntry] = []
        for index, item in enumerate(raw_scores):
            try:
                entries.append(ScoreEntry.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning({"evt": "leaderboard_entry_skipped", "index": index, "error": str(exc)})
        return entries

    def save(self, entries: Iterable[ScoreEntry]) -> bool:
        """Overwrite the record; returns False instead of raising on I/O errors."""
        payload = {"scores": [entry.to_dict() for entry in entries]}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error({"evt": "leaderboard_save_error", "path": str(self.path), "error": str(exc)})
            return False
        return True

    # Queries -------------------------------------------------------------
    def get_top_scores(self) -> List[ScoreEntry]:
        return _by_score(self.load())[: self.top_n]

    def get_player_best(self, player_id: str) -> Optional[ScoreEntry]:
        matches = [entry for entry in self.load() if entry.player_id == player_id]
        if not matches:
            return None
        return _by_score(matches)[0]

    # Mutations -----------------------------------------------------------
    def submit_score(self, name: Any, score: Any, player_id: Any) -> SubmitResult:
        """Validate and record a score, returning its rank on the stored board.

        Raises ``ValidationError`` for bad input and ``StorageError`` when the
        record could not be written.
        """
        if (
            not isinstance(name, str)
            or not name
            or not _is_number(score)
            or not isinstance(player_id, str)
            or not player_id
        ):
            raise ValidationError("Invalid data")

        sanitized = sanitize_name(name, self.name_max_length)
        if not sanitized:
            raise ValidationError("Name is required")

        with self._lock:
            entries = self.load()
            entry = ScoreEntry(
                name=sanitized,
                score=math.floor(score),
                player_id=player_id,
                date=format_timestamp(self._clock()),
            )
            entries.append(entry)
            entries = _by_score(entries)[: self.max_entries]
            if not self.save(entries):
                raise StorageError("Failed to save score")

        rank = next(
            (
                position
                for position, stored in enumerate(entries, start=1)
                if stored.player_id == entry.player_id
                and stored.score == entry.score
                and stored.date == entry.date
            ),
            None,
        )
        logger.info({"evt": "score_submitted", "player_id": player_id, "score": entry.score, "rank": rank})
        return SubmitResult(entry=entry, rank=rank)


class LeaderboardModule(BaseModule):
    """Exposes a LeaderboardStore as core commands and publishes board updates."""

    name = "leaderboard"

    def __init__(self, store: LeaderboardStore) -> None:
        super().__init__()
        self.store = store

    def start(self) -> None:
        self.store.initialize()

    def build_command_map(self) -> Dict[str, CommandHandler]:
        return {
            "leaderboard.top": self._top_scores,
            "leaderboard.submit": self._submit,
            "leaderboard.player_best": self._player_best,
        }

    def _top_scores(self, payload: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self.store.get_top_scores()]

    def _submit(self, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = payload or {}
        result = self.store.submit_score(
            payload.get("name"),
            payload.get("score"),
            payload.get("playerId"),
        )
        response = result.to_dict()
        self.publish(
            "leaderboard_update",
            {"rank": response["rank"], "entry": response["entry"], "top": self._top_scores()},
        )
        return response

    def _player_best(self, payload: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        player_id = (payload or {}).get("playerId")
        best = self.store.get_player_best(player_id)
        return best.to_dict() if best is not None else None


__all__ = [
    "MAX_ENTRIES",
    "TOP_N",
    "NAME_MAX_LENGTH",
    "ScoreEntry",
    "SubmitResult",
    "LeaderboardStore",
    "LeaderboardModule",
    "format_timestamp",
    "sanitize_name",
]

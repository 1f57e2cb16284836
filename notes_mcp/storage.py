"""In-memory storage layer for notes."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from .models import Note, utc_now_iso

logger = logging.getLogger(__name__)

IdGenerator = Callable[[], str]


class MonotonicIdGenerator:
    """Produce ``n<milliseconds>`` ids that never repeat within a process.

    Two notes created within the same millisecond would share a wall-clock
    id, so the generator bumps past the last value it handed out.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0

    def __call__(self) -> str:
        stamp = int(self._clock() * 1000)
        if stamp <= self._last:
            stamp = self._last + 1
        self._last = stamp
        return f"n{stamp}"


def demo_notes() -> list[Note]:
    """The two welcome notes a fresh server starts with."""
    return [
        Note(
            id="n1",
            title="Welcome to Auxee Notes",
            content="You can create, list, and view notes from ChatGPT now 🎉",
            tags=["demo"],
        ),
        Note(
            id="n2",
            title="Next Actions",
            content="- Wire bookmarks\n- Add summarize tool\n- Connect org auth if needed",
            tags=["todo"],
        ),
    ]


class NoteStore:
    """Ordered, most-recent-first sequence of notes kept in process memory.

    Nothing is persisted; a restart starts from ``seed`` again.
    """

    def __init__(
        self,
        seed: Iterable[Note] = (),
        id_generator: IdGenerator | None = None,
    ) -> None:
        self._notes: list[Note] = list(seed)
        self._ids = {n.id for n in self._notes}
        if len(self._ids) != len(self._notes):
            raise ValueError("Seed notes must have unique ids")
        self._next_id = id_generator or MonotonicIdGenerator()

    def create(self, title: str, content: str, tags: list[str]) -> Note:
        """Build a note with a fresh id and put it at the front."""
        note_id = self._next_id()
        while note_id in self._ids:
            note_id = self._next_id()
        note = Note(
            id=note_id,
            title=title,
            content=content,
            tags=list(tags),
            created_at=utc_now_iso(),
        )
        self.append_front(note)
        logger.info("Created note %s — '%s'", note.id, note.title)
        return note

    def append_front(self, note: Note) -> None:
        """Insert an existing note as the most recent one."""
        if note.id in self._ids:
            raise ValueError(f"Duplicate note id: {note.id}")
        self._notes.insert(0, note)
        self._ids.add(note.id)

    def list_all(self) -> list[Note]:
        """Return every stored note, newest first."""
        return list(self._notes)

    @property
    def count(self) -> int:
        """Number of stored notes."""
        return len(self._notes)

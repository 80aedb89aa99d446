"""Linear undo/redo history over full collection snapshots.

Each entry is an independent deep copy of the whole contact list. ``snapshot``
is called *before* a mutation, so after it ``entries[cursor]`` holds the state
the mutation is about to replace. The first ``undo`` from the newest state
also records the live collection after the cursor so ``redo`` can return to
it; from then on ``entries[cursor + 1]`` is always the live state.
"""
from __future__ import annotations

import copy
from typing import List, Optional, Sequence, Tuple

from .models import Contact

Snapshot = Tuple[Contact, ...]


def _freeze(contacts: Sequence[Contact]) -> Snapshot:
    return tuple(copy.deepcopy(list(contacts)))


def _thaw(snapshot: Snapshot) -> List[Contact]:
    return copy.deepcopy(list(snapshot))


class HistoryManager:
    """Snapshots plus a cursor; undo and redo are no-ops at the boundaries."""

    def __init__(self, limit: Optional[int] = None) -> None:
        if limit is not None and limit < 2:
            raise ValueError("history limit must be at least 2")
        self.limit = limit
        self.entries: List[Snapshot] = []
        self.cursor = -1

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def can_undo(self) -> bool:
        return self.cursor >= 0

    @property
    def can_redo(self) -> bool:
        return self.cursor + 2 < len(self.entries)

    def snapshot(self, contacts: Sequence[Contact]) -> None:
        """Record the pre-mutation collection and drop any redo branch."""
        del self.entries[self.cursor + 1:]
        self.entries.append(_freeze(contacts))
        self.cursor = len(self.entries) - 1
        self._trim()

    def undo(self, current: Sequence[Contact]) -> Optional[List[Contact]]:
        """Step back one state, returning the collection to restore."""
        if not self.can_undo:
            return None
        if self.cursor == len(self.entries) - 1:
            self.entries.append(_freeze(current))
            self._trim()
        restored = self.entries[self.cursor]
        self.cursor -= 1
        return _thaw(restored)

    def redo(self) -> Optional[List[Contact]]:
        """Step forward one state, returning the collection to restore."""
        if not self.can_redo:
            return None
        self.cursor += 1
        return _thaw(self.entries[self.cursor + 1])

    def clear(self) -> None:
        self.entries.clear()
        self.cursor = -1

    def _trim(self) -> None:
        if self.limit is None:
            return
        while len(self.entries) > self.limit:
            self.entries.pop(0)
            self.cursor -= 1

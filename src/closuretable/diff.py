from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional

from .path import Path, path_key

logger = logging.getLogger(__name__)

PathCallback = Callable[[Path], None]


def _next(it: Iterator[Path]) -> Optional[Path]:
    return next(it, None)


def calculate_diff(
    previous: Iterable[Path],
    current: Iterable[Path],
    on_add: PathCallback,
    on_remove: PathCallback,
    on_update: PathCallback,
) -> List[Path]:
    """
    Compare two closure snapshots and report the row-level changes.

    Both inputs are sorted by ``(src, dest)`` and walked in lockstep:

    - key only in ``current``            -> ``on_add(row)``
    - key only in ``previous``           -> ``on_remove(row)``
    - key in both, depth differs         -> ``on_update(current_row)``
    - key in both, same depth            -> nothing

    Returns the sorted ``current`` rows, to be fed back as ``previous`` on
    the next call.
    """
    before = sorted(previous, key=path_key)
    after = sorted(current, key=path_key)

    before_it = iter(before)
    after_it = iter(after)
    old = _next(before_it)
    new = _next(after_it)

    added = removed = updated = 0
    while old is not None and new is not None:
        old_key = old.key
        new_key = new.key
        if old_key < new_key:
            on_remove(old)
            removed += 1
            old = _next(before_it)
        elif old_key > new_key:
            on_add(new)
            added += 1
            new = _next(after_it)
        else:
            if old.depth != new.depth:
                on_update(new)
                updated += 1
            old = _next(before_it)
            new = _next(after_it)

    # Drain whichever side is left over.
    while new is not None:
        on_add(new)
        added += 1
        new = _next(after_it)
    while old is not None:
        on_remove(old)
        removed += 1
        old = _next(before_it)

    logger.debug(
        "Diff of %d -> %d rows: %d added, %d removed, %d updated",
        len(before),
        len(after),
        added,
        removed,
        updated,
    )
    return after


@dataclass(slots=True)
class ChangeSet:
    """
    Collects diff events.

    Pass ``on_add``/``on_remove``/``on_update`` as the callbacks of
    ``calculate_diff`` (or ``ClosureTable.diff``); events are appended in
    emission order, i.e. sorted by ``(src, dest)`` within each list.
    """

    added: List[Path] = field(default_factory=list)
    removed: List[Path] = field(default_factory=list)
    updated: List[Path] = field(default_factory=list)

    def on_add(self, path: Path) -> None:
        self.added.append(path)

    def on_remove(self, path: Path) -> None:
        self.removed.append(path)

    def on_update(self, path: Path) -> None:
        self.updated.append(path)

    def __len__(self) -> int:
        return len(self.added) + len(self.removed) + len(self.updated)

    def apply(self, previous: Iterable[Path]) -> List[Path]:
        """Replay the collected events onto ``previous``; returns a sorted snapshot."""
        rows = {path.key: path for path in previous}
        for path in self.removed:
            rows.pop(path.key, None)
        for path in self.updated:
            rows[path.key] = path
        for path in self.added:
            rows[path.key] = path
        return sorted(rows.values(), key=path_key)


__all__ = ["ChangeSet", "PathCallback", "calculate_diff"]

"""Closure rows: one (ancestor, descendant, depth) fact."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Tuple


@dataclass(frozen=True, slots=True, order=True)
class Path:
    """
    Immutable closure row.

    Equality, hashing and ordering are keyed on ``(src, dest)``; ``depth``
    is payload and does not take part in comparisons. Two rows for the same
    pair with different depths therefore compare equal, which is what the
    diff merge-walk relies on.
    """

    src: Any
    dest: Any
    depth: int = field(compare=False)

    @property
    def key(self) -> Tuple[Any, Any]:
        return self.src, self.dest

    def as_tuple(self) -> Tuple[Any, Any, int]:
        return self.src, self.dest, self.depth


def path_key(path: Path) -> Tuple[Any, Any]:
    """Sort key for snapshots."""
    return path.src, path.dest


__all__ = ["Path", "path_key"]

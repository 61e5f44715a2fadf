"""
closuretable
============

Incrementally maintained closure table (ancestor -> descendant at minimum
depth) for a DAG edited one edge at a time, plus a diff that turns two
snapshots into the row-level changes a persisted table needs.

Public API:

- ClosureTable   : registry of nodes; add_edges / remove_edges / diff.
- Path           : immutable (src, dest, depth) closure row.
- ChangeSet      : collector for diff events.
- calculate_diff : diff two snapshots directly.
"""

try:
    from ._version import version as __version__  # populated by setuptools-scm
except ModuleNotFoundError:
    __version__ = "0.0.0"

from .diff import ChangeSet, calculate_diff
from .path import Path
from .table import ClosureTable

__all__ = [
    "__version__",
    "ChangeSet",
    "ClosureTable",
    "Path",
    "calculate_diff",
]

"""
Error taxonomy for loading and planning.

Only load-time integrity problems and an empty node set are exceptions. Snap
misses, unreachable paths and missing edge geometry are expected outcomes that
callers handle by degrading the rendered connector (they are logged and counted,
never raised).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class IntegrityIssue:
    """One data-integrity finding collected while loading routes or the graph."""

    code: str
    message: str
    sample: tuple[str, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "sample": list(self.sample)}


class DataIntegrityError(ValueError):
    """Raised when input data violates a structural invariant."""

    def __init__(self, message: str, issues: list[IntegrityIssue] | None = None):
        super().__init__(message)
        self.issues: list[IntegrityIssue] = list(issues or [])


class NoNodesAvailable(LookupError):
    """Raised when a node lookup is attempted on a graph without nodes."""

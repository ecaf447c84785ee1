"""Outcome of an optional external call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Unavailable:
    """An external collaborator produced nothing usable this turn."""
    reason: str


Outcome = Union[T, Unavailable]


def available(outcome: Outcome[T]) -> T | None:
    """Collapse an outcome to its value, or None when unavailable."""
    return None if isinstance(outcome, Unavailable) else outcome

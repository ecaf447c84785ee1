"""Ordered keyword rule tables.

Extraction and classification are data: ordered ``(pattern, value)`` rules
evaluated either "first match wins" or "all matches accumulate".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Generic, Iterable, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Rule(Generic[T]):
    """A compiled pattern and the value it yields."""
    pattern: re.Pattern[str]
    value: T

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def phrases(*literals: str, flags: int = re.IGNORECASE) -> re.Pattern[str]:
    """Compile literal phrases into one alternation that matches anywhere in the text."""
    return re.compile("|".join(re.escape(literal) for literal in literals), flags)


def rule_table(entries: Iterable[tuple[str | re.Pattern[str], T]], flags: int = re.IGNORECASE) -> list[Rule[T]]:
    """Build rules from raw regex strings or already compiled patterns."""
    table: list[Rule[T]] = []
    for pattern, value in entries:
        compiled = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern, flags)
        table.append(Rule(compiled, value))
    return table


def first_match(rules: Sequence[Rule[T]], text: str) -> T | None:
    """Value of the first rule whose pattern matches, else None."""
    for rule in rules:
        if rule.matches(text):
            return rule.value
    return None


def all_matches(rules: Sequence[Rule[T]], text: str) -> list[T]:
    """Values of every matching rule, in table order."""
    return [rule.value for rule in rules if rule.matches(text)]

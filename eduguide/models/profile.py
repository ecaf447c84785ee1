"""Student profile data model.

Pure data structure with no business logic beyond merging.
The same class carries both a full profile and a per-turn patch: a patch
simply leaves unknown fields as ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Iterable

# Fields that grow over a conversation instead of being replaced
ACCUMULATING_FIELDS = ("preferred_states", "school_type", "demographics", "interests")

# snake_case attribute -> camelCase key used by the web client
WIRE_NAMES = {
    "gpa": "gpa",
    "location": "location",
    "state": "state",
    "preferred_states": "preferredStates",
    "intended_major": "intendedMajor",
    "budget": "budget",
    "school_type": "schoolType",
    "sat_score": "satScore",
    "act_score": "actScore",
    "is_first_gen": "isFirstGen",
    "is_transfer_student": "isTransferStudent",
    "demographics": "demographics",
    "interests": "interests",
    "career_goals": "careerGoals",
}


def unique_strings(values: Iterable[str] | None) -> list[str]:
    """Strip, drop blanks and de-duplicate while keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values or []:
        if not isinstance(value, str):
            continue
        cleaned = value.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


@dataclass
class UserProfile:
    """Everything known about one advisee at one point in time."""
    gpa: float | None = None
    location: str | None = None
    state: str | None = None
    preferred_states: list[str] | None = None
    intended_major: str | None = None
    budget: str | None = None  # "low" | "medium" | "high"
    school_type: list[str] | None = None
    sat_score: int | None = None
    act_score: int | None = None
    is_first_gen: bool | None = None
    is_transfer_student: bool | None = None
    demographics: list[str] | None = None
    interests: list[str] | None = None
    career_goals: str | None = None

    def is_empty(self) -> bool:
        """True when no field is set."""
        return all(getattr(self, f.name) is None for f in fields(self))

    def merged_with(self, patch: UserProfile | None) -> UserProfile:
        """Return a new profile with ``patch`` applied.

        Scalar fields from the patch win. Accumulating fields are unioned
        with the values already known and de-duplicated.
        """
        if patch is None:
            return UserProfile.from_dict(self.to_dict())

        merged: dict[str, Any] = {}
        for f in fields(self):
            current = getattr(self, f.name)
            update = getattr(patch, f.name)
            if f.name in ACCUMULATING_FIELDS:
                if current is None and update is None:
                    merged[f.name] = None
                else:
                    merged[f.name] = unique_strings([*(current or []), *(update or [])])
            else:
                merged[f.name] = update if update is not None else current
        return UserProfile(**merged)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire format, omitting unknown fields."""
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            data[WIRE_NAMES[f.name]] = list(value) if isinstance(value, list) else value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "UserProfile":
        """Create from a dictionary in either camelCase or snake_case."""
        if not data:
            return cls()

        values: dict[str, Any] = {}
        for name, wire in WIRE_NAMES.items():
            value = data.get(wire, data.get(name))
            if value is None:
                continue
            if name in ACCUMULATING_FIELDS:
                value = unique_strings(value if isinstance(value, (list, tuple)) else [value])
            elif name == "gpa":
                value = float(value)
            elif name in ("sat_score", "act_score"):
                value = int(value)
            values[name] = value
        return cls(**values)

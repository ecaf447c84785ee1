"""College catalog data model.

Pure data structures for catalog records.
"""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any


class SchoolType(str, Enum):
    """Institution types known to the catalog."""
    COMMUNITY_COLLEGE = "Community College"
    PUBLIC_UNIVERSITY = "Public University"
    PRIVATE_UNIVERSITY = "Private University"
    TECHNICAL_COLLEGE = "Technical College"


@dataclass(frozen=True)
class CollegeEntry:
    """One read-only institution record."""
    id: str
    name: str
    city: str
    state: str
    type: str
    tuition_in_state: int
    tuition_out_state: int
    min_gpa: float = 0.0
    avg_gpa: float = 0.0
    sat_range: str = "N/A"
    acceptance_rate: str = ""
    graduation_rate: str = ""
    financial_aid_percent: int = 0
    majors: tuple[str, ...] = dataclass_field(default_factory=tuple)
    tags: tuple[str, ...] = dataclass_field(default_factory=tuple)
    description: str = ""
    website: str = ""

    @property
    def location(self) -> str:
        return f"{self.city}, {self.state}"

    @property
    def tuition(self) -> str:
        return f"${self.tuition_in_state:,} (in-state), ${self.tuition_out_state:,} (out-of-state)"

    def sat_bounds(self) -> tuple[int, int] | None:
        """Parse ``sat_range`` into (low, high); None for "N/A" or junk."""
        if self.sat_range == "N/A":
            return None
        low, _, high = self.sat_range.partition("-")
        try:
            return int(low), int(high)
        except ValueError:
            return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire format."""
        return {
            "id": self.id,
            "name": self.name,
            "city": self.city,
            "state": self.state,
            "location": self.location,
            "type": self.type,
            "tuition": self.tuition,
            "tuitionInState": self.tuition_in_state,
            "tuitionOutState": self.tuition_out_state,
            "minGPA": self.min_gpa,
            "avgGPA": self.avg_gpa,
            "satRange": self.sat_range,
            "acceptanceRate": self.acceptance_rate,
            "graduationRate": self.graduation_rate,
            "financialAidPercent": self.financial_aid_percent,
            "majors": list(self.majors),
            "tags": list(self.tags),
            "description": self.description,
            "website": self.website,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CollegeEntry":
        """Create from a catalog row."""
        return cls(
            id=data["id"],
            name=data["name"],
            city=data.get("city", ""),
            state=data.get("state", ""),
            type=data.get("type", SchoolType.PUBLIC_UNIVERSITY.value),
            tuition_in_state=int(data.get("tuitionInState", 0)),
            tuition_out_state=int(data.get("tuitionOutState", 0)),
            min_gpa=float(data.get("minGPA", 0.0)),
            avg_gpa=float(data.get("avgGPA", 0.0)),
            sat_range=data.get("satRange", "N/A"),
            acceptance_rate=data.get("acceptanceRate", ""),
            graduation_rate=data.get("graduationRate", ""),
            financial_aid_percent=int(data.get("financialAidPercent", 0)),
            majors=tuple(data.get("majors", [])),
            tags=tuple(data.get("tags", [])),
            description=data.get("description", ""),
            website=data.get("website", ""),
        )


@dataclass(frozen=True)
class ScoredCandidate:
    """A college paired with its fit score for one profile."""
    college: CollegeEntry
    score: int

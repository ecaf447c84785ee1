"""College catalog repository.

The catalog is an immutable, injectable table of ``CollegeEntry`` records.
Iteration order is the table order, which the ranker relies on to break ties.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator

from eduguide.models import CollegeEntry

logger = logging.getLogger(__name__)

CATALOG_PATH = Path(__file__).with_name("colleges.json")


class CollegeCatalog:
    """Read-only collection of colleges."""

    def __init__(self, colleges: Iterable[CollegeEntry]):
        self._colleges: tuple[CollegeEntry, ...] = tuple(colleges)
        self._by_id = {college.id: college for college in self._colleges}

    @classmethod
    def from_json(cls, path: Path) -> "CollegeCatalog":
        """Load a catalog from a JSON array of college rows."""
        rows = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(rows, list):
            raise ValueError(f"{path} must contain a JSON array of colleges")
        catalog = cls(CollegeEntry.from_dict(row) for row in rows)
        logger.debug("[catalog] loaded %d colleges from %s", len(catalog), path)
        return catalog

    @classmethod
    def default(cls) -> "CollegeCatalog":
        """The bundled catalog, loaded once per process."""
        return _default_catalog()

    def __iter__(self) -> Iterator[CollegeEntry]:
        return iter(self._colleges)

    def __len__(self) -> int:
        return len(self._colleges)

    def get(self, college_id: str) -> CollegeEntry | None:
        return self._by_id.get(college_id)

    def states(self) -> list[str]:
        """Distinct state codes, sorted."""
        return sorted({college.state for college in self._colleges})

    def types(self) -> list[str]:
        """Distinct school types, sorted."""
        return sorted({college.type for college in self._colleges})

    def search(
        self,
        *,
        state: str | None = None,
        type: str | None = None,
        max_tuition: int | None = None,
        min_gpa: float | None = None,
        major: str | None = None,
        query: str | None = None,
    ) -> list[CollegeEntry]:
        """Filter the catalog.

        Args:
            state: Exact state code
            type: Exact school type
            max_tuition: Upper bound on in-state tuition
            min_gpa: Student GPA; keeps colleges whose minimum GPA is at or below it
            major: Case-insensitive substring of any offered major
            query: Free text matched against name, city, state, description,
                majors and tags

        Returns:
            list[CollegeEntry]: Matches in catalog order
        """
        results = list(self._colleges)

        if state:
            results = [c for c in results if c.state == state]
        if type:
            results = [c for c in results if c.type == type]
        if max_tuition:
            results = [c for c in results if c.tuition_in_state <= max_tuition]
        if min_gpa is not None:
            results = [c for c in results if c.min_gpa <= min_gpa]
        if major:
            major_lower = major.lower()
            results = [c for c in results if any(major_lower in m.lower() for m in c.majors)]
        if query:
            q = query.lower()
            results = [
                c for c in results
                if q in c.name.lower()
                or q in c.city.lower()
                or q in c.state.lower()
                or q in c.description.lower()
                or any(q in m.lower() for m in c.majors)
                or any(q in t.lower() for t in c.tags)
            ]

        return results


@lru_cache(maxsize=1)
def _default_catalog() -> CollegeCatalog:
    return CollegeCatalog.from_json(CATALOG_PATH)

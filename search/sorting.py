# search/sorting.py
"""Map a logical sort key and direction onto concrete ordering instructions."""

from dataclasses import dataclass
from typing import Optional, Tuple

from search.models import SortField

ASCENDING = 1
DESCENDING = -1

# Pseudo-field standing for the store's computed text-relevance score
TEXT_SCORE = "$textScore"

_FIELD_FOR_SORT = {
    SortField.UPLOAD_DATE.value: "uploadDate",
    SortField.EXPERIENCE.value: "metadata.experience",
}

# Deterministic tie-breaker appended to every ordering
_TIE_BREAKER = ("_id", ASCENDING)


@dataclass(frozen=True)
class SortKey:
    field: str
    direction: int


@dataclass(frozen=True)
class SortSpec:
    keys: Tuple[SortKey, ...]

    @property
    def uses_text_score(self) -> bool:
        return any(key.field == TEXT_SCORE for key in self.keys)

    def as_pairs(self):
        return [(key.field, key.direction) for key in self.keys]


def _spec(*pairs) -> SortSpec:
    return SortSpec(tuple(SortKey(field, direction) for field, direction in pairs))


def default_sort() -> SortSpec:
    """Newest first"""
    return _spec(("uploadDate", DESCENDING), _TIE_BREAKER)


def resolve_direction(sort_order: Optional[str]) -> int:
    return ASCENDING if str(sort_order or "").strip().lower() == "asc" else DESCENDING


def resolve_sort(
    sort_by: Optional[str], sort_order: Optional[str], for_vector_path: bool
) -> Optional[SortSpec]:
    """
    Resolve ``sort_by``/``sort_order`` for one retrieval path.

    Returns None for relevance on the vector path: similarity order is the
    retrieval order there, so no explicit sort stage is needed. Unknown sort
    keys resolve to newest first.
    """
    direction = resolve_direction(sort_order)
    if sort_by == SortField.RELEVANCE.value:
        if for_vector_path:
            return None
        return _spec((TEXT_SCORE, DESCENDING), ("uploadDate", DESCENDING), _TIE_BREAKER)
    field = _FIELD_FOR_SORT.get(sort_by)
    if field is None:
        return default_sort()
    return _spec((field, direction), _TIE_BREAKER)

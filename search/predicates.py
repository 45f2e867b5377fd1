# search/predicates.py
"""
Store-neutral predicate tree.

Filters and text queries compile into these nodes; a store backend renders
them into its own query language (see ``mangodatabase.query_renderer``) or
evaluates them directly (see ``evaluate``, used by the in-memory store).

Field paths are dotted, e.g. ``metadata.skills``. When the value at a path is
a list, comparisons follow document-store semantics: the condition holds if
any element satisfies it.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union


@dataclass(frozen=True)
class MatchAll:
    """No constraint"""


@dataclass(frozen=True)
class Eq:
    field: str
    value: Any


@dataclass(frozen=True)
class Range:
    """Inclusive range; either bound may be omitted"""

    field: str
    gte: Any = None
    lte: Any = None


@dataclass(frozen=True)
class AnyOf:
    """Field value (or any element of it) is one of ``values``"""

    field: str
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class AllOf:
    """Field is a list containing every one of ``values``"""

    field: str
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class Pattern:
    """Regular-expression match on a string field"""

    field: str
    pattern: str
    ignore_case: bool = True


@dataclass(frozen=True)
class TextSearch:
    """Match against the store's native full-text index"""

    query: str


@dataclass(frozen=True)
class And:
    children: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    children: Tuple["Predicate", ...]


Predicate = Union[MatchAll, Eq, Range, AnyOf, AllOf, Pattern, TextSearch, And, Or]

# Fields covered by the text index, mirrored by the in-memory evaluator
TEXT_INDEX_FIELDS = (
    "content",
    "metadata.skills",
    "metadata.jobTitles",
    "metadata.education",
)


def conjoin(predicates: Iterable[Predicate]) -> Predicate:
    """AND together the given predicates, dropping MatchAll nodes"""
    parts = [p for p in predicates if not isinstance(p, MatchAll)]
    if not parts:
        return MatchAll()
    if len(parts) == 1:
        return parts[0]
    return And(tuple(parts))


def is_unconstrained(predicate: Predicate) -> bool:
    return isinstance(predicate, MatchAll)


def contains_text_search(predicate: Predicate) -> bool:
    if isinstance(predicate, TextSearch):
        return True
    if isinstance(predicate, (And, Or)):
        return any(contains_text_search(child) for child in predicate.children)
    return False


def get_path(record: Dict[str, Any], path: str) -> Any:
    """Resolve a dotted path, returning None when any segment is absent"""
    current: Any = record
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def values_at(record: Dict[str, Any], path: str) -> List[Any]:
    value = get_path(record, path)
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _in_range(value: Any, gte: Any, lte: Any) -> bool:
    try:
        if gte is not None and value < gte:
            return False
        if lte is not None and value > lte:
            return False
    except TypeError:
        return False
    return True


def text_terms(query: str) -> List[str]:
    return [term for term in re.split(r"\W+", query.lower()) if term]


def text_score(query: str, record: Dict[str, Any]) -> float:
    """Rough term-frequency score over the text-indexed fields"""
    terms = text_terms(query)
    if not terms:
        return 0.0
    haystack = " ".join(
        str(value) for path in TEXT_INDEX_FIELDS for value in values_at(record, path)
    ).lower()
    words = text_terms(haystack)
    return float(sum(words.count(term) for term in terms))


def evaluate(predicate: Predicate, record: Dict[str, Any]) -> bool:
    """Evaluate a predicate against a plain-dict record"""
    if isinstance(predicate, MatchAll):
        return True
    if isinstance(predicate, And):
        return all(evaluate(child, record) for child in predicate.children)
    if isinstance(predicate, Or):
        return any(evaluate(child, record) for child in predicate.children)
    if isinstance(predicate, Eq):
        value = get_path(record, predicate.field)
        if isinstance(value, list) and not isinstance(predicate.value, list):
            return predicate.value in value
        return value == predicate.value
    if isinstance(predicate, Range):
        return any(
            _in_range(value, predicate.gte, predicate.lte)
            for value in values_at(record, predicate.field)
        )
    if isinstance(predicate, AnyOf):
        return any(
            value in predicate.values for value in values_at(record, predicate.field)
        )
    if isinstance(predicate, AllOf):
        present = values_at(record, predicate.field)
        return all(value in present for value in predicate.values)
    if isinstance(predicate, Pattern):
        flags = re.IGNORECASE if predicate.ignore_case else 0
        regex = re.compile(predicate.pattern, flags)
        return any(
            isinstance(value, str) and regex.search(value)
            for value in values_at(record, predicate.field)
        )
    if isinstance(predicate, TextSearch):
        return text_score(predicate.query, record) > 0
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def describe(predicate: Optional[Predicate]) -> str:
    """Compact human-readable form, used in log lines"""
    if predicate is None or isinstance(predicate, MatchAll):
        return "*"
    if isinstance(predicate, (And, Or)):
        joiner = " AND " if isinstance(predicate, And) else " OR "
        return "(" + joiner.join(describe(child) for child in predicate.children) + ")"
    if isinstance(predicate, TextSearch):
        return f"text({predicate.query!r})"
    if isinstance(predicate, Range):
        return f"{predicate.field} in [{predicate.gte}, {predicate.lte}]"
    if isinstance(predicate, (AnyOf, AllOf)):
        op = "any" if isinstance(predicate, AnyOf) else "all"
        return f"{predicate.field} {op} {list(predicate.values)}"
    if isinstance(predicate, Pattern):
        return f"{predicate.field} ~ /{predicate.pattern}/"
    return f"{predicate.field} == {predicate.value!r}"

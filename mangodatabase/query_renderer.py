# mangodatabase/query_renderer.py
"""Render store-neutral predicates and sort specs into MongoDB query documents."""

from typing import Any, Dict, List, Optional, Sequence

from search.predicates import (
    AllOf,
    And,
    AnyOf,
    Eq,
    MatchAll,
    Or,
    Pattern,
    Predicate,
    Range,
    TextSearch,
)
from search.sorting import TEXT_SCORE, SortSpec

# Name under which computed relevance scores are exposed on results
SCORE_FIELD = "score"
TEXT_SCORE_META = {"$meta": "textScore"}
VECTOR_SCORE_META = {"$meta": "vectorSearchScore"}


def render_predicate(predicate: Optional[Predicate]) -> Dict[str, Any]:
    """Predicate tree -> MongoDB filter document"""
    if predicate is None or isinstance(predicate, MatchAll):
        return {}
    if isinstance(predicate, And):
        rendered = [render_predicate(child) for child in predicate.children]
        rendered = [child for child in rendered if child]
        if not rendered:
            return {}
        if len(rendered) == 1:
            return rendered[0]
        return {"$and": rendered}
    if isinstance(predicate, Or):
        return {"$or": [render_predicate(child) for child in predicate.children]}
    if isinstance(predicate, Eq):
        # $eq keeps operator-shaped values literal
        return {predicate.field: {"$eq": predicate.value}}
    if isinstance(predicate, Range):
        bounds = {}
        if predicate.gte is not None:
            bounds["$gte"] = predicate.gte
        if predicate.lte is not None:
            bounds["$lte"] = predicate.lte
        return {predicate.field: bounds} if bounds else {}
    if isinstance(predicate, AnyOf):
        return {predicate.field: {"$in": list(predicate.values)}}
    if isinstance(predicate, AllOf):
        return {predicate.field: {"$all": list(predicate.values)}}
    if isinstance(predicate, Pattern):
        condition = {"$regex": predicate.pattern}
        if predicate.ignore_case:
            condition["$options"] = "i"
        return {predicate.field: condition}
    if isinstance(predicate, TextSearch):
        return {"$text": {"$search": predicate.query}}
    raise TypeError(f"Cannot render predicate: {predicate!r}")


def render_sort(sort: Optional[SortSpec]) -> List[tuple]:
    """Sort spec -> pymongo ``sort()`` argument"""
    if sort is None:
        return []
    pairs = []
    for field, direction in sort.as_pairs():
        if field == TEXT_SCORE:
            pairs.append((SCORE_FIELD, TEXT_SCORE_META))
        else:
            pairs.append((field, direction))
    return pairs


def render_sort_stage(sort: Optional[SortSpec]) -> Optional[Dict[str, Any]]:
    """Sort spec -> aggregation ``$sort`` stage, or None when there is no sort"""
    pairs = render_sort(sort)
    if not pairs:
        return None
    return {"$sort": dict(pairs)}


def exclusion_projection(
    exclude_fields: Sequence[str], text_score: bool = False
) -> Optional[Dict[str, Any]]:
    projection = {field: 0 for field in exclude_fields}
    if text_score:
        projection[SCORE_FIELD] = TEXT_SCORE_META
    return projection or None

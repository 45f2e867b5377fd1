# search/filters.py
"""Compile a FilterSpec into a predicate tree. Pure: no I/O, no side effects."""

from typing import List, Optional

from search.models import ExperienceRange, FilterSpec, SkillsLogic
from search.predicates import AllOf, AnyOf, Eq, Predicate, Range, conjoin

SKILLS_FIELD = "metadata.skills"
EXPERIENCE_FIELD = "metadata.experience"
JOB_TITLES_FIELD = "metadata.jobTitles"
EDUCATION_FIELD = "metadata.education"
UPLOAD_DATE_FIELD = "uploadDate"


def _skills(filters: FilterSpec) -> Optional[Predicate]:
    if not filters.skills:
        return None
    values = tuple(filters.skills)
    if filters.skills_logic == SkillsLogic.AND:
        return AllOf(SKILLS_FIELD, values)
    return AnyOf(SKILLS_FIELD, values)


def _experience(filters: FilterSpec) -> Optional[Predicate]:
    experience = filters.experience
    if experience is None:
        return None
    if isinstance(experience, ExperienceRange):
        if experience.min is None and experience.max is None:
            return None
        return Range(EXPERIENCE_FIELD, gte=experience.min, lte=experience.max)
    return Eq(EXPERIENCE_FIELD, int(experience))


def _membership(field: str, values: Optional[List[str]]) -> Optional[Predicate]:
    if not values:
        return None
    return AnyOf(field, tuple(values))


def _date_range(filters: FilterSpec) -> Optional[Predicate]:
    date_range = filters.date_range
    if date_range is None or (date_range.from_ is None and date_range.to is None):
        return None
    return Range(UPLOAD_DATE_FIELD, gte=date_range.from_, lte=date_range.to)


def _custom(filters: FilterSpec) -> List[Predicate]:
    # Keys are passed through unchanged; schema checks belong to the store
    return [
        Eq(f"metadata.{key}", value) for key, value in (filters.custom or {}).items()
    ]


def compile_filters(filters: Optional[FilterSpec]) -> Predicate:
    """Combine every present sub-filter with AND; absent sub-filters add nothing"""
    if filters is None:
        filters = FilterSpec()
    parts = [
        _skills(filters),
        _experience(filters),
        _membership(JOB_TITLES_FIELD, filters.job_titles),
        _membership(EDUCATION_FIELD, filters.education),
        _date_range(filters),
        *_custom(filters),
    ]
    return conjoin(part for part in parts if part is not None)

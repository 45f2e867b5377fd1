# schemas/cv_search_schema.py
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.exceptions import InvalidRequestError
from search.models import ExperienceRange, SearchRequest


def split_csv(value: Optional[str]) -> Optional[List[str]]:
    """'React, Node.js,' -> ['React', 'Node.js']"""
    if value is None:
        return None
    items = [item.strip() for item in value.split(",")]
    return [item for item in items if item] or None


def _years(text: str, raw: str) -> Optional[int]:
    text = text.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise InvalidRequestError(
            "Invalid experience filter",
            details={"experience": raw, "expected": "N or min-max, e.g. 3 or 2-5"},
        )


def parse_experience(value: Optional[str]) -> Optional[Union[int, ExperienceRange]]:
    """'5' -> 5, '2-5' -> {min: 2, max: 5}, '3-' -> {min: 3}, '-4' -> {max: 4}"""
    if value is None or not value.strip():
        return None
    if "-" in value:
        low, _, high = value.partition("-")
        return ExperienceRange(min=_years(low, value), max=_years(high, value))
    return _years(value, value)


def search_request_from_query_params(
    q: Optional[str] = None,
    limit: int = 10,
    page: int = 1,
    sort_by: str = "relevance",
    sort_order: str = "desc",
    search_type: str = "auto",
    skills: Optional[str] = None,
    skills_logic: Optional[str] = None,
    experience: Optional[str] = None,
    job_titles: Optional[str] = None,
    education: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> SearchRequest:
    """Build a SearchRequest from the flattened GET query string"""
    filters: Dict[str, Any] = {}
    if split_csv(skills):
        filters["skills"] = split_csv(skills)
        if skills_logic:
            filters["skillsLogic"] = skills_logic
    parsed_experience = parse_experience(experience)
    if parsed_experience is not None:
        filters["experience"] = parsed_experience
    if split_csv(job_titles):
        filters["jobTitles"] = split_csv(job_titles)
    if split_csv(education):
        filters["education"] = split_csv(education)
    if date_from or date_to:
        filters["dateRange"] = {"from": date_from or None, "to": date_to or None}

    try:
        return SearchRequest(
            query=q,
            limit=limit,
            page=page,
            sortBy=sort_by,
            sortOrder=sort_order,
            searchType=search_type,
            filters=filters,
        )
    except ValidationError as e:
        raise InvalidRequestError(
            "Invalid search parameters",
            details={"errors": e.errors(include_url=False, include_context=False)},
        )


class ExperienceStats(BaseModel):
    min: Union[int, float] = 0
    max: Union[int, float] = 0
    avg: Union[int, float] = 0


class CVFilterMetadata(BaseModel):
    """Facet values for building search filters"""

    model_config = ConfigDict(populate_by_name=True)

    skills: List[str] = Field(default_factory=list)
    job_titles: List[str] = Field(default_factory=list, alias="jobTitles")
    education: List[str] = Field(default_factory=list)
    experience: ExperienceStats = Field(default_factory=ExperienceStats)
    total_cvs: int = Field(default=0, alias="totalCVs")

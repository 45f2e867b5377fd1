# search/models.py
"""
Request and response models for CV search.

Field names are snake_case in Python and camelCase on the wire (``sortBy``,
``skillsLogic``, ``dateRange.from`` ...), so both spellings are accepted when
a request is parsed.
"""

from datetime import datetime
from enum import Enum
from math import ceil
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchType(str, Enum):
    """Strategy requested by the caller"""

    AUTO = "auto"
    VECTOR = "vector"
    TEXT = "text"


class SearchMethod(str, Enum):
    """Strategy that actually produced the results"""

    VECTOR = "vector"
    TEXT = "text"


class SkillsLogic(str, Enum):
    AND = "AND"
    OR = "OR"


class SortField(str, Enum):
    RELEVANCE = "relevance"
    UPLOAD_DATE = "uploadDate"
    EXPERIENCE = "experience"


def _as_list(value):
    if isinstance(value, str):
        return [value]
    return value


def _as_datetime(value):
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    return value


class ExperienceRange(BaseModel):
    min: Optional[int] = Field(default=None, ge=0, description="Minimum years")
    max: Optional[int] = Field(default=None, ge=0, description="Maximum years")


class DateRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[datetime] = Field(
        default=None, alias="from", description="Inclusive lower bound"
    )
    to: Optional[datetime] = Field(default=None, description="Inclusive upper bound")

    @field_validator("from_", "to", mode="before")
    @classmethod
    def _parse_dates(cls, value):
        return _as_datetime(value)


class FilterSpec(BaseModel):
    """Structured filter criteria; every sub-filter is optional"""

    model_config = ConfigDict(populate_by_name=True)

    skills: Optional[List[str]] = Field(
        default=None, description="Skills to match", examples=[["React", "Node.js"]]
    )
    skills_logic: SkillsLogic = Field(
        default=SkillsLogic.OR,
        alias="skillsLogic",
        description="AND requires every skill, OR (default) requires at least one",
    )
    experience: Optional[Union[int, ExperienceRange]] = Field(
        default=None,
        description="Exact years of experience or a {min, max} range",
        examples=[5, {"min": 2, "max": 5}],
    )
    job_titles: Optional[List[str]] = Field(
        default=None, alias="jobTitles", description="Any of these job titles"
    )
    education: Optional[List[str]] = Field(
        default=None, description="Any of these education entries"
    )
    date_range: Optional[DateRange] = Field(
        default=None, alias="dateRange", description="Upload date range"
    )
    custom: Optional[Dict[str, Any]] = Field(
        default=None, description="Exact-match constraints on metadata.<key>"
    )

    @field_validator("skills", "job_titles", "education", mode="before")
    @classmethod
    def _wrap_lists(cls, value):
        return _as_list(value)

    @field_validator("skills_logic", mode="before")
    @classmethod
    def _normalize_logic(cls, value):
        # Anything other than AND falls back to OR
        if isinstance(value, str) and value.strip().upper() == "AND":
            return SkillsLogic.AND
        if isinstance(value, SkillsLogic):
            return value
        return SkillsLogic.OR

    def echo(self) -> Dict[str, Any]:
        """Wire representation of the filters that were supplied"""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = Field(
        default=None,
        description="Free-text query",
        examples=["senior react developer"],
    )
    limit: int = Field(default=10, ge=1, description="Results per page")
    page: int = Field(default=1, ge=1, description="1-based page number")
    filters: FilterSpec = Field(default_factory=FilterSpec)
    sort_by: str = Field(
        default=SortField.RELEVANCE.value,
        alias="sortBy",
        description="relevance | uploadDate | experience",
    )
    sort_order: str = Field(default="desc", alias="sortOrder", description="asc | desc")
    search_type: SearchType = Field(
        default=SearchType.AUTO, alias="searchType", description="auto | vector | text"
    )

    @field_validator("filters", mode="before")
    @classmethod
    def _default_filters(cls, value):
        return FilterSpec() if value is None else value

    @property
    def search_text(self) -> Optional[str]:
        """The query with surrounding whitespace removed, or None when blank"""
        if self.query is None:
            return None
        stripped = self.query.strip()
        return stripped or None

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    count: int
    total: int
    page: int
    total_pages: int = Field(alias="totalPages")
    search_method: SearchMethod = Field(alias="searchMethod")
    query: Optional[str] = None
    filters: Dict[str, Any] = Field(default_factory=dict)
    results: List[Dict[str, Any]] = Field(default_factory=list)

    @staticmethod
    def page_count(total: int, limit: int) -> int:
        return ceil(total / limit) if total else 0

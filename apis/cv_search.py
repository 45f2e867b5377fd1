# apis/cv_search.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.config import AppConfig
from core.custom_logger import CustomLogger
from core.exceptions import CVSearchException, StoreUnavailableError
from schemas.cv_search_schema import search_request_from_query_params
from search.deadline import Deadline
from search.models import SearchRequest, SearchResponse, SearchType
from search.orchestrator import SearchOrchestrator

logger = CustomLogger().get_logger("cv_search_api")

router = APIRouter(tags=["CV Search"])

# Global orchestrator instance, set during application startup
_orchestrator: Optional[SearchOrchestrator] = None


def set_search_orchestrator(orchestrator: Optional[SearchOrchestrator]):
    global _orchestrator
    _orchestrator = orchestrator


def get_orchestrator() -> SearchOrchestrator:
    if _orchestrator is None:
        raise StoreUnavailableError("Search service is not initialized")
    return _orchestrator


def get_search_deadline() -> Deadline:
    """Fresh per-request deadline from SEARCH_TIMEOUT_SECONDS"""
    return Deadline(AppConfig.SEARCH_TIMEOUT_SECONDS)


async def _run_search(
    request: SearchRequest, orchestrator: SearchOrchestrator, deadline: Deadline
) -> SearchResponse:
    try:
        return await orchestrator.search(request, deadline)
    except CVSearchException:
        raise
    except Exception as e:
        logger.error(f"Unexpected search failure: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Search failed: {str(e)}")


@router.post("/search", response_model=SearchResponse)
async def search_cvs(
    request: SearchRequest,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
    deadline: Deadline = Depends(get_search_deadline),
):
    """
    Search CVs by free-text query, structured filters, or both.

    With ``searchType=auto`` a semantic (vector) search is attempted first and
    text search is used if it fails; ``searchMethod`` in the response reports
    which one produced the results.
    """
    logger.info(
        f"POST search: query={request.query!r} type={request.search_type.value}"
    )
    return await _run_search(request, orchestrator, deadline)


@router.get("/search", response_model=SearchResponse)
async def search_cvs_get(
    q: Optional[str] = Query(default=None, description="Free-text query"),
    limit: int = Query(default=10, ge=1),
    page: int = Query(default=1, ge=1),
    sort_by: str = Query(default="relevance", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder"),
    search_type: SearchType = Query(default=SearchType.AUTO, alias="searchType"),
    skills: Optional[str] = Query(default=None, description="Comma-separated"),
    skills_logic: Optional[str] = Query(default=None, alias="skillsLogic"),
    experience: Optional[str] = Query(
        default=None, description="Years, either N or min-max (e.g. 2-5)"
    ),
    job_titles: Optional[str] = Query(
        default=None, alias="jobTitles", description="Comma-separated"
    ),
    education: Optional[str] = Query(default=None, description="Comma-separated"),
    date_from: Optional[str] = Query(default=None, alias="dateFrom"),
    date_to: Optional[str] = Query(default=None, alias="dateTo"),
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
    deadline: Deadline = Depends(get_search_deadline),
):
    """Query-string variant of POST /search for simple searches"""
    request = search_request_from_query_params(
        q=q,
        limit=limit,
        page=page,
        sort_by=sort_by,
        sort_order=sort_order,
        search_type=search_type.value,
        skills=skills,
        skills_logic=skills_logic,
        experience=experience,
        job_titles=job_titles,
        education=education,
        date_from=date_from,
        date_to=date_to,
    )
    logger.info(f"GET search: query={request.query!r} type={request.search_type.value}")
    return await _run_search(request, orchestrator, deadline)

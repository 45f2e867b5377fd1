# apis/cv_records.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from core.custom_logger import CustomLogger
from core.exceptions import CVSearchException, StoreUnavailableError
from mangodatabase.operations import CVOperations
from schemas.cv_search_schema import CVFilterMetadata

logger = CustomLogger().get_logger("cv_records_api")

router = APIRouter(tags=["CV Records"])

# Global operations instance, set during application startup
_operations: Optional[CVOperations] = None


def set_cv_operations(operations: Optional[CVOperations]):
    global _operations
    _operations = operations


def get_cv_operations() -> CVOperations:
    if _operations is None:
        raise StoreUnavailableError("CV store is not initialized")
    return _operations


@router.get("/metadata", response_model=CVFilterMetadata)
async def get_filter_metadata(
    operations: CVOperations = Depends(get_cv_operations),
):
    """Distinct skills, job titles and education plus experience statistics"""
    try:
        return operations.get_filter_metadata()
    except CVSearchException:
        raise
    except Exception as e:
        logger.error(f"Error fetching metadata: {str(e)}")
        raise HTTPException(
            status_code=500, detail=f"Failed to fetch metadata: {str(e)}"
        )


@router.get("/{cv_id}", response_model=Dict[str, Any])
async def get_cv(cv_id: str, operations: CVOperations = Depends(get_cv_operations)):
    """Get a CV by ID"""
    try:
        return operations.get_record(cv_id)
    except CVSearchException:
        raise
    except Exception as e:
        logger.error(f"Error fetching CV {cv_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch CV: {str(e)}")

# mangodatabase/operations.py
from typing import Any, Dict, List

from bson import ObjectId

from core.custom_logger import CustomLogger
from core.exceptions import InvalidRequestError, RecordNotFoundError
from core.helpers import jsonable
from search.filters import (
    EDUCATION_FIELD,
    EXPERIENCE_FIELD,
    JOB_TITLES_FIELD,
    SKILLS_FIELD,
)
from search.predicates import MatchAll
from search.store import RecordStore

logger = CustomLogger().get_logger("cv_operations")


def _sorted_options(values: List[Any]) -> List[Any]:
    """Drop empty values and sort what remains"""
    return sorted((value for value in values if value), key=str)


class CVOperations:
    """Record lookups and filter facets outside the search path"""

    def __init__(self, store: RecordStore, vector_field: str = "embeddings"):
        self.store = store
        self.vector_field = vector_field

    def get_record(self, record_id: str) -> Dict[str, Any]:
        """Get a CV by ID; the raw embedding is never returned"""
        if not ObjectId.is_valid(record_id):
            raise InvalidRequestError(
                "Invalid CV ID format", details={"id": record_id}
            )
        record = self.store.get(ObjectId(record_id))
        if not record:
            raise RecordNotFoundError("CV not found", details={"id": record_id})
        record.pop(self.vector_field, None)
        return jsonable(record)

    def get_filter_metadata(self) -> Dict[str, Any]:
        """Facet values for building search filters"""
        stats = self.store.numeric_stats(EXPERIENCE_FIELD)
        if stats:
            experience = {
                "min": stats["min"] or 0,
                "max": stats["max"] or 0,
                "avg": round(stats["avg"] or 0),
            }
        else:
            experience = {"min": 0, "max": 0, "avg": 0}
        metadata = {
            "skills": _sorted_options(self.store.distinct(SKILLS_FIELD)),
            "jobTitles": _sorted_options(self.store.distinct(JOB_TITLES_FIELD)),
            "education": _sorted_options(self.store.distinct(EDUCATION_FIELD)),
            "experience": experience,
            "totalCVs": self.store.count(MatchAll()),
        }
        logger.info(f"Filter metadata built over {metadata['totalCVs']} CVs")
        return metadata

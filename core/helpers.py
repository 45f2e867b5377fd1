from bson import ObjectId
import datetime
from typing import Any, Dict, Iterable, Tuple

from core.config import AppConfig

# Fields that never leave the service in a search response
HEAVY_FIELDS = ("content", "embeddings")


def jsonable(value: Any) -> Any:
    """Recursively convert ObjectId and datetime values to JSON-friendly types"""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(item) for item in value]
    return value


def format_record(
    record: Dict[str, Any], drop_fields: Iterable[str] = HEAVY_FIELDS
) -> Dict[str, Any]:
    """Convert a stored CV document to a serializable dict without heavy fields"""
    if not record:
        return record
    formatted = {key: value for key, value in record.items() if key not in drop_fields}
    # Any vector-valued field is dropped as well
    for key in list(formatted.keys()):
        if key.endswith("_vector"):
            del formatted[key]
    return jsonable(formatted)


def heavy_fields(vector_field: str = AppConfig.VECTOR_FIELD) -> Tuple[str, ...]:
    """Heavy fields including the configured vector path"""
    return tuple(dict.fromkeys(HEAVY_FIELDS + (vector_field,)))

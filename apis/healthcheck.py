from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
import sys
import psutil
import os
from pymongo.errors import PyMongoError

from core.config import AppConfig
from core.custom_logger import CustomLogger
from mangodatabase.client import get_collection, ping
from mangodatabase.search_indexes import SearchIndexManager

# Initialize logger
logger = CustomLogger().get_logger("healthcheck")

SERVICE_NAME = "CV Search API"
SERVICE_VERSION = "1.0.0"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def verify_vector_search_index(collection, index_name=AppConfig.VECTOR_INDEX_NAME):
    """Verify if vector search index exists"""
    return SearchIndexManager(collection).check_search_index_exists(index_name)


router = APIRouter(
    tags=["Health Check"],
    responses={404: {"description": "Not found"}},
)


@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": _now(),
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
    }


@router.get("/detailed")
async def detailed_health_check():
    """Detailed health check with all components"""
    health_status = {
        "status": "healthy",
        "timestamp": _now(),
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "components": {},
    }

    overall_status = True

    health_status["components"]["fastapi"] = {
        "status": "healthy",
        "details": {"python_version": sys.version, "platform": sys.platform},
    }

    # Check MongoDB CV collection
    try:
        collection = get_collection()
        ping()
        stats = collection.database.command("collstats", collection.name)

        health_status["components"]["mongodb"] = {
            "status": "healthy",
            "details": {
                "connection": AppConfig.masked_uri(),
                "database": collection.database.name,
                "collection": collection.name,
                "document_count": stats.get("count", 0),
                "indexes": stats.get("nindexes", 0),
            },
        }
    except PyMongoError as e:
        health_status["components"]["mongodb"] = {
            "status": "unhealthy",
            "error": str(e),
        }
        overall_status = False

    # Vector index missing only degrades search to text; it is reported, not fatal
    if overall_status:
        vector_index_status = verify_vector_search_index(collection)
        health_status["components"]["vector_search_index"] = {
            "status": "healthy" if vector_index_status else "degraded",
            "details": {
                "index_exists": vector_index_status,
                "index_name": AppConfig.VECTOR_INDEX_NAME,
            },
        }

    missing = AppConfig.missing_env_vars()
    health_status["components"]["configuration"] = {
        "status": "healthy" if not missing else "degraded",
        "details": {"environment": AppConfig.ENVIRONMENT, "missing_env_vars": missing},
    }

    # Check system resources
    try:
        health_status["components"]["system"] = {
            "status": "healthy",
            "details": {
                "cpu_percent": psutil.cpu_percent(interval=0.1),
                "memory_percent": psutil.virtual_memory().percent,
                "disk_percent": (
                    psutil.disk_usage("/").percent
                    if os.name != "nt"
                    else psutil.disk_usage("C:\\").percent
                ),
            },
        }
    except (OSError, psutil.Error) as e:
        health_status["components"]["system"] = {"status": "unhealthy", "error": str(e)}

    health_status["status"] = "healthy" if overall_status else "unhealthy"

    if overall_status:
        return JSONResponse(content=health_status, status_code=status.HTTP_200_OK)
    return JSONResponse(
        content=health_status, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
    )


@router.get("/ready")
async def readiness_check():
    """Readiness probe: the record store must answer a ping"""
    try:
        ping()
        return {"status": "ready", "timestamp": _now()}
    except PyMongoError as e:
        logger.error(f"Readiness check failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Service not ready: {str(e)}",
        )


@router.get("/live")
async def liveness_check():
    """Liveness probe endpoint"""
    return {
        "status": "alive",
        "timestamp": _now(),
        "uptime_seconds": int(datetime.now().timestamp() - psutil.boot_time()),
    }

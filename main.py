# main.py
"""
CV Search API - Main Application Entry Point

FastAPI application exposing hybrid (vector + text) search over parsed CVs
stored in MongoDB Atlas, with structured filters, pagination and graceful
fallback to text search when semantic search is unavailable.

Version: 1.0.0
"""

import warnings

warnings.filterwarnings(
    "ignore", category=DeprecationWarning, module="pymongo.pyopenssl_context"
)

from contextlib import asynccontextmanager
from http import HTTPStatus
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

# Import API routers
from apis.cv_records import router as cv_records_router
from apis.cv_records import set_cv_operations
from apis.cv_search import router as cv_search_router
from apis.cv_search import set_search_orchestrator
from apis.healthcheck import router as health_router

# Import core modules
from core.config import AppConfig
from core.custom_logger import CustomLogger
from core.exceptions import CVSearchException
from main_functions import initialize_application_startup, handle_application_shutdown

# Initialize logger
logger_manager = CustomLogger()
logger = logger_manager.get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    try:
        logger.info("Starting application initialization...")
        orchestrator, operations, _ = await initialize_application_startup()
        set_search_orchestrator(orchestrator)
        set_cv_operations(operations)
        logger.info("Application startup completed successfully!")
    except Exception as e:
        logger.error(f"Application startup failed: {str(e)}")
        raise e

    yield

    # Shutdown
    logger.info("Shutting down application...")
    set_search_orchestrator(None)
    set_cv_operations(None)
    handle_application_shutdown()
    logger.info("Application shutdown completed")


app = FastAPI(
    title="CV Search API",
    description="Hybrid vector and text search over parsed CVs",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # For production, replace with specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Search routes first so /search is not captured by /{cv_id}
app.include_router(health_router, prefix="/health", tags=["Health Check"])
app.include_router(cv_search_router, prefix="/api/cv", tags=["CV Search"])
app.include_router(cv_records_router, prefix="/api/cv", tags=["CV Records"])


@app.get("/")
async def root():
    return {
        "message": "Welcome to the CV Search API",
        "docs_url": "/docs",
        "redoc_url": "/redoc",
    }


@app.exception_handler(CVSearchException)
async def cv_search_exception_handler(request, exc: CVSearchException):
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code}: {exc.message}")
    else:
        logger.info(f"{exc.error_code}: {exc.message}")
    content = exc.to_dict()
    # Driver and provider messages stay in the logs outside development
    if not AppConfig.is_development():
        content.pop("details", None)
        if exc.status_code >= 500:
            content["error"] = HTTPStatus(exc.status_code).phrase
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    return JSONResponse(
        status_code=exc.status_code, content={"error": exc.detail, "success": False}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    logger.error(f"Unhandled exception: {str(exc)}")
    return JSONResponse(
        status_code=500, content={"error": "Internal server error", "success": False}
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", port=8000, reload=True)

# main_functions.py
"""
Main application functions for database initialization and index creation.
This module contains the core functions used during application startup.
"""

from pymongo.errors import PyMongoError

from core.config import AppConfig
from core.custom_logger import CustomLogger

# Initialize logger
logger_manager = CustomLogger()
logger = logger_manager.get_logger("main_functions")

# Single-field indexes backing the structured filters and sorts
FILTER_INDEX_FIELDS = [
    "uploadDate",
    "metadata.skills",
    "metadata.experience",
    "metadata.jobTitles",
    "metadata.education",
]

# $vectorSearch needs MongoDB 6.0 or newer
MIN_VECTOR_SEARCH_VERSION = 6


def check_server_version(client):
    """Warn when the server is too old for vector search; never fatal"""
    try:
        version = client.server_info().get("version", "")
        major = int(version.split(".")[0])
    except (PyMongoError, ValueError) as e:
        logger.warning(f"Could not verify MongoDB version for vector search: {str(e)}")
        return None

    logger.info(f"MongoDB server version: {version}")
    if major < MIN_VECTOR_SEARCH_VERSION:
        logger.warning(
            f"MongoDB version {version} is below 6.0. "
            "Vector search might not be available."
        )
    return version

async def create_standard_indexes(collection):
    """Create standard MongoDB indexes (non-Atlas Search)"""
    try:
        existing_index_names = [idx["name"] for idx in collection.list_indexes()]

        logger.info("Creating standard MongoDB indexes...")

        for index_field in FILTER_INDEX_FIELDS:
            index_name = f"{index_field}_1"
            if index_name not in existing_index_names:
                try:
                    collection.create_index(index_field)
                    logger.info(f"Created index: {index_field}")
                except PyMongoError as e:
                    logger.warning(f"Failed to create index {index_field}: {str(e)}")

        logger.info("Standard MongoDB indexes creation completed")
        return True

    except PyMongoError as e:
        logger.error(f"Error creating standard indexes: {str(e)}")
        return False


def build_search_services(collection, embedder):
    """Wire the record store, orchestrator and record operations together"""
    from mangodatabase.operations import CVOperations
    from mangodatabase.record_store import MongoRecordStore
    from search.orchestrator import SearchOrchestrator

    store = MongoRecordStore(
        collection,
        vector_field=AppConfig.VECTOR_FIELD,
        index_name=AppConfig.VECTOR_INDEX_NAME,
    )
    orchestrator = SearchOrchestrator(store, embedder)
    operations = CVOperations(store, vector_field=AppConfig.VECTOR_FIELD)
    return orchestrator, operations


async def initialize_application_startup():
    """
    Initialize the application during startup.
    This function handles connection testing, index creation and wiring of the
    search services.

    Returns:
        tuple: (orchestrator, operations, search_index_manager)
    """
    from embeddings import get_default_embedding_manager
    from mangodatabase.client import get_client, get_collection, ping
    from mangodatabase.search_indexes import SearchIndexManager

    logger.info("Starting up FastAPI application...")

    missing = AppConfig.missing_env_vars()
    if missing:
        logger.warning(f"Missing environment variables: {', '.join(missing)}")
    logger.info(f"Connection info: {AppConfig.get_connection_info()}")

    try:
        collection = get_collection()

        # Test database connection first
        ping()
        logger.info("Connected to MongoDB successfully!")
        check_server_version(get_client())

        await create_standard_indexes(collection)

        search_index_manager = SearchIndexManager(collection)
        if not search_index_manager.ensure_indexes():
            logger.warning(
                "Search indexes are incomplete; affected searches will degrade"
            )

        embedder = get_default_embedding_manager()
        orchestrator, operations = build_search_services(collection, embedder)

        logger.info("Application startup completed successfully!")
        return orchestrator, operations, search_index_manager

    except Exception as e:
        logger.error(f"Startup failed: {str(e)}")
        raise e


def handle_application_shutdown():
    """Handle application shutdown procedures"""
    from mangodatabase.client import close_client

    logger.info("Shutting down FastAPI application...")
    close_client()

# mangodatabase/client.py
from typing import Optional

from pymongo.collection import Collection
from pymongo.mongo_client import MongoClient
from pymongo.server_api import ServerApi

from core.config import AppConfig
from core.custom_logger import CustomLogger

logger = CustomLogger().get_logger("mongo_client")

# Global MongoDB client, shared by every request
_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    """Get the process-wide MongoDB client, connecting lazily"""
    global _client
    if _client is None:
        logger.info(f"Connecting to MongoDB at {AppConfig.masked_uri()}")
        kwargs = {}
        if AppConfig.MONGODB_URI.startswith("mongodb+srv://"):
            kwargs["server_api"] = ServerApi("1")
        _client = MongoClient(
            AppConfig.MONGODB_URI,
            serverSelectionTimeoutMS=AppConfig.SERVER_SELECTION_TIMEOUT_MS,
            **kwargs,
        )
    return _client


def get_database():
    return get_client()[AppConfig.DB_NAME]


def get_collection() -> Collection:
    """CV records collection"""
    return get_database()[AppConfig.COLLECTION_NAME]


def ping() -> bool:
    """Round-trip to the server; raises pymongo errors when unreachable"""
    get_client().admin.command("ping")
    return True


def close_client():
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB connection closed")

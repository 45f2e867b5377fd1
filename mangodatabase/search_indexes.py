# mangodatabase/search_indexes.py
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from pymongo.operations import SearchIndexModel

from core.config import AppConfig
from core.custom_logger import CustomLogger
from search.predicates import TEXT_INDEX_FIELDS

logger = CustomLogger().get_logger("search_index_manager")


class SearchIndexManager:
    """Provision the vector search index and the text index the search paths use"""

    def __init__(
        self,
        collection: Collection,
        vector_index_name: str = AppConfig.VECTOR_INDEX_NAME,
        text_index_name: str = AppConfig.TEXT_INDEX_NAME,
        vector_field: str = AppConfig.VECTOR_FIELD,
        dimensions: int = AppConfig.DIMENSIONS,
    ):
        self.collection = collection
        self.vector_index_name = vector_index_name
        self.text_index_name = text_index_name
        self.vector_field = vector_field
        self.dimensions = dimensions

    def check_search_index_exists(self, index_name=None):
        """Check if a search index exists"""
        index_name = index_name or self.vector_index_name
        try:
            for index in self.collection.list_search_indexes():
                if index.get("name") == index_name:
                    logger.info(f"Search index '{index_name}' already exists")
                    return True
            logger.info(f"Search index '{index_name}' does not exist")
            return False
        except PyMongoError as e:
            logger.error(f"Error checking search index: {str(e)}")
            return False

    def get_vector_index_definition(self):
        """Atlas vector search index over the embedding field"""
        return {
            "fields": [
                {
                    "type": "vector",
                    "path": self.vector_field,
                    "numDimensions": self.dimensions,
                    "similarity": "cosine",
                }
            ]
        }

    def create_search_index(self, definition=None):
        """Create the vector search index"""
        try:
            model = SearchIndexModel(
                definition=definition or self.get_vector_index_definition(),
                name=self.vector_index_name,
                type="vectorSearch",
            )
            result = self.collection.create_search_index(model)
            logger.info(f"Search index created successfully: {result}")
            return True, result
        except PyMongoError as e:
            logger.error(f"Failed to create search index: {str(e)}")
            return False, str(e)

    def ensure_text_index(self):
        """Create the full-text index backing ``$text`` queries"""
        try:
            # A collection holds at most one text index
            for index in self.collection.list_indexes():
                if index.get("key", {}).get("_fts") == "text":
                    logger.info(f"Text index '{index['name']}' already exists")
                    return True, index["name"]
            name = self.collection.create_index(
                [(field, "text") for field in TEXT_INDEX_FIELDS],
                name=self.text_index_name,
            )
            logger.info(f"Text index '{name}' ready")
            return True, name
        except PyMongoError as e:
            logger.error(f"Failed to create text index: {str(e)}")
            return False, str(e)

    def ensure_indexes(self):
        """Create whatever indexes are missing; failures are logged, not raised"""
        text_ok, _ = self.ensure_text_index()
        vector_ok = self.check_search_index_exists()
        if not vector_ok:
            vector_ok, result = self.create_search_index()
            if not vector_ok:
                logger.warning(
                    "Vector index unavailable; searches will fall back to text "
                    f"search: {result}"
                )
        return text_ok and vector_ok

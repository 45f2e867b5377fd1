"""
Custom exception classes for the CV Search API

This module defines the error taxonomy used by the search orchestrator and
the HTTP layer. Every exception carries a stable ``error_code`` and the HTTP
status it maps to, so the API can tell "your request was invalid" apart from
"the system could not complete your request".
"""

from typing import Optional, Dict, Any


class CVSearchException(Exception):
    """Base exception for all CV Search API errors"""

    status_code = 500
    default_error_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class InvalidRequestError(CVSearchException):
    """Raised when a request is rejected before execution (user error)"""

    status_code = 400
    default_error_code = "INVALID_REQUEST"


class EmbeddingUnavailableError(CVSearchException):
    """Raised when the embedding provider fails (quota, network, model)"""

    status_code = 503
    default_error_code = "EMBEDDING_UNAVAILABLE"


class VectorSearchFailedError(CVSearchException):
    """Raised when an explicitly requested vector search fails"""

    status_code = 502
    default_error_code = "VECTOR_SEARCH_FAILED"


class TextSearchFailedError(CVSearchException):
    """Raised when text search fails; there is no further fallback"""

    status_code = 502
    default_error_code = "TEXT_SEARCH_FAILED"


class StoreUnavailableError(CVSearchException):
    """Raised when the record store cannot be reached"""

    status_code = 503
    default_error_code = "STORE_UNAVAILABLE"


class QueryRejectedError(CVSearchException):
    """Raised when the store rejects a query (malformed predicate, missing index)"""

    status_code = 502
    default_error_code = "QUERY_REJECTED"


class SearchDeadlineExceededError(CVSearchException):
    """Raised when the caller-supplied deadline lapses"""

    status_code = 504
    default_error_code = "DEADLINE_EXCEEDED"


class SearchCancelledError(CVSearchException):
    """Raised inside a worker when the caller abandoned the request"""

    status_code = 499
    default_error_code = "CANCELLED"


class RecordNotFoundError(CVSearchException):
    """Raised when a record id does not exist"""

    status_code = 404
    default_error_code = "NOT_FOUND"


class ConfigurationError(CVSearchException):
    """Raised when configuration is invalid or missing"""

    pass

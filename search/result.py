# search/result.py
"""
Explicit result type for strategy attempts.

Executors return ``Ok`` or ``Err`` instead of raising, so the orchestrator's
fallback decision is a visible branch on ``FailureKind``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

T = TypeVar("T")


class FailureKind(str, Enum):
    EMBEDDING_UNAVAILABLE = "embedding_unavailable"
    QUERY_REJECTED = "query_rejected"
    STORE_UNAVAILABLE = "store_unavailable"


@dataclass(frozen=True)
class Page:
    """One page of sanitized-by-projection records plus the full match count"""

    records: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: FailureKind
    message: str
    cause: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]

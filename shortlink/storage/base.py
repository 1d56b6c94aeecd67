"""
Base storage interface for the Shortlink Platform.

Purpose:
    Define a small, stable contract that every mapping backend
    (in-memory, Postgres, DynamoDB) implements without requiring
    changes to the allocator or resolver.

Contract:
    - `insert_if_absent` is the single correctness-critical primitive. It must be
      atomic: callers racing on the same short code see exactly one INSERTED and
      everybody else ALREADY_EXISTS. Backends never raise from it; they translate
      their own exception types into an `InsertResult` tag so callers branch on
      the tag instead of on driver-specific exceptions.
    - `get_mapping` and `increment_click_count` raise `BackendError` on failure.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.

LLM Prompt Example:
    "Show how a tagged insert result keeps retry logic independent of whether
    the backend signals conflicts with a rowcount or with an exception."
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import UrlMapping


class InsertStatus(str, Enum):
    INSERTED = "inserted"
    ALREADY_EXISTS = "already_exists"
    BACKEND_FAILURE = "backend_failure"


@dataclass(frozen=True)
class InsertResult:
    """Outcome of `insert_if_absent`; `error` is set only for BACKEND_FAILURE."""

    status: InsertStatus
    error: Optional[BaseException] = None

    @classmethod
    def inserted(cls) -> "InsertResult":
        return cls(InsertStatus.INSERTED)

    @classmethod
    def already_exists(cls) -> "InsertResult":
        return cls(InsertStatus.ALREADY_EXISTS)

    @classmethod
    def backend_failure(cls, error: BaseException) -> "InsertResult":
        return cls(InsertStatus.BACKEND_FAILURE, error)


class BaseStorage(ABC):
    """Abstract base class for mapping backends."""

    @abstractmethod  # pragma: no cover
    def insert_if_absent(self, mapping: UrlMapping) -> InsertResult:
        """
        Persist `mapping` only if no record exists for its short code.

        Returns:
            InsertResult: INSERTED, ALREADY_EXISTS, or BACKEND_FAILURE with the cause.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_mapping(self, short_code: str) -> Optional[UrlMapping]:
        """
        Retrieve a mapping by its short code.

        Returns:
            Optional[UrlMapping]: The stored record or None.

        Raises:
            BackendError: If the backend cannot be read.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def increment_click_count(self, short_code: str) -> bool:
        """
        Atomically add one to the click counter of a mapping.

        Returns:
            bool: False if the code does not exist.

        Raises:
            BackendError: If the backend rejects or cannot apply the update.
        """
        raise NotImplementedError

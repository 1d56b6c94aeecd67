"""
Allocator module for the Shortlink Platform.

Responsibilities:
    - Validate the long URL and any custom alias
    - Decide the final short code (custom alias or generated)
    - Persist the mapping through the store's insert-if-absent primitive
    - Absorb collisions on generated codes with a bounded retry

Design notes:
    - Uniqueness is the store's job. The allocator never reads before writing;
      it attempts the insert and branches on the InsertStatus tag.
    - Custom aliases get exactly one attempt. A collision on a human-chosen
      alias is deterministic, so it is reported as a ConflictError for the
      caller to pick another.
    - Generated codes get `max_attempts` tries. A collision there is noise from
      keyspace density and simply triggers the next candidate; any other backend
      failure aborts immediately.
    - Generator and storage are injected, which lets tests script collisions.

LLM Prompt Example:
    "Explain why a collision on a user-chosen alias should be surfaced while a
    collision on a random code should be retried, and how a tagged insert result
    keeps that decision free of backend-specific exception handling."
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import settings
from ..errors import AllocationExhausted, BackendError, ConflictError, ValidationError
from ..models import UrlMapping
from ..storage.base import BaseStorage, InsertStatus
from .generator import BaseCodeGenerator, get_generator_from_config
from .validators import (
    ALIAS_MAX_LENGTH,
    ALIAS_MIN_LENGTH,
    is_reserved_code,
    is_valid_long_url,
    validate_alias,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allocation:
    """Result of a successful allocation."""

    short_code: str
    short_url: str
    mapping: UrlMapping

    def to_dict(self):
        return {"shortUrl": self.short_url, "shortCode": self.short_code}


class Allocator:
    """
    Turns (long_url, optional alias) into a persisted UrlMapping.
    """

    def __init__(
        self,
        storage: BaseStorage,
        generator: Optional[BaseCodeGenerator] = None,
        max_attempts: Optional[int] = None,
        short_url_base: Optional[str] = None,
    ):
        """
        Args:
            storage (BaseStorage): Backend exposing insert_if_absent.
            generator (Optional[BaseCodeGenerator]): Candidate source; built from config when omitted.
            max_attempts (Optional[int]): Retry budget for generated codes; defaults to settings.MAX_ATTEMPTS.
            short_url_base (Optional[str]): e.g. "https://sho.rt"; defaults to settings.short_url_base.
        """
        if max_attempts is None:
            max_attempts = settings.MAX_ATTEMPTS
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.storage = storage
        self.generator = generator or get_generator_from_config()
        self.max_attempts = max_attempts
        self.short_url_base = (short_url_base or settings.short_url_base).rstrip("/")

    def short_url_for(self, short_code: str) -> str:
        return f"{self.short_url_base}/{short_code}"

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def allocate(self, long_url: Optional[str], custom_alias: Optional[str] = None) -> Allocation:
        """
        Allocate a short code for `long_url`, optionally using a custom alias.

        Rules:
            - long_url must start with http:// or https://; otherwise ValidationError
              and the store is never touched.
            - If custom_alias is given (non-empty):
                * must be 3-16 chars of [A-Za-z0-9_-], else ValidationError.
                * must not name one of the app's own routes, else ValidationError.
                * one insert attempt; taken → ConflictError.
            - Otherwise up to max_attempts generated codes; collisions and reserved codes retry,
              exhaustion → AllocationExhausted.
            - Any other backend failure → BackendError, no retry.

        Returns:
            Allocation: short code, short URL and the stored mapping.
        """
        if not is_valid_long_url(long_url):
            raise ValidationError("Invalid URL")

        if custom_alias:
            return self._allocate_alias(long_url, custom_alias)
        return self._allocate_generated(long_url)

    # ---------------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------------
    def _allocate_alias(self, long_url: str, alias: str) -> Allocation:
        if not validate_alias(alias):
            raise ValidationError(
                f"Invalid alias. Use {ALIAS_MIN_LENGTH}-{ALIAS_MAX_LENGTH} alphanumeric characters, "
                "hyphens, or underscores."
            )
        if is_reserved_code(alias):
            raise ValidationError("This alias is reserved. Please choose another.")

        mapping = UrlMapping(short_code=alias, long_url=long_url)
        result = self.storage.insert_if_absent(mapping)
        if result.status is InsertStatus.INSERTED:
            return self._allocation(mapping)
        if result.status is InsertStatus.ALREADY_EXISTS:
            raise ConflictError()
        log.error("Error saving custom alias %r", alias, exc_info=result.error)
        raise BackendError() from result.error

    def _allocate_generated(self, long_url: str) -> Allocation:
        for attempt in range(1, self.max_attempts + 1):
            code = self.generator.generate()
            if is_reserved_code(code):
                # Shadowed by an app route; spend the attempt like a collision.
                log.info("Reserved code on attempt %d (%s). Retrying...", attempt, code)
                continue
            mapping = UrlMapping(short_code=code, long_url=long_url)
            result = self.storage.insert_if_absent(mapping)

            if result.status is InsertStatus.INSERTED:
                return self._allocation(mapping)
            if result.status is InsertStatus.ALREADY_EXISTS:
                log.info("Collision detected on attempt %d (%s). Retrying...", attempt, mapping.short_code)
                continue
            log.error("Error creating short URL", exc_info=result.error)
            raise BackendError() from result.error

        log.warning("No unique short code after %d attempts", self.max_attempts)
        raise AllocationExhausted()

    def _allocation(self, mapping: UrlMapping) -> Allocation:
        return Allocation(
            short_code=mapping.short_code,
            short_url=self.short_url_for(mapping.short_code),
            mapping=mapping,
        )

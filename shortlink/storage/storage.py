"""
Storage module for the Shortlink Platform (in-memory implementation).

Responsibilities:
    - Save mappings under an insert-if-absent rule
    - Track click counts
    - Provide retrieval by short code

Design:
    - This is an in-memory reference implementation that satisfies the BaseStorage contract.
    - A single lock makes insert and increment atomic across request threads, which is
      what a unique primary key and `UPDATE ... + 1` give the database backends.
    - It is intentionally simple to keep unit/integration tests fast and deterministic.

LLM Prompt Example:
    "Explain how this in-memory storage can be swapped for a database-backed layer
     (Postgres/DynamoDB) without changing the allocator or API code, by adhering to a
     narrow, explicit BaseStorage interface."
"""

import threading
from typing import Dict, Optional

from ..models import UrlMapping
from .base import BaseStorage, InsertResult


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize an empty mapping table.

        Internal schema:
            self.mappings = {short_code: UrlMapping}
        """
        self.mappings: Dict[str, UrlMapping] = {}
        self._lock = threading.Lock()

    def insert_if_absent(self, mapping: UrlMapping) -> InsertResult:
        """
        Store `mapping` unless its short code is already taken.

        An existing record is never touched, even when the long URL is identical.
        """
        with self._lock:
            if mapping.short_code in self.mappings:
                return InsertResult.already_exists()
            self.mappings[mapping.short_code] = mapping
        return InsertResult.inserted()

    def get_mapping(self, short_code: str) -> Optional[UrlMapping]:
        return self.mappings.get(short_code)

    def increment_click_count(self, short_code: str) -> bool:
        with self._lock:
            current = self.mappings.get(short_code)
            if current is None:
                return False
            self.mappings[short_code] = current.with_clicks(current.click_count + 1)
        return True

    def __len__(self) -> int:
        return len(self.mappings)

"""
Domain model for the Shortlink Platform.

`UrlMapping` is the only persistent entity: one record per short code, created
once by the allocator and read-only afterwards except for its click counter.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class UrlMapping:
    """
    A short code and the long URL it points to.

    Attributes:
        short_code (str): Primary key; 3-16 chars of [A-Za-z0-9_-].
        long_url (str): Target URL; validated as http(s) before creation.
        created_at (datetime): UTC insertion time, never changed.
        click_count (int): Best-effort redirect counter, only ever incremented.
    """

    short_code: str
    long_url: str
    created_at: datetime = field(default_factory=utcnow)
    click_count: int = 0

    def with_clicks(self, click_count: int) -> "UrlMapping":
        return replace(self, click_count=click_count)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view using the public field names."""
        return {
            "shortCode": self.short_code,
            "longUrl": self.long_url,
            "createdAt": self.created_at.isoformat(),
            "clickCount": self.click_count,
        }

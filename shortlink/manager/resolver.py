"""
Resolver module for the Shortlink Platform.

Looks a short code up with one synchronous read and, on a hit, hands the
click increment to a click recorder before returning the long URL. The
increment is never awaited: the redirect goes out as soon as the read is done.
"""

import logging

from ..analytics.base import BaseClickRecorder
from ..errors import NotFoundError, ValidationError
from ..models import UrlMapping
from ..storage.base import BaseStorage

log = logging.getLogger(__name__)


class Resolver:
    def __init__(self, storage: BaseStorage, clicks: BaseClickRecorder):
        self.storage = storage
        self.clicks = clicks

    def lookup(self, short_code: str) -> UrlMapping:
        """
        Return the stored mapping without counting a click.

        Raises:
            ValidationError: If the short code is missing.
            NotFoundError: If no mapping exists.
            BackendError: If the store cannot be read.
        """
        if not short_code or not short_code.strip():
            raise ValidationError("Missing shortCode in path")
        mapping = self.storage.get_mapping(short_code)
        if mapping is None:
            raise NotFoundError()
        return mapping

    def resolve(self, short_code: str) -> str:
        """
        Return the long URL for `short_code` and schedule a click increment.

        Unknown codes raise NotFoundError and schedule nothing.
        """
        mapping = self.lookup(short_code)
        self.clicks.record(short_code)
        log.debug("Resolved %r -> %s", short_code, mapping.long_url)
        return mapping.long_url

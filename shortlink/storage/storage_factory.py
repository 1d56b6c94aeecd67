"""
Storage factory: switch storage backend from config (lazy env version)
======================================================================

This module centralizes selection of the storage backend (in-memory, Postgres, DynamoDB)
so the rest of the app can stay ignorant of where data lives.

- Reads environment **at call time** to avoid stale values in tests.
- Imports a DB backend **only if** it is selected, so psycopg/boto3 are
  not loaded for in-memory runs.

Environment variables
---------------------
- SHORTLINK_STORAGE_BACKEND:   "memory" (default), "postgres" or "dynamodb"
- SHORTLINK_DB_DSN:            DSN string if backend=="postgres"
- SHORTLINK_TABLE_NAME:        table name for postgres and dynamodb (default "url_mappings")
- SHORTLINK_DYNAMODB_ENDPOINT: optional local endpoint if backend=="dynamodb"
- AWS_REGION:                  optional region if backend=="dynamodb"
"""

import logging
import os
from typing import Optional

from shortlink.storage.base import BaseStorage
from shortlink.storage.storage import Storage

log = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a storage backend based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory" (default), "postgres" or "dynamodb". If omitted, reads SHORTLINK_STORAGE_BACKEND.
    kwargs : dict
        Extra args for the backend: dsn="..." for postgres; table_name, region_name,
        endpoint_url for dynamodb.

    Returns
    -------
    BaseStorage-compatible instance
    """
    be = (backend or os.getenv("SHORTLINK_STORAGE_BACKEND", "memory")).strip().lower()
    table_name = kwargs.get("table_name") or os.getenv("SHORTLINK_TABLE_NAME", "url_mappings")
    log.debug("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("SHORTLINK_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env SHORTLINK_DB_DSN)")
        from shortlink.storage.db_storage import DBStorage

        return DBStorage(dsn=dsn, table_name=table_name)

    if be == "dynamodb":
        from shortlink.storage.dynamo_storage import DynamoStorage

        return DynamoStorage(
            table_name=table_name,
            region_name=kwargs.get("region_name") or os.getenv("AWS_REGION", ""),
            endpoint_url=kwargs.get("endpoint_url") or os.getenv("SHORTLINK_DYNAMODB_ENDPOINT", ""),
        )

    raise ValueError(f"Unknown storage backend: {be!r}")

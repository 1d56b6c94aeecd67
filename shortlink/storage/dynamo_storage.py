"""
DynamoStorage: DynamoDB-backed storage for the Shortlink Platform
==================================================================

Implements `BaseStorage` on a single DynamoDB table whose hash key is `shortCode`.
Items keep the attribute names the service has always written:

    {"shortCode": S, "longUrl": S, "createdAt": S (ISO-8601, "Z" or offset), "clickCount": N}

Key Design Points
-----------------
- **Insert-if-absent**: `put_item` with `ConditionExpression="attribute_not_exists(shortCode)"`.
  DynamoDB evaluates the condition atomically; the loser of a race receives
  `ConditionalCheckFailedException`, which we translate to ALREADY_EXISTS.
- **Atomic increment**: `update_item` with `ADD clickCount :inc`, guarded by
  `attribute_exists(shortCode)` so a click on an unknown code never creates an item.
- **One handle**: the boto3 `Table` resource is built once in the constructor and reused
  for every call. Pass `endpoint_url` to target DynamoDB Local / SAM local.
- **Errors**: `ClientError` / `BotoCoreError` become backend failures; they never leak.
"""

import logging
from datetime import datetime
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import BackendError
from ..models import UrlMapping
from .base import BaseStorage, InsertResult

log = logging.getLogger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def _parse_created_at(raw: str) -> datetime:
    # Items written by JavaScript toISOString() end in "Z", which
    # fromisoformat only accepts from Python 3.11 on.
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw)


class DynamoStorage(BaseStorage):
    """DynamoDB implementation of the mapping storage contract.

    Parameters
    ----------
    table_name : str
        Name of the mappings table.
    region_name : str, optional
        AWS region; falls back to the boto3 default chain when empty.
    endpoint_url : str, optional
        Local endpoint (e.g. "http://127.0.0.1:8001") instead of the AWS service.
    table : Any, optional
        Pre-built `Table` resource (tests inject a fake here).
    """

    def __init__(
        self,
        table_name: str,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        table: Any = None,
    ) -> None:
        self.table_name = table_name
        if table is None:
            resource = boto3.resource(
                "dynamodb",
                region_name=region_name or None,
                endpoint_url=endpoint_url or None,
            )
            table = resource.Table(table_name)
        self.table = table

    def insert_if_absent(self, mapping: UrlMapping) -> InsertResult:
        try:
            self.table.put_item(
                Item={
                    "shortCode": mapping.short_code,
                    "longUrl": mapping.long_url,
                    "createdAt": mapping.created_at.isoformat(),
                    "clickCount": mapping.click_count,
                },
                ConditionExpression="attribute_not_exists(shortCode)",
            )
        except ClientError as exc:
            if _error_code(exc) == CONDITIONAL_CHECK_FAILED:
                return InsertResult.already_exists()
            log.warning("put_item for %r failed: %s", mapping.short_code, exc)
            return InsertResult.backend_failure(exc)
        except BotoCoreError as exc:
            log.warning("put_item for %r failed: %s", mapping.short_code, exc)
            return InsertResult.backend_failure(exc)
        return InsertResult.inserted()

    def get_mapping(self, short_code: str) -> Optional[UrlMapping]:
        try:
            result = self.table.get_item(Key={"shortCode": short_code})
        except (ClientError, BotoCoreError) as exc:
            raise BackendError(f"Lookup of {short_code!r} failed") from exc

        item = result.get("Item")
        # Items without a longUrl are treated as missing.
        if not item or not item.get("longUrl"):
            return None
        try:
            created_at = _parse_created_at(item["createdAt"])
        except (KeyError, AttributeError, ValueError) as exc:
            raise BackendError(f"Unreadable createdAt on {short_code!r}") from exc
        return UrlMapping(
            short_code=item["shortCode"],
            long_url=item["longUrl"],
            created_at=created_at,
            # boto3 returns numbers as Decimal
            click_count=int(item.get("clickCount", 0)),
        )

    def increment_click_count(self, short_code: str) -> bool:
        try:
            self.table.update_item(
                Key={"shortCode": short_code},
                UpdateExpression="ADD clickCount :inc",
                ConditionExpression="attribute_exists(shortCode)",
                ExpressionAttributeValues={":inc": 1},
            )
        except ClientError as exc:
            if _error_code(exc) == CONDITIONAL_CHECK_FAILED:
                return False
            raise BackendError(f"Click increment for {short_code!r} failed") from exc
        except BotoCoreError as exc:
            raise BackendError(f"Click increment for {short_code!r} failed") from exc
        return True

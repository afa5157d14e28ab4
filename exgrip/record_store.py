from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol

from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from .errors import RecordDecodeError, StoreFatalError, StoreTransientError
from .filters import FilterSpec
from .models import CombinationRecord

logger = logging.getLogger(__name__)

THROUGHPUT_ERROR_CODES = {
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "RequestLimitExceeded",
}


@dataclass
class ScanRequest:
    table: str
    filter: FilterSpec
    start_key: dict[str, Any] | None = None


@dataclass
class ScanPage:
    items: list[CombinationRecord]
    last_key: dict[str, Any] | None = None


class RecordStore(Protocol):
    async def scan_page(self, request: ScanRequest) -> ScanPage: ...


def _decode_number(text: str) -> int | float:
    value = Decimal(text)
    return int(value) if value == value.to_integral_value() else float(value)


def decode_value(attr: dict[str, Any]) -> Any:
    """Decode one DynamoDB wire value ({"S": "x"}, {"N": "1"}, ...).

    Raises:
        RecordDecodeError: if the value does not carry exactly one known tag.
    """
    if not isinstance(attr, dict) or len(attr) != 1:
        raise RecordDecodeError(f"Expected a single-tag attribute value, got {attr!r}")

    tag, raw = next(iter(attr.items()))
    if tag == "S":
        return raw
    if tag == "N":
        return _decode_number(raw)
    if tag == "BOOL":
        return bool(raw)
    if tag == "NULL":
        return None
    if tag == "M":
        return {k: decode_value(v) for k, v in raw.items()}
    if tag == "L":
        return [decode_value(v) for v in raw]
    if tag == "SS":
        return list(raw)
    if tag == "NS":
        return [_decode_number(v) for v in raw]
    raise RecordDecodeError(f"Unsupported attribute tag {tag!r}")


def decode_item(item: dict[str, dict[str, Any]]) -> CombinationRecord:
    """Decode a raw scan item into a CombinationRecord."""
    flat = {key: decode_value(value) for key, value in item.items()}
    try:
        return CombinationRecord.model_validate(flat)
    except ValidationError as e:
        raise RecordDecodeError(f"Item does not match the combination schema: {e}") from e


def _used_names(spec: FilterSpec) -> dict[str, str]:
    # DynamoDB rejects aliases that the expression never references
    expression = spec.expression
    return {alias: name for alias, name in spec.names.items() if alias in expression}


def make_dynamodb_client(
    region: str,
    access_key_id: str = "",
    secret_access_key: str = "",
    timeout: float = 10.0,
):
    import boto3

    kwargs: dict[str, Any] = {}
    if access_key_id and secret_access_key:
        kwargs["aws_access_key_id"] = access_key_id
        kwargs["aws_secret_access_key"] = secret_access_key

    return boto3.client(
        "dynamodb",
        region_name=region,
        config=BotoConfig(
            connect_timeout=timeout,
            read_timeout=timeout,
            # retries for throughput errors are handled by PaginatedScanner
            retries={"max_attempts": 1, "mode": "standard"},
        ),
        **kwargs,
    )


class DynamoRecordStore:
    """RecordStore backed by a boto3 DynamoDB client."""

    def __init__(self, client) -> None:
        self._client = client

    def _scan_params(self, request: ScanRequest) -> dict[str, Any]:
        params: dict[str, Any] = {"TableName": request.table}
        if request.filter.predicates:
            params["FilterExpression"] = request.filter.expression
            params["ExpressionAttributeValues"] = request.filter.values
            names = _used_names(request.filter)
            if names:
                params["ExpressionAttributeNames"] = names
        if request.start_key:
            params["ExclusiveStartKey"] = request.start_key
        return params

    async def scan_page(self, request: ScanRequest) -> ScanPage:
        params = self._scan_params(request)
        try:
            resp = await asyncio.to_thread(self._client.scan, **params)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in THROUGHPUT_ERROR_CODES:
                raise StoreTransientError(f"Scan of {request.table} throttled: {code}") from e
            raise StoreFatalError(f"Scan of {request.table} failed: {code or e}") from e
        except BotoCoreError as e:
            raise StoreFatalError(f"Scan of {request.table} failed: {e}") from e

        items = [decode_item(item) for item in resp.get("Items", [])]
        return ScanPage(items=items, last_key=resp.get("LastEvaluatedKey"))

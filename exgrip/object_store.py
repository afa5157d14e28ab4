from __future__ import annotations

import asyncio
from typing import Any, Protocol

from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .errors import StoreFatalError

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class ObjectStore(Protocol):
    async def exists(self, bucket: str, key: str) -> bool: ...

    async def signed_url(self, bucket: str, key: str, expiry_seconds: int) -> str: ...


def make_s3_client(
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
        "s3",
        region_name=region,
        config=BotoConfig(
            connect_timeout=timeout,
            read_timeout=timeout,
            signature_version="s3v4",
            retries={"max_attempts": 3, "mode": "standard"},
        ),
        **kwargs,
    )


class S3ObjectStore:
    """ObjectStore backed by a boto3 S3 client."""

    def __init__(self, client) -> None:
        self._client = client

    async def exists(self, bucket: str, key: str) -> bool:
        try:
            await asyncio.to_thread(self._client.head_object, Bucket=bucket, Key=key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in NOT_FOUND_CODES:
                return False
            raise StoreFatalError(f"HEAD s3://{bucket}/{key} failed: {code or e}") from e
        except BotoCoreError as e:
            raise StoreFatalError(f"HEAD s3://{bucket}/{key} failed: {e}") from e
        return True

    async def signed_url(self, bucket: str, key: str, expiry_seconds: int) -> str:
        """Presigned GET URL. Callers must check ``exists`` first."""
        try:
            return await asyncio.to_thread(
                self._client.generate_presigned_url,
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=expiry_seconds,
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreFatalError(f"Could not sign s3://{bucket}/{key}: {e}") from e

"""Shared fakes for the record store and object store."""

from __future__ import annotations

import asyncio

import pytest

from exgrip.record_store import ScanPage, ScanRequest, decode_item


def wire_item(
    item_id: str,
    spindle: str = "BBT40",
    master: str = "EXGRIP-A1",
    adapter: str = "NA",
    clamping: str = "EXGRIP-C1",
    length: str = "100",
    **extra: str,
) -> dict:
    """A combination row as DynamoDB returns it on the wire."""
    item = {
        "id": {"S": item_id},
        "spindle": {"S": spindle},
        "productSKUMasterHolder": {"S": master},
        "productSKUExtensionAdapter": {"S": adapter},
        "productSKUClampingExtension": {"S": clamping},
        "length": {"N": length},
    }
    item.update({k: {"S": v} for k, v in extra.items()})
    return item


def record(item_id: str, **kwargs):
    return decode_item(wire_item(item_id, **kwargs))


class FakeRecordStore:
    """Replays a scripted list of pages and exceptions, one per call."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests: list[ScanRequest] = []

    async def scan_page(self, request: ScanRequest) -> ScanPage:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeObjectStore:
    def __init__(self, existing=(), failing=None, delay: float = 0.0):
        self.existing = set(existing)
        self.failing = dict(failing or {})
        self.delay = delay
        self.exists_calls: list[str] = []
        self.sign_calls: list[tuple[str, int]] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    async def exists(self, bucket: str, key: str) -> bool:
        self.exists_calls.append(key)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if key in self.failing:
                raise self.failing[key]
            return key in self.existing
        finally:
            self.in_flight -= 1

    async def signed_url(self, bucket: str, key: str, expiry_seconds: int) -> str:
        self.sign_calls.append((key, expiry_seconds))
        return f"https://{bucket}.s3.amazonaws.com/{key}?X-Amz-Expires={expiry_seconds}"


@pytest.fixture
def sleeps():
    """Records backoff delays instead of sleeping."""
    delays: list[float] = []

    async def _sleep(delay: float) -> None:
        delays.append(delay)

    _sleep.delays = delays
    return _sleep

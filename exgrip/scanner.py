from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .errors import StoreFatalError, StoreTransientError
from .filters import FilterSpec
from .models import CombinationRecord
from .record_store import RecordStore, ScanRequest

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BASE_DELAY = 0.1
DEFAULT_TIMEOUT = 10.0


class PaginatedScanner:
    """Runs a full, multi-page filtered scan of one table.

    Pages are fetched strictly in sequence, each request carrying the
    previous page's continuation key. A throttled page is retried after
    ``base_delay * 2 ** (failures - 1)`` seconds; after ``max_attempts``
    consecutive failures of the same page the scan fails with
    StoreFatalError. Any other StoreError propagates immediately.

    ``sleep`` is injectable so tests can observe the backoff schedule
    without waiting.
    """

    def __init__(
        self,
        store: RecordStore,
        table: str,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        timeout: float = DEFAULT_TIMEOUT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store = store
        self.table = table
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.timeout = timeout
        self._sleep = sleep

    async def _fetch(self, request: ScanRequest):
        try:
            return await asyncio.wait_for(self.store.scan_page(request), self.timeout)
        except asyncio.TimeoutError as e:
            raise StoreFatalError(
                f"Scan of {self.table} timed out after {self.timeout}s"
            ) from e

    async def _fetch_with_retry(self, request: ScanRequest):
        failures = 0
        while True:
            try:
                return await self._fetch(request)
            except StoreTransientError as e:
                failures += 1
                if failures >= self.max_attempts:
                    raise StoreFatalError(
                        f"Scan of {self.table} still throttled after {failures} attempts"
                    ) from e
                delay = self.base_delay * 2 ** (failures - 1)
                logger.warning(
                    "Scan of %s throttled (attempt %d/%d), retrying in %.2fs",
                    self.table, failures, self.max_attempts, delay,
                )
                await self._sleep(delay)

    async def scan(self, spec: FilterSpec) -> list[CombinationRecord]:
        """Return every matching record, in the store's scan order."""
        records: list[CombinationRecord] = []
        start_key = None
        pages = 0

        while True:
            request = ScanRequest(table=self.table, filter=spec, start_key=start_key)
            page = await self._fetch_with_retry(request)
            pages += 1
            records.extend(page.items)
            logger.info("Fetched %d items from %s (page %d)", len(page.items), self.table, pages)

            start_key = page.last_key
            if not start_key:
                break

        return records

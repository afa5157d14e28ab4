"""Existence checks and presigned links for a combination's 3D files."""

from __future__ import annotations

import asyncio
import logging

from .errors import StoreError, StoreFatalError
from .models import ArtifactAccess, CombinationRecord, RecordArtifacts
from .object_store import ObjectStore
from .paths import resolve_paths

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_SECONDS = 3600
DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_TIMEOUT = 10.0


class ArtifactResolver:
    def __init__(
        self,
        store: ObjectStore,
        bucket: str,
        *,
        expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.store = store
        self.bucket = bucket
        self.expiry_seconds = expiry_seconds
        self.max_concurrency = max_concurrency
        self.timeout = timeout

    async def _call(self, coro, what: str):
        try:
            return await asyncio.wait_for(coro, self.timeout)
        except asyncio.TimeoutError as e:
            raise StoreFatalError(f"{what} timed out after {self.timeout}s") from e

    async def resolve_key(self, key: str) -> ArtifactAccess:
        """Check one key and sign it if present.

        Absence is not an error and never triggers a signing call.

        Raises:
            StoreError: if the existence check or signing fails.
        """
        found = await self._call(self.store.exists(self.bucket, key), f"HEAD {key}")
        if not found:
            logger.info("Artifact not found: s3://%s/%s", self.bucket, key)
            return ArtifactAccess.not_found()

        url = await self._call(
            self.store.signed_url(self.bucket, key, self.expiry_seconds), f"Signing {key}"
        )
        return ArtifactAccess.available(url)

    async def resolve(self, mesh_key: str, cad_key: str) -> RecordArtifacts:
        """Resolve both keys concurrently; a store failure on one leaves the other intact."""
        results = await asyncio.gather(
            self.resolve_key(mesh_key),
            self.resolve_key(cad_key),
            return_exceptions=True,
        )

        accesses: list[ArtifactAccess] = []
        for key, result in zip((mesh_key, cad_key), results):
            if isinstance(result, StoreError):
                logger.error("Artifact lookup failed for %s: %s", key, result)
                accesses.append(ArtifactAccess.failed(str(result)))
            elif isinstance(result, BaseException):
                raise result
            else:
                accesses.append(result)

        return RecordArtifacts(stl=accesses[0], step=accesses[1])

    async def resolve_record(self, record: CombinationRecord) -> RecordArtifacts:
        paths = resolve_paths(
            record.spindle,
            record.master_holder,
            record.extension_adapter,
            record.clamping_extension,
        )
        return await self.resolve(paths.mesh_key, paths.cad_key)

    async def resolve_records(self, records: list[CombinationRecord]) -> list[RecordArtifacts]:
        """Resolve artifacts for every record, at most ``max_concurrency`` at a time.

        Output order matches ``records``.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _one(record: CombinationRecord) -> RecordArtifacts:
            async with semaphore:
                return await self.resolve_record(record)

        return list(await asyncio.gather(*[_one(r) for r in records]))

from __future__ import annotations

import asyncio
import logging

from .filters import build_filter
from .models import (
    CombinationRecord,
    EmptyResult,
    ProductHandles,
    QueryCriteria,
    RecordArtifacts,
)
from .products import ProductDirectory
from .service import CombinationService

logger = logging.getLogger(__name__)


def assemble_results(
    records: list[CombinationRecord],
    artifacts: list[RecordArtifacts],
    products: list[ProductHandles] | None = None,
) -> list[dict]:
    """Attach artifact links (and product handles, if looked up) to each record."""
    if len(artifacts) != len(records):
        raise ValueError("Expected one artifact result per record")

    results: list[dict] = []
    for i, record in enumerate(records):
        row = record.model_dump(by_alias=True)
        row["stlFilePath"] = artifacts[i].stl.link
        row["stepFilePath"] = artifacts[i].step.link
        row["artifactError"] = artifacts[i].error
        if products is not None:
            row.update(products[i].model_dump(by_alias=True))
        results.append(row)
    return results


async def lookup_products(
    records: list[CombinationRecord],
    directory: ProductDirectory,
    max_concurrency: int,
) -> list[ProductHandles]:
    """Look up product handles for each record's three components."""
    semaphore = asyncio.Semaphore(max_concurrency)

    async def _handle(sku: str) -> str | None:
        async with semaphore:
            return await directory.get_product_handle(sku)

    async def _one(record: CombinationRecord) -> ProductHandles:
        master, adapter, clamping = await asyncio.gather(
            _handle(record.master_holder),
            _handle(record.extension_adapter),
            _handle(record.clamping_extension),
        )
        return ProductHandles(
            master_holder=master,
            extension_adapter=adapter,
            clamping_extension=clamping,
        )

    return list(await asyncio.gather(*[_one(r) for r in records]))


async def run_query(criteria: QueryCriteria, service: CombinationService) -> EmptyResult | list[dict]:
    """Filter, scan, then enrich every matching combination.

    Returns EmptyResult when nothing matches; artifact resolution is not
    attempted in that case.
    """
    spec = build_filter(criteria)
    records = await service.scanner.scan(spec)
    logger.info("Scan matched %d combinations", len(records))

    if not records:
        return EmptyResult()

    if service.products is None:
        artifacts = await service.artifacts.resolve_records(records)
        return assemble_results(records, artifacts)

    artifacts, products = await asyncio.gather(
        service.artifacts.resolve_records(records),
        lookup_products(records, service.products, service.artifacts.max_concurrency),
    )
    return assemble_results(records, artifacts, products)

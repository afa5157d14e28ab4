from __future__ import annotations

from dataclasses import dataclass

from . import config
from .artifacts import ArtifactResolver
from .object_store import S3ObjectStore, make_s3_client
from .products import ProductDirectory, ShopifyProductDirectory
from .record_store import DynamoRecordStore, make_dynamodb_client
from .scanner import PaginatedScanner


@dataclass
class CombinationService:
    """Collaborators for one pipeline run. Built once, shared read-only across requests."""

    scanner: PaginatedScanner
    artifacts: ArtifactResolver
    products: ProductDirectory | None = None


def build_service() -> CombinationService:
    """Wire the AWS-backed service from environment configuration."""
    dynamodb = make_dynamodb_client(
        config.AWS_REGION,
        config.AWS_ACCESS_KEY_ID,
        config.AWS_SECRET_ACCESS_KEY,
        timeout=config.STORE_TIMEOUT_SECONDS,
    )
    s3 = make_s3_client(
        config.AWS_REGION,
        config.AWS_ACCESS_KEY_ID,
        config.AWS_SECRET_ACCESS_KEY,
        timeout=config.STORE_TIMEOUT_SECONDS,
    )

    scanner = PaginatedScanner(
        DynamoRecordStore(dynamodb),
        config.AWS_DB_TABLE_NAME,
        max_attempts=config.SCAN_MAX_ATTEMPTS,
        base_delay=config.SCAN_BASE_DELAY_SECONDS,
        timeout=config.STORE_TIMEOUT_SECONDS,
    )
    artifacts = ArtifactResolver(
        S3ObjectStore(s3),
        config.AWS_BUCKET_NAME,
        expiry_seconds=config.ARTIFACT_URL_EXPIRY_SECONDS,
        max_concurrency=config.ARTIFACT_MAX_CONCURRENCY,
        timeout=config.STORE_TIMEOUT_SECONDS,
    )

    products = None
    if config.ENABLE_PRODUCT_LOOKUP and config.SHOPIFY_SHOP:
        products = ShopifyProductDirectory(
            config.SHOPIFY_SHOP,
            config.SHOPIFY_ACCESS_TOKEN,
            api_version=config.SHOPIFY_API_VERSION,
            timeout=config.STORE_TIMEOUT_SECONDS,
        )

    return CombinationService(scanner=scanner, artifacts=artifacts, products=products)

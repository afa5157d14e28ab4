"""Shopify Admin GraphQL lookup of storefront product handles by SKU."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from .models import NOT_APPLICABLE

logger = logging.getLogger(__name__)

PRODUCT_BY_SKU_QUERY = """
query($query: String!) {
  productVariants(first: 1, query: $query) {
    edges {
      node {
        sku
        product { id title handle }
      }
    }
  }
}
"""


class ProductDirectory(Protocol):
    async def get_product_handle(self, sku: str | None) -> str | None: ...


def is_lookup_sku(sku: str | None) -> bool:
    return bool(sku) and sku != NOT_APPLICABLE


def _extract_handle(raw: dict[str, Any]) -> str | None:
    variants = (raw.get("data") or {}).get("productVariants") or {}
    edges = variants.get("edges") or []
    if not edges:
        return None
    product = (edges[0].get("node") or {}).get("product") or {}
    return product.get("handle")


class ShopifyProductDirectory:
    def __init__(
        self,
        shop: str,
        access_token: str,
        *,
        api_version: str = "2024-07",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = f"https://{shop}/admin/api/{api_version}/graphql.json"
        self._headers = {
            "X-Shopify-Access-Token": access_token,
            "Content-Type": "application/json",
        }
        self.timeout = timeout
        self._transport = transport

    async def get_product_handle(self, sku: str | None) -> str | None:
        """Return the product handle for a SKU, or None.

        "NA" and empty SKUs are skipped without a request. Lookup failures
        are logged and also give None.
        """
        if not is_lookup_sku(sku):
            logger.debug("Skipping product lookup for SKU %r", sku)
            return None

        payload = {"query": PRODUCT_BY_SKU_QUERY, "variables": {"query": f"sku:{sku}"}}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.url, json=payload, headers=self._headers)
                resp.raise_for_status()
                raw = resp.json()
        except ValueError as exc:
            logger.error("Product lookup for SKU %s returned invalid JSON: %s", sku, exc)
            return None
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Product lookup for SKU %s failed: %s %s",
                sku, exc.response.status_code, exc.response.reason_phrase,
            )
            return None
        except httpx.HTTPError as exc:
            logger.error("Product lookup for SKU %s failed: %s", sku, exc)
            return None

        if not isinstance(raw, dict):
            logger.error("Product lookup for SKU %s returned unexpected body: %r", sku, raw)
            return None

        if raw.get("errors"):
            logger.error("Product lookup for SKU %s returned errors: %s", sku, raw["errors"])
            return None

        return _extract_handle(raw)

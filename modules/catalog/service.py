"""
Catalog Module - External Product API Client
==============================================
Fetches product listings from the public store API (fakestoreapi.com).
The result only feeds rendering; it never touches cart or order state.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

import httpx

from config.settings import CATALOG_API_URL, CATALOG_TIMEOUT
from common.exceptions import CatalogFetchError
from common.helpers import safe_int, safe_decimal

logger = logging.getLogger("storefront.catalog")


@dataclass(frozen=True)
class Product:
    id: int
    title: str
    price: Decimal
    image: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "price": float(self.price),
            "image": self.image,
        }


def parse_product(raw: dict) -> Product:
    """
    Normalize one API entry into a Product.

    Raises:
        ValueError: If id or price is missing or non-numeric.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Product entry is not an object: {raw!r}")
    product_id = safe_int(raw.get("id"))
    price = safe_decimal(raw.get("price"))
    if product_id is None or price is None:
        raise ValueError(f"Product entry missing id/price: {raw!r}")
    return Product(
        id=product_id,
        title=str(raw.get("title") or ""),
        price=price,
        image=str(raw.get("image") or ""),
    )


class CatalogClient:
    """Thin async client over the product-listing endpoint."""

    def __init__(
        self,
        base_url: str = CATALOG_API_URL,
        timeout: float = CATALOG_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def fetch_products(self) -> List[Product]:
        """
        GET {base_url}/products.

        Raises:
            CatalogFetchError: On network/HTTP errors or a malformed payload.
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                resp = await client.get("/products")
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Catalog fetch failed: {e}")
            raise CatalogFetchError() from e

        if not isinstance(data, list):
            logger.warning(f"Catalog returned non-list payload: {type(data).__name__}")
            raise CatalogFetchError()

        try:
            products = [parse_product(entry) for entry in data]
        except ValueError as e:
            logger.warning(f"Catalog returned malformed product: {e}")
            raise CatalogFetchError() from e

        logger.info(f"Fetched {len(products)} products from catalog")
        return products


# Singleton
catalog_client = CatalogClient()


def get_catalog_client() -> CatalogClient:
    """FastAPI dependency: the shared catalog client (overridable in tests)."""
    return catalog_client

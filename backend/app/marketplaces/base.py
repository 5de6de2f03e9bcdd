from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from urllib.parse import quote

from app.core.exceptions import ConfigurationError
from app.db.models.product import Product
from app.db.models.product_source import ProductSource


@dataclass(frozen=True)
class FetchResult:
    price: Decimal
    currency: str
    collected_at: datetime
    description: str | None = None
    image_path: str | None = None
    raw_payload: str | None = None


class PriceFetcher(ABC):
    @abstractmethod
    async def fetch(self, product: Product, source: ProductSource) -> FetchResult: ...


def _present(value: str | None) -> bool:
    return bool(value and value.strip())


def resolve_source_url(product: Product, source: ProductSource, base_url: str) -> str:
    """
    sourceUrl wins, then a /dp/ link built from the external id,
    then the product's own URL.
    """
    if _present(source.source_url):
        return source.source_url.strip()
    if _present(source.external_id):
        external_id = quote(source.external_id.strip(), safe="")
        return f"{base_url.rstrip('/')}/dp/{external_id}"
    if _present(product.url):
        return product.url.strip()
    raise ConfigurationError(
        f"Source {source.id} of product {product.id} has no sourceUrl, externalId or product URL"
    )

from datetime import datetime, timezone
from decimal import Decimal

from app.db.models.product import Product
from app.db.models.product_source import ProductSource
from app.marketplaces.base import FetchResult, PriceFetcher

MOCK_DESCRIPTION = "Mock description for testing"


class AmazonMockFetcher(PriceFetcher):
    """Offline fetcher: the price only depends on the source identifier length."""

    async def fetch(self, product: Product, source: ProductSource) -> FetchResult:
        seed = source.external_id or source.source_url or product.title or ""
        price = Decimal(10 + (len(seed) % 50)).quantize(Decimal("0.01"))

        return FetchResult(
            price=price,
            currency="USD",
            collected_at=datetime.now(timezone.utc),
            description=product.description or MOCK_DESCRIPTION,
            image_path=product.image_path_in_storage,
            raw_payload=None,
        )

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.db.models.price_snapshot import PriceSnapshot
from app.db.models.product import Product
from app.db.models.product_source import ProductSource
from app.marketplaces.base import FetchResult, PriceFetcher

logger = structlog.get_logger(__name__)


@dataclass
class IngestionOutcome:
    snapshot: PriceSnapshot
    result: FetchResult


def select_source(
    product: Product, source_id: int | None = None
) -> ProductSource | None:
    """
    Explicit source if the product owns it, else the first primary,
    else the first source at all.
    """
    if source_id is not None:
        return next((s for s in product.sources if s.id == source_id), None)

    primary = next((s for s in product.sources if s.is_primary), None)
    if primary is not None:
        return primary
    return product.sources[0] if product.sources else None


class PriceIngestionService:
    def __init__(self, db: Session, fetcher: PriceFetcher):
        self.db = db
        self.fetcher = fetcher

    async def fetch_and_persist(
        self, product_id: int, source_id: int | None = None
    ) -> PriceSnapshot | None:
        outcome = await self._ingest(product_id, source_id)
        return outcome.snapshot if outcome else None

    async def fetch_live(
        self, product_id: int, source_id: int | None = None
    ) -> IngestionOutcome | None:
        return await self._ingest(product_id, source_id)

    async def _ingest(
        self, product_id: int, source_id: int | None
    ) -> IngestionOutcome | None:
        product = self.db.scalars(
            select(Product)
            .options(selectinload(Product.sources))
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        ).first()
        if product is None:
            return None

        source = select_source(product, source_id)
        if source is None:
            return None

        # fetch errors propagate as-is, nothing has been written yet
        fetched = await self.fetcher.fetch(product, source)

        snapshot = PriceSnapshot(
            product_id=product.id,
            product_source_id=source.id,
            price=fetched.price,
            currency=fetched.currency,
            collected_at=fetched.collected_at,
            raw_data_json=fetched.raw_payload,
        )
        self.db.add(snapshot)

        if fetched.description and not product.description:
            product.description = fetched.description
        if fetched.image_path and not product.image_path_in_storage:
            product.image_path_in_storage = fetched.image_path
        product.updated_at = datetime.now(timezone.utc)

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(
                "ingestion.persist_failed",
                product_id=product_id,
                source_id=source.id,
                exc_info=True,
            )
            raise

        self.db.refresh(snapshot)

        logger.info(
            "ingestion.snapshot_persisted",
            product_id=product.id,
            source_id=source.id,
            snapshot_id=snapshot.id,
            price=str(snapshot.price),
            currency=snapshot.currency,
        )

        return IngestionOutcome(snapshot=snapshot, result=fetched)

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass
from typing import Callable

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.core.config import RefreshOptions
from app.db.models.price_snapshot import PriceSnapshot
from app.db.models.product import Product
from app.marketplaces.base import PriceFetcher
from app.services.ingestion import PriceIngestionService, select_source

logger = structlog.get_logger(__name__)


@dataclass
class RefreshReport:
    selected: int = 0
    refreshed: int = 0
    skipped: int = 0
    failed: int = 0


class PriceRefreshService:
    """
    Background loop that keeps the catalog warm.

    Every cycle picks the least recently updated products, so a cycle
    that dies half way is picked up again on the next tick.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        fetcher: PriceFetcher,
        options: RefreshOptions,
    ):
        self.session_factory = session_factory
        self.fetcher = fetcher
        self.options = options
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task | None = None

    # -------------------------
    # Lifecycle
    # -------------------------

    def start(self) -> asyncio.Task:
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.run(self._stop_event))
        return self._task

    async def stop(self, timeout: float | None = 10.0) -> None:
        if self._stop_event is not None:
            self._stop_event.set()

        task, self._task = self._task, None
        if task is None:
            return

        try:
            await asyncio.wait_for(task, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("price_refresh.stop_timeout", timeout=timeout)

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        if not self.options.enabled:
            logger.info("price_refresh.disabled")
            return

        stop_event = stop_event or asyncio.Event()
        interval = self.options.effective_interval

        logger.info(
            "price_refresh.started",
            interval_seconds=interval,
            batch_size=self.options.max_products_per_cycle,
        )

        try:
            await self._run_cycle()

            while not stop_event.is_set():
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=interval)
                except asyncio.TimeoutError:
                    await self._run_cycle()
        finally:
            logger.info("price_refresh.stopped")

    # -------------------------
    # Cycle
    # -------------------------

    async def _run_cycle(self) -> RefreshReport | None:
        try:
            report = await self.refresh_batch()
        except Exception:
            logger.error("price_refresh.cycle_failed", exc_info=True)
            return None

        logger.info("price_refresh.cycle_finished", **asdict(report))
        return report

    async def refresh_batch(self) -> RefreshReport:
        candidates = self._select_candidates()
        report = RefreshReport(selected=len(candidates))

        if not candidates:
            logger.info("price_refresh.no_products")
            return report

        # one outbound fetch at a time unless configured otherwise
        semaphore = asyncio.Semaphore(max(1, self.options.max_concurrency))

        async def refresh_one(product_id: int, source_id: int | None) -> None:
            if source_id is None:
                report.skipped += 1
                return

            async with semaphore:
                try:
                    snapshot = await self._ingest(product_id, source_id)
                except Exception as exc:
                    report.failed += 1
                    logger.warning(
                        "price_refresh.product_failed",
                        product_id=product_id,
                        source_id=source_id,
                        error=str(exc),
                        exc_info=True,
                    )
                    return

            if snapshot is None:
                report.skipped += 1
            else:
                report.refreshed += 1

        await asyncio.gather(*(refresh_one(pid, sid) for pid, sid in candidates))
        return report

    def _select_candidates(self) -> list[tuple[int, int | None]]:
        with self.session_factory() as db:
            products = db.scalars(
                select(Product)
                .options(selectinload(Product.sources))
                .order_by(Product.updated_at.asc(), Product.id.asc())
                .limit(self.options.max_products_per_cycle)
            ).all()

            candidates = []
            for product in products:
                source = select_source(product)
                candidates.append((product.id, source.id if source else None))
            return candidates

    async def _ingest(self, product_id: int, source_id: int) -> PriceSnapshot | None:
        with self.session_factory() as db:
            service = PriceIngestionService(db, self.fetcher)
            return await service.fetch_and_persist(product_id, source_id)

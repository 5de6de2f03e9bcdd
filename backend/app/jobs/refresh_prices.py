import asyncio
from dataclasses import asdict

import structlog

from app.core.config import settings
from app.core.logger import configure_logging
from app.db.session import SessionLocal
from app.marketplaces import build_price_fetcher
from app.services.refresh import PriceRefreshService

logger = structlog.get_logger(__name__)


def main():
    configure_logging()

    service = PriceRefreshService(
        session_factory=SessionLocal,
        fetcher=build_price_fetcher(settings),
        options=settings.refresh_options(),
    )
    report = asyncio.run(service.refresh_batch())
    logger.info("price_refresh.one_shot_finished", **asdict(report))


if __name__ == "__main__":
    main()

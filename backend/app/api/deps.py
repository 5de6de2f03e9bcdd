from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db
from app.marketplaces import PriceFetcher, build_price_fetcher
from app.services.ingestion import PriceIngestionService


def get_price_fetcher(request: Request) -> PriceFetcher:
    fetcher = getattr(request.app.state, "price_fetcher", None)
    if fetcher is None:
        fetcher = build_price_fetcher(settings)
        request.app.state.price_fetcher = fetcher
    return fetcher


def get_ingestion_service(
    db: Session = Depends(get_db),
    fetcher: PriceFetcher = Depends(get_price_fetcher),
) -> PriceIngestionService:
    return PriceIngestionService(db, fetcher)

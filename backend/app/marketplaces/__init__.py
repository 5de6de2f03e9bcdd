from app.marketplaces.base import FetchResult, PriceFetcher, resolve_source_url
from app.marketplaces.amazon import AmazonScraperFetcher
from app.marketplaces.mock import AmazonMockFetcher


def build_price_fetcher(settings) -> PriceFetcher:
    if settings.PRICE_FETCHER == "mock":
        return AmazonMockFetcher()
    return AmazonScraperFetcher(settings.scraper_options())


__all__ = [
    "FetchResult",
    "PriceFetcher",
    "AmazonMockFetcher",
    "AmazonScraperFetcher",
    "build_price_fetcher",
    "resolve_source_url",
]

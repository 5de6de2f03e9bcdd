import asyncio
from decimal import Decimal

import pytest

from app.core.config import ScraperOptions, Settings
from app.core.exceptions import ConfigurationError
from app.db.models import Product, ProductSource
from app.marketplaces import (
    AmazonMockFetcher,
    AmazonScraperFetcher,
    build_price_fetcher,
    resolve_source_url,
)

BASE_URL = "https://www.amazon.com"


def _pair(product_url="https://shop.example.com/kindle", **source_fields):
    product = Product(id=1, title="Kindle", url=product_url)
    source = ProductSource(id=7, product_id=1, store="amazon", **source_fields)
    return product, source


def test_source_url_wins_over_everything():
    product, source = _pair(
        source_url="https://www.amazon.com/gp/product/B0CHX1V2W9",
        external_id="B0CHX1V2W9",
    )
    assert resolve_source_url(product, source, BASE_URL) == (
        "https://www.amazon.com/gp/product/B0CHX1V2W9"
    )


def test_external_id_builds_dp_link():
    product, source = _pair(external_id="B0CHX1V2W9")
    assert resolve_source_url(product, source, BASE_URL + "/") == (
        "https://www.amazon.com/dp/B0CHX1V2W9"
    )


def test_external_id_is_escaped():
    product, source = _pair(external_id="AB 12/34")
    assert resolve_source_url(product, source, BASE_URL) == (
        "https://www.amazon.com/dp/AB%2012%2F34"
    )


def test_product_url_is_last_resort():
    product, source = _pair(source_url="   ", external_id="")
    assert resolve_source_url(product, source, BASE_URL) == (
        "https://shop.example.com/kindle"
    )


def test_unresolvable_source_raises_configuration_error():
    product, source = _pair(product_url="")
    with pytest.raises(ConfigurationError):
        resolve_source_url(product, source, BASE_URL)


def test_mock_price_is_deterministic_for_external_id():
    product, source = _pair(external_id="B0CHX1V2W9")
    fetcher = AmazonMockFetcher()

    first = asyncio.run(fetcher.fetch(product, source))
    second = asyncio.run(fetcher.fetch(product, source))

    assert first.price == second.price == Decimal("20.00")
    assert first.currency == "USD"


@pytest.mark.parametrize(
    "source_fields, expected",
    [
        ({"external_id": "X" * 60, "source_url": "https://a.example"}, Decimal("20.00")),
        ({"source_url": "https://amazon.com/dp/X"}, Decimal("33.00")),
        ({}, Decimal("16.00")),  # title "Kindle"
    ],
)
def test_mock_identifier_precedence(source_fields, expected):
    product, source = _pair(**source_fields)
    result = asyncio.run(AmazonMockFetcher().fetch(product, source))
    assert result.price == expected


def test_mock_keeps_existing_metadata():
    product, source = _pair(external_id="B0CHX1V2W9")
    product.description = "Glare-free display"
    product.image_path_in_storage = "products/1/cover.jpg"

    result = asyncio.run(AmazonMockFetcher().fetch(product, source))

    assert result.description == "Glare-free display"
    assert result.image_path == "products/1/cover.jpg"


def test_mock_supplies_placeholder_description():
    product, source = _pair(external_id="B0CHX1V2W9")
    result = asyncio.run(AmazonMockFetcher().fetch(product, source))
    assert result.description == "Mock description for testing"


def test_build_price_fetcher_follows_settings(monkeypatch):
    settings = Settings()

    monkeypatch.setattr(Settings, "PRICE_FETCHER", "mock")
    assert isinstance(build_price_fetcher(settings), AmazonMockFetcher)

    monkeypatch.setattr(Settings, "PRICE_FETCHER", "live")
    monkeypatch.setattr(Settings, "AMAZON_BASE_URL", "https://www.amazon.co.uk")
    fetcher = build_price_fetcher(settings)
    assert isinstance(fetcher, AmazonScraperFetcher)
    assert fetcher.options.base_url == "https://www.amazon.co.uk"
    assert isinstance(fetcher.options, ScraperOptions)

import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PRICE_FETCHER", "mock")
os.environ.setdefault("PRICE_REFRESH_ENABLED", "false")

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_price_fetcher
from app.core.exceptions import TransportError
from app.db.models import Base, Product, ProductSource
from app.db.session import get_db
from app.main import app
from app.marketplaces import AmazonMockFetcher, FetchResult, PriceFetcher


class ScriptedFetcher(PriceFetcher):
    """Returns a fixed observation and records every (product, source) it saw."""

    def __init__(
        self,
        price="19.99",
        currency="USD",
        description=None,
        image_path=None,
        fail_for=(),
        error=None,
    ):
        self.price = Decimal(price)
        self.currency = currency
        self.description = description
        self.image_path = image_path
        self.fail_for = set(fail_for)
        self.error = error
        self.calls = []

    async def fetch(self, product, source):
        self.calls.append((product.id, source.id))
        if self.error is not None:
            raise self.error
        if product.id in self.fail_for:
            raise TransportError("marketplace unavailable", status_code=503)
        return FetchResult(
            price=self.price,
            currency=self.currency,
            collected_at=datetime.now(timezone.utc),
            description=self.description,
            image_path=self.image_path,
            raw_payload='{"fake": true}',
        )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_product(db):
    def _make(
        title="Kindle Paperwhite 16 GB",
        url=None,
        description=None,
        image_path=None,
        updated_at=None,
        sources=None,
    ):
        product = Product(
            title=title,
            url=url or f"https://www.example.com/item/{uuid4().hex}",
            description=description,
            image_path_in_storage=image_path,
        )
        if updated_at is not None:
            product.updated_at = updated_at

        if sources is None:
            sources = [{"store": "amazon", "external_id": "B09SWW583J", "is_primary": True}]
        for fields in sources:
            product.sources.append(ProductSource(**fields))

        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def fetcher_cls():
    return ScriptedFetcher


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    mock_fetcher = AmazonMockFetcher()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_price_fetcher] = lambda: mock_fetcher

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()

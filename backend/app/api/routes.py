from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy import desc, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
import structlog

from app.api.deps import get_ingestion_service
from app.api.v1.schemas import (
    CreateProductRequest,
    CreateSourceRequest,
    LiveFetchOut,
    ProductDetailOut,
    ProductOut,
    ProductSearchPage,
    SnapshotOut,
    SourceOut,
)
from app.core.exceptions import ConflictError, NotFoundError
from app.db.models.price_snapshot import PriceSnapshot
from app.db.models.product import Product
from app.db.models.product_source import ProductSource
from app.db.session import get_db
from app.services.ingestion import PriceIngestionService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])

RECENT_PRODUCTS_LIMIT = 50
DETAIL_PRICES_LIMIT = 5

MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 20

MAX_TAKE = 200
DEFAULT_TAKE = 50


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _load_product(db: Session, product_id: int) -> Product:
    product = db.scalars(
        select(Product)
        .options(selectinload(Product.sources))
        .where(Product.id == product_id)
    ).first()
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def _raise_ingestion_miss(db: Session, product_id: int, source_id: int | None):
    if db.get(Product, product_id) is None:
        raise NotFoundError(f"Product {product_id} not found")
    if source_id is not None:
        raise NotFoundError(f"Source {source_id} not found on product {product_id}")
    raise NotFoundError(f"Product {product_id} has no sources")


def _conflict(existing: Product) -> ConflictError:
    logger.info("product.conflict", product_id=existing.id, url=existing.url)
    return ConflictError(
        f"A product with URL {existing.url} already exists",
        existing=ProductOut.model_validate(existing).model_dump(mode="json"),
    )


@router.get("", response_model=list[ProductOut])
def list_products(db: Session = Depends(get_db)):
    products = db.scalars(
        select(Product)
        .options(selectinload(Product.sources))
        .order_by(desc(Product.updated_at), desc(Product.id))
        .limit(RECENT_PRODUCTS_LIMIT)
    ).all()

    return [ProductOut.model_validate(p) for p in products]


@router.get("/search", response_model=ProductSearchPage)
def search_products(
    q: str = "",
    page: int = 1,
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
    db: Session = Depends(get_db),
):
    page = max(1, page)
    page_size = clamp(page_size, 1, MAX_PAGE_SIZE)

    term = q.strip()
    criteria = []
    if term:
        criteria.append(
            or_(
                Product.title.icontains(term, autoescape=True),
                Product.url.icontains(term, autoescape=True),
            )
        )

    total = db.scalar(select(func.count(Product.id)).where(*criteria)) or 0

    products = db.scalars(
        select(Product)
        .options(selectinload(Product.sources))
        .where(*criteria)
        .order_by(desc(Product.updated_at), desc(Product.id))
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).all()

    return ProductSearchPage(
        items=[ProductOut.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{product_id}", response_model=ProductDetailOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = _load_product(db, product_id)

    prices = db.scalars(
        select(PriceSnapshot)
        .where(PriceSnapshot.product_id == product_id)
        .order_by(desc(PriceSnapshot.collected_at), desc(PriceSnapshot.id))
        .limit(DETAIL_PRICES_LIMIT)
    ).all()

    return ProductDetailOut.model_validate(product).model_copy(
        update={"prices": [SnapshotOut.model_validate(p) for p in prices]}
    )


@router.post("", status_code=201, response_model=ProductOut)
def create_product(
    payload: CreateProductRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    url = payload.url.strip()

    existing = db.scalars(select(Product).where(Product.url == url)).first()
    if existing:
        raise _conflict(existing)

    product = Product(
        title=payload.title.strip(),
        url=url,
        description=payload.description,
        image_path_in_storage=payload.image_path_in_storage,
    )
    db.add(product)

    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent create of the same URL
        db.rollback()
        existing = db.scalars(select(Product).where(Product.url == url)).first()
        if existing is None:
            raise
        raise _conflict(existing)

    db.refresh(product)
    logger.info("product.created", product_id=product.id, url=product.url)

    response.headers["Location"] = f"/api/products/{product.id}"
    return ProductOut.model_validate(product)


@router.post("/{product_id}/sources", status_code=201, response_model=SourceOut)
def create_source(
    product_id: int,
    payload: CreateSourceRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError(f"Product {product_id} not found")

    source = ProductSource(
        product_id=product.id,
        store=payload.store.strip(),
        external_id=payload.external_id,
        source_url=payload.source_url,
        is_primary=payload.is_primary,
    )
    db.add(source)
    db.commit()
    db.refresh(source)

    logger.info(
        "product.source_created",
        product_id=product_id,
        source_id=source.id,
        store=source.store,
    )

    response.headers["Location"] = f"/api/products/{product_id}/sources/{source.id}"
    return SourceOut.model_validate(source)


@router.get("/{product_id}/prices", response_model=list[SnapshotOut])
def list_prices(
    product_id: int,
    take: int | None = None,
    db: Session = Depends(get_db),
):
    if db.get(Product, product_id) is None:
        raise NotFoundError(f"Product {product_id} not found")

    count = clamp(take, 1, MAX_TAKE) if take is not None else DEFAULT_TAKE

    prices = db.scalars(
        select(PriceSnapshot)
        .where(PriceSnapshot.product_id == product_id)
        .order_by(desc(PriceSnapshot.collected_at), desc(PriceSnapshot.id))
        .limit(count)
    ).all()

    return [SnapshotOut.model_validate(p) for p in prices]


@router.post("/{product_id}/fetch", response_model=SnapshotOut)
async def fetch_price(
    product_id: int,
    source_id: int | None = Query(None, alias="sourceId"),
    ingestion: PriceIngestionService = Depends(get_ingestion_service),
):
    snapshot = await ingestion.fetch_and_persist(product_id, source_id)
    if snapshot is None:
        _raise_ingestion_miss(ingestion.db, product_id, source_id)

    return SnapshotOut.model_validate(snapshot)


@router.post("/{product_id}/fetch-live", response_model=LiveFetchOut)
async def fetch_price_live(
    product_id: int,
    source_id: int | None = Query(None, alias="sourceId"),
    ingestion: PriceIngestionService = Depends(get_ingestion_service),
):
    outcome = await ingestion.fetch_live(product_id, source_id)
    if outcome is None:
        _raise_ingestion_miss(ingestion.db, product_id, source_id)

    result = outcome.result
    return LiveFetchOut(
        snapshot=SnapshotOut.model_validate(outcome.snapshot),
        price=result.price,
        currency=result.currency,
        collected_at=result.collected_at,
        description=result.description,
        image_path_in_storage=result.image_path,
        raw_data_json=result.raw_payload,
    )

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session
import structlog

from app.api.v1.schemas import ProductOut, SourceOut
from app.db.models.product import Product
from app.db.models.product_source import ProductSource
from app.db.session import get_db

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/dev", tags=["dev"])

DEMO_PRODUCT = {
    "title": "Demo Product",
    "url": "https://example.com/demo-product",
    "description": "Demo product for testing fetch",
    "external_id": "DEMO-ASIN-123",
    "source_url": "https://amazon.com/dp/DEMO-ASIN-123",
}

SAMPLE_PRODUCTS = [
    {
        "title": "Apple AirPods Pro (2nd Gen)",
        "url": "https://www.amazon.com/dp/B0CHX1V2W9",
        "external_id": "B0CHX1V2W9",
    },
    {
        "title": "Kindle Paperwhite 16 GB",
        "url": "https://www.amazon.com/dp/B09SWW583J",
        "external_id": "B09SWW583J",
    },
    {
        "title": "Instant Pot Duo 7-in-1",
        "url": "https://www.amazon.com/dp/B08PQ2KWHS",
        "external_id": "B08PQ2KWHS",
    },
]


def _ensure_product(
    db: Session,
    title: str,
    url: str,
    external_id: str,
    source_url: str,
    description: str | None = None,
) -> tuple[Product, ProductSource]:
    product = db.scalars(select(Product).where(Product.url == url)).first()
    if product is None:
        product = Product(title=title, url=url, description=description)
        db.add(product)
        db.flush()

    source = db.scalars(
        select(ProductSource).where(
            ProductSource.product_id == product.id,
            ProductSource.store == "amazon",
        )
    ).first()
    if source is None:
        source = ProductSource(
            product_id=product.id,
            store="amazon",
            external_id=external_id,
            source_url=source_url,
            is_primary=True,
        )
        db.add(source)
        db.flush()

    return product, source


@router.post("/seed")
def seed_demo(db: Session = Depends(get_db)):
    product, source = _ensure_product(db, **DEMO_PRODUCT)
    db.commit()
    db.refresh(product)

    logger.info("dev.seeded", product_id=product.id, source_id=source.id)

    return {
        "product_id": product.id,
        "source_id": source.id,
        "product": ProductOut.model_validate(product).model_dump(mode="json"),
    }


@router.post("/seed-sample-products")
def seed_sample_products(db: Session = Depends(get_db)):
    seeded = [
        _ensure_product(db, source_url=s["url"], **s) for s in SAMPLE_PRODUCTS
    ]
    db.commit()

    items = []
    for product, source in seeded:
        db.refresh(product)
        item = ProductOut.model_validate(product).model_dump(mode="json")
        item["source"] = SourceOut.model_validate(source).model_dump(mode="json")
        items.append(item)

    logger.info("dev.sample_products_seeded", count=len(items))
    return {"count": len(items), "items": items}

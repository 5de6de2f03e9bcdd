from app.db.base import Base
from app.db.session import SessionLocal, engine, get_db
from app.db.models.product import Product
from app.db.models.product_source import ProductSource
from app.db.models.price_snapshot import PriceSnapshot
from app.db.models.watchlist import Watchlist
from app.db.models.product_asset import ProductAsset

__all__ = [
    "Base",
    "Product",
    "ProductSource",
    "PriceSnapshot",
    "Watchlist",
    "ProductAsset",
    "SessionLocal",
    "engine",
    "get_db",
]

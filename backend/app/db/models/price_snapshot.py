from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.models.product import utcnow


class PriceSnapshot(Base):
    """Append-only price observation. Rows are inserted, never updated."""

    __tablename__ = "price_snapshots"

    id: Mapped[int] = mapped_column(primary_key=True)

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_source_id: Mapped[int] = mapped_column(
        ForeignKey("product_sources.id", ondelete="CASCADE"), nullable=False
    )

    price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(10), nullable=False, default="USD")
    collected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    raw_data_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    product = relationship("Product", back_populates="snapshots")
    source = relationship("ProductSource", back_populates="snapshots")


Index(
    "ix_price_snapshots_product_source_collected",
    PriceSnapshot.product_id,
    PriceSnapshot.product_source_id,
    PriceSnapshot.collected_at,
)

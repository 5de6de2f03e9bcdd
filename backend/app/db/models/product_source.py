from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class ProductSource(Base):
    __tablename__ = "product_sources"

    id: Mapped[int] = mapped_column(primary_key=True)

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )

    store: Mapped[str] = mapped_column(String(100), nullable=False)  # amazon
    external_id: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )  # ASIN
    source_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_primary: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )

    product = relationship("Product", back_populates="sources")
    snapshots = relationship(
        "PriceSnapshot", back_populates="source", cascade="all, delete-orphan"
    )


Index(
    "ix_product_sources_product_store_external",
    ProductSource.product_id,
    ProductSource.store,
    ProductSource.external_id,
)

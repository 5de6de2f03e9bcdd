from datetime import datetime, timezone

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    url: Mapped[str] = mapped_column(String(500), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    image_path_in_storage: Mapped[str | None] = mapped_column(
        String(500), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    # bumped explicitly by ingestion, drives refresh ordering
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    sources = relationship(
        "ProductSource",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductSource.id",
    )
    snapshots = relationship(
        "PriceSnapshot", back_populates="product", cascade="all, delete-orphan"
    )
    assets = relationship(
        "ProductAsset", back_populates="product", cascade="all, delete-orphan"
    )

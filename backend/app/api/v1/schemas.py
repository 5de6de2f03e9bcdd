from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class SourceOut(ORMModel):
    id: int
    product_id: int
    store: str
    external_id: Optional[str] = None
    source_url: Optional[str] = None
    is_primary: bool


class SnapshotOut(ORMModel):
    id: int
    product_id: int
    product_source_id: int
    price: Decimal
    currency: str
    collected_at: datetime
    raw_data_json: Optional[str] = None


class ProductOut(ORMModel):
    id: int
    title: str
    url: str
    description: Optional[str] = None
    image_path_in_storage: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    sources: list[SourceOut] = []


class ProductDetailOut(ProductOut):
    prices: list[SnapshotOut] = []


class ProductSearchPage(BaseModel):
    items: list[ProductOut]
    total: int
    page: int
    page_size: int


class LiveFetchOut(BaseModel):
    snapshot: SnapshotOut
    price: Decimal
    currency: str
    collected_at: datetime
    description: Optional[str] = None
    image_path_in_storage: Optional[str] = None
    raw_data_json: Optional[str] = None


class CreateProductRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    url: str = Field(min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=2000)
    image_path_in_storage: Optional[str] = Field(default=None, max_length=500)


class CreateSourceRequest(BaseModel):
    store: str = Field(min_length=1, max_length=100)
    external_id: Optional[str] = Field(default=None, max_length=100)
    source_url: Optional[str] = Field(default=None, max_length=500)
    is_primary: bool = False

from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID


class AvailabilityModel(BaseModel):
    store_id: UUID
    quantity: int


class ProductModel(BaseModel):
    id: UUID
    name: str
    availability: List[AvailabilityModel] = []


class ProductCategoryModel(BaseModel):
    # None groups the products that belong to no category
    category_id: Optional[UUID] = None
    products: List[ProductModel]


class BookModelIn(BaseModel):
    qty: int

from pydantic import BaseModel, Field
from typing import Dict
from uuid import UUID


class RestockModel(BaseModel):
    # product id -> quantity to add in the store
    products: Dict[UUID, int] = Field(default_factory=dict)

from datetime import datetime
from pydantic import BaseModel, Field


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)


class ProductCreate(ProductBase):
    product_image: str | None = Field(None, max_length=500)


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    price: float | None = Field(None, ge=0)
    product_image: str | None = Field(None, max_length=500)


class ProductResponse(ProductBase):
    id: str
    product_image: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

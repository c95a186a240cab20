# orderdesk/schemas/product.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ProductCreate(SQLModel):
    """
    Payload for creating a product.

    - sku is optional: if omitted, one is generated.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=150)
    sku: str | None = Field(default=None, max_length=64)
    brand: str | None = Field(default=None, max_length=100)
    format: str | None = Field(default=None, max_length=100)
    category: str | None = Field(default=None, max_length=50)
    unit_of_measure: str = Field(default="unidad", max_length=30)
    unit_price: float = Field(gt=0)
    stock_on_hand: int = Field(default=0, ge=0)
    min_stock: int = Field(default=0, ge=0)

    @field_validator("name", "unit_of_measure")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("sku", "brand", "format", "category")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class ProductUpdate(SQLModel):
    """
    Partial update payload.

    Stock has its own endpoint (ProductStockUpdate).
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=150)
    sku: str | None = Field(default=None, max_length=64)
    brand: str | None = Field(default=None, max_length=100)
    format: str | None = Field(default=None, max_length=100)
    category: str | None = Field(default=None, max_length=50)
    unit_of_measure: str | None = Field(default=None, max_length=30)
    unit_price: float | None = Field(default=None, gt=0)
    min_stock: int | None = Field(default=None, ge=0)
    is_active: bool | None = None

    @field_validator("name", "sku", "unit_of_measure")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductStockUpdate(SQLModel):
    """
    Either set the stock to an absolute value or apply a delta.
    """

    model_config = ConfigDict(extra="forbid")

    stock_on_hand: int | None = Field(default=None, ge=0)
    delta: int | None = None


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: uuid.UUID
    name: str
    sku: str
    brand: str | None
    format: str | None
    category: str | None
    unit_of_measure: str
    unit_price: float
    stock_on_hand: int
    min_stock: int
    is_active: bool
    created_at: datetime


class ProductBulkCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    products: list[dict]

"""Catalog DTOs for the Service Layer (Pydantic v2, immutable).

Update DTOs carry only the fields the caller supplied; ``None`` means
"leave unchanged".
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator


class CreateCategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    slug: Optional[str] = None
    description: str = ""
    image_url: str = ""
    display_order: int = 0
    is_active: bool = True


class UpdateCategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class CreateProductDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    base_price: Decimal
    slug: Optional[str] = None
    category_id: Optional[UUID] = None
    description: str = ""
    image_url: str = ""
    preparation_time: int = 5
    display_order: int = 0
    is_available: bool = True
    is_customizable: bool = False

    @field_validator("base_price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Base price must be greater than zero.")
        return v


class UpdateProductDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    slug: Optional[str] = None
    base_price: Optional[Decimal] = None
    category_id: Optional[UUID] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    preparation_time: Optional[int] = None
    display_order: Optional[int] = None
    is_available: Optional[bool] = None
    is_customizable: Optional[bool] = None

    @field_validator("base_price")
    @classmethod
    def price_must_be_positive(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v <= 0:
            raise ValueError("Base price must be greater than zero.")
        return v


class CustomizationDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    customization_type: str
    option_name: str
    price_modifier: Decimal = Decimal("0.00")
    display_order: int = 0


class UpdateCustomizationDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    customization_type: Optional[str] = None
    option_name: Optional[str] = None
    price_modifier: Optional[Decimal] = None
    display_order: Optional[int] = None

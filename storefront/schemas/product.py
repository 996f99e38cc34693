# storefront/schemas/product.py
from decimal import Decimal
from pydantic import BaseModel, AnyHttpUrl, Field, ConfigDict, field_validator
from typing import Optional, List

# Letters, digits, space and hyphen only
CATEGORY_PATTERN = r"^[A-Za-z0-9 \-]+$"


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Payload for creating or fully replacing a product (admin)
class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    image_url: Optional[AnyHttpUrl] = None
    category: Optional[str] = Field(default=None, max_length=100, pattern=CATEGORY_PATTERN)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    def to_columns(self) -> dict:
        data = self.model_dump()
        data["image_url"] = str(self.image_url) if self.image_url else None
        return data


class ProductOut(ORMBase):
    id: int
    name: str
    price: float
    image_url: Optional[str] = None
    category: Optional[str] = None


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    limit: int

from pydantic import BaseModel, Field
from typing import List, Optional


class WishlistAdd(BaseModel):
    product_id: int = Field(ge=1)


class WishlistItemOut(BaseModel):
    product_id: int
    name: str
    price: float
    image_url: Optional[str] = None
    category: Optional[str] = None


class WishlistOut(BaseModel):
    items: List[WishlistItemOut]

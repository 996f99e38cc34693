from pydantic import BaseModel, Field
from typing import List


# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: int = Field(ge=1)
    quantity: int = Field(default=1, ge=1)


# Request schema for setting the quantity of a cart line
class CartUpdateItem(BaseModel):
    product_id: int = Field(ge=1)
    quantity: int = Field(ge=1)


# Response schema for a single cart line item
class CartItemOut(BaseModel):
    product_id: int
    name: str
    quantity: int
    unit_price: float
    line_total: float


# Response schema for the entire cart summary
class CartOut(BaseModel):
    items: List[CartItemOut]
    total: float

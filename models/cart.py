# cart is owned exclusively by the browser session: there is no server-side cart table.
# Only the product snapshot captured at add-time and the quantity are stored.
#
# note that the product is NOT reserved so that the availability of the product
# needs to be checked again during checkout
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from models.product import ProductDTO

CART_SNAPSHOT_VERSION = 1


class CartLineItemDTO(BaseModel):
    id: str
    product: ProductDTO
    quantity: int = Field(gt=0)


class CartSnapshotDTO(BaseModel):
    version: Literal[1] = CART_SNAPSHOT_VERSION
    items: list[CartLineItemDTO] = []

    @field_validator('items')
    @classmethod
    def validate_unique_products(cls, items: list[CartLineItemDTO]) -> list[CartLineItemDTO]:
        product_ids = [item.product.id for item in items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("cart snapshot contains more than one line per product")
        return items


class StockProblemDTO(BaseModel):
    product_id: str
    product_name: str
    requested: int
    available: int

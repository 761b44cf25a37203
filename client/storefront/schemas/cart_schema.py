from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductRef(BaseModel):
    """Product fields embedded in a cart line by the remote cart service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    id: str = Field(alias="_id")
    name: str = Field(default="", alias="productName")
    brand: Optional[str] = None
    price: float = 0
    images: List[str] = Field(default_factory=list, alias="productImages")

    @property
    def image(self) -> Optional[str]:
        return self.images[0] if self.images else None


class CartLine(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    line_id: str = Field(alias="_id")
    product: ProductRef = Field(alias="productId")
    quantity: int = Field(..., ge=1)
    # unit price captured when the line was added, not the current product price
    price: float

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


class CartSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)
    cart_id: str = Field(alias="_id")
    user_id: str = Field(alias="userId")
    lines: List[CartLine] = Field(default_factory=list, alias="items")
    total: float = Field(default=0, alias="totalAmount")

    def product_ids(self) -> List[str]:
        return [line.product_id for line in self.lines]

    def line_for(self, product_id: str) -> Optional[CartLine]:
        return next((l for l in self.lines if l.product_id == product_id), None)


class MutationResult(BaseModel):
    success: bool
    message: Optional[str] = None

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CheckoutLine(BaseModel):
    model_config = ConfigDict(frozen=True)
    product_id: str
    price: float
    quantity: int

    def as_payload(self) -> dict:
        return {"productId": self.product_id, "price": self.price, "quantity": self.quantity}


class CheckoutRequest(BaseModel):
    """Write-once projection of the selected cart lines for one checkout call."""

    model_config = ConfigDict(frozen=True)
    cart_id: str
    user_id: str
    lines: List[CheckoutLine]
    total: float


class PaymentRouting(BaseModel):
    bank_code: str = ""
    locale: str = "vn"
    return_url: str


class RedirectTarget(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    url: str = Field(alias="paymentUrl")
    reference: Optional[str] = Field(default=None, alias="orderReference")
    total: float = Field(alias="totalAmount")


class PaymentVerification(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    is_success: bool = Field(default=False, alias="isSuccess")
    order_id: Optional[str] = Field(default=None, alias="orderId")
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")
    message: Optional[str] = None

    @property
    def reference(self) -> Optional[str]:
        return self.order_id or self.transaction_id

import logging
from urllib.parse import urlsplit

from pydantic import ValidationError

from storefront.adapters.remote import RemoteService
from storefront.schemas.checkout_schema import (
    CheckoutRequest,
    PaymentRouting,
    PaymentVerification,
    RedirectTarget,
)
from storefront.services.failures import TransportFailure

log = logging.getLogger(__name__)


class RemoteCheckoutService(RemoteService):
    """Client for the payment endpoints: create a payment URL, verify the return."""

    async def submit_checkout(
        self, token: str, request: CheckoutRequest, routing: PaymentRouting
    ) -> RedirectTarget:
        payload = {
            "cartId": request.cart_id,
            "userId": request.user_id,
            "items": [line.as_payload() for line in request.lines],
            "totalAmount": request.total,
            "bankCode": routing.bank_code,
            "language": routing.locale,
            "returnUrl": routing.return_url,
        }
        body = await self._request("POST", "/payment/create-payment-url", token, json=payload)
        if not isinstance(body, dict):
            raise TransportFailure("Failed to create payment")
        data = body.get("data")
        if not body.get("success") or not isinstance(data, dict) or not data.get("paymentUrl"):
            raise TransportFailure(body.get("message") or "Failed to create payment")
        data.setdefault("totalAmount", request.total)
        try:
            return RedirectTarget.model_validate(data)
        except ValidationError as e:
            log.error("Unexpected payment payload: %s", e)
            raise TransportFailure("Failed to create payment") from e

    async def verify_payment_return(self, token: str, return_url: str) -> PaymentVerification:
        query = urlsplit(return_url).query
        body = await self._request("GET", f"/payment/payment-result?{query}", token)
        if not isinstance(body, dict):
            raise TransportFailure("Payment verification failed")
        data = body.get("data")
        if not body.get("success") or not isinstance(data, dict):
            return PaymentVerification(
                is_success=False, message=body.get("message") or "Payment verification failed"
            )
        return PaymentVerification.model_validate(data)

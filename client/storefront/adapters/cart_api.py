import logging
from typing import List

from pydantic import ValidationError

from storefront.adapters.remote import RemoteService
from storefront.schemas.cart_schema import CartSnapshot, MutationResult
from storefront.services.failures import TransportFailure

log = logging.getLogger(__name__)


class RemoteCartService(RemoteService):
    """Client for the remote cart endpoints. Mutations are keyed by product id."""

    async def fetch_cart(self, token: str) -> CartSnapshot:
        body = await self._request("GET", "/cart/my-cart", token)
        if not isinstance(body, dict) or not body.get("success") or body.get("data") is None:
            message = body.get("message") if isinstance(body, dict) else None
            raise TransportFailure(message or "Failed to get cart")
        try:
            return CartSnapshot.model_validate(body["data"])
        except ValidationError as e:
            log.error("Unexpected cart payload: %s", e)
            raise TransportFailure("Failed to get cart") from e

    async def add_quantity(self, token: str, product_id: str, qty: int) -> MutationResult:
        body = await self._request(
            "POST", "/cart/add-item", token, json={"productId": product_id, "quantity": qty}
        )
        return self._mutation_result(body, "Failed to add item to cart")

    async def remove_item(self, token: str, product_id: str) -> MutationResult:
        body = await self._request("DELETE", f"/cart/remove-item/{product_id}", token)
        return self._mutation_result(body, "Failed to remove item from cart")

    async def set_quantity(self, token: str, product_id: str, qty: int) -> MutationResult:
        body = await self._request(
            "PUT", "/cart/update-item", token, json={"productId": product_id, "quantity": qty}
        )
        return self._mutation_result(body, "Failed to update item quantity")

    async def checkout_selected(self, token: str, product_ids: List[str]) -> MutationResult:
        body = await self._request(
            "POST", "/cart/checkout-selected", token, json={"productIds": list(product_ids)}
        )
        return self._mutation_result(body, "Failed to remove purchased items")

    @staticmethod
    def _mutation_result(body, fallback: str) -> MutationResult:
        if not isinstance(body, dict):
            raise TransportFailure(fallback)
        result = MutationResult(success=bool(body.get("success")), message=body.get("message"))
        if not result.success and not result.message:
            result.message = fallback
        return result

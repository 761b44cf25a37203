import logging
from dataclasses import dataclass
from typing import Optional, Set

from storefront.adapters.cart_api import RemoteCartService
from storefront.adapters.checkout_api import RemoteCheckoutService
from storefront.services.failures import NoSession, TransportFailure
from storefront.services.session_store import SessionStore

log = logging.getLogger(__name__)

RETURN_MARKERS = ("vnp_", "ResponseCode", "TransactionStatus")


@dataclass
class HandoffOutcome:
    success: bool
    order_reference: Optional[str] = None
    message: Optional[str] = None


class PaymentHandoff:
    """
    Handles the provider's return URL once the external payment page finishes.

    Each return URL is verified at most once; after a verified payment the
    purchased lines (the persisted selection) are removed from the cart.
    """

    def __init__(
        self,
        session_store: SessionStore,
        checkout_service: RemoteCheckoutService,
        cart_service: RemoteCartService,
    ):
        self.session_store = session_store
        self.checkout_service = checkout_service
        self.cart_service = cart_service
        self._processed: Set[str] = set()
        self._processing = False
        self._completed = False

    @staticmethod
    def is_return_url(url: str) -> bool:
        return "payment-result" in url and any(marker in url for marker in RETURN_MARKERS)

    def reset(self) -> None:
        self._processed.clear()
        self._completed = False

    async def handle_return(self, url: str) -> Optional[HandoffOutcome]:
        """Returns None when the URL is ignored (not a return, duplicate, or already paid)."""
        if self._completed or not self.is_return_url(url):
            return None
        if self._processing or url in self._processed:
            log.debug("Ignoring duplicate payment return")
            return None

        self._processing = True
        self._processed.add(url)
        try:
            token = self.session_store.get_stored_token()
            if not token:
                raise NoSession()
            verification = await self.checkout_service.verify_payment_return(token, url)
            if not verification.is_success:
                log.info("Payment verification failed: %s", verification.message)
                return HandoffOutcome(
                    success=False,
                    message=verification.message or "Payment verification failed. Please contact support.",
                )

            self._completed = True
            await self._remove_purchased(token)
            return HandoffOutcome(success=True, order_reference=verification.reference)
        finally:
            self._processing = False

    async def _remove_purchased(self, token: str) -> None:
        product_ids = self.session_store.get_selected_items()
        if not product_ids:
            log.info("No persisted selection to remove after payment")
            return
        try:
            result = await self.cart_service.checkout_selected(token, product_ids)
        except TransportFailure as e:
            log.error("Failed to remove purchased items from cart: %s", e)
            return
        if result.success:
            self.session_store.clear_selected_items()
        else:
            log.error("Failed to remove purchased items from cart: %s", result.message)

import logging
from typing import Iterable, Optional

from storefront.adapters.checkout_api import RemoteCheckoutService
from storefront.config import settings
from storefront.schemas.cart_schema import CartSnapshot
from storefront.schemas.checkout_schema import (
    CheckoutLine,
    CheckoutRequest,
    PaymentRouting,
    RedirectTarget,
)
from storefront.services.cart_session import CartSession
from storefront.services.failures import NoSession, ValidationFailure
from storefront.services.selection import calculate_selected_total
from storefront.services.session_store import SessionStore

log = logging.getLogger(__name__)


def default_routing() -> PaymentRouting:
    return PaymentRouting(
        bank_code=settings.PAYMENT_BANK_CODE,
        locale=settings.PAYMENT_LOCALE,
        return_url=settings.PAYMENT_RETURN_URL,
    )


def build_checkout_request(snapshot: Optional[CartSnapshot], selection: Iterable[str]) -> CheckoutRequest:
    """Project the selected lines of `snapshot` into a checkout request."""
    if snapshot is None or not snapshot.lines:
        raise ValidationFailure("Your cart is empty")
    selected = list(selection)
    if not selected:
        raise ValidationFailure("Select at least one item to check out")

    wanted = set(selected)
    lines = [
        CheckoutLine(product_id=line.product_id, price=line.price, quantity=line.quantity)
        for line in snapshot.lines
        if line.product_id in wanted
    ]
    if not lines:
        raise ValidationFailure("The selected items are no longer in your cart")

    return CheckoutRequest(
        cart_id=snapshot.cart_id,
        user_id=snapshot.user_id,
        lines=lines,
        # the server total covers the whole cart, not the selection
        total=calculate_selected_total(snapshot, wanted),
    )


class CheckoutAssembler:
    def __init__(
        self,
        session: CartSession,
        checkout_service: RemoteCheckoutService,
        session_store: SessionStore,
        routing: Optional[PaymentRouting] = None,
    ):
        self.session = session
        self.checkout_service = checkout_service
        self.session_store = session_store
        self.routing = routing or default_routing()

    async def submit(self) -> RedirectTarget:
        """Check out the current session's selection."""
        return await self.build_and_submit(self.session.snapshot, self.session.selection.ids())

    async def build_and_submit(self, snapshot: Optional[CartSnapshot], selection: Iterable[str]) -> RedirectTarget:
        """
        Validate, project and submit a checkout for `selection`.

        Raises ValidationFailure (no network call) when the snapshot is missing
        or nothing is selected, NoSession without a token, and TransportFailure
        when the checkout service refuses. Session state is left untouched.
        """
        request = build_checkout_request(snapshot, selection)
        token = self.session_store.get_stored_token()
        if not token:
            raise NoSession()

        # the payment screen re-reads this list after the provider returns
        self.session_store.store_selected_items([line.product_id for line in request.lines])
        target = await self.checkout_service.submit_checkout(token, request, self.routing)
        log.info(
            "Checkout created for cart %s: %s lines, total %s, reference %s",
            request.cart_id,
            len(request.lines),
            request.total,
            target.reference,
        )
        return target

from dataclasses import dataclass
from typing import Optional

import httpx

from storefront.adapters.cart_api import RemoteCartService
from storefront.adapters.checkout_api import RemoteCheckoutService
from storefront.services.cart_cache import CartSnapshotCache
from storefront.services.cart_session import CartSession
from storefront.services.checkout_assembler import CheckoutAssembler
from storefront.services.mutation_coordinator import QuantityMutationCoordinator
from storefront.services.payment_handoff import PaymentHandoff
from storefront.services.session_store import SessionStore


@dataclass
class StorefrontRuntime:
    session: CartSession
    session_store: SessionStore
    cart_service: RemoteCartService
    checkout_service: RemoteCheckoutService
    cache: CartSnapshotCache
    coordinator: QuantityMutationCoordinator
    assembler: CheckoutAssembler
    handoff: PaymentHandoff

    async def aclose(self) -> None:
        await self.cart_service.aclose()
        await self.checkout_service.aclose()


def build_runtime(
    session_store: Optional[SessionStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    **coordinator_options,
) -> StorefrontRuntime:
    """Wire one cart session to its collaborators. `transport` is for tests."""
    session = CartSession()
    session_store = session_store or SessionStore()
    cart_service = RemoteCartService(transport=transport)
    checkout_service = RemoteCheckoutService(transport=transport)
    cache = CartSnapshotCache(session, cart_service, session_store)
    return StorefrontRuntime(
        session=session,
        session_store=session_store,
        cart_service=cart_service,
        checkout_service=checkout_service,
        cache=cache,
        coordinator=QuantityMutationCoordinator(
            session, cache, cart_service, session_store, **coordinator_options
        ),
        assembler=CheckoutAssembler(session, checkout_service, session_store),
        handoff=PaymentHandoff(session_store, checkout_service, cart_service),
    )

import logging
from typing import Optional

from storefront.adapters.cart_api import RemoteCartService
from storefront.schemas.cart_schema import CartSnapshot
from storefront.services.cart_session import CartSession
from storefront.services.failures import NoSession, TransportFailure
from storefront.services.session_store import SessionStore

log = logging.getLogger(__name__)


class CartSnapshotCache:
    """
    Loads the remote cart into the session, replacing the snapshot wholesale.

    Every load takes a ticket; a response is applied only if its ticket is
    newer than the last applied one, so a slow earlier reload can never
    overwrite a later one.
    """

    def __init__(self, session: CartSession, cart_service: RemoteCartService, session_store: SessionStore):
        self.session = session
        self.cart_service = cart_service
        self.session_store = session_store
        self._issued = 0
        self._applied = 0

    def _accept(self, ticket: int) -> bool:
        if ticket <= self._applied:
            log.debug("Discarding cart response #%s, #%s already applied", ticket, self._applied)
            return False
        self._applied = ticket
        return True

    def _settle(self) -> None:
        self.session.loading = self._applied < self._issued

    async def load(self) -> Optional[CartSnapshot]:
        """
        Fetch and apply the cart. Raises NoSession without a network call when
        there is no stored token, TransportFailure when the fetch fails (the
        cart is emptied in both cases). Returns the snapshot now held by the
        session.
        """
        self._issued += 1
        ticket = self._issued
        self.session.loading = True

        token = self.session_store.get_stored_token()
        if not token:
            if self._accept(ticket):
                self.session.apply_empty(authenticated=False)
            self._settle()
            raise NoSession()

        try:
            snapshot = await self.cart_service.fetch_cart(token)
        except TransportFailure:
            accepted = self._accept(ticket)
            if accepted:
                # an obviously empty cart is preferred over a stale one
                self.session.apply_empty(authenticated=True)
            self._settle()
            if accepted:
                raise
            return self.session.snapshot

        if self._accept(ticket):
            self.session.apply_snapshot(snapshot)
            log.info("Cart #%s applied: %s lines, total %s", ticket, len(snapshot.lines), snapshot.total)
        self._settle()
        return self.session.snapshot

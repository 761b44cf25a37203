import asyncio
import logging
from typing import Awaitable, Callable, Optional

from storefront.adapters.cart_api import RemoteCartService
from storefront.config import settings
from storefront.schemas.cart_schema import CartLine, MutationResult
from storefront.services.cart_cache import CartSnapshotCache
from storefront.services.cart_session import CartSession
from storefront.services.failures import (
    NoSession,
    PartialMutationFailure,
    TransportFailure,
    ValidationFailure,
)
from storefront.services.session_store import SessionStore

log = logging.getLogger(__name__)


class QuantityMutationCoordinator:
    """
    Changes line quantities through the remote cart's add/remove primitives.

    At most one mutation per product id is in flight. A second request for the
    same id is rejected (returns False), never queued. The flag is cleared once
    the reload that follows the mutation completes, or as soon as the
    operation fails.
    """

    def __init__(
        self,
        session: CartSession,
        cache: CartSnapshotCache,
        cart_service: RemoteCartService,
        session_store: SessionStore,
        set_quantity_enabled: Optional[bool] = None,
        restore_attempts: Optional[int] = None,
        restore_delay_ms: Optional[int] = None,
    ):
        self.session = session
        self.cache = cache
        self.cart_service = cart_service
        self.session_store = session_store
        self.set_quantity_enabled = (
            settings.CART_SET_QUANTITY_ENABLED if set_quantity_enabled is None else set_quantity_enabled
        )
        attempts = settings.RESTORE_RETRY_ATTEMPTS if restore_attempts is None else restore_attempts
        self.restore_attempts = max(1, attempts)
        delay_ms = settings.RESTORE_RETRY_DELAY_MS if restore_delay_ms is None else restore_delay_ms
        self.restore_delay = delay_ms / 1000.0

    def is_busy(self, product_id: str) -> bool:
        return self.session.mutations.is_busy(product_id)

    async def increase(self, product_id: str) -> bool:
        return await self._run(product_id, self._increase)

    async def decrease(self, product_id: str) -> bool:
        return await self._run(product_id, self._decrease)

    async def remove(self, product_id: str) -> bool:
        return await self._run(product_id, self._remove)

    async def _run(self, product_id: str, operation: Callable[[CartLine, str], Awaitable[None]]) -> bool:
        # check-and-set happens before the first await
        if not self.session.mutations.begin(product_id):
            log.debug("Mutation for %s rejected, another one is in flight", product_id)
            return False
        try:
            line = self.session.snapshot.line_for(product_id) if self.session.snapshot else None
            if line is None:
                raise ValidationFailure("This item is no longer in your cart")
            token = self.session_store.get_stored_token()
            if not token:
                raise NoSession()
            await operation(line, token)
        finally:
            self.session.mutations.end(product_id)
        return True

    @staticmethod
    def _ensure(result: MutationResult) -> None:
        if not result.success:
            raise TransportFailure(result.message)

    async def _increase(self, line: CartLine, token: str) -> None:
        self._ensure(await self.cart_service.add_quantity(token, line.product_id, 1))
        await self.cache.load()

    async def _remove(self, line: CartLine, token: str) -> None:
        self._ensure(await self.cart_service.remove_item(token, line.product_id))
        self.session.selection.discard(line.product_id)
        await self.cache.load()

    async def _decrease(self, line: CartLine, token: str) -> None:
        if line.quantity <= 1:
            # a line never drops to zero, it is removed
            await self._remove(line, token)
            return

        target = line.quantity - 1
        if self.set_quantity_enabled:
            self._ensure(await self.cart_service.set_quantity(token, line.product_id, target))
            await self.cache.load()
            return

        self._ensure(await self.cart_service.remove_item(token, line.product_id))
        if not await self._restore(token, line.product_id, target):
            log.warning("Line %s removed but could not be restored to %s", line.product_id, target)
            try:
                await self.cache.load()
            except TransportFailure:
                log.warning("Reload after partial mutation of %s failed", line.product_id)
            raise PartialMutationFailure(line.product_id, target)
        await self.cache.load()

    async def _restore(self, token: str, product_id: str, quantity: int) -> bool:
        for attempt in range(1, self.restore_attempts + 1):
            try:
                result = await self.cart_service.add_quantity(token, product_id, quantity)
                if result.success:
                    return True
                log.warning("Restore of %s attempt %s rejected: %s", product_id, attempt, result.message)
            except TransportFailure as e:
                log.warning("Restore of %s attempt %s failed: %s", product_id, attempt, e)
            if attempt < self.restore_attempts:
                await asyncio.sleep(self.restore_delay)
        return False

from typing import Optional


class CartFailure(Exception):
    """Base for every failure the cart core reports to the presentation layer."""

    kind = "error"
    retryable = False
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class NoSession(CartFailure):
    """No stored credential. Renders as an empty, signed-out cart, not as an error."""

    kind = "no_session"
    default_message = "Sign in to see your cart"


class TransportFailure(CartFailure):
    """Remote service unreachable, non-2xx status or a `success: false` body."""

    kind = "transport"
    retryable = True
    default_message = "Could not reach the store. Please try again."

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class ValidationFailure(CartFailure):
    kind = "validation"


class PartialMutationFailure(CartFailure):
    """The line was removed but could not be re-added at its reduced quantity."""

    kind = "partial_mutation"

    def __init__(self, product_id: str, quantity: int):
        self.product_id = product_id
        self.quantity = quantity
        super().__init__(
            f"Could not restore quantity: the item was removed from your cart "
            f"but re-adding {quantity} failed. Please add it again."
        )

from typing import Dict, List, Optional

from storefront.schemas.cart_schema import CartLine, CartSnapshot
from storefront.services.selection import SelectionSet, calculate_selected_total
from storefront.utils.money import format_price


class MutationState:
    """Per product id "mutation in flight" flags."""

    def __init__(self):
        self._in_flight: Dict[str, bool] = {}

    def begin(self, product_id: str) -> bool:
        """Set the flag; False if a mutation for this id is already in flight."""
        if self._in_flight.get(product_id):
            return False
        self._in_flight[product_id] = True
        return True

    def end(self, product_id: str) -> None:
        self._in_flight.pop(product_id, None)

    def is_busy(self, product_id: str) -> bool:
        return self._in_flight.get(product_id, False)

    def busy_ids(self) -> List[str]:
        return [pid for pid, busy in self._in_flight.items() if busy]

    def clear(self) -> None:
        self._in_flight.clear()


class CartSession:
    """
    Client-side cart state for one screen session: the last fetched snapshot,
    the user's selection and the per-item mutation flags.

    Snapshot replacement is a single synchronous step, so no await can observe
    a snapshot without its matching total and selection.
    """

    def __init__(self):
        self.snapshot: Optional[CartSnapshot] = None
        self.total = 0.0
        self.selection = SelectionSet()
        self.mutations = MutationState()
        self.authenticated = False
        self.loading = True

    def apply_snapshot(self, snapshot: CartSnapshot) -> None:
        self.snapshot = snapshot
        self.total = snapshot.total
        self.selection.reset(snapshot.product_ids())
        self.authenticated = True

    def apply_empty(self, authenticated: bool) -> None:
        self.snapshot = None
        self.total = 0.0
        self.selection.reset([])
        self.authenticated = authenticated

    def lines(self) -> List[CartLine]:
        return list(self.snapshot.lines) if self.snapshot else []

    def selected_total(self) -> float:
        return calculate_selected_total(self.snapshot, self.selection)

    def close(self) -> None:
        """Unmount: drop all state. In-flight results may still land afterwards."""
        self.apply_empty(authenticated=False)
        self.mutations.clear()
        self.loading = False

    def view(self) -> dict:
        lines = []
        for line in self.lines():
            lines.append(
                {
                    "lineId": line.line_id,
                    "productId": line.product_id,
                    "name": line.product.name,
                    "brand": line.product.brand,
                    "image": line.product.image,
                    "price": line.price,
                    "priceText": format_price(line.price),
                    "quantity": line.quantity,
                    "subtotal": line.subtotal,
                    "selected": self.selection.is_selected(line.product_id),
                    "busy": self.mutations.is_busy(line.product_id),
                }
            )
        selected_total = self.selected_total()
        return {
            "authenticated": self.authenticated,
            "loading": self.loading,
            "cartId": self.snapshot.cart_id if self.snapshot else None,
            "items": lines,
            "total": self.total,
            "selectedTotal": selected_total,
            "selectedTotalText": format_price(selected_total),
            "selectedCount": len(self.selection),
            "allSelected": self.selection.all_selected,
        }

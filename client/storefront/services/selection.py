from typing import Iterable, Iterator, List

from storefront.schemas.cart_schema import CartSnapshot


class SelectionSet:
    """Product ids marked for purchase; always a subset of the current snapshot's ids."""

    def __init__(self):
        self._available: List[str] = []
        self._selected = set()

    def reset(self, product_ids: Iterable[str]) -> None:
        """Fresh snapshot: everything it contains is selected."""
        self._available = list(dict.fromkeys(product_ids))
        self._selected = set(self._available)

    def toggle(self, product_id: str) -> bool:
        if product_id not in self._available:
            return False
        if product_id in self._selected:
            self._selected.discard(product_id)
        else:
            self._selected.add(product_id)
        return True

    def select_all(self) -> None:
        self._selected = set(self._available)

    def clear_all(self) -> None:
        self._selected = set()

    def discard(self, product_id: str) -> None:
        self._selected.discard(product_id)

    def is_selected(self, product_id: str) -> bool:
        return product_id in self._selected

    @property
    def all_selected(self) -> bool:
        return bool(self._available) and len(self._selected) == len(self._available)

    def ids(self) -> List[str]:
        # snapshot order, so persisted selections are stable
        return [pid for pid in self._available if pid in self._selected]

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids())

    def __len__(self) -> int:
        return len(self._selected)

    def __contains__(self, product_id) -> bool:
        return product_id in self._selected


def calculate_selected_total(snapshot: CartSnapshot, selection: Iterable[str]) -> float:
    """Sum of price * quantity over the selected lines only, never the server total."""
    if snapshot is None:
        return 0.0
    selected = set(selection)
    total = sum(line.price * line.quantity for line in snapshot.lines if line.product_id in selected)
    # totals are kept to two decimals
    return round(total, 2)

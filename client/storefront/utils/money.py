from storefront.config import settings


def format_price(amount: float, currency: str = None) -> str:
    """Price rounded to whole units with dot thousands separators, e.g. ``25.000 VND``."""
    currency = currency or settings.CURRENCY
    return f"{amount:,.0f}".replace(",", ".") + f" {currency}"

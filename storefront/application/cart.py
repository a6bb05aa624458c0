"""Helpers for client-side cart lines. The cart itself lives in the browser."""
from collections import OrderedDict
from typing import Iterable, Protocol

from .schemas import CartLine


class PricedLine(Protocol):
    price: int
    qty: int


def merge_lines(lines: Iterable[CartLine]) -> list[CartLine]:
    """Collapse repeated products into one line, summing quantities.

    Lines with a non-positive quantity are dropped. First-seen order is kept.
    """
    merged: "OrderedDict[int, int]" = OrderedDict()
    for line in lines:
        if line.qty <= 0:
            continue
        merged[line.product_id] = merged.get(line.product_id, 0) + line.qty
    return [CartLine(product_id=product_id, qty=qty) for product_id, qty in merged.items()]


def cart_total(lines: Iterable[PricedLine]) -> int:
    """Total in paisa."""
    return sum(line.price * line.qty for line in lines)


def item_count(lines: Iterable[PricedLine]) -> int:
    return sum(line.qty for line in lines)


def format_price(amount: int) -> str:
    """Render paisa as rupees, e.g. 129900 -> '₹1299.00'."""
    rupees, paise = divmod(amount, 100)
    return f"₹{rupees}.{paise:02d}"

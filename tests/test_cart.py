from storefront.application.cart import cart_total, format_price, item_count, merge_lines
from storefront.application.schemas import CartLine
from storefront.domain.models import OrderItem


def test_merge_lines_sums_duplicates_in_first_seen_order():
    lines = [
        CartLine(product_id=2, qty=1),
        CartLine(product_id=1, qty=2),
        CartLine(product_id=2, qty=3),
    ]
    merged = merge_lines(lines)
    assert [(l.product_id, l.qty) for l in merged] == [(2, 4), (1, 2)]


def test_merge_lines_drops_non_positive_quantities():
    lines = [CartLine.model_construct(product_id=1, qty=0), CartLine(product_id=2, qty=1)]
    assert [(l.product_id, l.qty) for l in merge_lines(lines)] == [(2, 1)]


def test_totals():
    items = [OrderItem(price=129900, qty=2), OrderItem(price=4950, qty=1)]
    assert cart_total(items) == 264750
    assert item_count(items) == 3
    assert cart_total([]) == 0


def test_format_price():
    assert format_price(129900) == "₹1299.00"
    assert format_price(4950) == "₹49.50"
    assert format_price(5) == "₹0.05"

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, NamedTuple

from shared.config.settings import FLAT_SHIPPING_FEE, FREE_SHIPPING_THRESHOLD, TAX_RATE

CENT = Decimal("0.01")


def round2(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class OrderTotals(NamedTuple):
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


def compute_totals(line_amounts: Iterable[Decimal]) -> OrderTotals:
    """Price a checkout from its line amounts (unit price x quantity).

    Free shipping applies from the threshold upwards. The total is summed
    from the already-rounded parts so it always equals them to the cent.
    """
    raw_subtotal = sum(line_amounts, Decimal("0"))
    subtotal = round2(raw_subtotal)
    tax = round2(raw_subtotal * TAX_RATE)
    shipping = round2(0 if raw_subtotal >= FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_FEE)
    return OrderTotals(subtotal, tax, shipping, round2(subtotal + tax + shipping))

"""Financial fields derived from a product's prices.

Margin percentage is cost based: ``margin / total_cost_price * 100``.
Rounding is half-to-even at two decimals.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal

from app.core.constants import HUNDRED, MONEY_QUANTUM, ZERO


@dataclass(frozen=True)
class Financials:
    total_cost_price: Decimal
    margin: Decimal
    margin_percentage: Decimal


def to_money(value) -> Decimal:
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_EVEN)


def compute_financials(purchase_price, transport_cost, selling_price) -> Financials:
    purchase_price = to_money(purchase_price)
    transport_cost = to_money(transport_cost)
    selling_price = to_money(selling_price)

    total_cost_price = purchase_price + transport_cost
    margin = selling_price - total_cost_price
    if total_cost_price == ZERO:
        margin_percentage = ZERO.quantize(MONEY_QUANTUM)
    else:
        margin_percentage = (margin / total_cost_price * HUNDRED).quantize(
            MONEY_QUANTUM, rounding=ROUND_HALF_EVEN
        )
    return Financials(
        total_cost_price=total_cost_price,
        margin=margin,
        margin_percentage=margin_percentage,
    )


def apply_financials(product) -> Financials:
    financials = compute_financials(
        product.purchase_price, product.transport_cost, product.selling_price
    )
    product.total_cost_price = financials.total_cost_price
    product.margin = financials.margin
    product.margin_percentage = financials.margin_percentage
    return financials


def selling_price_for_margin(total_cost_price, target_margin_percentage) -> Decimal:
    """Selling price that yields ``target_margin_percentage`` over cost."""
    total_cost_price = to_money(total_cost_price)
    target = Decimal(str(target_margin_percentage))
    return to_money(total_cost_price * (HUNDRED + target) / HUNDRED)


def adjust_price_by_percentage(price, percentage) -> Decimal:
    price = to_money(price)
    percentage = Decimal(str(percentage))
    return to_money(price * (HUNDRED + percentage) / HUNDRED)


__all__ = [
    "Financials",
    "adjust_price_by_percentage",
    "apply_financials",
    "compute_financials",
    "selling_price_for_margin",
    "to_money",
]

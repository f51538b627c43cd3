import unittest
from decimal import Decimal
from types import SimpleNamespace

from app.services.pricing import (
    adjust_price_by_percentage,
    apply_financials,
    compute_financials,
    selling_price_for_margin,
    to_money,
)


class ComputeFinancialsTest(unittest.TestCase):
    def test_reference_example(self):
        financials = compute_financials(Decimal("950.00"), Decimal("30.00"), Decimal("1299.00"))
        self.assertEqual(financials.total_cost_price, Decimal("980.00"))
        self.assertEqual(financials.margin, Decimal("319.00"))
        self.assertEqual(financials.margin_percentage, Decimal("32.55"))

    def test_zero_cost_gives_zero_percentage(self):
        financials = compute_financials(0, 0, Decimal("50.00"))
        self.assertEqual(financials.total_cost_price, Decimal("0.00"))
        self.assertEqual(financials.margin, Decimal("50.00"))
        self.assertEqual(financials.margin_percentage, Decimal("0.00"))

    def test_negative_margin(self):
        financials = compute_financials(Decimal("200.00"), Decimal("15.00"), Decimal("180.00"))
        self.assertEqual(financials.margin, Decimal("-35.00"))
        self.assertEqual(financials.margin_percentage, Decimal("-16.28"))

    def test_missing_transport_counts_as_zero(self):
        financials = compute_financials(Decimal("100.00"), None, Decimal("150.00"))
        self.assertEqual(financials.total_cost_price, Decimal("100.00"))
        self.assertEqual(financials.margin_percentage, Decimal("50.00"))

    def test_rounding_is_half_even(self):
        self.assertEqual(to_money(Decimal("2.345")), Decimal("2.34"))
        self.assertEqual(to_money(Decimal("2.355")), Decimal("2.36"))

    def test_apply_financials_sets_product_fields(self):
        product = SimpleNamespace(
            purchase_price=Decimal("200.00"),
            transport_cost=Decimal("15.00"),
            selling_price=Decimal("280.00"),
        )
        apply_financials(product)
        self.assertEqual(product.total_cost_price, Decimal("215.00"))
        self.assertEqual(product.margin, Decimal("65.00"))
        self.assertEqual(product.margin_percentage, Decimal("30.23"))


class PriceAdjustmentTest(unittest.TestCase):
    def test_selling_price_for_target_margin(self):
        self.assertEqual(selling_price_for_margin(Decimal("980.00"), 25), Decimal("1225.00"))

    def test_target_margin_round_trips_through_computation(self):
        price = selling_price_for_margin(Decimal("215.00"), Decimal("30"))
        financials = compute_financials(Decimal("200.00"), Decimal("15.00"), price)
        self.assertEqual(financials.margin_percentage, Decimal("30.00"))

    def test_adjust_by_percentage(self):
        self.assertEqual(adjust_price_by_percentage(Decimal("100.00"), 10), Decimal("110.00"))
        self.assertEqual(adjust_price_by_percentage(Decimal("100.00"), Decimal("-12.5")), Decimal("87.50"))


if __name__ == "__main__":
    unittest.main()

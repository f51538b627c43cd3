import unittest
from datetime import timedelta
from decimal import Decimal

from app.core.dates import utcnow
from app.core.errors import NotFoundError, ValidationError
from app.schemas.product import ProductUpdate
from app.services import product_service
from app.services.product_service import ProductFilter
from support import make_session, product_payload, seed_catalog


class ProductServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.db = make_session()
        self.catalog = seed_catalog(self.db)

    def tearDown(self):
        self.db.close()

    def create(self, **overrides):
        return product_service.create_product(self.db, product_payload(self.catalog, **overrides), "alice")


class CreateUpdateDeleteTest(ProductServiceTestCase):
    def test_create_computes_financials_and_defaults(self):
        product = self.create()
        self.assertEqual(product.total_cost_price, Decimal("980.00"))
        self.assertEqual(product.margin, Decimal("319.00"))
        self.assertEqual(product.margin_percentage, Decimal("32.55"))
        self.assertEqual(product.status, "Available")
        self.assertEqual(product.created_by, "alice")
        self.assertIsNotNone(product.purchase_date)
        self.assertFalse(product.is_deleted)

    def test_create_rejects_mismatched_model(self):
        with self.assertRaises(ValidationError) as ctx:
            self.create(model_id=self.catalog.iphone.id)
        self.assertEqual(ctx.exception.errors[0]["field"], "modelId")
        self.assertEqual(product_service.count_products(self.db), 0)

    def test_partial_update_only_touches_given_fields(self):
        product = self.create()
        updated = product_service.update_product(
            self.db, product.id, ProductUpdate(selling_price=Decimal("1225.00")), "bob"
        )
        self.assertEqual(updated.name, "Galaxy S24 256GB")
        self.assertEqual(updated.margin_percentage, Decimal("25.00"))
        self.assertEqual(updated.updated_by, "bob")
        self.assertEqual(updated.created_by, "alice")

    def test_update_with_broken_relation_leaves_row_untouched(self):
        product = self.create()
        with self.assertRaises(ValidationError):
            product_service.update_product(
                self.db,
                product.id,
                ProductUpdate(brand_id=self.catalog.apple.id, name="Renamed"),
                "bob",
            )
        self.db.expire_all()
        reloaded = product_service.get_product(self.db, product.id)
        self.assertEqual(reloaded.brand_id, self.catalog.samsung.id)
        self.assertEqual(reloaded.name, "Galaxy S24 256GB")

    def test_update_moves_product_to_consistent_relations(self):
        product = self.create()
        updated = product_service.update_product(
            self.db,
            product.id,
            ProductUpdate(brand_id=self.catalog.apple.id, model_id=self.catalog.iphone.id),
            "bob",
        )
        self.assertEqual(updated.brand.name, "Apple")
        self.assertEqual(updated.model.name, "iPhone 15")

    def test_blank_status_on_update_rejected(self):
        product = self.create()
        with self.assertRaises(ValidationError) as ctx:
            product_service.update_product(self.db, product.id, ProductUpdate(status="   "), "bob")
        self.assertEqual(ctx.exception.errors[0]["field"], "status")
        self.db.expire_all()
        self.assertEqual(product_service.get_product(self.db, product.id).status, "Available")

    def test_blank_status_on_create_rejected(self):
        with self.assertRaises(ValidationError):
            self.create(status="  ")
        self.assertEqual(product_service.count_products(self.db), 0)

    def test_update_normalizes_known_status(self):
        product = self.create()
        updated = product_service.update_product(self.db, product.id, ProductUpdate(status=" reserved "), "bob")
        self.assertEqual(updated.status, "Reserved")

    def test_soft_delete_excludes_from_reads(self):
        product = self.create()
        product_service.delete_product(self.db, product.id, "bob")

        with self.assertRaises(NotFoundError):
            product_service.get_product(self.db, product.id)
        self.assertEqual(product_service.list_all_products(self.db), [])
        self.assertFalse(product_service.product_exists(self.db, product.id))

        stored = self.db.get(type(product), product.id)
        self.assertTrue(stored.is_deleted)
        self.assertEqual(stored.deleted_by, "bob")

    def test_delete_twice_is_not_found(self):
        product = self.create()
        product_service.delete_product(self.db, product.id, "bob")
        with self.assertRaises(NotFoundError):
            product_service.delete_product(self.db, product.id, "bob")


class StockAndPricingTest(ProductServiceTestCase):
    def test_update_stock_flags_low_stock(self):
        product = self.create(stock=10, min_stock_level=5)
        self.assertFalse(product.is_low_stock)
        product = product_service.update_stock(self.db, product.id, 5, "bob")
        self.assertTrue(product.is_low_stock)

    def test_adjust_stock_clamps_at_zero(self):
        product = self.create(stock=3)
        product = product_service.adjust_stock(self.db, product.id, -10, "bob")
        self.assertEqual(product.stock, 0)

    def test_negative_stock_rejected(self):
        product = self.create()
        with self.assertRaises(ValidationError):
            product_service.update_stock(self.db, product.id, -1, "bob")

    def test_mark_status_normalizes_known_values(self):
        product = self.create()
        product = product_service.set_status(self.db, product.id, "sold", "bob")
        self.assertEqual(product.status, "Sold")

    def test_update_selling_price_recomputes_margin(self):
        product = self.create()
        product = product_service.update_selling_price(self.db, product.id, Decimal("1078.00"), "bob")
        self.assertEqual(product.margin, Decimal("98.00"))
        self.assertEqual(product.margin_percentage, Decimal("10.00"))

    def test_update_margin_sets_cost_based_price(self):
        product = self.create()
        product = product_service.update_margin_percentage(self.db, product.id, Decimal("25"), "bob")
        self.assertEqual(product.selling_price, Decimal("1225.00"))
        self.assertEqual(product.margin_percentage, Decimal("25.00"))

    def test_margin_of_minus_hundred_rejected(self):
        product = self.create()
        with self.assertRaises(ValidationError):
            product_service.update_margin_percentage(self.db, product.id, Decimal("-100"), "bob")


class QueryTest(ProductServiceTestCase):
    def setUp(self):
        super().setUp()
        c = self.catalog
        self.galaxy = self.create(name="Galaxy S24", stock=2, selling_price=Decimal("1100.00"))
        self.iphone = self.create(
            name="iPhone 15 128GB",
            brand_id=c.apple.id,
            model_id=c.iphone.id,
            color_id=c.silver.id,
            stock=20,
            supplier_name="MobileWorld Italia",
            import_batch="IT2025002",
        )
        self.xps = self.create(
            name="Dell XPS",
            description="Laptop",
            product_type_id=c.laptop.id,
            brand_id=c.dell.id,
            model_id=c.xps.id,
            stock=8,
            selling_price=Decimal("1500.00"),
            arrival_date=utcnow() - timedelta(days=120),
        )

    def test_search_matches_reference_names(self):
        names = [p.name for p in product_service.search_products(self.db, "apple")]
        self.assertEqual(names, ["iPhone 15 128GB"])
        names = [p.name for p in product_service.search_products(self.db, "argent")]
        self.assertEqual(names, ["iPhone 15 128GB"])

    def test_blank_search_rejected(self):
        with self.assertRaises(ValidationError):
            product_service.search_products(self.db, "  ")

    def test_wildcards_in_search_are_literal(self):
        self.assertEqual(product_service.search_products(self.db, "%"), [])
        self.assertEqual(product_service.search_products(self.db, "_"), [])
        self.assertEqual(product_service.products_by(self.db, supplier_name="%"), [])
        promo = self.create(name="Galaxy 100% Refurb")
        hits = product_service.search_products(self.db, "100%")
        self.assertEqual([p.id for p in hits], [promo.id])

    def test_filter_by_type_and_price_range(self):
        result = product_service.list_products(
            self.db,
            ProductFilter(product_type_id=self.catalog.smartphone.id, min_price=Decimal("1200")),
        )
        self.assertEqual([p.name for p in result.items], ["iPhone 15 128GB"])
        self.assertEqual(result.total_count, 1)

    def test_low_stock_filter(self):
        result = product_service.list_products(self.db, ProductFilter(is_low_stock=True))
        self.assertEqual([p.name for p in result.items], ["Galaxy S24"])
        result = product_service.list_products(self.db, ProductFilter(is_low_stock=False))
        self.assertEqual(result.total_count, 2)

    def test_pagination_and_sorting(self):
        result = product_service.list_products(
            self.db, ProductFilter(page=1, page_size=2, sort_by="sellingPrice", sort_descending=False)
        )
        self.assertEqual([p.name for p in result.items], ["Galaxy S24", "iPhone 15 128GB"])
        self.assertEqual(result.total_pages, 2)
        self.assertTrue(result.has_next_page)
        self.assertFalse(result.has_previous_page)

        second = product_service.list_products(
            self.db, ProductFilter(page=2, page_size=2, sort_by="sellingPrice", sort_descending=False)
        )
        self.assertEqual([p.name for p in second.items], ["Dell XPS"])
        self.assertFalse(second.has_next_page)

    def test_default_sort_is_newest_first(self):
        result = product_service.list_products(self.db, ProductFilter())
        self.assertEqual(result.items[0].id, self.xps.id)

    def test_status_lookup_is_case_insensitive(self):
        product_service.set_status(self.db, self.iphone.id, "Reserved", "bob")
        names = [p.name for p in product_service.products_by(self.db, status="reserved")]
        self.assertEqual(names, ["iPhone 15 128GB"])

    def test_low_stock_threshold_query(self):
        names = [p.name for p in product_service.low_stock_products(self.db, 8)]
        self.assertEqual(names, ["Galaxy S24", "Dell XPS"])

    def test_needing_attention(self):
        names = sorted(p.name for p in product_service.products_needing_attention(self.db, 90))
        self.assertEqual(names, ["Dell XPS", "Galaxy S24"])

    def test_recent_arrivals_skip_old_and_unknown_dates(self):
        self.assertEqual(product_service.recent_arrivals(self.db, 30), [])
        names = [p.name for p in product_service.recent_arrivals(self.db, 365)]
        self.assertEqual(names, ["Dell XPS"])

    def test_distinct_suppliers(self):
        from app.models.product import Product

        suppliers = product_service.distinct_values(self.db, Product.supplier_name)
        self.assertEqual(suppliers, ["MobileWorld Italia", "TechItalia SRL"])

    def test_count_by_brand(self):
        self.assertEqual(product_service.count_products(self.db), 3)
        self.assertEqual(product_service.count_products(self.db, brand_id=self.catalog.samsung.id), 1)

    def test_stats(self):
        stats = product_service.product_stats(self.db)
        self.assertEqual(stats["total_products"], 3)
        self.assertEqual(stats["low_stock_products"], 1)
        # 2 * 1100 + 20 * 1299 + 8 * 1500
        self.assertEqual(stats["total_stock_value"], Decimal("40180.00"))
        self.assertEqual(stats["total_product_types"], 2)

        by_type = {row["product_type_name"]: row for row in product_service.product_type_stats(self.db)}
        self.assertEqual(by_type["Smartphone"]["product_count"], 2)
        self.assertEqual(by_type["Laptop"]["low_stock_count"], 0)

    def test_stats_without_products(self):
        for product in (self.galaxy, self.iphone, self.xps):
            product_service.delete_product(self.db, product.id, "bob")
        stats = product_service.product_stats(self.db)
        self.assertEqual(stats["total_products"], 0)
        self.assertEqual(stats["average_margin_percentage"], Decimal("0"))


class BulkOperationTest(ProductServiceTestCase):
    def test_bulk_stock_isolates_missing_ids(self):
        product = self.create(stock=4)
        result = product_service.bulk_update_stock(self.db, [product.id, 9999], 5, "bob")
        self.assertEqual(result.success_count, 1)
        self.assertEqual(result.error_count, 1)
        self.assertEqual(result.processed_ids, [product.id])
        self.assertEqual(result.errors[0].product_id, 9999)
        self.assertEqual(product_service.get_product(self.db, product.id).stock, 9)

    def test_bulk_prices(self):
        first = self.create(selling_price=Decimal("1000.00"))
        second = self.create(selling_price=Decimal("1200.00"))
        result = product_service.bulk_update_prices(self.db, [first.id, second.id], Decimal("10"), "bob")
        self.assertEqual(result.success_count, 2)
        self.assertEqual(product_service.get_product(self.db, first.id).selling_price, Decimal("1100.00"))
        self.assertEqual(product_service.get_product(self.db, second.id).selling_price, Decimal("1320.00"))

    def test_bulk_status_and_delete(self):
        first = self.create()
        second = self.create()
        status = product_service.bulk_update_status(self.db, [first.id, second.id], "Reserved", "bob")
        self.assertEqual(status.success_count, 2)

        product_service.delete_product(self.db, second.id, "bob")
        result = product_service.bulk_delete(self.db, [first.id, second.id], "bob")
        self.assertEqual(result.success_count, 1)
        self.assertEqual(result.error_count, 1)
        self.assertEqual(product_service.count_products(self.db), 0)


if __name__ == "__main__":
    unittest.main()

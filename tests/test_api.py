import unittest
from io import BytesIO

from fastapi.testclient import TestClient
from openpyxl import load_workbook

from app.dependencies import get_db
from app.main import app
from support import make_session_factory, seed_catalog


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.Session = make_session_factory()
        db = self.Session()
        self.catalog = seed_catalog(db)
        db.close()

        def override_get_db():
            session = self.Session()
            try:
                yield session
            finally:
                session.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def product_body(self, **overrides):
        c = self.catalog
        body = {
            "name": "Galaxy S24 256GB",
            "description": "Refurbished Galaxy S24",
            "productTypeId": c.smartphone.id,
            "brandId": c.samsung.id,
            "modelId": c.galaxy.id,
            "colorId": c.black.id,
            "conditionId": c.excellent.id,
            "purchasePrice": 950.00,
            "transportCost": 30.00,
            "sellingPrice": 1299.00,
            "stock": 10,
            "minStockLevel": 5,
            "supplierName": "TechItalia SRL",
            "importBatch": "IT2025001",
            "invoiceNumber": "INV-2025-001",
        }
        body.update(overrides)
        return body

    def create_product(self, **overrides):
        response = self.client.post("/products", json=self.product_body(**overrides))
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()


class ProductApiTest(ApiTestCase):
    def test_create_returns_location_and_computed_fields(self):
        response = self.client.post("/products", json=self.product_body())
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(response.headers["location"], "/products/{}".format(data["id"]))
        self.assertEqual(data["totalCostPrice"], 980.0)
        self.assertEqual(data["margin"], 319.0)
        self.assertEqual(data["marginPercentage"], 32.55)
        self.assertEqual(data["brandName"], "Samsung")
        self.assertEqual(data["colorHexCode"], "#000000")
        self.assertEqual(data["status"], "Available")
        self.assertEqual(data["createdBy"], "anonymous")
        self.assertFalse(data["isLowStock"])

    def test_create_with_bad_relation_returns_field_errors(self):
        response = self.client.post("/products", json=self.product_body(modelId=self.catalog.iphone.id))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"][0]["field"], "modelId")

    def test_malformed_payload_uses_same_error_shape(self):
        response = self.client.post("/products", json=self.product_body(purchasePrice=0))
        self.assertEqual(response.status_code, 400)
        fields = [error["field"] for error in response.json()["errors"]]
        self.assertIn("purchasePrice", fields)

    def test_get_update_delete(self):
        created = self.create_product()
        url = "/products/{}".format(created["id"])

        response = self.client.put(url, json={"sellingPrice": 1225.00, "name": None})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["marginPercentage"], 25.0)
        self.assertEqual(response.json()["name"], "Galaxy S24 256GB")

        self.assertEqual(self.client.delete(url).status_code, 204)
        self.assertEqual(self.client.get(url).status_code, 404)
        self.assertEqual(self.client.delete(url).status_code, 404)
        self.assertEqual(self.client.get("/products").json(), [])

    def test_missing_product_is_404(self):
        response = self.client.get("/products/4242")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Product 4242 not found")

    def test_search_and_paged_list(self):
        self.create_product()
        self.create_product(
            name="iPhone 15",
            brandId=self.catalog.apple.id,
            modelId=self.catalog.iphone.id,
            stock=1,
        )
        hits = self.client.get("/products/search", params={"query": "apple"}).json()
        self.assertEqual([hit["name"] for hit in hits], ["iPhone 15"])

        page = self.client.get("/products/paged", params={"isLowStock": "true", "pageSize": 10}).json()
        self.assertEqual(page["totalCount"], 1)
        self.assertEqual(page["items"][0]["name"], "iPhone 15")
        self.assertFalse(page["hasNextPage"])

    def test_stock_status_and_margin_endpoints(self):
        created = self.create_product()
        base = "/products/{}".format(created["id"])

        data = self.client.patch(base + "/stock", params={"newStock": 3}).json()
        self.assertTrue(data["isLowStock"])
        data = self.client.patch(base + "/adjust-stock", params={"adjustment": -10}).json()
        self.assertEqual(data["stock"], 0)
        data = self.client.patch(base + "/mark-sold").json()
        self.assertEqual(data["status"], "Sold")
        data = self.client.patch(base + "/margin", params={"targetMarginPercentage": 25}).json()
        self.assertEqual(data["sellingPrice"], 1225.0)

    def test_pricing_preview(self):
        response = self.client.post(
            "/products/pricing/preview",
            json={"purchasePrice": 0, "transportCost": 0, "sellingPrice": 50},
        )
        self.assertEqual(response.json(), {"totalCostPrice": 0.0, "margin": 50.0, "marginPercentage": 0.0})

    def test_bulk_stock_reports_partial_failure(self):
        created = self.create_product()
        response = self.client.post(
            "/products/bulk/stock",
            json={"productIds": [created["id"], 9999], "stockAdjustment": 5},
        )
        data = response.json()
        self.assertEqual(data["successCount"], 1)
        self.assertEqual(data["errorCount"], 1)
        self.assertEqual(data["errors"][0]["productId"], 9999)

    def test_stats_and_lookups(self):
        self.create_product()
        stats = self.client.get("/products/stats").json()
        self.assertEqual(stats["totalProducts"], 1)
        self.assertEqual(self.client.get("/products/suppliers").json(), ["TechItalia SRL"])
        self.assertEqual(self.client.get("/products/count").json(), {"count": 1})
        by_batch = self.client.get("/products/by-batch/IT2025001").json()
        self.assertEqual(len(by_batch), 1)

    def test_validate_relations_endpoint(self):
        c = self.catalog
        params = {
            "productTypeId": c.smartphone.id,
            "brandId": c.samsung.id,
            "modelId": c.iphone.id,
            "colorId": c.black.id,
            "conditionId": c.excellent.id,
        }
        self.assertEqual(self.client.get("/products/validate-relations", params=params).json(), {"valid": False})

    def test_export_workbook(self):
        self.create_product()
        response = self.client.get("/products/export")
        self.assertEqual(response.status_code, 200)
        workbook = load_workbook(BytesIO(response.content))
        worksheet = workbook.active
        self.assertEqual(worksheet.cell(row=1, column=2).value, "Name")
        self.assertEqual(worksheet.cell(row=2, column=2).value, "Galaxy S24 256GB")


class DropdownAndReferenceApiTest(ApiTestCase):
    def test_cascading_dropdowns(self):
        c = self.catalog
        brands = self.client.get(
            "/products/dropdowns/brands", params={"productTypeId": c.laptop.id}
        ).json()
        self.assertEqual([brand["name"] for brand in brands], ["Dell"])

        models = self.client.get(
            "/products/dropdowns/models",
            params={"productTypeId": c.smartphone.id, "brandId": c.apple.id},
        ).json()
        self.assertEqual([model["name"] for model in models], ["iPhone 15"])
        self.assertEqual(models[0]["releaseYear"], 2023)

        colors = self.client.get("/products/dropdowns/colors").json()
        self.assertEqual(colors[0]["hexCode"], "#000000")

    def test_reference_crud(self):
        response = self.client.post("/references/colors", json={"name": "Bleu", "hexCode": "#0066CC"})
        self.assertEqual(response.status_code, 201)
        color_id = response.json()["id"]

        response = self.client.put(
            "/references/colors/{}".format(color_id), json={"isActive": False}
        )
        self.assertFalse(response.json()["isActive"])

        names = [row["name"] for row in self.client.get("/products/dropdowns/colors").json()]
        self.assertNotIn("Bleu", names)

        self.assertEqual(self.client.delete("/references/colors/{}".format(color_id)).status_code, 204)
        self.assertEqual(self.client.get("/references/colors/{}".format(color_id)).status_code, 404)

    def test_duplicate_reference_is_conflict(self):
        response = self.client.post("/references/conditions", json={"name": "excellent"})
        self.assertEqual(response.status_code, 409)

    def test_invalid_hex_code_rejected(self):
        response = self.client.post("/references/colors", json={"name": "Bleu", "hexCode": "blue"})
        self.assertEqual(response.status_code, 400)

    def test_referenced_condition_cannot_be_deleted(self):
        self.create_product()
        response = self.client.delete("/references/conditions/{}".format(self.catalog.excellent.id))
        self.assertEqual(response.status_code, 409)


class HealthApiTest(ApiTestCase):
    def test_health_reports_database(self):
        data = self.client.get("/health").json()
        self.assertEqual(data["status"], "ok")
        self.assertEqual(data["database"], "ok")


if __name__ == "__main__":
    unittest.main()

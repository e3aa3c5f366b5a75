from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

from django.test import SimpleTestCase

from providers.adapters.elko import ElkoAdapter
from providers.http import HttpClient
from providers.tests.fakes import FakeSession, make_response

CREDS = {"base_url": "https://elko.test/v3.0/", "token": "tok"}


def elko_routes(products, availability):
    """`availability` maps product code -> Response (missing codes answer 404)."""

    def route(url):
        if url.endswith("/Availability"):
            code = url.rsplit("/", 2)[-2]
            return availability.get(code, make_response(404))
        return make_response(200, json_body=products)

    return {"Catalogs/Products": route}


class ElkoAdapterTests(SimpleTestCase):
    def adapter(self, routes):
        session = FakeSession(routes)
        return ElkoAdapter(CREDS, http=HttpClient(session=session, backoff_s=0)), session

    def test_bearer_token_and_base_url(self):
        adapter, session = self.adapter(
            {"Catalogs/Vendors": make_response(200, json_body=[{"code": "V1", "name": "Asus"}])}
        )
        brands = adapter.fetch_brands()
        self.assertEqual([(b.external_id, b.name) for b in brands], [("V1", "Asus")])
        call = session.calls[0]
        self.assertEqual(call["url"], "https://elko.test/v3.0/Catalogs/Vendors")
        self.assertEqual(call["headers"]["Authorization"], "Bearer tok")

    def test_categories_keep_parent_code(self):
        adapter, _ = self.adapter(
            {
                "Catalogs/Categories": make_response(
                    200,
                    json_body=[
                        {"code": "C1", "name": "Laptops"},
                        {"code": "C2", "name": "Gaming", "parentCode": "C1"},
                        {"code": "C3"},
                    ],
                )
            }
        )
        cats = adapter.fetch_categories()
        self.assertEqual(
            [(c.external_id, c.parent_external_id) for c in cats], [("C1", None), ("C2", "C1")]
        )

    def test_availability_overrides_list_values(self):
        products = [
            {
                "code": "A1",
                "name": "Laptop",
                "price": "9.99",
                "stock": "1",
                "vendorCode": "V1",
                "categoryCode": "C1",
                "images": ["https://img/a1.jpg", ""],
                "ean": "555",
            }
        ]
        adapter, _ = self.adapter(
            elko_routes(products, {"A1": make_response(200, json_body={"price": 12.5, "stock": 4})})
        )
        result = adapter.fetch_products()
        p = result.products[0]
        self.assertEqual(p.price, Decimal("12.50"))
        self.assertEqual(p.stock_qty, 4)
        self.assertTrue(p.in_stock)
        self.assertEqual(p.currency, "EUR")
        self.assertEqual(p.images, ["https://img/a1.jpg"])
        self.assertEqual((p.brand_external_id, p.category_external_id), ("V1", "C1"))
        self.assertEqual(p.attributes, {"ean": "555"})
        self.assertEqual(result.secondary_failures, 0)

    def test_failed_availability_keeps_list_values_and_is_counted(self):
        products = [
            {"code": "A1", "name": "Ok", "price": "1", "stock": "0"},
            {"elkoCode": "B2", "name": "Broken", "price": "5", "stock": "2"},
            {"name": "no code"},
        ]
        adapter, _ = self.adapter(
            elko_routes(
                products,
                {
                    "A1": make_response(200, json_body={"price": None, "stock": 3}),
                    "B2": make_response(500),
                },
            )
        )
        result = adapter.fetch_products()
        self.assertEqual([p.external_id for p in result.products], ["A1", "B2"])
        ok, broken = result.products
        self.assertEqual((ok.price, ok.stock_qty), (Decimal("1.00"), 3))
        self.assertEqual((broken.price, broken.stock_qty, broken.in_stock), (Decimal("5.00"), 2, True))
        self.assertEqual(result.secondary_failures, 1)

    def test_availability_calls_are_paced(self):
        products = [{"code": f"P{i}", "name": f"P{i}"} for i in range(25)]
        availability = {
            f"P{i}": make_response(200, json_body={"price": 1, "stock": 1}) for i in range(25)
        }
        adapter, _ = self.adapter(elko_routes(products, availability))
        with patch("providers.adapters.elko.time.sleep") as sleep:
            result = adapter.fetch_products()
        self.assertEqual(len(result.products), 25)
        self.assertEqual(sleep.call_count, 2)
        sleep.assert_called_with(ElkoAdapter.PACE_DELAY_S)

    def test_missing_token(self):
        adapter = ElkoAdapter({"base_url": "https://elko.test/"}, http=HttpClient(session=FakeSession()))
        result = adapter.test_connection()
        self.assertFalse(result.success)
        self.assertIn("ELKO_API_TOKEN", result.message)

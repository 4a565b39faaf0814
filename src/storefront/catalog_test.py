#   Copyright 2026 Storefront Authors
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

"""Tests for the store, product and copywriting endpoints."""

from unittest import mock

from absl.testing import absltest
from storefront import db
from storefront import testing

OWNER_HEADERS = {"X-Owner-Id": testing.OWNER_ID}
OTHER_HEADERS = {"X-Owner-Id": testing.OTHER_OWNER_ID}


class StoreRoutesTest(testing.StorefrontTestCase):

  def _create(self, **overrides):
    payload = {
        "name": "Aromas del Bosque",
        "slug": "Aromas-Del-Bosque",
        "currency": "mxn",
        "brand_description": "Velas y perfumes artesanales",
        "brand_tone": "cálido",
    }
    payload.update(overrides)
    return self.client.post("/api/stores", json=payload, headers=OWNER_HEADERS)

  def test_create_store_normalizes_slug(self) -> None:
    response = self._create()

    self.assertEqual(response.status_code, 201, response.text)
    body = response.json()
    self.assertEqual(body["slug"], "aromas-del-bosque")
    self.assertEqual(body["currency"], "MXN")

    fetched = self.client.get("/api/stores/aromas-del-bosque")
    self.assertEqual(fetched.status_code, 200)
    self.assertEqual(fetched.json()["id"], body["id"])

  def test_create_store_requires_owner(self) -> None:
    response = self.client.post(
        "/api/stores", json={"name": "Shop", "slug": "shop"}
    )

    self.assertEqual(response.status_code, 401)

  def test_create_store_validates_fields(self) -> None:
    self.assertEqual(self._create(name="  ").status_code, 400)
    self.assertEqual(self._create(slug="bad slug!").status_code, 400)

  def test_duplicate_slug_conflicts(self) -> None:
    self.assertEqual(self._create().status_code, 201)

    response = self._create(name="Another")

    self.assertEqual(response.status_code, 409)

  def test_slug_taken_after_check_conflicts(self) -> None:
    self.assertEqual(self._create().status_code, 201)

    # The slug lookup misses, as when another create commits concurrently.
    with mock.patch.object(
        db, "get_store_id_by_slug", new=mock.AsyncMock(return_value=None)
    ):
      response = self._create(name="Another")

    self.assertEqual(response.status_code, 409)
    self.assertEqual(response.json()["code"], "CONFLICT")
    store = self.client.get("/api/stores/aromas-del-bosque").json()
    self.assertEqual(store["name"], "Aromas del Bosque")

  def test_unknown_store_is_not_found(self) -> None:
    self.assertEqual(self.client.get("/api/stores/nowhere").status_code, 404)

  def test_update_settings_is_owner_only(self) -> None:
    self._create()
    settings = {"primary_color": "#000000", "logo_url": "https://cdn/logo.png"}

    forbidden = self.client.patch(
        "/api/stores/aromas-del-bosque/settings",
        json=settings,
        headers=OTHER_HEADERS,
    )
    updated = self.client.patch(
        "/api/stores/aromas-del-bosque/settings",
        json=settings,
        headers=OWNER_HEADERS,
    )

    self.assertEqual(forbidden.status_code, 403)
    self.assertEqual(updated.status_code, 200, updated.text)
    self.assertEqual(updated.json()["primary_color"], "#000000")
    self.assertEqual(updated.json()["logo_url"], "https://cdn/logo.png")
    self.assertIsNone(updated.json()["secondary_color"])

  def test_generate_brand_persists_model_output(self) -> None:
    self._create()
    self.copywriter.reply = """Claro, aquí está:
    {"mission": "Iluminar hogares", "vision": "Ser la marca favorita",
     "values": ["Calidez", "Origen", "Oficio"],
     "palette": {"colors": ["#101010", "#202020", "#303030"],
                 "primary": "#101010"}}
    """

    response = self.client.post(
        "/api/stores/aromas-del-bosque/brand", headers=OWNER_HEADERS
    )

    self.assertEqual(response.status_code, 200, response.text)
    self.assertEqual(response.json()["mission"], "Iluminar hogares")
    self.assertIn("Aromas del Bosque", self.copywriter.prompts[0])
    self.assertIn("Velas y perfumes artesanales", self.copywriter.prompts[0])

    store = self.client.get("/api/stores/aromas-del-bosque").json()
    self.assertEqual(store["vision"], "Ser la marca favorita")
    self.assertEqual(store["values"], ["Calidez", "Origen", "Oficio"])
    self.assertEqual(store["primary_color"], "#101010")
    self.assertEqual(store["secondary_color"], "#202020")
    self.assertEqual(store["palette"]["colors"][2], "#303030")

  def test_generate_brand_falls_back_on_unusable_reply(self) -> None:
    self._create()
    self.copywriter.reply = "no JSON here"

    response = self.client.post(
        "/api/stores/aromas-del-bosque/brand", headers=OWNER_HEADERS
    )

    self.assertEqual(response.status_code, 200)
    body = response.json()
    self.assertEqual(
        body["mission"],
        "Hacer crecer Aromas del Bosque con calidad y cercanía.",
    )
    self.assertLen(body["values"], 5)
    self.assertEqual(body["palette"]["primary"], "#3B82F6")


class ProductRoutesTest(testing.StorefrontTestCase):

  def setUp(self) -> None:
    super().setUp()
    self.seed_catalog()

  def test_create_and_list_products(self) -> None:
    response = self.client.post(
        "/api/stores/demo/products",
        json={"title": "  Jabón de avena ", "price": 12000, "stock": 7},
        headers=OWNER_HEADERS,
    )

    self.assertEqual(response.status_code, 201, response.text)
    self.assertEqual(response.json()["title"], "Jabón de avena")
    self.assertTrue(response.json()["is_active"])

    listing = self.client.get("/api/stores/demo/products").json()
    ids = [p["id"] for p in listing]
    self.assertIn(response.json()["id"], ids)
    self.assertNotIn("retired", ids)
    self.assertNotIn("foreign", ids)
    perfume = next(p for p in listing if p["id"] == "perfume")
    self.assertCountEqual(
        [v["id"] for v in perfume["variants"]], ["perfume-30", "perfume-100"]
    )

  def test_create_product_validation(self) -> None:
    cases = [
        {"title": "", "price": 100},
        {"title": "Vela", "price": -1},
        {"title": "Vela", "price": 100, "stock": -5},
    ]
    for payload in cases:
      with self.subTest(payload=payload):
        response = self.client.post(
            "/api/stores/demo/products", json=payload, headers=OWNER_HEADERS
        )
        self.assertEqual(response.status_code, 400)

  def test_create_product_is_owner_only(self) -> None:
    response = self.client.post(
        "/api/stores/demo/products",
        json={"title": "Vela", "price": 100},
        headers=OTHER_HEADERS,
    )

    self.assertEqual(response.status_code, 403)

  def test_update_product(self) -> None:
    response = self.client.patch(
        "/api/products/candle",
        json={"price": 27000, "stock": 3},
        headers=OWNER_HEADERS,
    )

    self.assertEqual(response.status_code, 200, response.text)
    self.assertEqual(response.json()["price"], 27000)
    self.assertEqual(response.json()["stock"], 3)
    self.assertEqual(response.json()["title"], "Vela de lavanda")

  def test_update_rejects_null_for_required_columns(self) -> None:
    for payload in ({"price": None}, {"stock": None}, {"is_active": None}):
      with self.subTest(payload=payload):
        response = self.client.patch(
            "/api/products/candle", json=payload, headers=OWNER_HEADERS
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "INVALID_REQUEST")

    listing = self.client.get("/api/stores/demo/products").json()
    product = next(p for p in listing if p["id"] == "candle")
    self.assertEqual(product["price"], 25000)

  def test_update_allows_clearing_optional_fields(self) -> None:
    response = self.client.patch(
        "/api/products/candle",
        json={"description": None},
        headers=OWNER_HEADERS,
    )

    self.assertEqual(response.status_code, 200, response.text)
    self.assertIsNone(response.json()["description"])

  def test_update_unknown_product_is_not_found(self) -> None:
    response = self.client.patch(
        "/api/products/nope", json={"price": 1}, headers=OWNER_HEADERS
    )

    self.assertEqual(response.status_code, 404)

  def test_create_variant(self) -> None:
    response = self.client.post(
        "/api/products/candle/variants",
        json={"title": "Grande", "sku": "VEL-G", "price": 40000, "stock": 2},
        headers=OWNER_HEADERS,
    )

    self.assertEqual(response.status_code, 201, response.text)
    variant_id = response.json()["id"]

    checkout = self.client.post(
        "/api/checkout/session",
        json={
            "storeSlug": "demo",
            "items": [{"id": "candle", "qty": 1, "variantId": variant_id}],
        },
    )
    self.assertEqual(checkout.status_code, 200, checkout.text)
    line = self.gateway.created[0]["line_items"][0]
    self.assertEqual(line.unit_amount, 40000)
    self.assertEqual(line.variant_id, variant_id)


class ImproveDescriptionTest(testing.StorefrontTestCase):

  def test_returns_model_rewrite(self) -> None:
    self.copywriter.reply = "  Una vela que perfuma tu tarde.  "

    response = self.client.post(
        "/api/ai/improve-product-description",
        json={"text": "vela rica", "title": "Aceite de lavanda"},
    )

    self.assertEqual(response.status_code, 200, response.text)
    self.assertEqual(
        response.json(), {"improved": "Una vela que perfuma tu tarde."}
    )
    self.assertIn("botánicos", self.copywriter.prompts[0])
    self.assertIn("claro y persuasivo", self.copywriter.prompts[0])

  def test_empty_reply_falls_back_to_original(self) -> None:
    self.copywriter.reply = ""

    response = self.client.post(
        "/api/ai/improve-product-description", json={"text": "vela rica"}
    )

    self.assertEqual(response.json(), {"improved": "vela rica"})

  def test_missing_text_is_bad_request(self) -> None:
    response = self.client.post(
        "/api/ai/improve-product-description", json={"title": "Vela"}
    )

    self.assertEqual(response.status_code, 400)
    self.assertEqual(response.json()["detail"], "Missing original text")


if __name__ == "__main__":
  absltest.main()

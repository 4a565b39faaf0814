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

"""Tests for the CSV catalog import."""

import os

from absl.testing import absltest
from sqlalchemy import event
from sqlalchemy import select
from storefront import db
from storefront import seed
from storefront import testing

STORES_CSV = """id,slug,name,owner_id,currency,primary_color,secondary_color
store-demo,Demo,Demo Renovada,owner-1,MXN,#000000,#FFFFFF
store-new,nuevo,Tienda Nueva,owner-3,,,
"""

PRODUCTS_CSV = """id,store_slug,title,price,stock,sku,description,media_url
soap,demo,Jabón de avena,12000,7,JAB-AV,,
tea,nuevo,Té de menta,8000,,,,
ghost,nowhere,Ghost,100,1,,,
"""

VARIANTS_CSV = """id,product_id,sku,title,price,stock
tea-50,tea,TE-50,50 g,8000,4
"""


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
  del connection_record  # Unused.
  cursor = dbapi_connection.cursor()
  cursor.execute("PRAGMA foreign_keys=ON")
  cursor.close()


class LoadCatalogTest(testing.StorefrontTestCase):

  def setUp(self) -> None:
    super().setUp()
    self.seed_catalog()

    async def record_order(session) -> None:
      session.add(db.OrderCounter(store_id="store-demo", last_number=1))
      session.add(
          db.Order(
              id="order-1",
              store_id="store-demo",
              number="1",
              currency="MXN",
              subtotal=25000,
              total=25000,
              status="paid",
              checkout_session_id="cs_paid_1",
          )
      )

    self.run_db(record_order)
    event.listen(self.engine.sync_engine, "connect", _enable_foreign_keys)

    self.data_dir = os.path.join(self.test_dir, "catalog")
    os.makedirs(self.data_dir)
    for name, content in (
        ("stores.csv", STORES_CSV),
        ("products.csv", PRODUCTS_CSV),
        ("variants.csv", VARIANTS_CSV),
    ):
      with open(os.path.join(self.data_dir, name), "w", encoding="utf-8") as f:
        f.write(content)

  def _all(self, model):
    async def query(session):
      result = await session.execute(select(model))
      return list(result.scalars().all())

    return self.run_db(query)

  def test_reload_keeps_orders_and_updates_stores(self) -> None:
    self.run_db(lambda s: seed.load_catalog(s, self.data_dir))

    orders = self._all(db.Order)
    self.assertEqual([o.id for o in orders], ["order-1"])
    self.assertLen(self._all(db.OrderCounter), 1)

    stores = {s.id: s for s in self._all(db.Store)}
    self.assertCountEqual(stores, ["store-demo", "store-other", "store-new"])
    self.assertEqual(stores["store-demo"].slug, "demo")
    self.assertEqual(stores["store-demo"].name, "Demo Renovada")
    self.assertEqual(stores["store-demo"].primary_color, "#000000")
    self.assertEqual(stores["store-new"].owner_id, "owner-3")

  def test_reload_replaces_products_and_variants(self) -> None:
    self.run_db(lambda s: seed.load_catalog(s, self.data_dir))

    products = {p.id: p for p in self._all(db.Product)}
    self.assertCountEqual(products, ["soap", "tea"])
    self.assertEqual(products["soap"].store_id, "store-demo")
    self.assertEqual(products["soap"].price, 12000)
    self.assertEqual(products["tea"].stock, 0)
    self.assertTrue(products["tea"].is_active)
    self.assertEqual([v.id for v in self._all(db.Variant)], ["tea-50"])

  def test_missing_files_are_skipped(self) -> None:
    os.remove(os.path.join(self.data_dir, "variants.csv"))

    self.run_db(lambda s: seed.load_catalog(s, self.data_dir))

    self.assertEmpty(self._all(db.Variant))
    self.assertLen(self._all(db.Product), 2)


if __name__ == "__main__":
  absltest.main()

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

"""Database initialization script for the storefront server.

This script imports stores, products and variants from CSV files into the
configured database. Products and variants are replaced, stores are updated
in place, and orders are left untouched.

Usage:
  storefront-seed --database_url=sqlite+aiosqlite:///store.db --data_dir=...
"""

import asyncio
import csv
import logging
import os
import sys

from absl import app as absl_app
from absl import flags
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from storefront import config
from storefront import db
from storefront.db import Product
from storefront.db import Store
from storefront.db import Variant

FLAGS = flags.FLAGS
flags.DEFINE_string(
    "data_dir",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "data"),
    "Directory containing stores.csv, products.csv and variants.csv",
)

logger = logging.getLogger(__name__)


def _read_rows(path: str) -> list[dict[str, str]]:
  if not os.path.exists(path):
    logger.info("Skipping missing file %s", path)
    return []
  with open(path, "r", encoding="utf-8") as f:
    return list(csv.DictReader(f))


async def load_catalog(session: AsyncSession, data_dir: str) -> None:
  """Replaces the catalog in `session` with the CSV dataset in `data_dir`.

  Products and variants are cleared and re-created. Stores are upserted by
  ID, since recorded orders and folio counters keep referencing them.
  """
  logger.info("Clearing existing products and variants...")
  await session.execute(delete(Variant))
  await session.execute(delete(Product))

  logger.info("Importing Stores from CSV...")
  store_ids = {}
  for row in _read_rows(os.path.join(data_dir, "stores.csv")):
    store = await session.merge(
        Store(
            id=row["id"],
            slug=row["slug"].strip().lower(),
            name=row["name"],
            owner_id=row["owner_id"],
            currency=row.get("currency") or None,
            primary_color=row.get("primary_color") or None,
            secondary_color=row.get("secondary_color") or None,
        )
    )
    store_ids[store.slug] = store.id
  await session.flush()

  logger.info("Importing Products from CSV...")
  for row in _read_rows(os.path.join(data_dir, "products.csv")):
    store_id = store_ids.get(row["store_slug"])
    if not store_id:
      logger.warning(
          "Skipping product %s: unknown store %s",
          row["id"],
          row["store_slug"],
      )
      continue
    session.add(
        Product(
            id=row["id"],
            store_id=store_id,
            title=row["title"],
            price=int(row["price"]),
            stock=int(row.get("stock") or 0),
            sku=row.get("sku") or None,
            description=row.get("description") or None,
            media_url=row.get("media_url") or None,
            is_active=True,
        )
    )
  await session.flush()

  logger.info("Importing Variants from CSV...")
  for row in _read_rows(os.path.join(data_dir, "variants.csv")):
    session.add(
        Variant(
            id=row["id"],
            product_id=row["product_id"],
            sku=row.get("sku") or None,
            title=row.get("title") or None,
            price=int(row["price"]),
            stock=int(row.get("stock") or 0),
        )
    )
  await session.flush()


async def import_csv_data(data_dir: str) -> None:
  """Reads CSV files and populates the configured database."""
  await db.manager.init_db(config.get_database_url())

  try:
    async with db.manager.session_factory() as session:
      await load_catalog(session, data_dir)
      await session.commit()
      logger.info("Catalog import complete.")
  finally:
    await db.manager.close()


def main(argv):
  """Main entry point for the import script."""
  del argv
  logging.basicConfig(level=logging.INFO)
  if not config.get_database_url():
    logger.error("--database_url (or STOREFRONT_DATABASE_URL) is required.")
    sys.exit(1)
  asyncio.run(import_csv_data(FLAGS.data_dir))


def run() -> None:
  absl_app.run(main)


if __name__ == "__main__":
  run()

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

"""Utility script to dump recorded orders.

This script reads the configured database and prints every order written by
the payment webhook, with its folio, totals and line items. It is useful for
debugging and verifying the state of the server.

Usage:
  storefront-dump-orders --database_url=... [--store_slug=...]
"""

import asyncio
import sys

from absl import app as absl_app
from absl import flags
from storefront import config
from storefront import db

FLAGS = flags.FLAGS
flags.DEFINE_string("store_slug", None, "Only dump orders of this store")


def _money(cents: int) -> str:
  return f"{cents / 100.0:.2f}"


async def dump_orders() -> None:
  """Queries the database and prints all orders."""
  database_url = config.get_database_url()
  if not database_url:
    print("Error: --database_url is required.")
    sys.exit(1)

  await db.manager.init_db(database_url)
  try:
    async with db.manager.session_factory() as session:
      store_id = None
      if FLAGS.store_slug:
        store_id = await db.get_store_id_by_slug(session, FLAGS.store_slug)
        if not store_id:
          print(f"Error: unknown store '{FLAGS.store_slug}'.")
          sys.exit(1)

      orders = await db.list_orders(session, store_id)
      if not orders:
        print("No orders found.")
        return

      for order in orders:
        print(
            f"Order #{order.number} ({order.id}) [{order.status}]"
            f" store={order.store_id} email={order.email or 'N/A'}"
        )
        print(f"  session: {order.checkout_session_id}")
        for item in order.items:
          print(
              f"  - {item.title} x{item.qty} @ {_money(item.unit_price)} ="
              f" {_money(item.amount_total)}"
          )
        print(f"  total: {_money(order.total)} {order.currency}")
        print("-" * 60)
  finally:
    await db.manager.close()


def main(argv):
  """Main entry point for the order dump script."""
  del argv
  asyncio.run(dump_orders())


def run() -> None:
  absl_app.run(main)


if __name__ == "__main__":
  run()

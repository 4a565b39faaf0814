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

"""Database management and persistence layer for the storefront server.

This module provides the schema definitions, the async engine and session
factory, and the data access helpers used by the services. Stores own
products, products own variants, and orders are written once per hosted
checkout session by the payment webhook.

Key features include:
- `DatabaseManager`: Handles asynchronous engine initialization and session
  factory setup.
- WAL Mode: Enabled for SQLite so the webhook and the storefront endpoints can
  read and write concurrently.
- Folio allocation: A per-store counter row incremented in a single UPDATE.
- Stock decrements: Single UPDATE statements that never drive stock negative.
"""

import datetime
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
import uuid

from sqlalchemy import Boolean
from sqlalchemy import case
from sqlalchemy import Column
from sqlalchemy import ForeignKey
from sqlalchemy import Integer
from sqlalchemy import JSON
from sqlalchemy import select
from sqlalchemy import String
from sqlalchemy import text
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import relationship
from sqlalchemy.orm import selectinload
from sqlalchemy.orm import sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


def _new_id() -> str:
  return str(uuid.uuid4())


def _now() -> str:
  return datetime.datetime.now(datetime.timezone.utc).isoformat()


class DatabaseManager:
  """Manages the database engine and session factory without globals."""

  def __init__(self) -> None:
    self.engine: Optional[AsyncEngine] = None
    self.session_factory: Optional[sessionmaker] = None

  async def init_db(self, database_url: str) -> None:
    """Initializes the database engine and creates tables."""
    self.engine = create_async_engine(database_url, echo=False)

    if self.engine.dialect.name == "sqlite":
      async with self.engine.connect() as conn:
        await conn.execute(text("PRAGMA journal_mode=WAL"))

    self.session_factory = sessionmaker(
        self.engine, expire_on_commit=False, class_=AsyncSession
    )

    async with self.engine.begin() as conn:
      await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized (%s)", self.engine.dialect.name)

  async def close(self) -> None:
    """Closes the database engine."""
    if self.engine:
      await self.engine.dispose()
      self.engine = None
      self.session_factory = None


# Global manager instance (to be initialized via lifespan)
manager = DatabaseManager()


class Store(Base):
  __tablename__ = "stores"

  id = Column(String, primary_key=True, default=_new_id)
  slug = Column(String, unique=True, nullable=False, index=True)
  name = Column(String, nullable=False)
  owner_id = Column(String, nullable=False, index=True)
  currency = Column(String, nullable=True)
  logo_url = Column(String, nullable=True)
  primary_color = Column(String, nullable=True)
  secondary_color = Column(String, nullable=True)
  brand_description = Column(String, nullable=True)
  brand_audience = Column(String, nullable=True)
  brand_tone = Column(String, nullable=True)
  mission = Column(String, nullable=True)
  vision = Column(String, nullable=True)
  values = Column(JSON, nullable=True)  # List of strings
  palette = Column(JSON, nullable=True)  # {"colors": [...], "primary", ...}
  support_email = Column(String, nullable=True)
  support_phone = Column(String, nullable=True)
  created_at = Column(String, default=_now)


class Product(Base):
  __tablename__ = "products"

  id = Column(String, primary_key=True, default=_new_id)
  store_id = Column(String, ForeignKey("stores.id"), nullable=False, index=True)
  title = Column(String, nullable=False)
  price = Column(Integer, nullable=False)  # Price in cents
  stock = Column(Integer, nullable=False, default=0)
  sku = Column(String, nullable=True)
  description = Column(String, nullable=True)
  media_url = Column(String, nullable=True)
  is_active = Column(Boolean, nullable=False, default=True)
  created_at = Column(String, default=_now)

  variants = relationship(
      "Variant", back_populates="product", order_by="Variant.title"
  )


class Variant(Base):
  __tablename__ = "variants"

  id = Column(String, primary_key=True, default=_new_id)
  product_id = Column(
      String, ForeignKey("products.id"), nullable=False, index=True
  )
  sku = Column(String, nullable=True)
  title = Column(String, nullable=True)  # e.g. "Size M"
  price = Column(Integer, nullable=False)  # Price in cents
  stock = Column(Integer, nullable=False, default=0)

  product = relationship("Product", back_populates="variants")


class Order(Base):
  __tablename__ = "orders"

  id = Column(String, primary_key=True, default=_new_id)
  store_id = Column(String, ForeignKey("stores.id"), nullable=False, index=True)
  number = Column(String, nullable=False)
  email = Column(String, nullable=True)
  currency = Column(String, nullable=False)
  subtotal = Column(Integer, nullable=False)
  discount_total = Column(Integer, nullable=False, default=0)
  shipping_total = Column(Integer, nullable=False, default=0)
  tax_total = Column(Integer, nullable=False, default=0)
  total = Column(Integer, nullable=False)
  status = Column(String, nullable=False)
  # One order per hosted checkout session.
  checkout_session_id = Column(String, unique=True, nullable=False)
  created_at = Column(String, default=_now)

  items = relationship("OrderItem", back_populates="order")


class OrderItem(Base):
  __tablename__ = "order_items"

  id = Column(String, primary_key=True, default=_new_id)
  order_id = Column(String, ForeignKey("orders.id"), nullable=False, index=True)
  store_id = Column(String, nullable=False)
  product_id = Column(String, nullable=True)
  variant_id = Column(String, nullable=True)
  title = Column(String, nullable=False)
  unit_price = Column(Integer, nullable=False)
  qty = Column(Integer, nullable=False)
  amount_subtotal = Column(Integer, nullable=False)
  amount_total = Column(Integer, nullable=False)

  order = relationship("Order", back_populates="items")


class OrderCounter(Base):
  __tablename__ = "order_counters"

  store_id = Column(String, ForeignKey("stores.id"), primary_key=True)
  last_number = Column(Integer, nullable=False, default=0)


# --- Data Access Helpers ---


async def get_store_by_slug(
    session: AsyncSession, slug: str
) -> Optional[Store]:
  """Retrieves a store by its routing slug."""
  result = await session.execute(select(Store).where(Store.slug == slug))
  return result.scalar_one_or_none()


async def get_store_id_by_slug(
    session: AsyncSession, slug: str
) -> Optional[str]:
  """Resolves a store slug to its ID."""
  result = await session.execute(select(Store.id).where(Store.slug == slug))
  return result.scalar_one_or_none()


async def create_store(session: AsyncSession, **fields: Any) -> Store:
  """Adds a new store and flushes it so its ID is populated."""
  store = Store(**fields)
  session.add(store)
  await session.flush()
  return store


async def update_store(
    session: AsyncSession, store: Store, values: Dict[str, Any]
) -> Store:
  """Applies column updates to a store."""
  for key, value in values.items():
    setattr(store, key, value)
  await session.flush()
  return store


async def get_product(
    session: AsyncSession, product_id: str
) -> Optional[Product]:
  """Retrieves a product by ID."""
  return await session.get(Product, product_id)


async def get_products_in_store(
    session: AsyncSession, store_id: str, product_ids: Sequence[str]
) -> List[Product]:
  """Retrieves active products of a store from a list of IDs."""
  if not product_ids:
    return []
  result = await session.execute(
      select(Product).where(
          Product.id.in_(list(product_ids)),
          Product.store_id == store_id,
          Product.is_active.is_(True),
      )
  )
  return list(result.scalars().all())


async def get_variants_in_store(
    session: AsyncSession, store_id: str, variant_ids: Sequence[str]
) -> List[Tuple[Variant, Product]]:
  """Retrieves variants joined with their parent product, scoped to a store.

  Args:
    session: The database session to use.
    store_id: The store the variants must belong to.
    variant_ids: The variant IDs to look up.

  Returns:
    A list of (variant, product) pairs for the variants that exist.
  """
  if not variant_ids:
    return []
  result = await session.execute(
      select(Variant, Product)
      .join(Product, Variant.product_id == Product.id)
      .where(
          Variant.id.in_(list(variant_ids)),
          Product.store_id == store_id,
          Product.is_active.is_(True),
      )
  )
  return [(row[0], row[1]) for row in result.all()]


async def list_store_products(
    session: AsyncSession, store_id: str
) -> List[Product]:
  """Lists active products of a store with their variants loaded."""
  result = await session.execute(
      select(Product)
      .options(selectinload(Product.variants))
      .where(Product.store_id == store_id, Product.is_active.is_(True))
      .order_by(Product.created_at, Product.title)
  )
  return list(result.scalars().all())


async def add_product(session: AsyncSession, **fields: Any) -> Product:
  """Adds a new product and flushes it so its ID is populated."""
  product = Product(**fields)
  session.add(product)
  await session.flush()
  return product


async def add_variant(session: AsyncSession, **fields: Any) -> Variant:
  """Adds a new variant and flushes it so its ID is populated."""
  variant = Variant(**fields)
  session.add(variant)
  await session.flush()
  return variant


async def get_variant(
    session: AsyncSession, variant_id: str
) -> Optional[Variant]:
  """Retrieves a variant by ID."""
  return await session.get(Variant, variant_id)


async def get_order_by_checkout_session(
    session: AsyncSession, checkout_session_id: str
) -> Optional[Order]:
  """Retrieves the order recorded for a hosted checkout session."""
  result = await session.execute(
      select(Order).where(Order.checkout_session_id == checkout_session_id)
  )
  return result.scalar_one_or_none()


async def get_order_items(
    session: AsyncSession, order_id: str
) -> List[OrderItem]:
  """Retrieves the line items of an order."""
  result = await session.execute(
      select(OrderItem).where(OrderItem.order_id == order_id)
  )
  return list(result.scalars().all())


async def list_orders(
    session: AsyncSession, store_id: Optional[str] = None
) -> List[Order]:
  """Lists orders with their items loaded, optionally for a single store."""
  stmt = select(Order).options(selectinload(Order.items))
  if store_id:
    stmt = stmt.where(Order.store_id == store_id)
  result = await session.execute(stmt.order_by(Order.created_at))
  return list(result.scalars().all())


async def next_order_number(session: AsyncSession, store_id: str) -> int:
  """Allocates the next sequential folio for a store.

  The counter row is incremented in a single UPDATE so that two transactions
  never observe the same value. The first order of a store creates the row.
  """
  result = await session.execute(
      update(OrderCounter)
      .where(OrderCounter.store_id == store_id)
      .values(last_number=OrderCounter.last_number + 1)
      .execution_options(synchronize_session=False)
  )
  if result.rowcount == 0:
    session.add(OrderCounter(store_id=store_id, last_number=1))
    await session.flush()
    return 1

  number = await session.execute(
      select(OrderCounter.last_number).where(
          OrderCounter.store_id == store_id
      )
  )
  return number.scalar_one()


async def save_order(
    session: AsyncSession, order: Order, items: List[OrderItem]
) -> Order:
  """Adds an order and its items and flushes them."""
  session.add(order)
  await session.flush()
  for item in items:
    item.order_id = order.id
    session.add(item)
  await session.flush()
  return order


async def decrement_variant_stock(
    session: AsyncSession, variant_id: str, quantity: int
) -> bool:
  """Decrements variant stock, clamping at zero. Returns False if missing."""
  stmt = (
      update(Variant)
      .where(Variant.id == variant_id)
      .values(
          stock=case(
              (Variant.stock >= quantity, Variant.stock - quantity), else_=0
          )
      )
      .execution_options(synchronize_session=False)
  )
  result = await session.execute(stmt)
  return result.rowcount > 0


async def decrement_product_stock(
    session: AsyncSession, product_id: str, quantity: int
) -> bool:
  """Decrements product stock, clamping at zero. Returns False if missing."""
  stmt = (
      update(Product)
      .where(Product.id == product_id)
      .values(
          stock=case(
              (Product.stock >= quantity, Product.stock - quantity), else_=0
          )
      )
      .execution_options(synchronize_session=False)
  )
  result = await session.execute(stmt)
  return result.rowcount > 0

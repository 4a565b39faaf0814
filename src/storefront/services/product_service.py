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

"""Product service for managing a store's catalog."""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from storefront import db
from storefront.exceptions import ForbiddenError
from storefront.exceptions import InvalidRequestError
from storefront.exceptions import ResourceNotFoundError
from storefront.models import ProductCreateRequest
from storefront.models import ProductResponse
from storefront.models import ProductUpdateRequest
from storefront.models import VariantCreateRequest
from storefront.models import VariantResponse

logger = logging.getLogger(__name__)

NON_NULLABLE_FIELDS = ("price", "stock", "is_active")


def _validate_amounts(price: Optional[int], stock: Optional[int]) -> None:
  if price is not None and price < 0:
    raise InvalidRequestError("Invalid price")
  if stock is not None and stock < 0:
    raise InvalidRequestError("Invalid stock")


def _to_response(
    product: db.Product, variants: Optional[List[db.Variant]] = None
) -> ProductResponse:
  # Built explicitly so the variants relationship is never lazy-loaded.
  return ProductResponse(
      id=product.id,
      store_id=product.store_id,
      title=product.title,
      price=product.price,
      stock=product.stock,
      sku=product.sku,
      description=product.description,
      media_url=product.media_url,
      is_active=product.is_active,
      variants=[VariantResponse.model_validate(v) for v in variants or []],
  )


class ProductService:
  """Service for product and variant CRUD."""

  def __init__(self, session: AsyncSession):
    self.session = session

  async def list_products(self, slug: str) -> List[ProductResponse]:
    """Lists the active products of a store with their variants."""
    store_id = await db.get_store_id_by_slug(self.session, slug)
    if not store_id:
      raise ResourceNotFoundError("Store not found")
    products = await db.list_store_products(self.session, store_id)
    return [_to_response(p, list(p.variants)) for p in products]

  async def create_product(
      self, owner_id: str, slug: str, product_req: ProductCreateRequest
  ) -> ProductResponse:
    """Adds an active product to a store."""
    store = await db.get_store_by_slug(self.session, slug)
    if not store:
      raise ResourceNotFoundError("Store not found")
    if store.owner_id != owner_id:
      raise ForbiddenError("Only the store owner can add products")

    title = product_req.title.strip()
    if not title:
      raise InvalidRequestError("Title is required")
    _validate_amounts(product_req.price, product_req.stock)

    product = await db.add_product(
        self.session,
        store_id=store.id,
        title=title,
        price=product_req.price,
        stock=product_req.stock,
        sku=product_req.sku or None,
        description=product_req.description or None,
        media_url=product_req.media_url or None,
        is_active=True,
    )
    await self.session.commit()
    logger.info("Created product %s in store %s", product.id, slug)
    return _to_response(product)

  async def update_product(
      self, owner_id: str, product_id: str, product_req: ProductUpdateRequest
  ) -> ProductResponse:
    """Applies a partial update to a product."""
    product = await self._get_owned_product(owner_id, product_id)
    updates = product_req.model_dump(exclude_unset=True)
    for field in NON_NULLABLE_FIELDS:
      if field in updates and updates[field] is None:
        raise InvalidRequestError(f"Field '{field}' cannot be null")
    _validate_amounts(updates.get("price"), updates.get("stock"))
    for key, value in updates.items():
      setattr(product, key, value)
    await self.session.commit()
    return _to_response(product)

  async def create_variant(
      self, owner_id: str, product_id: str, variant_req: VariantCreateRequest
  ) -> VariantResponse:
    """Adds a purchasable variant to a product."""
    product = await self._get_owned_product(owner_id, product_id)
    _validate_amounts(variant_req.price, variant_req.stock)
    variant = await db.add_variant(
        self.session,
        product_id=product.id,
        sku=variant_req.sku or None,
        title=variant_req.title or None,
        price=variant_req.price,
        stock=variant_req.stock,
    )
    await self.session.commit()
    return VariantResponse.model_validate(variant)

  async def _get_owned_product(
      self, owner_id: str, product_id: str
  ) -> db.Product:
    product = await db.get_product(self.session, product_id)
    if not product:
      raise ResourceNotFoundError("Product not found")
    store = await self.session.get(db.Store, product.store_id)
    if not store or store.owner_id != owner_id:
      raise ForbiddenError("Only the store owner can change this product")
    return product

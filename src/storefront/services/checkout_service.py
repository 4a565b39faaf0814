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

"""Checkout service for creating hosted payment sessions.

This module provides the `CheckoutService` class, which turns a shopper's cart
into a hosted checkout session. Prices and titles submitted by the client are
never trusted: every line is re-priced from the catalog of the store the cart
belongs to, and lines that do not resolve are dropped.

It also exposes the order lookup used by the checkout success page, which
polls until the webhook has written the order.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from storefront import db
from storefront.exceptions import InvalidRequestError
from storefront.exceptions import ResourceNotFoundError
from storefront.models import CheckoutSessionRequest
from storefront.models import OrderSummary
from storefront.models import SessionLineItem
from storefront.services.payment_gateway import StripeGateway

logger = logging.getLogger(__name__)

SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"


class CheckoutService:
  """Service for creating checkout sessions and looking up their orders."""

  def __init__(
      self,
      session: AsyncSession,
      gateway: StripeGateway,
      site_url: str,
      currency: str,
  ):
    self.session = session
    self.gateway = gateway
    self.site_url = site_url.rstrip("/")
    self.currency = currency

  async def create_session(self, checkout_req: CheckoutSessionRequest) -> str:
    """Creates a hosted checkout session and returns its redirect URL."""
    store_slug = checkout_req.store_slug
    if not store_slug or not checkout_req.items:
      raise InvalidRequestError("Bad request")

    store_id = await db.get_store_id_by_slug(self.session, store_slug)
    if not store_id:
      raise ResourceNotFoundError("Store not found")

    line_items = await self._build_line_items(store_id, checkout_req)
    if not line_items:
      raise InvalidRequestError("No valid items")

    logger.info(
        "Creating checkout session for store %s with %d line items",
        store_slug,
        len(line_items),
    )
    created = await self.gateway.create_checkout_session(
        line_items,
        currency=self.currency,
        success_url=(
            f"{self.site_url}/{store_slug}/checkout/success"
            f"?session_id={SESSION_ID_PLACEHOLDER}"
        ),
        cancel_url=f"{self.site_url}/{store_slug}/cart",
        metadata={"storeSlug": store_slug, "storeId": str(store_id)},
    )
    return created.url

  async def _build_line_items(
      self, store_id: str, checkout_req: CheckoutSessionRequest
  ) -> List[SessionLineItem]:
    """Prices cart lines from the catalog, skipping unknown or empty lines."""
    with_variant = [i for i in checkout_req.items if i.variant_id]
    without_variant = [i for i in checkout_req.items if not i.variant_id]

    variant_rows = await db.get_variants_in_store(
        self.session, store_id, [i.variant_id for i in with_variant]
    )
    variants = {
        variant.id: (variant, product) for variant, product in variant_rows
    }

    product_rows = await db.get_products_in_store(
        self.session, store_id, [i.id for i in without_variant]
    )
    products = {product.id: product for product in product_rows}

    line_items = []
    for item in with_variant:
      row = variants.get(item.variant_id)
      if not row or item.qty <= 0:
        continue
      variant, product = row
      line_items.append(
          SessionLineItem(
              name=product.title or "Producto",
              unit_amount=variant.price,
              quantity=item.qty,
              product_id=product.id,
              variant_id=variant.id,
          )
      )

    for item in without_variant:
      product = products.get(item.id)
      if not product or item.qty <= 0:
        continue
      line_items.append(
          SessionLineItem(
              name=product.title or "Producto",
              unit_amount=product.price,
              quantity=item.qty,
              product_id=product.id,
          )
      )

    return line_items

  async def get_order_by_session(
      self, checkout_session_id: str
  ) -> OrderSummary:
    """Retrieves the order written for a checkout session."""
    if not checkout_session_id:
      raise InvalidRequestError("Missing session_id")

    order = await db.get_order_by_checkout_session(
        self.session, checkout_session_id
    )
    if not order:
      raise ResourceNotFoundError("Order not found")

    return OrderSummary(
        id=order.id,
        number=order.number,
        email=order.email,
        total=order.total,
        currency=order.currency,
        store_id=order.store_id,
    )

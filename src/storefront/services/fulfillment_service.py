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

"""Fulfillment service that turns paid checkout sessions into orders.

The payment platform delivers events at least once, so `handle_event` must be
safe to call repeatedly for the same session. An order is looked up by its
checkout session ID before anything is written, and the unique constraint on
that column turns a concurrent second delivery into an acknowledged
duplicate instead of a second order.

On first delivery the service allocates the store's next folio, writes the
order with a snapshot of every paid line item, and decrements stock, all in a
single transaction. Any failure is raised as a 5xx so the platform redelivers.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from storefront import db
from storefront.enums import OrderStatus
from storefront.enums import PaymentEventType
from storefront.exceptions import FulfillmentError
from storefront.exceptions import InvalidRequestError
from storefront.models import PaidLineItem
from storefront.models import PaymentEvent
from storefront.models import WebhookAck
from storefront.services.payment_gateway import StripeGateway

logger = logging.getLogger(__name__)


class FulfillmentService:
  """Service for processing payment webhooks."""

  def __init__(
      self,
      session: AsyncSession,
      gateway: StripeGateway,
      default_currency: str,
      decrement_product_stock: bool = False,
  ):
    self.session = session
    self.gateway = gateway
    self.default_currency = default_currency
    self.decrement_product_stock = decrement_product_stock

  async def handle_webhook(
      self, payload: bytes, signature: Optional[str]
  ) -> WebhookAck:
    """Verifies a raw webhook delivery and fulfills it."""
    event = self.gateway.construct_event(payload, signature)
    return await self.handle_event(event)

  async def handle_event(self, event: PaymentEvent) -> WebhookAck:
    """Fulfills a verified event; non-completion events are acknowledged."""
    if event.type != PaymentEventType.CHECKOUT_SESSION_COMPLETED.value:
      logger.info("Ignoring event %s of type %s", event.id, event.type)
      return WebhookAck(ignored=True)

    checkout = event.data.get("object") or {}
    session_id = checkout.get("id")
    if not session_id:
      raise InvalidRequestError("Missing checkout session id")

    existing = await db.get_order_by_checkout_session(self.session, session_id)
    if existing:
      logger.info(
          "Order %s already recorded for session %s", existing.id, session_id
      )
      return WebhookAck(duplicate=True)

    metadata = checkout.get("metadata") or {}
    store_slug = str(metadata.get("storeSlug") or "")
    store_id = str(metadata.get("storeId") or "")
    if not store_slug or not store_id:
      raise InvalidRequestError("Missing store metadata")

    paid_items = await self.gateway.list_line_items(session_id)

    try:
      order = await self._record_order(
          checkout, session_id, store_id, paid_items
      )
      await self.session.commit()
    except IntegrityError as e:
      await self.session.rollback()
      if await db.get_order_by_checkout_session(self.session, session_id):
        logger.warning(
            "Concurrent delivery already recorded session %s", session_id
        )
        return WebhookAck(duplicate=True)
      logger.error("Failed to record order for %s: %s", session_id, e)
      raise FulfillmentError(f"Could not record order: {e}") from e
    except SQLAlchemyError as e:
      await self.session.rollback()
      logger.error("Failed to record order for %s: %s", session_id, e)
      raise FulfillmentError(f"Could not record order: {e}") from e

    logger.info(
        "Recorded order %s (folio %s) for session %s",
        order.id,
        order.number,
        session_id,
    )
    return WebhookAck(order_id=order.id, number=order.number)

  async def _record_order(
      self,
      checkout: Dict[str, Any],
      session_id: str,
      store_id: str,
      paid_items: List[PaidLineItem],
  ) -> db.Order:
    """Writes the order, its items and stock decrements to the session."""
    items = []
    subtotal = 0
    total = 0
    for paid in paid_items:
      qty = paid.quantity
      amount_subtotal = (
          paid.amount_subtotal
          if paid.amount_subtotal is not None
          else paid.unit_amount * qty
      )
      amount_total = paid.amount_total
      if amount_total is None:
        amount_total = amount_subtotal
      subtotal += amount_subtotal
      total += amount_total
      items.append(
          db.OrderItem(
              store_id=store_id,
              product_id=paid.product_id,
              variant_id=paid.variant_id,
              title=paid.title,
              unit_price=paid.unit_amount,
              qty=qty,
              amount_subtotal=amount_subtotal,
              amount_total=amount_total,
          )
      )

    session_total = checkout.get("amount_total")
    if session_total is not None and session_total != total:
      # Session-level adjustments (shipping, tax) are not itemised.
      logger.warning(
          "Session %s total %s differs from item total %s",
          session_id,
          session_total,
          total,
      )

    customer_details = checkout.get("customer_details") or {}
    email = customer_details.get("email") or checkout.get("customer_email")
    currency = (checkout.get("currency") or self.default_currency).upper()

    folio = await db.next_order_number(self.session, store_id)

    order = db.Order(
        store_id=store_id,
        number=str(folio),
        email=email,
        currency=currency,
        subtotal=subtotal,
        discount_total=subtotal - total,
        shipping_total=0,
        tax_total=0,
        total=total,
        status=OrderStatus.PAID.value,
        checkout_session_id=session_id,
    )
    await db.save_order(self.session, order, items)

    for item in items:
      await self._decrement_stock(item)

    return order

  async def _decrement_stock(self, item: db.OrderItem) -> None:
    if item.qty <= 0:
      return
    if item.variant_id:
      found = await db.decrement_variant_stock(
          self.session, item.variant_id, item.qty
      )
      if not found:
        logger.warning("Variant %s no longer exists", item.variant_id)
    elif item.product_id and self.decrement_product_stock:
      found = await db.decrement_product_stock(
          self.session, item.product_id, item.qty
      )
      if not found:
        logger.warning("Product %s no longer exists", item.product_id)

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

"""Payment platform gateway backed by Stripe Checkout.

The gateway is the only module that talks to Stripe. It turns priced line
items into hosted checkout sessions, verifies webhook signatures, and reports
the line items of a paid session in a platform-neutral shape.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from storefront.exceptions import ConfigurationError
from storefront.exceptions import PaymentGatewayError
from storefront.exceptions import SignatureVerificationError
from storefront.models import CreatedSession
from storefront.models import PaidLineItem
from storefront.models import PaymentEvent
from storefront.models import SessionLineItem
import stripe

logger = logging.getLogger(__name__)

MAX_ADJUSTABLE_QUANTITY = 99
LINE_ITEMS_PAGE_SIZE = 100


def _field(obj: Any, key: str) -> Any:
  """Reads a field from a Stripe object or a plain dict."""
  if obj is None:
    return None
  if isinstance(obj, dict):
    return obj.get(key)
  return getattr(obj, key, None)


class StripeGateway:
  """Thin async wrapper around the Stripe API."""

  def __init__(
      self, secret_key: Optional[str], webhook_secret: Optional[str] = None
  ):
    self._secret_key = secret_key
    self._webhook_secret = webhook_secret

  def _require_secret_key(self) -> str:
    if not self._secret_key:
      raise ConfigurationError("Missing STRIPE_SECRET_KEY")
    return self._secret_key

  async def create_checkout_session(
      self,
      line_items: List[SessionLineItem],
      currency: str,
      success_url: str,
      cancel_url: str,
      metadata: Dict[str, str],
  ) -> CreatedSession:
    """Creates a hosted payment-mode checkout session."""
    api_key = self._require_secret_key()
    params = [
        {
            "quantity": li.quantity,
            "price_data": {
                "currency": currency,
                "unit_amount": li.unit_amount,
                "product_data": {
                    "name": li.name,
                    "metadata": _line_item_metadata(li),
                },
            },
            "adjustable_quantity": {
                "enabled": True,
                "minimum": 1,
                "maximum": MAX_ADJUSTABLE_QUANTITY,
            },
        }
        for li in line_items
    ]

    try:
      session = await stripe.checkout.Session.create_async(
          api_key=api_key,
          mode="payment",
          line_items=params,
          success_url=success_url,
          cancel_url=cancel_url,
          customer_creation="always",
          allow_promotion_codes=True,
          metadata=metadata,
      )
    except stripe.StripeError as e:
      logger.error("Stripe checkout session creation failed: %s", e)
      raise PaymentGatewayError(str(e)) from e

    logger.info("Created checkout session %s", session.id)
    return CreatedSession(id=session.id, url=session.url)

  def construct_event(
      self, payload: bytes, signature: Optional[str]
  ) -> PaymentEvent:
    """Verifies the signature of a webhook payload and parses the event."""
    if not self._webhook_secret:
      raise ConfigurationError("Missing STRIPE_WEBHOOK_SECRET")
    if not signature:
      raise SignatureVerificationError("Missing Stripe-Signature header")

    try:
      stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
    except stripe.SignatureVerificationError as e:
      logger.warning("Webhook signature invalid: %s", e)
      raise SignatureVerificationError(f"Webhook Error: {e}") from e
    except ValueError as e:
      raise SignatureVerificationError(f"Webhook Error: {e}") from e

    body = json.loads(payload)
    return PaymentEvent(
        id=body.get("id", ""),
        type=body.get("type", ""),
        data=body.get("data") or {},
    )

  async def list_line_items(self, session_id: str) -> List[PaidLineItem]:
    """Lists the line items of a session with product metadata expanded."""
    api_key = self._require_secret_key()
    try:
      result = await stripe.checkout.Session.list_line_items_async(
          session_id,
          api_key=api_key,
          expand=["data.price.product"],
          limit=LINE_ITEMS_PAGE_SIZE,
      )
    except stripe.StripeError as e:
      logger.error("Listing line items for %s failed: %s", session_id, e)
      raise PaymentGatewayError(str(e)) from e

    items = []
    for li in result.data:
      price = _field(li, "price")
      product = _field(price, "product")
      metadata = {}
      # Unexpanded products are plain IDs and carry no metadata.
      if product is not None and not isinstance(product, str):
        metadata = _field(product, "metadata") or {}
      items.append(
          PaidLineItem(
              product_id=_field(metadata, "productId"),
              variant_id=_field(metadata, "variantId"),
              title=_field(li, "description") or "Producto",
              quantity=_field(li, "quantity") or 1,
              unit_amount=_field(price, "unit_amount") or 0,
              amount_subtotal=_field(li, "amount_subtotal"),
              amount_total=_field(li, "amount_total"),
          )
      )
    return items


def _line_item_metadata(li: SessionLineItem) -> Dict[str, str]:
  metadata = {"productId": li.product_id}
  if li.variant_id:
    metadata["variantId"] = li.variant_id
  return metadata

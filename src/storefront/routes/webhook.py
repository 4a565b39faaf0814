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

"""Payment webhook route for the storefront server."""

from typing import Optional

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Header
from fastapi import Request
from storefront import dependencies
from storefront.models import WebhookAck
from storefront.services.fulfillment_service import FulfillmentService

router = APIRouter()


@router.post(
    "/api/stripe/webhook",
    response_model=WebhookAck,
    response_model_exclude_none=True,
    operation_id="stripe_webhook",
)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    fulfillment_service: FulfillmentService = Depends(
        dependencies.get_fulfillment_service
    ),
) -> WebhookAck:
  """Receives signed payment events and records paid orders."""
  # The signature covers the exact bytes sent, so the body is read raw.
  payload = await request.body()
  return await fulfillment_service.handle_webhook(payload, stripe_signature)

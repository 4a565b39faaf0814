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

"""Checkout routes for the storefront server."""

from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from storefront import dependencies
from storefront.models import CheckoutSessionRequest
from storefront.models import CheckoutSessionResponse
from storefront.services.checkout_service import CheckoutService

router = APIRouter()


@router.post(
    "/api/checkout/session",
    response_model=CheckoutSessionResponse,
    operation_id="create_checkout_session",
)
async def create_checkout_session(
    checkout_req: CheckoutSessionRequest = Body(...),
    checkout_service: CheckoutService = Depends(
        dependencies.get_checkout_service
    ),
) -> CheckoutSessionResponse:
  """Re-prices a cart and returns the hosted checkout redirect URL."""
  url = await checkout_service.create_session(checkout_req)
  return CheckoutSessionResponse(url=url)

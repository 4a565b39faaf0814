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

"""Order lookup routes for the storefront server."""

from typing import Optional

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from storefront import dependencies
from storefront.models import OrderSummary
from storefront.services.checkout_service import CheckoutService

router = APIRouter()


@router.get(
    "/api/orders",
    response_model=OrderSummary,
    operation_id="get_order_by_session",
)
async def get_order_by_session(
    session_id: Optional[str] = Query(None),
    checkout_service: CheckoutService = Depends(
        dependencies.get_checkout_service
    ),
) -> OrderSummary:
  """Get the order recorded for a checkout session."""
  return await checkout_service.get_order_by_session(session_id or "")

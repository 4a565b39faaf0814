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

"""FastAPI dependencies for the storefront server.

This module contains dependency injection logic for FastAPI endpoints,
including:
- Database session management.
- External client construction (payment gateway, copywriter).
- Service instantiation.
- Owner identity extraction for store management endpoints.

Tests replace `get_db`, `get_payment_gateway` and `get_copywriter` through
`app.dependency_overrides`.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends
from fastapi import Header
from sqlalchemy.ext.asyncio import AsyncSession
from storefront import config
from storefront import db
from storefront.exceptions import ConfigurationError
from storefront.exceptions import UnauthorizedError
from storefront.services.checkout_service import CheckoutService
from storefront.services.copywriter import Copywriter
from storefront.services.fulfillment_service import FulfillmentService
from storefront.services.payment_gateway import StripeGateway
from storefront.services.product_service import ProductService
from storefront.services.store_service import StoreService


async def get_db() -> AsyncGenerator[AsyncSession, None]:
  """Dependency provider for a database session."""
  if db.manager.session_factory is None:
    raise ConfigurationError("Database is not configured")
  async with db.manager.session_factory() as session:
    yield session


def get_payment_gateway() -> StripeGateway:
  """Dependency provider for the payment gateway."""
  return StripeGateway(
      config.get_stripe_secret_key(), config.get_stripe_webhook_secret()
  )


def get_copywriter() -> Copywriter:
  """Dependency provider for the language-model copywriter."""
  return Copywriter.from_api_key(
      config.get_google_api_key(), config.get_copywriter_model()
  )


async def owner_id_header(
    x_owner_id: Optional[str] = Header(None, alias="X-Owner-Id"),
) -> str:
  """Extracts the authenticated owner ID set by the auth gateway."""
  if not x_owner_id:
    raise UnauthorizedError()
  return x_owner_id


def get_checkout_service(
    session: AsyncSession = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
) -> CheckoutService:
  """Dependency provider for CheckoutService."""
  return CheckoutService(
      session, gateway, config.get_site_url(), config.get_currency()
  )


def get_fulfillment_service(
    session: AsyncSession = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
) -> FulfillmentService:
  """Dependency provider for FulfillmentService."""
  return FulfillmentService(
      session,
      gateway,
      default_currency=config.get_currency(),
      decrement_product_stock=config.decrement_product_stock(),
  )


def get_store_service(
    session: AsyncSession = Depends(get_db),
) -> StoreService:
  """Dependency provider for StoreService."""
  return StoreService(session)


def get_product_service(
    session: AsyncSession = Depends(get_db),
) -> ProductService:
  """Dependency provider for ProductService."""
  return ProductService(session)

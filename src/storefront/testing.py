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

"""Test doubles and a database-backed test case for the storefront server."""

import asyncio
import hashlib
import hmac
import json
import os
import shutil
import tempfile
import time
from typing import Any, AsyncGenerator, Dict, List, Optional

from absl.testing import absltest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from storefront import db
from storefront import dependencies
from storefront.exceptions import PaymentGatewayError
from storefront.models import CreatedSession
from storefront.models import PaidLineItem
from storefront.models import SessionLineItem
from storefront.server import app
from storefront.services.copywriter import Copywriter
from storefront.services.payment_gateway import StripeGateway

WEBHOOK_SECRET = "whsec_test_secret"
OWNER_ID = "owner-1"
OTHER_OWNER_ID = "owner-2"


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET) -> str:
  """Builds a Stripe-Signature header for a payload."""
  timestamp = int(time.time())
  signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
  signature = hmac.new(
      secret.encode("utf-8"), signed, hashlib.sha256
  ).hexdigest()
  return f"t={timestamp},v1={signature}"


def completed_event(
    session_id: str,
    store_slug: Optional[str] = "demo",
    store_id: Optional[str] = "store-demo",
    amount_total: Optional[int] = None,
    email: str = "buyer@example.com",
) -> Dict[str, Any]:
  """Builds a checkout.session.completed event body."""
  metadata = {}
  if store_slug:
    metadata["storeSlug"] = store_slug
  if store_id:
    metadata["storeId"] = store_id
  return {
      "id": f"evt_{session_id}",
      "object": "event",
      "type": "checkout.session.completed",
      "data": {
          "object": {
              "id": session_id,
              "object": "checkout.session",
              "currency": "mxn",
              "amount_total": amount_total,
              "customer_details": {"email": email},
              "metadata": metadata,
          }
      },
  }


class FakePaymentGateway(StripeGateway):
  """Gateway that records sessions locally but verifies real signatures."""

  def __init__(self) -> None:
    super().__init__("sk_test_fake", WEBHOOK_SECRET)
    self.created: List[Dict[str, Any]] = []
    self.line_items: Dict[str, List[PaidLineItem]] = {}
    self.list_calls: List[str] = []
    self.fail_listing = False
    # Awaited with the session id before line items are returned.
    self.on_list = None

  async def create_checkout_session(
      self,
      line_items: List[SessionLineItem],
      currency: str,
      success_url: str,
      cancel_url: str,
      metadata: Dict[str, str],
  ) -> CreatedSession:
    session_id = f"cs_test_{len(self.created) + 1}"
    self.created.append({
        "id": session_id,
        "line_items": line_items,
        "currency": currency,
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": metadata,
    })
    return CreatedSession(
        id=session_id, url=f"https://checkout.stripe.test/{session_id}"
    )

  async def list_line_items(self, session_id: str) -> List[PaidLineItem]:
    self.list_calls.append(session_id)
    if self.on_list:
      await self.on_list(session_id)
    if self.fail_listing:
      raise PaymentGatewayError("Stripe is unavailable")
    return list(self.line_items.get(session_id, []))


class FakeCopywriter(Copywriter):
  """Copywriter that answers every prompt with a canned reply."""

  def __init__(self, reply: str = "") -> None:
    super().__init__(None, "fake-model")
    self.reply = reply
    self.prompts: List[str] = []

  async def _generate(self, prompt: str, temperature: float) -> str:
    self.prompts.append(prompt)
    return self.reply.strip()


class StorefrontTestCase(absltest.TestCase):
  """Runs the app against a temporary SQLite database and fake clients."""

  def setUp(self) -> None:
    super().setUp()
    self.test_dir = tempfile.mkdtemp()
    db_path = os.path.join(self.test_dir, "test_storefront.db")

    # NullPool keeps connections from leaking across event loops.
    self.engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}", echo=False, poolclass=NullPool
    )
    self.session_factory = sessionmaker(
        self.engine, expire_on_commit=False, class_=AsyncSession
    )

    async def init_schema() -> None:
      async with self.engine.begin() as conn:
        await conn.run_sync(db.Base.metadata.create_all)

    asyncio.run(init_schema())

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
      async with self.session_factory() as session:
        yield session

    self.gateway = FakePaymentGateway()
    self.copywriter = FakeCopywriter()

    app.dependency_overrides[dependencies.get_db] = override_get_db
    app.dependency_overrides[dependencies.get_payment_gateway] = (
        lambda: self.gateway
    )
    app.dependency_overrides[dependencies.get_copywriter] = (
        lambda: self.copywriter
    )

    self.client = TestClient(app)

  def tearDown(self) -> None:
    app.dependency_overrides.clear()
    asyncio.run(self.engine.dispose())
    shutil.rmtree(self.test_dir)
    super().tearDown()

  def run_db(self, func) -> Any:
    """Runs `func(session)` in a fresh session and returns its result."""

    async def runner() -> Any:
      async with self.session_factory() as session:
        result = await func(session)
        await session.commit()
        return result

    return asyncio.run(runner())

  def seed_catalog(self) -> None:
    """Seeds two stores, their products and a product with variants."""

    async def seed(session: AsyncSession) -> None:
      session.add_all([
          db.Store(
              id="store-demo", slug="demo", name="Demo", owner_id=OWNER_ID
          ),
          db.Store(
              id="store-other",
              slug="other",
              name="Other",
              owner_id=OTHER_OWNER_ID,
          ),
          db.Product(
              id="candle",
              store_id="store-demo",
              title="Vela de lavanda",
              price=25000,
              stock=10,
          ),
          db.Product(
              id="perfume",
              store_id="store-demo",
              title="Perfume de cedro",
              price=89000,
              stock=0,
          ),
          db.Product(
              id="retired",
              store_id="store-demo",
              title="Retired",
              price=100,
              stock=1,
              is_active=False,
          ),
          db.Product(
              id="foreign",
              store_id="store-other",
              title="Foreign",
              price=5000,
              stock=4,
          ),
          db.Variant(
              id="perfume-30",
              product_id="perfume",
              title="30 ml",
              price=89000,
              stock=5,
          ),
          db.Variant(
              id="perfume-100",
              product_id="perfume",
              title="100 ml",
              price=189000,
              stock=1,
          ),
      ])

    self.run_db(seed)

  def post_event(self, event: Dict[str, Any], signature: Optional[str] = None):
    """Posts a signed event body to the webhook endpoint."""
    payload = json.dumps(event).encode("utf-8")
    headers = {"Content-Type": "application/json"}
    headers["Stripe-Signature"] = signature or sign_payload(payload)
    return self.client.post(
        "/api/stripe/webhook", content=payload, headers=headers
    )

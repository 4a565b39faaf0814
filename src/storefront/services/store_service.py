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

"""Store service for creating stores and managing their branding."""

import logging
import re
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from storefront import db
from storefront.exceptions import ConflictError
from storefront.exceptions import ForbiddenError
from storefront.exceptions import InvalidRequestError
from storefront.exceptions import ResourceNotFoundError
from storefront.models import BrandProfile
from storefront.models import StoreCreateRequest
from storefront.models import StoreResponse
from storefront.models import StoreSettingsUpdate
from storefront.services.copywriter import Copywriter

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")


class StoreService:
  """Service for store lifecycle and branding."""

  def __init__(self, session: AsyncSession):
    self.session = session

  async def create_store(
      self, owner_id: str, store_req: StoreCreateRequest
  ) -> StoreResponse:
    """Creates a store owned by `owner_id`."""
    name = store_req.name.strip()
    slug = store_req.slug.strip().lower()
    if not name or not slug:
      raise InvalidRequestError("Name and slug are required")
    if not SLUG_PATTERN.match(slug):
      raise InvalidRequestError(
          "Slug may only contain lowercase letters, digits and hyphens"
      )

    if await db.get_store_id_by_slug(self.session, slug):
      raise ConflictError(f"Slug '{slug}' is already taken")

    try:
      store = await db.create_store(
          self.session,
          owner_id=owner_id,
          name=name,
          slug=slug,
          logo_url=store_req.logo_url or None,
          currency=(store_req.currency or "").upper() or None,
          brand_description=store_req.brand_description or None,
          brand_audience=store_req.brand_audience or None,
          brand_tone=store_req.brand_tone or None,
          support_email=store_req.support_email or None,
          support_phone=store_req.support_phone or None,
      )
      await self.session.commit()
    except IntegrityError as e:
      # A concurrent create took the slug after the check above.
      await self.session.rollback()
      raise ConflictError(f"Slug '{slug}' is already taken") from e

    logger.info("Created store %s (%s) for owner %s", slug, store.id, owner_id)
    return StoreResponse.model_validate(store)

  async def get_store(self, slug: str) -> StoreResponse:
    return StoreResponse.model_validate(await self._get_store(slug))

  async def update_settings(
      self, owner_id: str, slug: str, settings: StoreSettingsUpdate
  ) -> StoreResponse:
    """Updates colours and logo; unset fields are left untouched."""
    store = await self._get_owned_store(owner_id, slug)
    updates = settings.model_dump(exclude_unset=True)
    await db.update_store(self.session, store, updates)
    await self.session.commit()
    return StoreResponse.model_validate(store)

  async def generate_brand(
      self, owner_id: str, slug: str, copywriter: Copywriter
  ) -> BrandProfile:
    """Generates the store brand profile and persists it."""
    store = await self._get_owned_store(owner_id, slug)
    brand = await copywriter.generate_brand(
        store.name,
        description=store.brand_description or "",
        audience=store.brand_audience or "",
        tone=store.brand_tone or "",
        logo_url=store.logo_url,
    )
    await db.update_store(
        self.session,
        store,
        {
            "mission": brand.mission,
            "vision": brand.vision,
            "values": brand.values,
            "palette": brand.palette.model_dump(),
            "primary_color": brand.palette.primary,
            "secondary_color": brand.palette.secondary,
        },
    )
    await self.session.commit()
    return brand

  async def _get_store(self, slug: str) -> db.Store:
    store = await db.get_store_by_slug(self.session, slug)
    if not store:
      raise ResourceNotFoundError("Store not found")
    return store

  async def _get_owned_store(
      self, owner_id: Optional[str], slug: str
  ) -> db.Store:
    store = await self._get_store(slug)
    if store.owner_id != owner_id:
      raise ForbiddenError("Only the store owner can change this store")
    return store

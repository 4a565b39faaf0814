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

"""Store management routes for the storefront server."""

from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from fastapi import Path
from storefront import dependencies
from storefront.models import BrandProfile
from storefront.models import StoreCreateRequest
from storefront.models import StoreResponse
from storefront.models import StoreSettingsUpdate
from storefront.services.copywriter import Copywriter
from storefront.services.store_service import StoreService

router = APIRouter()


@router.post(
    "/api/stores",
    response_model=StoreResponse,
    status_code=201,
    operation_id="create_store",
)
async def create_store(
    store_req: StoreCreateRequest = Body(...),
    owner_id: str = Depends(dependencies.owner_id_header),
    store_service: StoreService = Depends(dependencies.get_store_service),
) -> StoreResponse:
  """Create a store."""
  return await store_service.create_store(owner_id, store_req)


@router.get(
    "/api/stores/{slug}",
    response_model=StoreResponse,
    operation_id="get_store",
)
async def get_store(
    slug: str = Path(...),
    store_service: StoreService = Depends(dependencies.get_store_service),
) -> StoreResponse:
  """Get a store's public profile."""
  return await store_service.get_store(slug)


@router.patch(
    "/api/stores/{slug}/settings",
    response_model=StoreResponse,
    operation_id="update_store_settings",
)
async def update_store_settings(
    slug: str = Path(...),
    settings: StoreSettingsUpdate = Body(...),
    owner_id: str = Depends(dependencies.owner_id_header),
    store_service: StoreService = Depends(dependencies.get_store_service),
) -> StoreResponse:
  """Update a store's colours and logo."""
  return await store_service.update_settings(owner_id, slug, settings)


@router.post(
    "/api/stores/{slug}/brand",
    response_model=BrandProfile,
    operation_id="generate_store_brand",
)
async def generate_store_brand(
    slug: str = Path(...),
    owner_id: str = Depends(dependencies.owner_id_header),
    store_service: StoreService = Depends(dependencies.get_store_service),
    copywriter: Copywriter = Depends(dependencies.get_copywriter),
) -> BrandProfile:
  """Generate and save the store's mission, vision, values and palette."""
  return await store_service.generate_brand(owner_id, slug, copywriter)

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

"""Product catalog routes for the storefront server."""

from typing import List

from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from fastapi import Path
from storefront import dependencies
from storefront.models import ProductCreateRequest
from storefront.models import ProductResponse
from storefront.models import ProductUpdateRequest
from storefront.models import VariantCreateRequest
from storefront.models import VariantResponse
from storefront.services.product_service import ProductService

router = APIRouter()


@router.get(
    "/api/stores/{slug}/products",
    response_model=List[ProductResponse],
    operation_id="list_products",
)
async def list_products(
    slug: str = Path(...),
    product_service: ProductService = Depends(
        dependencies.get_product_service
    ),
) -> List[ProductResponse]:
  """List a store's active products."""
  return await product_service.list_products(slug)


@router.post(
    "/api/stores/{slug}/products",
    response_model=ProductResponse,
    status_code=201,
    operation_id="create_product",
)
async def create_product(
    slug: str = Path(...),
    product_req: ProductCreateRequest = Body(...),
    owner_id: str = Depends(dependencies.owner_id_header),
    product_service: ProductService = Depends(
        dependencies.get_product_service
    ),
) -> ProductResponse:
  """Create a product."""
  return await product_service.create_product(owner_id, slug, product_req)


@router.patch(
    "/api/products/{product_id}",
    response_model=ProductResponse,
    operation_id="update_product",
)
async def update_product(
    product_id: str = Path(...),
    product_req: ProductUpdateRequest = Body(...),
    owner_id: str = Depends(dependencies.owner_id_header),
    product_service: ProductService = Depends(
        dependencies.get_product_service
    ),
) -> ProductResponse:
  """Update a product."""
  return await product_service.update_product(
      owner_id, product_id, product_req
  )


@router.post(
    "/api/products/{product_id}/variants",
    response_model=VariantResponse,
    status_code=201,
    operation_id="create_variant",
)
async def create_variant(
    product_id: str = Path(...),
    variant_req: VariantCreateRequest = Body(...),
    owner_id: str = Depends(dependencies.owner_id_header),
    product_service: ProductService = Depends(
        dependencies.get_product_service
    ),
) -> VariantResponse:
  """Add a variant to a product."""
  return await product_service.create_variant(
      owner_id, product_id, variant_req
  )

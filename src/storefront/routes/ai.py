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

"""AI copywriting routes for the storefront server."""

from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from storefront import dependencies
from storefront.exceptions import InvalidRequestError
from storefront.models import ImproveDescriptionRequest
from storefront.models import ImproveDescriptionResponse
from storefront.services.copywriter import Copywriter

router = APIRouter()


@router.post(
    "/api/ai/improve-product-description",
    response_model=ImproveDescriptionResponse,
    operation_id="improve_product_description",
)
async def improve_product_description(
    description_req: ImproveDescriptionRequest = Body(...),
    copywriter: Copywriter = Depends(dependencies.get_copywriter),
) -> ImproveDescriptionResponse:
  """Rewrite a product description with the language model."""
  if not description_req.text:
    raise InvalidRequestError("Missing original text")
  improved = await copywriter.improve_description(
      description_req.text,
      description_req.title,
      description_req.lang,
      description_req.tone,
  )
  return ImproveDescriptionResponse(improved=improved)

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

"""Storefront Server (Python/FastAPI)."""

import logging
import sys
from typing import Sequence

from absl import app as absl_app
from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from storefront import config
from storefront.exceptions import InvalidRequestError
from storefront.exceptions import StorefrontError
from storefront.routes.ai import router as ai_router
from storefront.routes.checkout import router as checkout_router
from storefront.routes.orders import router as orders_router
from storefront.routes.products import router as products_router
from storefront.routes.stores import router as stores_router
from storefront.routes.webhook import router as webhook_router
import uvicorn

# --- App Setup ---

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Storefront Service",
    version="0.1.0",
    description="Multi-tenant storefront with hosted checkout",
    lifespan=config.lifespan,
)


@app.exception_handler(StorefrontError)
async def storefront_exception_handler(
    request: Request, exc: StorefrontError
):
  """Converts storefront exceptions to JSON responses."""
  if exc.status_code >= 500:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
  return JSONResponse(
      status_code=exc.status_code,
      content={"detail": exc.message, "code": exc.code},
  )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
):
  """Renders malformed request bodies as 400 storefront errors."""
  logger.info(
      "Rejected %s %s: %s", request.method, request.url.path, exc.errors()
  )
  return await storefront_exception_handler(
      request, InvalidRequestError("Bad request")
  )


app.include_router(checkout_router)
app.include_router(webhook_router)
app.include_router(orders_router)
app.include_router(stores_router)
app.include_router(products_router)
app.include_router(ai_router)


def main(argv: Sequence[str]) -> None:
  """Main entry point for the storefront server."""
  del argv  # Unused.
  logging.basicConfig(level=logging.INFO)

  if not config.get_database_url():
    logger.error(
        "--database_url (or STOREFRONT_DATABASE_URL) must be provided."
    )
    print("\nUsage:")
    print(config.FLAGS.main_module_help())
    sys.exit(1)

  uvicorn.run(app, host=config.FLAGS.host, port=config.FLAGS.port)


def run() -> None:
  absl_app.run(main)


if __name__ == "__main__":
  run()

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

"""Shared configuration and startup logic for the storefront server.

Runtime knobs are absl flags; secrets and site settings are read from the
environment, optionally populated from a `.env` file.
"""

import contextlib
import os
from typing import Any, Optional

from absl import flags
from dotenv import load_dotenv
from fastapi import FastAPI
from storefront import db

load_dotenv()

FLAGS = flags.FLAGS

DEFAULT_SITE_URL = "http://localhost:3000"
DEFAULT_COPYWRITER_MODEL = "gemini-2.5-flash"

# Define flags only if they haven't been defined yet (to avoid duplicates
# during tests or re-imports)
try:
  flags.DEFINE_string(
      "database_url",
      None,
      "SQLAlchemy async database URL, e.g. sqlite+aiosqlite:///store.db",
  )
  flags.DEFINE_string("host", "0.0.0.0", "Host to bind the server to")
  flags.DEFINE_integer("port", 8000, "Port to run the server on")
  flags.DEFINE_string(
      "currency", "mxn", "ISO currency code used for checkout sessions"
  )
  flags.DEFINE_bool(
      "decrement_product_stock",
      False,
      "Also decrement product stock for purchased items without a variant",
  )
except flags.DuplicateFlagError:
  pass


def flag_value(name: str) -> Any:
  """Returns a flag value, or its default when flags are unparsed."""
  if FLAGS.is_parsed():
    return getattr(FLAGS, name)
  return FLAGS[name].value


def get_database_url() -> Optional[str]:
  return flag_value("database_url") or os.getenv("STOREFRONT_DATABASE_URL")


def get_currency() -> str:
  return flag_value("currency").lower()


def decrement_product_stock() -> bool:
  return bool(flag_value("decrement_product_stock"))


def get_site_url() -> str:
  return (os.getenv("SITE_URL") or DEFAULT_SITE_URL).rstrip("/")


def get_stripe_secret_key() -> Optional[str]:
  return os.getenv("STRIPE_SECRET_KEY") or None


def get_stripe_webhook_secret() -> Optional[str]:
  return os.getenv("STRIPE_WEBHOOK_SECRET") or None


def get_google_api_key() -> Optional[str]:
  return os.getenv("GOOGLE_API_KEY") or None


def get_copywriter_model() -> str:
  return os.getenv("COPYWRITER_MODEL") or DEFAULT_COPYWRITER_MODEL


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
  """Initializes the database on startup and disposes of it on shutdown."""
  del app  # Unused.
  # Tests install their own sessions through dependency overrides.
  database_url = get_database_url()
  if database_url:
    await db.manager.init_db(database_url)
  yield
  await db.manager.close()

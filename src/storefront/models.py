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

"""Request, response and gateway models for the storefront server.

Checkout payloads keep the camelCase field names the storefront client sends;
everything else is snake_case. Amounts are integer minor units (cents).
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class _CamelModel(BaseModel):
  model_config = ConfigDict(populate_by_name=True)


# --- Checkout ---


class CheckoutItem(_CamelModel):
  """A cart line as submitted by the storefront client."""

  id: str = ""
  qty: int = 0
  variant_id: Optional[str] = Field(default=None, alias="variantId")


class CheckoutSessionRequest(_CamelModel):
  store_slug: str = Field(default="", alias="storeSlug")
  items: List[CheckoutItem] = []


class CheckoutSessionResponse(BaseModel):
  url: str


class SessionLineItem(BaseModel):
  """A priced line item sent to the payment platform."""

  name: str
  unit_amount: int
  quantity: int
  product_id: str
  variant_id: Optional[str] = None


class CreatedSession(BaseModel):
  id: str
  url: str


# --- Webhook ---


class PaymentEvent(BaseModel):
  """A verified payment platform event."""

  id: str
  type: str
  data: Dict[str, Any] = {}


class PaidLineItem(BaseModel):
  """A line item of a paid session, as reported by the payment platform."""

  product_id: Optional[str] = None
  variant_id: Optional[str] = None
  title: str = "Producto"
  quantity: int = 1
  unit_amount: int = 0
  amount_subtotal: Optional[int] = None
  amount_total: Optional[int] = None


class WebhookAck(BaseModel):
  received: bool = True
  ignored: Optional[bool] = None
  duplicate: Optional[bool] = None
  order_id: Optional[str] = None
  number: Optional[str] = None


# --- Orders ---


class OrderSummary(BaseModel):
  id: str
  number: str
  email: Optional[str] = None
  total: int
  currency: str
  store_id: str


# --- Stores ---


class StoreCreateRequest(BaseModel):
  name: str = ""
  slug: str = ""
  logo_url: Optional[str] = None
  currency: Optional[str] = None
  brand_description: Optional[str] = None
  brand_audience: Optional[str] = None
  brand_tone: Optional[str] = None
  support_email: Optional[str] = None
  support_phone: Optional[str] = None


class StoreSettingsUpdate(BaseModel):
  primary_color: Optional[str] = None
  secondary_color: Optional[str] = None
  logo_url: Optional[str] = None


class Palette(BaseModel):
  colors: List[str] = []
  primary: str = ""
  secondary: str = ""


class BrandProfile(BaseModel):
  mission: str
  vision: str
  values: List[str]
  palette: Palette


class StoreResponse(BaseModel):
  model_config = ConfigDict(from_attributes=True)

  id: str
  slug: str
  name: str
  currency: Optional[str] = None
  logo_url: Optional[str] = None
  primary_color: Optional[str] = None
  secondary_color: Optional[str] = None
  brand_description: Optional[str] = None
  brand_audience: Optional[str] = None
  brand_tone: Optional[str] = None
  mission: Optional[str] = None
  vision: Optional[str] = None
  values: Optional[List[str]] = None
  palette: Optional[Palette] = None
  support_email: Optional[str] = None
  support_phone: Optional[str] = None


# --- Products ---


class ProductCreateRequest(BaseModel):
  title: str = ""
  price: int
  stock: int = 0
  sku: Optional[str] = None
  description: Optional[str] = None
  media_url: Optional[str] = None


class ProductUpdateRequest(BaseModel):
  price: Optional[int] = None
  stock: Optional[int] = None
  media_url: Optional[str] = None
  description: Optional[str] = None
  is_active: Optional[bool] = None


class VariantCreateRequest(BaseModel):
  sku: Optional[str] = None
  title: Optional[str] = None
  price: int
  stock: int = 0


class VariantResponse(BaseModel):
  model_config = ConfigDict(from_attributes=True)

  id: str
  product_id: str
  sku: Optional[str] = None
  title: Optional[str] = None
  price: int
  stock: int


class ProductResponse(BaseModel):
  model_config = ConfigDict(from_attributes=True)

  id: str
  store_id: str
  title: str
  price: int
  stock: int
  sku: Optional[str] = None
  description: Optional[str] = None
  media_url: Optional[str] = None
  is_active: bool
  variants: List[VariantResponse] = []


# --- AI copywriting ---


class ImproveDescriptionRequest(BaseModel):
  text: Optional[str] = None
  title: Optional[str] = None
  lang: str = "es"
  tone: str = "claro y persuasivo"


class ImproveDescriptionResponse(BaseModel):
  improved: str

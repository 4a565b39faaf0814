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

"""Language-model copywriting for product descriptions and brand identity."""

import json
import logging
from typing import List, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from storefront.exceptions import ConfigurationError
from storefront.exceptions import CopywriterError
from storefront.models import BrandProfile
from storefront.models import Palette

logger = logging.getLogger(__name__)

DESCRIPTION_TEMPERATURE = 0.6
BRAND_TEMPERATURE = 0.3
PALETTE_SIZE = 5

DEFAULT_VISION = (
    "Ser referente de su categoría en 2–3 años, con foco en satisfacción del"
    " cliente y sustentabilidad."
)
DEFAULT_VALUES = [
    "Calidad",
    "Confianza",
    "Innovación",
    "Cercanía",
    "Responsabilidad",
]
DEFAULT_PALETTE = Palette(
    colors=["#111827", "#1F2937", "#3B82F6", "#10B981", "#F59E0B"],
    primary="#3B82F6",
    secondary="#10B981",
)

_CATEGORY_KEYWORDS = {
    "fragrance": ["perfume", "fragancia", "eau", "colonia"],
    "mushroom": [
        "melena de león",
        "cordyceps",
        "reishi",
        "chaga",
        "shiitake",
        "hongo",
        "suplemento",
    ],
    "botanical": [
        "aceite",
        "jabón",
        "velas",
        "incienso",
        "aroma",
        "herbal",
        "esencia",
    ],
}

_CATEGORY_BRIEFS = {
    "fragrance": (
        "Eres un redactor experto en perfumería y estilo de vida.",
        "Perfume",
        [
            "Utiliza lenguaje evocador, elegante y sensorial.",
            "Identifica el tipo de fragancia si se puede inferir.",
            "Resalta las notas principales si están presentes.",
            "Incluye 2–3 viñetas con emociones o momentos ideales de uso.",
            "No inventes notas ni efectos no mencionados.",
        ],
    ),
    "mushroom": (
        "Eres un redactor especializado en bienestar y hongos medicinales.",
        "Producto natural",
        [
            "Explica brevemente los beneficios generalmente conocidos.",
            "Usa lenguaje accesible, sin hacer afirmaciones médicas.",
            "Incluye 2–3 viñetas con sus aportes o formas de consumo.",
            "Mantén un estilo cálido, sin tono de venta agresivo.",
        ],
    ),
    "botanical": (
        "Eres un redactor de productos botánicos y de bienestar.",
        "Producto botánico",
        [
            "Destaca los ingredientes principales y sus aromas.",
            "Explica la sensación o ambiente que evoca.",
            "Incluye 2 viñetas con beneficios sensoriales o momentos de uso.",
            "No prometas efectos médicos ni milagrosos.",
        ],
    ),
    "general": (
        "Eres un copywriter experto en descripciones de productos.",
        "Producto",
        [
            "Usa un lenguaje claro, atractivo y profesional.",
            "Resalta las ventajas o usos más importantes del producto.",
            "Si aplica, incluye 2–3 viñetas con características clave.",
            "Evita repeticiones, palabras vacías o afirmaciones falsas.",
        ],
    ),
}


def detect_category(title: Optional[str]) -> str:
  """Picks a copywriting category from keywords in a product title."""
  name = (title or "").lower()
  for category, keywords in _CATEGORY_KEYWORDS.items():
    if any(keyword in name for keyword in keywords):
      return category
  return "general"


def build_description_prompt(
    text: str, title: Optional[str], lang: str, tone: str
) -> str:
  role, fallback_title, rules = _CATEGORY_BRIEFS[detect_category(title)]
  bullet_rules = "\n".join(f"- {rule}" for rule in rules)
  return (
      f"{role}\n"
      f"Reescribe la descripción del producto en {lang},"
      f" con un tono {tone}.\n\n"
      f"{bullet_rules}\n\n"
      f'Nombre del producto:\n"""{title or fallback_title}"""\n\n'
      f'Descripción original:\n"""{text}"""'
  )


def build_brand_prompt(
    name: str,
    description: str,
    audience: str,
    tone: str,
    logo_url: Optional[str],
) -> str:
  return f"""Eres estratega de marca e identidad visual.
Datos:
- Nombre: {name}
- Descripción: {description}
- Público objetivo: {audience}
- Tono de voz: {tone}
- Logo: {logo_url or "sin logo"}

Devuelve JSON con claves exactamente:
{{
  "mission":"...",
  "vision":"...",
  "values":["v1","v2","v3","v4","v5"],
  "palette":{{"colors":["#112233","#445566","#778899","#AABBCC","#DDEEFF"],"primary":"#112233","secondary":"#778899"}}
}}"""


def parse_brand_response(text: str, name: str) -> BrandProfile:
  """Extracts the brand JSON from a model reply, filling in defaults.

  The model may wrap the object in prose or code fences, so the outermost
  braces are located first. Missing or malformed fields fall back to
  defaults derived from the store name.
  """
  data = {}
  start = text.find("{")
  end = text.rfind("}")
  if start >= 0 and end > start:
    try:
      data = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
      logger.warning("Brand response is not valid JSON: %s", e)
  if not isinstance(data, dict):
    data = {}

  mission = str(data.get("mission") or "")
  vision = str(data.get("vision") or "")
  raw_values = data.get("values")
  values: List[str] = (
      [str(v) for v in raw_values] if isinstance(raw_values, list) else []
  )

  palette = Palette()
  raw_palette = data.get("palette")
  if isinstance(raw_palette, dict) and isinstance(
      raw_palette.get("colors"), list
  ):
    colors = [str(c) for c in raw_palette["colors"]][:PALETTE_SIZE]
    first = colors[0] if colors else ""
    second = colors[1] if len(colors) > 1 else ""
    palette = Palette(
        colors=colors,
        primary=str(raw_palette.get("primary") or first),
        secondary=str(raw_palette.get("secondary") or second),
    )

  return BrandProfile(
      mission=mission or f"Hacer crecer {name} con calidad y cercanía.",
      vision=vision or DEFAULT_VISION,
      values=values or list(DEFAULT_VALUES),
      palette=palette if palette.colors else DEFAULT_PALETTE.model_copy(),
  )


class Copywriter:
  """Generates marketing copy with a hosted language model."""

  def __init__(self, client: Optional[genai.Client], model: str):
    self._client = client
    self._model = model

  @classmethod
  def from_api_key(cls, api_key: Optional[str], model: str) -> "Copywriter":
    client = genai.Client(api_key=api_key) if api_key else None
    return cls(client, model)

  async def _generate(self, prompt: str, temperature: float) -> str:
    if self._client is None:
      raise ConfigurationError("Missing GOOGLE_API_KEY")
    response = await self._client.aio.models.generate_content(
        model=self._model,
        contents=prompt,
        config=types.GenerateContentConfig(temperature=temperature),
    )
    return (response.text or "").strip()

  async def improve_description(
      self, text: str, title: Optional[str], lang: str, tone: str
  ) -> str:
    """Rewrites a product description; returns the original on empty output."""
    prompt = build_description_prompt(text, title, lang, tone)
    try:
      improved = await self._generate(prompt, DESCRIPTION_TEMPERATURE)
    except genai_errors.APIError as e:
      logger.error("Description rewrite failed: %s", e)
      raise CopywriterError(str(e)) from e
    return improved or text

  async def generate_brand(
      self,
      name: str,
      description: str = "",
      audience: str = "",
      tone: str = "",
      logo_url: Optional[str] = None,
  ) -> BrandProfile:
    """Generates mission, vision, values and palette for a store.

    Brand generation never fails the caller: without a configured model, or
    when the model errors, the defaults are returned.
    """
    prompt = build_brand_prompt(name, description, audience, tone, logo_url)
    try:
      text = await self._generate(prompt, BRAND_TEMPERATURE)
    except ConfigurationError:
      logger.warning("GOOGLE_API_KEY not configured; using brand defaults")
      text = ""
    except genai_errors.APIError as e:
      logger.error("Brand generation failed: %s", e)
      text = ""
    return parse_brand_response(text, name)

"""AI inventory import - turns a free-text description into inventory rows via OpenAI"""

import json
import logging
import time
from typing import Any, Optional

from openai import AsyncOpenAI

from ...config import OPENAI_MODEL
from ...models import INVENTORY_CATEGORIES
from .csv_importer import InventoryImportError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert veterinary inventory assistant. Parse the user's description and create a structured inventory list for a Mexican veterinary clinic.

IMPORTANT: Return ONLY valid JSON without any markdown formatting or code blocks.

Generate realistic Mexican veterinary inventory items with:
- Appropriate Spanish names and descriptions
- Mexican peso pricing (realistic market rates)
- Proper categories: "medication", "supplies", "food", "accessories"
- SKU codes following pattern: CAT-NAME-SPEC (e.g., MED-AMX-500, SUP-JER-3ML)
- Realistic stock levels and min/max thresholds
- Mexican units (tabletas, frascos, ml, kg, piezas, etc.)

Categories guidelines:
- medication: antibiotics, anti-inflammatories, vaccines, dewormers, anesthetics
- supplies: syringes, gauze, catheters, gloves, disinfectants, surgical tools
- food: therapeutic diets, treats, supplements
- accessories: collars, carriers, leashes, toys, grooming tools

Return a JSON object with an "items" array using this exact structure:
{"items": [
  {
    "name": "Product name in Spanish",
    "description": "Detailed description in Spanish",
    "category": "medication|supplies|food|accessories",
    "sku": "CATEGORY-CODE-SPEC",
    "unitPrice": 0.00,
    "currentStock": 0,
    "minStockLevel": 0,
    "maxStockLevel": 0,
    "unit": "unit in Spanish"
  }
]}"""


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    return int(number) if number is not None else None


def parse_ai_response(content: Optional[str]) -> list[dict]:
    """Accept a bare JSON array or an object wrapping it in "items" / "inventory" """
    if not content:
        raise InventoryImportError("No response from OpenAI")
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error(f"❌ Failed to parse AI response: {content[:500]}")
        raise InventoryImportError("Invalid AI response format") from e

    if isinstance(parsed, dict):
        parsed = parsed.get("items") or parsed.get("inventory") or []
    if not isinstance(parsed, list) or not parsed:
        raise InventoryImportError("AI did not generate valid inventory items")
    return [item for item in parsed if isinstance(item, dict)]


def normalize_ai_items(raw_items: list[dict]) -> list[dict]:
    """Clamp and default model output into InventoryItem column dicts"""
    stamp = int(time.time() * 1000)
    items = []
    for index, item in enumerate(raw_items):
        category = item.get("category")
        min_stock = max(1, _to_int(item.get("minStockLevel")) or 5)
        max_stock = max(10, _to_int(item.get("maxStockLevel")) or 100)
        if max_stock <= min_stock:
            max_stock = min_stock * 3

        items.append(
            {
                "name": str(item.get("name") or f"Producto {index + 1}").strip(),
                "description": str(item.get("description") or "").strip(),
                "category": category if category in INVENTORY_CATEGORIES else "supplies",
                "sku": str(item.get("sku") or f"GEN-{stamp}-{index}").strip(),
                "unit_price": round(max(0.0, _to_float(item.get("unitPrice")) or 10.0), 2),
                "current_stock": max(0, _to_int(item.get("currentStock")) or 50),
                "min_stock_level": min_stock,
                "max_stock_level": max_stock,
                "unit": str(item.get("unit") or "pieza").strip(),
            }
        )
    if not items:
        raise InventoryImportError("AI did not generate valid inventory items")
    return items


async def generate_inventory_items(client: AsyncOpenAI, description: str) -> list[dict]:
    """
    Ask the model for an inventory list matching the description.

    Raises:
        InventoryImportError: when the model returns nothing usable
    """
    logger.info(f"🤖 Requesting AI inventory ({len(description)} chars) from {OPENAI_MODEL}")
    response = await client.chat.completions.create(
        model=OPENAI_MODEL,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f"Create veterinary inventory from this description: {description}",
            },
        ],
        response_format={"type": "json_object"},
        temperature=0.7,
        max_tokens=4000,
    )
    content = response.choices[0].message.content if response.choices else None
    return normalize_ai_items(parse_ai_response(content))

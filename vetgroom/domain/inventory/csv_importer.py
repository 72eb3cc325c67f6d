"""
CSV inventory import.

Expected header (Spanish, as exported from the clinic's spreadsheet):
Categoria, Nombre, Descripcion, Precio Proveedor (MXN), Precio Venta (MXN),
SKU, Stock, Unidad and optionally Proveedor.
"""

import csv
import logging
import re
import time
from io import StringIO
from typing import Optional

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    "Categoria",
    "Nombre",
    "Descripcion",
    "Precio Proveedor (MXN)",
    "Precio Venta (MXN)",
    "SKU",
    "Stock",
    "Unidad",
]

CATEGORY_MAP = {
    "vacuna": "medication",
    "medicamento": "medication",
    "medico": "medication",
    "medicina": "medication",
    "accesorio": "accessories",
    "accesorios": "accessories",
    "juguete": "accessories",
    "juguetes": "accessories",
    "alimento": "food",
    "comida": "food",
    "grooming": "supplies",
    "estetica": "supplies",
    "estética": "supplies",
    "suministro": "supplies",
    "suministros": "supplies",
}

DEFAULT_MARKUP = 1.5


class InventoryImportError(ValueError):
    """Raised when an import payload cannot produce any inventory"""


def map_category(value: Optional[str]) -> str:
    return CATEGORY_MAP.get((value or "").strip().lower(), "supplies")


def parse_number(value: Optional[str]) -> Optional[float]:
    """Lenient number parsing: '$1,250.50' -> 1250.5, junk -> None"""
    if value is None:
        return None
    cleaned = re.sub(r"[$\s,]", "", str(value))
    match = re.match(r"-?\d+(\.\d+)?", cleaned)
    return float(match.group(0)) if match else None


def parse_inventory_csv(csv_data: str) -> list[dict]:
    """
    Turn CSV text into InventoryItem column dicts.

    Raises:
        InventoryImportError: on a missing header row, missing required
            columns, or when no row yields a product
    """
    lines = [line for line in csv_data.strip().splitlines() if line.strip()]
    if len(lines) < 2:
        raise InventoryImportError(
            "El archivo CSV debe contener al menos una fila de encabezados y una fila de datos"
        )

    rows = list(csv.reader(StringIO("\n".join(lines)), skipinitialspace=True))
    headers = [h.strip() for h in rows[0]]

    missing = [col for col in REQUIRED_COLUMNS if col not in headers]
    if missing:
        raise InventoryImportError(f"Faltan las siguientes columnas requeridas: {', '.join(missing)}")

    stamp = int(time.time() * 1000)
    items = []
    for line_number, values in enumerate(rows[1:], start=1):
        if len(values) < len(headers):
            logger.warning(f"⚠️ Skipping CSV line {line_number + 1}: insufficient columns")
            continue

        row = {header: values[index].strip() for index, header in enumerate(headers)}

        supplier_price = parse_number(row["Precio Proveedor (MXN)"]) or 0.0
        sale_price = parse_number(row["Precio Venta (MXN)"]) or supplier_price * DEFAULT_MARKUP
        stock = int(parse_number(row["Stock"]) or 0)

        items.append(
            {
                "name": row["Nombre"] or f"Producto {line_number}",
                "description": row["Descripcion"],
                "category": map_category(row["Categoria"]),
                "sku": row["SKU"] or f"CSV-{stamp}-{line_number}",
                "unit_price": round(sale_price, 2),
                "current_stock": stock,
                "min_stock_level": max(1, int(stock * 0.1)),
                "max_stock_level": max(10, stock * 2),
                "unit": row["Unidad"] or "pieza",
                "supplier": row.get("Proveedor", ""),
            }
        )

    if not items:
        raise InventoryImportError("No se encontraron productos válidos en el archivo CSV")

    logger.info(f"📥 Parsed {len(items)} inventory rows from CSV")
    return items

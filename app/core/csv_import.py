"""
Importación masiva de productos y precios desde CSV.

Formato:
- Primera fila = encabezados.
- Separador ";" si el encabezado contiene uno, si no ",".
- Comillas estándar de CSV (campos con separadores o comillas escapadas).
- UTF-8 (con o sin BOM); si no decodifica se intenta Latin-1 (Excel).

Cada fila se procesa y se confirma por separado: un error en una fila se
reporta como "Fila N: ..." (N = número de fila de datos, desde 1) y no
detiene el resto del archivo.
"""
import csv
import io
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, List, Dict, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import APIError, ValidationError
from core.slugs import slugify
from core.catalog_service import validate_pricing
from models.products import Product, Category, PLACEHOLDER_IMAGE

logger = logging.getLogger(__name__)

PRODUCT_REQUIRED_COLUMNS = ["productId", "name", "description", "quantity", "image"]

PRICE_ID_ALIASES = ("productid", "codigo", "id", "product_id", "sku")
PRICE_ALIASES = ("price", "precio", "valor", "monto", "price_clp")
SALE_PRICE_ALIASES = ("saleprice", "sale_price", "precio_oferta", "descuento")

MAX_REPORTED_PRICE_ERRORS = 20

# Límites de las columnas price (Numeric(12, 2)) y quantity (Integer)
MAX_PRICE = Decimal("9999999999.99")
MAX_QUANTITY = 2147483647

_PRICE_NOISE = re.compile(r"[$.\s]")
_PRICE_FORMAT = re.compile(r"^\d+(\.\d+)?$")


class RowError(Exception):
    """Error de una fila; no detiene la importación."""


# ==================== PARSEO ====================

def parse_price(raw: Optional[str]) -> Optional[Decimal]:
    """
    Interpretar un precio en formato local.

    "$1.990" -> 1990, "1 990" -> 1990, "1990,5" -> 1990.5
    Retorna None si el texto no es un número no negativo.
    """
    if raw is None:
        return None
    cleaned = _PRICE_NOISE.sub("", raw).replace(",", ".", 1)
    if not _PRICE_FORMAT.match(cleaned):
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def decode_upload(content: bytes) -> str:
    """Validar tamaño y decodificar el archivo subido."""
    if not content:
        raise ValidationError("No se subió ningún archivo o está vacío", "EMPTY_FILE")

    if len(content) > settings.MAX_UPLOAD_SIZE:
        max_mb = settings.MAX_UPLOAD_SIZE / (1024 * 1024)
        raise ValidationError(
            f"El archivo excede el tamaño máximo permitido ({max_mb:.0f}MB)",
            "FILE_TOO_LARGE"
        )

    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def read_csv(text: str) -> Tuple[List[str], List[List[str]]]:
    """
    Separar encabezados y filas de datos (las filas vacías se ignoran).
    """
    lines = text.splitlines()
    header_line = next((line for line in lines if line.strip()), "")
    delimiter = ";" if ";" in header_line else ","

    try:
        rows = [
            [value.strip() for value in row]
            for row in csv.reader(io.StringIO(text), delimiter=delimiter)
            if any(value.strip() for value in row)
        ]
    except csv.Error as e:
        raise ValidationError(f"El archivo CSV no es válido: {e}", "INVALID_CSV")

    if len(rows) < 2:
        raise ValidationError(
            "El archivo está vacío o no tiene filas de datos",
            "EMPTY_FILE"
        )

    return rows[0], rows[1:]


def _cell(values: List[str], index: Optional[int]) -> str:
    if index is None or index >= len(values):
        return ""
    return values[index]


# ==================== PRODUCTOS ====================

def _apply_product_row(db: Session, row: Dict[str, str]) -> bool:
    """
    Crear o actualizar (por productId) un producto a partir de una fila.
    Retorna True si el producto fue creado.
    """
    product_id = row.get("productId", "")
    name = row.get("name", "")
    description = row.get("description", "")

    if not product_id:
        raise RowError("productId es obligatorio")
    if not name:
        raise RowError("name es obligatorio")
    if not description:
        raise RowError("description es obligatorio")

    price = None
    raw_price = row.get("price") or row.get("precio")
    if raw_price:
        price = parse_price(raw_price)
        if price is None:
            raise RowError(f'Precio inválido "{raw_price}"')
        if price > MAX_PRICE:
            raise RowError(f'Precio fuera de rango "{raw_price}"')

    try:
        quantity = int(row.get("quantity", ""))
    except ValueError:
        quantity = 0
    if quantity < 0 or quantity > MAX_QUANTITY:
        raise RowError(f"Cantidad inválida {quantity}")

    slug = slugify(name)
    if not slug:
        raise RowError("El nombre debe contener letras o números")

    slug_owner = db.query(Product.product_id).filter(Product.slug == slug).first()
    if slug_owner and slug_owner.product_id != product_id:
        raise RowError(f'El slug "{slug}" ya pertenece al producto {slug_owner.product_id}')

    category_id = None
    if row.get("category"):
        category = db.query(Category.id).filter(Category.code == row["category"]).first()
        if category:
            category_id = category.id

    product = db.query(Product).filter(Product.product_id == product_id).first()
    created = product is None
    if created:
        product = Product(product_id=product_id)
        db.add(product)

    product.name = name
    product.slug = slug
    product.description = description
    product.quantity = quantity
    product.image = row.get("image") or PLACEHOLDER_IMAGE
    product.category_id = category_id
    product.featured = row.get("featured") == "true"
    product.is_active = row.get("isActive") != "false"
    if price is not None:
        product.price = price

    validate_pricing(product.price, product.sale_price)
    db.commit()
    return created


def import_products(db: Session, text: str) -> Dict:
    """
    Importación masiva de productos (upsert por productId).

    Returns:
        {imported, created, updated, errors}
    """
    headers, rows = read_csv(text)

    missing = [column for column in PRODUCT_REQUIRED_COLUMNS if column not in headers]
    if missing:
        raise ValidationError(
            f"Faltan columnas obligatorias: {', '.join(missing)}",
            "MISSING_COLUMNS"
        )

    created = 0
    updated = 0
    errors: List[str] = []

    for number, values in enumerate(rows, start=1):
        row = {header: _cell(values, index) for index, header in enumerate(headers)}
        try:
            if _apply_product_row(db, row):
                created += 1
            else:
                updated += 1
        except RowError as e:
            db.rollback()
            errors.append(f"Fila {number}: {e}")
        except APIError as e:
            db.rollback()
            errors.append(f"Fila {number}: {e.message}")
        except IntegrityError:
            db.rollback()
            errors.append(f"Fila {number}: el producto entra en conflicto con uno existente")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Importación de productos - fila {number}: {e}")
            errors.append(f"Fila {number}: no se pudo guardar el producto")

    for error in errors:
        logger.warning(f"⚠️ Importación de productos - {error}")
    logger.info(
        f"📦 Importación de productos: {created} creados, {updated} actualizados, "
        f"{len(errors)} errores"
    )

    return {
        "imported": created + updated,
        "created": created,
        "updated": updated,
        "errors": errors,
    }


# ==================== PRECIOS ====================

def _find_column(headers: List[str], aliases) -> Optional[int]:
    for index, header in enumerate(headers):
        if header in aliases:
            return index
    return None


def import_prices(db: Session, text: str) -> Dict:
    """
    Actualizar precios por productId.

    Returns:
        {updated, notFound, errors (primeros 20), totalErrors}
    """
    headers, rows = read_csv(text)
    headers = [header.lower() for header in headers]

    id_index = _find_column(headers, PRICE_ID_ALIASES)
    price_index = _find_column(headers, PRICE_ALIASES)
    sale_index = _find_column(headers, SALE_PRICE_ALIASES)

    if id_index is None:
        raise ValidationError(
            "Falta la columna obligatoria: productId (o codigo, id, sku)",
            "MISSING_COLUMNS"
        )
    if price_index is None:
        raise ValidationError(
            "Falta la columna obligatoria: price (o precio, valor, monto)",
            "MISSING_COLUMNS"
        )

    updated = 0
    not_found = 0
    errors: List[str] = []

    for number, values in enumerate(rows, start=1):
        product_id = _cell(values, id_index)
        raw_price = _cell(values, price_index)
        if not product_id or not raw_price:
            continue

        price = parse_price(raw_price)
        if price is None:
            errors.append(f'Fila {number}: Precio inválido "{raw_price}"')
            continue

        if price > MAX_PRICE:
            errors.append(f'Fila {number}: Precio fuera de rango "{raw_price}"')
            continue

        sale_price = parse_price(_cell(values, sale_index)) if sale_index is not None else None

        try:
            product = db.query(Product).filter(Product.product_id == product_id).first()
            if not product:
                not_found += 1
                errors.append(f'Fila {number}: Producto "{product_id}" no encontrado')
                continue

            product.price = price
            if sale_price is not None and sale_price < price:
                product.sale_price = sale_price
            elif product.sale_price is not None and product.sale_price >= price:
                # Una oferta que ya no es menor al nuevo precio deja de aplicar
                product.sale_price = None
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Importación de precios - fila {number}: {e}")
            errors.append(f'Fila {number}: no se pudo actualizar el precio de "{product_id}"')
            continue
        updated += 1

    logger.info(
        f"💲 Importación de precios: {updated} actualizados, {not_found} no encontrados, "
        f"{len(errors)} errores"
    )

    return {
        "updated": updated,
        "notFound": not_found,
        "errors": errors[:MAX_REPORTED_PRICE_ERRORS],
        "totalErrors": len(errors),
    }

"""
Servicio de cotizaciones.

- Los totales (totalItems, totalUnits) se calculan siempre en el servidor.
- El número de cotización es "COT-YYMM-NNNN"; NNNN sale de un contador
  atómico por mes (tabla quote_counters) y se reinicia cada mes.
- Los cambios de estado pasan por check_status_transition().
"""
import logging
from datetime import datetime
from typing import Optional, List, Dict

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.dates import utcnow, month_range, isoformat
from core.errors import ValidationError
from models.quote import Quote, QuoteItem, QuoteCounter, QuoteStatus, QuoteSource
from schemas.quotes import QuoteCreate, QuoteUpdate, QuoteItemIn

logger = logging.getLogger(__name__)

QUOTE_STATUSES = [status.value for status in QuoteStatus]

MONTH_NAMES = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]

QUOTE_SORT_COLUMNS = {
    "createdAt": Quote.created_at,
    "updatedAt": Quote.updated_at,
    "quoteNumber": Quote.quote_number,
    "status": Quote.status,
    "totalUnits": Quote.total_units,
}


def _money(value) -> Optional[float]:
    return float(value) if value is not None else None


def format_quote(quote: Quote) -> dict:
    return {
        "id": quote.id,
        "quoteNumber": quote.quote_number,
        "items": [
            {
                "productId": item.product_id,
                "productName": item.product_name,
                "quantity": item.quantity,
                "description": item.description,
            }
            for item in quote.items
        ],
        "totalItems": quote.total_items,
        "totalUnits": quote.total_units,
        "quotedAmount": _money(quote.quoted_amount),
        "finalAmount": _money(quote.final_amount),
        "customerName": quote.customer_name,
        "customerEmail": quote.customer_email,
        "customerPhone": quote.customer_phone,
        "customerCompany": quote.customer_company,
        "notes": quote.notes,
        "status": quote.status,
        "source": quote.source,
        "createdAt": isoformat(quote.created_at),
        "updatedAt": isoformat(quote.updated_at),
    }


# ==================== NUMERACIÓN ====================

def _increment_counter(db: Session, key: str) -> Optional[int]:
    """UPDATE ... SET value = value + 1 RETURNING value (None si no existe la fila)."""
    result = db.execute(
        update(QuoteCounter)
        .where(QuoteCounter.key == key)
        .values(value=QuoteCounter.value + 1)
        .returning(QuoteCounter.value)
        .execution_options(synchronize_session=False)
    )
    return result.scalar()


def _highest_number_for(db: Session, prefix: str) -> int:
    highest = 0
    numbers = db.query(Quote.quote_number).filter(Quote.quote_number.like(f"{prefix}%")).all()
    for (number,) in numbers:
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return highest


def next_quote_number(db: Session, now: Optional[datetime] = None) -> str:
    """
    Reservar el siguiente número del mes: "COT-2610-0001", "COT-2610-0002", ...

    La primera cotización del mes crea la fila del contador partiendo del
    mayor número ya emitido con ese prefijo. Si otra transacción la crea
    primero, se reintenta el incremento.
    """
    now = now or utcnow()
    key = now.strftime("%y%m")
    prefix = f"COT-{key}-"

    value = _increment_counter(db, key)
    if value is None:
        value = _highest_number_for(db, prefix) + 1
        try:
            with db.begin_nested():
                db.add(QuoteCounter(key=key, value=value))
        except IntegrityError:
            value = _increment_counter(db, key)

    return f"{prefix}{value:04d}"


# ==================== ESTADOS ====================

def check_status_transition(current: str, new: Optional[str]) -> str:
    """
    Validar un cambio de estado.
    Cualquier estado puede pasar a cualquier otro; solo se exige que
    el nuevo estado sea uno de los seis conocidos.
    """
    if not new or new not in QUOTE_STATUSES:
        raise ValidationError(
            f"Estado inválido. Debe ser uno de: {', '.join(QUOTE_STATUSES)}",
            "INVALID_STATUS"
        )
    return new


# ==================== CRUD ====================

def _replace_items(quote: Quote, items: List[QuoteItemIn]) -> None:
    if not items:
        raise ValidationError("La cotización debe tener al menos un producto", "EMPTY_ITEMS")

    quote.items = [
        QuoteItem(
            position=position,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            description=item.description,
        )
        for position, item in enumerate(items)
    ]
    quote.total_items = len(items)
    quote.total_units = sum(item.quantity for item in items)


def create_quote(db: Session, data: QuoteCreate) -> Quote:
    quote = Quote(
        customer_name=data.customer_name,
        customer_email=data.customer_email,
        customer_phone=data.customer_phone,
        customer_company=data.customer_company,
        notes=data.notes,
        status=QuoteStatus.PENDING.value,
        source=(data.source or QuoteSource.WEB).value,
        created_at=utcnow(),
    )
    _replace_items(quote, data.items)

    quote.quote_number = next_quote_number(db, quote.created_at)
    db.add(quote)
    db.commit()
    db.refresh(quote)

    logger.info(
        f"📝 Cotización {quote.quote_number} creada: "
        f"{quote.total_items} productos, {quote.total_units} unidades"
    )
    return quote


def update_quote(db: Session, quote: Quote, data: QuoteUpdate) -> Quote:
    changes = data.model_dump(exclude_unset=True)

    if "items" in changes:
        changes.pop("items")
        _replace_items(quote, data.items or [])

    if "status" in changes:
        quote.status = check_status_transition(quote.status, changes.pop("status"))

    if "source" in changes:
        source = changes.pop("source")
        if source is not None:
            quote.source = QuoteSource(source).value

    for field, value in changes.items():
        setattr(quote, field, value)

    db.commit()
    db.refresh(quote)

    logger.info(f"🔄 Cotización {quote.quote_number} actualizada")
    return quote


def update_quote_status(db: Session, quote: Quote, status: Optional[str]) -> Quote:
    previous = quote.status
    quote.status = check_status_transition(previous, status)
    db.commit()
    db.refresh(quote)

    logger.info(f"🔄 Cotización {quote.quote_number}: {previous} → {quote.status}")
    return quote


def delete_quote(db: Session, quote: Quote) -> None:
    number = quote.quote_number
    db.delete(quote)
    db.commit()
    logger.info(f"🗑️ Cotización eliminada: {number}")


# ==================== ESTADÍSTICAS ====================

def quote_stats(db: Session) -> Dict[str, int]:
    """Total y conteo por estado (los estados sin cotizaciones valen 0)."""
    counts = dict(
        db.query(Quote.status, func.count(Quote.id)).group_by(Quote.status).all()
    )
    stats = {"total": sum(counts.values())}
    for status in QUOTE_STATUSES:
        stats[status] = counts.get(status, 0)
    return stats


def _sale_amount(quote: Quote):
    if quote.final_amount is not None:
        return quote.final_amount
    if quote.quoted_amount is not None:
        return quote.quoted_amount
    return 0


def monthly_sales(db: Session, year: int, month: int) -> dict:
    """
    Ventas de un mes: cotizaciones completadas creadas en el mes.

    totalAmount usa finalAmount, si no quotedAmount, si no 0.
    conversionRate = completadas / total del mes * 100, con un decimal.
    """
    if month < 1 or month > 12:
        raise ValidationError("El mes debe estar entre 1 y 12", "INVALID_MONTH")

    start, end = month_range(year, month)
    in_month = db.query(Quote).filter(Quote.created_at >= start, Quote.created_at <= end)

    completed = in_month.filter(Quote.status == QuoteStatus.COMPLETED.value).all()
    total_quotes = in_month.count()

    total_units = sum(quote.total_units for quote in completed)
    total_amount = sum(float(_sale_amount(quote)) for quote in completed)
    conversion_rate = (
        f"{len(completed) / total_quotes * 100:.1f}" if total_quotes > 0 else "0"
    )

    return {
        "year": year,
        "month": month,
        "monthName": MONTH_NAMES[month - 1],
        "sales": {
            "count": len(completed),
            "totalUnits": total_units,
            "totalAmount": total_amount,
            "totalQuotes": total_quotes,
            "conversionRate": conversion_rate,
        },
    }

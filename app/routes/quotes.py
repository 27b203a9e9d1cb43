from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date, datetime, time, timezone

from core.database import get_db
from core.dependencies import CurrentUser, get_current_admin_user
from core.errors import NotFoundError, ValidationError
from core.pagination import apply_sort, paginate
from core import quote_service
from core.quote_service import format_quote, QUOTE_SORT_COLUMNS, QUOTE_STATUSES
from models.quote import Quote
from schemas.quotes import QuoteCreate, QuoteUpdate, QuoteStatusUpdate

router = APIRouter(
    prefix="/quotes",
    tags=["quotes"]
)


def get_quote_or_404(db: Session, quote_id: int) -> Quote:
    quote = db.query(Quote).filter(Quote.id == quote_id).first()
    if not quote:
        raise NotFoundError("Cotización no encontrada", "QUOTE_NOT_FOUND")
    return quote


@router.post("", status_code=201)
async def create_quote(
    quote_data: QuoteCreate,
    db: Session = Depends(get_db)
):
    """
    Enviar una solicitud de cotización desde el carrito (público).

    Los totales se calculan en el servidor y el número COT-YYMM-NNNN
    se asigna automáticamente.
    """
    quote = quote_service.create_quote(db, quote_data)

    return {
        "success": True,
        "status_code": 201,
        "message": "Cotización enviada exitosamente",
        "data": format_quote(quote)
    }


@router.get("")
async def list_quotes(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = Query(None, description="Filtrar por estado"),
    date_from: Optional[date] = Query(None, alias="dateFrom", description="Desde (YYYY-MM-DD, inclusive)"),
    date_to: Optional[date] = Query(None, alias="dateTo", description="Hasta (YYYY-MM-DD, inclusive)"),
    search: Optional[str] = Query(None, description="Número, nombre, email o empresa"),
    sort: str = Query("createdAt"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Listar cotizaciones (solo administradores).
    """
    query = db.query(Quote)

    if status:
        if status not in QUOTE_STATUSES:
            raise ValidationError(
                f"Estado inválido. Debe ser uno de: {', '.join(QUOTE_STATUSES)}",
                "INVALID_STATUS"
            )
        query = query.filter(Quote.status == status)

    if date_from:
        query = query.filter(
            Quote.created_at >= datetime.combine(date_from, time.min, tzinfo=timezone.utc)
        )
    if date_to:
        query = query.filter(
            Quote.created_at <= datetime.combine(date_to, time.max, tzinfo=timezone.utc)
        )

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            Quote.quote_number.ilike(pattern),
            Quote.customer_name.ilike(pattern),
            Quote.customer_email.ilike(pattern),
            Quote.customer_company.ilike(pattern)
        ))

    query = apply_sort(query, QUOTE_SORT_COLUMNS, sort, order, "createdAt")
    quotes, pagination = paginate(query, page, limit)

    return {
        "success": True,
        "status_code": 200,
        "message": "Cotizaciones obtenidas exitosamente",
        "data": [format_quote(q) for q in quotes],
        "pagination": pagination
    }


@router.get("/stats")
async def get_quote_stats(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Total de cotizaciones y conteo por estado (solo administradores).
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Estadísticas obtenidas exitosamente",
        "data": quote_service.quote_stats(db)
    }


@router.get("/{quote_id}")
async def get_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    quote = get_quote_or_404(db, quote_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Cotización obtenida exitosamente",
        "data": format_quote(quote)
    }


@router.put("/{quote_id}")
async def update_quote(
    quote_id: int,
    quote_data: QuoteUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Actualizar una cotización (solo administradores).
    Si se reemplazan los items, los totales se recalculan.
    """
    quote = get_quote_or_404(db, quote_id)
    quote = quote_service.update_quote(db, quote, quote_data)

    return {
        "success": True,
        "status_code": 200,
        "message": "Cotización actualizada exitosamente",
        "data": format_quote(quote)
    }


@router.put("/{quote_id}/status")
async def update_quote_status(
    quote_id: int,
    status_data: QuoteStatusUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Cambiar el estado de una cotización (solo administradores).

    Estados: pending, contacted, quoted, approved, rejected, completed.
    """
    quote = get_quote_or_404(db, quote_id)
    quote = quote_service.update_quote_status(db, quote, status_data.status)

    return {
        "success": True,
        "status_code": 200,
        "message": "Estado actualizado exitosamente",
        "data": format_quote(quote)
    }


@router.delete("/{quote_id}")
async def delete_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    quote = get_quote_or_404(db, quote_id)
    quote_service.delete_quote(db, quote)

    return {
        "success": True,
        "status_code": 200,
        "message": "Cotización eliminada exitosamente"
    }

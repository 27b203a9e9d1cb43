"""
Utilidades de fechas. Todas las fechas de la API se manejan en UTC.
"""
import calendar
from datetime import datetime, timezone
from typing import Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def month_range(year: int, month: int) -> Tuple[datetime, datetime]:
    """
    Rango inclusivo de un mes calendario (month 1-12):
    desde el día 1 a las 00:00:00 hasta el último día a las 23:59:59.999999.
    """
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    end = datetime(year, month, last_day, 23, 59, 59, 999999, tzinfo=timezone.utc)
    return start, end


def isoformat(value) -> str:
    return value.isoformat() if value else None

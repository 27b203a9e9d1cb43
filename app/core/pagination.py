"""
Paginación y ordenamiento compartidos por los listados.
"""
from typing import Dict, Tuple, List, Any, Optional


def apply_sort(query, columns: Dict[str, Any], sort: Optional[str], order: str, default: str):
    """
    Ordenar por un campo permitido (nombre camelCase de la API).
    Campos desconocidos usan el default.
    """
    column = columns.get(sort or default, columns[default])
    return query.order_by(column.asc() if order == "asc" else column.desc())


def paginate(query, page: int, limit: int) -> Tuple[List[Any], Dict[str, int]]:
    """
    Contar total, aplicar offset/limit y construir la metadata
    {page, limit, total, totalPages}.
    """
    total = query.count()
    offset = (page - 1) * limit
    items = query.offset(offset).limit(limit).all()
    total_pages = (total + limit - 1) // limit
    return items, {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
    }

"""
Búsqueda de imágenes de stock (Pexels) para el panel de administración.
"""
from fastapi import APIRouter, Depends, Query
from typing import Optional

from core.dependencies import CurrentUser, get_current_admin_user
from core.errors import ValidationError, ServiceUnavailableError
from core.pexels_service import pexels_service

router = APIRouter(
    prefix="/images",
    tags=["images"]
)

SERVICE_UNAVAILABLE = "Servicio de imágenes no disponible. Revise la configuración de la API."


@router.get("/search")
async def search_images(
    query: Optional[str] = Query(None, description="Texto a buscar"),
    page: int = Query(1, ge=1),
    per_page: int = Query(15, ge=1, le=80, alias="perPage"),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    if not query or not query.strip():
        raise ValidationError("El parámetro query es obligatorio", "QUERY_REQUIRED")

    result = await pexels_service.search_photos(query.strip(), page, per_page)
    if result is None:
        raise ServiceUnavailableError(SERVICE_UNAVAILABLE, "IMAGE_SERVICE_UNAVAILABLE")

    return {
        "success": True,
        "status_code": 200,
        "message": "Imágenes obtenidas exitosamente",
        "data": result
    }


@router.get("/curated")
async def curated_images(
    page: int = Query(1, ge=1),
    per_page: int = Query(15, ge=1, le=80, alias="perPage"),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    result = await pexels_service.curated_photos(page, per_page)
    if result is None:
        raise ServiceUnavailableError(SERVICE_UNAVAILABLE, "IMAGE_SERVICE_UNAVAILABLE")

    return {
        "success": True,
        "status_code": 200,
        "message": "Imágenes obtenidas exitosamente",
        "data": result
    }

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from core.dependencies import CurrentUser, get_current_admin_user
from core.errors import NotFoundError
from core import catalog_service
from core.catalog_service import format_category
from models.products import Category
from schemas.products import CategoryCreate, CategoryUpdate

router = APIRouter(
    prefix="/categories",
    tags=["categories"]
)


def get_category_or_404(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Categoría no encontrada", "CATEGORY_NOT_FOUND")
    return category


@router.get("")
async def list_categories(db: Session = Depends(get_db)):
    """
    Listar categorías activas ordenadas por `order` y nombre.

    Si una categoría no tiene imagen se muestra la de uno de sus productos.
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Categorías obtenidas exitosamente",
        "data": catalog_service.list_public_categories(db)
    }


@router.get("/slug/{slug}")
async def get_category_by_slug(slug: str, db: Session = Depends(get_db)):
    category = db.query(Category).filter(
        Category.slug == slug,
        Category.is_active == True
    ).first()

    if not category:
        raise NotFoundError("Categoría no encontrada", "CATEGORY_NOT_FOUND")

    return {
        "success": True,
        "status_code": 200,
        "message": "Categoría obtenida exitosamente",
        "data": format_category(category)
    }


@router.get("/{category_id}")
async def get_category(category_id: int, db: Session = Depends(get_db)):
    category = get_category_or_404(db, category_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Categoría obtenida exitosamente",
        "data": format_category(category)
    }


@router.post("", status_code=201)
async def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Crear una nueva categoría (solo administradores).

    El código CAT-NNN y el slug se generan automáticamente.
    """
    category = catalog_service.create_category(db, category_data)

    return {
        "success": True,
        "status_code": 201,
        "message": "Categoría creada exitosamente",
        "data": format_category(category)
    }


@router.put("/{category_id}")
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Actualizar una categoría (solo administradores).
    Enviar `parent: null` la convierte en categoría raíz.
    """
    category = get_category_or_404(db, category_id)
    category = catalog_service.update_category(db, category, category_data)

    return {
        "success": True,
        "status_code": 200,
        "message": "Categoría actualizada exitosamente",
        "data": format_category(category)
    }


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Eliminar una categoría (solo administradores).
    No se puede eliminar si tiene productos o subcategorías.
    """
    category = get_category_or_404(db, category_id)
    catalog_service.delete_category(db, category)

    return {
        "success": True,
        "status_code": 200,
        "message": "Categoría eliminada exitosamente"
    }

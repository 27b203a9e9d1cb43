from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from core.database import get_db
from core.dependencies import CurrentUser, get_current_admin_user, get_optional_current_user
from core.errors import NotFoundError
from core.pagination import apply_sort, paginate
from core import catalog_service
from core.catalog_service import format_product, PRODUCT_SORT_COLUMNS
from models.products import Product
from schemas.products import ProductCreate, ProductUpdate

router = APIRouter(
    prefix="/products",
    tags=["products"]
)


def get_product_or_404(db: Session, product_id: int, active_only: bool = True) -> Product:
    query = db.query(Product).filter(Product.id == product_id)
    if active_only:
        query = query.filter(Product.is_active == True)
    product = query.first()
    if not product:
        raise NotFoundError("Producto no encontrado", "PRODUCT_NOT_FOUND")
    return product


@router.get("")
async def list_products(
    page: int = Query(1, ge=1, description="Número de página"),
    limit: int = Query(12, ge=1, le=100, description="Items por página"),
    search: Optional[str] = Query(None, description="Buscar en nombre y descripción"),
    category: Optional[str] = Query(None, description="Slug(s) o ID(s) de categoría separados por coma"),
    featured: Optional[bool] = Query(None, description="Solo productos destacados"),
    random: bool = Query(False, description="Muestra aleatoria de productos"),
    sort: str = Query("createdAt", description="Campo de orden"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db)
):
    """
    Listar productos activos con filtros y paginación.

    - **category**: acepta varios valores ("tazas,poleras"); los que no existen se ignoran
    - **random**: retorna `limit` productos al azar (sin paginación real)
    """
    query = catalog_service.build_product_query(
        db,
        search=search,
        category=category,
        featured=True if featured else None,
        is_active=True
    )

    if random:
        products = catalog_service.random_products(query, limit)
        pagination = {"page": 1, "limit": limit, "total": len(products), "totalPages": 1}
    else:
        query = apply_sort(query, PRODUCT_SORT_COLUMNS, sort, order, "createdAt")
        products, pagination = paginate(query, page, limit)

    return {
        "success": True,
        "status_code": 200,
        "message": "Productos obtenidos exitosamente",
        "data": [format_product(p) for p in products],
        "pagination": pagination
    }


@router.get("/slug/{slug}")
async def get_product_by_slug(
    slug: str,
    db: Session = Depends(get_db)
):
    """
    Obtener un producto activo por su slug.
    """
    product = db.query(Product).filter(
        Product.slug == slug,
        Product.is_active == True
    ).first()

    if not product:
        raise NotFoundError("Producto no encontrado", "PRODUCT_NOT_FOUND")

    return {
        "success": True,
        "status_code": 200,
        "message": "Producto obtenido exitosamente",
        "data": format_product(product)
    }


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[CurrentUser] = Depends(get_optional_current_user)
):
    """
    Obtener un producto por su ID.
    Los administradores también pueden ver productos inactivos.
    """
    is_admin = current_user is not None and current_user.is_admin
    product = get_product_or_404(db, product_id, active_only=not is_admin)

    return {
        "success": True,
        "status_code": 200,
        "message": "Producto obtenido exitosamente",
        "data": format_product(product)
    }


@router.post("", status_code=201)
async def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Crear un nuevo producto (solo administradores).

    El slug se genera a partir del nombre.
    """
    product = catalog_service.create_product(db, product_data)

    return {
        "success": True,
        "status_code": 201,
        "message": "Producto creado exitosamente",
        "data": format_product(product)
    }


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Actualizar un producto (solo administradores).
    Solo se modifican los campos enviados.
    """
    product = get_product_or_404(db, product_id, active_only=False)
    product = catalog_service.update_product(db, product, product_data)

    return {
        "success": True,
        "status_code": 200,
        "message": "Producto actualizado exitosamente",
        "data": format_product(product)
    }


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Eliminar un producto (solo administradores).
    Las cotizaciones existentes conservan su copia del producto.
    """
    product = get_product_or_404(db, product_id, active_only=False)
    catalog_service.delete_product(db, product)

    return {
        "success": True,
        "status_code": 200,
        "message": "Producto eliminado exitosamente"
    }

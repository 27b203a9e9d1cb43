"""
Panel de administración: dashboard, ventas, usuarios, productos y categorías.
Todos los endpoints requieren rol de administrador.
"""
from fastapi import APIRouter, Depends, Query, UploadFile, File
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from typing import Optional

from core.database import get_db
from core.dates import utcnow
from core.dependencies import CurrentUser, get_current_admin_user
from core.errors import ValidationError
from core.pagination import apply_sort, paginate
from core import catalog_service, csv_import, quote_service
from core.catalog_service import format_category, format_product, PRODUCT_SORT_COLUMNS
from core.quote_service import format_quote
from core.user_service import format_user, get_user_or_404, create_user, set_password
from models.products import Product, Category
from models.quote import Quote, QuoteStatus
from models.user import User
from routes.categories import get_category_or_404
from schemas.products import CategoryCreate, CategoryUpdate
from schemas.users import UserAdminCreate, UserAdminUpdate, UserPasswordReset

router = APIRouter(
    prefix="/admin",
    tags=["admin"]
)

USER_SORT_COLUMNS = {
    "createdAt": User.created_at,
    "email": User.email,
    "firstName": User.first_name,
    "lastName": User.last_name,
    "role": User.role,
}


async def read_csv_upload(file: Optional[UploadFile]) -> str:
    if file is None:
        raise ValidationError("No se subió ningún archivo", "NO_FILE")
    content = await file.read()
    return csv_import.decode_upload(content)


# ==================== DASHBOARD ====================

@router.get("/dashboard")
async def get_dashboard(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Resumen de productos, usuarios y cotizaciones.
    """
    recent_quotes = db.query(Quote).order_by(Quote.created_at.desc()).limit(5).all()

    return {
        "success": True,
        "status_code": 200,
        "message": "Dashboard obtenido exitosamente",
        "data": {
            "products": {
                "total": db.query(func.count(Product.id)).scalar(),
                "active": db.query(func.count(Product.id)).filter(Product.is_active == True).scalar(),
                "featured": db.query(func.count(Product.id)).filter(Product.featured == True).scalar(),
                "outOfStock": db.query(func.count(Product.id)).filter(Product.quantity == 0).scalar(),
            },
            "users": {
                "total": db.query(func.count(User.id)).scalar(),
            },
            "quotes": {
                "total": db.query(func.count(Quote.id)).scalar(),
                "pending": db.query(func.count(Quote.id)).filter(
                    Quote.status == QuoteStatus.PENDING.value
                ).scalar(),
                "recent": [format_quote(q) for q in recent_quotes],
            },
        }
    }


@router.get("/sales/monthly")
async def get_monthly_sales(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, description="Mes (1-12)"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Ventas concretadas (cotizaciones completadas) de un mes.
    Por defecto el mes actual.
    """
    now = utcnow()
    data = quote_service.monthly_sales(
        db,
        year if year is not None else now.year,
        month if month is not None else now.month
    )

    return {
        "success": True,
        "status_code": 200,
        "message": "Ventas del mes obtenidas exitosamente",
        "data": data
    }


# ==================== USUARIOS ====================

@router.get("/users")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    role: Optional[str] = Query(None, description="admin o user"),
    search: Optional[str] = Query(None, description="Buscar por nombre, apellido o email"),
    sort: str = Query("createdAt"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    query = db.query(User)

    if role:
        query = query.filter(User.role == role)

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            User.first_name.ilike(pattern),
            User.last_name.ilike(pattern),
            User.email.ilike(pattern)
        ))

    query = apply_sort(query, USER_SORT_COLUMNS, sort, order, "createdAt")
    users, pagination = paginate(query, page, limit)

    return {
        "success": True,
        "status_code": 200,
        "message": "Usuarios obtenidos exitosamente",
        "data": [format_user(u) for u in users],
        "pagination": pagination
    }


@router.get("/users/{user_id}")
async def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    user = get_user_or_404(db, user_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Usuario obtenido exitosamente",
        "data": format_user(user)
    }


@router.post("/users", status_code=201)
async def create_user_admin(
    user_data: UserAdminCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Crear un usuario o administrador. Queda verificado desde el inicio.
    """
    user = create_user(
        db,
        email=user_data.email,
        password=user_data.password,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        phone=user_data.phone,
        company=user_data.company,
        role=user_data.role,
        is_verified=True
    )

    return {
        "success": True,
        "status_code": 201,
        "message": "Usuario creado exitosamente",
        "data": format_user(user)
    }


@router.put("/users/{user_id}")
async def update_user_admin(
    user_id: int,
    user_data: UserAdminUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    user = get_user_or_404(db, user_id)
    changes = user_data.model_dump(exclude_unset=True)

    for field, value in changes.items():
        # Nombre, rol y estado no aceptan null
        if value is None and field in ("first_name", "last_name", "role", "is_active"):
            continue
        setattr(user, field, value)

    db.commit()
    db.refresh(user)

    return {
        "success": True,
        "status_code": 200,
        "message": "Usuario actualizado exitosamente",
        "data": format_user(user)
    }


@router.put("/users/{user_id}/password")
async def reset_user_password(
    user_id: int,
    password_data: UserPasswordReset,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    user = get_user_or_404(db, user_id)
    set_password(db, user, password_data.password)

    return {
        "success": True,
        "status_code": 200,
        "message": "Contraseña actualizada exitosamente"
    }


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    user = get_user_or_404(db, user_id)
    if user.id == current_user.id:
        raise ValidationError("No puedes eliminar tu propia cuenta", "CANNOT_DELETE_SELF")

    db.delete(user)
    db.commit()

    return {
        "success": True,
        "status_code": 200,
        "message": "Usuario eliminado exitosamente"
    }


# ==================== PRODUCTOS ====================

@router.get("/products")
async def list_products_admin(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Nombre, descripción o código"),
    category: Optional[str] = Query(None, description="Slug(s) de categoría separados por coma"),
    featured: Optional[bool] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    sort: str = Query("createdAt"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Listar productos incluyendo inactivos.
    """
    query = catalog_service.build_product_query(
        db,
        search=search,
        category=category,
        featured=featured,
        is_active=is_active,
        search_product_id=True
    )
    query = apply_sort(query, PRODUCT_SORT_COLUMNS, sort, order, "createdAt")
    products, pagination = paginate(query, page, limit)

    return {
        "success": True,
        "status_code": 200,
        "message": "Productos obtenidos exitosamente",
        "data": [format_product(p) for p in products],
        "pagination": pagination
    }


@router.post("/products/import")
async def import_products(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Importar productos desde CSV (crea o actualiza por productId).

    Columnas obligatorias: productId, name, description, quantity, image.
    Opcionales: category (código CAT-NNN), featured, isActive, price/precio.
    """
    text = await read_csv_upload(file)
    result = csv_import.import_products(db, text)

    message = f"{result['imported']} productos importados"
    if result["errors"]:
        message += f" con {len(result['errors'])} errores"

    return {
        "success": True,
        "status_code": 200,
        "message": message,
        "data": result
    }


@router.post("/products/import-prices")
async def import_prices(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Actualizar precios desde CSV.

    Columnas: productId (o codigo, id, sku), price (o precio, valor, monto)
    y opcionalmente salePrice (o precio_oferta, descuento).
    """
    text = await read_csv_upload(file)
    result = csv_import.import_prices(db, text)

    message = f"{result['updated']} precios actualizados"
    if result["notFound"]:
        message += f", {result['notFound']} productos no encontrados"
    if result["totalErrors"]:
        message += f" con {result['totalErrors']} errores"

    return {
        "success": True,
        "status_code": 200,
        "message": message,
        "data": result
    }


# ==================== CATEGORÍAS ====================

@router.get("/categories")
async def list_categories_admin(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """Todas las categorías, incluidas las inactivas"""
    categories = db.query(Category).order_by(Category.order.asc(), Category.name.asc()).all()

    return {
        "success": True,
        "status_code": 200,
        "message": "Categorías obtenidas exitosamente",
        "data": [format_category(c) for c in categories]
    }


@router.post("/categories", status_code=201)
async def create_category_admin(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    category = catalog_service.create_category(db, category_data)

    return {
        "success": True,
        "status_code": 201,
        "message": "Categoría creada exitosamente",
        "data": format_category(category)
    }


@router.post("/categories/reconcile")
async def reconcile_categories(
    assign_orphans: bool = Query(False, alias="assignOrphans"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Recalcular productCount de todas las categorías.
    Con assignOrphans=true, los productos sin categoría reciben una categoría raíz al azar.
    """
    result = catalog_service.reconcile_category_counts(db, assign_orphans=assign_orphans)

    return {
        "success": True,
        "status_code": 200,
        "message": "Conteo de productos actualizado",
        "data": result
    }


@router.put("/categories/{category_id}")
async def update_category_admin(
    category_id: int,
    category_data: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    category = get_category_or_404(db, category_id)
    category = catalog_service.update_category(db, category, category_data)

    return {
        "success": True,
        "status_code": 200,
        "message": "Categoría actualizada exitosamente",
        "data": format_category(category)
    }


@router.delete("/categories/{category_id}")
async def delete_category_admin(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    category = get_category_or_404(db, category_id)
    catalog_service.delete_category(db, category)

    return {
        "success": True,
        "status_code": 200,
        "message": "Categoría eliminada exitosamente"
    }

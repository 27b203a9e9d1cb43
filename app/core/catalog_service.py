"""
Servicio de catálogo: productos y categorías.

Reglas de negocio:
- El slug se deriva siempre del nombre (core.slugs.slugify).
- salePrice debe ser menor que price cuando ambos existen.
- categoryId se genera como "CAT-NNN" a partir del mayor número existente.
- productCount es un cache: solo lo recalcula reconcile_category_counts().
- Una categoría con productos o subcategorías no se puede eliminar.
"""
import logging
import random
import re
from decimal import Decimal
from typing import Optional, List, Dict, Any

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.dates import isoformat
from core.errors import ValidationError, NotFoundError, ConflictError
from core.slugs import slugify
from models.products import Product, Category, PLACEHOLDER_IMAGE, DEFAULT_CURRENCY
from schemas.products import ProductCreate, ProductUpdate, CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)

CATEGORY_CODE_PATTERN = re.compile(r"^CAT-(\d+)$")

PRODUCT_SORT_COLUMNS = {
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
    "name": Product.name,
    "price": Product.price,
    "quantity": Product.quantity,
    "productId": Product.product_id,
}


# ==================== FORMATOS DE RESPUESTA ====================

def _money(value) -> Optional[float]:
    return float(value) if value is not None else None


def format_category_summary(category: Optional[Category]) -> Optional[dict]:
    """Datos mínimos de la categoría embebidos en un producto"""
    if category is None:
        return None
    return {
        "id": category.id,
        "categoryId": category.code,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "icon": category.icon,
    }


def format_category(category: Category, image: Optional[str] = None) -> dict:
    return {
        "id": category.id,
        "categoryId": category.code,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "image": image if image is not None else category.image,
        "icon": category.icon,
        "parent": category.parent_id,
        "order": category.order,
        "isActive": category.is_active,
        "productCount": category.product_count,
        "createdAt": isoformat(category.created_at),
        "updatedAt": isoformat(category.updated_at),
    }


def format_product(product: Product) -> dict:
    return {
        "id": product.id,
        "productId": product.product_id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "category": format_category_summary(product.category),
        "quantity": product.quantity,
        "price": _money(product.price),
        "salePrice": _money(product.sale_price),
        "currency": product.currency,
        "image": product.image,
        "featured": product.featured,
        "isActive": product.is_active,
        "createdAt": isoformat(product.created_at),
        "updatedAt": isoformat(product.updated_at),
    }


# ==================== VALIDACIONES ====================

def validate_pricing(price: Optional[Decimal], sale_price: Optional[Decimal]) -> None:
    """salePrice < price cuando ambos están presentes."""
    if price is not None and sale_price is not None and Decimal(sale_price) >= Decimal(price):
        raise ValidationError(
            "El precio oferta debe ser menor al precio regular",
            "INVALID_SALE_PRICE"
        )


def _slug_for(name: str) -> str:
    slug = slugify(name)
    if not slug:
        raise ValidationError("El nombre debe contener letras o números", "INVALID_NAME")
    return slug


def _commit(db: Session, conflict_message: str, conflict_code: str) -> None:
    """Commit que traduce violaciones de unicidad a 409."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(conflict_message, conflict_code)


def _ensure_product_unique(
    db: Session,
    product_id: Optional[str] = None,
    slug: Optional[str] = None,
    exclude_id: Optional[int] = None
) -> None:
    if product_id is not None:
        query = db.query(Product.id).filter(Product.product_id == product_id)
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise ConflictError(
                f"Ya existe un producto con el código {product_id}",
                "DUPLICATE_PRODUCT_ID"
            )

    if slug is not None:
        query = db.query(Product.id).filter(Product.slug == slug)
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise ConflictError(
                "Ya existe un producto con ese nombre (slug duplicado)",
                "DUPLICATE_SLUG"
            )


def get_category_reference(db: Session, category_id: Optional[int]) -> Optional[Category]:
    """Resolver la categoría referenciada por un producto (None = sin categoría)."""
    if category_id is None:
        return None
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise ValidationError(
            f"La categoría {category_id} no existe",
            "CATEGORY_NOT_FOUND"
        )
    return category


# ==================== PRODUCTOS ====================

def resolve_category_filter(db: Session, raw: Optional[str]) -> List[int]:
    """
    Resolver "tazas,CAT-3,12" a IDs de categoría.
    Valores numéricos se tratan como ID y el resto como slug;
    los que no existen se descartan silenciosamente.
    """
    if not raw:
        return []

    ids = []
    for value in (v.strip() for v in raw.split(",")):
        if not value:
            continue
        if value.isdigit():
            category = db.query(Category.id).filter(Category.id == int(value)).first()
        else:
            category = db.query(Category.id).filter(Category.slug == value).first()
        if category and category.id not in ids:
            ids.append(category.id)
    return ids


def build_product_query(
    db: Session,
    search: Optional[str] = None,
    category: Optional[str] = None,
    featured: Optional[bool] = None,
    is_active: Optional[bool] = None,
    search_product_id: bool = False
):
    """
    Query base de listados de productos.
    Si ninguna categoría del filtro existe, no se filtra por categoría.
    """
    query = db.query(Product)

    if is_active is not None:
        query = query.filter(Product.is_active == is_active)

    if featured is not None:
        query = query.filter(Product.featured == featured)

    if search:
        pattern = f"%{search.strip()}%"
        conditions = [Product.name.ilike(pattern), Product.description.ilike(pattern)]
        if search_product_id:
            conditions.append(Product.product_id.ilike(pattern))
        query = query.filter(or_(*conditions))

    category_ids = resolve_category_filter(db, category)
    if category_ids:
        query = query.filter(Product.category_id.in_(category_ids))

    return query


def random_products(query, limit: int) -> List[Product]:
    """Muestra aleatoria (no determinística) para widgets de recomendación."""
    return query.order_by(func.random()).limit(limit).all()


def create_product(db: Session, data: ProductCreate) -> Product:
    validate_pricing(data.price, data.sale_price)
    slug = _slug_for(data.name)
    _ensure_product_unique(db, product_id=data.product_id, slug=slug)
    category = get_category_reference(db, data.category)

    product = Product(
        product_id=data.product_id,
        name=data.name,
        slug=slug,
        description=data.description,
        category_id=category.id if category else None,
        quantity=data.quantity,
        price=data.price,
        sale_price=data.sale_price,
        currency=(data.currency or DEFAULT_CURRENCY).upper(),
        image=data.image or PLACEHOLDER_IMAGE,
        featured=data.featured,
        is_active=data.is_active,
    )
    db.add(product)
    _commit(db, "El producto ya existe", "DUPLICATE_PRODUCT")
    db.refresh(product)

    logger.info(f"🆕 Producto creado: {product.product_id} ({product.slug})")
    return product


# Campos que no aceptan null en una actualización (un null se ignora)
_REQUIRED_PRODUCT_FIELDS = {"product_id", "name", "description", "quantity", "currency", "featured", "is_active"}


def update_product(db: Session, product: Product, data: ProductUpdate) -> Product:
    changes = data.model_dump(exclude_unset=True)
    for field in _REQUIRED_PRODUCT_FIELDS:
        if field in changes and changes[field] is None:
            changes.pop(field)

    price = changes.get("price", product.price)
    sale_price = changes.get("sale_price", product.sale_price)
    validate_pricing(price, sale_price)

    if "product_id" in changes:
        changes["product_id"] = changes["product_id"].strip()
        _ensure_product_unique(db, product_id=changes["product_id"], exclude_id=product.id)

    if "name" in changes:
        changes["name"] = changes["name"].strip()
        product.slug = _slug_for(changes["name"])
        _ensure_product_unique(db, slug=product.slug, exclude_id=product.id)

    if "category" in changes:
        category = get_category_reference(db, changes.pop("category"))
        product.category_id = category.id if category else None

    if "image" in changes and not changes["image"]:
        changes["image"] = PLACEHOLDER_IMAGE

    for field, value in changes.items():
        setattr(product, field, value)

    _commit(db, "El producto ya existe", "DUPLICATE_PRODUCT")
    db.refresh(product)

    logger.info(f"🔄 Producto actualizado: {product.product_id}")
    return product


def delete_product(db: Session, product: Product) -> None:
    """Eliminación definitiva; las cotizaciones guardan su propio snapshot."""
    product_code = product.product_id
    db.delete(product)
    db.commit()
    logger.info(f"🗑️ Producto eliminado: {product_code}")


# ==================== CATEGORÍAS ====================

def next_category_code(db: Session) -> str:
    """
    Siguiente código "CAT-NNN": toma el mayor número existente (comparación
    numérica, no de texto) y le suma uno.
    """
    highest = 0
    for (code,) in db.query(Category.code).all():
        match = CATEGORY_CODE_PATTERN.match(code or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"CAT-{highest + 1:03d}"


def _ensure_category_slug_free(db: Session, slug: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Category.id).filter(Category.slug == slug)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first():
        raise ConflictError("Ya existe una categoría con ese nombre", "DUPLICATE_CATEGORY")


def _get_parent(db: Session, parent_id: int) -> Category:
    parent = db.query(Category).filter(Category.id == parent_id).first()
    if not parent:
        raise ValidationError(
            f"La categoría padre {parent_id} no existe",
            "PARENT_NOT_FOUND"
        )
    return parent


def create_category(db: Session, data: CategoryCreate) -> Category:
    slug = _slug_for(data.name)
    _ensure_category_slug_free(db, slug)
    parent = _get_parent(db, data.parent) if data.parent is not None else None

    category = Category(
        code=next_category_code(db),
        name=data.name,
        slug=slug,
        description=data.description,
        image=data.image,
        icon=data.icon,
        parent_id=parent.id if parent else None,
        order=data.order or 0,
        is_active=data.is_active,
        product_count=0,
    )
    db.add(category)
    _commit(db, "La categoría ya existe", "DUPLICATE_CATEGORY")
    db.refresh(category)

    logger.info(f"🆕 Categoría creada: {category.code} - {category.name}")
    return category


def update_category(db: Session, category: Category, data: CategoryUpdate) -> Category:
    changes = data.model_dump(exclude_unset=True)

    if "name" in changes:
        if not changes["name"] or not changes["name"].strip():
            changes.pop("name")
        else:
            changes["name"] = changes["name"].strip()
            category.slug = _slug_for(changes["name"])
            _ensure_category_slug_free(db, category.slug, exclude_id=category.id)

    if "parent" in changes:
        parent_id = changes.pop("parent")
        if parent_id is None:
            category.parent_id = None
        else:
            parent = _get_parent(db, parent_id)
            # Evitar ciclos: el nuevo padre no puede ser la categoría ni un descendiente
            ancestor = parent
            while ancestor is not None:
                if ancestor.id == category.id:
                    raise ValidationError(
                        "Una categoría no puede ser su propia ancestra",
                        "INVALID_PARENT"
                    )
                ancestor = ancestor.parent
            category.parent_id = parent.id

    for field in ("order", "is_active"):
        if field in changes and changes[field] is None:
            changes.pop(field)

    for field, value in changes.items():
        setattr(category, field, value)

    _commit(db, "La categoría ya existe", "DUPLICATE_CATEGORY")
    db.refresh(category)

    logger.info(f"🔄 Categoría actualizada: {category.code}")
    return category


def delete_category(db: Session, category: Category) -> None:
    """
    Eliminar una categoría sin dependientes.
    Se rechaza si el cache productCount es > 0, si aún hay productos que la
    referencian o si tiene subcategorías.
    """
    linked_products = db.query(func.count(Product.id)).filter(
        Product.category_id == category.id
    ).scalar()
    products_count = max(category.product_count or 0, linked_products)
    if products_count > 0:
        raise ConflictError(
            f"No se puede eliminar la categoría porque tiene {products_count} producto(s). "
            "Reasigne o elimine los productos primero.",
            "CATEGORY_HAS_PRODUCTS",
            products_count=products_count
        )

    children_count = db.query(func.count(Category.id)).filter(
        Category.parent_id == category.id
    ).scalar()
    if children_count > 0:
        raise ConflictError(
            f"No se puede eliminar la categoría porque tiene {children_count} subcategoría(s). "
            "Reasigne o elimine las subcategorías primero.",
            "CATEGORY_HAS_CHILDREN",
            children_count=children_count
        )

    code = category.code
    db.delete(category)
    db.commit()
    logger.info(f"🗑️ Categoría eliminada: {code}")


def _sample_product_image(db: Session, category_id: int) -> Optional[str]:
    """Imagen de un producto activo de la categoría, prefiriendo una real."""
    base = db.query(Product.image).filter(
        Product.category_id == category_id,
        Product.is_active == True
    )
    sample = base.filter(Product.image != PLACEHOLDER_IMAGE).first()
    if sample is None:
        sample = base.first()
    return sample.image if sample else None


def list_public_categories(db: Session) -> List[dict]:
    """
    Categorías activas ordenadas por (order, name). Las que no tienen imagen
    toman la de uno de sus productos al momento de leer (no se persiste).
    """
    categories = db.query(Category).filter(
        Category.is_active == True
    ).order_by(Category.order.asc(), Category.name.asc()).all()

    result = []
    for category in categories:
        image = category.image or _sample_product_image(db, category.id)
        result.append(format_category(category, image=image))
    return result


def reconcile_category_counts(
    db: Session,
    assign_orphans: bool = False,
    rng: Optional[random.Random] = None
) -> Dict[str, Any]:
    """
    Recalcular productCount de todas las categorías.

    Con assign_orphans=True, antes de contar, los productos sin categoría
    reciben una categoría raíz al azar. Es idempotente.
    """
    rng = rng or random.Random()
    orphans_assigned = 0

    if assign_orphans:
        roots = db.query(Category).filter(Category.parent_id.is_(None)).all()
        orphans = db.query(Product).filter(Product.category_id.is_(None)).all()
        if roots:
            for product in orphans:
                product.category_id = rng.choice(roots).id
                orphans_assigned += 1
            db.flush()
        elif orphans:
            logger.warning(f"⚠️ {len(orphans)} producto(s) sin categoría y no hay categorías raíz")

    counts = dict(
        db.query(Product.category_id, func.count(Product.id))
        .filter(Product.category_id.isnot(None))
        .group_by(Product.category_id)
        .all()
    )

    categories = db.query(Category).all()
    for category in categories:
        category.product_count = counts.get(category.id, 0)
    db.commit()

    logger.info(
        f"✅ Reconciliación: {len(categories)} categorías, "
        f"{orphans_assigned} producto(s) sin categoría asignados"
    )
    return {
        "categories": len(categories),
        "orphansAssigned": orphans_assigned,
        "counts": {c.code: c.product_count for c in categories if c.product_count > 0},
    }

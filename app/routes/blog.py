from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from core.database import get_db
from core.dependencies import CurrentUser, get_current_admin_user
from core.errors import NotFoundError
from core.pagination import apply_sort, paginate
from core import blog_service
from core.blog_service import format_post, BLOG_SORT_COLUMNS
from models.blog import BlogPost
from schemas.blog import BlogPostCreate, BlogPostUpdate

router = APIRouter(
    prefix="/blog",
    tags=["blog"]
)


def get_post_or_404(db: Session, post_id: int, published_only: bool = False) -> BlogPost:
    query = db.query(BlogPost).filter(BlogPost.id == post_id)
    if published_only:
        query = query.filter(BlogPost.is_published == True)
    post = query.first()
    if not post:
        raise NotFoundError("Post no encontrado", "POST_NOT_FOUND")
    return post


# ==================== PÚBLICO ====================

@router.get("")
async def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Buscar en título, extracto y contenido"),
    tag: Optional[str] = Query(None, description="Filtrar por tag"),
    sort: str = Query("publishedAt"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db)
):
    """
    Listar posts publicados.
    """
    query = blog_service.build_post_query(db, published_only=True, search=search, tag=tag)
    query = apply_sort(query, BLOG_SORT_COLUMNS, sort, order, "publishedAt")
    posts, pagination = paginate(query, page, limit)

    return {
        "success": True,
        "status_code": 200,
        "message": "Posts obtenidos exitosamente",
        "data": [format_post(p) for p in posts],
        "pagination": pagination
    }


@router.get("/tags")
async def list_tags(db: Session = Depends(get_db)):
    """Tags usados en posts publicados"""
    return {
        "success": True,
        "status_code": 200,
        "message": "Tags obtenidos exitosamente",
        "data": blog_service.published_tags(db)
    }


@router.get("/slug/{slug}")
async def get_post_by_slug(slug: str, db: Session = Depends(get_db)):
    """
    Obtener un post publicado por su slug.
    Cada lectura suma una visita.
    """
    post = db.query(BlogPost).filter(
        BlogPost.slug == slug,
        BlogPost.is_published == True
    ).first()

    if not post:
        raise NotFoundError("Post no encontrado", "POST_NOT_FOUND")

    post = blog_service.increment_views(db, post)

    return {
        "success": True,
        "status_code": 200,
        "message": "Post obtenido exitosamente",
        "data": format_post(post)
    }


# ==================== ADMINISTRACIÓN ====================

@router.get("/admin/all")
async def list_all_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Buscar en título y extracto"),
    is_published: Optional[bool] = Query(None, alias="isPublished"),
    sort: str = Query("createdAt"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Listar todos los posts, incluidos borradores (solo administradores).
    """
    query = blog_service.build_post_query(
        db,
        published_only=False,
        search=search,
        is_published=is_published,
        search_content=False
    )
    query = apply_sort(query, BLOG_SORT_COLUMNS, sort, order, "createdAt")
    posts, pagination = paginate(query, page, limit)

    return {
        "success": True,
        "status_code": 200,
        "message": "Posts obtenidos exitosamente",
        "data": [format_post(p, include_author_email=True) for p in posts],
        "pagination": pagination
    }


@router.get("/admin/{post_id}")
async def get_any_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    post = get_post_or_404(db, post_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Post obtenido exitosamente",
        "data": format_post(post, include_author_email=True)
    }


@router.get("/{post_id}")
async def get_post(post_id: int, db: Session = Depends(get_db)):
    """
    Obtener un post publicado por su ID (no suma visitas).
    """
    post = get_post_or_404(db, post_id, published_only=True)

    return {
        "success": True,
        "status_code": 200,
        "message": "Post obtenido exitosamente",
        "data": format_post(post)
    }


@router.post("", status_code=201)
async def create_post(
    post_data: BlogPostCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Crear un post (solo administradores). El autor es el usuario autenticado.
    """
    post = blog_service.create_post(db, post_data, author_id=current_user.id)

    return {
        "success": True,
        "status_code": 201,
        "message": "Post creado exitosamente",
        "data": format_post(post, include_author_email=True)
    }


@router.put("/{post_id}")
async def update_post(
    post_id: int,
    post_data: BlogPostUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    post = get_post_or_404(db, post_id)
    post = blog_service.update_post(db, post, post_data)

    return {
        "success": True,
        "status_code": 200,
        "message": "Post actualizado exitosamente",
        "data": format_post(post, include_author_email=True)
    }


@router.patch("/{post_id}/publish")
async def toggle_publish(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    """
    Alternar entre publicado y borrador (solo administradores).
    La fecha de publicación se fija la primera vez.
    """
    post = get_post_or_404(db, post_id)
    post = blog_service.toggle_publish(db, post)

    return {
        "success": True,
        "status_code": 200,
        "message": "Post publicado" if post.is_published else "Post despublicado",
        "data": format_post(post, include_author_email=True)
    }


@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_admin_user)
):
    post = get_post_or_404(db, post_id)
    blog_service.delete_post(db, post)

    return {
        "success": True,
        "status_code": 200,
        "message": "Post eliminado exitosamente"
    }

"""
Servicio del blog: posts con estado borrador/publicado y contador de visitas.
"""
import logging
from typing import Optional, List

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.dates import utcnow, isoformat
from core.errors import ValidationError, ConflictError
from core.slugs import slugify
from models.blog import BlogPost, BlogPostTag
from schemas.blog import BlogPostCreate, BlogPostUpdate

logger = logging.getLogger(__name__)

BLOG_SORT_COLUMNS = {
    "publishedAt": BlogPost.published_at,
    "createdAt": BlogPost.created_at,
    "updatedAt": BlogPost.updated_at,
    "title": BlogPost.title,
    "views": BlogPost.views,
}


def normalize_tags(tags: Optional[List[str]]) -> List[str]:
    """Recortar, pasar a minúsculas, descartar vacíos y duplicados (conservando el orden)."""
    result = []
    for tag in tags or []:
        tag = (tag or "").strip().lower()
        if tag and tag not in result:
            result.append(tag)
    return result


def format_post(post: BlogPost, include_author_email: bool = False) -> dict:
    author = None
    if post.author is not None:
        author = {
            "id": post.author.id,
            "firstName": post.author.first_name,
            "lastName": post.author.last_name,
        }
        if include_author_email:
            author["email"] = post.author.email

    return {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "excerpt": post.excerpt,
        "content": post.content,
        "coverImage": post.cover_image,
        "author": author,
        "tags": list(post.tags),
        "isPublished": post.is_published,
        "publishedAt": isoformat(post.published_at),
        "views": post.views,
        "createdAt": isoformat(post.created_at),
        "updatedAt": isoformat(post.updated_at),
    }


# ==================== CONSULTAS ====================

def build_post_query(
    db: Session,
    published_only: bool = True,
    search: Optional[str] = None,
    tag: Optional[str] = None,
    is_published: Optional[bool] = None,
    search_content: bool = True
):
    query = db.query(BlogPost)

    if published_only:
        query = query.filter(BlogPost.is_published == True)
    elif is_published is not None:
        query = query.filter(BlogPost.is_published == is_published)

    if search:
        pattern = f"%{search.strip()}%"
        conditions = [BlogPost.title.ilike(pattern), BlogPost.excerpt.ilike(pattern)]
        if search_content:
            conditions.append(BlogPost.content.ilike(pattern))
        query = query.filter(or_(*conditions))

    if tag and tag.strip():
        query = query.filter(BlogPost.tag_links.any(BlogPostTag.tag == tag.strip().lower()))

    return query


def published_tags(db: Session) -> List[str]:
    """Tags distintos de los posts publicados, ordenados."""
    rows = (
        db.query(BlogPostTag.tag)
        .join(BlogPost, BlogPost.id == BlogPostTag.post_id)
        .filter(BlogPost.is_published == True)
        .distinct()
        .order_by(BlogPostTag.tag.asc())
        .all()
    )
    return [row.tag for row in rows]


def increment_views(db: Session, post: BlogPost) -> BlogPost:
    """views = views + 1 en la base de datos (atómico ante lecturas concurrentes)."""
    db.query(BlogPost).filter(BlogPost.id == post.id).update(
        {BlogPost.views: BlogPost.views + 1},
        synchronize_session=False
    )
    db.commit()
    db.refresh(post)
    return post


# ==================== CRUD ====================

def _slug_for(db: Session, title: str, exclude_id: Optional[int] = None) -> str:
    slug = slugify(title)
    if not slug:
        raise ValidationError("El título debe contener letras o números", "INVALID_TITLE")

    query = db.query(BlogPost.id).filter(BlogPost.slug == slug)
    if exclude_id is not None:
        query = query.filter(BlogPost.id != exclude_id)
    if query.first():
        raise ConflictError("Ya existe un post con ese título", "DUPLICATE_SLUG")
    return slug


def _set_published(post: BlogPost, published: bool) -> None:
    post.is_published = published
    if published and post.published_at is None:
        post.published_at = utcnow()


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Ya existe un post con ese título", "DUPLICATE_SLUG")


def create_post(db: Session, data: BlogPostCreate, author_id: int) -> BlogPost:
    post = BlogPost(
        title=data.title.strip(),
        slug=_slug_for(db, data.title),
        excerpt=data.excerpt,
        content=data.content,
        cover_image=data.cover_image or "",
        author_id=author_id,
        views=0,
    )
    post.tags = normalize_tags(data.tags)
    _set_published(post, data.is_published)

    db.add(post)
    _commit(db)
    db.refresh(post)

    logger.info(f"📰 Post creado: {post.slug} (publicado={post.is_published})")
    return post


def update_post(db: Session, post: BlogPost, data: BlogPostUpdate) -> BlogPost:
    changes = data.model_dump(exclude_unset=True)

    if changes.get("title"):
        post.title = changes["title"].strip()
        post.slug = _slug_for(db, post.title, exclude_id=post.id)

    for field in ("excerpt", "content"):
        if changes.get(field) is not None:
            setattr(post, field, changes[field])

    if "cover_image" in changes:
        post.cover_image = changes["cover_image"] or ""

    if changes.get("tags") is not None:
        post.tags = normalize_tags(changes["tags"])

    if changes.get("is_published") is not None:
        _set_published(post, changes["is_published"])

    _commit(db)
    db.refresh(post)

    logger.info(f"🔄 Post actualizado: {post.slug}")
    return post


def toggle_publish(db: Session, post: BlogPost) -> BlogPost:
    """Alternar publicado/borrador. publishedAt se fija la primera vez y no se borra."""
    _set_published(post, not post.is_published)
    db.commit()
    db.refresh(post)

    logger.info(f"📰 Post {post.slug}: publicado={post.is_published}")
    return post


def delete_post(db: Session, post: BlogPost) -> None:
    slug = post.slug
    db.delete(post)
    db.commit()
    logger.info(f"🗑️ Post eliminado: {slug}")

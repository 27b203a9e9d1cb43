"""
Schemas del blog.
"""
from pydantic import Field
from typing import Optional, List
from schemas.base import APIModel


class BlogPostCreate(APIModel):
    """Crear post (el autor es el usuario autenticado)"""
    title: str = Field(..., min_length=1, max_length=200)
    excerpt: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    cover_image: Optional[str] = ""
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False


class BlogPostUpdate(APIModel):
    """Actualizar post"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    excerpt: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = Field(None, min_length=1)
    cover_image: Optional[str] = None
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None

"""
Schemas para productos y categorías.
"""
from pydantic import Field, validator
from typing import Optional
from decimal import Decimal
from schemas.base import APIModel


# ==================== CATEGORY SCHEMAS ====================

class CategoryCreate(APIModel):
    """Schema para crear categoría (el categoryId y el slug se generan)"""
    name: str = Field(..., min_length=1, max_length=100, description="Nombre de la categoría")
    description: Optional[str] = Field(None, max_length=500, description="Descripción de la categoría")
    image: Optional[str] = Field(None, description="URL de la imagen")
    icon: Optional[str] = Field(None, max_length=100)
    parent: Optional[int] = Field(None, description="ID de la categoría padre")
    order: int = Field(0, description="Peso de ordenamiento")
    is_active: bool = True

    @validator('name')
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('El nombre no puede estar vacío')
        return v


class CategoryUpdate(APIModel):
    """Schema para actualizar categoría; parent=null la convierte en raíz"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=100)
    parent: Optional[int] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None


# ==================== PRODUCT SCHEMAS ====================

class ProductCreate(APIModel):
    """Schema para crear producto"""
    product_id: str = Field(..., min_length=1, max_length=100, description="Código del producto")
    name: str = Field(..., min_length=1, max_length=200, description="Nombre del producto")
    description: str = Field(..., min_length=1, description="Descripción del producto")
    category: Optional[int] = Field(None, description="ID de la categoría")
    quantity: int = Field(0, ge=0, description="Stock disponible (no puede ser negativo)")
    price: Optional[Decimal] = Field(None, ge=0, description="Precio")
    sale_price: Optional[Decimal] = Field(None, ge=0, description="Precio oferta (menor al precio)")
    currency: str = Field("CLP", min_length=3, max_length=3)
    image: Optional[str] = Field(None, description="URL de la imagen")
    featured: bool = False
    is_active: bool = True

    @validator('product_id', 'name')
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('El campo no puede estar vacío')
        return v

    @validator('currency')
    def upper_currency(cls, v):
        return v.upper()


class ProductUpdate(APIModel):
    """Schema para actualizar producto"""
    product_id: Optional[str] = Field(None, min_length=1, max_length=100)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[int] = None
    quantity: Optional[int] = Field(None, ge=0)
    price: Optional[Decimal] = Field(None, ge=0)
    sale_price: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    image: Optional[str] = None
    featured: Optional[bool] = None
    is_active: Optional[bool] = None

    @validator('currency')
    def upper_currency(cls, v):
        return v.upper() if v else v

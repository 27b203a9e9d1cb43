"""
Schemas de cotizaciones.
"""
from pydantic import Field, validator
from typing import Optional, List
from decimal import Decimal
from models.quote import QuoteSource
from schemas.base import APIModel


class QuoteItemIn(APIModel):
    """Item del carrito (se guarda como snapshot)"""
    product_id: str = Field(..., min_length=1)
    product_name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., ge=1)
    description: Optional[str] = None

    @validator('product_id', pre=True)
    def coerce_product_id(cls, v):
        if isinstance(v, (int, float)):
            return str(v)
        return v


class QuoteCreate(APIModel):
    """
    Solicitud de cotización desde el carrito.
    totalItems/totalUnits enviados por el cliente se ignoran.
    """
    items: List[QuoteItemIn] = Field(default_factory=list)
    customer_name: Optional[str] = Field(None, max_length=255)
    customer_email: Optional[str] = Field(None, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=50)
    customer_company: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    source: Optional[QuoteSource] = None

    @validator('customer_email')
    def normalize_email(cls, v):
        return v.strip().lower() if v else v


class QuoteUpdate(APIModel):
    """Actualización de cotización (admin)"""
    items: Optional[List[QuoteItemIn]] = None
    quoted_amount: Optional[Decimal] = Field(None, ge=0)
    final_amount: Optional[Decimal] = Field(None, ge=0)
    customer_name: Optional[str] = Field(None, max_length=255)
    customer_email: Optional[str] = Field(None, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=50)
    customer_company: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    status: Optional[str] = None
    source: Optional[QuoteSource] = None

    @validator('customer_email')
    def normalize_email(cls, v):
        return v.strip().lower() if v else v


class QuoteStatusUpdate(APIModel):
    """Cambio de estado"""
    status: Optional[str] = None

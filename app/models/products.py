from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from core.database import Base
from core.dates import utcnow

PLACEHOLDER_IMAGE = "/placeholder-product.jpg"
DEFAULT_CURRENCY = "CLP"


class Category(Base):
    __tablename__ = "categories"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    code = Column("category_code", String(20), unique=True, nullable=False, index=True)  # "CAT-001"
    name = Column(String(100), nullable=False)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    description = Column(String(500))
    image = Column(Text)
    icon = Column(String(100))
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    order = Column(Integer, default=0, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    # Cache desnormalizado: solo lo recalcula la reconciliación
    product_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    
    # Relaciones
    parent = relationship("Category", remote_side=[id], back_populates="children")
    children = relationship("Category", back_populates="parent")
    products = relationship("Product", back_populates="category")


class Product(Base):
    __tablename__ = "products"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    quantity = Column(Integer, default=0, nullable=False)
    price = Column(Numeric(12, 2), nullable=True)
    sale_price = Column(Numeric(12, 2), nullable=True)
    currency = Column(String(3), default=DEFAULT_CURRENCY, nullable=False)
    image = Column(Text, default=PLACEHOLDER_IMAGE, nullable=False)
    featured = Column(Boolean, default=False, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    
    # Relaciones
    category = relationship("Category", back_populates="products")

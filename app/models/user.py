from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from core.database import Base
from core.dates import utcnow

class User(Base):
    __tablename__ = "users"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)  # siempre en minúsculas
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=True)
    company = Column(String(255), nullable=True)
    role = Column(String(20), default="user", nullable=False)  # "admin" o "user"
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    
    # Relaciones
    addresses = relationship("UserAddress", back_populates="user", cascade="all, delete-orphan", order_by="UserAddress.id")
    blog_posts = relationship("BlogPost", back_populates="author")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from core.database import Base
from core.dates import utcnow
import enum

# Estados de la cotización (sin grafo de transiciones)
class QuoteStatus(str, enum.Enum):
    PENDING = "pending"          # Recibida, sin contacto
    CONTACTED = "contacted"      # Cliente contactado
    QUOTED = "quoted"            # Cotización enviada
    APPROVED = "approved"        # Aprobada por el cliente
    REJECTED = "rejected"        # Rechazada
    COMPLETED = "completed"      # Venta concretada

# Origen de la solicitud
class QuoteSource(str, enum.Enum):
    WHATSAPP = "whatsapp"
    WEB = "web"
    MANUAL = "manual"


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    quote_number = Column(String(20), unique=True, nullable=False, index=True)

    total_items = Column(Integer, nullable=False)
    total_units = Column(Integer, nullable=False)
    quoted_amount = Column(Numeric(14, 2), nullable=True)  # Monto cotizado en CLP
    final_amount = Column(Numeric(14, 2), nullable=True)   # Monto final de venta en CLP

    # Datos de contacto (todos opcionales)
    customer_name = Column(String(255), nullable=True)
    customer_email = Column(String(255), nullable=True, index=True)
    customer_phone = Column(String(50), nullable=True)
    customer_company = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default=QuoteStatus.PENDING.value, index=True)
    source = Column(String(20), nullable=False, default=QuoteSource.WEB.value)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    items = relationship(
        "QuoteItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteItem.position"
    )


class QuoteItem(Base):
    __tablename__ = "quote_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    quote_id = Column(Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    # Snapshot del producto al momento de la solicitud (sin FK a products)
    product_id = Column(String(100), nullable=False)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)

    # Relationships
    quote = relationship("Quote", back_populates="items")


class QuoteCounter(Base):
    """Secuencia de números de cotización por mes ("2610" -> último número emitido)."""
    __tablename__ = "quote_counters"

    key = Column(String(4), primary_key=True)
    value = Column(Integer, nullable=False, default=0)

"""
Modelos de base de datos del sistema contable.

Tablas: users, clients, suppliers, expenses, invoices, invoice_items,
notifications, invoice_settings.
Las entradas y el resumen del Reporte 606 se calculan bajo demanda
y no se persisten (ver services/report_service.py).
"""
from sqlalchemy import (
    Column, Integer, String, Float, Boolean, DateTime,
    ForeignKey, Text, Enum, Date
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db.database import Base
import enum


class InvoiceStatus(str, enum.Enum):
    """Estado de una factura."""
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class ExpenseStatus(str, enum.Enum):
    """Estado de pago de un gasto."""
    PAID = "paid"
    PENDING = "pending"
    CANCELLED = "cancelled"


class NotificationType(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"


# ===================== USUARIO =====================

class User(Base):
    """
    Usuario del sistema (empresa contribuyente).
    El RNC de la empresa es el que se reporta ante la DGII.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    company = Column(String(255))  # Razón social
    rnc = Column(String(11), index=True)  # RNC (9 dígitos) o cédula (11)
    address = Column(String(500))
    phone = Column(String(50))

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    last_login = Column(DateTime(timezone=True))

    clients = relationship("Client", back_populates="user", cascade="all, delete-orphan")
    suppliers = relationship("Supplier", back_populates="user", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="user", cascade="all, delete-orphan")
    invoices = relationship("Invoice", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    invoice_settings = relationship(
        "InvoiceSettings", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


# ===================== CLIENTES Y PROVEEDORES =====================

class Client(Base):
    """Cliente al que se emiten facturas."""
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    rnc = Column(String(11), nullable=False)
    address = Column(String(500))
    email = Column(String(255))
    phone = Column(String(50))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="clients")
    invoices = relationship("Invoice", back_populates="client")


class Supplier(Base):
    """Proveedor; su RNC aparece en el Reporte 606."""
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    rnc = Column(String(11), nullable=False)
    address = Column(String(500))
    phone = Column(String(50))
    email = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="suppliers")
    expenses = relationship("Expense", back_populates="supplier")


# ===================== GASTOS =====================

class Expense(Base):
    """
    Gasto o compra. Fuente de las líneas del Reporte 606.
    Los campos fiscales (NCF, tipo de documento, forma de pago) son opcionales.
    """
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    description = Column(String(500), nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(String(100), nullable=False)

    supplier_id = Column(Integer, ForeignKey("suppliers.id"))

    # Datos fiscales
    ncf = Column(String(19))
    ncf_modified = Column(String(19))
    document_type = Column(String(100))
    payment_method = Column(String(100))
    itbis_included = Column(Boolean)  # None se interpreta como incluido

    status = Column(Enum(ExpenseStatus), default=ExpenseStatus.PAID)
    receipt = Column(String(500))  # Ruta en el bucket de comprobantes
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="expenses")
    supplier = relationship("Supplier", back_populates="expenses")


# ===================== FACTURAS =====================

class Invoice(Base):
    """Factura emitida a un cliente."""
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    invoice_number = Column(String(50), nullable=False, index=True)
    ncf = Column(String(19))

    date = Column(Date, nullable=False, index=True)
    due_date = Column(Date, nullable=False)

    subtotal = Column(Float, default=0)
    tax_rate = Column(Float, default=0.18)
    tax_amount = Column(Float, default=0)
    total = Column(Float, default=0)

    status = Column(Enum(InvoiceStatus), default=InvoiceStatus.PENDING, index=True)
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="invoices")
    client = relationship("Client", back_populates="invoices")
    items = relationship(
        "InvoiceItem", back_populates="invoice", cascade="all, delete-orphan",
        order_by="InvoiceItem.id"
    )


class InvoiceItem(Base):
    """Línea de factura."""
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    description = Column(String(500), nullable=False)
    quantity = Column(Float, nullable=False, default=1)
    price = Column(Float, nullable=False, default=0)
    amount = Column(Float, nullable=False, default=0)
    taxable = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    invoice = relationship("Invoice", back_populates="items")


# ===================== NOTIFICACIONES =====================

class Notification(Base):
    """Notificación generada por operaciones sobre facturas, gastos y clientes."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(Enum(NotificationType), default=NotificationType.INFO)
    related_id = Column(Integer)
    related_type = Column(String(20))  # invoice, expense, client, system
    read = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="notifications")


# ===================== PLANTILLA DE FACTURA =====================

class InvoiceSettings(Base):
    """
    Personalización de la plantilla de factura por usuario.
    """
    __tablename__ = "invoice_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    # Datos de la empresa en la factura
    company_name = Column(String(255))
    company_rnc = Column(String(11))
    company_address = Column(String(500))
    company_phone = Column(String(50))
    company_email = Column(String(255))
    company_logo = Column(String(500))

    # Apariencia
    primary_color = Column(String(7), default="#3b82f6")
    secondary_color = Column(String(7), default="#6b7280")
    font_family = Column(String(100), default="Helvetica")
    font_size = Column(Integer, default=12)

    show_logo = Column(Boolean, default=True)
    show_footer = Column(Boolean, default=True)
    footer_text = Column(Text, default="Gracias por su preferencia")
    show_watermark = Column(Boolean, default=False)
    watermark_text = Column(String(100), default="PAGADO")

    # Firma
    show_signature = Column(Boolean, default=False)
    signature_image = Column(String(500))
    signature_name = Column(String(255))
    signature_title = Column(String(255))

    # Pago
    show_payment_info = Column(Boolean, default=False)
    bank_name = Column(String(255))
    bank_account = Column(String(100))
    payment_instructions = Column(Text)
    terms_and_conditions = Column(Text)

    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="invoice_settings")

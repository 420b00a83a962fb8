"""
Esquemas Pydantic para validación de datos.
"""
from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional, List, Dict
from datetime import datetime, date as Date
from enum import Enum
import re

from ..utils.validators import validate_rnc, validate_ncf, validate_phone, validate_monetary_amount


# ===================== FUNCIONES DE VALIDACIÓN REUTILIZABLES =====================

def validate_password_strength(password: str) -> str:
    """
    Valida que la contraseña cumpla con los requisitos de seguridad.
    - Mínimo una letra
    - Mínimo un número
    """
    if not re.search(r'[A-Za-z]', password):
        raise ValueError('La contraseña debe contener al menos una letra')
    if not re.search(r'\d', password):
        raise ValueError('La contraseña debe contener al menos un número')
    return password


def check_rnc(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return value
    if not validate_rnc(value):
        raise ValueError('El RNC debe tener 9 dígitos o la cédula 11 dígitos')
    return re.sub(r'[\s\-]', '', value)


def check_ncf(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    if not validate_ncf(value):
        raise ValueError('Formato de NCF inválido')
    return value.strip().upper()


def check_phone(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return value
    if not validate_phone(value):
        raise ValueError('Formato de teléfono inválido')
    return value.strip()


def check_amount(value: Optional[float]) -> Optional[float]:
    if value is not None and not validate_monetary_amount(value):
        raise ValueError('Monto fuera de rango')
    return value


# ===================== ENUMS =====================

class InvoiceStatusEnum(str, Enum):
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class ExpenseStatusEnum(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    CANCELLED = "cancelled"


class NotificationTypeEnum(str, Enum):
    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"


# ===================== AUTENTICACIÓN =====================

class UserBase(BaseModel):
    """Datos básicos de usuario."""
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    company: Optional[str] = Field(None, max_length=255)
    rnc: Optional[str] = None
    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=50)

    @validator('rnc')
    def rnc_format(cls, v):
        return check_rnc(v)

    @validator('phone')
    def phone_format(cls, v):
        return check_phone(v)


class UserCreate(UserBase):
    password: str = Field(..., min_length=8, max_length=100)

    @validator('password')
    def password_strength(cls, v):
        return validate_password_strength(v)


class UserUpdate(BaseModel):
    """Actualización del perfil de empresa."""
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    rnc: Optional[str] = None
    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=50)

    @validator('rnc')
    def rnc_format(cls, v):
        return check_rnc(v)

    @validator('phone')
    def phone_format(cls, v):
        return check_phone(v)


class UserResponse(BaseModel):
    id: int
    name: str
    email: EmailStr
    company: Optional[str] = None
    rnc: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


# ===================== CLIENTES / PROVEEDORES =====================

class ClientBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    rnc: str
    address: Optional[str] = Field(None, max_length=500)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)

    @validator('rnc')
    def rnc_format(cls, v):
        return check_rnc(v)

    @validator('phone')
    def phone_format(cls, v):
        return check_phone(v)


class ClientCreate(ClientBase):
    pass


class ClientResponse(ClientBase):
    id: int
    user_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SupplierBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    rnc: str
    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None

    @validator('rnc')
    def rnc_format(cls, v):
        return check_rnc(v)

    @validator('phone')
    def phone_format(cls, v):
        return check_phone(v)


class SupplierCreate(SupplierBase):
    pass


class SupplierResponse(SupplierBase):
    id: int
    user_id: int

    class Config:
        from_attributes = True


# ===================== GASTOS =====================

class ExpenseBase(BaseModel):
    date: Date
    description: str = Field(..., min_length=1, max_length=500)
    amount: float
    category: str = Field(..., min_length=1, max_length=100)
    supplier_id: Optional[int] = None
    ncf: Optional[str] = None
    ncf_modified: Optional[str] = None
    document_type: Optional[str] = Field(None, max_length=100)
    payment_method: Optional[str] = Field(None, max_length=100)
    itbis_included: Optional[bool] = None
    status: ExpenseStatusEnum = ExpenseStatusEnum.PAID
    notes: Optional[str] = None

    @validator('ncf', 'ncf_modified')
    def ncf_format(cls, v):
        return check_ncf(v)

    @validator('amount')
    def amount_range(cls, v):
        return check_amount(v)


class ExpenseCreate(ExpenseBase):
    pass


class ExpenseUpdate(BaseModel):
    date: Optional[Date] = None
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    amount: Optional[float] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    supplier_id: Optional[int] = None
    ncf: Optional[str] = None
    ncf_modified: Optional[str] = None
    document_type: Optional[str] = None
    payment_method: Optional[str] = None
    itbis_included: Optional[bool] = None
    status: Optional[ExpenseStatusEnum] = None
    notes: Optional[str] = None

    @validator('ncf', 'ncf_modified')
    def ncf_format(cls, v):
        return check_ncf(v)

    @validator('amount')
    def amount_range(cls, v):
        return check_amount(v)


class ExpenseResponse(ExpenseBase):
    id: int
    user_id: int
    receipt: Optional[str] = None
    supplier: Optional[SupplierResponse] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ===================== FACTURAS =====================

class InvoiceItemBase(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: float = Field(..., gt=0)
    price: float = Field(..., ge=0)
    taxable: bool = True


class InvoiceItemResponse(InvoiceItemBase):
    id: int
    amount: float

    class Config:
        from_attributes = True


class InvoiceCreate(BaseModel):
    client_id: int
    invoice_number: Optional[str] = Field(None, max_length=50)
    ncf: Optional[str] = None
    date: Date
    due_date: Optional[Date] = None
    tax_rate: Optional[float] = Field(None, ge=0, le=1)
    status: InvoiceStatusEnum = InvoiceStatusEnum.PENDING
    notes: Optional[str] = None
    items: List[InvoiceItemBase] = Field(..., min_length=1)

    @validator('ncf')
    def ncf_format(cls, v):
        return check_ncf(v)


class InvoiceUpdate(BaseModel):
    client_id: Optional[int] = None
    ncf: Optional[str] = None
    date: Optional[Date] = None
    due_date: Optional[Date] = None
    tax_rate: Optional[float] = Field(None, ge=0, le=1)
    status: Optional[InvoiceStatusEnum] = None
    notes: Optional[str] = None
    items: Optional[List[InvoiceItemBase]] = None

    @validator('ncf')
    def ncf_format(cls, v):
        return check_ncf(v)


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatusEnum


class InvoiceClientInfo(BaseModel):
    id: int
    name: str
    rnc: str

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    id: int
    user_id: int
    client_id: int
    invoice_number: str
    ncf: Optional[str] = None
    date: Date
    due_date: Date
    subtotal: float
    tax_rate: float
    tax_amount: float
    total: float
    status: InvoiceStatusEnum
    notes: Optional[str] = None
    items: List[InvoiceItemResponse] = []
    client: Optional[InvoiceClientInfo] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ===================== NOTIFICACIONES =====================

class NotificationResponse(BaseModel):
    id: int
    title: str
    message: str
    type: NotificationTypeEnum
    related_id: Optional[int] = None
    related_type: Optional[str] = None
    read: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ===================== PLANTILLA DE FACTURA =====================

class InvoiceSettingsBase(BaseModel):
    company_name: Optional[str] = Field(None, max_length=255)
    company_rnc: Optional[str] = None
    company_address: Optional[str] = Field(None, max_length=500)
    company_phone: Optional[str] = Field(None, max_length=50)
    company_email: Optional[EmailStr] = None
    primary_color: str = Field(default="#3b82f6", pattern=r'^#[0-9A-Fa-f]{6}$')
    secondary_color: str = Field(default="#6b7280", pattern=r'^#[0-9A-Fa-f]{6}$')
    font_family: str = Field(default="Helvetica", max_length=100)
    font_size: int = Field(default=12, ge=8, le=18)
    show_logo: bool = True
    show_footer: bool = True
    footer_text: Optional[str] = "Gracias por su preferencia"
    show_watermark: bool = False
    watermark_text: Optional[str] = Field(default="PAGADO", max_length=100)
    show_signature: bool = False
    signature_name: Optional[str] = None
    signature_title: Optional[str] = None
    show_payment_info: bool = False
    bank_name: Optional[str] = None
    bank_account: Optional[str] = None
    payment_instructions: Optional[str] = None
    terms_and_conditions: Optional[str] = None

    @validator('company_rnc')
    def rnc_format(cls, v):
        return check_rnc(v)

    @validator('company_phone')
    def phone_format(cls, v):
        return check_phone(v)


class InvoiceSettingsUpdate(InvoiceSettingsBase):
    pass


class InvoiceSettingsResponse(InvoiceSettingsBase):
    company_logo: Optional[str] = None
    signature_image: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ===================== REPORTES =====================

class ReportFilters(BaseModel):
    categories: List[str] = []
    document_types: List[str] = []
    payment_methods: List[str] = []
    status: List[ExpenseStatusEnum] = []


class Report606EntryResponse(BaseModel):
    line: int
    date: str
    rnc: str
    supplier_name: str
    doc_type: str
    ncf: str
    ncf_modified: str
    base_amount: float
    itbis_amount: float
    itbis_retenido: float
    itbis_percibido: float
    isr: float
    payment_method: str
    total_amount: float

    class Config:
        from_attributes = True


class Report606SummaryResponse(BaseModel):
    total_records: int
    total_base_amount: float
    total_itbis_amount: float
    total_itbis_retenido: float
    total_itbis_percibido: float
    total_isr: float
    total_amount: float
    period: str
    start_date: Date
    end_date: Date

    class Config:
        from_attributes = True


class Report606Response(BaseModel):
    rnc: Optional[str] = None
    summary: Report606SummaryResponse
    entries: List[Report606EntryResponse]


class DGIICredentials(BaseModel):
    username: str = ""
    password: str = ""
    rnc: str = ""


class DGIISubmission(BaseModel):
    period: str
    credentials: DGIICredentials
    filters: Optional[ReportFilters] = None


class SubmissionResult(BaseModel):
    success: bool
    message: str


# ===================== DASHBOARD =====================

class DailySeries(BaseModel):
    labels: List[str]
    income: List[float]
    expenses: List[float]


class DashboardStats(BaseModel):
    total_invoices: int
    total_invoice_amount: float
    pending_invoices: int
    total_expenses: float
    net_income: float
    last_7_days: DailySeries
    expenses_by_category: Dict[str, float]


# ===================== ARRANQUE =====================

class SeedUserInfo(BaseModel):
    id: int
    email: str
    name: str


class SeedResponse(BaseModel):
    success: bool
    message: str
    created: Optional[bool] = None
    user: Optional[SeedUserInfo] = None

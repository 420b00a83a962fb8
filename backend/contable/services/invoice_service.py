"""
Servicio de facturación.

Los totales se calculan siempre en el servidor con el motor de ITBIS;
los montos enviados por el cliente se ignoran. Cada cambio relevante
genera una notificación para el usuario.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from ..core.config import settings, get_dominican_time
from ..models.models import (
    Client, Invoice, InvoiceItem, InvoiceStatus, NotificationType
)
from ..schemas.schemas import InvoiceCreate, InvoiceUpdate, InvoiceItemBase
from ..utils.formatters import (
    format_currency, generate_invoice_number, get_next_due_date
)
from .notification_service import create_notification
from .tax_engine import ItemData, tax_engine

logger = logging.getLogger(__name__)


def _apply_items(invoice: Invoice, items: List[InvoiceItemBase], tax_rate: float) -> None:
    """Reemplaza las líneas de la factura y recalcula sus totales."""
    item_data = [
        ItemData(
            description=item.description,
            quantity=item.quantity,
            price=item.price,
            taxable=item.taxable
        )
        for item in items
    ]
    totals = tax_engine.calculate_invoice_totals(item_data, tax_rate)

    invoice.items = [
        InvoiceItem(
            description=item.description,
            quantity=item.quantity,
            price=item.price,
            amount=amount,
            taxable=item.taxable
        )
        for item, amount in zip(item_data, totals.item_amounts)
    ]
    invoice.tax_rate = tax_rate
    invoice.subtotal = totals.subtotal
    invoice.tax_amount = totals.tax_amount
    invoice.total = totals.total


def _get_client(db: Session, user_id: int, client_id: int) -> Client:
    client = db.query(Client).filter(
        Client.id == client_id,
        Client.user_id == user_id
    ).first()
    if not client:
        raise LookupError("Cliente no encontrado")
    return client


def get_invoice(db: Session, user_id: int, invoice_id: int) -> Optional[Invoice]:
    return db.query(Invoice).options(
        joinedload(Invoice.items),
        joinedload(Invoice.client)
    ).filter(
        Invoice.id == invoice_id,
        Invoice.user_id == user_id
    ).first()


def list_invoices(
    db: Session,
    user_id: int,
    status: Optional[InvoiceStatus] = None
) -> List[Invoice]:
    """Facturas del usuario, más recientes primero."""
    query = db.query(Invoice).options(
        joinedload(Invoice.client)
    ).filter(Invoice.user_id == user_id)

    if status is not None:
        query = query.filter(Invoice.status == status)

    return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()


def create_invoice(db: Session, user_id: int, data: InvoiceCreate) -> Invoice:
    """
    Crea una factura con sus líneas.

    - Sin número: se genera con generate_invoice_number()
    - Sin vencimiento: fecha + DEFAULT_DUE_DAYS
    - Sin tasa: ITBIS_RATE
    """
    _get_client(db, user_id, data.client_id)

    invoice = Invoice(
        user_id=user_id,
        client_id=data.client_id,
        invoice_number=data.invoice_number or generate_invoice_number(),
        ncf=data.ncf,
        date=data.date,
        due_date=data.due_date or get_next_due_date(data.date, settings.DEFAULT_DUE_DAYS),
        status=InvoiceStatus(data.status.value),
        notes=data.notes
    )
    _apply_items(
        invoice, data.items,
        data.tax_rate if data.tax_rate is not None else settings.ITBIS_RATE
    )

    db.add(invoice)
    db.commit()
    db.refresh(invoice)

    logger.info(f"Factura {invoice.invoice_number} creada para usuario {user_id}")

    create_notification(
        db, user_id,
        title="Nueva factura",
        message=(
            f"Se ha creado la factura #{invoice.invoice_number} "
            f"por {format_currency(invoice.total)}."
        ),
        type=NotificationType.SUCCESS,
        related_id=invoice.id,
        related_type="invoice"
    )
    return invoice


def _notify_status_change(db: Session, invoice: Invoice) -> None:
    number = invoice.invoice_number
    status = invoice.status

    if status == InvoiceStatus.PAID:
        message = f"La factura #{number} ha sido marcada como pagada."
        type = NotificationType.SUCCESS
    elif status == InvoiceStatus.OVERDUE:
        message = f"La factura #{number} ha vencido."
        type = NotificationType.WARNING
    elif status == InvoiceStatus.CANCELLED:
        message = f"La factura #{number} ha sido cancelada."
        type = NotificationType.WARNING
    else:
        message = f"El estado de la factura #{number} ha cambiado a {status.value}."
        type = NotificationType.INFO

    create_notification(
        db, invoice.user_id,
        title="Estado de factura actualizado",
        message=message,
        type=type,
        related_id=invoice.id,
        related_type="invoice"
    )


def update_invoice(db: Session, invoice: Invoice, data: InvoiceUpdate) -> Invoice:
    """
    Actualiza una factura. Si se envían líneas, reemplazan a las existentes.
    """
    previous_status = invoice.status
    update_data = data.dict(exclude_unset=True, exclude={'items'})

    if 'client_id' in update_data and update_data['client_id'] is not None:
        _get_client(db, invoice.user_id, update_data['client_id'])

    if 'status' in update_data and update_data['status'] is not None:
        update_data['status'] = InvoiceStatus(update_data['status'].value)

    tax_rate = update_data.pop('tax_rate', None)

    for field, value in update_data.items():
        if value is not None or field in ('ncf', 'notes'):
            setattr(invoice, field, value)

    if data.items is not None:
        _apply_items(invoice, data.items, tax_rate if tax_rate is not None else invoice.tax_rate)
    elif tax_rate is not None:
        _apply_items(
            invoice,
            [InvoiceItemBase(
                description=item.description,
                quantity=item.quantity,
                price=item.price,
                taxable=item.taxable
            ) for item in invoice.items],
            tax_rate
        )

    db.commit()
    db.refresh(invoice)

    if invoice.status != previous_status:
        _notify_status_change(db, invoice)

    return invoice


def update_invoice_status(db: Session, invoice: Invoice, status: InvoiceStatus) -> Invoice:
    if invoice.status == status:
        return invoice

    invoice.status = status
    db.commit()
    db.refresh(invoice)

    logger.info(f"Factura {invoice.invoice_number}: estado {status.value}")
    _notify_status_change(db, invoice)
    return invoice


def delete_invoice(db: Session, invoice: Invoice) -> None:
    user_id = invoice.user_id
    number = invoice.invoice_number

    db.delete(invoice)
    db.commit()

    create_notification(
        db, user_id,
        title="Factura eliminada",
        message=f"Se ha eliminado la factura #{number}.",
        type=NotificationType.WARNING,
        related_type="invoice"
    )


def check_overdue_invoices(
    db: Session,
    user_id: int,
    today: Optional[date] = None
) -> List[Invoice]:
    """
    Marca como vencidas las facturas pendientes cuyo vencimiento ya pasó.
    Devuelve las facturas actualizadas.
    """
    today = today or get_dominican_time().date()

    overdue = db.query(Invoice).filter(
        Invoice.user_id == user_id,
        Invoice.status == InvoiceStatus.PENDING,
        Invoice.due_date < today
    ).all()

    if not overdue:
        return []

    for invoice in overdue:
        invoice.status = InvoiceStatus.OVERDUE
    db.commit()

    for invoice in overdue:
        create_notification(
            db, user_id,
            title="Factura vencida",
            message=f"La factura #{invoice.invoice_number} ha vencido.",
            type=NotificationType.WARNING,
            related_id=invoice.id,
            related_type="invoice"
        )

    logger.info(f"{len(overdue)} facturas vencidas para usuario {user_id}")
    return overdue


def get_invoices_by_date_range(
    db: Session,
    user_id: int,
    start_date: date,
    end_date: date
) -> List[Invoice]:
    """Facturas con sus líneas entre dos fechas (ambas inclusive)."""
    return db.query(Invoice).options(
        joinedload(Invoice.items),
        joinedload(Invoice.client)
    ).filter(
        Invoice.user_id == user_id,
        Invoice.date >= start_date,
        Invoice.date <= end_date
    ).order_by(Invoice.date.asc(), Invoice.id.asc()).all()

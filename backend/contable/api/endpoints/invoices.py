"""
Endpoints de facturas.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ...db.database import get_db
from ...models.models import User, Invoice, InvoiceStatus
from ...schemas.schemas import (
    InvoiceCreate, InvoiceUpdate, InvoiceStatusUpdate, InvoiceResponse,
    InvoiceStatusEnum
)
from ...services import invoice_service
from ...services.pdf_generator import PDFGenerator
from .auth import get_current_active_user
from .settings import get_invoice_template

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["Facturas"])


def _get_invoice_or_404(db: Session, user: User, invoice_id: int) -> Invoice:
    invoice = invoice_service.get_invoice(db, user.id, invoice_id)
    if not invoice:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Factura no encontrada"
        )
    return invoice


@router.get("/", response_model=List[InvoiceResponse])
async def list_invoices(
    status_filter: Optional[InvoiceStatusEnum] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Facturas del usuario, más recientes primero."""
    invoice_status = InvoiceStatus(status_filter.value) if status_filter else None
    return invoice_service.list_invoices(db, current_user.id, invoice_status)


@router.post("/", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    data: InvoiceCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Crea una factura. Los totales se calculan en el servidor.
    """
    try:
        return invoice_service.create_invoice(db, current_user.id, data)
    except LookupError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.post("/check-overdue", response_model=List[InvoiceResponse])
async def check_overdue(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Marca como vencidas las facturas pendientes con vencimiento pasado."""
    return invoice_service.check_overdue_invoices(db, current_user.id)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return _get_invoice_or_404(db, current_user, invoice_id)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: int,
    data: InvoiceUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    invoice = _get_invoice_or_404(db, current_user, invoice_id)

    if data.items is not None and len(data.items) == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La factura debe tener al menos un ítem"
        )

    try:
        return invoice_service.update_invoice(db, invoice, data)
    except LookupError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.patch("/{invoice_id}/status", response_model=InvoiceResponse)
async def update_invoice_status(
    invoice_id: int,
    data: InvoiceStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    invoice = _get_invoice_or_404(db, current_user, invoice_id)
    return invoice_service.update_invoice_status(db, invoice, InvoiceStatus(data.status.value))


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    invoice = _get_invoice_or_404(db, current_user, invoice_id)
    invoice_service.delete_invoice(db, invoice)
    return {"message": "Factura eliminada correctamente"}


@router.get("/{invoice_id}/pdf")
async def download_invoice_pdf(
    invoice_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Factura en PDF con la plantilla configurada por el usuario.
    """
    invoice = _get_invoice_or_404(db, current_user, invoice_id)
    template = get_invoice_template(db, current_user)
    invoice_data = InvoiceResponse.from_orm(invoice).dict()
    invoice_data['client'] = {
        'name': invoice.client.name,
        'rnc': invoice.client.rnc,
        'address': invoice.client.address,
        'phone': invoice.client.phone,
    }

    pdf_bytes = PDFGenerator(template).generate_invoice_pdf(invoice_data)
    logger.info(f"PDF de factura {invoice.invoice_number} generado")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="factura_{invoice.invoice_number}.pdf"'
        }
    )

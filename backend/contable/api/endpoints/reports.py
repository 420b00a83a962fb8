"""
Endpoints de reportes fiscales (Reporte 606) y consultas por período.
"""
import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ...db.database import get_db
from ...models.models import User
from ...schemas.schemas import (
    Report606Response, ReportFilters, DGIISubmission, SubmissionResult,
    ExpenseResponse, InvoiceResponse
)
from ...services import report_service
from ...services.invoice_service import get_invoices_by_date_range
from ...services.pdf_generator import PDFGenerator
from ...utils.formatters import generate_report_periods
from ...utils.validators import validate_date_range
from .auth import get_current_active_user
from .settings import get_invoice_template

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reportes"])


def _filter_options(filters: Optional[ReportFilters]) -> Optional[report_service.ReportFilterOptions]:
    if not filters:
        return None
    return report_service.ReportFilterOptions(
        categories=filters.categories,
        document_types=filters.document_types,
        payment_methods=filters.payment_methods,
        status=[s.value for s in filters.status]
    )


def _build_or_400(db: Session, user: User, period: str, filters: Optional[ReportFilters] = None):
    try:
        return report_service.build_report_606(db, user.id, period, _filter_options(filters))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


def _check_range(start_date: date, end_date: date) -> None:
    if not validate_date_range(start_date, end_date):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La fecha inicial debe ser anterior o igual a la fecha final"
        )


@router.get("/periods")
async def get_report_periods(
    years_back: int = Query(2, ge=0, le=10)
):
    """Períodos seleccionables (YYYYMM) del año actual hacia atrás."""
    return generate_report_periods(years_back)


@router.get("/606/options")
async def get_report_options(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Valores disponibles para los filtros del Reporte 606."""
    return {
        "categories": report_service.get_expense_categories(db, current_user.id),
        "document_types": report_service.DOCUMENT_TYPES,
        "payment_methods": report_service.PAYMENT_METHODS,
    }


@router.get("/606/{period}", response_model=Report606Response)
async def get_report_606(
    period: str,
    categories: List[str] = Query([]),
    document_types: List[str] = Query([]),
    payment_methods: List[str] = Query([]),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Reporte 606 del período (YYYYMM) con filtros opcionales.
    """
    filters = ReportFilters(
        categories=categories,
        document_types=document_types,
        payment_methods=payment_methods
    )
    report = _build_or_400(db, current_user, period, filters)
    return {"rnc": current_user.rnc, **report.to_dict()}


@router.post("/606/submit", response_model=SubmissionResult)
async def submit_report_606(
    data: DGIISubmission,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Envío (simulado) del Reporte 606 a la DGII.
    """
    report = _build_or_400(db, current_user, data.period, data.filters)
    result = report_service.send_report_to_dgii(
        report.summary,
        report.entries,
        data.credentials.dict()
    )

    if not result["success"]:
        logger.warning(f"Envío 606 {data.period} rechazado: {result['message']}")

    return result


@router.post("/606/{period}", response_model=Report606Response)
async def filter_report_606(
    period: str,
    filters: ReportFilters,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Reporte 606 con filtros en el cuerpo, incluidos los estados."""
    report = _build_or_400(db, current_user, period, filters)
    return {"rnc": current_user.rnc, **report.to_dict()}


@router.get("/606/{period}/pdf")
async def download_report_606_pdf(
    period: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    report = _build_or_400(db, current_user, period)
    template = get_invoice_template(db, current_user)

    pdf_bytes = PDFGenerator(template).generate_report_606_pdf(
        report.summary,
        report.entries,
        company={
            "name": current_user.company or current_user.name,
            "rnc": current_user.rnc
        }
    )

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="606_{period}.pdf"'
        }
    )


@router.get("/expenses", response_model=List[ExpenseResponse])
async def expenses_by_date_range(
    start_date: date,
    end_date: date,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    _check_range(start_date, end_date)
    return report_service.get_expenses_by_date_range(db, current_user.id, start_date, end_date)


@router.get("/invoices", response_model=List[InvoiceResponse])
async def invoices_by_date_range(
    start_date: date,
    end_date: date,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    _check_range(start_date, end_date)
    return get_invoices_by_date_range(db, current_user.id, start_date, end_date)

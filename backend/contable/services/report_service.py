"""
Servicio del Reporte 606 (compras de bienes y servicios) de la DGII.

Convierte gastos en líneas del formato 606 y calcula el resumen del
período. Las líneas y el resumen se calculan bajo demanda; no se guardan.
"""
import logging
from dataclasses import dataclass, asdict
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session, joinedload

from ..models.models import Expense, ExpenseStatus
from ..utils.formatters import period_bounds
from .tax_engine import (
    ITBISCalculationEngine, DOCUMENT_TYPE_CODES, PAYMENT_METHOD_CODES
)

logger = logging.getLogger(__name__)


DOCUMENT_TYPES = list(DOCUMENT_TYPE_CODES.keys())
PAYMENT_METHODS = list(PAYMENT_METHOD_CODES.keys())


@dataclass
class Report606Entry:
    """Línea del Reporte 606."""
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


@dataclass
class Report606Summary:
    """Totales del Reporte 606 para un período."""
    total_records: int
    total_base_amount: float
    total_itbis_amount: float
    total_itbis_retenido: float
    total_itbis_percibido: float
    total_isr: float
    total_amount: float
    period: str
    start_date: date
    end_date: date


@dataclass
class ReportFilterOptions:
    categories: Sequence[str] = ()
    document_types: Sequence[str] = ()
    payment_methods: Sequence[str] = ()
    status: Sequence[str] = ()


@dataclass
class Report606:
    summary: Report606Summary
    entries: List[Report606Entry]

    def to_dict(self) -> dict:
        return {
            'summary': asdict(self.summary),
            'entries': [asdict(entry) for entry in self.entries]
        }


def _date_str(value) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value).split("T")[0]


def convert_expenses_to_report_606(expenses: Sequence[Expense]) -> List[Report606Entry]:
    """
    Convierte gastos a líneas del 606, una por gasto y en el mismo orden.

    - El ITBIS solo aplica a categorías gravadas.
    - itbis_included sin valor se interpreta como incluido.
    - Datos ausentes se muestran como '-'.
    """
    entries = []

    for index, expense in enumerate(expenses):
        has_itbis = ITBISCalculationEngine.is_itbis_applicable(expense.category)
        amounts = ITBISCalculationEngine.extract_base_and_itbis(
            expense.amount,
            itbis_included=expense.itbis_included is not False,
            has_itbis=has_itbis
        )

        doc_type = (
            ITBISCalculationEngine.get_document_type_code(expense.document_type)
            if expense.document_type else "01"
        )
        payment_method = (
            ITBISCalculationEngine.get_payment_method_code(expense.payment_method)
            if expense.payment_method else "01"
        )
        supplier = expense.supplier

        entries.append(Report606Entry(
            line=index + 1,
            date=_date_str(expense.date),
            rnc=(supplier.rnc if supplier and supplier.rnc else "-"),
            supplier_name=(supplier.name if supplier and supplier.name else "-"),
            doc_type=doc_type,
            ncf=expense.ncf or "-",
            ncf_modified=expense.ncf_modified or "-",
            base_amount=amounts.base_amount,
            itbis_amount=amounts.itbis_amount,
            itbis_retenido=0,
            itbis_percibido=0,
            isr=0,
            payment_method=payment_method,
            total_amount=amounts.base_amount + amounts.itbis_amount
        ))

    return entries


def calculate_report_606_summary(
    entries: Sequence[Report606Entry],
    period: str,
    start_date: date,
    end_date: date
) -> Report606Summary:
    """Resumen del 606: acumulación lineal sobre las líneas."""
    total_base = 0
    total_itbis = 0
    total_retenido = 0
    total_percibido = 0
    total_isr = 0

    for entry in entries:
        total_base += entry.base_amount
        total_itbis += entry.itbis_amount
        total_retenido += entry.itbis_retenido or 0
        total_percibido += entry.itbis_percibido or 0
        total_isr += entry.isr or 0

    return Report606Summary(
        total_records=len(entries),
        total_base_amount=total_base,
        total_itbis_amount=total_itbis,
        total_itbis_retenido=total_retenido,
        total_itbis_percibido=total_percibido,
        total_isr=total_isr,
        total_amount=total_base + total_itbis,
        period=period,
        start_date=start_date,
        end_date=end_date
    )


def get_expenses_by_date_range(
    db: Session,
    user_id: int,
    start_date: date,
    end_date: date,
    filters: Optional[ReportFilterOptions] = None
) -> List[Expense]:
    """
    Gastos del usuario entre dos fechas (ambas inclusive), ordenados por fecha.
    """
    query = db.query(Expense).options(
        joinedload(Expense.supplier)
    ).filter(
        Expense.user_id == user_id,
        Expense.date >= start_date,
        Expense.date <= end_date
    )

    if filters:
        if filters.categories:
            query = query.filter(Expense.category.in_(list(filters.categories)))
        if filters.document_types:
            query = query.filter(Expense.document_type.in_(list(filters.document_types)))
        if filters.payment_methods:
            query = query.filter(Expense.payment_method.in_(list(filters.payment_methods)))
        if filters.status:
            statuses = [ExpenseStatus(s) for s in filters.status]
            query = query.filter(Expense.status.in_(statuses))

    return query.order_by(Expense.date.asc(), Expense.id.asc()).all()


def build_report_606(
    db: Session,
    user_id: int,
    period: str,
    filters: Optional[ReportFilterOptions] = None
) -> Report606:
    """Reporte 606 completo para un período YYYYMM."""
    start_date, end_date = period_bounds(period)
    expenses = get_expenses_by_date_range(db, user_id, start_date, end_date, filters)
    entries = convert_expenses_to_report_606(expenses)
    summary = calculate_report_606_summary(entries, period, start_date, end_date)

    logger.info(
        f"Reporte 606 {period} usuario {user_id}: {summary.total_records} registros"
    )
    return Report606(summary=summary, entries=entries)


def send_report_to_dgii(
    summary: Report606Summary,
    entries: Sequence[Report606Entry],
    credentials: dict
) -> dict:
    """
    Envío simulado a la DGII. Valida credenciales y contenido.
    """
    if not credentials.get('username') or not credentials.get('password') or not credentials.get('rnc'):
        return {
            "success": False,
            "message": "Credenciales inválidas. Por favor verifique su usuario, contraseña y RNC."
        }

    if not entries:
        return {
            "success": False,
            "message": "El reporte no contiene registros para enviar."
        }

    logger.info(
        f"Reporte 606 {summary.period} enviado para RNC {credentials.get('rnc')} "
        f"({summary.total_records} registros)"
    )
    return {
        "success": True,
        "message": "Reporte enviado exitosamente a la DGII."
    }


def get_expense_categories(db: Session, user_id: int) -> List[str]:
    """Categorías distintas usadas por el usuario, en orden alfabético."""
    rows = db.query(Expense.category).filter(
        Expense.user_id == user_id
    ).distinct().order_by(Expense.category).all()
    return [row[0] for row in rows]

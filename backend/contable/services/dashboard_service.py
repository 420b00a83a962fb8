"""
Estadísticas del panel principal.
"""
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Optional

from sqlalchemy.orm import Session

from ..core.config import get_dominican_time
from ..models.models import Expense, Invoice, InvoiceStatus

# Abreviaturas de días de la semana (lunes = 0)
WEEKDAY_LABELS = ("lun", "mar", "mié", "jue", "vie", "sáb", "dom")


def get_dashboard_stats(db: Session, user_id: int, today: Optional[date] = None) -> Dict:
    """
    Totales de facturación y gastos, serie diaria de los últimos 7 días
    (hoy incluido) y gastos por categoría.
    """
    today = today or get_dominican_time().date()

    invoices = db.query(Invoice).filter(Invoice.user_id == user_id).all()
    expenses = db.query(Expense).filter(Expense.user_id == user_id).all()

    total_invoice_amount = sum(invoice.total or 0 for invoice in invoices)
    total_expenses = sum(expense.amount or 0 for expense in expenses)
    pending_invoices = len([i for i in invoices if i.status == InvoiceStatus.PENDING])

    days = [today - timedelta(days=6 - i) for i in range(7)]
    income_by_day = defaultdict(float)
    expenses_by_day = defaultdict(float)

    for invoice in invoices:
        income_by_day[invoice.date] += invoice.total or 0
    for expense in expenses:
        expenses_by_day[expense.date] += expense.amount or 0

    expenses_by_category: Dict[str, float] = {}
    for expense in expenses:
        category = expense.category or "Sin categoría"
        expenses_by_category[category] = expenses_by_category.get(category, 0) + expense.amount

    return {
        'total_invoices': len(invoices),
        'total_invoice_amount': total_invoice_amount,
        'pending_invoices': pending_invoices,
        'total_expenses': total_expenses,
        'net_income': total_invoice_amount - total_expenses,
        'last_7_days': {
            'labels': [WEEKDAY_LABELS[day.weekday()] for day in days],
            'income': [income_by_day[day] for day in days],
            'expenses': [expenses_by_day[day] for day in days]
        },
        'expenses_by_category': expenses_by_category
    }

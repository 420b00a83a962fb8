"""
Formateo de moneda y fechas al estilo dominicano, numeración de facturas
y aritmética de fechas de vencimiento y períodos.
"""
import calendar
import random
import time
from datetime import date, datetime, timedelta
from typing import List, Dict, Optional, Tuple, Union

from ..core.config import get_dominican_time
from .validators import parse_period


DateLike = Union[date, datetime, str]


def _to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(value.replace('Z', '+00:00')).date()


def format_currency(amount: Optional[float]) -> str:
    """
    Formatea un monto en pesos dominicanos: RD$1,234.56
    """
    if amount is None:
        return "RD$0.00"
    sign = "-" if amount < 0 else ""
    return f"{sign}RD${abs(amount):,.2f}"


def format_date(value: Optional[DateLike]) -> str:
    """Formato dominicano DD/MM/YYYY. Sin fecha devuelve '-'."""
    if not value:
        return "-"
    return _to_date(value).strftime('%d/%m/%Y')


def generate_invoice_number(
    now_ms: Optional[int] = None,
    rng: Optional[random.Random] = None
) -> str:
    """
    Número de factura legible: F + últimos 6 dígitos del timestamp en
    milisegundos + 3 dígitos aleatorios.

    Dos llamadas en el mismo milisegundo pueden colisionar (1 en 1000).
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    rng = rng or random
    timestamp = str(now_ms)[-6:].zfill(6)
    suffix = str(rng.randint(0, 999)).zfill(3)
    return f"F{timestamp}{suffix}"


def get_next_due_date(value: DateLike, days: int = 15) -> date:
    """Fecha de vencimiento: fecha de emisión más `days` días."""
    return _to_date(value) + timedelta(days=days)


def period_bounds(period: str) -> Tuple[date, date]:
    """Primer y último día de un período YYYYMM."""
    year, month = parse_period(period)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def generate_report_periods(
    years_back: int = 2,
    today: Optional[date] = None
) -> List[Dict[str, str]]:
    """
    Períodos seleccionables para reportes, del año actual hacia atrás
    y de diciembre a enero.
    """
    current_year = (today or get_dominican_time().date()).year
    periods = []

    for year in range(current_year, current_year - years_back - 1, -1):
        for month in range(12, 0, -1):
            periods.append({
                "value": f"{year}{month:02d}",
                "label": f"{month:02d}/{year}"
            })

    return periods

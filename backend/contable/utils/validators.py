"""
Utilidades de validación.
Validación de RNC, cédula, NCF y demás datos fiscales dominicanos.
"""
import re
from typing import Optional, Tuple
from datetime import date


RNC_WEIGHTS = [7, 9, 8, 6, 5, 4, 3, 2]

# Serie (B o E) + tipo de comprobante (2 dígitos) + secuencia
NCF_PATTERN = re.compile(r'^(B\d{2}\d{8}|E\d{2}\d{10})$')


def clean_tax_id(value: str) -> str:
    """Elimina guiones y espacios de un RNC o cédula."""
    return re.sub(r'[\s\-]', '', value or '')


def rnc_check_digit(base: str) -> int:
    """Dígito verificador de un RNC a partir de sus primeros 8 dígitos."""
    total = sum(int(d) * w for d, w in zip(base, RNC_WEIGHTS))
    remainder = total % 11
    if remainder == 0:
        return 2
    if remainder == 1:
        return 1
    return 11 - remainder


def cedula_check_digit(base: str) -> int:
    """Dígito verificador de una cédula (módulo 10, pesos 1-2)."""
    total = 0
    for index, digit in enumerate(base):
        product = int(digit) * (1 if index % 2 == 0 else 2)
        total += product // 10 + product % 10
    return (10 - total % 10) % 10


def validate_rnc(rnc: str, verify_digit: bool = False) -> bool:
    """
    Valida un RNC (9 dígitos) o una cédula (11 dígitos).
    Con verify_digit=True también comprueba el dígito verificador.
    """
    value = clean_tax_id(rnc)
    if not value.isdigit() or len(value) not in (9, 11):
        return False

    if not verify_digit:
        return True

    if len(value) == 9:
        return rnc_check_digit(value[:8]) == int(value[8])
    return cedula_check_digit(value[:10]) == int(value[10])


def validate_ncf(ncf: str) -> bool:
    """
    Valida el formato de un NCF.
    Tradicional: B + tipo + 8 dígitos (11 caracteres).
    Electrónico (e-CF): E + tipo + 10 dígitos (13 caracteres).
    """
    if not ncf:
        return False
    return bool(NCF_PATTERN.match(ncf.strip().upper()))


def validate_phone(phone: str) -> bool:
    """Valida formato de teléfono dominicano (809/829/849, opcional +1)."""
    clean_phone = re.sub(r'[\s\-\(\)\+]', '', phone)

    if not clean_phone.isdigit():
        return False

    if len(clean_phone) == 11 and clean_phone.startswith('1'):
        clean_phone = clean_phone[1:]

    return len(clean_phone) in (7, 10)


def validate_monetary_amount(amount: float) -> bool:
    """
    Valida que un monto monetario sea válido.
    """
    if amount < 0:
        return False

    if amount > 999_999_999_999:
        return False

    return True


def validate_date_range(start: date, end: date, max_days: Optional[int] = None) -> bool:
    """El inicio no puede ser posterior al fin; max_days limita la amplitud."""
    if start > end:
        return False
    if max_days is not None and (end - start).days > max_days:
        return False
    return True


def parse_period(period: str) -> Tuple[int, int]:
    """
    Interpreta un período YYYYMM.
    Lanza ValueError si el formato o el mes son inválidos.
    """
    if not period or not re.match(r'^\d{6}$', period):
        raise ValueError(f"Período inválido: {period!r}. Use el formato YYYYMM")

    year, month = int(period[:4]), int(period[4:])
    if not 1 <= month <= 12:
        raise ValueError(f"Período inválido: {period!r}")

    return year, month


def sanitize_filename(filename: str) -> str:
    """
    Sanitiza un nombre de archivo para prevenir path traversal.
    """
    if not filename:
        return filename

    filename = re.sub(r'[/\\:*?"<>|]', '', filename)
    filename = filename.replace('..', '')

    return filename

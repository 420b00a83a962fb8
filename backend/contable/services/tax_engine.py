"""
Motor de cálculo de ITBIS y totales de factura.
Reglas de la DGII aplicadas de forma desacoplada de la base de datos.
"""
from typing import List, Dict
from dataclasses import dataclass, field


ITBIS_RATE = 0.18  # 18% tasa general de ITBIS

# Categorías de gasto gravadas con ITBIS
ITBIS_CATEGORIES = (
    "Bienes",
    "Servicios",
    "Alquileres",
    "Importaciones",
    "Telecomunicaciones",
    "Electricidad",
    "Agua",
)

# Tipos de comprobante para el Reporte 606
DOCUMENT_TYPE_CODES: Dict[str, str] = {
    "Factura": "01",
    "Factura de Consumo Electrónica": "02",
    "Nota de Débito": "03",
    "Nota de Crédito": "04",
    "Comprobante de Compras": "11",
    "Registro Único de Ingresos": "12",
    "Registro de Proveedores Informales": "13",
    "Registro de Gastos Menores": "14",
    "Comprobante de Compras al Exterior": "15",
    "Comprobante Gubernamental": "16",
    "Comprobante para Exportaciones": "17",
    "Comprobante para Pagos al Exterior": "18",
}

PAYMENT_METHOD_CODES: Dict[str, str] = {
    "Efectivo": "01",
    "Cheques/Transferencias/Depósito": "02",
    "Tarjeta Crédito/Débito": "03",
    "Compra a Crédito": "04",
    "Permuta": "05",
    "Nota de Crédito": "06",
    "Mixto": "07",
}


@dataclass
class ItemData:
    """Línea de factura para cálculo."""
    description: str
    quantity: float
    price: float
    taxable: bool = True

    @property
    def amount(self) -> float:
        return self.quantity * self.price


@dataclass
class BaseItbis:
    """Monto base y su ITBIS."""
    base_amount: float
    itbis_amount: float


@dataclass
class InvoiceTotals:
    """Totales calculados de una factura."""
    subtotal: float
    taxable_amount: float
    tax_amount: float
    total: float
    item_amounts: List[float] = field(default_factory=list)


class ITBISCalculationEngine:
    """
    Cálculos de ITBIS.
    Todas las funciones son puras.
    """

    @staticmethod
    def calculate_itbis(amount: float, rate: float = ITBIS_RATE) -> float:
        """
        ITBIS de un monto base.
        Fórmula: itbis = monto * tasa
        """
        return amount * rate

    @staticmethod
    def extract_base_and_itbis(
        total_amount: float,
        itbis_included: bool = True,
        has_itbis: bool = True,
        rate: float = ITBIS_RATE
    ) -> BaseItbis:
        """
        Separa el monto base y el ITBIS de un monto.

        - Sin ITBIS: base = total, itbis = 0
        - ITBIS incluido: base = total / (1 + tasa)
        - ITBIS no incluido: itbis = total * tasa
        """
        if not has_itbis:
            return BaseItbis(base_amount=total_amount, itbis_amount=0)

        if itbis_included:
            base_amount = round(total_amount / (1 + rate), 2)
            itbis_amount = round(total_amount - base_amount, 2)
            return BaseItbis(base_amount=base_amount, itbis_amount=itbis_amount)

        itbis_amount = round(total_amount * rate, 2)
        return BaseItbis(base_amount=total_amount, itbis_amount=itbis_amount)

    @staticmethod
    def is_itbis_applicable(category: str) -> bool:
        """Indica si una categoría de gasto está sujeta a ITBIS."""
        return category in ITBIS_CATEGORIES

    @staticmethod
    def get_document_type_code(doc_type: str) -> str:
        """Código DGII del tipo de comprobante (01 por defecto)."""
        return DOCUMENT_TYPE_CODES.get(doc_type, "01")

    @staticmethod
    def get_payment_method_code(method: str) -> str:
        """Código DGII de la forma de pago (01 por defecto)."""
        return PAYMENT_METHOD_CODES.get(method, "01")

    @classmethod
    def calculate_invoice_totals(
        cls,
        items: List[ItemData],
        tax_rate: float = ITBIS_RATE
    ) -> InvoiceTotals:
        """
        Totales de una factura.
        subtotal = Σ cantidad * precio
        itbis = Σ montos gravables * tasa
        total = subtotal + itbis
        """
        item_amounts = []
        subtotal = 0
        taxable_amount = 0

        for item in items:
            amount = item.amount
            item_amounts.append(amount)
            subtotal += amount
            if item.taxable:
                taxable_amount += amount

        tax_amount = round(cls.calculate_itbis(taxable_amount, tax_rate), 2)

        return InvoiceTotals(
            subtotal=round(subtotal, 2),
            taxable_amount=round(taxable_amount, 2),
            tax_amount=tax_amount,
            total=round(subtotal + tax_amount, 2),
            item_amounts=item_amounts
        )


# Instancia global del motor
tax_engine = ITBISCalculationEngine()

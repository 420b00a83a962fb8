"""
Tests para el motor de cálculo de ITBIS.
"""
import pytest
from contable.services.tax_engine import (
    ITBISCalculationEngine,
    ItemData,
    ITBIS_RATE
)


class TestITBISCalculationEngine:
    """Tests para los cálculos de ITBIS y totales de factura."""

    @pytest.mark.parametrize("amount", [0, 1, 100, 1234.56, 1_000_000])
    def test_calculate_itbis_default_rate(self, amount):
        """
        ITBIS = monto * 18%
        """
        assert ITBISCalculationEngine.calculate_itbis(amount) == pytest.approx(amount * 0.18)

    def test_calculate_itbis_custom_rate(self):
        # Tasa reducida del 16%
        assert ITBISCalculationEngine.calculate_itbis(1000, 0.16) == pytest.approx(160)

    def test_default_rate(self):
        assert ITBIS_RATE == 0.18

    def test_extract_itbis_included(self):
        """
        Monto con ITBIS incluido: base = total / 1.18
        """
        result = ITBISCalculationEngine.extract_base_and_itbis(1180)

        # 1180 / 1.18 = 1000
        assert result.base_amount == 1000
        assert result.itbis_amount == 180

    def test_extract_itbis_not_included(self):
        """
        Monto sin ITBIS: el ITBIS se calcula sobre el monto.
        """
        result = ITBISCalculationEngine.extract_base_and_itbis(1000, itbis_included=False)

        assert result.base_amount == 1000
        assert result.itbis_amount == 180

    def test_extract_no_itbis(self):
        result = ITBISCalculationEngine.extract_base_and_itbis(500, has_itbis=False)

        assert result.base_amount == 500
        assert result.itbis_amount == 0

    def test_extract_rounds_to_cents(self):
        """
        100 / 1.18 = 84.745... -> 84.75; ITBIS = 100 - 84.75 = 15.25
        """
        result = ITBISCalculationEngine.extract_base_and_itbis(100)

        assert result.base_amount == 84.75
        assert result.itbis_amount == 15.25
        assert result.base_amount + result.itbis_amount == pytest.approx(100)

    def test_is_itbis_applicable(self):
        assert ITBISCalculationEngine.is_itbis_applicable("Bienes")
        assert ITBISCalculationEngine.is_itbis_applicable("Servicios")
        assert not ITBISCalculationEngine.is_itbis_applicable("Impuestos")
        assert not ITBISCalculationEngine.is_itbis_applicable("Otros")

    def test_document_type_codes(self):
        assert ITBISCalculationEngine.get_document_type_code("Factura") == "01"
        assert ITBISCalculationEngine.get_document_type_code("Nota de Crédito") == "04"
        assert ITBISCalculationEngine.get_document_type_code("Registro de Gastos Menores") == "14"
        # Desconocido -> 01
        assert ITBISCalculationEngine.get_document_type_code("Otro") == "01"

    def test_payment_method_codes(self):
        assert ITBISCalculationEngine.get_payment_method_code("Efectivo") == "01"
        assert ITBISCalculationEngine.get_payment_method_code("Tarjeta Crédito/Débito") == "03"
        assert ITBISCalculationEngine.get_payment_method_code("Mixto") == "07"
        assert ITBISCalculationEngine.get_payment_method_code("Bitcoin") == "01"

    def test_calculate_invoice_totals(self):
        """
        Totales de factura:
        subtotal = 1*1000 + 2*500 = 2000
        ITBIS = 2000 * 0.18 = 360
        total = 2360
        """
        items = [
            ItemData(description="Servicio", quantity=1, price=1000),
            ItemData(description="Producto", quantity=2, price=500),
        ]
        totals = ITBISCalculationEngine.calculate_invoice_totals(items)

        assert totals.item_amounts == [1000, 1000]
        assert totals.subtotal == 2000
        assert totals.tax_amount == 360
        assert totals.total == 2360

    def test_invoice_totals_exempt_items(self):
        """
        Solo las líneas gravables pagan ITBIS:
        gravable = 1000, exento = 500
        ITBIS = 1000 * 0.18 = 180
        total = 1500 + 180 = 1680
        """
        items = [
            ItemData(description="Gravado", quantity=1, price=1000),
            ItemData(description="Exento", quantity=1, price=500, taxable=False),
        ]
        totals = ITBISCalculationEngine.calculate_invoice_totals(items)

        assert totals.subtotal == 1500
        assert totals.taxable_amount == 1000
        assert totals.tax_amount == 180
        assert totals.total == 1680

    def test_invoice_totals_empty(self):
        totals = ITBISCalculationEngine.calculate_invoice_totals([])

        assert totals.subtotal == 0
        assert totals.tax_amount == 0
        assert totals.total == 0

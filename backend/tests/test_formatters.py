"""
Tests para formateo dominicano, numeración de facturas y fechas.
"""
import random
import re
from datetime import date, datetime
from unittest.mock import patch

import pytest
from contable.core.config import DOMINICAN_TZ
from contable.utils.formatters import (
    format_currency,
    format_date,
    generate_invoice_number,
    get_next_due_date,
    generate_report_periods,
    period_bounds
)


class TestFormatCurrency:

    def test_thousands_and_decimals(self):
        assert format_currency(1234.56) == "RD$1,234.56"

    def test_always_two_decimals(self):
        assert format_currency(1000) == "RD$1,000.00"
        assert format_currency(0.5) == "RD$0.50"

    def test_negative(self):
        assert format_currency(-2500) == "-RD$2,500.00"

    def test_none(self):
        assert format_currency(None) == "RD$0.00"


class TestFormatDate:

    def test_date(self):
        assert format_date(date(2024, 3, 5)) == "05/03/2024"

    def test_datetime_and_iso_string(self):
        assert format_date(datetime(2024, 12, 31, 23, 59)) == "31/12/2024"
        assert format_date("2024-01-15") == "15/01/2024"
        assert format_date("2024-01-15T10:00:00Z") == "15/01/2024"

    def test_empty(self):
        assert format_date(None) == "-"
        assert format_date("") == "-"


class TestInvoiceNumber:

    def test_format(self):
        number = generate_invoice_number()
        assert re.fullmatch(r"F\d{9}", number)

    def test_uses_last_six_timestamp_digits(self):
        """
        Timestamp 1700000123456 -> últimos 6 dígitos 123456
        """
        number = generate_invoice_number(now_ms=1700000123456, rng=random.Random(1))
        assert number.startswith("F123456")
        assert len(number) == 10

    def test_random_suffix_zero_padded(self):
        class FixedRandom:
            def randint(self, a, b):
                return 7

        assert generate_invoice_number(now_ms=1700000000042, rng=FixedRandom()) == "F000042007"


class TestDueDate:

    def test_default_fifteen_days(self):
        assert get_next_due_date(date(2024, 3, 1)) == date(2024, 3, 16)

    def test_crosses_month(self):
        # 20 ene + 15 = 4 feb
        assert get_next_due_date(date(2024, 1, 20)) == date(2024, 2, 4)

    def test_crosses_year(self):
        assert get_next_due_date(date(2024, 12, 25), days=10) == date(2025, 1, 4)

    def test_leap_year(self):
        assert get_next_due_date("2024-02-20", days=10) == date(2024, 3, 1)
        assert get_next_due_date("2023-02-20", days=10) == date(2023, 3, 2)


class TestReportPeriods:

    def test_periods_descending(self):
        periods = generate_report_periods(years_back=2, today=date(2024, 6, 1))

        # 3 años x 12 meses
        assert len(periods) == 36
        assert periods[0] == {"value": "202412", "label": "12/2024"}
        assert periods[11] == {"value": "202401", "label": "01/2024"}
        assert periods[-1] == {"value": "202201", "label": "01/2022"}

    def test_periods_follow_dominican_year(self):
        """31 de diciembre 23:30 en Santo Domingo ya es 1 de enero en UTC"""
        new_year_eve = datetime(2024, 12, 31, 23, 30, tzinfo=DOMINICAN_TZ)
        with patch("contable.utils.formatters.get_dominican_time", return_value=new_year_eve):
            periods = generate_report_periods(years_back=0)

        assert len(periods) == 12
        assert periods[0]["value"] == "202412"

    def test_period_bounds(self):
        assert period_bounds("202402") == (date(2024, 2, 1), date(2024, 2, 29))
        assert period_bounds("202312") == (date(2023, 12, 1), date(2023, 12, 31))
        assert period_bounds("199912") == (date(1999, 12, 1), date(1999, 12, 31))

    @pytest.mark.parametrize("period", ["2024", "202413", "abcdef", "202400"])
    def test_invalid_period(self, period):
        with pytest.raises(ValueError):
            period_bounds(period)

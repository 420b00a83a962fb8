"""
Tests para validación de datos fiscales dominicanos.
"""
from datetime import date

from contable.utils.validators import (
    validate_rnc,
    validate_ncf,
    validate_phone,
    validate_monetary_amount,
    validate_date_range,
    rnc_check_digit,
    cedula_check_digit,
    sanitize_filename
)


class TestRNC:

    def test_rnc_and_cedula_lengths(self):
        assert validate_rnc("123456789")
        assert validate_rnc("001-0000000-9")
        assert not validate_rnc("12345678")
        assert not validate_rnc("1234567890")
        assert not validate_rnc("12345678A")

    def test_rnc_check_digit(self):
        """
        13100051: 1*7 + 3*9 + 1*8 + 5*3 + 1*2 = 59
        59 % 11 = 4 -> 11 - 4 = 7
        """
        assert rnc_check_digit("13100051") == 7
        assert validate_rnc("131000517", verify_digit=True)
        assert not validate_rnc("131000518", verify_digit=True)

    def test_cedula_check_digit(self):
        # Solo el tercer dígito (peso 1) suma: total = 1 -> (10 - 1) % 10 = 9
        assert cedula_check_digit("0010000000") == 9
        assert validate_rnc("00100000009", verify_digit=True)
        assert not validate_rnc("00100000001", verify_digit=True)


class TestNCF:

    def test_traditional(self):
        assert validate_ncf("B0100000001")
        assert validate_ncf("b0100000001")

    def test_electronic(self):
        assert validate_ncf("E310000000001")

    def test_invalid(self):
        assert not validate_ncf("")
        assert not validate_ncf("A0100000001")
        assert not validate_ncf("B010000001")


class TestOtherValidators:

    def test_phone(self):
        assert validate_phone("809-555-1234")
        assert validate_phone("+1809555-1234")
        assert validate_phone("555-1234")
        assert not validate_phone("12345")

    def test_monetary_amount(self):
        assert validate_monetary_amount(0)
        assert validate_monetary_amount(1500.50)
        assert not validate_monetary_amount(-1)

    def test_date_range(self):
        assert validate_date_range(date(2024, 1, 1), date(2024, 1, 31))
        assert validate_date_range(date(2024, 1, 1), date(2024, 1, 1))
        assert not validate_date_range(date(2024, 2, 1), date(2024, 1, 1))
        assert not validate_date_range(date(2024, 1, 1), date(2024, 3, 1), max_days=31)

    def test_sanitize_filename(self):
        assert sanitize_filename("../../etc/passwd") == "etcpasswd"
        assert sanitize_filename("recibo.pdf") == "recibo.pdf"

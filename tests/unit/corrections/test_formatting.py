"""Tests for correction labels and display values."""

from datetime import date

import pytest

from origination.corrections.formatting import (
    EMPTY,
    correction_label,
    format_value_for_display,
)


class TestCorrectionLabel:
    @pytest.mark.parametrize("field_name", ["first_name", "last_name_1", "last_name_2"])
    def test_name_parts_share_label(self, field_name: str) -> None:
        assert correction_label(field_name) == "Nombre Completo"

    def test_known_field(self) -> None:
        assert correction_label("ine_clave") == "Clave de Elector (INE)"


class TestFormatValueForDisplay:
    def test_none(self) -> None:
        assert format_value_for_display(None) == EMPTY

    def test_name_dict(self) -> None:
        value = {"first_name": "Ana", "last_name_1": "García", "last_name_2": None}
        assert format_value_for_display(value) == "Ana García"

    def test_address_dict(self) -> None:
        value = {
            "street": "Av. Reforma",
            "ext_number": "222",
            "neighborhood": "Juárez",
            "postal_code": "06600",
        }
        assert format_value_for_display(value) == "Av. Reforma 222, Col. Juárez, C.P. 06600"

    def test_employment_dict(self) -> None:
        value = {"type": "EMPLOYEE", "company_name": "ACME", "monthly_income": 25000}
        assert format_value_for_display(value) == "Empleado - ACME - $25,000"

    def test_iso_date_string(self) -> None:
        assert format_value_for_display("1990-05-15") == "15/05/1990"

    def test_date(self) -> None:
        assert format_value_for_display(date(2001, 1, 2)) == "02/01/2001"

    def test_plain_value(self) -> None:
        assert format_value_for_display("5512345678") == "5512345678"

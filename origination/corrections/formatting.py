"""Human-readable labels and values for the correction timeline."""

import json
import re
from datetime import date
from typing import Any

from origination.applicants.enums import EmploymentType
from origination.verification.fields import field_label

EMPTY = "(vacío)"

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")

CORRECTION_LABELS: dict[str, str] = {
    "first_name": "Nombre Completo",
    "last_name_1": "Nombre Completo",
    "last_name_2": "Nombre Completo",
    "curp": "CURP",
    "rfc": "RFC",
    "ine_clave": "Clave de Elector (INE)",
    "ine": "Clave de Elector (INE)",
    "birth_date": "Fecha de Nacimiento",
    "phone": "Teléfono",
    "email": "Correo Electrónico",
    "address": "Domicilio",
    "employment": "Información Laboral",
}


def correction_label(field_name: str) -> str:
    """Label shown to the applicant; name parts share one label."""
    return CORRECTION_LABELS.get(field_name) or field_label(field_name)


def format_value_for_display(value: Any) -> str:
    if value is None:
        return EMPTY

    if isinstance(value, dict):
        if "first_name" in value or "last_name_1" in value:
            parts = [value.get(k) for k in ("first_name", "last_name_1", "last_name_2")]
            return " ".join(p for p in parts if p) or EMPTY
        if "company_name" in value or "type" in value:
            return _format_employment(value)
        if "street" in value or "neighborhood" in value:
            return _format_address(value)
        return json.dumps(value, ensure_ascii=False)

    if isinstance(value, list):
        return json.dumps(value, ensure_ascii=False)

    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")

    if isinstance(value, str) and _ISO_DATE.match(value):
        try:
            return date.fromisoformat(value[:10]).strftime("%d/%m/%Y")
        except ValueError:
            return value

    return str(value) or EMPTY


def _format_employment(value: dict[str, Any]) -> str:
    parts: list[str] = []
    if value.get("type"):
        try:
            parts.append(EmploymentType(value["type"]).label)
        except ValueError:
            parts.append(str(value["type"]))
    if value.get("company_name"):
        parts.append(value["company_name"])
    if value.get("monthly_income"):
        parts.append(f"${float(value['monthly_income']):,.0f}")
    return " - ".join(parts) or EMPTY


def _format_address(value: dict[str, Any]) -> str:
    parts: list[str] = []
    if value.get("street"):
        street = value["street"]
        if value.get("ext_number"):
            street = f"{street} {value['ext_number']}"
        parts.append(street)
    if value.get("neighborhood"):
        parts.append(f"Col. {value['neighborhood']}")
    if value.get("postal_code"):
        parts.append(f"C.P. {value['postal_code']}")
    return ", ".join(parts) or EMPTY

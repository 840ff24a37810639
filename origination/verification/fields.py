"""Verifiable field names and their display labels."""

from enum import Enum


class VerifiableField(str, Enum):
    """Known ledger field names.

    The ledger also accepts names outside this enum (for example
    ``reference_<id>``); those fall back to the raw name as label.
    """

    PHONE = "phone"
    EMAIL = "email"
    CURP = "curp"
    RFC = "rfc"
    INE_CLAVE = "ine_clave"
    INE_CIC = "ine_cic"
    FIRST_NAME = "first_name"
    LAST_NAME_1 = "last_name_1"
    LAST_NAME_2 = "last_name_2"
    BIRTH_DATE = "birth_date"
    GENDER = "gender"
    NATIONALITY = "nationality"
    BIRTH_STATE = "birth_state"
    BIRTH_COUNTRY = "birth_country"
    STREET = "street"
    EXTERIOR_NUMBER = "exterior_number"
    INTERIOR_NUMBER = "interior_number"
    COLONY = "colony"
    CITY = "city"
    STATE = "state"
    POSTAL_CODE = "postal_code"
    ADDRESS = "address"
    EMPLOYMENT = "employment"
    INCOME = "income"
    FACE_MATCH = "face_match"
    LIVENESS = "liveness"
    OFAC = "ofac"
    PLD = "pld"
    INE_DOCUMENT_FRONT = "ine_document_front"
    INE_DOCUMENT_BACK = "ine_document_back"
    PROOF_OF_ADDRESS = "proof_of_address"
    SELFIE_DOCUMENT = "selfie_document"
    INCOME_PROOF_DOCUMENT = "income_proof_document"
    BANK_STATEMENT_DOCUMENT = "bank_statement_document"


FIELD_LABELS: dict[str, str] = {
    VerifiableField.PHONE: "Teléfono",
    VerifiableField.EMAIL: "Email",
    VerifiableField.CURP: "CURP",
    VerifiableField.RFC: "RFC",
    VerifiableField.INE_CLAVE: "Clave de Elector (INE)",
    VerifiableField.INE_CIC: "INE",
    VerifiableField.INE_DOCUMENT_FRONT: "INE Frente",
    VerifiableField.INE_DOCUMENT_BACK: "INE Reverso",
    VerifiableField.PROOF_OF_ADDRESS: "Comprobante de domicilio",
    VerifiableField.SELFIE_DOCUMENT: "Selfie",
    VerifiableField.INCOME_PROOF_DOCUMENT: "Comprobante de ingresos",
    VerifiableField.BANK_STATEMENT_DOCUMENT: "Estado de cuenta",
    VerifiableField.FIRST_NAME: "Nombre",
    VerifiableField.LAST_NAME_1: "Apellido paterno",
    VerifiableField.LAST_NAME_2: "Apellido materno",
    VerifiableField.BIRTH_DATE: "Fecha de nacimiento",
    VerifiableField.GENDER: "Género",
    VerifiableField.NATIONALITY: "Nacionalidad",
    VerifiableField.BIRTH_STATE: "Estado de nacimiento",
    VerifiableField.BIRTH_COUNTRY: "País de nacimiento",
    VerifiableField.ADDRESS: "Dirección",
    VerifiableField.STREET: "Calle",
    VerifiableField.EXTERIOR_NUMBER: "Número exterior",
    VerifiableField.INTERIOR_NUMBER: "Número interior",
    VerifiableField.COLONY: "Colonia",
    VerifiableField.CITY: "Ciudad",
    VerifiableField.STATE: "Estado",
    VerifiableField.POSTAL_CODE: "Código postal",
    VerifiableField.EMPLOYMENT: "Información laboral",
    VerifiableField.INCOME: "Ingresos",
    VerifiableField.FACE_MATCH: "Reconocimiento facial",
    VerifiableField.LIVENESS: "Prueba de vida",
    VerifiableField.OFAC: "Lista OFAC",
    VerifiableField.PLD: "Listas PLD",
}

NAME_FIELDS: tuple[str, ...] = ("first_name", "last_name_1", "last_name_2")

ADDRESS_FIELDS: tuple[str, ...] = (
    "street",
    "exterior_number",
    "interior_number",
    "colony",
    "city",
    "state",
    "postal_code",
)

# Fields whose verification can complete KYC
KYC_FIELDS: frozenset[str] = frozenset({
    "curp",
    "rfc",
    "ine_clave",
    "ine_cic",
    "first_name",
    "last_name_1",
    "last_name_2",
    "birth_date",
    "face_match",
    "liveness",
    "ine_document_front",
    "ine_document_back",
})


def field_label(field_name: str) -> str:
    """Return the Spanish label for a field, or the name itself."""
    return FIELD_LABELS.get(field_name, field_name)

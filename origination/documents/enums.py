"""Enums for the document domain."""

from enum import Enum


class DocumentType(str, Enum):
    """Kinds of supporting documents an applicant uploads."""

    INE_FRONT = "INE_FRONT"
    INE_BACK = "INE_BACK"
    PROOF_OF_ADDRESS = "PROOF_OF_ADDRESS"
    INCOME_PROOF = "INCOME_PROOF"
    BANK_STATEMENT = "BANK_STATEMENT"
    SELFIE = "SELFIE"
    SIGNATURE = "SIGNATURE"
    OTHER = "OTHER"

    @property
    def label(self) -> str:
        return {
            DocumentType.INE_FRONT: "INE (Frente)",
            DocumentType.INE_BACK: "INE (Reverso)",
            DocumentType.PROOF_OF_ADDRESS: "Comprobante de Domicilio",
            DocumentType.INCOME_PROOF: "Comprobante de Ingresos",
            DocumentType.BANK_STATEMENT: "Estado de Cuenta Bancario",
            DocumentType.SELFIE: "Selfie",
            DocumentType.SIGNATURE: "Firma",
            DocumentType.OTHER: "Otro",
        }[self]

    @property
    def ledger_field(self) -> str:
        """Name of the verification ledger field for this document type."""
        return _LEDGER_FIELDS.get(self, f"{self.value.lower()}_document")


_LEDGER_FIELDS: dict[DocumentType, str] = {
    DocumentType.INE_FRONT: "ine_document_front",
    DocumentType.INE_BACK: "ine_document_back",
    DocumentType.PROOF_OF_ADDRESS: "proof_of_address",
    DocumentType.SELFIE: "selfie_document",
    DocumentType.INCOME_PROOF: "income_proof_document",
    DocumentType.BANK_STATEMENT: "bank_statement_document",
}


class DocumentStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

"""PostgreSQL implementation of VerificationStore.

Uses asyncpg against the ``data_verifications`` table created by
migration 001. The pool decodes the jsonb columns, so rows carry dicts
and lists.
"""

from typing import Any
from uuid import UUID

from origination.db.errors import ConnectionError
from origination.db.pool import PostgresPool
from origination.observability.logging import get_logger
from origination.verification.enums import VerificationMethod, VerificationStatus
from origination.verification.models import CorrectionEntry, DataVerification
from origination.verification.store import VerificationStore

logger = get_logger(__name__)

_COLUMNS = """
    id, tenant_id, applicant_id, field_name, field_value, method,
    is_verified, is_locked, status, metadata, notes, rejection_reason,
    rejected_at, rejected_by, corrected_at, correction_history,
    verified_by, created_at, updated_at
"""


class PostgresVerificationStore(VerificationStore):
    """PostgreSQL ledger store. ``save`` is an upsert on the field key."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def get(
        self, tenant_id: UUID, applicant_id: UUID, field_name: str
    ) -> DataVerification | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT {_COLUMNS}
                    FROM data_verifications
                    WHERE tenant_id = $1 AND applicant_id = $2 AND field_name = $3
                    """,
                    tenant_id,
                    applicant_id,
                    field_name,
                )
                return self._row_to_record(row) if row else None
        except Exception as e:
            logger.error(
                "postgres_get_verification_error",
                applicant_id=str(applicant_id),
                field_name=field_name,
                error=str(e),
            )
            raise ConnectionError(f"Failed to get verification: {e}", cause=e) from e

    async def save(self, record: DataVerification) -> DataVerification:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO data_verifications ({_COLUMNS})
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12,
                            $13, $14, $15, $16, $17, $18, $19)
                    ON CONFLICT (tenant_id, applicant_id, field_name) DO UPDATE SET
                        field_value = EXCLUDED.field_value,
                        method = EXCLUDED.method,
                        is_verified = EXCLUDED.is_verified,
                        is_locked = EXCLUDED.is_locked,
                        status = EXCLUDED.status,
                        metadata = EXCLUDED.metadata,
                        notes = EXCLUDED.notes,
                        rejection_reason = EXCLUDED.rejection_reason,
                        rejected_at = EXCLUDED.rejected_at,
                        rejected_by = EXCLUDED.rejected_by,
                        corrected_at = EXCLUDED.corrected_at,
                        correction_history = EXCLUDED.correction_history,
                        verified_by = EXCLUDED.verified_by,
                        updated_at = EXCLUDED.updated_at
                    RETURNING {_COLUMNS}
                    """,
                    record.id,
                    record.tenant_id,
                    record.applicant_id,
                    record.field_name,
                    record.field_value,
                    record.method.value,
                    record.is_verified,
                    record.is_locked,
                    record.status.value,
                    record.metadata,
                    record.notes,
                    record.rejection_reason,
                    record.rejected_at,
                    record.rejected_by,
                    record.corrected_at,
                    [entry.model_dump(mode="json") for entry in record.correction_history],
                    record.verified_by,
                    record.created_at,
                    record.updated_at,
                )
                logger.debug(
                    "verification_saved",
                    applicant_id=str(record.applicant_id),
                    field_name=record.field_name,
                )
                return self._row_to_record(row)
        except Exception as e:
            logger.error(
                "postgres_save_verification_error",
                applicant_id=str(record.applicant_id),
                field_name=record.field_name,
                error=str(e),
            )
            raise ConnectionError(f"Failed to save verification: {e}", cause=e) from e

    async def list_for_applicant(
        self, tenant_id: UUID, applicant_id: UUID
    ) -> list[DataVerification]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_COLUMNS}
                    FROM data_verifications
                    WHERE tenant_id = $1 AND applicant_id = $2
                    ORDER BY field_name
                    """,
                    tenant_id,
                    applicant_id,
                )
                return [self._row_to_record(row) for row in rows]
        except Exception as e:
            logger.error(
                "postgres_list_verifications_error",
                applicant_id=str(applicant_id),
                error=str(e),
            )
            raise ConnectionError(f"Failed to list verifications: {e}", cause=e) from e

    async def delete(self, tenant_id: UUID, applicant_id: UUID, field_name: str) -> bool:
        try:
            async with self._pool.acquire() as conn:
                result = await conn.execute(
                    """
                    DELETE FROM data_verifications
                    WHERE tenant_id = $1 AND applicant_id = $2 AND field_name = $3
                    """,
                    tenant_id,
                    applicant_id,
                    field_name,
                )
                return result.endswith("1")
        except Exception as e:
            logger.error(
                "postgres_delete_verification_error",
                applicant_id=str(applicant_id),
                field_name=field_name,
                error=str(e),
            )
            raise ConnectionError(f"Failed to delete verification: {e}", cause=e) from e

    def _row_to_record(self, row: Any) -> DataVerification:
        return DataVerification(
            id=row["id"],
            tenant_id=row["tenant_id"],
            applicant_id=row["applicant_id"],
            field_name=row["field_name"],
            field_value=row["field_value"],
            method=VerificationMethod(row["method"]),
            is_verified=row["is_verified"],
            is_locked=row["is_locked"],
            status=VerificationStatus(row["status"]),
            metadata=row["metadata"] or {},
            notes=row["notes"],
            rejection_reason=row["rejection_reason"],
            rejected_at=row["rejected_at"],
            rejected_by=row["rejected_by"],
            corrected_at=row["corrected_at"],
            correction_history=[
                CorrectionEntry.model_validate(entry) for entry in row["correction_history"] or []
            ],
            verified_by=row["verified_by"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

"""Create the field verification ledger.

Revision ID: 001
Revises:
Create Date: 2026-10-19

Tables: data_verifications
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create data_verifications."""
    op.create_table(
        "data_verifications",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("tenant_id", UUID, nullable=False),
        sa.Column("applicant_id", UUID, nullable=False),
        sa.Column("field_name", sa.String(100), nullable=False),
        sa.Column("field_value", sa.Text),
        sa.Column("method", sa.String(50), nullable=False),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("is_locked", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("metadata", JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("notes", sa.Text),
        sa.Column("rejection_reason", sa.Text),
        sa.Column("rejected_at", sa.TIMESTAMP(timezone=True)),
        sa.Column("rejected_by", sa.String(255)),
        sa.Column("corrected_at", sa.TIMESTAMP(timezone=True)),
        sa.Column(
            "correction_history",
            JSONB,
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("verified_by", sa.String(255)),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.UniqueConstraint(
            "tenant_id", "applicant_id", "field_name", name="uq_data_verification_field"
        ),
    )
    op.create_index(
        "idx_data_verifications_applicant",
        "data_verifications",
        ["tenant_id", "applicant_id"],
    )
    op.create_index(
        "idx_data_verifications_status",
        "data_verifications",
        ["tenant_id", "status"],
    )


def downgrade() -> None:
    """Drop data_verifications."""
    op.drop_index("idx_data_verifications_status", table_name="data_verifications")
    op.drop_index("idx_data_verifications_applicant", table_name="data_verifications")
    op.drop_table("data_verifications")

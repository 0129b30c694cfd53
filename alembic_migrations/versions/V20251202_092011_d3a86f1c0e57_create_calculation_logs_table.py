"""create_calculation_logs_table

Revision ID: d3a86f1c0e57
Revises: 9c7d2e5b8a14
Create Date: 2025-12-02 09:20:11.730954

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "d3a86f1c0e57"
down_revision = "9c7d2e5b8a14"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "calculation_logs",
        sa.Column("log_id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "calculated_emission_id",
            sa.Uuid(),
            nullable=True,
            comment="Calculation this entry audits (NULL for single-shot calculations)",
        ),
        sa.Column(
            "sequence_number",
            sa.Integer(),
            nullable=False,
            comment="Position in the organization's audit chain (1-based)",
        ),
        sa.Column("input_data", sa.JSON(), nullable=False),
        sa.Column("output_value", sa.Numeric(precision=24, scale=10), nullable=False),
        sa.Column("output_unit", sa.String(length=20), nullable=False),
        sa.Column("methodology_version", sa.String(length=200), nullable=False),
        sa.Column("factor_ids_used", sa.JSON(), nullable=False),
        sa.Column("previous_hash", sa.String(length=64), nullable=False),
        sa.Column("entry_hash", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["calculated_emission_id"], ["calculated_emissions.id"], ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("log_id"),
        sa.UniqueConstraint("calculated_emission_id"),
        sa.UniqueConstraint("entry_hash"),
        sa.UniqueConstraint(
            "organization_id", "sequence_number", name="uq_calculation_logs_org_sequence"
        ),
        sa.CheckConstraint(
            "output_value >= 0", name="ck_calculation_logs_output_non_negative"
        ),
        sa.CheckConstraint(
            "length(methodology_version) >= 3", name="ck_calculation_logs_methodology"
        ),
        comment="Append-only, hash-chained calculation audit trail",
    )
    op.create_index(
        op.f("ix_calculation_logs_organization_id"),
        "calculation_logs",
        ["organization_id"],
        unique=False,
    )
    op.create_index(
        "ix_calculation_logs_org_created",
        "calculation_logs",
        ["organization_id", "created_at"],
        unique=False,
    )

    # Refuse UPDATE and DELETE at the database level as well
    if op.get_bind().dialect.name == "postgresql":
        op.execute(
            """
            CREATE OR REPLACE FUNCTION calculation_logs_immutable()
            RETURNS trigger AS $$
            BEGIN
                RAISE EXCEPTION 'calculation_logs is append-only (% refused)', TG_OP;
            END;
            $$ LANGUAGE plpgsql;
            """
        )
        op.execute(
            """
            CREATE TRIGGER trg_calculation_logs_immutable
            BEFORE UPDATE OR DELETE ON calculation_logs
            FOR EACH ROW EXECUTE FUNCTION calculation_logs_immutable();
            """
        )


def downgrade() -> None:
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TRIGGER IF EXISTS trg_calculation_logs_immutable ON calculation_logs")
        op.execute("DROP FUNCTION IF EXISTS calculation_logs_immutable()")

    op.drop_index("ix_calculation_logs_org_created", table_name="calculation_logs")
    op.drop_index(op.f("ix_calculation_logs_organization_id"), table_name="calculation_logs")
    op.drop_table("calculation_logs")

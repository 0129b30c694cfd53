"""create_activity_and_emission_tables

Revision ID: 9c7d2e5b8a14
Revises: 4e1f0a9c2b31
Create Date: 2025-12-02 09:15:30.402117

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "9c7d2e5b8a14"
down_revision = "4e1f0a9c2b31"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "activity_data",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False, comment="Owning organization"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "category",
            sa.String(length=100),
            nullable=False,
            comment="GHG category (Scope 1, Scope 2 or a Scope 3 subtype)",
        ),
        sa.Column("quantity", sa.Numeric(precision=20, scale=6), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=False),
        sa.Column(
            "fuel_type",
            sa.String(length=100),
            nullable=True,
            comment="Utility label or factor key (e.g., 'electricity_grid')",
        ),
        sa.Column("facility_id", sa.Uuid(), nullable=True),
        sa.Column("reporting_period_start", sa.Date(), nullable=True),
        sa.Column("reporting_period_end", sa.Date(), nullable=True),
        sa.Column("activity_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        comment="Organization activity data consumed by the calculation engine",
    )
    op.create_index(
        op.f("ix_activity_data_organization_id"),
        "activity_data",
        ["organization_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_activity_data_facility_id"), "activity_data", ["facility_id"], unique=False
    )
    op.create_index(
        "ix_activity_data_org_category",
        "activity_data",
        ["organization_id", "category"],
        unique=False,
    )
    op.create_index(
        "ix_activity_data_facility_period",
        "activity_data",
        ["facility_id", "reporting_period_start", "reporting_period_end"],
        unique=False,
    )

    op.create_table(
        "calculated_emissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("activity_data_id", sa.Uuid(), nullable=False),
        sa.Column("emissions_factor_id", sa.Uuid(), nullable=False),
        sa.Column(
            "calculated_value_co2e",
            sa.Numeric(precision=24, scale=10),
            nullable=False,
            comment="Calculated emissions in kgCO2e (unrounded)",
        ),
        sa.Column("scope", sa.String(length=1), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["activity_data_id"], ["activity_data.id"], ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(
            ["emissions_factor_id"], ["emission_factors.id"], ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("activity_data_id"),
        comment="Calculated emissions per activity record",
    )
    op.create_index(
        op.f("ix_calculated_emissions_organization_id"),
        "calculated_emissions",
        ["organization_id"],
        unique=False,
    )
    op.create_index(
        "ix_calculated_emissions_org_created",
        "calculated_emissions",
        ["organization_id", "created_at"],
        unique=False,
    )

    op.create_table(
        "facility_emissions_aggregated",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("facility_id", sa.Uuid(), nullable=False),
        sa.Column("reporting_period_start", sa.Date(), nullable=False),
        sa.Column("reporting_period_end", sa.Date(), nullable=False),
        sa.Column("total_co2e", sa.Numeric(precision=24, scale=10), nullable=False),
        sa.Column("scope1_co2e", sa.Numeric(precision=24, scale=10), nullable=False),
        sa.Column("scope2_co2e", sa.Numeric(precision=24, scale=10), nullable=False),
        sa.Column("activity_count", sa.Integer(), nullable=False),
        sa.Column("calculation_method", sa.String(length=100), nullable=False),
        sa.Column("results_payload", sa.JSON(), nullable=True),
        sa.Column("calculated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "organization_id",
            "facility_id",
            "reporting_period_start",
            "reporting_period_end",
            name="uq_facility_emissions_key",
        ),
        comment="Facility emissions per reporting period",
    )
    op.create_index(
        op.f("ix_facility_emissions_aggregated_organization_id"),
        "facility_emissions_aggregated",
        ["organization_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_facility_emissions_aggregated_facility_id"),
        "facility_emissions_aggregated",
        ["facility_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(
        op.f("ix_facility_emissions_aggregated_facility_id"),
        table_name="facility_emissions_aggregated",
    )
    op.drop_index(
        op.f("ix_facility_emissions_aggregated_organization_id"),
        table_name="facility_emissions_aggregated",
    )
    op.drop_table("facility_emissions_aggregated")
    op.drop_index("ix_calculated_emissions_org_created", table_name="calculated_emissions")
    op.drop_index(
        op.f("ix_calculated_emissions_organization_id"), table_name="calculated_emissions"
    )
    op.drop_table("calculated_emissions")
    op.drop_index("ix_activity_data_facility_period", table_name="activity_data")
    op.drop_index("ix_activity_data_org_category", table_name="activity_data")
    op.drop_index(op.f("ix_activity_data_facility_id"), table_name="activity_data")
    op.drop_index(op.f("ix_activity_data_organization_id"), table_name="activity_data")
    op.drop_table("activity_data")

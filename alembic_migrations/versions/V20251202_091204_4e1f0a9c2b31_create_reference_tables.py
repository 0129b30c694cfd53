"""create_reference_tables

Revision ID: 4e1f0a9c2b31
Revises:
Create Date: 2025-12-02 09:12:04.118342

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "4e1f0a9c2b31"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "emission_factors",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "fuel_type",
            sa.String(length=100),
            nullable=False,
            comment="Factor key (e.g., 'natural_gas_kwh', 'flight_economy_short_haul')",
        ),
        sa.Column("fuel_type_display", sa.String(length=200), nullable=True),
        sa.Column(
            "factor_type",
            sa.String(length=100),
            nullable=False,
            comment="Factor family (energy, Stationary Combustion - Energy, Category 6 spend)",
        ),
        sa.Column("factor_year", sa.Integer(), nullable=False),
        sa.Column(
            "co2e_factor",
            sa.Numeric(precision=18, scale=8),
            nullable=False,
            comment="kgCO2e per factor unit",
        ),
        sa.Column("factor_unit", sa.String(length=50), nullable=False),
        sa.Column("scope", sa.String(length=1), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("subcategory", sa.String(length=100), nullable=True),
        sa.Column("geographic_scope", sa.String(length=50), nullable=False),
        sa.Column("source", sa.String(length=200), nullable=True),
        sa.Column("source_url", sa.String(length=500), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "fuel_type",
            "factor_year",
            "geographic_scope",
            "factor_type",
            name="uq_emission_factors_fuel_year_geo_type",
        ),
        sa.CheckConstraint("co2e_factor >= 0", name="ck_emission_factors_non_negative"),
        sa.CheckConstraint(
            "factor_year BETWEEN 2000 AND 2100", name="ck_emission_factors_year_range"
        ),
        sa.CheckConstraint("scope IN ('1', '2', '3')", name="ck_emission_factors_scope"),
        comment="Emission factor reference data for CO2e calculations",
    )
    op.create_index(
        op.f("ix_emission_factors_fuel_type"), "emission_factors", ["fuel_type"], unique=False
    )
    op.create_index(
        "ix_emission_factors_type_fuel",
        "emission_factors",
        ["factor_type", "fuel_type"],
        unique=False,
    )

    op.create_table(
        "organization_members",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("organization_id", "user_id", name="uq_organization_members"),
        comment="Organization membership",
    )
    op.create_index(
        op.f("ix_organization_members_organization_id"),
        "organization_members",
        ["organization_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_organization_members_user_id"),
        "organization_members",
        ["user_id"],
        unique=False,
    )

    op.create_table(
        "data_provenance_trail",
        sa.Column("provenance_id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("source_description", sa.String(length=500), nullable=False),
        sa.Column("document_type", sa.String(length=100), nullable=False),
        sa.Column(
            "storage_object_path",
            sa.String(length=1000),
            nullable=False,
            comment="Object storage path of the uploaded evidence",
        ),
        sa.Column("verification_status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("provenance_id"),
        sa.UniqueConstraint("storage_object_path"),
        comment="Evidence records referenced by calculations",
    )
    op.create_index(
        op.f("ix_data_provenance_trail_organization_id"),
        "data_provenance_trail",
        ["organization_id"],
        unique=False,
    )
    op.create_index(
        "ix_data_provenance_org_created",
        "data_provenance_trail",
        ["organization_id", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_data_provenance_org_created", table_name="data_provenance_trail")
    op.drop_index(
        op.f("ix_data_provenance_trail_organization_id"), table_name="data_provenance_trail"
    )
    op.drop_table("data_provenance_trail")
    op.drop_index(op.f("ix_organization_members_user_id"), table_name="organization_members")
    op.drop_index(
        op.f("ix_organization_members_organization_id"), table_name="organization_members"
    )
    op.drop_table("organization_members")
    op.drop_index("ix_emission_factors_type_fuel", table_name="emission_factors")
    op.drop_index(op.f("ix_emission_factors_fuel_type"), table_name="emission_factors")
    op.drop_table("emission_factors")

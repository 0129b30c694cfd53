"""
Database seeding service for loading reference and demo data from CSV files.

Usage:
    from app.services.seed_database import DatabaseSeeder

    async with DatabaseSeeder() as seeder:
        await seeder.seed_all(clear_existing=True)
"""

import csv
import logging
import uuid
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories import (
    ActivityRepository,
    EmissionFactorRepository,
    OrganizationMemberRepository,
)
from app.database.schemas import EmissionFactorDBModel
from app.database.session_manager.db_session import Database
from app.services.calculators.unit_converter import UnitConverter

logger = logging.getLogger(__name__)

FACTORS_FILE = "defra_emission_factors.csv"
DEMO_ACTIVITIES_FILE = "demo_activity_data.csv"

DEMO_ORGANIZATION_ID = uuid.UUID("0b8f6a52-3c1d-4e7a-9f20-5d6c7b8a9e01")
DEMO_USER_ID = uuid.UUID("6d2e4f10-8a3b-4c5d-9e7f-1a2b3c4d5e6f")


def _parse_date(value: str) -> Optional[date]:
    value = (value or "").strip()
    if not value:
        return None
    return datetime.strptime(value, "%d/%m/%Y").date()


class DatabaseSeeder:
    """Service for seeding the database from CSV files."""

    def __init__(
        self,
        session: AsyncSession | None = None,
        data_dir: str | Path = "app/test/test_data",
    ):
        """
        Initialize the database seeder.

        Args:
            session: Optional async database session. If not provided, will create one.
            data_dir: Directory containing CSV files (default: app/test/test_data)
        """
        self._session = session
        self._external_session = session is not None
        self.data_dir = Path(data_dir)

        if not self.data_dir.exists():
            raise ValueError(f"Data directory not found: {self.data_dir}")

    async def __aenter__(self):
        if not self._external_session:
            db = Database()
            self._session = await db.__aenter__()
            self._db_context = db
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if not self._external_session and hasattr(self, "_db_context"):
            await self._db_context.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def session(self) -> AsyncSession:
        if not self._session:
            raise RuntimeError("Session not initialized. Use as context manager.")
        return self._session

    async def seed_all(
        self,
        clear_existing: bool = False,
        with_demo_data: bool = False,
        organization_id: uuid.UUID = DEMO_ORGANIZATION_ID,
        user_id: uuid.UUID = DEMO_USER_ID,
    ) -> dict[str, Any]:
        """
        Seed emission factors and, optionally, a demo organization.

        Args:
            clear_existing: If True, remove seeded reference and demo data first
            with_demo_data: If True, also load demo activities and membership
            organization_id: Organization owning the demo activities
            user_id: User made a member of the demo organization

        Returns:
            Dictionary with seeding statistics
        """
        logger.info("Starting database seeding")
        stats = {"emission_factors": 0, "skipped_factors": 0, "activities": 0, "members": 0}

        try:
            if clear_existing:
                await self._clear_existing_data()

            created, skipped = await self.seed_emission_factors()
            stats["emission_factors"] = created
            stats["skipped_factors"] = skipped

            if with_demo_data:
                stats["members"] = await self.seed_membership(organization_id, user_id)
                stats["activities"] = await self.seed_demo_activities(organization_id)

            await self.session.commit()
            logger.info(f"Database seeding completed: {stats}")
            return stats

        except Exception as e:
            logger.error(f"Error during database seeding: {e}", exc_info=True)
            await self.session.rollback()
            raise

    async def _clear_existing_data(self):
        """
        Clear seeded data that no calculation references yet.

        Calculation logs are append-only, so anything they reference stays.
        """
        logger.info("Clearing existing data")
        await self.session.execute(
            text(
                "DELETE FROM activity_data WHERE id NOT IN "
                "(SELECT activity_data_id FROM calculated_emissions)"
            )
        )
        await self.session.execute(
            text(
                "DELETE FROM emission_factors WHERE id NOT IN "
                "(SELECT emissions_factor_id FROM calculated_emissions)"
            )
        )
        await self.session.commit()
        logger.info("Existing data cleared")

    async def seed_emission_factors(self) -> tuple[int, int]:
        """
        Load emission factors from the DEFRA CSV.

        Rows whose (fuel type, year, geography, family) already exists are skipped.

        Returns:
            Number of factors created and number skipped
        """
        csv_file = self.data_dir / FACTORS_FILE
        if not csv_file.exists():
            logger.warning(f"File not found: {csv_file}")
            return 0, 0

        logger.info(f"Loading emission factors from {csv_file}")
        repo = EmissionFactorRepository(self.session)
        existing = {
            tuple(row)
            for row in (
                await self.session.execute(
                    select(
                        EmissionFactorDBModel.fuel_type,
                        EmissionFactorDBModel.factor_year,
                        EmissionFactorDBModel.geographic_scope,
                        EmissionFactorDBModel.factor_type,
                    )
                )
            ).all()
        }

        created = skipped = 0
        with open(csv_file, "r", encoding="utf-8") as f:
            for row in csv.DictReader(f):
                key = (
                    row["fuel_type"],
                    int(row["factor_year"]),
                    row["geographic_scope"] or "UK",
                    row["factor_type"],
                )
                if key in existing:
                    skipped += 1
                    continue

                await repo.create(
                    fuel_type=key[0],
                    fuel_type_display=row["fuel_type_display"] or None,
                    factor_type=key[3],
                    factor_year=key[1],
                    co2e_factor=UnitConverter.normalize_number(row["co2e_factor"]),
                    factor_unit=row["factor_unit"],
                    scope=row["scope"],
                    category=row["category"] or None,
                    subcategory=row["subcategory"] or None,
                    geographic_scope=key[2],
                    source=row["source"] or None,
                    source_url=row["source_url"] or None,
                    notes=row["notes"] or None,
                )
                existing.add(key)
                created += 1

        logger.info(f"Created {created} emission factors ({skipped} already present)")
        return created, skipped

    async def seed_membership(self, organization_id: uuid.UUID, user_id: uuid.UUID) -> int:
        repo = OrganizationMemberRepository(self.session)
        if await repo.is_member(organization_id, user_id):
            return 0
        await repo.create(organization_id=organization_id, user_id=user_id, role="admin")
        return 1

    async def seed_demo_activities(self, organization_id: uuid.UUID) -> int:
        """
        Load demo activities for one organization.

        The ``facility`` column is a label; each label gets a stable facility id.

        Returns:
            Number of activities created
        """
        csv_file = self.data_dir / DEMO_ACTIVITIES_FILE
        if not csv_file.exists():
            logger.warning(f"File not found: {csv_file}")
            return 0

        logger.info(f"Loading demo activities from {csv_file}")
        repo = ActivityRepository(self.session)
        count = 0

        with open(csv_file, "r", encoding="utf-8") as f:
            for row in csv.DictReader(f):
                facility = row["facility"].strip()
                await repo.create(
                    organization_id=organization_id,
                    name=row["name"],
                    category=row["category"],
                    quantity=UnitConverter.normalize_number(row["quantity"]),
                    unit=row["unit"],
                    fuel_type=row["fuel_type"] or None,
                    facility_id=(
                        uuid.uuid5(organization_id, facility) if facility else None
                    ),
                    reporting_period_start=_parse_date(row["reporting_period_start"]),
                    reporting_period_end=_parse_date(row["reporting_period_end"]),
                    activity_date=_parse_date(row["activity_date"]),
                )
                count += 1

        logger.info(f"Created {count} demo activities for organization {organization_id}")
        return count

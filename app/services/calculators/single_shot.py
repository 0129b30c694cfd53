"""
Shared steps of the single-shot calculators.

A single-shot calculation is computed from the request body alone, cites an
evidence record, and is persisted only as an audit log entry.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, PersistenceError
from app.database.repositories import EmissionFactorRepository
from app.database.schemas import CalculationLogDBModel, EmissionFactorDBModel
from app.pydantic_models.reference_tables import EngineSettings, ReferenceTables
from app.services.audit.calculation_logger import CalculationAuditLogger
from app.services.provenance.provenance_validator import ProvenanceValidator
from app.utils.constants import OutputUnit

logger = logging.getLogger(__name__)


class SingleShotCalculator:
    """Base class wiring provenance, factor lookup and audit logging."""

    factor_type: str
    missing_factor_message: str

    def __init__(
        self,
        session: AsyncSession,
        reference_tables: ReferenceTables,
        settings: EngineSettings,
    ):
        self.session = session
        self.reference_tables = reference_tables
        self.settings = settings
        self.factors = EmissionFactorRepository(session)
        self.provenance = ProvenanceValidator(session)
        self.audit_logger = CalculationAuditLogger(session)

    async def latest_factor(self, fuel_type: str) -> EmissionFactorDBModel:
        """
        Raises:
            NotFoundError: If no factor of this calculator's family exists for the key
        """
        factor = await self.factors.get_latest_by_type_and_name(self.factor_type, fuel_type)
        if factor is None:
            logger.warning(f"No '{self.factor_type}' factor for '{fuel_type}'")
            raise NotFoundError(f"{self.missing_factor_message}: {fuel_type}")
        return factor

    @staticmethod
    def factor_snapshot(factor: EmissionFactorDBModel) -> dict[str, Any]:
        return {
            "factor_id": str(factor.id),
            "fuel_type": factor.fuel_type,
            "factor_type": factor.factor_type,
            "factor_year": factor.factor_year,
            "co2e_factor": str(factor.co2e_factor),
            "factor_unit": factor.factor_unit,
            "source": factor.source,
            "geographic_scope": factor.geographic_scope,
        }

    async def write_log(
        self,
        *,
        organization_id: UUID,
        user_id: UUID,
        input_data: dict[str, Any],
        output_value,
        methodology_version: str,
        factor: EmissionFactorDBModel,
    ) -> CalculationLogDBModel:
        """
        Persist the audit entry; the result is only returned once it is committed.

        Raises:
            PersistenceError: If the entry cannot be written
        """
        try:
            entry = await self.audit_logger.record(
                organization_id=organization_id,
                user_id=user_id,
                input_data=input_data,
                output_value=output_value,
                output_unit=OutputUnit.T_CO2E,
                methodology_version=methodology_version,
                factor_ids_used=[factor.id],
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Calculation succeeded but logging failed: {e}")
            raise PersistenceError(
                "Calculation succeeded but logging failed",
                calculations_saved=0,
                failed_at_index=1,
                failed_stage="audit_log",
                details=str(e),
            ) from e
        return entry

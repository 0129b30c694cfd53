"""
Database repositories for data access layer.

Provides clean abstraction over database operations following repository pattern.
"""
from app.database.repositories.activity import ActivityRepository
from app.database.repositories.base import BaseRepository
from app.database.repositories.calculated_emission import (
    CalculatedEmissionRepository,
    FacilityPeriodKey,
    ScopeTotal,
)
from app.database.repositories.calculation_log import CalculationLogRepository
from app.database.repositories.data_provenance import DataProvenanceRepository
from app.database.repositories.emission_factor import EmissionFactorRepository
from app.database.repositories.facility_emissions_aggregate import (
    FacilityEmissionsAggregateRepository,
)
from app.database.repositories.organization_member import OrganizationMemberRepository

__all__ = [
    "ActivityRepository",
    "BaseRepository",
    "CalculatedEmissionRepository",
    "CalculationLogRepository",
    "DataProvenanceRepository",
    "EmissionFactorRepository",
    "FacilityEmissionsAggregateRepository",
    "FacilityPeriodKey",
    "OrganizationMemberRepository",
    "ScopeTotal",
]

"""
SQLAlchemy database models (schemas).
"""
from app.database.schemas.activity_data import ActivityDataDBModel
from app.database.schemas.calculated_emission import CalculatedEmissionDBModel
from app.database.schemas.calculation_log import CalculationLogDBModel
from app.database.schemas.data_provenance import DataProvenanceDBModel
from app.database.schemas.emission_factor import EmissionFactorDBModel
from app.database.schemas.facility_emissions_aggregate import (
    FacilityEmissionsAggregateDBModel,
)
from app.database.schemas.organization_member import OrganizationMemberDBModel

__all__ = [
    "ActivityDataDBModel",
    "CalculatedEmissionDBModel",
    "CalculationLogDBModel",
    "DataProvenanceDBModel",
    "EmissionFactorDBModel",
    "FacilityEmissionsAggregateDBModel",
    "OrganizationMemberDBModel",
]

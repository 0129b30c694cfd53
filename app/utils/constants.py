"""
Application constants.
"""
from decimal import Decimal
from enum import Enum


class ConfigFile:
    """Configuration file paths."""
    PRODUCTION = "production.toml"
    DEVELOPMENT = "development.toml"
    TEST = "test.toml"


class Scope:
    """GHG Protocol scope tags as stored on factors and calculations."""
    SCOPE_1 = "1"
    SCOPE_2 = "2"
    SCOPE_3 = "3"


class ActivityCategory:
    """Activity categories recorded by the data-entry flows."""
    SCOPE_1 = "Scope 1"
    SCOPE_2 = "Scope 2"
    SCOPE_3 = "Scope 3"

    BATCH_CATEGORIES = (SCOPE_1, SCOPE_2)


class FactorType:
    """Emission factor families."""
    ENERGY = "energy"
    STATIONARY_COMBUSTION_ENERGY = "Stationary Combustion - Energy"
    BUSINESS_TRAVEL_SPEND = "Category 6 - Business Travel - Spend"


class CalculationType:
    """Labels reported in calculation responses."""
    SCOPE_1_2_BATCH = "Scope 1 & 2: Primary Verified Bills"
    SCOPE_3_TRAVEL_SPEND = "Scope 3: Category 6 - Business Travel - Spend"
    SCOPE_1_STATIONARY_COMBUSTION = "Scope 1: Stationary Combustion - Energy"


class OutputUnit:
    KG_CO2E = "kgCO2e"
    T_CO2E = "tCO2e"


class UnmatchedReason(str, Enum):
    """Reasons an activity is left out of a batch."""
    NO_FACTOR = "no factor for fuel type"
    UNIT_MISMATCH = "unit mismatch"
    INVALID_QUANTITY = "invalid quantity"


class VerificationStatus:
    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    REJECTED = "rejected"


# Precision used for tCO2e values reported by single-shot calculators
TCO2E_PRECISION = Decimal("0.000001")

# Scale of stored kgCO2e columns; batch results are persisted, logged and hashed at it
KGCO2E_PRECISION = Decimal("0.0000000001")

# Advisory lock namespace for per-organization batch runs
BATCH_LOCK_NAMESPACE = 7301

# Advisory lock namespace for per-organization audit chain appends
AUDIT_CHAIN_LOCK_NAMESPACE = 7302

AUDIT_CHAIN_GENESIS_SEED = b"emissions-audit-chain-genesis"

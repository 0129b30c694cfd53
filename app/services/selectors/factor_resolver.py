"""
Emission factor selection.

Picks exactly one factor per calculation from the factors loaded for a batch:
the newest publication year not later than the reporting period, falling back
to the oldest year available when every factor is newer than the period.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from app.database.schemas import EmissionFactorDBModel
from app.services.calculators.unit_converter import UnitConverter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FactorResolution:
    """
    Selected factor and the year rule that selected it.

    ``future_year_fallback`` is True when no factor year was earlier than or
    equal to the target year and the oldest available (later) year was used.
    Such selections are logged and carried into the audit snapshot for review.
    """

    factor: EmissionFactorDBModel
    target_year: Optional[int]
    future_year_fallback: bool = False
    geography_fallback: bool = False

    def to_snapshot(self) -> dict:
        return {
            "target_year": self.target_year,
            "selected_year": self.factor.factor_year,
            "future_year_fallback": self.future_year_fallback,
            "geography_fallback": self.geography_fallback,
        }


class FactorResolver:
    """
    In-memory factor selector over a pre-fetched factor set.

    The batch fetches factors once and resolves every activity against the
    same snapshot, so all activities of a run see the same reference data.
    """

    def __init__(self, factors: Iterable[EmissionFactorDBModel], default_geography: str = "UK"):
        self.default_geography = default_geography
        self._by_key: dict[str, list[EmissionFactorDBModel]] = defaultdict(list)
        for factor in factors:
            self._by_key[factor.fuel_type].append(factor)

    def has_key(self, fuel_type_key: str) -> bool:
        return fuel_type_key in self._by_key

    @staticmethod
    def target_year_for(
        reporting_period_end: Optional[date], activity_date: Optional[date] = None
    ) -> Optional[int]:
        """Year the factor should apply to; None when the activity is undated."""
        if reporting_period_end is not None:
            return reporting_period_end.year
        if activity_date is not None:
            return activity_date.year
        return None

    def resolve(
        self,
        fuel_type_key: str,
        target_year: Optional[int],
        geography: Optional[str] = None,
    ) -> Optional[FactorResolution]:
        """
        Select the factor for a key and year.

        Args:
            fuel_type_key: Factor key from the fuel type mapper
            target_year: Reporting year; None selects the newest factor
            geography: Preferred geographic scope, defaults to the configured one

        Returns:
            FactorResolution, or None when no factor exists for the key
        """
        candidates = self._by_key.get(fuel_type_key)
        if not candidates:
            return None

        wanted_geography = geography or self.default_geography
        in_geography = [f for f in candidates if f.geographic_scope == wanted_geography]
        geography_fallback = not in_geography
        if in_geography:
            candidates = in_geography
        else:
            logger.warning(
                f"No {wanted_geography} factor for '{fuel_type_key}', "
                f"using factors from {sorted({f.geographic_scope for f in candidates})}"
            )

        if target_year is None:
            factor = max(candidates, key=lambda f: f.factor_year)
            return FactorResolution(factor, None, geography_fallback=geography_fallback)

        eligible = [f for f in candidates if f.factor_year <= target_year]
        if eligible:
            factor = max(eligible, key=lambda f: f.factor_year)
            return FactorResolution(factor, target_year, geography_fallback=geography_fallback)

        factor = min(candidates, key=lambda f: f.factor_year)
        logger.warning(
            f"No '{fuel_type_key}' factor published on or before {target_year}; "
            f"applying oldest available year {factor.factor_year} (flagged for review)"
        )
        return FactorResolution(
            factor, target_year, future_year_fallback=True, geography_fallback=geography_fallback
        )

    @staticmethod
    def units_compatible(normalized_unit: str, factor: EmissionFactorDBModel) -> bool:
        """True when the activity's canonical unit equals the factor's unit."""
        return UnitConverter.units_match(normalized_unit, factor.factor_unit)

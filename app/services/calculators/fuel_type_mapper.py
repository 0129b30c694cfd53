"""
Fuel/activity type mapping.

Maps the label recorded on an activity (utility label, factor key or free-text
name) to an emission factor key and a GHG scope. The mapper is total: every
activity gets a key, unmapped inputs degrade to their raw label.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from rapidfuzz import fuzz, process

from app.pydantic_models.reference_tables import ReferenceTables
from app.utils.constants import Scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FuelMapping:
    """Resolved factor key, scope and how it was found."""

    fuel_type_key: str
    scope: str
    method: str
    confidence: int = 100


class FuelTypeMapper:
    """
    Service for mapping activity labels to factor keys.

    Resolution order:
        1. recorded label found in the mapping table
        2. recorded label not in the table, used as the key itself
        3. unit-specific keyword rules applied to the activity name
        4. mapping label contained in the name ("Refrigerant Leakage - 2024-01-01 to ...")
        5. remaining keyword rules
        6. fuzzy match of the name against mapping labels
        7. slug of the name
    """

    DEFAULT_THRESHOLD = 80

    def __init__(self, reference_tables: ReferenceTables, fuzzy_threshold: int = DEFAULT_THRESHOLD):
        self.mapping = reference_tables.fuel_type_mapping
        self.keyword_rules = reference_tables.fuel_type_keywords
        self.fuzzy_threshold = fuzzy_threshold

    @staticmethod
    def scope_from_category(category: Optional[str]) -> str:
        """Infer the scope tag from an activity category ("Scope 2" -> "2")."""
        if category and "2" in category:
            return Scope.SCOPE_2
        return Scope.SCOPE_1

    @staticmethod
    def slugify(value: str) -> str:
        return re.sub(r"[^a-z0-9]+", "_", value.strip().lower()).strip("_")

    def map(
        self,
        fuel_type: Optional[str],
        category: Optional[str],
        name: Optional[str] = None,
        normalized_unit: Optional[str] = None,
    ) -> FuelMapping:
        """
        Map one activity to a factor key and scope.

        Args:
            fuel_type: Label recorded on the activity, if any
            category: Activity category used for scope inference
            name: Free-text activity name
            normalized_unit: Canonical unit of the activity quantity

        Returns:
            FuelMapping, never None
        """
        category_scope = self.scope_from_category(category)
        label = (fuel_type or "").strip()

        if label:
            entry = self.mapping.get(label) or self.mapping.get(label.lower())
            if entry is not None:
                return FuelMapping(entry.fuel_type, entry.scope, "mapping_table")
            logger.debug(f"Label '{label}' not in mapping table, using it as factor key")
            return FuelMapping(label, category_scope, "raw_label")

        text = (name or "").strip().lower()
        if not text:
            logger.warning("Activity has neither a fuel type nor a name")
            return FuelMapping("unknown", category_scope, "fallback", confidence=0)

        unit_rules = [rule for rule in self.keyword_rules if rule.unit is not None]
        general_rules = [rule for rule in self.keyword_rules if rule.unit is None]

        keyword = self._keyword_rule(unit_rules, text, normalized_unit, category_scope)
        if keyword is not None:
            return keyword

        contained = self._contained_label(text)
        if contained is not None:
            return contained

        keyword = self._keyword_rule(general_rules, text, normalized_unit, category_scope)
        if keyword is not None:
            return keyword

        fuzzy = self._fuzzy_label(text)
        if fuzzy is not None:
            return fuzzy

        slug = self.slugify(text)
        logger.info(f"No mapping for activity name '{name}', falling back to '{slug}'")
        return FuelMapping(slug, category_scope, "fallback", confidence=0)

    def _keyword_rule(
        self, rules, text: str, normalized_unit: Optional[str], category_scope: str
    ) -> Optional[FuelMapping]:
        for rule in rules:
            if rule.keyword in text and (rule.unit is None or rule.unit == normalized_unit):
                logger.debug(f"Derived '{rule.fuel_type}' from name '{text}' via '{rule.keyword}'")
                return FuelMapping(
                    rule.fuel_type, self._scope_for_key(rule.fuel_type, category_scope), "name_keyword"
                )
        return None

    def _contained_label(self, text: str) -> Optional[FuelMapping]:
        # longest first so "natural_gas_m3" wins over "natural_gas"
        for label in sorted(self.mapping, key=len, reverse=True):
            lowered = label.lower()
            if lowered in text or lowered.replace("_", " ") in text:
                entry = self.mapping[label]
                logger.debug(f"Derived '{entry.fuel_type}' from name '{text}' via label '{label}'")
                return FuelMapping(entry.fuel_type, entry.scope, "name_label")
        return None

    def _scope_for_key(self, fuel_type_key: str, default: str) -> str:
        for entry in self.mapping.values():
            if entry.fuel_type == fuel_type_key:
                return entry.scope
        return default

    def _fuzzy_label(self, text: str) -> Optional[FuelMapping]:
        if not self.mapping:
            return None

        # token_sort_ratio handles word order ("grid electricity" vs "electricity grid")
        choices = {label.replace("_", " "): label for label in self.mapping}
        result = process.extractOne(text, choices.keys(), scorer=fuzz.token_sort_ratio)
        if result is None:
            return None

        matched, score, _ = result
        if score < self.fuzzy_threshold:
            logger.debug(
                f"Fuzzy match score {score} below threshold {self.fuzzy_threshold} for '{text}'"
            )
            return None

        entry = self.mapping[choices[matched]]
        logger.info(f"Fuzzy matched '{text}' to label '{choices[matched]}' ({score:.0f}%)")
        return FuelMapping(entry.fuel_type, entry.scope, "fuzzy_label", confidence=int(score))

"""
Calculation audit logger.

Writes one immutable log entry per calculation. Entries of an organization
form a SHA-256 hash chain: each entry hashes its own canonical content
together with the previous entry's hash, starting from a fixed genesis hash.
Editing any stored entry breaks verification from that entry on.
"""

import hashlib
import json
import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Sequence
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories import CalculationLogRepository
from app.database.schemas import CalculationLogDBModel
from app.pydantic_models.calculation_log import ChainVerificationPydModel
from app.utils.constants import (
    AUDIT_CHAIN_GENESIS_SEED,
    AUDIT_CHAIN_LOCK_NAMESPACE,
    KGCO2E_PRECISION,
)

logger = logging.getLogger(__name__)

GENESIS_HASH = hashlib.sha256(AUDIT_CHAIN_GENESIS_SEED).hexdigest()

HASH_VALUE_PRECISION = KGCO2E_PRECISION


def _canonical_decimal(value: Any) -> str:
    return format(
        Decimal(str(value)).quantize(HASH_VALUE_PRECISION, rounding=ROUND_HALF_UP), "f"
    )


def _json_safe(data: Any) -> Any:
    """Round-trip through JSON so the stored snapshot equals the hashed one."""
    return json.loads(json.dumps(data, default=str))


def compute_entry_hash(entry: CalculationLogDBModel) -> str:
    """
    Hash the canonical content of a log entry.

    Covers every stored column except ``entry_hash`` itself, including the
    link to the previous entry.
    """
    payload = {
        "log_id": str(entry.log_id),
        "organization_id": str(entry.organization_id),
        "user_id": str(entry.user_id),
        "calculated_emission_id": (
            str(entry.calculated_emission_id) if entry.calculated_emission_id else None
        ),
        "sequence_number": entry.sequence_number,
        "input_data": entry.input_data,
        "output_value": _canonical_decimal(entry.output_value),
        "output_unit": entry.output_unit,
        "methodology_version": entry.methodology_version,
        "factor_ids_used": [str(factor_id) for factor_id in entry.factor_ids_used],
        "created_at": entry.created_at.isoformat(),
        "previous_hash": entry.previous_hash,
    }
    serialized = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


class CalculationAuditLogger:
    """
    Service for appending to and verifying the calculation audit trail.

    ``record`` only flushes; the caller owns the transaction so the calculation
    and its log commit or roll back together.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = CalculationLogRepository(session)

    async def _lock_chain(self, organization_id: UUID):
        # Serializes concurrent appends to one organization's chain until commit
        if self.session.bind.dialect.name == "postgresql":
            await self.session.execute(
                text("SELECT pg_advisory_xact_lock(:namespace, hashtext(:key))"),
                {"namespace": AUDIT_CHAIN_LOCK_NAMESPACE, "key": str(organization_id)},
            )

    async def record(
        self,
        *,
        organization_id: UUID,
        user_id: UUID,
        input_data: dict[str, Any],
        output_value: Decimal,
        output_unit: str,
        methodology_version: str,
        factor_ids_used: Sequence[UUID | str],
        calculated_emission_id: Optional[UUID] = None,
    ) -> CalculationLogDBModel:
        """
        Append one entry to the organization's audit chain.

        Args:
            organization_id: Owning organization
            user_id: User who triggered the calculation
            input_data: Full input snapshot (raw input, factor metadata, conversions)
            output_value: Calculated value
            output_unit: Unit of the calculated value (kgCO2e, tCO2e)
            methodology_version: Methodology tag
            factor_ids_used: Factors used in the calculation
            calculated_emission_id: Calculation audited by this entry, if persisted

        Returns:
            The flushed log entry

        Raises:
            ValueError: If the snapshot or the factor list is empty, or the output is negative
        """
        if not input_data:
            raise ValueError("Audit log input snapshot must not be empty")
        if not factor_ids_used:
            raise ValueError("Audit log must reference at least one emission factor")
        if Decimal(str(output_value)) < 0:
            raise ValueError("Audit log output value must not be negative")

        await self._lock_chain(organization_id)
        head = await self.repo.get_chain_head(organization_id)

        entry = CalculationLogDBModel(
            log_id=uuid4(),
            organization_id=organization_id,
            user_id=user_id,
            calculated_emission_id=calculated_emission_id,
            sequence_number=(head.sequence_number + 1) if head else 1,
            input_data=_json_safe(input_data),
            output_value=output_value,
            output_unit=output_unit,
            methodology_version=methodology_version,
            factor_ids_used=[str(factor_id) for factor_id in factor_ids_used],
            previous_hash=head.entry_hash if head else GENESIS_HASH,
            created_at=datetime.utcnow(),
        )
        entry.entry_hash = compute_entry_hash(entry)

        self.session.add(entry)
        await self.session.flush()

        logger.info(
            f"Audit entry #{entry.sequence_number} written for organization {organization_id} "
            f"({output_value} {output_unit})"
        )
        return entry

    async def verify_chain(self, organization_id: UUID) -> ChainVerificationPydModel:
        """
        Recompute every hash of an organization's chain.

        Returns:
            Verification result naming the first broken entry, if any
        """
        entries = await self.repo.get_chain(organization_id)
        previous_hash = GENESIS_HASH

        for position, entry in enumerate(entries, start=1):
            if (
                entry.sequence_number != position
                or entry.previous_hash != previous_hash
                or compute_entry_hash(entry) != entry.entry_hash
            ):
                logger.error(
                    f"Audit chain broken for organization {organization_id} "
                    f"at entry #{entry.sequence_number} ({entry.log_id})"
                )
                return ChainVerificationPydModel(
                    organization_id=organization_id,
                    valid=False,
                    entries_checked=position,
                    broken_at_log_id=entry.log_id,
                    broken_at_sequence=entry.sequence_number,
                )
            previous_hash = entry.entry_hash

        return ChainVerificationPydModel(
            organization_id=organization_id, valid=True, entries_checked=len(entries)
        )

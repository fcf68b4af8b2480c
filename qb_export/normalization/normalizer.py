"""Load record normalization.

This module maps raw load records, whatever naming scheme their producer
used, onto the canonical load model, and resolves the billable weight.
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Optional

from ..config import Config
from ..models.schema import CanonicalLoad, RawRecord
from .aliases import FIELD_ALIASES, NUMERIC_FIELDS
from .coerce import ZERO, coerce_datetime, coerce_decimal, coerce_string

logger = logging.getLogger(__name__)

TONS_QUANTUM = Decimal('0.0001')


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def lookup(record: RawRecord, field: str) -> Any:
    """
    Return the first usable value among a field's aliases.

    Numeric fields skip values that coerce to zero so a later alias holding
    a real weight is still found.

    Args:
        record: Raw load record
        field: Canonical field name (key of FIELD_ALIASES)

    Returns:
        Raw value, or None when no alias holds one
    """
    for key in FIELD_ALIASES[field]:
        value = record.get(key)
        if _is_blank(value):
            continue
        if field in NUMERIC_FIELDS and coerce_decimal(value) == ZERO:
            continue
        return value
    return None


def resolve_project_id(record: RawRecord) -> str:
    """Project identifier used both for grouping and on the canonical load."""
    return coerce_string(lookup(record, 'project_id'), Config.UNASSIGNED_PROJECT_ID)


def resolve_project_name(record: RawRecord, project_id: Optional[str] = None) -> str:
    """Display name, falling back to the project id or the unassigned label."""
    if project_id is None:
        project_id = resolve_project_id(record)
    if project_id == Config.UNASSIGNED_PROJECT_ID:
        fallback = Config.UNASSIGNED_PROJECT_NAME
    else:
        fallback = project_id
    return coerce_string(lookup(record, 'project_name'), fallback)


def resolve_status(record: RawRecord) -> str:
    return coerce_string(lookup(record, 'status')).lower()


def resolve_weight_tons(load: CanonicalLoad) -> Decimal:
    """
    Billable weight in tons.

    Tons win whenever positive; pounds are only a fallback unit,
    converted at 2000 lb/ton and rounded to 4 decimal places.
    """
    if load.weight_tons > 0:
        return load.weight_tons
    if load.weight_lbs > 0:
        return (load.weight_lbs / Config.POUNDS_PER_TON).quantize(
            TONS_QUANTUM, rounding=ROUND_HALF_UP
        )
    return ZERO


class LoadNormalizer:
    """
    Normalizes raw load records into CanonicalLoad objects.

    Normalization never fails: every field has a default, numbers parse
    permissively and unusable dates become the current instant.
    """

    def __init__(self, now: Callable[[], datetime] = datetime.now):
        """
        Initialize the normalizer.

        Args:
            now: Clock used when a record carries no usable date
        """
        self.now = now
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def normalize(self, record: RawRecord) -> CanonicalLoad:
        """
        Normalize one raw record.

        Args:
            record: Raw load record in any supported naming scheme

        Returns:
            Canonical load
        """
        project_id = resolve_project_id(record)

        load = CanonicalLoad(
            id=coerce_string(lookup(record, 'id'), Config.DEFAULT_LOAD_ID),
            date=coerce_datetime(lookup(record, 'date'), now=self.now),
            ticket_number=coerce_string(lookup(record, 'ticket_number')),
            hauler=coerce_string(lookup(record, 'hauler')),
            truck_id=coerce_string(lookup(record, 'truck_id')),
            weight_tons=coerce_decimal(lookup(record, 'weight_tons')),
            weight_lbs=coerce_decimal(lookup(record, 'weight_lbs')),
            material_type=coerce_string(lookup(record, 'material_type'), Config.DEFAULT_MATERIAL),
            carbon_saved=coerce_decimal(lookup(record, 'carbon_saved')),
            hash=coerce_string(lookup(record, 'hash')),
            project_id=project_id,
            project_name=resolve_project_name(record, project_id),
            notes=coerce_string(lookup(record, 'notes')),
        )

        self.logger.debug(f"Normalized load {load.id} for project {project_id}")
        return load

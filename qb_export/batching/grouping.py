"""Project grouping and date batching."""

import logging
from datetime import date
from typing import Dict, Iterable, List

from ..models.schema import BillingBatch, CanonicalLoad, ProjectGroup, RawRecord
from ..normalization.normalizer import resolve_project_id, resolve_project_name

logger = logging.getLogger(__name__)


def group_by_project(records: Iterable[RawRecord]) -> Dict[str, ProjectGroup]:
    """
    Partition raw records by project id.

    Every record lands in exactly one group. Groups appear in order of
    first arrival and take their display name from their first record.
    """
    groups: Dict[str, ProjectGroup] = {}
    for record in records:
        project_id = resolve_project_id(record)
        group = groups.get(project_id)
        if group is None:
            group = ProjectGroup(
                project_id=project_id,
                project_name=resolve_project_name(record, project_id),
            )
            groups[project_id] = group
        group.loads.append(record)

    logger.debug(f"Grouped records into {len(groups)} projects")
    return groups


def qb_date(day: date) -> str:
    """MM/DD/YYYY, independent of locale."""
    return f"{day.month:02d}/{day.day:02d}/{day.year:04d}"


def format_qb_date(load: CanonicalLoad) -> str:
    """QuickBooks date of the load's own calendar day, no zone conversion."""
    return qb_date(load.date.date())


def batch_by_date(loads: Iterable[CanonicalLoad]) -> List[BillingBatch]:
    """
    Partition one project's loads into billing batches by calendar date.

    Batches appear in order of first occurrence; loads keep their order
    within a batch.
    """
    by_date: Dict[str, List[CanonicalLoad]] = {}
    for load in loads:
        by_date.setdefault(format_qb_date(load), []).append(load)

    return [
        BillingBatch(invoice_date=day_loads[0].date.date(), loads=day_loads)
        for day_loads in by_date.values()
    ]

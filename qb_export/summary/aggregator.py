"""Per-project export totals.

Computed straight from the project groups, independently of which
interchange format is being produced.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional

from ..config import Config
from ..models.schema import ProjectGroup, ProjectSummary
from ..normalization.normalizer import LoadNormalizer, resolve_weight_tons
from ..serializers.base import fixed

logger = logging.getLogger(__name__)

CARBON_UNIT = "tons CO₂e"


def summarize_group(group: ProjectGroup, normalizer: LoadNormalizer) -> ProjectSummary:
    loads = [normalizer.normalize(record) for record in group.loads]
    total_tons = sum((resolve_weight_tons(load) for load in loads), Decimal('0'))
    total_carbon = sum((load.carbon_saved for load in loads), Decimal('0'))
    total_revenue = total_tons * Config.RATE_PER_TON

    return ProjectSummary(
        project_name=group.project_name,
        load_count=len(loads),
        total_tons=fixed(total_tons, 2),
        total_revenue=f"${fixed(total_revenue, 2)}",
        total_carbon_saved=f"{fixed(total_carbon, 2)} {CARBON_UNIT}",
    )


def build_summary(
    groups: Dict[str, ProjectGroup],
    normalizer: Optional[LoadNormalizer] = None,
) -> Dict[str, ProjectSummary]:
    """
    Summarize every project group.

    Args:
        groups: Project groups keyed by project id
        normalizer: Normalizer to apply to each raw record

    Returns:
        ProjectSummary per project id, in group order
    """
    normalizer = normalizer or LoadNormalizer()
    summary = {
        project_id: summarize_group(group, normalizer)
        for project_id, group in groups.items()
    }
    logger.debug(f"Summarized {len(summary)} projects")
    return summary

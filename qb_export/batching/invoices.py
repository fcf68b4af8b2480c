"""Invoice planning shared by both interchange formats.

Grouping, normalization, date batching, invoice numbering and amount
calculation all happen here, once. Serializers only render the result, so
the IIF and CSV documents of one load set always agree on every amount.
"""

import itertools
import logging
import re
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from ..config import Config
from ..models.schema import Invoice, InvoiceLine, ProjectGroup
from ..normalization.normalizer import LoadNormalizer, resolve_weight_tons
from .grouping import batch_by_date

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')
CLASS_STRIP_PATTERN = re.compile(r'[^a-zA-Z0-9\s\-]')


def class_label(project_name: str) -> str:
    """QuickBooks class for a project, e.g. "LEED-Tower 3 - Phase B"."""
    return f"{Config.CLASS_PREFIX}{CLASS_STRIP_PATTERN.sub('', project_name).strip()}"


def line_amount(tons: Decimal, rate: Decimal = Config.RATE_PER_TON) -> Decimal:
    """Billed amount for one load, rounded half-up to cents."""
    return (tons * rate).quantize(CENTS, rounding=ROUND_HALF_UP)


def due_date(invoice_date: date, days: int = Config.DUE_DAYS) -> date:
    """Payment due date, capped at the last representable day."""
    try:
        return invoice_date + timedelta(days=days)
    except OverflowError:
        logger.warning(f"Due date past {date.max} for invoice dated {invoice_date}")
        return date.max


def plan_invoices(
    groups: Dict[str, ProjectGroup],
    normalizer: Optional[LoadNormalizer] = None,
    start_number: int = Config.INVOICE_START,
) -> List[Invoice]:
    """
    Turn project groups into numbered invoices, one per project per day.

    Document numbers come from a single counter shared by every project in
    the call, starting at ``start_number``.

    Args:
        groups: Project groups in export order
        normalizer: Normalizer to apply to each raw record
        start_number: First invoice number

    Returns:
        Invoices in document-number order
    """
    normalizer = normalizer or LoadNormalizer()
    counter = itertools.count(start_number)
    invoices: List[Invoice] = []

    for group in groups.values():
        label = class_label(group.project_name)
        loads = [normalizer.normalize(record) for record in group.loads]

        for batch in batch_by_date(loads):
            lines = []
            for load in batch.loads:
                tons = resolve_weight_tons(load)
                lines.append(InvoiceLine(load=load, tons=tons, amount=line_amount(tons)))

            invoices.append(Invoice(
                doc_number=f"{Config.DOCNUM_PREFIX}{next(counter)}",
                project_id=group.project_id,
                project_name=group.project_name,
                class_label=label,
                invoice_date=batch.invoice_date,
                due_date=due_date(batch.invoice_date),
                lines=lines,
            ))

    logger.info(f"Planned {len(invoices)} invoices across {len(groups)} projects")
    return invoices

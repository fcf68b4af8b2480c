"""QuickBooks Desktop IIF serializer.

Renders planned invoices as an Intuit Interchange Format document: a
TRNS header line per invoice, one SPL line per load and an ENDTRNS
terminator, all tab-delimited with CRLF line endings.
"""

import logging
import re
from typing import Any, List, Sequence

from ..config import Config
from ..models.schema import Invoice, InvoiceLine
from ..batching.grouping import qb_date
from .base import fixed, join_lines

logger = logging.getLogger(__name__)

HEADER_LINES = (
    "!TRNS\tTRNSTYPE\tDATE\tACCNT\tNAME\tCLASS\tAMOUNT\tDOCNUM\tMEMO\tCLEAR\tTOPRINT\tTERMS",
    "!SPL\tTRNSTYPE\tDATE\tACCNT\tNAME\tCLASS\tAMOUNT\tDOCNUM\tMEMO\tCLEAR\tQNTY\tPRICE\tINVITEM",
    "!ENDTRNS",
)
TRANSACTION_TYPE = "INVOICE"
HASH_PREFIX_LENGTH = 8

_CONTROL_CHARS = re.compile(r'[\t\r\n]+')


def _field(value: Any) -> str:
    # a stray tab or newline would shift every following column
    return _CONTROL_CHARS.sub(' ', str(value))


def _row(*values: Any) -> str:
    return "\t".join(_field(v) for v in values)


def line_memo(line: InvoiceLine) -> str:
    """SPL memo: reference, material, hauler and the short audit hash."""
    load = line.load
    parts = [
        f"{Config.MEMO_PREFIX} #{load.reference}",
        load.material_type,
        f"| {load.hauler}" if load.hauler else "",
        f"| SHA:{load.hash[:HASH_PREFIX_LENGTH]}" if load.hash else "",
    ]
    return " ".join(p for p in parts if p)


def invoice_lines(invoice: Invoice) -> List[str]:
    """TRNS, SPL and ENDTRNS lines for one invoice."""
    date_text = qb_date(invoice.invoice_date)
    lines = [_row(
        "TRNS",
        TRANSACTION_TYPE,
        date_text,
        Config.AR_ACCOUNT,
        invoice.project_name,
        invoice.class_label,
        fixed(invoice.total, 2),
        invoice.doc_number,
        f"{Config.SERVICE_ITEM} - {invoice.project_name}",
        "N",
        "Y",
        Config.TERMS,
    )]

    for line in invoice.lines:
        # negative split amount books income
        lines.append(_row(
            "SPL",
            TRANSACTION_TYPE,
            date_text,
            Config.INCOME_ACCOUNT,
            invoice.project_name,
            invoice.class_label,
            fixed(-line.amount, 2),
            invoice.doc_number,
            line_memo(line),
            "N",
            fixed(line.tons, 4),
            fixed(Config.RATE_PER_TON, 2),
            Config.SERVICE_ITEM,
        ))

    lines.append("ENDTRNS")
    return lines


def render_iif(invoices: Sequence[Invoice]) -> str:
    """
    Render a complete IIF document.

    Args:
        invoices: Planned invoices

    Returns:
        Document text with CRLF after every line
    """
    lines = list(HEADER_LINES)
    for invoice in invoices:
        lines.extend(invoice_lines(invoice))

    logger.debug(f"Rendered {len(invoices)} invoices as IIF")
    return join_lines(lines)

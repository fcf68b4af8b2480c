"""QuickBooks Online invoice CSV serializer.

One row per load, no separate invoice header row. Text fields are always
quoted (embedded quotes doubled); numeric fields are written bare.
"""

import csv
import io
import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..config import Config
from ..models.schema import Invoice, InvoiceLine
from ..batching.grouping import qb_date
from .base import CRLF, fixed

logger = logging.getLogger(__name__)

COLUMNS = (
    'InvoiceNo',
    'Customer',
    'InvoiceDate',
    'DueDate',
    'Terms',
    'ItemName',
    'ItemDescription',
    'Qty',
    'Rate',
    'Amount',
    'Class',
    'Memo',
    'SHA256_Audit_Hash',
    'LoadTicket',
    'MaterialType',
    'Hauler',
    'TruckID',
    'CarbonSavedTons',
)


def item_description(line: InvoiceLine) -> str:
    load = line.load
    parts = [
        Config.COMPLIANCE_LABEL,
        f"Load #{load.reference}",
        load.material_type,
        f"Hauler: {load.hauler}" if load.hauler else "",
    ]
    return " | ".join(p for p in parts if p)


def _number(value: Decimal, places: int) -> Decimal:
    # QUOTE_NONNUMERIC leaves Decimal values unquoted
    return Decimal(fixed(value, places))


def render_online_csv(invoices: Sequence[Invoice], export_date: Optional[date] = None) -> str:
    """
    Render a complete QuickBooks Online import CSV.

    Args:
        invoices: Planned invoices
        export_date: Date stamped into the memo column (default: today)

    Returns:
        Document text with CRLF after every row
    """
    export_date = export_date or date.today()
    memo = f"{Config.EXPORT_MEMO} | {qb_date(export_date)}"

    buffer = io.StringIO(newline='')
    buffer.write(",".join(COLUMNS) + CRLF)
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator=CRLF)

    row_count = 0
    for invoice in invoices:
        invoice_date = qb_date(invoice.invoice_date)
        due_date = qb_date(invoice.due_date)
        for line in invoice.lines:
            load = line.load
            writer.writerow([
                invoice.doc_number,
                invoice.project_name,
                invoice_date,
                due_date,
                Config.TERMS,
                Config.SERVICE_ITEM,
                item_description(line),
                _number(line.tons, 4),
                _number(Config.RATE_PER_TON, 2),
                _number(line.amount, 2),
                invoice.class_label,
                memo,
                load.hash,
                load.reference,
                load.material_type,
                load.hauler,
                load.truck_id,
                _number(load.carbon_saved, 4),
            ])
            row_count += 1

    logger.debug(f"Rendered {row_count} rows across {len(invoices)} invoices as CSV")
    return buffer.getvalue()

"""Data models for the QuickBooks export pipeline."""

from .schema import (
    RawRecord,
    CanonicalLoad,
    ProjectGroup,
    BillingBatch,
    InvoiceLine,
    Invoice,
    ProjectSummary,
    ExportResult,
    PreviewResult,
)

__all__ = [
    "RawRecord",
    "CanonicalLoad",
    "ProjectGroup",
    "BillingBatch",
    "InvoiceLine",
    "Invoice",
    "ProjectSummary",
    "ExportResult",
    "PreviewResult",
]

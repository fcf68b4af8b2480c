"""Pydantic models for the export pipeline.

This module defines the canonical load record, the grouping and invoice
structures shared by both serializers, and the result objects returned
to callers.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

RawRecord = Dict[str, Any]


class CanonicalLoad(BaseModel):
    """
    Normalized representation of one hauled load.

    Attributes:
        id: Load identifier ("N/A" when the producer sent none)
        date: Instant the load was recorded
        ticket_number: Weigh ticket number
        hauler: Hauling company
        truck_id: Vehicle identifier
        weight_tons: Net weight in tons as recorded
        weight_lbs: Net weight in pounds (informational, fallback unit)
        material_type: Material classification
        carbon_saved: Emissions avoided, in tons CO2e
        hash: SHA-256 integrity hash carried through from the client
        project_id: Project identifier, never empty
        project_name: Project display name
        notes: Free-text notes
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Load identifier")
    date: datetime = Field(..., description="Load instant")
    ticket_number: str = Field("", description="Weigh ticket number")
    hauler: str = Field("", description="Hauler name")
    truck_id: str = Field("", description="Vehicle identifier")
    weight_tons: Decimal = Field(Decimal('0'), ge=0, description="Net weight in tons")
    weight_lbs: Decimal = Field(Decimal('0'), ge=0, description="Net weight in pounds")
    material_type: str = Field(..., description="Material classification")
    carbon_saved: Decimal = Field(Decimal('0'), ge=0, description="CO2e avoided in tons")
    hash: str = Field("", description="SHA-256 integrity hash")
    project_id: str = Field(..., min_length=1, description="Project identifier")
    project_name: str = Field(..., description="Project display name")
    notes: str = Field("", description="Free-text notes")

    @property
    def reference(self) -> str:
        """Ticket number, or the load id when no ticket was recorded."""
        return self.ticket_number or self.id


class ProjectGroup(BaseModel):
    """Raw records routed to one project, in arrival order."""

    project_id: str
    project_name: str
    loads: List[RawRecord] = Field(default_factory=list)


class BillingBatch(BaseModel):
    """Loads of one project sharing one invoice date."""

    model_config = ConfigDict(frozen=True)

    invoice_date: date
    loads: List[CanonicalLoad]


class InvoiceLine(BaseModel):
    """One billed load with its resolved quantity and amount."""

    model_config = ConfigDict(frozen=True)

    load: CanonicalLoad
    tons: Decimal
    amount: Decimal


class Invoice(BaseModel):
    """
    One billing batch ready for rendering.

    ``total`` is always the sum of the line amounts, so header and
    detail rows can never disagree.
    """

    model_config = ConfigDict(frozen=True)

    doc_number: str
    project_id: str
    project_name: str
    class_label: str
    invoice_date: date
    due_date: date
    lines: List[InvoiceLine]

    @property
    def total(self) -> Decimal:
        return sum((line.amount for line in self.lines), Decimal('0.00'))


class ProjectSummary(BaseModel):
    """Per-project aggregate shown in previews and export results."""

    project_name: str
    load_count: int
    total_tons: str
    total_revenue: str
    total_carbon_saved: str


class ExportResult(BaseModel):
    """
    Outcome of one export call.

    Attributes:
        success: Whether a document was produced
        format: "IIF" or "CSV"
        filename: Deterministic download name
        content: The complete document
        summary: Per-project totals keyed by project id
        error: Failure message when success is False
    """

    success: bool
    format: Optional[str] = None
    filename: Optional[str] = None
    content: Optional[str] = Field(None, repr=False)
    summary: Dict[str, ProjectSummary] = Field(default_factory=dict)
    error: Optional[str] = None

    @field_validator('format')
    @classmethod
    def validate_format(cls, v):
        """Only the two interchange formats are produced."""
        if v is not None and v not in ("IIF", "CSV"):
            raise ValueError(f"Unknown export format: {v}")
        return v


class PreviewResult(BaseModel):
    """Summary-only outcome, no document is produced."""

    success: bool
    summary: Dict[str, ProjectSummary] = Field(default_factory=dict)
    error: Optional[str] = None

"""Configuration settings for the QuickBooks exporter.

This module centralizes configuration values and settings
for easy maintenance and extension.
"""

from pathlib import Path
from decimal import Decimal


class Config:
    """Application configuration."""

    # Application info
    APP_NAME = "DivertScan QuickBooks Export"
    VERSION = "1.0.0"

    # Logging
    LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # QuickBooks chart of accounts (names must match the QB company file)
    INCOME_ACCOUNT = "LEED Compliance Services"
    AR_ACCOUNT = "Accounts Receivable"
    CLASS_PREFIX = "LEED-"
    RATE_PER_TON = Decimal('125.00')
    TERMS = "Net 30"
    DUE_DAYS = 30
    MEMO_PREFIX = "DivertScan Load"
    SERVICE_ITEM = "LEED Compliance Documentation"
    COMPLIANCE_LABEL = "LEED v5 MRp2 Compliance Documentation"
    EXPORT_MEMO = "DivertScan Export"

    # Invoice numbering, adjust to continue the QB sequence
    INVOICE_START = 1000
    DOCNUM_PREFIX = "DS-"

    # Record defaults
    UNASSIGNED_PROJECT_ID = "UNASSIGNED"
    UNASSIGNED_PROJECT_NAME = "Unassigned Project"
    DEFAULT_MATERIAL = "Mixed C&D"
    DEFAULT_LOAD_ID = "N/A"
    POUNDS_PER_TON = Decimal('2000')

    # Load resolution
    EXCLUDED_STATUSES = frozenset({"draft", "pending_upload"})
    REMOTE_BASE_URL = "http://localhost:8000"
    REMOTE_LOADS_PATH = "/api/loads"
    REMOTE_TIMEOUT_SECONDS = 15.0
    PROBE_TIMEOUT_SECONDS = 1.0

    # Output settings
    OUTPUT_DIR = Path("output")
    FILENAME_PREFIX = "DivertScan_QB"
    JSON_INDENT = 2

    # Paths
    PROJECT_ROOT = Path(__file__).parent.parent

    @classmethod
    def get_output_dir(cls) -> Path:
        """Get output directory, creating if it doesn't exist."""
        output_dir = cls.PROJECT_ROOT / cls.OUTPUT_DIR
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir

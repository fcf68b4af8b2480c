"""DivertScan QuickBooks export."""

__version__ = "1.0.0"

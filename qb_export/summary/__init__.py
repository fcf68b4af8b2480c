"""Export summaries."""

from .aggregator import build_summary

__all__ = ["build_summary"]

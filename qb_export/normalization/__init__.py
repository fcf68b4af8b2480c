"""Load record normalization."""

from .normalizer import LoadNormalizer, resolve_weight_tons, resolve_project_id

__all__ = ["LoadNormalizer", "resolve_weight_tons", "resolve_project_id"]

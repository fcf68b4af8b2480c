"""Interchange serializers."""

from .iif import render_iif
from .online_csv import render_online_csv

__all__ = ["render_iif", "render_online_csv"]

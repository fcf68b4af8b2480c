"""Utility modules."""

from .logger import setup_logger
from .io_handler import IOHandler, DirectorySink, build_filename

__all__ = ["setup_logger", "IOHandler", "DirectorySink", "build_filename"]

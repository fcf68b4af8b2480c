"""Input/Output handling utilities.

This module handles file I/O operations including:
- Reading JSON load caches
- Writing interchange documents byte-exact
- Building export filenames
"""

import json
import re
import logging
from pathlib import Path
from typing import Any, Optional
from datetime import date

from ..config import Config

logger = logging.getLogger(__name__)


def build_filename(project_name: Optional[str], ext: str, today: Optional[date] = None) -> str:
    """
    Deterministic export filename.

    Args:
        project_name: Scope display name, None for all projects
        ext: File extension without the dot
        today: Export date (default: today)

    Returns:
        e.g. "DivertScan_QB_Tower_3_2026-03-14.iif"
    """
    today = today or date.today()
    safe = re.sub(r'[^a-zA-Z0-9\-]', '_', project_name or 'AllProjects')
    return f"{Config.FILENAME_PREFIX}_{safe}_{today.isoformat()}.{ext}"


class IOHandler:
    """
    Handles all file I/O operations for the exporter.
    """

    def __init__(self):
        """Initialize IO handler."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def read_json(self, file_path: Path) -> Any:
        """
        Read a JSON file.

        Args:
            file_path: Path to JSON file

        Returns:
            Parsed JSON data

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If JSON is invalid
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            self.logger.debug(f"Loaded JSON from {file_path}")
            return data
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {file_path}: {e}")

    def write_document(self, content: str, output_path: Path) -> Path:
        """
        Write an interchange document exactly as rendered.

        Newline translation is disabled so CRLF endings survive on
        every platform.

        Args:
            content: Document text
            output_path: Output file path

        Returns:
            The written path
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)

        self.logger.info(f"Wrote {len(content)} characters to {output_path}")
        return output_path


class DirectorySink:
    """File-delivery collaborator that drops documents into a directory."""

    def __init__(self, output_dir: Optional[Path] = None, io_handler: Optional[IOHandler] = None):
        self.output_dir = Path(output_dir) if output_dir else Config.get_output_dir()
        self.io_handler = io_handler or IOHandler()

    def deliver(self, content: str, filename: str) -> Path:
        return self.io_handler.write_document(content, self.output_dir / filename)

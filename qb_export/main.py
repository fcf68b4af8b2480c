#!/usr/bin/env python3
"""
Main entry point for the DivertScan QuickBooks exporter.

This module provides the caller-facing export operations and a CLI
around them. It orchestrates the pipeline from load resolution through
grouping and invoice planning to the IIF and CSV documents.
"""

import argparse
import asyncio
import json
import sys
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Dict, Optional

from .config import Config
from .exceptions import NoDataError
from .utils.logger import set_log_level, setup_logger
from .utils.io_handler import DirectorySink, build_filename
from .batching.grouping import group_by_project
from .batching.invoices import plan_invoices
from .normalization.normalizer import LoadNormalizer
from .resolution.resolver import LoadResolver
from .resolution.sources import (
    InMemoryLocalSource,
    JsonFileLocalSource,
    RemoteLoadSource,
    tcp_probe,
)
from .serializers.iif import render_iif
from .serializers.online_csv import render_online_csv
from .summary.aggregator import build_summary
from .models.schema import ExportResult, PreviewResult, ProjectGroup

logger = logging.getLogger(__name__)

EXTENSIONS = {"IIF": "iif", "CSV": "csv"}


class QuickBooksExporter:
    """
    Export pipeline coordinator.

    Each export call runs independently:
    1. Load resolution (local cache, then remote API)
    2. Project grouping
    3. Invoice planning (normalization, date batching, numbering)
    4. Rendering to IIF or CSV
    5. Summary aggregation
    """

    def __init__(
        self,
        resolver: LoadResolver,
        sink: Optional[DirectorySink] = None,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the exporter.

        Args:
            resolver: Load resolver for the configured sources
            sink: File-delivery collaborator used by deliver()
            today: Clock for filenames and the CSV memo date
            now: Clock for loads without a usable date
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.resolver = resolver
        self.sink = sink
        self.today = today
        self.now = now

    async def _groups(self, project_id: Optional[str]) -> Dict[str, ProjectGroup]:
        loads = await self.resolver.resolve(project_id)
        return group_by_project(loads)

    def _scope_name(self, project_id: Optional[str], groups: Dict[str, ProjectGroup]) -> Optional[str]:
        if project_id is None:
            return None
        first = next(iter(groups.values()), None)
        return first.project_name if first else project_id

    async def _export(self, fmt: str, project_id: Optional[str]) -> ExportResult:
        try:
            groups = await self._groups(project_id)
        except NoDataError as e:
            self.logger.error(f"{fmt} export failed: {e}")
            return ExportResult(success=False, format=fmt, error=str(e))

        normalizer = LoadNormalizer(now=self.now)
        export_date = self.today()

        try:
            invoices = plan_invoices(groups, normalizer)
            if fmt == "IIF":
                content = render_iif(invoices)
            else:
                content = render_online_csv(invoices, export_date=export_date)
            summary = build_summary(groups, normalizer)
        except Exception as e:
            self.logger.exception(f"{fmt} export failed while building the document")
            return ExportResult(success=False, format=fmt, error=f"Export failed: {e}")

        filename = build_filename(self._scope_name(project_id, groups), EXTENSIONS[fmt], export_date)

        self.logger.info(
            f"{fmt} export complete: {filename} - "
            f"{len(invoices)} invoices, {len(summary)} projects"
        )
        return ExportResult(
            success=True,
            format=fmt,
            filename=filename,
            content=content,
            summary=summary,
        )

    async def export_iif(self, project_id: Optional[str] = None) -> ExportResult:
        """
        Export QuickBooks Desktop IIF for one project, or all when None.

        Args:
            project_id: Optional project scope

        Returns:
            ExportResult carrying the document or the failure message
        """
        return await self._export("IIF", project_id)

    async def export_csv(self, project_id: Optional[str] = None) -> ExportResult:
        """Export QuickBooks Online CSV for one project, or all when None."""
        return await self._export("CSV", project_id)

    async def export_all(self) -> Dict[str, ExportResult]:
        """Both formats for every project, produced concurrently."""
        iif_result, csv_result = await asyncio.gather(self.export_iif(), self.export_csv())
        return {"iif": iif_result, "csv": csv_result}

    async def preview(self, project_id: Optional[str] = None) -> PreviewResult:
        """Summary for a scope without producing a document."""
        try:
            groups = await self._groups(project_id)
        except NoDataError as e:
            self.logger.warning(f"Preview failed: {e}")
            return PreviewResult(success=False, error=str(e))

        return PreviewResult(success=True, summary=build_summary(groups, LoadNormalizer(now=self.now)))

    def deliver(self, result: ExportResult) -> Path:
        """
        Hand a successful export to the file-delivery collaborator.

        Raises:
            ValueError: If the result carries no document
        """
        if not result.success or result.content is None or result.filename is None:
            raise ValueError(f"Nothing to deliver: {result.error or 'empty export'}")

        sink = self.sink or DirectorySink()
        return sink.deliver(result.content, result.filename)


def build_exporter(
    local_path: Optional[Path] = None,
    remote_url: Optional[str] = Config.REMOTE_BASE_URL,
    offline: bool = False,
    output_dir: Optional[Path] = None,
) -> QuickBooksExporter:
    """
    Wire an exporter from CLI-style settings.

    Args:
        local_path: JSON dump of the client cache (None: empty cache)
        remote_url: API root, None disables the remote fallback
        offline: Report the network as unavailable
        output_dir: Delivery directory (default: Config.OUTPUT_DIR)
    """
    local = JsonFileLocalSource(local_path) if local_path else InMemoryLocalSource()
    remote = RemoteLoadSource(remote_url) if remote_url else None

    if offline or remote_url is None:
        is_online = lambda: False  # noqa: E731
    else:
        is_online = lambda: tcp_probe(remote_url)  # noqa: E731

    resolver = LoadResolver(local=local, remote=remote, is_online=is_online)
    sink = DirectorySink(output_dir) if output_dir else None
    return QuickBooksExporter(resolver, sink=sink)


async def run(args: argparse.Namespace, exporter: QuickBooksExporter) -> int:
    """Execute one CLI command, returning the process exit code."""
    if args.command == "preview":
        preview = await exporter.preview(args.project)
        print(json.dumps(preview.model_dump(), indent=Config.JSON_INDENT, ensure_ascii=False))
        return 0 if preview.success else 1

    if args.command == "iif":
        results = [await exporter.export_iif(args.project)]
    elif args.command == "csv":
        results = [await exporter.export_csv(args.project)]
    else:
        results = list((await exporter.export_all()).values())

    exit_code = 0
    for result in results:
        if result.success:
            try:
                path = exporter.deliver(result)
            except OSError as e:
                exporter.logger.error(f"Could not write {result.filename}: {e}")
                exit_code = 1
                continue
            exporter.logger.info(f"Delivered {result.format} to {path}")
        else:
            exporter.logger.error(f"{result.format} export failed: {result.error}")
            exit_code = 1
    return exit_code


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Export DivertScan loads to QuickBooks IIF/CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # QuickBooks Desktop file for one project from a cache dump
  qb-export iif --project P-100 --local cache/loads.json

  # Both formats for every project, API fallback disabled
  qb-export all --local cache/loads.json --offline

  # Totals only
  qb-export preview --remote-url https://divertscan.example.com
        """
    )

    parser.add_argument(
        'command',
        choices=['iif', 'csv', 'all', 'preview'],
        help='Export format, both formats, or a summary preview'
    )

    parser.add_argument(
        '-p', '--project',
        type=str,
        help='Project id to export (default: all projects)'
    )

    parser.add_argument(
        '-l', '--local',
        type=str,
        help='JSON dump of the offline load cache'
    )

    parser.add_argument(
        '--remote-url',
        type=str,
        default=Config.REMOTE_BASE_URL,
        help=f'DivertScan API root (default: {Config.REMOTE_BASE_URL})'
    )

    parser.add_argument(
        '--offline',
        action='store_true',
        help='Never query the remote API'
    )

    parser.add_argument(
        '-o', '--output-dir',
        type=str,
        help='Directory for exported files (default: output/)'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=Config.LOG_LEVEL,
        help=f'Logging level (default: {Config.LOG_LEVEL})'
    )

    args = parser.parse_args()

    set_log_level(setup_logger(name="qb_export"), args.log_level)
    logger.info(f"{Config.APP_NAME} v{Config.VERSION}")

    exporter = build_exporter(
        local_path=Path(args.local) if args.local else None,
        remote_url=args.remote_url,
        offline=args.offline,
        output_dir=Path(args.output_dir) if args.output_dir else None,
    )

    sys.exit(asyncio.run(run(args, exporter)))


if __name__ == "__main__":
    main()

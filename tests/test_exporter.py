"""Tests for the caller-facing export operations."""

import argparse
import asyncio
import json
import logging

import pytest
from datetime import date, datetime
from qb_export import main as main_module
from qb_export.main import QuickBooksExporter, build_exporter, run
from qb_export.resolution.resolver import LoadResolver
from qb_export.resolution.sources import InMemoryLocalSource
from qb_export.utils.io_handler import DirectorySink, build_filename
from qb_export.utils.logger import set_log_level, setup_logger

TODAY = date(2026, 3, 20)

RECORDS = [
    {'id': 'L-1', 'projectId': 'P-A', 'projectName': 'Alpha', 'date': '2026-03-14T09:30:00',
     'weightTons': 2.5, 'carbonSaved': 0.5, 'status': 'confirmed'},
    {'id': 'L-2', 'projectId': 'P-A', 'projectName': 'Alpha', 'date': '2026-03-14T13:00:00',
     'weightTons': 1.0, 'carbonSaved': 0.25, 'status': 'confirmed'},
    {'id': 'L-3', 'project_id': 'P-B', 'project_name': 'Bravo / North', 'date': '2026-03-15',
     'weight_lbs': 4000, 'status': 'confirmed'},
    {'id': 'L-4', 'projectId': 'P-B', 'date': '2026-03-15', 'weightTons': 9, 'status': 'draft'},
]


class FailingRemote:
    async def fetch_loads(self, project_id=None):
        raise AssertionError("remote must not be queried")


class ReadOnlySink:
    def deliver(self, content, filename):
        raise PermissionError(f"read-only: {filename}")


def exporter_for(records, sink=None):
    resolver = LoadResolver(InMemoryLocalSource(records), is_online=lambda: False)
    return QuickBooksExporter(resolver, sink=sink, today=lambda: TODAY, now=lambda: datetime(2026, 3, 20, 8, 0))


class TestQuickBooksExporter:
    """Test suite for QuickBooksExporter class."""

    @pytest.fixture
    def exporter(self, tmp_path):
        """Fixture to provide an exporter over an in-memory cache."""
        resolver = LoadResolver(InMemoryLocalSource(RECORDS), FailingRemote(), is_online=lambda: True)
        return QuickBooksExporter(
            resolver,
            sink=DirectorySink(tmp_path),
            today=lambda: TODAY,
            now=lambda: datetime(2026, 3, 20, 8, 0),
        )

    @pytest.fixture
    def empty_exporter(self):
        """Fixture to provide an exporter with no data anywhere."""
        resolver = LoadResolver(InMemoryLocalSource([]), is_online=lambda: False)
        return QuickBooksExporter(resolver, today=lambda: TODAY)

    def test_export_iif_all_projects(self, exporter):
        """Test a successful IIF export for every project."""
        result = asyncio.run(exporter.export_iif())

        assert result.success is True
        assert result.format == "IIF"
        assert result.filename == "DivertScan_QB_AllProjects_2026-03-20.iif"
        assert result.content.startswith("!TRNS\t")
        assert "\tDS-1000\t" in result.content
        assert "\tDS-1001\t" in result.content
        assert "L-4" not in result.content

    def test_export_csv_single_project(self, exporter):
        """Test a scoped CSV export and its filename."""
        result = asyncio.run(exporter.export_csv('P-B'))

        assert result.success is True
        assert result.format == "CSV"
        assert result.filename == "DivertScan_QB_Bravo___North_2026-03-20.csv"
        assert list(result.summary) == ['P-B']
        rows = result.content.split("\r\n")
        assert len(rows) == 3
        assert ',2.0000,125.00,250.00,' in rows[1]

    def test_summary(self, exporter):
        """Test the per-project totals."""
        result = asyncio.run(exporter.export_iif())
        alpha = result.summary['P-A']
        bravo = result.summary['P-B']

        assert alpha.project_name == 'Alpha'
        assert alpha.load_count == 2
        assert alpha.total_tons == '3.50'
        assert alpha.total_revenue == '$437.50'
        assert alpha.total_carbon_saved == '0.75 tons CO₂e'
        assert bravo.load_count == 1
        assert bravo.total_tons == '2.00'
        assert bravo.total_carbon_saved == '0.00 tons CO₂e'

    def test_summaries_match_across_formats(self, exporter):
        """Test that both formats report identical totals."""
        iif = asyncio.run(exporter.export_iif())
        csv_result = asyncio.run(exporter.export_csv())

        assert iif.summary == csv_result.summary

    def test_export_all(self, exporter):
        """Test concurrent export of both formats."""
        results = asyncio.run(exporter.export_all())

        assert set(results) == {'iif', 'csv'}
        assert results['iif'].success and results['csv'].success
        assert results['iif'].filename.endswith('.iif')
        assert results['csv'].filename.endswith('.csv')
        assert results['iif'].summary == results['csv'].summary

    def test_preview(self, exporter):
        """Test preview returns the summary without a document."""
        preview = asyncio.run(exporter.preview('P-A'))

        assert preview.success is True
        assert list(preview.summary) == ['P-A']
        assert preview.summary['P-A'].total_revenue == '$437.50'

    def test_no_data_is_a_failed_result(self, empty_exporter):
        """Test that NoData surfaces as a failure result, not an exception."""
        result = asyncio.run(empty_exporter.export_iif())
        preview = asyncio.run(empty_exporter.preview())

        assert result.success is False
        assert result.content is None
        assert 'Check that loads are synced' in result.error
        assert preview.success is False
        assert preview.error == result.error

    def test_export_all_without_data(self, empty_exporter):
        """Test that both halves of export_all fail independently."""
        results = asyncio.run(empty_exporter.export_all())

        assert not results['iif'].success
        assert not results['csv'].success

    def test_deliver_writes_exact_bytes(self, exporter, tmp_path):
        """Test that delivery keeps CRLF line endings intact."""
        result = asyncio.run(exporter.export_iif())

        path = exporter.deliver(result)

        assert path == tmp_path / result.filename
        assert path.read_bytes() == result.content.encode('utf-8')
        assert b"\r\n" in path.read_bytes()
        assert b"\r\r\n" not in path.read_bytes()

    def test_deliver_rejects_failed_result(self, empty_exporter):
        """Test that a failed export cannot be delivered."""
        result = asyncio.run(empty_exporter.export_csv())

        with pytest.raises(ValueError):
            empty_exporter.deliver(result)


class TestExportResilience:
    """Test suite for per-record defects that must not abort an export."""

    def test_huge_weight_still_exports(self):
        """Test that a tonnage too large to bill is treated as missing."""
        exporter = exporter_for([{'projectId': 'P', 'date': '2026-03-14', 'weightTons': 1e30}])

        result = asyncio.run(exporter.export_iif())

        assert result.success is True
        assert result.summary['P'].total_tons == '0.00'
        assert result.summary['P'].total_revenue == '$0.00'

    def test_far_future_date_still_exports(self):
        """Test that a load dated at the end of year 9999 yields both documents."""
        exporter = exporter_for([{'projectId': 'P', 'date': '9999-12-20', 'weightTons': 1}])

        results = asyncio.run(exporter.export_all())

        assert results['iif'].success and results['csv'].success
        assert '\t12/20/9999\t' in results['iif'].content
        assert '"12/31/9999"' in results['csv'].content

    def test_export_all_keeps_the_other_format(self, monkeypatch):
        """Test that a failure rendering one format leaves the other intact."""
        def broken_renderer(invoices, export_date=None):
            raise RuntimeError("renderer exploded")

        monkeypatch.setattr(main_module, 'render_online_csv', broken_renderer)
        exporter = exporter_for(RECORDS)

        results = asyncio.run(exporter.export_all())

        assert results['iif'].success is True
        assert results['iif'].content.startswith("!TRNS\t")
        assert results['csv'].success is False
        assert results['csv'].format == "CSV"
        assert 'renderer exploded' in results['csv'].error


class TestCommandLine:
    """Test suite for the CLI runner and logging setup."""

    def test_run_delivers_both_formats(self, tmp_path):
        """Test a successful run writes both files and exits 0."""
        exporter = exporter_for(RECORDS, sink=DirectorySink(tmp_path))
        args = argparse.Namespace(command='all', project=None)

        assert asyncio.run(run(args, exporter)) == 0
        assert sorted(p.suffix for p in tmp_path.iterdir()) == ['.csv', '.iif']

    def test_run_write_failure_exits_nonzero(self):
        """Test that an unwritable destination gives exit code 1, not a traceback."""
        exporter = exporter_for(RECORDS, sink=ReadOnlySink())
        args = argparse.Namespace(command='iif', project=None)

        assert asyncio.run(run(args, exporter)) == 1

    def test_set_log_level(self):
        """Test applying a CLI level string to a configured logger."""
        configured = setup_logger(name='qb_export.cli_level_check')

        set_log_level(configured, 'debug')
        assert configured.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in configured.handlers)

        set_log_level(configured, 'bogus')
        assert configured.level == logging.INFO


class TestBuildExporter:
    """Test suite for build_exporter and filenames."""

    def test_build_from_cache_file(self, tmp_path):
        """Test wiring an exporter from a cache dump, offline."""
        cache = tmp_path / 'cache.json'
        cache.write_text(json.dumps({'loads': RECORDS}), encoding='utf-8')

        exporter = build_exporter(local_path=cache, offline=True, output_dir=tmp_path / 'out')
        result = asyncio.run(exporter.export_iif('P-A'))

        assert result.success is True
        assert exporter.deliver(result).parent == tmp_path / 'out'

    def test_build_without_sources(self):
        """Test that an exporter with nothing configured reports NoData."""
        exporter = build_exporter(remote_url=None)

        result = asyncio.run(exporter.export_csv())

        assert result.success is False

    def test_build_filename(self):
        """Test deterministic filenames."""
        assert build_filename(None, 'iif', date(2026, 1, 2)) == 'DivertScan_QB_AllProjects_2026-01-02.iif'
        assert build_filename('Tower #3', 'csv', date(2026, 1, 2)) == 'DivertScan_QB_Tower__3_2026-01-02.csv'

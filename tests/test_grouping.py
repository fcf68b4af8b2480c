"""Tests for project grouping, date batching and invoice planning."""

import pytest
from datetime import date, datetime
from decimal import Decimal
from qb_export.batching.grouping import batch_by_date, format_qb_date, group_by_project, qb_date
from qb_export.batching.invoices import class_label, due_date, line_amount, plan_invoices
from qb_export.normalization.normalizer import LoadNormalizer

FIXED_NOW = datetime(2026, 3, 20, 8, 0, 0)


def make_records():
    return [
        {'id': 'a1', 'projectId': 'A', 'projectName': 'Alpha', 'date': '2026-03-14T09:00:00', 'weightTons': 1},
        {'id': 'b1', 'project_id': 'B', 'project_name': 'Bravo', 'date': '2026-03-14T10:00:00', 'weightTons': 2},
        {'id': 'a2', 'projectId': 'A', 'projectName': 'Alpha renamed', 'date': '2026-03-15T09:00:00', 'weightTons': 3},
        {'id': 'u1', 'date': '2026-03-14T11:00:00', 'weightLbs': 2000},
        {'id': 'a3', 'projectId': 'A', 'date': '2026-03-14T16:00:00', 'weightTons': 4},
    ]


class TestGrouping:
    """Test suite for group_by_project and batch_by_date."""

    @pytest.fixture
    def normalizer(self):
        return LoadNormalizer(now=lambda: FIXED_NOW)

    def test_grouping_is_total_and_disjoint(self):
        """Test that every record lands in exactly one group."""
        records = make_records()

        groups = group_by_project(records)

        placed = [r['id'] for g in groups.values() for r in g.loads]
        assert sorted(placed) == sorted(r['id'] for r in records)
        assert len(placed) == len(set(placed))

    def test_grouping_order_and_names(self):
        """Test arrival order and first-record display names."""
        groups = group_by_project(make_records())

        assert list(groups) == ['A', 'B', 'UNASSIGNED']
        assert groups['A'].project_name == 'Alpha'
        assert [r['id'] for r in groups['A'].loads] == ['a1', 'a2', 'a3']
        assert groups['UNASSIGNED'].project_name == 'Unassigned Project'

    def test_batches_by_calendar_date(self, normalizer):
        """Test that loads of one day share a batch, in load order."""
        group = group_by_project(make_records())['A']
        loads = [normalizer.normalize(r) for r in group.loads]

        batches = batch_by_date(loads)

        assert [b.invoice_date for b in batches] == [date(2026, 3, 14), date(2026, 3, 15)]
        assert [load.id for load in batches[0].loads] == ['a1', 'a3']
        assert [load.id for load in batches[1].loads] == ['a2']
        assert sum(len(b.loads) for b in batches) == len(loads)

    def test_malformed_date_goes_to_current_day(self, normalizer):
        """Test that an unparseable date is billed on the current day."""
        load = normalizer.normalize({'date': '??', 'projectId': 'A'})

        batches = batch_by_date([load])

        assert batches[0].invoice_date == FIXED_NOW.date()

    def test_qb_date_is_zero_padded(self, normalizer):
        """Test MM/DD/YYYY formatting."""
        assert qb_date(date(2026, 1, 5)) == '01/05/2026'
        load = normalizer.normalize({'date': '2026-11-09T23:59:00'})
        assert format_qb_date(load) == '11/09/2026'


class TestInvoicePlanning:
    """Test suite for plan_invoices."""

    @pytest.fixture
    def invoices(self):
        groups = group_by_project(make_records())
        return plan_invoices(groups, LoadNormalizer(now=lambda: FIXED_NOW))

    def test_one_invoice_per_project_per_day(self, invoices):
        """Test batching into invoices."""
        keys = [(i.project_id, i.invoice_date) for i in invoices]

        assert keys == [
            ('A', date(2026, 3, 14)),
            ('A', date(2026, 3, 15)),
            ('B', date(2026, 3, 14)),
            ('UNASSIGNED', date(2026, 3, 14)),
        ]

    def test_numbering_shared_across_projects(self, invoices):
        """Test a single document counter per call."""
        assert [i.doc_number for i in invoices] == ['DS-1000', 'DS-1001', 'DS-1002', 'DS-1003']

    def test_numbering_restarts_per_call(self):
        """Test that each call seeds the counter afresh."""
        groups = group_by_project(make_records())

        first = plan_invoices(groups)
        second = plan_invoices(groups)

        assert first[0].doc_number == second[0].doc_number == 'DS-1000'

    def test_total_equals_sum_of_lines(self, invoices):
        """Test that invoice totals are the sum of the line amounts."""
        for invoice in invoices:
            assert invoice.total == sum(line.amount for line in invoice.lines)

        assert invoices[0].total == Decimal('625.00')
        assert invoices[3].total == Decimal('125.00')

    def test_total_has_no_rounding_drift(self):
        """Test amounts that round individually."""
        records = [
            {'projectId': 'A', 'date': '2026-03-14', 'weightTons': '0.0001'},
            {'projectId': 'A', 'date': '2026-03-14', 'weightTons': '0.0001'},
            {'projectId': 'A', 'date': '2026-03-14', 'weightTons': '0.0001'},
        ]

        invoice = plan_invoices(group_by_project(records))[0]

        assert [line.amount for line in invoice.lines] == [Decimal('0.01')] * 3
        assert invoice.total == Decimal('0.03')

    def test_due_date_is_net_30(self, invoices):
        """Test the due date."""
        assert invoices[0].due_date == date(2026, 4, 13)

    def test_due_date_capped_at_last_day(self):
        """Test that a due date past year 9999 is capped instead of failing."""
        assert due_date(date(9999, 12, 20)) == date.max
        assert due_date(date(2026, 12, 15)) == date(2027, 1, 14)

    def test_far_future_load_is_planned(self):
        """Test planning a load dated in the last days of year 9999."""
        records = [{'projectId': 'P', 'date': '9999-12-20', 'weightTons': 1}]

        invoice = plan_invoices(group_by_project(records))[0]

        assert invoice.invoice_date == date(9999, 12, 20)
        assert invoice.due_date == date.max
        assert invoice.total == Decimal('125.00')

    def test_class_label(self):
        """Test class derivation from the project name."""
        assert class_label('Alpha') == 'LEED-Alpha'
        assert class_label('Tower #3 (Phase-B)') == 'LEED-Tower 3 Phase-B'
        assert class_label('  "Quoted", Inc.  ') == 'LEED-Quoted Inc'

    def test_line_amount_rounds_half_up(self):
        """Test cent rounding of line amounts."""
        assert line_amount(Decimal('2.5')) == Decimal('312.50')
        assert line_amount(Decimal('0.0002')) == Decimal('0.03')

"""Tests for cancellation and return entries."""

from decimal import Decimal

import pytest

from gst_engine.engine import transform
from gst_engine.models import CompanyTaxProfile, InvoiceContext
from gst_engine.returns import (
    create_return_entries,
    mark_cancelled,
    mark_returned,
)


class TestStatusChanges:
    """Tests for whole-order status changes."""

    @pytest.fixture
    def items(self):
        order = {
            'shipping_address': {'province': 'Punjab'},
            'line_items': [{'price': '105.00', 'quantity': 2}],
        }
        return transform(
            order,
            CompanyTaxProfile(state='Punjab'),
            InvoiceContext(order_number='#3001', invoice_id='inv-3001')
        )

    def test_mark_cancelled(self, items):
        """Test cancellation records the credit note."""
        [cancelled] = mark_cancelled(items, 'CN-1', '2026-02-20')

        assert cancelled.status == 'cancelled'
        assert cancelled.credit_note_id == 'CN-1'
        assert cancelled.credit_note_date == '2026-02-20'
        assert cancelled.cancellation_reason == 'order_cancelled'
        assert cancelled.taxable_value == items[0].taxable_value
        assert items[0].status == 'active'

    def test_mark_cancelled_without_credit_note(self, items):
        [cancelled] = mark_cancelled(items)

        assert cancelled.status == 'cancelled'
        assert cancelled.cancellation_reason is None

    def test_mark_returned(self, items):
        [returned] = mark_returned(items, 'CN-2', '2026-02-21')

        assert returned.status == 'returned'
        assert returned.cancellation_reason == 'full_return'


class TestCreateReturnEntries:
    """Tests for partial return records."""

    @pytest.fixture
    def items(self):
        order = {
            'shipping_address': {'province': 'Punjab'},
            'line_items': [
                {'price': '105.00', 'quantity': 2},
                {'price': '3000.00', 'quantity': 3},
            ],
        }
        return transform(
            order,
            CompanyTaxProfile(state='Punjab'),
            InvoiceContext(order_number='#3002', invoice_id='inv-3002')
        )

    def test_negative_share(self, items):
        """Test returned units are negated in proportion."""
        [entry] = create_return_entries(items, [(1, 1)], 'CN-9', '2026-03-01')

        assert entry.quantity == -1
        assert entry.taxable_value == Decimal('-100.00')
        assert entry.total_tax == Decimal('-5.00')
        assert entry.cgst == Decimal('-2.50')
        assert entry.sgst == Decimal('-2.50')
        assert entry.igst == 0

    def test_identity_fields(self, items):
        """Test return records are keyed by the credit note."""
        [entry] = create_return_entries(items, [(2, 1)], 'CN-9', '2026-03-01')

        assert entry.order_number == 'CN-9'
        assert entry.record_key() == 'CN-9#002'
        assert entry.invoice_date == '2026-03-01'
        assert entry.year_month == '2026-03'
        assert entry.status == 'returned'
        assert entry.original_invoice_id == 'inv-3002'
        assert entry.credit_note_id == 'CN-9'
        assert entry.cancellation_reason == 'partial_return'
        assert entry.tax_rate == 18

    def test_unknown_and_empty_returns_skipped(self, items):
        entries = create_return_entries(
            items, [(7, 1), (1, 0), (2, 2)], 'CN-9', '2026-03-01'
        )

        assert len(entries) == 1
        assert entries[0].line_item_index == 2
        assert entries[0].quantity == -2

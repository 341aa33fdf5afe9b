"""Cancellation and return entries for taxed line items.

Cancelled and fully returned orders keep their records with a changed
status. Partial returns get new negative records keyed by the credit
note, so period summaries net them off against the original sale.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Optional

from .gst import round2
from .models import STATUS_CANCELLED, STATUS_RETURNED, TaxedLineItem


REASON_ORDER_CANCELLED = "order_cancelled"
REASON_FULL_RETURN = "full_return"
REASON_PARTIAL_RETURN = "partial_return"


def mark_cancelled(
    items: Iterable[TaxedLineItem],
    credit_note_id: Optional[str] = None,
    credit_note_date: Optional[str] = None,
    reason: str = REASON_ORDER_CANCELLED
) -> list[TaxedLineItem]:
    """Return copies of the records with status ``cancelled``."""
    return _with_status(
        items, STATUS_CANCELLED, credit_note_id, credit_note_date, reason
    )


def mark_returned(
    items: Iterable[TaxedLineItem],
    credit_note_id: Optional[str] = None,
    credit_note_date: Optional[str] = None,
    reason: str = REASON_FULL_RETURN
) -> list[TaxedLineItem]:
    """Return copies of the records with status ``returned``."""
    return _with_status(
        items, STATUS_RETURNED, credit_note_id, credit_note_date, reason
    )


def _with_status(items, status, credit_note_id, credit_note_date, reason):
    updated = []
    for item in items:
        if credit_note_id is None:
            updated.append(replace(item, status=status))
        else:
            updated.append(replace(
                item,
                status=status,
                credit_note_id=credit_note_id,
                credit_note_date=credit_note_date,
                cancellation_reason=reason
            ))
    return updated


def create_return_entries(
    items: Iterable[TaxedLineItem],
    returned: Iterable[tuple[int, int]],
    credit_note_id: str,
    credit_note_date: str
) -> list[TaxedLineItem]:
    """Build negative records for a partial return.

    Each returned line item gets a record under the credit note number
    whose quantity, taxable value and taxes are the negated share of the
    original record for the returned quantity.

    Args:
        items: Original records of the order.
        returned: (line item index, returned quantity) pairs.
        credit_note_id: Credit note identifier, used as order number.
        credit_note_date: ISO date of the credit note.

    Returns:
        Return records, in the order of ``returned``. Unknown line items
        and non-positive quantities are skipped.
    """
    originals = {item.line_item_index: item for item in items}

    entries = []
    for line_item_index, quantity in returned:
        original = originals.get(line_item_index)
        if original is None or quantity <= 0 or original.quantity <= 0:
            continue

        share = Decimal(quantity) / Decimal(original.quantity)
        entries.append(replace(
            original,
            order_number=credit_note_id,
            invoice_date=credit_note_date,
            quantity=-quantity,
            taxable_value=round2(-(original.taxable_value * share)),
            cgst=round2(-(original.cgst * share)),
            sgst=round2(-(original.sgst * share)),
            igst=round2(-(original.igst * share)),
            total_tax=round2(-(original.total_tax * share)),
            status=STATUS_RETURNED,
            original_invoice_id=original.invoice_id,
            credit_note_id=credit_note_id,
            credit_note_date=credit_note_date,
            cancellation_reason=REASON_PARTIAL_RETURN
        ))

    return entries

"""GST arithmetic primitives.

Rounding, tax slabs, transaction classification and the split of a tax
amount into its statutory heads.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Optional


INTRASTATE = "intrastate"
INTERSTATE = "interstate"

LOWER_SLAB_RATE = Decimal('0.05')
LOWER_SLAB_DIVISOR = Decimal('1.05')
UPPER_SLAB_RATE = Decimal('0.18')
UPPER_SLAB_DIVISOR = Decimal('1.18')

# Post-discount base price at or above which the upper slab applies
SLAB_THRESHOLD = Decimal('2500')

_CENT = Decimal('0.01')
_ZERO = Decimal('0')


class GSTHeads(NamedTuple):
    """Tax amount split into central, state and integrated heads."""
    cgst: Decimal
    sgst: Decimal
    igst: Decimal


def round2(value: Decimal) -> Decimal:
    """Round a monetary value to 2 decimals, halves away from zero."""
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def split_heads(tax_amount: Decimal, is_intrastate: bool) -> GSTHeads:
    """Split a tax amount into GST heads.

    Intrastate tax is halved into CGST and SGST, each rounded on its own,
    so the two halves may differ from the rounded total by one paisa.
    Interstate tax goes entirely to IGST.

    Args:
        tax_amount: Aggregate tax to split.
        is_intrastate: Whether supplier and place of supply share a state.

    Returns:
        The rounded heads; heads that do not apply are exactly zero.
    """
    if is_intrastate:
        half = round2(tax_amount / 2)
        return GSTHeads(cgst=half, sgst=half, igst=_ZERO)
    return GSTHeads(cgst=_ZERO, sgst=_ZERO, igst=round2(tax_amount))


def classify_transaction(
    company_state_code: Optional[str],
    place_of_supply_code: Optional[str]
) -> str:
    """Classify a supply as intrastate or interstate.

    A missing code on either side always yields interstate.
    """
    if (
        company_state_code is not None
        and place_of_supply_code is not None
        and company_state_code == place_of_supply_code
    ):
        return INTRASTATE
    return INTERSTATE


def resolve_slab(price_after_discount: Decimal) -> tuple[Decimal, Decimal]:
    """Return the (rate, divisor) slab for a post-discount base price."""
    if price_after_discount >= SLAB_THRESHOLD:
        return UPPER_SLAB_RATE, UPPER_SLAB_DIVISOR
    return LOWER_SLAB_RATE, LOWER_SLAB_DIVISOR

"""HSN enrichment of taxed line items.

The engine always emits records without an HSN code; this stage merges
codes in afterwards, from a product lookup or from the order itself.
"""

import re
from dataclasses import replace
from typing import Iterable, Mapping, Optional, Union

from .models import OrderLineItem, TaxedLineItem


HSN_METAFIELD_NAMESPACE = "custom"
HSN_METAFIELD_KEY = "hsn_code"

_SKU_HSN_PATTERN = re.compile(r'HSN(\d{4,8})', re.IGNORECASE)

HSNEntry = Union[str, tuple[str, Optional[str]]]


def extract_hsn_code(line_item: OrderLineItem) -> Optional[str]:
    """Find the HSN code an order line item carries.

    Looks at the product metafield ``custom.hsn_code``, then at line item
    properties whose name mentions "hsn", then at an ``HSN<digits>`` SKU.

    Args:
        line_item: The order line item.

    Returns:
        The HSN code, or None when the item carries none.
    """
    for namespace, key, value in line_item.metafields:
        if (
            namespace == HSN_METAFIELD_NAMESPACE
            and key == HSN_METAFIELD_KEY
            and value
        ):
            return value

    for name, value in line_item.properties:
        if 'hsn' in name.lower() and value:
            return value

    if line_item.sku:
        match = _SKU_HSN_PATTERN.search(line_item.sku)
        if match:
            return match.group(1)

    return None


def enrich_hsn(
    items: Iterable[TaxedLineItem],
    lookup: Optional[Mapping[str, HSNEntry]] = None,
    line_items: Optional[Iterable[OrderLineItem]] = None
) -> list[TaxedLineItem]:
    """Merge HSN codes into taxed line items.

    Args:
        items: Records produced by the engine.
        lookup: Product id to HSN code, or to (code, description).
        line_items: The order's line items, in the same order as
            ``items``; their own HSN codes are used when the lookup has
            no entry for the product.

    Returns:
        New records; records with no HSN found are returned unchanged.
    """
    lookup = lookup or {}
    carried = [extract_hsn_code(li) for li in line_items] if line_items else []

    enriched = []
    for position, item in enumerate(items):
        entry = lookup.get(item.product_id) if item.product_id else None
        if isinstance(entry, tuple):
            hsn, description = entry
        else:
            hsn, description = entry, None

        if not hsn and position < len(carried):
            hsn = carried[position]

        if hsn:
            item = replace(item, hsn=hsn, hsn_description=description)
        enriched.append(item)

    return enriched

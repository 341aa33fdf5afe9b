"""Order line-item tax classification.

This module turns one order into GST-classified line item records.
Every unit of a line item is taxed on its own: the first unit carries the
line's discount and the slab (5% or 18%) is chosen per unit from the
discounted pre-tax price.
"""

import logging
from decimal import Decimal
from typing import Any, Mapping, NamedTuple, Optional, Union

from .extractor import (
    OrderExtractor,
    extract_customer_name,
    extract_customer_state,
    extract_place_of_supply,
)
from .gst import (
    INTRASTATE,
    LOWER_SLAB_DIVISOR,
    classify_transaction,
    resolve_slab,
    round2,
    split_heads,
)
from .models import (
    DEFAULT_UQC,
    CompanyTaxProfile,
    InvoiceContext,
    Order,
    OrderLineItem,
    TaxedLineItem,
)
from .state_codes import resolve_state_code


logger = logging.getLogger(__name__)

_ZERO = Decimal('0')


class LineTotals(NamedTuple):
    """Unrounded sums over all units of one line item."""
    taxable_value: Decimal
    total_tax: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    tax_rate: int


def allocate_discount(
    unit_price: Decimal,
    item_discount: Decimal,
    order_discount: Decimal,
    remaining_order_discount: Decimal
) -> tuple[Decimal, Decimal]:
    """Choose the discount for one line item.

    The order-level discount goes to a line item whose approximate pre-tax
    unit price (always at the 5% divisor) exceeds the whole order discount,
    capped by what is left of it. Otherwise the item's own discount is
    used. This is a heuristic carried over unchanged: it can misattribute
    discount on orders with several line items.

    Args:
        unit_price: Tax-inclusive unit price.
        item_discount: Discount given on the line item itself.
        order_discount: Total order-level discount.
        remaining_order_discount: Order discount not yet attributed.

    Returns:
        The discount for this line item and the updated remainder.
    """
    approximate_base_price = unit_price / LOWER_SLAB_DIVISOR
    if order_discount > 0 and approximate_base_price > order_discount:
        discount = min(order_discount, remaining_order_discount)
    else:
        discount = item_discount

    # The remainder shrinks by whichever discount was chosen
    if discount > 0 and order_discount > 0:
        remaining_order_discount -= discount

    return discount, remaining_order_discount


def tax_unit(
    unit_price: Decimal,
    discount: Decimal,
    is_intrastate: bool
) -> LineTotals:
    """Tax a single unit, applying ``discount`` when it is positive.

    The slab threshold is checked against the discounted price at the 5%
    divisor; after switching to 18% the base is recomputed but the
    threshold decision stands.
    """
    has_discount = discount > 0

    base_price = unit_price / LOWER_SLAB_DIVISOR
    price_after_discount = (
        base_price - discount if has_discount else base_price
    )

    rate, divisor = resolve_slab(price_after_discount)
    if divisor != LOWER_SLAB_DIVISOR:
        base_price = unit_price / divisor

    unit_tax = unit_price - base_price
    heads = split_heads(unit_tax, is_intrastate)

    return LineTotals(
        taxable_value=base_price - discount if has_discount else base_price,
        total_tax=unit_tax,
        cgst=heads.cgst,
        sgst=heads.sgst,
        igst=heads.igst,
        tax_rate=int(rate * 100)
    )


def compute_line_totals(
    unit_price: Decimal,
    quantity: int,
    discount: Decimal,
    is_intrastate: bool
) -> LineTotals:
    """Tax each unit of a line item and sum the results.

    Only the first unit is discounted, so every later unit is taxed
    identically and is computed once. The line's rate is the first
    unit's rate.
    """
    first = tax_unit(unit_price, discount, is_intrastate)
    if quantity <= 1:
        return first

    rest = tax_unit(unit_price, _ZERO, is_intrastate)
    count = quantity - 1
    return LineTotals(
        taxable_value=first.taxable_value + rest.taxable_value * count,
        total_tax=first.total_tax + rest.total_tax * count,
        cgst=first.cgst + rest.cgst * count,
        sgst=first.sgst + rest.sgst * count,
        igst=first.igst + rest.igst * count,
        tax_rate=first.tax_rate
    )


class TaxClassificationEngine:
    """Produces GST-classified line items for orders.

    The engine holds no per-order state; transforming the same inputs
    always gives the same records.
    """

    def __init__(
        self,
        default_uqc: str = DEFAULT_UQC,
        extractor: Optional[OrderExtractor] = None
    ):
        self.default_uqc = default_uqc
        self.extractor = extractor or OrderExtractor()

    def transform(
        self,
        order: Union[Order, Mapping[str, Any]],
        company_profile: CompanyTaxProfile,
        context: Optional[InvoiceContext] = None
    ) -> list[TaxedLineItem]:
        """Classify every line item of an order.

        Args:
            order: Parsed Order or raw order payload.
            company_profile: Tax identity of the selling company.
            context: Invoice identity stamped onto each record.

        Returns:
            One TaxedLineItem per input line item, in input order.

        Raises:
            ValueError: If the order payload is missing.
        """
        if order is None:
            raise ValueError("order payload is required")
        if not isinstance(order, Order):
            order = self.extractor.extract_from_dict(order)
        if context is None:
            context = InvoiceContext()

        customer_name = extract_customer_name(order)
        customer_state = extract_customer_state(order)
        place_of_supply = extract_place_of_supply(order)

        customer_state_code = resolve_state_code(customer_state)
        place_of_supply_code = resolve_state_code(place_of_supply)
        company_state_code = resolve_state_code(company_profile.state)

        transaction_type = classify_transaction(
            company_state_code, place_of_supply_code
        )
        is_intrastate = transaction_type == INTRASTATE

        order_number = context.order_number or order.name
        order_id = order.id or order_number
        invoice_date = context.invoice_date or order.created_at

        if place_of_supply_code is None:
            logger.warning(
                f"Unresolved place of supply '{place_of_supply}' for order "
                f"{order_number}; classifying as {transaction_type}"
            )
        if company_state_code is None:
            logger.warning(
                f"Unresolved company state '{company_profile.state}'; "
                f"order {order_number} classified as {transaction_type}"
            )

        remaining_order_discount = order.order_discount
        taxed_items = []

        for index, line_item in enumerate(order.line_items, start=1):
            discount, remaining_order_discount = allocate_discount(
                line_item.unit_price,
                line_item.item_discount,
                order.order_discount,
                remaining_order_discount
            )
            applied_discount = discount if discount > 0 else _ZERO
            totals = compute_line_totals(
                line_item.unit_price,
                line_item.quantity,
                applied_discount,
                is_intrastate
            )

            taxed_items.append(self._build_record(
                line_item,
                totals,
                index=index,
                discount=applied_discount,
                order_id=order_id,
                order_number=order_number,
                context=context,
                invoice_date=invoice_date,
                customer_name=customer_name,
                customer_state=customer_state,
                customer_state_code=customer_state_code,
                place_of_supply=place_of_supply,
                place_of_supply_code=place_of_supply_code,
                company_profile=company_profile,
                company_state_code=company_state_code,
                transaction_type=transaction_type
            ))

        logger.debug(
            f"Order {order_number}: {len(taxed_items)} line items, "
            f"{transaction_type}, undistributed order discount "
            f"{remaining_order_discount}"
        )
        return taxed_items

    def _build_record(
        self,
        line_item: OrderLineItem,
        totals: LineTotals,
        *,
        index: int,
        discount: Decimal,
        order_id: Optional[str],
        order_number: Optional[str],
        context: InvoiceContext,
        invoice_date: Optional[str],
        customer_name: str,
        customer_state: str,
        customer_state_code: Optional[str],
        place_of_supply: str,
        place_of_supply_code: Optional[str],
        company_profile: CompanyTaxProfile,
        company_state_code: Optional[str],
        transaction_type: str
    ) -> TaxedLineItem:
        return TaxedLineItem(
            order_id=order_id,
            order_number=order_number,
            line_item_index=index,
            quantity=line_item.quantity,
            unit_price=round2(line_item.unit_price),
            discount=round2(discount),
            taxable_value=round2(totals.taxable_value),
            tax_rate=totals.tax_rate,
            cgst=round2(totals.cgst),
            sgst=round2(totals.sgst),
            igst=round2(totals.igst),
            total_tax=round2(totals.total_tax),
            customer_name=customer_name,
            customer_state=customer_state,
            customer_state_code=customer_state_code,
            place_of_supply=place_of_supply,
            place_of_supply_code=place_of_supply_code,
            company_state=company_profile.state,
            company_state_code=company_state_code,
            company_gstin=company_profile.gstin,
            transaction_type=transaction_type,
            invoice_id=context.invoice_id,
            invoice_number=context.invoice_number or order_number,
            invoice_date=invoice_date,
            product_id=line_item.product_id,
            variant_id=line_item.variant_id,
            sku=line_item.sku,
            product_title=line_item.title,
            fulfillment_service=line_item.fulfillment_service,
            uqc=self.default_uqc
        )


_default_engine = TaxClassificationEngine()


def transform(
    order: Union[Order, Mapping[str, Any]],
    company_profile: CompanyTaxProfile,
    context: Optional[InvoiceContext] = None
) -> list[TaxedLineItem]:
    """Classify every line item of an order with the default engine."""
    return _default_engine.transform(order, company_profile, context)

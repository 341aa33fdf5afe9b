"""Data models for order tax classification.

This module defines the read-only order snapshot consumed by the
engine, the company and invoice configuration values, and the
tax-classified line item record it produces.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional


DEFAULT_UQC = "NOS"
SUPPLY_TYPE_B2C = "B2C"

STATUS_ACTIVE = "active"
STATUS_CANCELLED = "cancelled"
STATUS_RETURNED = "returned"


@dataclass
class Address:
    """A billing or shipping address.

    Only the fields that identify the party and its state are kept.
    """
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    province: Optional[str] = None


@dataclass
class Customer:
    """The customer attached to an order."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


@dataclass
class OrderLineItem:
    """Represents a single line item of an order.

    Attributes:
        id: Line item identifier
        product_id: Product identifier
        variant_id: Variant identifier
        sku: Stock keeping unit
        title: Product title
        quantity: Number of units (always >= 1 once parsed)
        unit_price: Tax-inclusive price of one unit
        item_discount: Discount given on this line item
        fulfillment_service: Warehouse/location handling the item
        properties: Line item properties as (name, value) pairs
        metafields: Product metafields as (namespace, key, value) triples
    """
    id: Optional[str] = None
    product_id: Optional[str] = None
    variant_id: Optional[str] = None
    sku: Optional[str] = None
    title: str = "Unknown Product"
    quantity: int = 1
    unit_price: Decimal = Decimal('0')
    item_discount: Decimal = Decimal('0')
    fulfillment_service: Optional[str] = None
    properties: list[tuple[str, str]] = field(default_factory=list)
    metafields: list[tuple[str, str, str]] = field(default_factory=list)

    def __post_init__(self):
        """Ensure all monetary fields are Decimal type."""
        self.unit_price = Decimal(str(self.unit_price))
        self.item_discount = Decimal(str(self.item_discount))


@dataclass
class Order:
    """Represents one commerce order as received from the store.

    Attributes:
        id: Store order identifier
        name: Display order number, e.g. "#1001"
        created_at: Creation timestamp as supplied by the store
        customer: Customer details, if any
        billing_address: Billing address, if any
        shipping_address: Shipping address, if any
        order_discount: Aggregate discount for the whole order
        line_items: Line items in store order
    """
    id: Optional[str] = None
    name: Optional[str] = None
    created_at: Optional[str] = None
    customer: Optional[Customer] = None
    billing_address: Optional[Address] = None
    shipping_address: Optional[Address] = None
    order_discount: Decimal = Decimal('0')
    line_items: list[OrderLineItem] = field(default_factory=list)

    def __post_init__(self):
        """Ensure order_discount is Decimal type."""
        self.order_discount = Decimal(str(self.order_discount))


@dataclass(frozen=True)
class CompanyTaxProfile:
    """Tax identity of the selling company.

    Attributes:
        state: State name the company is registered in
        gstin: GST identification number
    """
    state: str
    gstin: Optional[str] = None


@dataclass(frozen=True)
class InvoiceContext:
    """Invoice identity stamped onto every output record.

    Attributes:
        order_number: Order number used for record keys
        invoice_id: Invoice identifier from the invoice allocator
        invoice_date: ISO invoice date
        invoice_number: Invoice number; the order number when not set
    """
    order_number: Optional[str] = None
    invoice_id: Optional[str] = None
    invoice_date: Optional[str] = None
    invoice_number: Optional[str] = None


@dataclass(frozen=True)
class TaxedLineItem:
    """A tax-classified line item ready for invoicing and GST reporting.

    Monetary values are rounded to two decimals. ``tax_rate`` is the slab
    resolved for the first unit of the line item; later units of the same
    line may have been taxed at a different slab.
    """
    order_id: Optional[str]
    order_number: Optional[str]
    line_item_index: int
    quantity: int
    unit_price: Decimal
    discount: Decimal
    taxable_value: Decimal
    tax_rate: int
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    total_tax: Decimal
    customer_name: str
    customer_state: str
    customer_state_code: Optional[str]
    place_of_supply: str
    place_of_supply_code: Optional[str]
    company_state: str
    company_state_code: Optional[str]
    company_gstin: Optional[str]
    transaction_type: str
    cess: Decimal = Decimal('0')
    supply_type: str = SUPPLY_TYPE_B2C
    invoice_id: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[str] = None
    product_id: Optional[str] = None
    variant_id: Optional[str] = None
    sku: Optional[str] = None
    product_title: str = "Unknown Product"
    fulfillment_service: Optional[str] = None
    hsn: Optional[str] = None
    hsn_description: Optional[str] = None
    uqc: str = DEFAULT_UQC
    status: str = STATUS_ACTIVE
    original_invoice_id: Optional[str] = None
    credit_note_id: Optional[str] = None
    credit_note_date: Optional[str] = None
    cancellation_reason: Optional[str] = None

    @property
    def year_month(self) -> Optional[str]:
        """Invoice month as "YYYY-MM", or None without an invoice date."""
        if not self.invoice_date:
            return None
        return self.invoice_date[:7]

    def record_key(self) -> str:
        """Sort key of this record within a shop, e.g. "#1001#002"."""
        return f"{self.order_number}#{self.line_item_index:03d}"

    def to_dict(self, shop: Optional[str] = None) -> dict[str, Any]:
        """Convert the record to dictionary format.

        Args:
            shop: When given, the storage keys for that shop are added.

        Returns:
            Dictionary representation with camelCase keys.
        """
        record = {
            'orderId': self.order_id,
            'orderNumber': self.order_number,
            'invoiceId': self.invoice_id,
            'invoiceNumber': self.invoice_number,
            'invoiceDate': self.invoice_date,
            'yearMonth': self.year_month,
            'lineItemIdx': self.line_item_index,
            'productId': self.product_id,
            'variantId': self.variant_id,
            'sku': self.sku,
            'productTitle': self.product_title,
            'fulfillmentService': self.fulfillment_service,
            'hsn': self.hsn,
            'hsnDescription': self.hsn_description,
            'uqc': self.uqc,
            'quantity': self.quantity,
            'unitPrice': str(self.unit_price),
            'discount': str(self.discount),
            'taxableValue': str(self.taxable_value),
            'taxRate': self.tax_rate,
            'cgst': str(self.cgst),
            'sgst': str(self.sgst),
            'igst': str(self.igst),
            'cess': str(self.cess),
            'totalTax': str(self.total_tax),
            'customerName': self.customer_name,
            'customerState': self.customer_state,
            'customerStateCode': self.customer_state_code,
            'placeOfSupply': self.place_of_supply,
            'placeOfSupplyCode': self.place_of_supply_code,
            'companyState': self.company_state,
            'companyStateCode': self.company_state_code,
            'companyGSTIN': self.company_gstin,
            'transactionType': self.transaction_type,
            'supplyType': self.supply_type,
            'status': self.status,
            'originalInvoiceId': self.original_invoice_id,
            'creditNoteId': self.credit_note_id,
            'creditNoteDate': self.credit_note_date,
            'cancellationReason': self.cancellation_reason,
        }

        if shop is not None:
            record['shop'] = shop
            record['orderNumber_lineItemIdx'] = self.record_key()
            record['yearMonth_invoiceDate'] = (
                f"{self.year_month}#{self.invoice_date}"
            )
            if self.hsn:
                record['hsn_yearMonth'] = f"{self.hsn}#{self.year_month}"
            if self.tax_rate:
                record['taxRate_yearMonth'] = (
                    f"{self.tax_rate}#{self.year_month}"
                )

        return record

"""Order payload extraction module.

This module turns raw store order payloads into Order snapshots and
derives the customer and place-of-supply identity of an order.
"""

import json
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from .models import Address, Customer, Order, OrderLineItem


logger = logging.getLogger(__name__)

GUEST_CUSTOMER = "Guest Customer"
UNKNOWN_STATE = "Unknown"

_CURRENCY_PREFIX = re.compile(r"^(?:rs\.?|inr|₹)\s*", re.IGNORECASE)
_AMOUNT_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")


class OrderExtractor:
    """Extracts Order snapshots from raw order payloads.

    Extraction never fails on imperfect order data: missing or
    unparseable values fall back to neutral defaults.
    """

    def extract_from_dict(self, data: Optional[Mapping[str, Any]]) -> Order:
        """Extract an order from a dictionary representation.

        Args:
            data: Order payload with keys:
                - id: Store order identifier
                - name: Display order number
                - created_at: Creation timestamp
                - customer: Optional customer dict
                - billing_address / shipping_address: Optional address dicts
                - current_total_discounts: Optional order-level discount
                - line_items: Optional list of line item dicts

        Returns:
            An Order object with extracted data.

        Raises:
            ValueError: If the payload is missing altogether.
        """
        if data is None:
            raise ValueError("order payload is required")
        if not isinstance(data, Mapping):
            raise ValueError(
                f"Unsupported type for order payload: {type(data)}"
            )

        return Order(
            id=self._parse_identifier(data.get('id')),
            name=self._parse_identifier(data.get('name')),
            created_at=_parse_text(data.get('created_at')),
            customer=self._extract_customer(data.get('customer')),
            billing_address=self._extract_address(data.get('billing_address')),
            shipping_address=self._extract_address(
                data.get('shipping_address')
            ),
            order_discount=self._parse_amount(
                data.get('current_total_discounts')
            ),
            line_items=self._extract_line_items(data.get('line_items') or [])
        )

    def extract_from_json(self, json_str: str) -> Order:
        """Extract an order from a JSON string.

        Raises:
            ValueError: If JSON is invalid or the payload is missing.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e}") from e

        return self.extract_from_dict(data)

    def extract_from_json_file(self, file_path: str) -> Order:
        """Extract an order from a JSON file.

        Raises:
            ValueError: If the file contains invalid data.
            FileNotFoundError: If file does not exist.
        """
        with open(file_path, 'r', encoding='utf-8') as f:
            return self.extract_from_json(f.read())

    def _extract_line_items(self, items_data: list) -> list[OrderLineItem]:
        """Extract line items, skipping entries that are not mappings."""
        line_items = []
        for item in items_data:
            if not isinstance(item, Mapping):
                logger.warning(f"Skipping malformed line item: {item!r}")
                continue

            line_items.append(OrderLineItem(
                id=self._parse_identifier(item.get('id')),
                product_id=self._parse_identifier(item.get('product_id')),
                variant_id=self._parse_identifier(item.get('variant_id')),
                sku=_parse_text(item.get('sku')),
                title=(
                    _parse_text(item.get('title'))
                    or _parse_text(item.get('name'))
                    or 'Unknown Product'
                ),
                quantity=self._parse_quantity(item.get('quantity')),
                unit_price=self._parse_amount(item.get('price')),
                item_discount=self._parse_amount(item.get('total_discount')),
                fulfillment_service=_parse_text(
                    item.get('fulfillment_service')
                ),
                properties=self._extract_properties(item.get('properties')),
                metafields=self._extract_metafields(item.get('product'))
            ))

        return line_items

    @staticmethod
    def _extract_customer(data: Any) -> Optional[Customer]:
        if not isinstance(data, Mapping):
            return None
        return Customer(
            first_name=_parse_text(data.get('first_name')),
            last_name=_parse_text(data.get('last_name')),
            email=_parse_text(data.get('email'))
        )

    @staticmethod
    def _extract_address(data: Any) -> Optional[Address]:
        if not isinstance(data, Mapping):
            return None
        return Address(
            name=_parse_text(data.get('name')),
            first_name=_parse_text(data.get('first_name')),
            last_name=_parse_text(data.get('last_name')),
            province=_parse_text(data.get('province'))
        )

    @staticmethod
    def _extract_properties(data: Any) -> list[tuple[str, str]]:
        if not isinstance(data, list):
            return []
        return [
            (str(p.get('name') or ''), str(p.get('value') or ''))
            for p in data
            if isinstance(p, Mapping)
        ]

    @staticmethod
    def _extract_metafields(product: Any) -> list[tuple[str, str, str]]:
        if not isinstance(product, Mapping):
            return []
        metafields = product.get('metafields')
        if not isinstance(metafields, list):
            return []
        return [
            (
                str(m.get('namespace') or ''),
                str(m.get('key') or ''),
                str(m.get('value') or '')
            )
            for m in metafields
            if isinstance(m, Mapping)
        ]

    @staticmethod
    def _parse_identifier(value: Any) -> Optional[str]:
        if value is None or value == '':
            return None
        return str(value)

    @staticmethod
    def _parse_quantity(value: Any) -> int:
        """Parse a line item quantity; anything unusable counts as one unit."""
        if isinstance(value, bool):
            return 1
        try:
            quantity = int(Decimal(str(value)))
        except (InvalidOperation, ValueError, OverflowError):
            return 1
        return quantity if quantity > 0 else 1

    @staticmethod
    def _parse_amount(value: Any) -> Decimal:
        """Parse a value into a non-negative Decimal amount.

        Handles strings with currency symbols, commas, etc. Missing,
        unparseable, non-finite or negative values become zero.

        Args:
            value: The value to parse (string, int, float, or Decimal).

        Returns:
            Decimal representation of the value.
        """
        if value is None or isinstance(value, bool):
            return Decimal('0')

        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, (int, float)):
            amount = Decimal(str(value))
        elif isinstance(value, str):
            # Remove a leading currency marker, thousands commas and whitespace
            cleaned = _CURRENCY_PREFIX.sub('', value.strip())
            cleaned = cleaned.replace(',', '').strip()
            if not cleaned:
                return Decimal('0')
            if not _AMOUNT_PATTERN.match(cleaned):
                logger.warning(f"Cannot parse amount: {value!r}")
                return Decimal('0')
            amount = Decimal(cleaned)
        else:
            logger.warning(f"Unsupported type for amount: {type(value)}")
            return Decimal('0')

        if not amount.is_finite() or amount < 0:
            logger.warning(f"Ignoring invalid amount: {value!r}")
            return Decimal('0')
        return amount


def _parse_text(value: Any) -> Optional[str]:
    """Return a stripped string, or None for blanks and non-strings."""
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def _join_name(first: Any, last: Any) -> str:
    return f"{_parse_text(first) or ''} {_parse_text(last) or ''}".strip()


def _province(address: Optional[Address]) -> Optional[str]:
    if address is None:
        return None
    return _parse_text(address.province)


def extract_customer_name(order: Order) -> str:
    """Derive the customer display name of an order.

    Sources are tried in order: customer name, billing address name,
    billing first/last name, shipping address name, customer email.
    """
    customer = order.customer
    billing = order.billing_address
    shipping = order.shipping_address

    if customer is not None:
        name = _join_name(customer.first_name, customer.last_name)
        if name:
            return name
    if billing is not None:
        name = _parse_text(billing.name) or _join_name(
            billing.first_name, billing.last_name
        )
        if name:
            return name
    if shipping is not None and _parse_text(shipping.name):
        return _parse_text(shipping.name)
    if customer is not None and _parse_text(customer.email):
        return _parse_text(customer.email)
    return GUEST_CUSTOMER


def extract_customer_state(order: Order) -> str:
    """Customer state: billing province, else shipping province."""
    return (
        _province(order.billing_address)
        or _province(order.shipping_address)
        or UNKNOWN_STATE
    )


def extract_place_of_supply(order: Order) -> str:
    """Place of supply: shipping province, else billing province."""
    return (
        _province(order.shipping_address)
        or _province(order.billing_address)
        or UNKNOWN_STATE
    )

"""Tests for HSN enrichment."""

from decimal import Decimal

import pytest

from gst_engine.engine import transform
from gst_engine.extractor import OrderExtractor
from gst_engine.hsn import enrich_hsn, extract_hsn_code
from gst_engine.models import CompanyTaxProfile, OrderLineItem


class TestExtractHSNCode:
    """Tests for HSN codes carried on line items."""

    def test_metafield_first(self):
        item = OrderLineItem(
            sku='TSHIRT-HSN6109',
            properties=[('HSN', '6110')],
            metafields=[('custom', 'hsn_code', '61091000')]
        )

        assert extract_hsn_code(item) == '61091000'

    def test_other_metafields_ignored(self):
        item = OrderLineItem(metafields=[('global', 'hsn_code', '1234')])

        assert extract_hsn_code(item) is None

    def test_property(self):
        """Test a property whose name mentions HSN is used."""
        item = OrderLineItem(
            sku='TSHIRT-HSN6109', properties=[('Item HSN', '6110')]
        )

        assert extract_hsn_code(item) == '6110'

    @pytest.mark.parametrize('sku, expected', [
        ('TSHIRT-HSN6109-BLK', '6109'),
        ('hsn09021010', '09021010'),
        ('HSN123', None),
        ('PLAIN-SKU', None),
        (None, None),
    ])
    def test_sku(self, sku, expected):
        assert extract_hsn_code(OrderLineItem(sku=sku)) == expected


class TestEnrichHSN:
    """Tests for merging HSN codes into records."""

    @pytest.fixture
    def order(self):
        return OrderExtractor().extract_from_dict({
            'name': '#2001',
            'shipping_address': {'province': 'Punjab'},
            'line_items': [
                {'product_id': 1, 'price': '105', 'sku': 'TEA-HSN0902'},
                {'product_id': 2, 'price': '210'},
                {'product_id': 3, 'price': '315'},
            ]
        })

    @pytest.fixture
    def items(self, order):
        return transform(order, CompanyTaxProfile(state='Punjab'))

    def test_lookup_then_carried_codes(self, order, items):
        """Test the lookup wins and carried codes fill the gaps."""
        lookup = {'1': ('09021020', 'Green tea'), '2': '6109'}

        enriched = enrich_hsn(items, lookup, order.line_items)

        assert [i.hsn for i in enriched] == ['09021020', '6109', None]
        assert enriched[0].hsn_description == 'Green tea'
        assert enriched[1].hsn_description is None

    def test_carried_codes_only(self, order, items):
        enriched = enrich_hsn(items, line_items=order.line_items)

        assert enriched[0].hsn == '0902'
        assert enriched[1] == items[1]

    def test_other_fields_unchanged(self, items):
        """Test enrichment only touches HSN fields."""
        [first, *_] = enrich_hsn(items, {'1': '0902'})

        assert first.hsn == '0902'
        assert first.taxable_value == Decimal('100.00')
        assert items[0].hsn is None

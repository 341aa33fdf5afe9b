"""Tests for the order file runner."""

import json

import pytest

import app


class TestMain:
    """Tests for the command line entry point."""

    @pytest.fixture
    def order_file(self, tmp_path):
        path = tmp_path / 'order.json'
        path.write_text(json.dumps({
            'id': 42,
            'name': 'PG1292',
            'created_at': '2026-02-15T10:30:00Z',
            'shipping_address': {'province': 'Punjab'},
            'line_items': [
                {'price': '105.00', 'quantity': 2, 'sku': 'TEA-HSN0902'},
            ],
        }), encoding='utf-8')
        return path

    @pytest.fixture(autouse=True)
    def company(self, monkeypatch):
        monkeypatch.setenv('COMPANY_STATE', 'Punjab')
        monkeypatch.setenv('COMPANY_GSTIN', '03AVNPR3936N1ZI')

    def test_prints_records(self, order_file, capsys):
        """Test records are printed as JSON with storage keys."""
        assert app.main([str(order_file), '--shop', 'demo.myshopify.com']) == 0

        [record] = json.loads(capsys.readouterr().out)
        assert record['orderNumber_lineItemIdx'] == 'PG1292#001'
        assert record['hsn'] == '0902'
        assert record['cgst'] == '5.00'
        assert record['transactionType'] == 'intrastate'

    def test_prints_summary(self, order_file, capsys):
        assert app.main([str(order_file), '--summary']) == 0

        assert "Punjab @ 5%" in capsys.readouterr().out

    def test_bad_file_skipped(self, order_file, tmp_path, capsys):
        """Test unreadable files do not stop the run."""
        missing = tmp_path / 'missing.json'

        assert app.main([str(missing), str(order_file)]) == 0

        assert len(json.loads(capsys.readouterr().out)) == 1

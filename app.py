import argparse
import json
import logging
import sys

from gst_engine.config import configure_logging, load_settings
from gst_engine.engine import TaxClassificationEngine
from gst_engine.extractor import OrderExtractor
from gst_engine.hsn import enrich_hsn
from gst_engine.models import InvoiceContext
from gst_engine.summarizer import GSTReportSummarizer

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Classify the line items of stored order payloads for GST."
    )
    parser.add_argument('orders', nargs='+', help="Order payload JSON files")
    parser.add_argument('--shop', help="Shop domain to add storage keys for")
    parser.add_argument('--invoice-id', help="Invoice id stamped on records")
    parser.add_argument(
        '--summary', action='store_true',
        help="Print the B2C and HSN summary instead of the records"
    )
    return parser


def process_orders(paths, settings, shop=None, invoice_id=None):
    """Transform every order file and return all records."""
    extractor = OrderExtractor()
    engine = TaxClassificationEngine(
        default_uqc=settings.default_uqc, extractor=extractor
    )

    records = []
    failed = 0
    for path in paths:
        try:
            order = extractor.extract_from_json_file(path)
        except (OSError, ValueError) as e:
            logger.error(f"Skipping {path}: {e}")
            failed += 1
            continue

        context = InvoiceContext(invoice_id=invoice_id)
        items = engine.transform(order, settings.company, context)
        items = enrich_hsn(items, line_items=order.line_items)
        for item in items:
            logger.info(
                f"{item.record_key()} {item.product_title} | qty: {item.quantity}"
                f" | taxable: {item.taxable_value} | tax: {item.tax_rate}%"
                f" | {item.transaction_type}"
            )
        records.extend(items)

    logger.info(f"Processed {len(paths) - failed} orders, {failed} failed")
    return records


def main(argv=None):
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)

    if not settings.company.state:
        logger.warning("COMPANY_STATE is not set; every order will be interstate")

    records = process_orders(args.orders, settings, args.shop, args.invoice_id)

    if args.summary:
        print(GSTReportSummarizer().get_formatted_summary(records))
    else:
        print(json.dumps([r.to_dict(shop=args.shop) for r in records], indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())

"""GST report summarization module.

This module aggregates taxed line items into the GSTR-1 B2C (Others)
and HSN-wise summaries for a reporting period.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from .models import STATUS_CANCELLED, TaxedLineItem


UNCLASSIFIED_HSN = "UNCLASSIFIED"


@dataclass
class ReportTotals:
    """Column totals of a report.

    Attributes:
        taxable_value: Sum of taxable values
        integrated_tax: Sum of IGST
        central_tax: Sum of CGST
        state_tax: Sum of SGST
        cess: Sum of cess
        quantity: Sum of quantities (HSN report only)
    """
    taxable_value: Decimal = Decimal('0')
    integrated_tax: Decimal = Decimal('0')
    central_tax: Decimal = Decimal('0')
    state_tax: Decimal = Decimal('0')
    cess: Decimal = Decimal('0')
    quantity: int = 0

    def add(self, record: TaxedLineItem) -> None:
        self.taxable_value += record.taxable_value
        self.integrated_tax += record.igst
        self.central_tax += record.cgst
        self.state_tax += record.sgst
        self.cess += record.cess
        self.quantity += record.quantity

    def to_dict(self) -> dict:
        return {
            'quantity': self.quantity,
            'taxable_value': str(self.taxable_value),
            'integrated_tax': str(self.integrated_tax),
            'central_tax': str(self.central_tax),
            'state_tax': str(self.state_tax),
            'cess': str(self.cess)
        }


@dataclass
class B2CReportRow:
    """B2C (Others) row: one place of supply at one tax rate."""
    place_of_supply: str
    place_of_supply_code: Optional[str]
    rate: int
    totals: ReportTotals = field(default_factory=ReportTotals)

    def to_dict(self) -> dict:
        row = {
            'place_of_supply': self.place_of_supply,
            'place_of_supply_code': self.place_of_supply_code,
            'rate': self.rate
        }
        row.update(self.totals.to_dict())
        del row['quantity']
        return row


@dataclass
class HSNReportRow:
    """HSN summary row: all supplies under one HSN code."""
    hsn: str
    hsn_description: Optional[str]
    uqc: str
    rate: int
    sr_no: int = 0
    totals: ReportTotals = field(default_factory=ReportTotals)

    def to_dict(self) -> dict:
        row = {
            'sr_no': self.sr_no,
            'hsn': self.hsn,
            'hsn_description': self.hsn_description,
            'uqc': self.uqc,
            'rate': self.rate
        }
        row.update(self.totals.to_dict())
        return row


@dataclass
class GSTReport:
    """A summary report with its rows and grand totals."""
    rows: list = field(default_factory=list)
    totals: ReportTotals = field(default_factory=ReportTotals)

    def to_dict(self) -> dict:
        return {
            'data': [row.to_dict() for row in self.rows],
            'totals': self.totals.to_dict()
        }


class GSTReportSummarizer:
    """Summarizes taxed line items for GST returns.

    Cancelled records are left out of every summary. Returned records
    are included; their negative values offset the original sale.
    """

    def b2c_report(self, records: Iterable[TaxedLineItem]) -> GSTReport:
        """Aggregate records by place of supply and tax rate.

        Args:
            records: Taxed line items of the period.

        Returns:
            Report rows sorted by place of supply, then rate.
        """
        grouped: dict[tuple[str, int], B2CReportRow] = {}
        for record in self._reportable(records):
            key = (record.place_of_supply, record.tax_rate)
            if key not in grouped:
                grouped[key] = B2CReportRow(
                    place_of_supply=record.place_of_supply,
                    place_of_supply_code=record.place_of_supply_code,
                    rate=record.tax_rate
                )
            grouped[key].totals.add(record)

        rows = [grouped[key] for key in sorted(grouped)]
        return GSTReport(rows=rows, totals=self._grand_totals(rows))

    def hsn_report(self, records: Iterable[TaxedLineItem]) -> GSTReport:
        """Aggregate records by HSN code.

        Records without an HSN code are grouped as UNCLASSIFIED. The rate
        and unit of a row are those of the first record seen for it.

        Args:
            records: Taxed line items of the period.

        Returns:
            Report rows sorted by HSN code and numbered from 1.
        """
        grouped: dict[str, HSNReportRow] = {}
        for record in self._reportable(records):
            hsn = record.hsn or UNCLASSIFIED_HSN
            if hsn not in grouped:
                grouped[hsn] = HSNReportRow(
                    hsn=hsn,
                    hsn_description=record.hsn_description,
                    uqc=record.uqc,
                    rate=record.tax_rate
                )
            grouped[hsn].totals.add(record)

        rows = [grouped[hsn] for hsn in sorted(grouped)]
        for sr_no, row in enumerate(rows, start=1):
            row.sr_no = sr_no
        return GSTReport(rows=rows, totals=self._grand_totals(rows))

    @staticmethod
    def filter_by_date_range(
        records: Iterable[TaxedLineItem],
        start_date: str,
        end_date: str
    ) -> list[TaxedLineItem]:
        """Keep records whose invoice date lies within the range.

        Dates are ISO strings compared as text, both ends inclusive.
        Records without an invoice date are dropped.
        """
        return [
            record for record in records
            if record.invoice_date
            and start_date <= record.invoice_date <= end_date
        ]

    @staticmethod
    def year_months_in_range(start: str, end: str) -> list[str]:
        """List "YYYY-MM" months from start to end, inclusive.

        Args:
            start: First month, "YYYY-MM" or a longer ISO date.
            end: Last month, "YYYY-MM" or a longer ISO date.
        """
        current = date(int(start[:4]), int(start[5:7]), 1)
        last = date(int(end[:4]), int(end[5:7]), 1)

        months = []
        while current <= last:
            months.append(f"{current.year:04d}-{current.month:02d}")
            if current.month == 12:
                current = date(current.year + 1, 1, 1)
            else:
                current = date(current.year, current.month + 1, 1)
        return months

    def get_formatted_summary(self, records: Iterable[TaxedLineItem]) -> str:
        """Generate a formatted text summary of both reports.

        Args:
            records: Taxed line items of the period.

        Returns:
            Formatted string with the B2C and HSN summaries.
        """
        records = list(records)
        b2c = self.b2c_report(records)
        hsn = self.hsn_report(records)

        lines = [
            "GST Summary",
            "=" * 50,
            "",
            "B2C (Others):",
            "-" * 50
        ]
        for row in b2c.rows:
            lines.append(
                f"  {row.place_of_supply} @ {row.rate}%: "
                f"taxable Rs.{row.totals.taxable_value} | "
                f"IGST Rs.{row.totals.integrated_tax} | "
                f"CGST Rs.{row.totals.central_tax} | "
                f"SGST Rs.{row.totals.state_tax}"
            )

        lines.append("")
        lines.append("HSN Summary:")
        lines.append("-" * 50)
        for row in hsn.rows:
            lines.append(
                f"  {row.sr_no}. {row.hsn}: {row.totals.quantity} {row.uqc} | "
                f"taxable Rs.{row.totals.taxable_value} @ {row.rate}%"
            )

        lines.append("")
        lines.append("-" * 50)
        lines.append(f"Total Taxable Value: Rs.{b2c.totals.taxable_value}")
        total_tax = (
            b2c.totals.integrated_tax
            + b2c.totals.central_tax
            + b2c.totals.state_tax
        )
        lines.append(f"Total Tax: Rs.{total_tax}")

        return "\n".join(lines)

    @staticmethod
    def _reportable(records: Iterable[TaxedLineItem]):
        return (r for r in records if r.status != STATUS_CANCELLED)

    @staticmethod
    def _grand_totals(rows) -> ReportTotals:
        totals = ReportTotals()
        for row in rows:
            totals.taxable_value += row.totals.taxable_value
            totals.integrated_tax += row.totals.integrated_tax
            totals.central_tax += row.totals.central_tax
            totals.state_tax += row.totals.state_tax
            totals.cess += row.totals.cess
            totals.quantity += row.totals.quantity
        return totals

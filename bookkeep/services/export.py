"""
Export service for BookKeep reports.

Writes event reports and payment summaries to XLSX workbooks.
"""

import io
from datetime import datetime
from enum import Enum
from typing import Optional, cast

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from bookkeep.config import DEFAULT_REPORT_SUBTITLE, get_company_name
from bookkeep.models.status import PaymentSummaryStatus

from .payment_summary import PaymentStatistics, PaymentSummary
from .report import EventReport

MONEY_FORMAT = "#,##0.00"


class ExportKind(str, Enum):
    """Kinds of workbook the service can produce."""

    EVENT_REPORT = "event_report"
    PAYMENTS = "payments"


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def _date_text(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


class ExportService:
    """Service for exporting BookKeep data to XLSX workbooks."""

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = _fill("4472C4")
    label_font = Font(bold=True)
    title_font = Font(bold=True, size=14)

    status_fills = {
        PaymentSummaryStatus.NOT_STARTED: _fill("EDEDED"),
        PaymentSummaryStatus.PARTIAL: _fill("FFEB9C"),
        PaymentSummaryStatus.COMPLETED: _fill("C6EFCE"),
        PaymentSummaryStatus.OVERPAID: _fill("FFC7CE"),
    }
    over_budget_fill = _fill("FFC7CE")

    def __init__(self, company_name: Optional[str] = None):
        """
        Initialize the export service.

        Args:
            company_name: Name printed at the top of reports. Defaults to
                BOOKKEEP_COMPANY_NAME or the built-in name
        """
        self.company_name = company_name or get_company_name()

    def _write_header_row(self, ws: Worksheet, row: int, headers: list[str]):
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = Alignment(horizontal="center")

    def _write_pairs(self, ws: Worksheet, start_row: int, pairs: list[tuple]) -> int:
        """Write label/value rows; returns the next free row."""
        row = start_row
        for label, value in pairs:
            ws.cell(row=row, column=1, value=label).font = self.label_font
            ws.cell(row=row, column=2, value=value)
            row += 1
        return row

    def export_event_report(self, report: EventReport) -> io.BytesIO:
        """
        Export one customer event report to XLSX.

        The sheet has the company header, the event details, the amount
        block (tax split and budget) and the linked expense lines.

        Args:
            report: Report built by ReportService

        Returns:
            BytesIO buffer containing the XLSX data
        """
        event = report.event
        customer = report.customer

        wb = Workbook()
        ws = cast(Worksheet, wb.active)
        ws.title = "Event Report"

        ws.cell(row=1, column=1, value=self.company_name).font = self.title_font
        ws.cell(row=2, column=1, value=DEFAULT_REPORT_SUBTITLE)
        ws.cell(
            row=3,
            column=1,
            value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        )

        row = self._write_pairs(
            ws,
            5,
            [
                ("Event No", event.event_no),
                ("Event Name", event.event_name),
                ("Customer", customer.customer_name if customer else event.customer_name),
                ("Location", (customer.location if customer else None) or ""),
                ("GST No", (customer.gst_no if customer else None) or ""),
                ("Product", report.product.product_name if report.product else ""),
                ("Quantity", event.quantity),
                ("Event Date", _date_text(event.event_date)),
                ("Expected Finish", _date_text(event.expected_finishing_date)),
                ("Status", event.status.display_name),
            ],
        )

        # Amount block
        amounts_start = row + 1
        row = self._write_pairs(
            ws,
            amounts_start,
            [
                ("Agreed Amount", report.tax.agreed_amount),
                ("Tax Rate (%)", report.tax.tax_rate),
                ("Base Amount", report.tax.base_amount),
                ("Tax Amount", report.tax.tax_amount),
                ("Total Spent", report.budget.total_spent),
                (report.budget.label, report.budget.display_amount),
            ],
        )
        for r in range(amounts_start, row):
            ws.cell(row=r, column=2).number_format = MONEY_FORMAT
        if report.budget.is_over_budget:
            ws.cell(row=row - 1, column=1).fill = self.over_budget_fill
            ws.cell(row=row - 1, column=2).fill = self.over_budget_fill

        # Expense table
        table_start = row + 1
        self._write_header_row(
            ws, table_start, ["Expense No", "Date", "Expense Type", "Expense Name", "Amount"]
        )
        row = table_start + 1
        for expense in report.daily_events:
            ws.cell(row=row, column=1, value=expense.event_no)
            ws.cell(row=row, column=2, value=_date_text(expense.event_date))
            ws.cell(row=row, column=3, value=expense.expense_type)
            ws.cell(row=row, column=4, value=expense.expense_name)
            ws.cell(row=row, column=5, value=expense.amount).number_format = MONEY_FORMAT
            row += 1

        ws.cell(row=row, column=4, value="Total").font = self.label_font
        total = ws.cell(row=row, column=5, value=report.budget.total_spent)
        total.font = self.label_font
        total.number_format = MONEY_FORMAT

        column_widths = [18, 16, 16, 30, 15]
        for col, width in enumerate(column_widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)

        return buffer

    def export_payment_summaries(
        self,
        summaries: list[PaymentSummary],
        statistics: PaymentStatistics,
    ) -> io.BytesIO:
        """
        Export payment summaries to XLSX, one row per customer event.

        Rows are colored by payment status. A second sheet holds the
        statistics.

        Returns:
            BytesIO buffer containing the XLSX data
        """
        wb = Workbook()
        ws = cast(Worksheet, wb.active)
        ws.title = "Payments"

        headers = [
            "Event No",
            "Customer",
            "Event Name",
            "Event Status",
            "Agreed Amount",
            "Total Paid",
            "Remaining",
            "Payments",
            "Last Payment",
            "Payment Status",
        ]
        self._write_header_row(ws, 1, headers)

        for row_idx, summary in enumerate(summaries, 2):
            values = [
                summary.customer_event_no,
                summary.customer_name,
                summary.event_name,
                summary.customer_event_status.display_name,
                summary.agreed_amount,
                summary.total_paid,
                summary.remaining_amount,
                len(summary.payments),
                _date_text(summary.last_payment_date),
                summary.status.display_name,
            ]
            fill = self.status_fills[summary.status]
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row_idx, column=col, value=value)
                cell.fill = fill
            for col in (5, 6, 7):
                ws.cell(row=row_idx, column=col).number_format = MONEY_FORMAT

        column_widths = [12, 25, 25, 14, 15, 15, 15, 10, 14, 15]
        for col, width in enumerate(column_widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

        ws.freeze_panes = "A2"

        self._add_statistics_sheet(wb, statistics)

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)

        return buffer

    def _add_statistics_sheet(self, wb: Workbook, statistics: PaymentStatistics):
        """Add the payment statistics sheet to the workbook."""
        ws = wb.create_sheet(title="Statistics")

        ws.cell(row=1, column=1, value="Payment Statistics").font = self.title_font
        ws.cell(
            row=2,
            column=1,
            value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        )

        self._write_pairs(
            ws,
            4,
            [
                ("Total Events", statistics.total_events),
                ("Completed", statistics.completed_events),
                ("Partial", statistics.partial_events),
                ("Overpaid", statistics.overpaid_events),
                ("Not Started", statistics.not_started_events),
            ],
        )
        self._write_pairs(
            ws,
            10,
            [
                ("Total Agreed", statistics.total_agreed_amount),
                ("Total Paid", statistics.total_paid_amount),
                ("Total Remaining", statistics.total_remaining_amount),
            ],
        )
        for row in range(10, 13):
            ws.cell(row=row, column=2).number_format = MONEY_FORMAT

        ws.cell(row=13, column=1, value="Completion %").font = self.label_font
        ws.cell(row=13, column=2, value=statistics.completion_percentage).number_format = "0.00"

        ws.column_dimensions["A"].width = 18
        ws.column_dimensions["B"].width = 18

    def get_filename(self, kind: ExportKind) -> str:
        """
        Generate a filename for an export.

        Returns:
            Suggested filename, e.g. bookkeep_payments_20240131.xlsx
        """
        kind = ExportKind(kind)
        date_str = datetime.now().strftime("%Y%m%d")
        return f"bookkeep_{kind.value}_{date_str}.xlsx"

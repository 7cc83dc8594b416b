"""
Report renderers.

Turns a ``PrintableReport`` into the bytes of a PDF (fpdf2) or a printable
HTML page, and a list of sale records into the inventory CSV export.
"""

import csv
import datetime
import html
import io
import logging
from typing import Iterable, List

from fpdf import FPDF

from ...common.parsing import format_amount, format_timestamp
from ...core import config
from ..sales.schemas import SaleRecord
from .schemas import PrintableReport

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Barcode ID", "Weight", "Farmer ID", "Station ID", "Buyer ID", "Registrar",
    "Lot Number", "Grade", "Price", "USD Value", "Tobacco Type", "Date", "Dispatch ID",
]

HEADER_FILL = (230, 230, 230)
ZEBRA_FILL = (248, 248, 248)
WHITE = (255, 255, 255)
RULE_COLOR = (51, 51, 51)

# Core PDF fonts only cover latin-1
_PDF_REPLACEMENTS = {"—": "-", "–": "-", "‘": "'", "’": "'", "“": '"', "”": '"'}


def pdf_safe(text: str) -> str:
    for source, target in _PDF_REPLACEMENTS.items():
        text = text.replace(source, target)
    return text.encode("latin-1", "replace").decode("latin-1")


class ReportPDF(FPDF):
    def __init__(self, landscape: bool = False):
        super().__init__(orientation="L" if landscape else "P", unit="mm", format="A4")
        self.set_auto_page_break(auto=True, margin=15)
        self.generated_on = format_timestamp(datetime.datetime.now())

    def footer(self):
        self.set_y(-12)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(102, 102, 102)
        self.cell(self.epw * 0.75, 6, pdf_safe(f"{config.SYSTEM_NAME} - Generated on {self.generated_on}"), align="L")
        self.cell(0, 6, f"Page {self.page_no()}", align="R")
        self.set_text_color(0, 0, 0)

    def rule(self, width: float = 0.6):
        self.set_draw_color(*RULE_COLOR)
        self.set_line_width(width)
        y = self.get_y()
        self.line(self.l_margin, y, self.w - self.r_margin, y)
        self.ln(4)


def _fit_widths(widths: List[float], available: float) -> List[float]:
    total = sum(widths)
    if total <= available:
        return list(widths)
    scale = available / total
    return [width * scale for width in widths]


def _table_row(pdf: ReportPDF, cells: List[str], widths, alignments, fill) -> None:
    pdf.set_fill_color(*fill)
    for text, width, align in zip(cells, widths, alignments):
        pdf.cell(width, 7, pdf_safe(text), border=1, align=align, fill=True)
    pdf.ln()


def render_pdf(report: PrintableReport) -> bytes:
    """Lays out ``report`` on A4 pages and returns the PDF bytes."""
    pdf = ReportPDF(landscape=report.landscape)
    pdf.add_page()

    pdf.set_font("Helvetica", "B", 16)
    pdf.cell(0, 9, pdf_safe(config.ORGANISATION_NAME), align="C")
    pdf.ln()
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(0, 6, pdf_safe(config.SYSTEM_NAME), align="C")
    pdf.ln(8)
    pdf.set_font("Helvetica", "B", 13)
    pdf.cell(0, 8, pdf_safe(report.title.upper()), align="C")
    pdf.ln(10)
    pdf.rule()

    pdf.set_font("Helvetica", "", 10)
    for label, value in report.info.items():
        pdf.set_font("Helvetica", "B", 10)
        pdf.cell(40, 6, pdf_safe(f"{label}:"))
        pdf.set_font("Helvetica", "", 10)
        pdf.cell(0, 6, pdf_safe(value))
        pdf.ln()
    pdf.ln(2)

    if report.note:
        pdf.set_font("Helvetica", "I", 9)
        pdf.multi_cell(0, 5, pdf_safe(report.note))
        pdf.ln(3)

    widths = _fit_widths(report.column_widths, pdf.epw)
    pdf.set_font("Helvetica", "B", 9)
    _table_row(pdf, report.headers, widths, ["C"] * len(widths), HEADER_FILL)

    pdf.set_font("Helvetica", "", 9)
    for index, row in enumerate(report.rows):
        _table_row(pdf, row, widths, report.alignments, ZEBRA_FILL if index % 2 else WHITE)

    if report.totals:
        pdf.set_font("Helvetica", "B", 9)
        _table_row(pdf, report.totals, widths, report.alignments, HEADER_FILL)

    logger.info(f"Rendered PDF '{report.title}' with {len(report.rows)} rows")
    return bytes(pdf.output())


def render_html(report: PrintableReport) -> str:
    """Standalone page with the same content that opens the print dialog on load."""
    esc = html.escape
    align_css = {"L": "left", "C": "center", "R": "right"}
    page_size = "A4 landscape" if report.landscape else "A4"

    info_rows = "".join(
        f'<div class="info-row"><strong>{esc(label)}:</strong> {esc(value)}</div>'
        for label, value in report.info.items()
    )
    header_cells = "".join(f"<th>{esc(header)}</th>" for header in report.headers)

    def cells(row: List[str]) -> str:
        return "".join(
            f'<td style="text-align:{align_css[align]}">{esc(text)}</td>'
            for text, align in zip(row, report.alignments)
        )

    body_rows = "".join(f"<tr>{cells(row)}</tr>" for row in report.rows)
    total_row = f'<tr class="total-row">{cells(report.totals)}</tr>' if report.totals else ""
    note = f'<p class="note">{esc(report.note)}</p>' if report.note else ""

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{esc(report.title)}</title>
<style>
  @page {{ size: {page_size}; margin: 15mm; }}
  body {{ font-family: Arial, sans-serif; font-size: 12px; color: #000; }}
  .header {{ text-align: center; margin-bottom: 16px; }}
  .header h1 {{ font-size: 20px; margin: 0; }}
  .header h2 {{ font-size: 16px; margin: 8px 0 0; text-transform: uppercase; }}
  hr {{ border: 0; border-top: 2px solid #333; }}
  .info-row {{ margin: 2px 0; }}
  .note {{ font-style: italic; font-size: 11px; }}
  table {{ width: 100%; border-collapse: collapse; margin-top: 12px; }}
  th, td {{ border: 1px solid #000; padding: 4px 6px; }}
  th {{ background: #e6e6e6; }}
  tbody tr:nth-child(even) {{ background: #f8f8f8; }}
  .total-row {{ font-weight: bold; background: #e6e6e6; }}
  .footer {{ margin-top: 16px; font-size: 10px; color: #666; }}
</style>
</head>
<body onload="window.print()">
<div class="header">
  <h1>{esc(config.ORGANISATION_NAME)}</h1>
  <div>{esc(config.SYSTEM_NAME)}</div>
  <h2>{esc(report.title)}</h2>
</div>
<hr>
{info_rows}
{note}
<table>
<thead><tr>{header_cells}</tr></thead>
<tbody>{body_rows}{total_row}</tbody>
</table>
<div class="footer">Generated on {esc(format_timestamp(datetime.datetime.now()))}</div>
</body>
</html>
"""


def _csv_row(record: SaleRecord) -> List[str]:
    usd_value = ""
    if record.price and record.weight:
        usd_value = format_amount(record.usd_value)
    return [
        record.barcode_id, record.weight, record.farmer_id, record.station_id,
        record.buyer_id, record.registra, record.lot_number, record.grade,
        record.price, usd_value, record.tobacco_type, record.report_date, record.dispatch_id,
    ]


def render_records_csv(records: Iterable[SaleRecord]) -> str:
    """Inventory export with every cell quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    count = 0
    for record in records:
        writer.writerow(_csv_row(record))
        count += 1
    logger.debug(f"Wrote {count} records to CSV")
    return buffer.getvalue()


def csv_filename(today: datetime.date = None) -> str:
    return f"tobacco-inventory-{(today or datetime.date.today()).isoformat()}.csv"

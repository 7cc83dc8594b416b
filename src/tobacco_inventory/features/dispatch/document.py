import datetime
import logging
import re

from ...common.parsing import format_timestamp, parse_date
from ...core import config
from ..reports.renderers import ReportPDF, pdf_safe
from .schemas import DispatchDocument

logger = logging.getLogger(__name__)

BARCODE_COLUMNS = 4
BARCODE_COLUMN_WIDTH = 45
LINE_HEIGHT = 10
HEADER_COLOR = (44, 62, 80)
MUTED_COLOR = (127, 140, 141)


def format_dispatch_date(value: str) -> str:
    """``DD-MM-YY``; text that isn't a date is shown as is."""
    day = parse_date(value)
    return day.strftime("%d-%m-%y") if day else value


def dispatch_filename(document: DispatchDocument, today: datetime.date = None) -> str:
    driver = re.sub(r"\s+", "_", document.driver_name)
    stamp = (today or datetime.date.today()).isoformat()
    return f"Dispatch_{document.dispatchbook_number}_{driver}_{stamp}.pdf"


def _field(pdf: ReportPDF, label: str, value: str) -> None:
    pdf.cell(45, LINE_HEIGHT, pdf_safe(f"{label}:"))
    pdf.cell(0, LINE_HEIGHT, pdf_safe(value))
    pdf.ln()


def render_dispatch_pdf(document: DispatchDocument) -> bytes:
    """Dispatch form: header fields, barcode grid, count, signatures, registrar, footer."""
    pdf = ReportPDF()
    pdf.set_margins(20, 15, 20)
    pdf.add_page()

    pdf.set_font("Helvetica", "B", 18)
    pdf.set_text_color(*HEADER_COLOR)
    pdf.cell(0, 10, pdf_safe(config.ORGANISATION_NAME), align="C")
    pdf.ln()
    pdf.set_font("Helvetica", "", 14)
    pdf.set_text_color(*MUTED_COLOR)
    pdf.cell(0, 8, "DISPATCH DOCUMENT", align="C")
    pdf.ln(10)
    pdf.set_text_color(0, 0, 0)
    pdf.rule(width=0.5)

    pdf.set_font("Helvetica", "", 11)
    _field(pdf, "Dispatch book No", document.dispatchbook_number)
    _field(pdf, "Driver Name", document.driver_name)
    _field(pdf, "Driver Licence", document.driver_licence)
    _field(pdf, "Destination", document.destination)
    _field(pdf, "Truck Reg No", document.car_registration)
    _field(pdf, "Date", format_dispatch_date(document.date))
    pdf.ln(LINE_HEIGHT)

    pdf.set_font("Helvetica", "B", 12)
    pdf.cell(0, LINE_HEIGHT, "Barcode")
    pdf.ln()
    y = pdf.get_y()
    pdf.set_line_width(0.3)
    pdf.line(pdf.l_margin, y, pdf.l_margin + 40, y)
    pdf.ln(4)

    pdf.set_font("Helvetica", "", 10)
    for index, barcode in enumerate(document.barcodes):
        last_in_row = index % BARCODE_COLUMNS == BARCODE_COLUMNS - 1
        pdf.cell(BARCODE_COLUMN_WIDTH, LINE_HEIGHT, pdf_safe(barcode))
        if last_in_row:
            pdf.ln()
    if document.barcodes and len(document.barcodes) % BARCODE_COLUMNS:
        pdf.ln()

    pdf.ln(4)
    pdf.set_font("Helvetica", "B", 11)
    pdf.cell(0, LINE_HEIGHT, f"Count Barcodes: {document.barcode_count}")
    pdf.ln(LINE_HEIGHT * 2)

    pdf.set_font("Helvetica", "", 10)
    pdf.cell(0, LINE_HEIGHT, "Driver Signature: ____________________________")
    pdf.ln(LINE_HEIGHT * 2)
    pdf.cell(0, LINE_HEIGHT, "Receiver Signature: __________________________")
    pdf.ln(LINE_HEIGHT * 2)
    pdf.cell(0, LINE_HEIGHT, pdf_safe(f"Registrar: {document.registra}"))
    pdf.ln(LINE_HEIGHT * 2)

    pdf.set_font("Helvetica", "I", 8)
    pdf.set_text_color(*MUTED_COLOR)
    pdf.cell(0, 6, f"Generated on: {format_timestamp(datetime.datetime.now())}")

    logger.info(f"Rendered dispatch document for book {document.dispatchbook_number}")
    return bytes(pdf.output())

import csv
import io

from ...sales.schemas import SaleRecord
from ..renderers import CSV_HEADERS, pdf_safe, render_html, render_pdf, render_records_csv
from ..schemas import PrintableReport


def _document(**overrides) -> PrintableReport:
    fields = dict(
        title="Sales Summary by Station",
        filename_stem="Sales_Summary_By_Station_2025-01-01",
        info={"Period": "01/01/2025 to 31/01/2025", "Tobacco Type": "ALL TYPES"},
        note="Note: Average Price = Total Value ÷ Total Weight",
        headers=["Station ID", "No. of Bales", "Weight (kg)", "Avg. Price ($/kg)", "Total Value ($)"],
        rows=[["S1", "3", "380.00", "3.08", "1170.00"], ["S<2>", "1", "150.00", "2.00", "300.00"]],
        totals=["GRAND TOTAL", "4", "530.00", "—", "1470.00"],
        column_widths=[40, 30, 30, 30, 40],
        alignments=["L", "C", "R", "R", "R"],
    )
    fields.update(overrides)
    return PrintableReport(**fields)


def test_pdf_safe_replaces_characters_outside_latin1():
    assert pdf_safe("A — B") == "A - B"
    assert pdf_safe("÷") == "÷"
    assert pdf_safe("✓") == "?"


def test_render_pdf_returns_pdf_bytes():
    content = render_pdf(_document())
    assert isinstance(content, bytes)
    assert content.startswith(b"%PDF")


def test_render_pdf_landscape_with_many_rows():
    rows = [[f"{i:02d}/01/2025", "F1", "Name", "S1", "1", "10.00", "20.00", "0.00", "4.60", "15.40"] for i in range(1, 80)]
    document = _document(
        headers=["Sale Date", "Farmer ID", "Farmer Name", "Station", "Bales",
                 "Total Weight (kg)", "Total Sales ($)", "Commission ($)", "Loans ($)", "Net Pay ($)"],
        rows=rows,
        totals=None,
        column_widths=[25, 20, 35, 25, 15, 25, 25, 25, 20, 25],
        alignments=["L", "L", "L", "L", "C", "R", "R", "R", "R", "R"],
        landscape=True,
    )
    assert render_pdf(document).startswith(b"%PDF")


def test_render_html_is_printable_and_escaped():
    page = render_html(_document())
    assert 'onload="window.print()"' in page
    assert "<h2>Sales Summary by Station</h2>" in page
    assert "S&lt;2&gt;" in page
    assert '<tr class="total-row">' in page
    assert "size: A4;" in page


def test_render_html_landscape():
    assert "size: A4 landscape;" in render_html(_document(landscape=True))


def test_render_records_csv(sample_records):
    content = render_records_csv(sample_records)
    lines = content.splitlines()
    assert lines[0] == ",".join(f'"{header}"' for header in CSV_HEADERS)
    assert lines[1].startswith('"B001","100","F001","S1","BY1","John Moyo","L1","A1","2.5","250.00"')

    rows = list(csv.reader(io.StringIO(content)))
    assert len(rows) == 6
    assert rows[4][9] == ""
    assert [row[11] for row in rows[1:]] == ["1/15/2025", "1/15/2025", "2/3/2025", "2/10/2025", "3/1/2025"]


def test_render_records_csv_date_falls_back_to_timestamp():
    record = SaleRecord(barcode_id="B9", weight="10", date="2025-01-15T08:30:00.000Z")
    rows = list(csv.reader(io.StringIO(render_records_csv([record]))))
    assert rows[1][11] == "2025-01-15T08:30:00.000Z"


def test_render_records_csv_without_records():
    assert render_records_csv([]).splitlines() == [",".join(f'"{h}"' for h in CSV_HEADERS)]

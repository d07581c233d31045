"""
Report Exports

Flattens a generated report into CSV, Excel and PDF documents. Each renderer
takes the report dict produced by ReportService and returns the file content;
the export views wrap it in an HttpResponse.
"""

import csv
import io
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Font, Border, Side, PatternFill
from openpyxl.utils import get_column_letter

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer, PageBreak


DAILY_COLUMNS = [
    ('Date', 'date'),
    ('Farm', 'farm_name'),
    ('Shed', 'shed_name'),
    ('Age-Wk', 'age_weeks'),
    ('Age-Day', 'age_days'),
    ('Op Male', 'opening_male'),
    ('Op Female', 'opening_female'),
    ('Mortl Male', 'mortality_male'),
    ('Mortl Female', 'mortality_female'),
    ('Closing Male', 'closing_male'),
    ('Closing Female', 'closing_female'),
    ('Table', 'table_eggs'),
    ('Hatching', 'hatching_eggs'),
    ('Cracked', 'cracked_eggs'),
    ('Jumbo', 'jumbo_eggs'),
    ('Leaker', 'leaker_eggs'),
    ('Total Daily Eggs', 'total_daily_eggs'),
    ('Total Labors', 'total_labors'),
    ('Present Labors', 'present_labors'),
    ('Supervisors', 'supervisors'),
    ('HD%', 'hd_percent'),
    ('HE%', 'he_percent'),
]

WORKER_COLUMNS = [
    ('Worker', 'user_name'),
    ('Total Days', 'total_days'),
    ('Present', 'present_days'),
    ('Late', 'late_days'),
    ('Absent', 'absent_days'),
    ('Leave', 'leave_days'),
    ('Unrecorded', 'unrecorded_days'),
    ('Attendance %', 'attendance_rate'),
    ('Status', 'status'),
]

PRODUCTION_SUMMARY_LABELS = [
    ('Total Eggs', 'total_eggs'),
    ('Sellable Eggs', 'sellable_eggs'),
    ('Waste Eggs', 'waste_eggs'),
    ('Loss %', 'loss_percentage'),
    ('Average Daily', 'average_daily'),
    ('Days Reported', 'days_reported'),
    ('Total Mortality', 'total_mortality'),
]

ATTENDANCE_SUMMARY_LABELS = [
    ('Total Workers', 'total_workers'),
    ('Average Attendance %', 'average_attendance_rate'),
    ('Present Days', 'total_present_days'),
    ('Late Days', 'total_late_days'),
    ('Absent Days', 'total_absent_days'),
]

SUMMARY_HEADER = '=== SUMMARY ==='
DAILY_HEADER = '=== DAILY PRODUCTION ==='
WORKER_HEADER = '=== WORKER ATTENDANCE ==='


def _cell(value):
    return '' if value is None else value


def summary_rows(report):
    """(label, value) pairs for the summary section."""
    rows = []
    production = report.get('production')
    if production:
        summary = production['summary']
        rows += [(label, summary[key]) for label, key in PRODUCTION_SUMMARY_LABELS]
    attendance = report.get('attendance')
    if attendance:
        summary = attendance['summary']
        rows += [(label, summary[key]) for label, key in ATTENDANCE_SUMMARY_LABELS]
    return rows


def daily_rows(report):
    return [
        [_cell(detail[key]) for _, key in DAILY_COLUMNS]
        for detail in report.get('production', {}).get('daily_data', [])
    ]


def worker_rows(report):
    return [
        [_cell(worker[key]) for _, key in WORKER_COLUMNS]
        for worker in report.get('attendance', {}).get('worker_breakdown', [])
    ]


def filename_for(report, extension):
    metadata = report['metadata']
    slug = metadata['report_type'].lower().replace(' ', '_')
    return f"{slug}_{metadata['start_date']}_{metadata['end_date']}.{extension}"


# =============================================================================
# CSV
# =============================================================================

def render_csv(report):
    output = io.StringIO()
    writer = csv.writer(output)
    metadata = report['metadata']

    writer.writerow([metadata['report_type']])
    writer.writerow(['Organization', metadata['organization_name']])
    writer.writerow(['Period', metadata['date_range']])
    writer.writerow(['Generated', metadata['generated_at']])
    writer.writerow([])

    writer.writerow([SUMMARY_HEADER])
    writer.writerow(['Metric', 'Value'])
    for label, value in summary_rows(report):
        writer.writerow([label, value])
    writer.writerow([])

    if 'production' in report:
        writer.writerow([DAILY_HEADER])
        writer.writerow([label for label, _ in DAILY_COLUMNS])
        writer.writerows(daily_rows(report))
        writer.writerow([])

    if 'attendance' in report:
        writer.writerow([WORKER_HEADER])
        writer.writerow([label for label, _ in WORKER_COLUMNS])
        writer.writerows(worker_rows(report))

    return output.getvalue()


# =============================================================================
# EXCEL
# =============================================================================

HEADER_FONT = Font(bold=True, color='FFFFFF')
HEADER_FILL = PatternFill(start_color='2E7D32', end_color='2E7D32', fill_type='solid')
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)


def _write_table(ws, start_row, headers, rows):
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=start_row, column=col, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = THIN_BORDER
    for offset, values in enumerate(rows, 1):
        for col, value in enumerate(values, 1):
            ws.cell(row=start_row + offset, column=col, value=value).border = THIN_BORDER
    for col, header in enumerate(headers, 1):
        ws.column_dimensions[get_column_letter(col)].width = max(12, len(str(header)) + 2)


def render_excel(report):
    metadata = report['metadata']
    wb = Workbook()

    ws_summary = wb.active
    ws_summary.title = "Summary"
    ws_summary['A1'] = metadata['report_type']
    ws_summary['A1'].font = Font(bold=True, size=16)
    ws_summary['A2'] = metadata['organization_name']
    ws_summary['A3'] = metadata['date_range']
    _write_table(ws_summary, 5, ['Metric', 'Value'], summary_rows(report))
    ws_summary.column_dimensions['A'].width = 25

    row = 7 + len(summary_rows(report))
    recommendations = report.get('insights', {}).get('recommendations', [])
    if recommendations:
        ws_summary.cell(row=row, column=1, value="Recommendations").font = Font(bold=True)
        for offset, item in enumerate(recommendations, 1):
            ws_summary.cell(row=row + offset, column=1, value=item)

    if 'production' in report:
        ws_daily = wb.create_sheet("Daily Production")
        _write_table(ws_daily, 1, [label for label, _ in DAILY_COLUMNS], daily_rows(report))

    if 'attendance' in report:
        ws_workers = wb.create_sheet("Attendance")
        _write_table(ws_workers, 1, [label for label, _ in WORKER_COLUMNS], worker_rows(report))

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


# =============================================================================
# PDF
# =============================================================================

def _styled_table(data, col_widths=None, font_size=9):
    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#2E7D32')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), font_size),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ]))
    return table


def render_pdf(report):
    metadata = report['metadata']
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=1*cm,
        leftMargin=1*cm,
        topMargin=1.5*cm,
        bottomMargin=1.5*cm
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle('ReportTitle', parent=styles['Heading1'], alignment=TA_CENTER)
    centered = ParagraphStyle('Centered', parent=styles['Normal'], alignment=TA_CENTER)
    heading_style = ParagraphStyle(
        'ReportHeading',
        parent=styles['Heading2'],
        textColor=colors.HexColor('#2E7D32'),
        spaceBefore=12,
        spaceAfter=8
    )

    elements = [
        Paragraph(escape(metadata['report_type']), title_style),
        Paragraph(f"<b>{escape(metadata['organization_name'])}</b>", centered),
        Paragraph(metadata['date_range'], centered),
        Spacer(1, 15),
        Paragraph("Summary", heading_style),
        _styled_table(
            [['Metric', 'Value']] + [[label, str(value)] for label, value in summary_rows(report)],
            col_widths=[7*cm, 5*cm],
            font_size=10,
        ),
    ]

    recommendations = report.get('insights', {}).get('recommendations', [])
    if recommendations:
        elements.append(Paragraph("Recommendations", heading_style))
        for item in recommendations:
            elements.append(Paragraph(f"• {escape(item)}", styles['Normal']))

    daily = daily_rows(report)
    if daily:
        elements.append(PageBreak())
        elements.append(Paragraph("Daily Production", heading_style))
        headers = [label for label, _ in DAILY_COLUMNS]
        elements.append(_styled_table([headers] + [[str(v) for v in row] for row in daily], font_size=6))

    workers = worker_rows(report)
    if workers:
        elements.append(PageBreak())
        elements.append(Paragraph("Worker Attendance", heading_style))
        headers = [label for label, _ in WORKER_COLUMNS]
        elements.append(_styled_table([headers] + [[str(v) for v in row] for row in workers]))

    doc.build(elements)
    return buffer.getvalue()

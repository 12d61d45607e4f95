"""
Report exporters.

Every report renders the same way: a title block, the summary figures and the row
table. Excel output uses openpyxl, PDF output uses reportlab, CSV uses the csv module.
"""

from __future__ import annotations

import csv
import datetime
import io
import logging
from decimal import Decimal
from typing import Any, Dict, Tuple
from xml.sax.saxutils import escape

import openpyxl
from django.utils import timezone
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from shared.exceptions import ValidationFailed

from .report_service import Report

logger = logging.getLogger(__name__)

HEADER_COLOR = "366092"
PDF_MAX_ROWS = 1000


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, datetime.datetime):
        return timezone.localtime(value).strftime("%Y-%m-%d %H:%M") if timezone.is_aware(value) else value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, dict):
        return ", ".join(f"{key}: {format_value(item)}" for key, item in value.items())
    return str(value)


def excel_value(value: Any):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (int, float, datetime.date)) and not isinstance(value, bool):
        if isinstance(value, datetime.datetime) and timezone.is_aware(value):
            return timezone.localtime(value).replace(tzinfo=None)
        return value
    return format_value(value)


class ExportService:
    FORMATS: Dict[str, Tuple[str, str]] = {
        "xlsx": ("xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
        "csv": ("csv", "text/csv"),
        "pdf": ("pdf", "application/pdf"),
    }

    @staticmethod
    def filename(report: Report, company, fmt: str) -> str:
        stamp = timezone.localtime(report.generated_at).strftime("%Y%m%d-%H%M%S")
        return f"{report.name}-{company.code}-{stamp}.{ExportService.FORMATS[fmt][0]}"

    @staticmethod
    def export(report: Report, fmt: str, company) -> Tuple[bytes, str, str]:
        """Render ``report`` and return ``(content, content_type, filename)``."""
        fmt = (fmt or "").lower()
        if fmt not in ExportService.FORMATS:
            raise ValidationFailed(f"Unsupported export format: {fmt}. Use xlsx, csv or pdf")
        renderer = {"xlsx": ExportService.to_xlsx, "csv": ExportService.to_csv, "pdf": ExportService.to_pdf}[fmt]
        content = renderer(report, company)
        logger.info("Exported %s report for %s as %s (%d bytes)", report.name, company.code, fmt, len(content))
        return content, ExportService.FORMATS[fmt][1], ExportService.filename(report, company, fmt)

    @staticmethod
    def _header_lines(report: Report, company) -> list:
        lines = [[company.name], [report.title]]
        if report.start_date or report.end_date:
            lines.append([f"Period: {format_value(report.start_date)} to {format_value(report.end_date)}"])
        lines.append([f"Generated: {format_value(report.generated_at)}"])
        return lines

    @staticmethod
    def to_csv(report: Report, company) -> bytes:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerows(ExportService._header_lines(report, company))
        writer.writerow([])
        for key, value in report.summary.items():
            writer.writerow([key.replace("_", " ").title(), format_value(value)])
        writer.writerow([])
        writer.writerow([label for _, label in report.columns])
        for row in report.rows:
            writer.writerow([format_value(row.get(key)) for key, _ in report.columns])
        return output.getvalue().encode("utf-8")

    @staticmethod
    def to_xlsx(report: Report, company) -> bytes:
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.title = report.title[:31]

        for line in ExportService._header_lines(report, company):
            sheet.append(line)
        sheet["A1"].font = Font(bold=True, size=14)
        sheet["A2"].font = Font(bold=True, size=12)
        sheet.append([])
        for key, value in report.summary.items():
            sheet.append([key.replace("_", " ").title(), excel_value(value)])
        sheet.append([])

        sheet.append([label for _, label in report.columns])
        header_row = sheet.max_row
        header_fill = PatternFill(start_color=HEADER_COLOR, end_color=HEADER_COLOR, fill_type="solid")
        for cell in sheet[header_row]:
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center", vertical="center")
        for row in report.rows:
            sheet.append([excel_value(row.get(key)) for key, _ in report.columns])

        for index, (key, label) in enumerate(report.columns, start=1):
            width = max([len(label)] + [len(format_value(row.get(key))) for row in report.rows])
            sheet.column_dimensions[get_column_letter(index)].width = min(width + 2, 50)

        output = io.BytesIO()
        workbook.save(output)
        return output.getvalue()

    @staticmethod
    def to_pdf(report: Report, company) -> bytes:
        buffer = io.BytesIO()
        pagesize = landscape(A4) if len(report.columns) > 6 else A4
        doc = SimpleDocTemplate(buffer, pagesize=pagesize, title=report.title)
        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "ReportTitle",
            parent=styles["Heading1"],
            fontSize=16,
            textColor=colors.HexColor(f"#{HEADER_COLOR}"),
            alignment=TA_CENTER,
        )

        elements = [Paragraph(f"{escape(company.name)}<br/>{escape(report.title)}", title_style), Spacer(1, 0.2 * inch)]
        for line in ExportService._header_lines(report, company)[2:]:
            elements.append(Paragraph(escape(line[0]), styles["Normal"]))
        elements.append(Spacer(1, 0.2 * inch))
        if report.summary:
            summary = [[key.replace("_", " ").title(), format_value(value)] for key, value in report.summary.items()]
            summary_table = Table(summary, hAlign="LEFT")
            summary_table.setStyle(TableStyle([("FONTSIZE", (0, 0), (-1, -1), 9), ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold")]))
            elements.extend([summary_table, Spacer(1, 0.3 * inch)])

        data = [[label for _, label in report.columns]]
        data.extend([format_value(row.get(key)) for key, _ in report.columns] for row in report.rows[:PDF_MAX_ROWS])
        table = Table(data, repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(f"#{HEADER_COLOR}")),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                    ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, 0), 9),
                    ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                    ("FONTSIZE", (0, 1), (-1, -1), 8),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
                ]
            )
        )
        elements.append(table)
        doc.build(elements)
        return buffer.getvalue()

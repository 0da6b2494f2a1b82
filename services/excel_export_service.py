"""
Excel export service for the school results system
Handles Excel export for ranked reports
"""

import logging
from io import BytesIO

import openpyxl
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter

from ranking.ranker import RANKING_METHOD_LABELS
from utils.formatters import report_headers, report_row

logger = logging.getLogger(__name__)


class ExcelExportService:
    """Service for exporting reports to Excel"""

    @staticmethod
    def create_workbook():
        """Create a new workbook with default styling"""
        wb = openpyxl.Workbook()
        return wb

    @staticmethod
    def style_header_row(ws, row_num, columns):
        """Apply styling to header row"""
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="000000", end_color="000000", fill_type="solid")
        header_alignment = Alignment(horizontal="center", vertical="center")

        for col_num, header in enumerate(columns, 1):
            cell = ws.cell(row=row_num, column=col_num, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = header_alignment

    @staticmethod
    def auto_adjust_columns(ws):
        """Auto-adjust column widths"""
        for column in ws.columns:
            column_letter = get_column_letter(column[0].column)
            max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
            ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

    @staticmethod
    def center_all_cells(ws, min_row=1):
        """Center align all populated cells from min_row down"""
        for row in ws.iter_rows(min_row=min_row, max_row=ws.max_row, min_col=1, max_col=ws.max_column):
            for cell in row:
                if cell.value is not None:
                    cell.alignment = Alignment(horizontal="center", vertical="center")

    @staticmethod
    def export_ranked_report(report):
        """Export a generated term/class report as a single ranked mark sheet"""
        try:
            result = report['result']
            term = report.get('term') or {}
            filters = report.get('filters') or {}

            wb = ExcelExportService.create_workbook()
            ws = wb.active
            ws.title = "Ranked Report"

            meta_rows = [
                ('Term', term.get('term_name', '')),
                ('Exam Year', term.get('exam_year', '')),
                ('Class', filters.get('class_name') or 'All Classes'),
                ('Ranking Method', RANKING_METHOD_LABELS[result.ranking_method]),
            ]
            if result.attendance_status != 'ok':
                meta_rows.append(('Attendance', 'Unavailable'))
            for row_num, (label, value) in enumerate(meta_rows, 1):
                ws.cell(row=row_num, column=1, value=label).font = Font(bold=True)
                ws.cell(row=row_num, column=2, value=value)

            header_row = len(meta_rows) + 2
            ExcelExportService.style_header_row(ws, header_row, report_headers(result))

            row_num = header_row + 1
            for position, ranked in enumerate(result, 1):
                for col_num, value in enumerate(report_row(position, ranked, result), 1):
                    ws.cell(row=row_num, column=col_num, value=value)
                row_num += 1

            ws.freeze_panes = ws.cell(row=header_row + 1, column=1)
            ExcelExportService.center_all_cells(ws, min_row=header_row + 1)
            ExcelExportService.auto_adjust_columns(ws)
            return wb

        except Exception:
            logger.exception("Error exporting ranked report")
            return None

    @staticmethod
    def workbook_to_bytes(workbook):
        """Convert workbook to bytes for download"""
        output = BytesIO()
        workbook.save(output)
        output.seek(0)
        return output.getvalue()

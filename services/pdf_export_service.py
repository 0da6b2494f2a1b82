"""
PDF export service for the school results system
Renders ranked mark sheets and Top-N lists with ReportLab
"""

import logging
from io import BytesIO
from xml.sax.saxutils import escape as xml_escape

from flask import current_app, has_app_context
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ranking.ranker import AVERAGE, RANKING_METHOD_LABELS, ZSCORE
from utils.formatters import (
    format_attendance, format_fixed, format_number, format_z_score,
    report_headers, report_row
)

logger = logging.getLogger(__name__)

MARGIN = 12 * mm


class PdfExportService:
    """Service for exporting ranked reports to PDF"""

    @staticmethod
    def _school_name():
        if has_app_context():
            return current_app.config.get('SCHOOL_NAME', '')
        return ''

    @staticmethod
    def _cell_style():
        styles = getSampleStyleSheet()
        return ParagraphStyle('Cell', parent=styles['Normal'], fontSize=8, leading=10)

    @staticmethod
    def _to_paragraph(value, style):
        """Wrap long text in a Paragraph so it stays inside the column"""
        return Paragraph(xml_escape('' if value is None else str(value)), style)

    @staticmethod
    def _build_table(rows, col_widths, wrap_cols=None):
        """Standard table: black header row, grid, centered body"""
        style = PdfExportService._cell_style()
        wrap_cols = set(wrap_cols or [])
        data = [rows[0]]
        for row in rows[1:]:
            data.append([
                PdfExportService._to_paragraph(value, style) if idx in wrap_cols else
                ('' if value is None else str(value))
                for idx, value in enumerate(row)
            ])
        tbl = Table(data, repeatRows=1, colWidths=col_widths)
        tbl.setStyle(TableStyle([
            ('BOX', (0, 0), (-1, -1), 0.5, colors.grey),
            ('INNERGRID', (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ('BACKGROUND', (0, 0), (-1, 0), colors.black),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('LEFTPADDING', (0, 1), (-1, -1), 3),
            ('RIGHTPADDING', (0, 1), (-1, -1), 3),
        ]))
        return tbl

    @staticmethod
    def _header_elements(title, report):
        styles = getSampleStyleSheet()
        term = report.get('term') or {}
        filters = report.get('filters') or {}
        result = report['result']

        elements = []
        school_name = PdfExportService._school_name()
        if school_name:
            elements.append(Paragraph(xml_escape(school_name), styles['Title']))
        elements.append(Paragraph(xml_escape(title), styles['Heading2']))

        meta_rows = [
            ['Term', f"{term.get('term_name', '')} {term.get('exam_year', '')}".strip()],
            ['Class', filters.get('class_name') or 'All Classes'],
            ['Ranking Method', RANKING_METHOD_LABELS[result.ranking_method]],
        ]
        if result.attendance_status != 'ok':
            meta_rows.append(['Attendance', 'Unavailable'])
        meta_table = Table(meta_rows, colWidths=[40 * mm, 100 * mm], hAlign='LEFT')
        meta_table.setStyle(TableStyle([
            ('BOX', (0, 0), (-1, -1), 0.5, colors.grey),
            ('INNERGRID', (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ]))
        elements.extend([meta_table, Spacer(1, 8)])
        return elements

    @staticmethod
    def _render(elements, pagesize):
        buffer = BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=pagesize, leftMargin=MARGIN, rightMargin=MARGIN,
                                topMargin=MARGIN, bottomMargin=MARGIN)
        doc.build(elements)
        buffer.seek(0)
        return buffer.getvalue()

    @staticmethod
    def generate_mark_sheet_pdf(report):
        """Full ranked mark sheet, one row per student, landscape A4"""
        try:
            result = report['result']
            headers = report_headers(result)
            rows = [headers]
            for position, ranked in enumerate(result, 1):
                rows.append(report_row(position, ranked, result))
            if len(rows) == 1:
                rows.append(['No data'] + [''] * (len(headers) - 1))

            pagesize = landscape(A4)
            page_width = pagesize[0] - 2 * MARGIN
            name_width = page_width * 0.18
            other_width = (page_width - name_width) / (len(headers) - 1)
            col_widths = [other_width] * len(headers)
            col_widths[2] = name_width

            elements = PdfExportService._header_elements('Term Mark Sheet', report)
            elements.append(PdfExportService._build_table(rows, col_widths, wrap_cols={2}))
            return PdfExportService._render(elements, pagesize)

        except Exception:
            logger.exception("Error generating mark sheet PDF")
            return None

    @staticmethod
    def _metric_display(row, ranking_method):
        if ranking_method == ZSCORE:
            return format_z_score(row.z_score)
        if ranking_method == AVERAGE:
            return format_fixed(row.average)
        return format_number(row.total_marks)

    @staticmethod
    def generate_top_n_pdf(report, n=10):
        """Top-N list; every student tied on the boundary rank is included"""
        try:
            result = report['result']
            method_label = RANKING_METHOD_LABELS[result.ranking_method]
            rows = [['No.', 'Name', 'Class', method_label, 'Rank', 'Absent Days', 'Percentage']]
            for position, ranked in enumerate(result.top(n), 1):
                rows.append([
                    position,
                    ranked.name,
                    ranked.current_class,
                    PdfExportService._metric_display(ranked, result.ranking_method),
                    ranked.rank,
                    format_attendance(ranked.absent_days),
                    format_attendance(ranked.attendance_percentage, places=2),
                ])
            if len(rows) == 1:
                rows.append(['No data', '', '', '', '', '', ''])

            page_width = A4[0] - 2 * MARGIN
            fracs = [0.07, 0.33, 0.12, 0.16, 0.08, 0.11, 0.13]
            col_widths = [page_width * frac for frac in fracs]

            elements = PdfExportService._header_elements(f'Top {n} Students', report)
            elements.append(PdfExportService._build_table(rows, col_widths, wrap_cols={1}))
            return PdfExportService._render(elements, A4)

        except Exception:
            logger.exception("Error generating Top-%s PDF", n)
            return None

"""
Report routes for the school results system
JSON and file-download endpoints for ranked term/class reports
"""

import logging
from datetime import datetime

from flask import Blueprint, current_app, jsonify, make_response, request

from ranking.errors import (
    InvalidSelectionError, MissingSelectionError, StudentNotFoundError, TermNotFoundError,
    UpstreamFetchError
)
from services.csv_export_service import CsvExportService
from services.excel_export_service import ExcelExportService
from services.pdf_export_service import PdfExportService
from services.reporting_service import ReportingService
from utils.validators import parse_bool, validate_export_format

logger = logging.getLogger(__name__)

reports_bp = Blueprint('reports', __name__)

EXPORT_TYPES = {
    'xlsx': ('application/vnd.openxmlformats-officedocument.spreadsheetml.sheet', 'xlsx'),
    'csv': ('text/csv; charset=utf-8', 'csv'),
    'pdf': ('application/pdf', 'pdf'),
    'top': ('application/pdf', 'pdf'),
}


def _error(message, status):
    return jsonify({'success': False, 'error': message}), status


def _term_id_from_request():
    term_id = request.args.get('term_id') or None
    if term_id is None:
        return None
    try:
        return int(term_id)
    except ValueError:
        raise InvalidSelectionError('term_id', term_id, message=f"Term ID must be a number, got '{term_id}'")


def _ranking_method_from_request():
    return request.args.get('ranking_method') or current_app.config.get('DEFAULT_RANKING_METHOD', 'totalMarks')


def _generate_from_request():
    """Build a report from the query string of the current request"""
    args = request.args
    return ReportingService.generate_term_report(
        term_id=_term_id_from_request(),
        report_type=args.get('report_type', 'term'),
        class_name=args.get('class_name') or None,
        ranking_method=_ranking_method_from_request(),
        include_common=parse_bool(args.get('include_common'), default=True),
        grade_level=args.get('grade_level') or None,
        academic_year=args.get('academic_year', type=int),
        stream_filter=args.get('stream_filter') or None,
        generation_id=args.get('generation_id'),
    )


def _handle_report_error(e):
    """Map report exceptions onto HTTP responses"""
    if isinstance(e, (MissingSelectionError, InvalidSelectionError)):
        return _error(str(e), 400)
    if isinstance(e, (TermNotFoundError, StudentNotFoundError)):
        return _error(str(e), 404)
    if isinstance(e, UpstreamFetchError):
        return _error(str(e), 502)
    logger.exception("Unexpected error generating report")
    return _error(f'Error generating report: {str(e)}', 500)


@reports_bp.route('/term-report')
def term_report():
    """Ranked term or class report as JSON"""
    try:
        report = _generate_from_request()
        return jsonify({'success': True, **ReportingService.report_to_dict(report)})
    except Exception as e:
        return _handle_report_error(e)


@reports_bp.route('/subject-analysis')
def subject_analysis():
    """Per-subject statistics for the selected report"""
    try:
        report = _generate_from_request()
        return jsonify({
            'success': True,
            'generation_id': report['generation_id'],
            'subjects': ReportingService.build_subject_analysis(report['result'])
        })
    except Exception as e:
        return _handle_report_error(e)


@reports_bp.route('/grade-distribution')
def grade_distribution():
    """Grade band counts, optionally for one subject"""
    try:
        report = _generate_from_request()
        distribution = ReportingService.build_grade_distribution(
            report['result'], subject_id=request.args.get('subject_id')
        )
        return jsonify({
            'success': True,
            'generation_id': report['generation_id'],
            'distribution': distribution
        })
    except Exception as e:
        return _handle_report_error(e)


@reports_bp.route('/class-comparison')
def class_comparison():
    """Per-class statistics for one term"""
    try:
        comparison = ReportingService.build_class_comparison(
            term_id=_term_id_from_request(),
            grade_level=request.args.get('grade_level') or None,
            include_common=parse_bool(request.args.get('include_common'), default=True),
            ranking_method=_ranking_method_from_request(),
        )
        return jsonify({'success': True, **comparison})
    except Exception as e:
        return _handle_report_error(e)


@reports_bp.route('/student-progress')
def student_progress():
    """One student's results across terms"""
    try:
        progress = ReportingService.build_student_progress(
            student_id=request.args.get('student_id', type=int),
            academic_year=request.args.get('academic_year', type=int),
            ranking_method=_ranking_method_from_request(),
        )
        return jsonify({'success': True, **progress})
    except Exception as e:
        return _handle_report_error(e)


@reports_bp.route('/performance-trends')
def performance_trends():
    """Average mark per term, optionally for one class, subject or student"""
    try:
        trends = ReportingService.build_performance_trends(
            class_name=request.args.get('class_name') or None,
            subject_id=request.args.get('subject_id', type=int),
            student_id=request.args.get('student_id', type=int),
            academic_year=request.args.get('academic_year', type=int),
        )
        return jsonify({'success': True, 'trends': trends})
    except Exception as e:
        return _handle_report_error(e)


@reports_bp.route('/export')
def export_report():
    """Download the selected report as xlsx, csv, a PDF mark sheet or a Top-N PDF"""
    export_format = request.args.get('format', 'xlsx')
    valid, message = validate_export_format(export_format)
    if not valid:
        return _error(message, 400)

    top_n = request.args.get('top_n', type=int)
    if top_n is None:
        top_n = current_app.config.get('REPORT_TOP_N', 10)
    if top_n < 1:
        return _error('top_n must be at least 1', 400)

    try:
        report = _generate_from_request()
    except Exception as e:
        return _handle_report_error(e)

    if export_format == 'xlsx':
        wb = ExcelExportService.export_ranked_report(report)
        data = ExcelExportService.workbook_to_bytes(wb) if wb else None
    elif export_format == 'csv':
        data = CsvExportService.export_ranked_report(report)
    elif export_format == 'pdf':
        data = PdfExportService.generate_mark_sheet_pdf(report)
    else:
        data = PdfExportService.generate_top_n_pdf(report, top_n)

    if data is None:
        return _error('Failed to export report', 500)

    term = report['term']
    class_part = report['filters']['class_name'] or 'all'
    prefix = f'top{top_n}' if export_format == 'top' else 'ranked_report'
    content_type, extension = EXPORT_TYPES[export_format]
    filename = (
        f"{prefix}_{term.get('term_name', 'term').replace(' ', '_')}_{class_part.replace(' ', '_')}"
        f"_{datetime.now().strftime('%Y%m%d')}.{extension}"
    )

    response = make_response(data)
    response.headers['Content-Type'] = content_type
    response.headers['Content-Disposition'] = f'attachment; filename={filename}'
    return response

"""
Saved report service for the school results system
Stores and retrieves snapshots of generated reports
"""

import logging

from database import db
from models.academic import Term
from models.saved_report import SavedReport
from ranking.ranker import RANKING_METHODS
from utils.db_helpers import safe_add_and_commit, safe_delete_and_commit

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('term_id', 'academic_year', 'ranking_method', 'report_data')

FIELD_ALIASES = {
    'term_id': 'termId',
    'class_name': 'className',
    'academic_year': 'academicYear',
    'ranking_method': 'rankingMethod',
    'report_data': 'reportData',
}


def _read_payload(data):
    """Accept both snake_case and camelCase keys"""
    return {
        field: data.get(field, data.get(alias))
        for field, alias in FIELD_ALIASES.items()
    }


class SavedReportService:
    """Service for saved report snapshots"""

    @staticmethod
    def save_report(data, created_by=None):
        """Persist a report snapshot; returns (success, report_dict or message)"""
        payload = _read_payload(data or {})
        if any(payload[field] in (None, '') for field in REQUIRED_FIELDS):
            return False, "Missing required fields"

        if payload['ranking_method'] not in RANKING_METHODS:
            return False, f"Ranking method must be one of: {', '.join(RANKING_METHODS)}"

        try:
            term_id = int(payload['term_id'])
            academic_year = int(payload['academic_year'])
        except (TypeError, ValueError):
            return False, "Term ID and academic year must be numbers"

        if db.session.get(Term, term_id) is None:
            return False, "Term not found"

        report = SavedReport(
            term_id=term_id,
            class_name=payload['class_name'] or None,
            academic_year=academic_year,
            ranking_method=payload['ranking_method'],
            report_data=payload['report_data'],
            created_by=created_by,
        )
        success, message = safe_add_and_commit(report)
        if not success:
            return False, message

        logger.info("Saved report %s for term %s by %s", report.id, term_id, created_by)
        return True, report.to_dict()

    @staticmethod
    def list_reports(created_by=None):
        """Saved reports, newest first, without their payloads"""
        query = SavedReport.query
        if created_by is not None:
            query = query.filter_by(created_by=created_by)
        reports = query.order_by(SavedReport.generated_at.desc(), SavedReport.id.desc()).all()
        return [report.to_dict(include_data=False) for report in reports]

    @staticmethod
    def _find(report_id, created_by=None):
        report = db.session.get(SavedReport, report_id)
        if report is None:
            return None
        if created_by is not None and report.created_by != created_by:
            return None
        return report

    @staticmethod
    def get_report(report_id, created_by=None):
        report = SavedReportService._find(report_id, created_by)
        if report is None:
            return False, "Report not found"
        return True, report.to_dict()

    @staticmethod
    def delete_report(report_id, created_by=None):
        report = SavedReportService._find(report_id, created_by)
        if report is None:
            return False, "Report not found"
        success, message = safe_delete_and_commit(report)
        if not success:
            return False, message
        logger.info("Deleted saved report %s", report_id)
        return True, "Report deleted successfully"

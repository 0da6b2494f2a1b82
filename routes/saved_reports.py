"""
Saved report routes for the school results system
"""

import logging

from flask import Blueprint, jsonify, request

from services.saved_report_service import SavedReportService

logger = logging.getLogger(__name__)

saved_reports_bp = Blueprint('saved_reports', __name__)


@saved_reports_bp.route('', methods=['POST'])
def save_report():
    """Store a snapshot of a generated report"""
    data = request.get_json(silent=True) or {}
    created_by = data.get('created_by') or data.get('createdBy')
    try:
        success, payload = SavedReportService.save_report(data, created_by=created_by)
    except Exception as e:
        logger.exception("Error saving report")
        return jsonify({'success': False, 'error': f'Error saving report: {str(e)}'}), 500

    if not success:
        return jsonify({'success': False, 'error': payload}), 400
    return jsonify({'success': True, 'report': payload}), 201


@saved_reports_bp.route('', methods=['GET'])
def list_reports():
    """List saved reports, optionally for one creator"""
    reports = SavedReportService.list_reports(created_by=request.args.get('created_by'))
    return jsonify({'success': True, 'reports': reports})


@saved_reports_bp.route('/<int:report_id>', methods=['GET'])
def get_report(report_id):
    success, payload = SavedReportService.get_report(report_id, created_by=request.args.get('created_by'))
    if not success:
        return jsonify({'success': False, 'error': payload}), 404
    return jsonify({'success': True, 'report': payload})


@saved_reports_bp.route('/<int:report_id>', methods=['DELETE'])
def delete_report(report_id):
    try:
        success, message = SavedReportService.delete_report(report_id, created_by=request.args.get('created_by'))
    except Exception as e:
        logger.exception("Error deleting report %s", report_id)
        return jsonify({'success': False, 'error': f'Error deleting report: {str(e)}'}), 500

    if not success:
        status = 404 if message == "Report not found" else 500
        return jsonify({'success': False, 'error': message}), status
    return jsonify({'success': True, 'message': message})

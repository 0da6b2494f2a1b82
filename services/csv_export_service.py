"""
CSV export service for the school results system
"""

import csv
import logging
from io import StringIO

from utils.formatters import report_headers, report_row

logger = logging.getLogger(__name__)


class CsvExportService:
    """Service for exporting ranked reports as CSV"""

    @staticmethod
    def export_ranked_report(report):
        """Return the ranked mark sheet as UTF-8 CSV bytes"""
        try:
            result = report['result']
            output = StringIO()
            writer = csv.writer(output)
            writer.writerow(report_headers(result))
            for position, row in enumerate(result, 1):
                writer.writerow(report_row(position, row, result))
            return output.getvalue().encode('utf-8')
        except Exception:
            logger.exception("Error exporting ranked report to CSV")
            return None

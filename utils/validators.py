"""
Validation utilities for the school results system
"""

REPORT_TYPES = ('term', 'class')
EXPORT_FORMATS = ('xlsx', 'csv', 'pdf', 'top')


def validate_marks(marks):
    """Validate a subject mark: a whole number from 0 to 100"""
    try:
        marks_float = float(marks)
    except (ValueError, TypeError):
        return False, "Marks must be a valid number"

    if isinstance(marks, bool) or not marks_float.is_integer():
        return False, "Marks must be a whole number"

    if marks_float < 0 or marks_float > 100:
        return False, "Marks must be between 0 and 100"

    return True, "Valid marks"


def validate_export_format(export_format):
    """Validate export format"""
    if export_format not in EXPORT_FORMATS:
        return False, f"Export format must be one of: {', '.join(EXPORT_FORMATS)}"
    return True, "Valid export format"


def parse_bool(value, default=True):
    """Parse query-string booleans ('true'/'false', '1'/'0', 'yes'/'no')"""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ('true', '1', 'yes', 'on'):
        return True
    if text in ('false', '0', 'no', 'off'):
        return False
    return default

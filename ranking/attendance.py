"""
Attendance merging for the ranking engine
Joins externally supplied attendance records onto ranked rows
"""

import logging
import math

from ranking.errors import AttendanceDegraded

logger = logging.getLogger(__name__)

ATTENDANCE_FIELDS = ('absent_days', 'attendance_percentage', 'total_school_days')


def _get(record, name):
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _to_number(value, cast=float):
    """Coerce to a number; anything unparseable is unknown (None), never 0.

    With ``cast=int`` a non-whole value such as "3.5" is also unknown.
    """
    if value is None or value == '':
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    if cast is int:
        return int(number) if number.is_integer() else None
    return number


def index_attendance(attendance):
    """Index attendance records by student id.

    Raises AttendanceDegraded when the collection is missing or malformed.
    Keys are compared as strings; records without a student id are ignored.
    """
    if attendance is None:
        raise AttendanceDegraded('Attendance data is unavailable')
    if not isinstance(attendance, (list, tuple)):
        raise AttendanceDegraded(f'Attendance data is malformed ({type(attendance).__name__})')

    indexed = {}
    for record in attendance:
        student_id = _get(record, 'student_id')
        if student_id is None:
            continue
        indexed.setdefault(str(student_id), record)
    return indexed


def clear_attendance(row):
    for name in ATTENDANCE_FIELDS:
        setattr(row, name, None)


def merge_attendance(rows, attendance):
    """Attach attendance fields to each row.

    Returns True when attendance was merged from a usable source, False when
    the source was missing or malformed and every row was left unknown.
    """
    try:
        indexed = index_attendance(attendance)
    except AttendanceDegraded as e:
        logger.warning("Attendance degraded: %s", e)
        for row in rows:
            clear_attendance(row)
        return False

    for row in rows:
        record = indexed.get(str(row.student_id))
        if record is None:
            clear_attendance(row)
            continue
        row.absent_days = _to_number(_get(record, 'absent_days'), int)
        row.attendance_percentage = _to_number(_get(record, 'attendance_percentage'), float)
        row.total_school_days = _to_number(_get(record, 'total_school_days'), int)
    return True

"""
Database models package for the school results system
"""

from .academic import Term, Subject
from .student import Student
from .marks import TermMark
from .attendance import StudentTermAttendance
from .saved_report import SavedReport

__all__ = [
    'Term', 'Subject', 'Student', 'TermMark',
    'StudentTermAttendance', 'SavedReport'
]

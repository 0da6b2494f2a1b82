"""
Marks model for the school results system
TermMark stores one subject mark for a student in a term
"""

from database import db
from datetime import datetime
from utils.validators import validate_marks

MARK_STATUSES = ('active', 'absent')


class TermMark(db.Model):
    """A student's mark in one subject for one term.

    ``marks`` is NULL when the student was absent (status 'absent') or when the
    row was created before a mark was entered.
    """
    __tablename__ = 'marks'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey('subjects.id'), nullable=False)
    term_id = db.Column(db.Integer, db.ForeignKey('terms.id'), nullable=False)
    marks = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(20), nullable=False, default='active')
    entered_by = db.Column(db.String(80), nullable=True)
    entry_date = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Unique constraint to prevent duplicate marks for same student, subject, term
    __table_args__ = (db.UniqueConstraint('student_id', 'subject_id', 'term_id', name='unique_student_subject_term'),)

    def __init__(self, **kwargs):
        marks = kwargs.get('marks')
        if marks is not None:
            is_valid, message = validate_marks(marks)
            if not is_valid:
                raise ValueError(message)
            kwargs['marks'] = int(float(marks))
        status = kwargs.get('status', 'active')
        if status not in MARK_STATUSES:
            raise ValueError(f"Mark status must be one of: {', '.join(MARK_STATUSES)}")
        super(TermMark, self).__init__(**kwargs)

    def mark_absent(self):
        """Record the student as absent for this exam"""
        self.status = 'absent'
        self.marks = None
        self.updated_at = datetime.utcnow()

    def update_marks(self, marks):
        """Update marks after validating the 0-100 range"""
        is_valid, message = validate_marks(marks)
        if not is_valid:
            raise ValueError(message)
        self.marks = int(float(marks))
        self.status = 'active'
        self.updated_at = datetime.utcnow()

    def to_dict(self):
        """Convert mark to dictionary"""
        return {
            'id': self.id,
            'student_id': self.student_id,
            'subject_id': self.subject_id,
            'term_id': self.term_id,
            'marks': self.marks,
            'status': self.status,
            'entered_by': self.entered_by,
            'entry_date': self.entry_date.isoformat() if self.entry_date else None
        }

    def __repr__(self):
        return f'<TermMark student={self.student_id} subject={self.subject_id} term={self.term_id}: {self.marks if self.status != "absent" else "AB"}>'

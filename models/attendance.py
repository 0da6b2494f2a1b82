"""
Attendance model for the school results system
StudentTermAttendance holds the per-term attendance summary for a student
"""

from database import db
from datetime import datetime


class StudentTermAttendance(db.Model):
    """Term attendance summary for a student"""
    __tablename__ = 'student_term_attendance'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False)
    term_id = db.Column(db.Integer, db.ForeignKey('terms.id'), nullable=False)
    academic_year = db.Column(db.Integer, nullable=True)
    total_school_days = db.Column(db.Integer, nullable=False, default=0)
    absent_days = db.Column(db.Integer, nullable=False, default=0)
    attendance_percentage = db.Column(db.Numeric(5, 2), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint('student_id', 'term_id', name='unique_student_term_attendance'),)

    def __init__(self, **kwargs):
        super(StudentTermAttendance, self).__init__(**kwargs)
        if self.attendance_percentage is None:
            self.calculate_percentage()

    def calculate_percentage(self):
        """Attendance percentage from total and absent days; unknown when no school days"""
        total = self.total_school_days or 0
        if total <= 0:
            self.attendance_percentage = None
            return None
        absent = min(self.absent_days or 0, total)
        self.attendance_percentage = round(((total - absent) / total) * 100, 2)
        return self.attendance_percentage

    def to_dict(self):
        """Convert attendance summary to dictionary"""
        return {
            'id': self.id,
            'student_id': self.student_id,
            'term_id': self.term_id,
            'academic_year': self.academic_year,
            'total_school_days': self.total_school_days,
            'absent_days': self.absent_days,
            'attendance_percentage': float(self.attendance_percentage) if self.attendance_percentage is not None else None
        }

    def __repr__(self):
        return f'<StudentTermAttendance student={self.student_id} term={self.term_id}: {self.attendance_percentage}%>'

"""
Student model for the school results system
"""

from database import db
from datetime import datetime


class Student(db.Model):
    """Student model"""
    __tablename__ = 'students'

    id = db.Column(db.Integer, primary_key=True)
    index_number = db.Column(db.String(20), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    current_class = db.Column(db.String(20), nullable=False, index=True)
    admission_year = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(20), nullable=False, default='active')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    marks = db.relationship('TermMark', backref='student', lazy='dynamic')
    term_attendance = db.relationship('StudentTermAttendance', backref='student', lazy='dynamic')

    @property
    def grade_level(self):
        """Leading grade number of the class name, e.g. '12-A' -> '12'"""
        digits = ''
        for char in self.current_class or '':
            if not char.isdigit():
                break
            digits += char
        return digits or None

    def get_term_marks(self, term_id):
        """All active and absent mark rows for a term"""
        return self.marks.filter_by(term_id=term_id).all()

    def to_dict(self):
        """Convert student to dictionary"""
        return {
            'id': self.id,
            'index_number': self.index_number,
            'name': self.name,
            'current_class': self.current_class,
            'admission_year': self.admission_year,
            'status': self.status
        }

    def __repr__(self):
        return f'<Student {self.index_number}: {self.name}>'

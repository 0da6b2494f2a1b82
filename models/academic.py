"""
Academic structure models for the school results system
Term and Subject models
"""

from database import db
from datetime import datetime

COMMON_STREAM = 'Common'


class Term(db.Model):
    """Examination term"""
    __tablename__ = 'terms'

    id = db.Column(db.Integer, primary_key=True)
    term_number = db.Column(db.Integer, nullable=False)
    term_name = db.Column(db.String(100), nullable=False)
    exam_year = db.Column(db.Integer, nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    marks = db.relationship('TermMark', backref='term', lazy='dynamic')
    attendance_records = db.relationship('StudentTermAttendance', backref='term', lazy='dynamic')

    __table_args__ = (db.UniqueConstraint('term_number', 'exam_year', name='unique_term_per_year'),)

    @staticmethod
    def get_active_term():
        """Get the most recent active term"""
        return Term.query.filter_by(is_active=True).order_by(
            Term.exam_year.desc(), Term.term_number.desc()
        ).first()

    def to_dict(self):
        """Convert term to dictionary"""
        return {
            'id': self.id,
            'term_number': self.term_number,
            'term_name': self.term_name,
            'exam_year': self.exam_year,
            'is_active': self.is_active
        }

    def __repr__(self):
        return f'<Term {self.exam_year} T{self.term_number}: {self.term_name}>'


class Subject(db.Model):
    """Subject model; the stream decides whether it is Common or Main"""
    __tablename__ = 'subjects'

    id = db.Column(db.Integer, primary_key=True)
    subject_code = db.Column(db.String(20), unique=True, nullable=False, index=True)
    subject_name = db.Column(db.String(100), nullable=False)
    stream = db.Column(db.String(50), nullable=False, default=COMMON_STREAM)
    status = db.Column(db.String(20), nullable=False, default='active')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    marks = db.relationship('TermMark', backref='subject', lazy='dynamic')

    @property
    def is_common(self):
        return self.stream == COMMON_STREAM

    @staticmethod
    def get_active_subjects():
        """Active subjects in display order"""
        return Subject.query.filter_by(status='active').order_by(
            Subject.stream, Subject.subject_name
        ).all()

    def to_dict(self):
        """Convert subject to dictionary"""
        return {
            'id': self.id,
            'code': self.subject_code,
            'name': self.subject_name,
            'stream': self.stream,
            'status': self.status,
            'is_common': self.is_common
        }

    def __repr__(self):
        return f'<Subject {self.subject_code}: {self.subject_name}>'

"""
Saved report model for the school results system
Snapshots of generated ranking reports
"""

from database import db
from datetime import datetime


class SavedReport(db.Model):
    """Snapshot of a generated report"""
    __tablename__ = 'saved_reports'

    id = db.Column(db.Integer, primary_key=True)
    term_id = db.Column(db.Integer, db.ForeignKey('terms.id'), nullable=False)
    class_name = db.Column(db.String(20), nullable=True)
    academic_year = db.Column(db.Integer, nullable=False)
    ranking_method = db.Column(db.String(20), nullable=False)
    report_data = db.Column(db.JSON, nullable=False)
    created_by = db.Column(db.String(80), nullable=True, index=True)
    generated_at = db.Column(db.DateTime, default=datetime.utcnow)

    term = db.relationship('Term')

    def to_dict(self, include_data=True):
        """Convert saved report to dictionary"""
        data = {
            'id': self.id,
            'term_id': self.term_id,
            'term_name': self.term.term_name if self.term else None,
            'term_number': self.term.term_number if self.term else None,
            'class_name': self.class_name,
            'academic_year': self.academic_year,
            'ranking_method': self.ranking_method,
            'created_by': self.created_by,
            'generated_at': self.generated_at.isoformat() if self.generated_at else None
        }
        if include_data:
            data['report_data'] = self.report_data
        return data

    def __repr__(self):
        return f'<SavedReport {self.id}: term={self.term_id} {self.ranking_method}>'

"""
Unit tests for database models
"""

import unittest

from app import create_app
from config import TestingConfig
from database import db
from models.academic import Subject, Term
from models.attendance import StudentTermAttendance
from models.marks import TermMark
from models.saved_report import SavedReport
from models.student import Student
from utils.validators import validate_marks


class TestModels(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures"""
        self.app = create_app(TestingConfig)
        self.app_context = self.app.app_context()
        self.app_context.push()

        self.term = Term(term_number=1, term_name='First Term', exam_year=2024)
        self.subject = Subject(subject_code='PHY', subject_name='Physics', stream='Science')
        self.student = Student(index_number='S001', name='Alice Perera', current_class='12-A')
        db.session.add_all([self.term, self.subject, self.student])
        db.session.commit()

    def tearDown(self):
        """Clean up after tests"""
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    def test_term_creation(self):
        """Test term creation and active term lookup"""
        later = Term(term_number=2, term_name='Second Term', exam_year=2024)
        db.session.add(later)
        db.session.commit()

        self.assertEqual(Term.get_active_term().id, later.id)
        self.assertEqual(self.term.to_dict()['term_name'], 'First Term')

    def test_subject_stream(self):
        """Test subject stream classification"""
        common = Subject(subject_code='ENG', subject_name='English', stream='Common')
        db.session.add(common)
        db.session.commit()

        self.assertTrue(common.is_common)
        self.assertFalse(self.subject.is_common)
        self.assertEqual([s.subject_code for s in Subject.get_active_subjects()], ['ENG', 'PHY'])
        self.assertEqual(self.subject.to_dict()['code'], 'PHY')

    def test_student_grade_level(self):
        """Test grade level derived from the class name"""
        self.assertEqual(self.student.grade_level, '12')
        self.assertIsNone(Student(index_number='X1', name='X', current_class='A').grade_level)

    def test_term_mark_creation(self):
        """Test mark creation and validation"""
        mark = TermMark(student_id=self.student.id, subject_id=self.subject.id, term_id=self.term.id, marks='78')
        db.session.add(mark)
        db.session.commit()

        self.assertEqual(mark.marks, 78)
        self.assertEqual(mark.status, 'active')
        self.assertEqual(len(self.student.get_term_marks(self.term.id)), 1)

        with self.assertRaises(ValueError):
            TermMark(student_id=self.student.id, subject_id=self.subject.id, term_id=self.term.id, marks=101)
        with self.assertRaises(ValueError):
            TermMark(student_id=self.student.id, subject_id=self.subject.id, term_id=self.term.id, status='late')

    def test_mark_absent_and_update(self):
        """Test switching a mark between absent and a value"""
        mark = TermMark(student_id=self.student.id, subject_id=self.subject.id, term_id=self.term.id, marks=50)
        db.session.add(mark)
        db.session.commit()

        mark.mark_absent()
        self.assertEqual(mark.status, 'absent')
        self.assertIsNone(mark.marks)

        mark.update_marks(64)
        self.assertEqual(mark.status, 'active')
        self.assertEqual(mark.marks, 64)

        with self.assertRaises(ValueError):
            mark.update_marks(-1)

    def test_validate_marks(self):
        self.assertTrue(validate_marks(0)[0])
        self.assertTrue(validate_marks('100')[0])
        self.assertFalse(validate_marks(100.5)[0])
        self.assertFalse(validate_marks('abc')[0])
        self.assertFalse(validate_marks(True)[0])

    def test_attendance_percentage(self):
        """Test attendance percentage calculation"""
        record = StudentTermAttendance(student_id=self.student.id, term_id=self.term.id,
                                       total_school_days=80, absent_days=6)
        db.session.add(record)
        db.session.commit()

        self.assertEqual(record.to_dict()['attendance_percentage'], 92.5)

    def test_attendance_without_school_days_is_unknown(self):
        record = StudentTermAttendance(student_id=self.student.id, term_id=self.term.id,
                                       total_school_days=0, absent_days=0)
        self.assertIsNone(record.attendance_percentage)
        self.assertIsNone(record.to_dict()['attendance_percentage'])

    def test_saved_report(self):
        """Test saved report snapshot"""
        report = SavedReport(term_id=self.term.id, class_name='12-A', academic_year=2024,
                             ranking_method='totalMarks', report_data={'students': []}, created_by='coordinator1')
        db.session.add(report)
        db.session.commit()

        data = report.to_dict()
        self.assertEqual(data['term_name'], 'First Term')
        self.assertEqual(data['report_data'], {'students': []})
        self.assertNotIn('report_data', report.to_dict(include_data=False))


if __name__ == '__main__':
    unittest.main()

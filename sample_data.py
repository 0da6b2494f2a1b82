#!/usr/bin/env python3
"""
Sample data generator for the school results system
Creates a small term of marks and attendance for testing and demonstration
"""

import logging

from database import db
from models.academic import Subject, Term
from models.attendance import StudentTermAttendance
from models.marks import TermMark
from models.student import Student

logger = logging.getLogger(__name__)

SUBJECTS = [
    {'subject_code': 'ENG', 'subject_name': 'English', 'stream': 'Common'},
    {'subject_code': 'PHY', 'subject_name': 'Physics', 'stream': 'Science'},
    {'subject_code': 'CHE', 'subject_name': 'Chemistry', 'stream': 'Science'},
    {'subject_code': 'BIO', 'subject_name': 'Biology', 'stream': 'Science'},
]

STUDENTS = [
    {'index_number': 'S001', 'name': 'Alice Perera', 'current_class': '12-A', 'admission_year': 2023},
    {'index_number': 'S002', 'name': 'Bimal Silva', 'current_class': '12-A', 'admission_year': 2023},
    {'index_number': 'S003', 'name': 'Chathuri Fernando', 'current_class': '12-A', 'admission_year': 2023},
    {'index_number': 'S004', 'name': 'Dinesh Kumar', 'current_class': '12-B', 'admission_year': 2023},
    {'index_number': 'S005', 'name': 'Eshan Jayasuriya', 'current_class': '13-A', 'admission_year': 2022},
    {'index_number': 'S006', 'name': 'Farah Nazeer', 'current_class': '12-A', 'admission_year': 2023,
     'status': 'inactive'},
]

# index_number -> {subject_code: marks}; 'AB' is an absent sitting, a missing code has no entry
MARKS = {
    'S001': {'ENG': 80, 'PHY': 90, 'CHE': 85, 'BIO': 70},
    'S002': {'ENG': 70, 'PHY': 90, 'CHE': 85, 'BIO': 70},
    'S003': {'ENG': 60, 'PHY': 'AB', 'CHE': 50, 'BIO': 60},
    'S004': {'ENG': 90, 'PHY': 40, 'CHE': 45},
    'S005': {'ENG': 50, 'PHY': 75, 'CHE': 65, 'BIO': 80},
    'S006': {'ENG': 100, 'PHY': 100, 'CHE': 100, 'BIO': 100},
}

# index_number -> (total_school_days, absent_days)
ATTENDANCE = {
    'S001': (100, 5),
    'S002': (100, 0),
    'S003': (100, 20),
    'S005': (0, 0),
}


def create_sample_data(term_number=1, exam_year=2024):
    """Create sample data in the current app context and return what was created"""
    term = Term(term_number=term_number, term_name='First Term', exam_year=exam_year)
    db.session.add(term)

    subjects = {}
    for subject_data in SUBJECTS:
        subject = Subject(**subject_data)
        db.session.add(subject)
        subjects[subject.subject_code] = subject

    students = {}
    for student_data in STUDENTS:
        student = Student(**student_data)
        db.session.add(student)
        students[student.index_number] = student

    db.session.flush()

    for index_number, student_marks in MARKS.items():
        for code, value in student_marks.items():
            if value == 'AB':
                mark = TermMark(student_id=students[index_number].id, subject_id=subjects[code].id,
                                term_id=term.id, status='absent')
            else:
                mark = TermMark(student_id=students[index_number].id, subject_id=subjects[code].id,
                                term_id=term.id, marks=value)
            db.session.add(mark)

    for index_number, (total_days, absent_days) in ATTENDANCE.items():
        db.session.add(StudentTermAttendance(
            student_id=students[index_number].id,
            term_id=term.id,
            academic_year=exam_year,
            total_school_days=total_days,
            absent_days=absent_days,
        ))

    db.session.commit()
    logger.info("Created sample data: %d subjects, %d students", len(subjects), len(students))
    return {'term': term, 'subjects': subjects, 'students': students}


if __name__ == '__main__':
    from app import create_app

    app = create_app()
    with app.app_context():
        data = create_sample_data()
        print(f"✓ Created term {data['term'].term_name} {data['term'].exam_year} (id={data['term'].id})")
        print(f"✓ Created {len(data['subjects'])} subjects")
        print(f"✓ Created {len(data['students'])} students")

"""
Reporting service for the school results system
Fetches term marks and attendance, runs the ranking engine and builds
the summaries shown alongside ranked reports
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from flask import current_app, has_app_context
from sqlalchemy.exc import SQLAlchemyError

from database import db
from models.academic import Subject, Term
from models.attendance import StudentTermAttendance
from models.marks import TermMark
from models.student import Student
from ranking import rank_cohort
from ranking.errors import (
    AttendanceDegraded, InvalidSelectionError, MissingSelectionError,
    StudentNotFoundError, TermNotFoundError, UpstreamFetchError
)
from ranking.ranker import TOTAL_MARKS, validate_ranking_method
from utils.sorting_helpers import SortingHelpers
from utils.validators import REPORT_TYPES

logger = logging.getLogger(__name__)

GRADE_BANDS = (
    ('A (75-100)', 75),
    ('B (65-74)', 65),
    ('C (50-64)', 50),
    ('S (35-49)', 35),
    ('F (0-34)', 0),
)

PASS_MARK = 50


def _in_app_context(func):
    """Wrap a callable so it runs inside the current Flask app's context on any thread"""
    if not has_app_context():
        return func
    app = current_app._get_current_object()

    def wrapper():
        with app.app_context():
            return func()
    return wrapper


class ReportingService:
    """Service for generating ranked term and class reports"""

    @staticmethod
    def validate_selection(term_id, report_type='term', class_name=None, ranking_method=TOTAL_MARKS):
        """Check selectors before anything is fetched or computed"""
        if term_id in (None, ''):
            raise MissingSelectionError('term_id', 'Term ID is required')
        if report_type not in REPORT_TYPES:
            raise InvalidSelectionError('report_type', report_type, REPORT_TYPES)
        if report_type == 'class' and not class_name:
            raise MissingSelectionError('class_name', 'Class name is required for a class report')
        validate_ranking_method(ranking_method)

    @staticmethod
    def fetch_term_marks(term_id, class_name=None, grade_level=None, academic_year=None, stream_filter=None):
        """Load the term, its active subjects and every active student's marks.

        Returns (term_dict, subjects, students) where students are dicts
        carrying a ``marks`` list of {subject_id, marks, status}.
        """
        try:
            term = db.session.get(Term, term_id)
            if term is None:
                raise TermNotFoundError(f'Term {term_id} not found')

            query = db.session.query(TermMark, Student, Subject).join(
                Student, TermMark.student_id == Student.id
            ).join(
                Subject, TermMark.subject_id == Subject.id
            ).filter(
                TermMark.term_id == term.id,
                Student.status == 'active',
                Subject.status == 'active'
            )

            if class_name:
                query = query.filter(Student.current_class == class_name)
            if grade_level:
                query = query.filter(Student.current_class.like(f'{grade_level}%'))
            if academic_year:
                query = query.filter(Student.admission_year == int(academic_year))
            if stream_filter:
                query = query.filter(Subject.stream == stream_filter)

            subjects = {}
            students = {}
            marks = {}
            for mark, student, subject in query.all():
                subjects.setdefault(subject.id, subject.to_dict())
                students.setdefault(student.id, student)
                marks.setdefault(student.id, []).append({
                    'subject_id': subject.id,
                    'marks': mark.marks,
                    'status': mark.status,
                })

            student_rows = []
            for student in SortingHelpers.sort_students(students.values()):
                row = student.to_dict()
                row['marks'] = marks.get(student.id, [])
                student_rows.append(row)

            return term.to_dict(), list(subjects.values()), student_rows

        except SQLAlchemyError as e:
            logger.exception("Failed to load marks for term %s", term_id)
            raise UpstreamFetchError(f'Failed to load marks: {str(e)}')

    @staticmethod
    def fetch_term_attendance(term_id, class_name=None):
        """Load term attendance summaries as plain dicts"""
        try:
            query = db.session.query(StudentTermAttendance).join(
                Student, StudentTermAttendance.student_id == Student.id
            ).filter(
                StudentTermAttendance.term_id == term_id,
                Student.status == 'active'
            )
            if class_name:
                query = query.filter(Student.current_class == class_name)
            return [record.to_dict() for record in query.all()]
        except SQLAlchemyError as e:
            logger.exception("Failed to load attendance for term %s", term_id)
            raise AttendanceDegraded(f'Failed to load attendance: {str(e)}')

    @staticmethod
    def gather_report_inputs(fetch_marks, fetch_attendance, concurrent=True):
        """Run both fetches and wait for both to settle.

        A marks failure is re-raised after attendance has settled; an
        attendance failure becomes None so the report can still be produced.
        """
        if concurrent:
            with ThreadPoolExecutor(max_workers=2) as executor:
                marks_future = executor.submit(_in_app_context(fetch_marks))
                attendance_future = executor.submit(_in_app_context(fetch_attendance))
                marks_error = marks_future.exception()
                attendance_error = attendance_future.exception()
                marks_result = None if marks_error else marks_future.result()
                attendance = None if attendance_error else attendance_future.result()
        else:
            marks_result = attendance = None
            marks_error = attendance_error = None
            try:
                marks_result = fetch_marks()
            except Exception as e:
                marks_error = e
            try:
                attendance = fetch_attendance()
            except Exception as e:
                attendance_error = e

        if attendance_error is not None:
            logger.warning("Attendance unavailable, continuing without it: %s", attendance_error)
            attendance = None

        if marks_error is not None:
            if isinstance(marks_error, UpstreamFetchError):
                raise marks_error
            raise UpstreamFetchError(f'Failed to load marks: {str(marks_error)}') from marks_error

        return marks_result, attendance

    @staticmethod
    def generate_term_report(term_id, report_type='term', class_name=None, ranking_method=TOTAL_MARKS,
                             include_common=True, grade_level=None, academic_year=None,
                             stream_filter=None, generation_id=None, concurrent=None):
        """Generate a ranked report for a whole term or one class.

        Returns a dict with the term, the filters used, the ResultSet and its
        summary. ``generation_id`` is echoed back so callers can discard a
        stale response that resolves after a newer request.
        """
        ReportingService.validate_selection(term_id, report_type, class_name, ranking_method)
        if report_type == 'term':
            class_name = None

        if concurrent is None:
            concurrent = current_app.config.get('REPORT_CONCURRENT_FETCH', True) if has_app_context() else False

        (term, subjects, students), attendance = ReportingService.gather_report_inputs(
            lambda: ReportingService.fetch_term_marks(
                term_id, class_name, grade_level, academic_year, stream_filter
            ),
            lambda: ReportingService.fetch_term_attendance(term_id, class_name),
            concurrent=concurrent
        )

        result = rank_cohort(
            subjects,
            students,
            attendance=attendance,
            ranking_method=ranking_method,
            include_common_in_total=include_common
        )

        logger.info(
            "Generated %s report for term %s (class=%s, method=%s, students=%d)",
            report_type, term_id, class_name, ranking_method, len(result)
        )

        return {
            'term': term,
            'filters': {
                'report_type': report_type,
                'class_name': class_name,
                'ranking_method': ranking_method,
                'include_common': include_common,
                'grade_level': grade_level,
                'academic_year': academic_year,
                'stream_filter': stream_filter,
            },
            'generation_id': generation_id,
            'result': result,
            'summary': result.summary(),
        }

    @staticmethod
    def report_to_dict(report):
        """JSON-ready form of a generated report"""
        data = {key: value for key, value in report.items() if key != 'result'}
        data.update(report['result'].to_dict())
        return data

    @staticmethod
    def build_subject_analysis(result):
        """Per-subject counts, averages and grade bands over numeric marks"""
        analysis = []
        for subject in result.subjects:
            cells = [row.cell_for(subject.id) for row in result]
            values = [cell.effective_value for cell in cells if cell.is_numeric]
            stats = result.statistics[subject.id]
            analysis.append({
                'subject_id': subject.id,
                'subject_code': subject.code,
                'subject_name': subject.name,
                'stream': subject.stream,
                'student_count': len(values),
                'absent_count': sum(1 for cell in cells if cell.is_recorded and not cell.is_numeric),
                'no_entry_count': sum(1 for cell in cells if not cell.is_recorded),
                'average_marks': round(stats.mean, 2) if stats.mean is not None else None,
                'highest_marks': stats.highest,
                'lowest_marks': stats.lowest,
                'distinction_count': sum(1 for value in values if value >= 75),
                'credit_count': sum(1 for value in values if 65 <= value < 75),
                'pass_count': sum(1 for value in values if 50 <= value < 65),
                'fail_count': sum(1 for value in values if value < 50),
                'usable_for_zscore': stats.usable,
            })
        return analysis

    @staticmethod
    def build_grade_distribution(result, subject_id=None):
        """Count numeric marks per grade band, optionally for a single subject"""
        values = []
        for row in result:
            for subject in result.subjects:
                if subject_id is not None and str(subject.id) != str(subject_id):
                    continue
                cell = row.cell_for(subject.id)
                if cell.is_numeric:
                    values.append(cell.effective_value)

        counts = dict((band, 0) for band, _ in GRADE_BANDS)
        for value in values:
            for band, minimum in GRADE_BANDS:
                if value >= minimum:
                    counts[band] += 1
                    break

        total = len(values)
        return [
            {
                'grade_band': band,
                'student_count': counts[band],
                'percentage': round(counts[band] * 100.0 / total, 2) if total else 0
            }
            for band, _ in GRADE_BANDS
        ]

    @staticmethod
    def build_class_comparison(term_id, grade_level=None, include_common=True, ranking_method=TOTAL_MARKS):
        """Compare classes within one term.

        Every active student of the term is ranked together, then grouped by
        class. Mark statistics cover numeric marks only; common subjects are
        left out when include_common is false.
        """
        report = ReportingService.generate_term_report(
            term_id, 'term', ranking_method=ranking_method,
            include_common=include_common, grade_level=grade_level
        )
        result = report['result']
        subjects = [subject for subject in result.subjects if include_common or not subject.is_common]

        by_class = {}
        for row in result:
            by_class.setdefault(row.current_class, []).append(row)

        comparison = []
        for class_name in sorted(by_class):
            rows = by_class[class_name]
            values = [
                row.cell_for(subject.id).effective_value
                for row in rows
                for subject in subjects
                if row.cell_for(subject.id).is_numeric
            ]
            pass_count = sum(1 for value in values if value >= PASS_MARK)
            top = rows[0]
            comparison.append({
                'class_name': class_name,
                'student_count': len(rows),
                'class_average': round(sum(values) / len(values), 2) if values else 0,
                'average_total': round(sum(row.total_marks for row in rows) / len(rows), 2),
                'highest_score': max(values) if values else None,
                'lowest_score': min(values) if values else None,
                'pass_count': pass_count,
                'fail_count': len(values) - pass_count,
                'pass_percentage': round(pass_count * 100.0 / len(values), 2) if values else 0,
                'top_student': top.name,
                'top_rank': top.rank,
            })

        return {'term': report['term'], 'filters': report['filters'], 'classes': comparison}

    @staticmethod
    def _terms_for(student_id=None, academic_year=None):
        """Terms that hold marks, oldest first"""
        try:
            query = db.session.query(Term).join(TermMark, TermMark.term_id == Term.id)
            if student_id is not None:
                query = query.filter(TermMark.student_id == student_id)
            if academic_year:
                query = query.filter(Term.exam_year == int(academic_year))
            return query.distinct().order_by(Term.exam_year, Term.term_number).all()
        except SQLAlchemyError as e:
            logger.exception("Failed to load terms")
            raise UpstreamFetchError(f'Failed to load terms: {str(e)}')

    @staticmethod
    def build_student_progress(student_id, academic_year=None, ranking_method=TOTAL_MARKS, include_common=True):
        """Term-by-term results of one student, ranked within the student's current class"""
        if student_id in (None, ''):
            raise MissingSelectionError('student_id', 'Student ID is required')

        student = db.session.get(Student, student_id)
        if student is None:
            raise StudentNotFoundError(f'Student {student_id} not found')

        progress = []
        for term in ReportingService._terms_for(student.id, academic_year):
            report = ReportingService.generate_term_report(
                term.id, 'class', student.current_class,
                ranking_method=ranking_method, include_common=include_common
            )
            result = report['result']
            row = next((r for r in result if r.student_id == student.id), None)
            if row is None:
                continue

            row_data = row.to_dict()
            entry = term.to_dict()
            entry.update({
                'rank': row.rank,
                'class_size': len(result),
                'total_marks': row.total_marks,
                'average': row_data['average'],
                'z_score': row.z_score,
                'absent_days': row.absent_days,
                'attendance_percentage': row.attendance_percentage,
                'marks': row_data['marks'],
            })
            progress.append(entry)

        return {'student': student.to_dict(), 'progress': progress}

    @staticmethod
    def build_performance_trends(class_name=None, subject_id=None, student_id=None, academic_year=None):
        """Average numeric mark per term, oldest term first"""
        trends = []
        for term in ReportingService._terms_for(academic_year=academic_year):
            _, subjects, students = ReportingService.fetch_term_marks(term.id, class_name)
            result = rank_cohort(subjects, students)

            values = []
            for row in result:
                if student_id is not None and str(row.student_id) != str(student_id):
                    continue
                for subject in result.subjects:
                    if subject_id is not None and str(subject.id) != str(subject_id):
                        continue
                    cell = row.cell_for(subject.id)
                    if cell.is_numeric:
                        values.append(cell.effective_value)
            if not values:
                continue

            entry = term.to_dict()
            entry.update({
                'average_marks': round(sum(values) / len(values), 2),
                'marks_count': len(values),
            })
            trends.append(entry)
        return trends

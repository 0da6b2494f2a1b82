"""
Ranking engine entry point
Runs classification, normalization, cohort statistics, aggregation, ranking
and attendance merging over one cohort and returns the ordered result set
"""

import logging

from ranking.aggregator import (
    apply_zscore_sentinel, composite_z_score, fixed_divisor_average, total_marks
)
from ranking.attendance import merge_attendance
from ranking.cells import NO_ENTRY_MARK, normalize_mark
from ranking.cohort import compute_cohort_statistics
from ranking.ranker import TOTAL_MARKS, ZSCORE, rank_rows, validate_ranking_method
from ranking.subjects import read_field, classify_subjects

logger = logging.getLogger(__name__)

ATTENDANCE_OK = 'ok'
ATTENDANCE_DEGRADED = 'degraded'


class RankedStudent(object):
    """One row of the ranked result set"""

    def __init__(self, student_id, index_number, name, current_class, subjects, cells):
        self.student_id = student_id
        self.index_number = index_number
        self.name = name
        self.current_class = current_class
        self.subjects = subjects
        self.cells = cells
        self.total_marks = 0
        self.average = 0
        self.z_score = None
        self.raw_z_score = None
        self.z_subject_count = 0
        self.rank = None
        self.absent_days = None
        self.attendance_percentage = None
        self.total_school_days = None

    def cell_for(self, subject_id):
        return self.cells[subject_id]

    def ordered_cells(self):
        """(subject, cell) pairs in canonical subject order"""
        return [(subject, self.cells[subject.id]) for subject in self.subjects]

    def to_dict(self):
        return {
            'student_id': self.student_id,
            'index_number': self.index_number,
            'name': self.name,
            'current_class': self.current_class,
            'rank': self.rank,
            'total_marks': self.total_marks,
            'average': round(self.average, 2),
            'z_score': self.z_score,
            'raw_z_score': self.raw_z_score,
            'z_subject_count': self.z_subject_count,
            'marks': [
                dict(cell.to_dict(), subject_id=subject.id, subject_code=subject.code,
                     subject_name=subject.name, stream=subject.stream)
                for subject, cell in self.ordered_cells()
            ],
            'absent_days': self.absent_days,
            'attendance_percentage': self.attendance_percentage,
            'total_school_days': self.total_school_days,
        }

    def __repr__(self):
        return f'<RankedStudent #{self.rank} {self.index_number}: {self.name}>'


class ResultSet(object):
    """Ordered, enriched rows handed to exporters"""

    def __init__(self, rows, subjects, statistics, ranking_method,
                 include_common_in_total, attendance_status):
        self.rows = rows
        self.subjects = subjects
        self.statistics = statistics
        self.ranking_method = ranking_method
        self.include_common_in_total = include_common_in_total
        self.attendance_status = attendance_status

    def __iter__(self):
        return iter(self.rows)

    def __len__(self):
        return len(self.rows)

    def __getitem__(self, index):
        return self.rows[index]

    def top(self, n):
        """Top-N extract; rows tied on the boundary rank are all kept"""
        return [row for row in self.rows if row.rank is not None and row.rank <= n]

    def summary(self):
        numeric_values = [
            row.cells[subject.id].effective_value
            for row in self.rows
            for subject in self.subjects
            if row.cells[subject.id].is_numeric
        ]
        total_students = len(self.rows)
        class_average = 0
        if total_students:
            class_average = round(sum(row.total_marks for row in self.rows) / total_students, 2)
        return {
            'total_students': total_students,
            'total_subjects': len(self.subjects),
            'class_average': class_average,
            'highest_score': max(numeric_values) if numeric_values else 0,
            'lowest_score': min(numeric_values) if numeric_values else 0,
        }

    def to_dict(self):
        return {
            'ranking_method': self.ranking_method,
            'include_common_in_total': self.include_common_in_total,
            'attendance_status': self.attendance_status,
            'subjects': [subject.to_dict() for subject in self.subjects],
            'statistics': [self.statistics[subject.id].to_dict() for subject in self.subjects],
            'students': [row.to_dict() for row in self.rows],
            'summary': self.summary(),
        }


def _raw_marks(student):
    """Yield (subject_id, raw, status) from either a mapping or a list of mark rows"""
    marks = read_field(student, 'marks', default=None) or {}
    if isinstance(marks, dict):
        for subject_id, raw in marks.items():
            yield subject_id, raw, None
    else:
        for mark in marks:
            yield (
                read_field(mark, 'subject_id'),
                read_field(mark, 'marks', 'value'),
                read_field(mark, 'status'),
            )


def normalize_student_cells(student, subjects):
    """Exactly one MarkCell per subject; gaps become NoEntry"""
    subject_ids = set(subject.id for subject in subjects)
    cells = {}
    for subject_id, raw, status in _raw_marks(student):
        if subject_id not in subject_ids:
            logger.debug("Ignoring mark for unknown subject %s", subject_id)
            continue
        cells[subject_id] = normalize_mark(raw, status)
    for subject in subjects:
        cells.setdefault(subject.id, NO_ENTRY_MARK)
    return cells


def rank_cohort(subjects, students, attendance=None, ranking_method=TOTAL_MARKS,
                include_common_in_total=True):
    """Compute totals, averages, optional Z-scores and competition ranks.

    A pure function of its inputs: nothing passed in is modified, and the
    same inputs always produce the same ordering.
    """
    validate_ranking_method(ranking_method)
    ordered_subjects = classify_subjects(subjects)

    rows = []
    for student in students or []:
        student_id = read_field(student, 'id', 'student_id')
        cells = normalize_student_cells(student, ordered_subjects)
        rows.append(RankedStudent(
            student_id=student_id,
            index_number=read_field(student, 'index_number'),
            name=read_field(student, 'name', 'student_name'),
            current_class=read_field(student, 'current_class'),
            subjects=ordered_subjects,
            cells=cells,
        ))

    statistics = compute_cohort_statistics(ordered_subjects, [row.cells for row in rows])

    for row in rows:
        row.total_marks = total_marks(ordered_subjects, row.cells, include_common_in_total)
        row.average = fixed_divisor_average(ordered_subjects, row.cells)
        if ranking_method == ZSCORE:
            raw_z, count = composite_z_score(ordered_subjects, row.cells, statistics)
            row.raw_z_score = raw_z
            row.z_subject_count = count
            row.z_score = apply_zscore_sentinel(raw_z)

    ranked = rank_rows(rows, ranking_method)
    merged = merge_attendance(ranked, attendance)

    logger.info(
        "Ranked %d students over %d subjects by %s",
        len(ranked), len(ordered_subjects), ranking_method,
    )
    return ResultSet(
        rows=ranked,
        subjects=ordered_subjects,
        statistics=statistics,
        ranking_method=ranking_method,
        include_common_in_total=include_common_in_total,
        attendance_status=ATTENDANCE_OK if merged else ATTENDANCE_DEGRADED,
    )

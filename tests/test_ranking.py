"""
Unit tests for the ranking engine
"""

import copy
import unittest

from ranking import (
    AbsentMark, InvalidMarkError, InvalidSelectionError, NoEntryMark, NumericMark,
    classify_subjects, normalize_mark, rank_cohort
)
from ranking.aggregator import (
    ZSCORE_SENTINEL, apply_zscore_sentinel, composite_z_score, fixed_divisor_average, total_marks
)
from ranking.attendance import merge_attendance
from ranking.cohort import compute_cohort_statistics, subject_statistics
from ranking.ranker import AVERAGE, TOTAL_MARKS, ZSCORE, competition_ranks


SUBJECTS = [
    {'id': 1, 'name': 'English', 'code': 'ENG', 'stream': 'Common'},
    {'id': 2, 'name': 'Physics', 'code': 'PHY', 'stream': 'Science'},
    {'id': 3, 'name': 'Chemistry', 'code': 'CHE', 'stream': 'Science'},
    {'id': 4, 'name': 'Biology', 'code': 'BIO', 'stream': 'Science'},
]


def student(student_id, marks, current_class='12-A'):
    return {
        'id': student_id,
        'index_number': f'S{student_id:03d}',
        'name': f'Student {student_id}',
        'current_class': current_class,
        'marks': marks,
    }


class TestMarkNormalization(unittest.TestCase):

    def test_numeric_values(self):
        self.assertEqual(normalize_mark(75), NumericMark(75))
        self.assertEqual(normalize_mark('75'), NumericMark(75))
        self.assertEqual(normalize_mark(' 62.5 ').effective_value, 62.5)
        self.assertEqual(normalize_mark(0).effective_value, 0)
        self.assertTrue(normalize_mark(0).is_recorded)

    def test_absence_tokens_and_status(self):
        self.assertIsInstance(normalize_mark('AB'), AbsentMark)
        self.assertIsInstance(normalize_mark('absent'), AbsentMark)
        self.assertIsInstance(normalize_mark(None, status='absent'), AbsentMark)
        self.assertIsInstance(normalize_mark(55, status='absent'), AbsentMark)

    def test_missing_values_are_no_entry(self):
        self.assertIsInstance(normalize_mark(None), NoEntryMark)
        self.assertIsInstance(normalize_mark(''), NoEntryMark)
        self.assertIsInstance(normalize_mark('   '), NoEntryMark)

    def test_absent_and_no_entry_count_as_zero_but_display_differently(self):
        absent = normalize_mark('AB')
        no_entry = normalize_mark(None)
        self.assertEqual(absent.effective_value, 0)
        self.assertEqual(no_entry.effective_value, 0)
        self.assertEqual(absent.display_value, 'AB')
        self.assertEqual(no_entry.display_value, '-')
        self.assertNotEqual(absent, no_entry)

    def test_invalid_values_raise(self):
        for raw in ('abc', True, float('nan'), float('inf'), object()):
            with self.assertRaises(InvalidMarkError):
                normalize_mark(raw)


class TestSubjectClassification(unittest.TestCase):

    def test_canonical_order_and_common_flag(self):
        subjects = classify_subjects(SUBJECTS)
        self.assertEqual([s.code for s in subjects], ['ENG', 'BIO', 'CHE', 'PHY'])
        self.assertTrue(subjects[0].is_common)
        self.assertFalse(any(s.is_common for s in subjects[1:]))

    def test_duplicate_ids_keep_first(self):
        subjects = classify_subjects(SUBJECTS + [{'id': 2, 'name': 'Other', 'code': 'X', 'stream': 'Arts'}])
        self.assertEqual(len(subjects), 4)

    def test_accepts_model_style_keys(self):
        subjects = classify_subjects([{'subject_id': 9, 'subject_name': 'Art', 'subject_code': 'ART', 'stream': 'Arts'}])
        self.assertEqual(subjects[0].id, 9)
        self.assertEqual(subjects[0].code, 'ART')


class TestCohortStatistics(unittest.TestCase):

    def test_population_standard_deviation(self):
        stats = subject_statistics(1, [60, 70, 80, 90])
        self.assertEqual(stats.mean, 75)
        self.assertAlmostEqual(stats.std_dev, 11.1803, places=4)
        self.assertAlmostEqual(stats.z_score(90), 1.3416, places=4)
        self.assertTrue(stats.usable)
        self.assertEqual(stats.highest, 90)
        self.assertEqual(stats.lowest, 60)

    def test_single_value_is_not_usable(self):
        stats = subject_statistics(1, [70])
        self.assertFalse(stats.usable)
        with self.assertRaises(ValueError):
            stats.z_score(70)

    def test_zero_spread_is_not_usable(self):
        self.assertFalse(subject_statistics(1, [70, 70, 70]).usable)

    def test_empty_subject(self):
        stats = subject_statistics(1, [])
        self.assertEqual(stats.count, 0)
        self.assertIsNone(stats.mean)
        self.assertFalse(stats.usable)

    def test_only_numeric_cells_contribute(self):
        subjects = classify_subjects(SUBJECTS[1:2])
        cohort = [
            {2: NumericMark(50)},
            {2: NumericMark(70)},
            {2: normalize_mark('AB')},
            {2: normalize_mark(None)},
        ]
        stats = compute_cohort_statistics(subjects, cohort)[2]
        self.assertEqual(stats.count, 2)
        self.assertEqual(stats.mean, 60)


class TestAggregation(unittest.TestCase):

    def setUp(self):
        self.subjects = classify_subjects(SUBJECTS)
        self.cells = {1: NumericMark(60), 2: NumericMark(80), 3: NumericMark(90), 4: NumericMark(70)}

    def test_total_marks_with_and_without_common(self):
        self.assertEqual(total_marks(self.subjects, self.cells), 300)
        self.assertEqual(total_marks(self.subjects, self.cells, include_common=False), 240)

    def test_average_uses_fixed_divisor(self):
        self.assertEqual(fixed_divisor_average(self.subjects, self.cells), 80.0)
        two_main = classify_subjects(SUBJECTS[:3])
        self.assertEqual(fixed_divisor_average(two_main, {1: NumericMark(50), 2: NumericMark(90), 3: NumericMark(90)}), 60.0)

    def test_average_is_not_rounded(self):
        cells = {**self.cells, 2: NumericMark(81)}
        self.assertAlmostEqual(fixed_divisor_average(self.subjects, cells), 241 / 3)

    def test_average_without_main_subjects(self):
        common_only = classify_subjects(SUBJECTS[:1])
        self.assertEqual(fixed_divisor_average(common_only, {1: NumericMark(90)}), 0)

    def test_composite_needs_three_subjects(self):
        stats = compute_cohort_statistics(self.subjects, [
            self.cells,
            {1: NumericMark(50), 2: NumericMark(60), 3: NumericMark(70), 4: NumericMark(50)},
        ])
        z, count = composite_z_score(self.subjects, self.cells, stats)
        self.assertEqual(count, 3)
        self.assertGreater(z, 0)

        cells = {**self.cells, 4: normalize_mark('AB')}
        z, count = composite_z_score(self.subjects, cells, stats)
        self.assertEqual((z, count), (0.0, 2))

    def test_composite_counts_valid_marks_not_usable_subjects(self):
        # Chemistry has no spread, so only Physics and Biology contribute
        cohort = [
            {1: NumericMark(60), 2: NumericMark(90), 3: NumericMark(80), 4: NumericMark(70)},
            {1: NumericMark(60), 2: NumericMark(70), 3: NumericMark(80), 4: NumericMark(50)},
        ]
        stats = compute_cohort_statistics(self.subjects, cohort)
        self.assertFalse(stats[3].usable)

        z, count = composite_z_score(self.subjects, cohort[0], stats)
        self.assertEqual(count, 3)
        self.assertAlmostEqual(z, 1.0)

    def test_composite_with_no_usable_subject(self):
        stats = compute_cohort_statistics(self.subjects, [self.cells, dict(self.cells)])
        self.assertEqual(composite_z_score(self.subjects, self.cells, stats), (0.0, 3))

    def test_sentinel(self):
        self.assertEqual(apply_zscore_sentinel(0.0), ZSCORE_SENTINEL)
        self.assertEqual(apply_zscore_sentinel(0.00004), ZSCORE_SENTINEL)
        self.assertEqual(apply_zscore_sentinel(-0.5), -0.5)
        self.assertEqual(apply_zscore_sentinel(0.0001), 0.0001)


class TestRanking(unittest.TestCase):

    def test_competition_ranks(self):
        self.assertEqual(competition_ranks([90, 90, 80, 70]), [1, 1, 3, 4])
        self.assertEqual(competition_ranks([5, 5, 5]), [1, 1, 1])
        self.assertEqual(competition_ranks([]), [])

    def test_rank_by_total(self):
        students = [
            student(1, {1: 50, 2: 70, 3: 80, 4: 90}),
            student(2, {1: 60, 2: 90, 3: 90, 4: 90}),
            student(3, {1: 50, 2: 70, 3: 80, 4: 90}),
            student(4, {1: 10, 2: 'AB', 3: None}),
        ]
        result = rank_cohort(SUBJECTS, students, ranking_method=TOTAL_MARKS)
        self.assertEqual([row.student_id for row in result], [2, 1, 3, 4])
        self.assertEqual([row.rank for row in result], [1, 2, 2, 4])
        self.assertEqual(result[3].total_marks, 10)

    def test_ties_keep_input_order(self):
        students = [student(i, {2: 70, 3: 70, 4: 70}) for i in (5, 3, 9)]
        result = rank_cohort(SUBJECTS, students, ranking_method=AVERAGE)
        self.assertEqual([row.student_id for row in result], [5, 3, 9])
        self.assertEqual([row.rank for row in result], [1, 1, 1])

    def test_average_ranking_ignores_common(self):
        students = [
            student(1, {1: 100, 2: 60, 3: 60, 4: 60}),
            student(2, {1: 0, 2: 70, 3: 70, 4: 70}),
        ]
        result = rank_cohort(SUBJECTS, students, ranking_method=AVERAGE)
        self.assertEqual(result[0].student_id, 2)
        self.assertEqual(result[0].average, 70.0)

    def test_average_ranking_keeps_full_precision(self):
        students = [
            student(1, {2: 80, 3: 80, 4: 80.01}),
            student(2, {2: 80, 3: 80, 4: 80.02}),
        ]
        result = rank_cohort(SUBJECTS, students, ranking_method=AVERAGE)
        self.assertEqual([row.student_id for row in result], [2, 1])
        self.assertEqual([row.rank for row in result], [1, 2])
        self.assertEqual(result[0].to_dict()['average'], 80.01)

    def test_zscore_sentinel_ranks_below_negative(self):
        subjects = SUBJECTS[1:]
        students = [
            student(1, {2: 50, 3: 50, 4: 50}),
            student(2, {2: 60, 3: 60, 4: 60}),
            student(3, {2: 70, 3: 70, 4: 70}),
        ]
        result = rank_cohort(subjects, students, ranking_method=ZSCORE)
        self.assertEqual([row.student_id for row in result], [3, 1, 2])
        self.assertAlmostEqual(result[1].z_score, -1.2247, places=4)
        self.assertEqual(result[2].z_score, ZSCORE_SENTINEL)
        self.assertEqual(result[2].raw_z_score, 0.0)

    def test_zscore_skips_unusable_subjects(self):
        # Chemistry is 80 for everyone; Physics and Biology still separate the cohort
        students = [
            student(1, {2: 90, 3: 80, 4: 70}),
            student(2, {2: 60, 3: 80, 4: 65}),
            student(3, {2: 60, 3: 80, 4: 40}),
        ]
        result = rank_cohort(SUBJECTS, students, ranking_method=ZSCORE)
        self.assertFalse(result.statistics[3].usable)
        self.assertEqual([row.student_id for row in result], [1, 2, 3])
        self.assertEqual([row.rank for row in result], [1, 2, 3])
        for row in result:
            self.assertEqual(row.z_subject_count, 3)
            self.assertNotEqual(row.z_score, ZSCORE_SENTINEL)
        self.assertAlmostEqual(result[0].z_score, 1.1516, places=3)
        self.assertAlmostEqual(result[1].z_score, -0.0996, places=3)
        self.assertAlmostEqual(result[2].z_score, -1.0521, places=3)

    def test_zscore_only_computed_for_zscore_method(self):
        result = rank_cohort(SUBJECTS, [student(1, {2: 50})], ranking_method=TOTAL_MARKS)
        self.assertIsNone(result[0].z_score)

    def test_every_row_has_a_cell_per_subject(self):
        result = rank_cohort(SUBJECTS, [student(1, {2: 50, 99: 40})])
        row = result[0]
        self.assertEqual(sorted(row.cells), [1, 2, 3, 4])
        self.assertIsInstance(row.cell_for(1), NoEntryMark)

    def test_marks_as_list_of_rows(self):
        marks = [
            {'subject_id': 2, 'marks': 80, 'status': 'active'},
            {'subject_id': 3, 'marks': None, 'status': 'absent'},
        ]
        row = rank_cohort(SUBJECTS, [student(1, marks)])[0]
        self.assertEqual(row.cell_for(2), NumericMark(80))
        self.assertIsInstance(row.cell_for(3), AbsentMark)

    def test_unknown_method_rejected(self):
        with self.assertRaises(InvalidSelectionError):
            rank_cohort(SUBJECTS, [], ranking_method='median')

    def test_empty_cohort(self):
        result = rank_cohort(SUBJECTS, [])
        self.assertEqual(len(result), 0)
        self.assertEqual(result.summary()['total_students'], 0)
        self.assertEqual(result.summary()['class_average'], 0)

    def test_recompute_is_idempotent_and_pure(self):
        students = [
            student(1, {1: 50, 2: 70, 3: 80, 4: 90}),
            student(2, {1: 60, 2: 'AB', 3: 90}),
            student(3, {1: 40, 2: 65, 3: 75, 4: 85}),
        ]
        attendance = [{'student_id': 1, 'absent_days': 2, 'attendance_percentage': 98.0, 'total_school_days': 100}]
        before = copy.deepcopy(students)

        first = rank_cohort(SUBJECTS, students, attendance, ranking_method=ZSCORE).to_dict()
        second = rank_cohort(SUBJECTS, students, attendance, ranking_method=ZSCORE).to_dict()

        self.assertEqual(first, second)
        self.assertEqual(students, before)

    def test_switching_method_reranks_without_touching_marks(self):
        students = [
            student(1, {1: 100, 2: 60, 3: 60, 4: 60}),
            student(2, {1: 10, 2: 70, 3: 70, 4: 70}),
            student(3, {1: 50, 2: 65, 3: 65, 4: 65}),
        ]
        before = copy.deepcopy(students)

        by_total = rank_cohort(SUBJECTS, students, ranking_method=TOTAL_MARKS)
        by_z = rank_cohort(SUBJECTS, students, ranking_method=ZSCORE)

        self.assertEqual(by_total[0].student_id, 1)
        self.assertEqual(by_z[0].student_id, 2)
        self.assertEqual(students, before)

    def test_top_n_keeps_boundary_ties(self):
        students = [
            student(1, {2: 90}),
            student(2, {2: 80}),
            student(3, {2: 80}),
            student(4, {2: 70}),
        ]
        result = rank_cohort(SUBJECTS, students)
        self.assertEqual([row.student_id for row in result.top(2)], [1, 2, 3])
        self.assertEqual(len(result.top(10)), 4)

    def test_summary(self):
        students = [
            student(1, {1: 50, 2: 70, 3: 80, 4: 90}),
            student(2, {1: 40, 2: 'AB'}),
        ]
        summary = rank_cohort(SUBJECTS, students).summary()
        self.assertEqual(summary['total_students'], 2)
        self.assertEqual(summary['total_subjects'], 4)
        self.assertEqual(summary['class_average'], 165.0)
        self.assertEqual(summary['highest_score'], 90)
        self.assertEqual(summary['lowest_score'], 40)


class TestAttendanceMerge(unittest.TestCase):

    def setUp(self):
        self.students = [student(1, {2: 80}), student(2, {2: 70}), student(3, {2: 60})]

    def test_merge_by_student_id(self):
        attendance = [
            {'student_id': '1', 'absent_days': 3, 'attendance_percentage': '97.5', 'total_school_days': 120},
            {'student_id': 2, 'absent_days': None, 'attendance_percentage': 'n/a', 'total_school_days': 120},
        ]
        result = rank_cohort(SUBJECTS, self.students, attendance)
        rows = dict((row.student_id, row) for row in result)

        self.assertEqual(result.attendance_status, 'ok')
        self.assertEqual(rows[1].absent_days, 3)
        self.assertEqual(rows[1].attendance_percentage, 97.5)
        self.assertEqual(rows[1].total_school_days, 120)
        self.assertIsNone(rows[2].absent_days)
        self.assertIsNone(rows[2].attendance_percentage)
        self.assertIsNone(rows[3].absent_days)
        self.assertIsNone(rows[3].total_school_days)

    def test_day_counts_must_be_whole(self):
        attendance = [
            {'student_id': 1, 'absent_days': '3.5', 'attendance_percentage': '96.5', 'total_school_days': '120.0'},
            {'student_id': 2, 'absent_days': 4.0, 'attendance_percentage': 95, 'total_school_days': 'many'},
        ]
        rows = dict((row.student_id, row) for row in rank_cohort(SUBJECTS, self.students, attendance))

        self.assertIsNone(rows[1].absent_days)
        self.assertEqual(rows[1].attendance_percentage, 96.5)
        self.assertEqual(rows[1].total_school_days, 120)
        self.assertEqual(rows[2].absent_days, 4)
        self.assertEqual(rows[2].attendance_percentage, 95.0)
        self.assertIsNone(rows[2].total_school_days)

    def test_missing_source_degrades_to_unknown(self):
        result = rank_cohort(SUBJECTS, self.students, attendance=None)
        self.assertEqual(result.attendance_status, 'degraded')
        for row in result:
            self.assertIsNone(row.absent_days)
            self.assertIsNone(row.attendance_percentage)
            self.assertIsNone(row.total_school_days)

    def test_malformed_source_degrades(self):
        rows = rank_cohort(SUBJECTS, self.students).rows
        self.assertFalse(merge_attendance(rows, {'student_id': 1}))
        self.assertTrue(all(row.absent_days is None for row in rows))

    def test_attendance_does_not_change_ranks(self):
        without = rank_cohort(SUBJECTS, self.students, None)
        with_attendance = rank_cohort(SUBJECTS, self.students, [{'student_id': 3, 'absent_days': 0}])
        self.assertEqual([(r.student_id, r.rank) for r in without], [(r.student_id, r.rank) for r in with_attendance])


if __name__ == '__main__':
    unittest.main()

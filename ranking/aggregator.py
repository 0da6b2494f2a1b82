"""
Per-student aggregation for the ranking engine
Total marks, fixed-divisor average and composite Z-score
"""

# Business rule: every student is assumed to take exactly three main subjects.
AVERAGE_DIVISOR = 3
MIN_ZSCORE_SUBJECTS = 3
ZSCORE_SENTINEL = -20.0
ZSCORE_PRECISION = 4


def total_marks(subjects, cells, include_common=True):
    """Sum effective values; common subjects only count when include_common is set"""
    total = 0
    for subject in subjects:
        if subject.is_common and not include_common:
            continue
        total += cells[subject.id].effective_value
    return total


def fixed_divisor_average(subjects, cells):
    """Average of the main (non-common) subjects over a fixed divisor of 3.

    Unrounded; rounding happens only when the value is displayed.
    """
    main_values = [cells[subject.id].effective_value for subject in subjects if not subject.is_common]
    if not main_values:
        return 0
    return sum(main_values) / AVERAGE_DIVISOR


def composite_z_score(subjects, cells, statistics):
    """Mean per-subject Z-score of a student's main subjects.

    Returns (z_score, valid_mark_count). A student needs numeric marks in at
    least MIN_ZSCORE_SUBJECTS main subjects, otherwise the composite is 0.
    Subjects that are not statistically usable count towards that minimum
    but never contribute a z-value.
    """
    valid_marks = 0
    z_values = []
    for subject in subjects:
        if subject.is_common:
            continue
        cell = cells[subject.id]
        if not cell.is_numeric:
            continue
        valid_marks += 1
        stats = statistics[subject.id]
        if stats.usable:
            z_values.append(stats.z_score(cell.effective_value))

    if valid_marks < MIN_ZSCORE_SUBJECTS or not z_values:
        return 0.0, valid_marks
    return sum(z_values) / len(z_values), valid_marks


def apply_zscore_sentinel(z_score):
    """Replace a composite that rounds to 0.0000 with the sentinel"""
    if round(z_score, ZSCORE_PRECISION) == 0:
        return ZSCORE_SENTINEL
    return z_score

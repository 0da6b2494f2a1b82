"""
Cohort statistics for the ranking engine
Per-subject mean and population standard deviation across the whole cohort
"""

import logging
import math

logger = logging.getLogger(__name__)

MIN_STATISTICAL_SAMPLE = 2


class SubjectStatistics(object):
    """Mean/stddev of one subject over every student with a numeric mark"""
    __slots__ = ('subject_id', 'count', 'mean', 'std_dev', 'highest', 'lowest', 'usable')

    def __init__(self, subject_id, count=0, mean=None, std_dev=None,
                 highest=None, lowest=None, usable=False):
        self.subject_id = subject_id
        self.count = count
        self.mean = mean
        self.std_dev = std_dev
        self.highest = highest
        self.lowest = lowest
        self.usable = usable

    def z_score(self, value):
        """Standardize a value against this subject; only valid when usable"""
        if not self.usable:
            raise ValueError(f'Subject {self.subject_id} is not statistically usable')
        return (value - self.mean) / self.std_dev

    def to_dict(self):
        return {
            'subject_id': self.subject_id,
            'count': self.count,
            'mean': self.mean,
            'std_dev': self.std_dev,
            'highest': self.highest,
            'lowest': self.lowest,
            'usable': self.usable,
        }

    def __repr__(self):
        return f'<SubjectStatistics {self.subject_id}: n={self.count} usable={self.usable}>'


def subject_statistics(subject_id, values):
    """Compute statistics for one subject from its numeric values"""
    values = list(values)
    n = len(values)
    if n == 0:
        return SubjectStatistics(subject_id)

    highest = max(values)
    lowest = min(values)
    mean = sum(values) / n
    variance = sum((value - mean) ** 2 for value in values) / n
    std_dev = math.sqrt(variance)

    usable = n >= MIN_STATISTICAL_SAMPLE and std_dev != 0
    return SubjectStatistics(
        subject_id,
        count=n,
        mean=mean,
        std_dev=std_dev,
        highest=highest,
        lowest=lowest,
        usable=usable,
    )


def compute_cohort_statistics(subjects, cohort_cells):
    """Compute statistics once per subject for the whole cohort.

    ``cohort_cells`` holds one dict of subject id -> MarkCell per student.
    Only NumericMark cells take part; absent and no-entry cells are skipped.
    """
    stats = {}
    for subject in subjects:
        values = []
        for cells in cohort_cells:
            cell = cells[subject.id]
            if cell.is_numeric:
                values.append(cell.effective_value)
        stats[subject.id] = subject_statistics(subject.id, values)
        if not stats[subject.id].usable:
            logger.debug("Subject %s is not usable for z-scores (n=%d)", subject.id, len(values))
    return stats

"""
Academic performance ranking engine
Pure computation of totals, averages, Z-scores and competition ranks
"""

from .cells import MarkCell, NumericMark, AbsentMark, NoEntryMark, normalize_mark
from .subjects import SubjectInfo, classify_subjects
from .cohort import SubjectStatistics, compute_cohort_statistics
from .ranker import RANKING_METHODS, RANKING_METHOD_LABELS, TOTAL_MARKS, AVERAGE, ZSCORE
from .engine import RankedStudent, ResultSet, rank_cohort
from .errors import (
    RankingError, MissingSelectionError, InvalidSelectionError, UpstreamFetchError,
    TermNotFoundError, StudentNotFoundError, AttendanceDegraded, InvalidMarkError
)

__all__ = [
    'MarkCell', 'NumericMark', 'AbsentMark', 'NoEntryMark', 'normalize_mark',
    'SubjectInfo', 'classify_subjects', 'SubjectStatistics', 'compute_cohort_statistics',
    'RANKING_METHODS', 'RANKING_METHOD_LABELS', 'TOTAL_MARKS', 'AVERAGE', 'ZSCORE',
    'RankedStudent', 'ResultSet', 'rank_cohort',
    'RankingError', 'MissingSelectionError', 'InvalidSelectionError', 'UpstreamFetchError',
    'TermNotFoundError', 'StudentNotFoundError', 'AttendanceDegraded', 'InvalidMarkError'
]

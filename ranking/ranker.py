"""
Ranking for the ranking engine
Sorts a cohort by the selected metric and assigns competition ranks
"""

from ranking.errors import InvalidSelectionError

TOTAL_MARKS = 'totalMarks'
AVERAGE = 'average'
ZSCORE = 'zscore'

RANKING_METHODS = (TOTAL_MARKS, AVERAGE, ZSCORE)

METRIC_ATTRIBUTES = {
    TOTAL_MARKS: 'total_marks',
    AVERAGE: 'average',
    ZSCORE: 'z_score',
}

RANKING_METHOD_LABELS = {
    TOTAL_MARKS: 'Total Marks',
    AVERAGE: 'Average (No Common)',
    ZSCORE: 'Z-Score (No Common)',
}


def validate_ranking_method(ranking_method):
    if ranking_method not in RANKING_METHODS:
        raise InvalidSelectionError('ranking_method', ranking_method, RANKING_METHODS)
    return ranking_method


def metric_value(row, ranking_method):
    return getattr(row, METRIC_ATTRIBUTES[ranking_method])


def competition_ranks(values):
    """Competition ranks for values already sorted in descending order.

    Tied values share a rank; the next distinct value takes its 1-based
    position, so [90, 90, 80, 70] gives [1, 1, 3, 4].
    """
    ranks = []
    previous = None
    for position, value in enumerate(values, 1):
        if ranks and value == previous:
            ranks.append(ranks[-1])
        else:
            ranks.append(position)
        previous = value
    return ranks


def rank_rows(rows, ranking_method):
    """Return rows sorted by the metric (descending) with ``rank`` set.

    The sort is stable, so tied rows keep the order they were supplied in.
    """
    validate_ranking_method(ranking_method)
    ordered = sorted(rows, key=lambda row: metric_value(row, ranking_method), reverse=True)
    ranks = competition_ranks([metric_value(row, ranking_method) for row in ordered])
    for row, rank in zip(ordered, ranks):
        row.rank = rank
    return ordered

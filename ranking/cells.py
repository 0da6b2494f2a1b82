"""
Mark normalization for the ranking engine
Maps raw mark cells onto the closed set NumericMark | AbsentMark | NoEntryMark
"""

import math

from ranking.errors import InvalidMarkError

NUMERIC = 'numeric'
ABSENT = 'absent'
NO_ENTRY = 'no_entry'

ABSENT_DISPLAY = 'AB'
NO_ENTRY_DISPLAY = '-'

ABSENCE_TOKENS = {'ab', 'absent'}
ABSENT_STATUS = 'absent'


class MarkCell(object):
    """Base class for a normalized (student, subject) mark.

    Subclasses are the only three shapes a mark can take. ``effective_value``
    is what arithmetic sees; ``display_value`` keeps the three shapes apart.
    """
    __slots__ = ()

    kind = None
    is_numeric = False
    is_recorded = False

    @property
    def effective_value(self):
        return 0

    @property
    def display_value(self):
        raise NotImplementedError

    def to_dict(self):
        return {
            'kind': self.kind,
            'display': self.display_value,
            'effective': self.effective_value,
        }

    def __eq__(self, other):
        return type(self) is type(other) and self.display_value == other.display_value

    def __hash__(self):
        return hash((self.kind, self.display_value))


class NumericMark(MarkCell):
    """A recorded numeric mark"""
    __slots__ = ('value',)

    kind = NUMERIC
    is_numeric = True
    is_recorded = True

    def __init__(self, value):
        self.value = value

    @property
    def effective_value(self):
        return self.value

    @property
    def display_value(self):
        return self.value

    def __repr__(self):
        return f'<NumericMark {self.value}>'


class AbsentMark(MarkCell):
    """Student was expected to sit the exam but did not"""
    __slots__ = ()

    kind = ABSENT
    is_recorded = True

    @property
    def display_value(self):
        return ABSENT_DISPLAY

    def __repr__(self):
        return '<AbsentMark>'


class NoEntryMark(MarkCell):
    """Nothing has been recorded for this student and subject"""
    __slots__ = ()

    kind = NO_ENTRY

    @property
    def display_value(self):
        return NO_ENTRY_DISPLAY

    def __repr__(self):
        return '<NoEntryMark>'


ABSENT_MARK = AbsentMark()
NO_ENTRY_MARK = NoEntryMark()


def _parse_number(raw):
    """Return an int for whole values and a float otherwise, or None if not numeric"""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
    elif isinstance(raw, str):
        try:
            number = float(raw.strip())
        except ValueError:
            return None
    else:
        try:
            number = float(raw)
        except (TypeError, ValueError):
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    if number.is_integer():
        return int(number)
    return number


def normalize_mark(raw, status=None):
    """Normalize one raw mark cell.

    ``status`` is the stored status flag of the mark row, if any. An explicit
    absence (status or token) wins over whatever value is stored.
    """
    if isinstance(raw, MarkCell):
        return raw

    if status is not None and str(status).strip().lower() == ABSENT_STATUS:
        return ABSENT_MARK

    if raw is None:
        return NO_ENTRY_MARK

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return NO_ENTRY_MARK
        if text.lower() in ABSENCE_TOKENS:
            return ABSENT_MARK

    value = _parse_number(raw)
    if value is None:
        raise InvalidMarkError(raw)
    return NumericMark(value)


"""
Error taxonomy for the ranking engine
"""


class RankingError(Exception):
    """Base class for ranking engine errors"""
    pass


class MissingSelectionError(RankingError):
    """A required selector (term, or class for a class report) was not supplied"""

    def __init__(self, field, message=None):
        self.field = field
        super(MissingSelectionError, self).__init__(message or f"{field} is required")


class InvalidSelectionError(RankingError, ValueError):
    """A selector was supplied but is not one of the accepted values"""

    def __init__(self, field, value, allowed=(), message=None):
        self.field = field
        self.value = value
        self.allowed = tuple(allowed)
        super(InvalidSelectionError, self).__init__(
            message or f"Invalid {field} '{value}'. Must be one of: {', '.join(self.allowed)}"
        )


class UpstreamFetchError(RankingError):
    """The marks/subjects source failed; no report can be produced"""
    pass


class TermNotFoundError(UpstreamFetchError):
    """The requested term does not exist"""
    pass


class StudentNotFoundError(UpstreamFetchError):
    """The requested student does not exist"""
    pass


class AttendanceDegraded(RankingError):
    """The attendance source failed or was malformed; attendance is reported as unknown"""
    pass


class InvalidMarkError(RankingError, ValueError):
    """A raw mark cell could not be interpreted"""

    def __init__(self, raw):
        self.raw = raw
        super(InvalidMarkError, self).__init__(f"Cannot interpret mark value {raw!r}")

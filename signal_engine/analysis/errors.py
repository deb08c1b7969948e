"""
Analysis Errors
All are local and recoverable: a failed cycle yields no new result and the
caller keeps showing the previous one
"""


class AnalysisError(Exception):
    """Base class for analysis engine errors"""


class InsufficientDataError(AnalysisError):
    """Fewer candles than an indicator or the analysis needs"""

    def __init__(self, message: str, required: int = 0, available: int = 0):
        super().__init__(message)
        self.required = required
        self.available = available


class MalformedSnapshotError(AnalysisError):
    """Market data payload missing or with unusable price/quantity fields"""


class ArithmeticDegenerateError(AnalysisError):
    """A computation would divide by zero or produce a non-finite value"""

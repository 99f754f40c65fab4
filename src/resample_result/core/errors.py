"""
Exceptions raised by resample result containers.

All of them are ValueErrors: they report bad input at the point of the
offending call. Learner warnings/errors recorded during fitting are data and
never surface through these classes.
"""


class ResampleResultError(ValueError):
    """Base class for all resample result errors"""


class SchemaError(ResampleResultError):
    """Row table is missing required columns or holds invalid iterations"""


class InvalidSubsetError(ResampleResultError):
    """Requested predict sets are empty or not drawn from {train, test}"""


class MeasureIncompatibleError(ResampleResultError):
    """Measure cannot be applied to the task or learner of a result"""

    def __init__(self, measure_id: str, reason: str):
        self.measure_id = measure_id
        self.reason = reason
        super().__init__(f"Measure '{measure_id}' is not compatible: {reason}")


class InvalidIterationError(ResampleResultError):
    """Iterations passed to filter are empty, non-integer, or out of range"""


class IdentityConflictError(ResampleResultError):
    """Two resample results with the same uhash were combined"""

"""
Exceptions raised by the sampling lab engine.

Every error is raised before any state is touched, so a caller that catches
one can keep using the engine as it was.
"""


class SamplingLabError(Exception):
    """Base class for engine errors."""


class InvalidSampleSize(SamplingLabError, ValueError):
    def __init__(self, n, message: str):
        super().__init__(message)
        self.n = n


class UnknownPreset(SamplingLabError, ValueError):
    pass


class UnknownStatistic(SamplingLabError, ValueError):
    pass


class UnknownSpeed(SamplingLabError, ValueError):
    pass

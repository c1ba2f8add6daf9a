"""Exceptions raised while parsing, interpolating, merging and transposing SP3 data.

Everything derives from SP3Error and from ValueError, so callers written against plain ValueError keep working.
"""

from typing import Optional


class SP3Error(ValueError):
    """Base class of all sp3analysis errors"""


class SP3ParsingError(SP3Error):
    """Structural problem in SP3 content. Parsing is aborted and no partial model is returned.

    :param str message: description of the problem, including the field that was expected
    :param Optional[int] line_number: 1-based line number of the offending line, if known
    """

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)


class UnsupportedRevision(SP3ParsingError):
    pass


class TruncatedHeaderLine(SP3ParsingError):
    pass


class NonMonotonicEpoch(SP3ParsingError):
    pass


class UnknownSatellite(SP3ParsingError):
    pass


class InvalidFlag(SP3ParsingError):
    pass


class MissingTerminator(SP3ParsingError):
    pass


class UnsupportedInterpolationOrder(SP3Error):
    def __init__(self, order: int):
        self.order = order
        super().__init__(f"Interpolation order must be a positive odd number, got {order}")


class SP3MergeError(SP3Error):
    """Two SP3 models cannot be safely combined"""


class IncompatibleHeaders(SP3MergeError):
    def __init__(self, field: str, left, right):
        self.field = field
        super().__init__(f"Headers disagree on {field}: '{left}' vs '{right}'")


class IncompatibleSamplingInterval(SP3MergeError):
    def __init__(self, left, right):
        super().__init__(f"Sampling intervals differ: {left} vs {right}")


class ConflictingSamples(SP3MergeError):
    def __init__(self, epoch, sv: str, field: str):
        self.epoch = epoch
        self.sv = sv
        self.field = field
        super().__init__(f"Conflicting {field} values for {sv} at epoch {epoch}")


class CorrectionTableCoverage(SP3Error):
    def __init__(self, first_needed, last_needed, first_available, last_available):
        super().__init__(
            f"Correction table spans {first_available} to {last_available}, "
            f"but epochs from {first_needed} to {last_needed} need correcting"
        )

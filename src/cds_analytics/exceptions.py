"""
Custom exceptions for the CDS analytics library.
"""


class CDSError(Exception):
    """Base exception for all CDS analytics errors."""


class ArgumentError(CDSError, ValueError):
    """Invalid, empty or mismatched input supplied by the caller."""


class CurveError(CDSError):
    """Error related to curve construction or interpolation."""


class InterpolationError(CurveError):
    """Malformed knot data for a curve."""


class CalibrationFailure(CurveError):
    """Credit curve bootstrap could not reprice a pillar instrument."""

    def __init__(self, message: str, pillar_index: int | None = None):
        super().__init__(message)
        self.pillar_index = pillar_index


class ConvergenceError(CDSError):
    """Root finding failed to converge."""


class UnderDeterminedHedgeError(CDSError):
    """Fewer hedge instruments than curve knots, so no hedge neutralizes every knot."""


def check_argument(condition: bool, message: str) -> None:
    """Raise ArgumentError with message unless condition holds."""
    if not condition:
        raise ArgumentError(message)

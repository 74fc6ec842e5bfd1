"""
Exception types raised by the alignment core.
"""


class AlignmentError(Exception):
    """Base class for errors raised by ms_align."""


class PreconditionViolation(AlignmentError, ValueError):
    """
    Input broke a contract of the translation passes.

    Raised for arrays too short for the decoder window, mismatched
    array lengths and matching statistics outside [0, k]. These are
    programming errors on the caller side and are never truncated away.
    """


__all__ = [
    'AlignmentError',
    'PreconditionViolation',
]

"""
Error taxonomy for the analytics engine.

None of these are meant to reach a caller of the service layer:

  DataUnavailable     store read failed → substitute a default from wellness.defaults
  InsufficientData    too few samples to infer a statistic → neutral / default result
  PersistenceFailure  derived-record write failed → log and keep the computed result
  ValidationFailure   malformed input row → drop the row, keep analysing the rest
"""


class WellnessError(Exception):
    """Base class for analytics engine errors."""


class DataUnavailable(WellnessError):
    """Raised when the store cannot serve a read."""


class InsufficientData(WellnessError):
    """Raised when a statistic needs more samples than are available."""


class PersistenceFailure(WellnessError):
    """Raised when a derived record cannot be written."""


class ValidationFailure(WellnessError):
    """Raised when an input record is malformed or out of range."""

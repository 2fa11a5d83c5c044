"""Custom exceptions for flowfin.

Conversion and formatting never let these escape: callers that render
dashboards catch them at the point where a fallback value is chosen.
"""


class FlowError(Exception):
    """Base exception for all flowfin errors."""


class InvalidAmountError(FlowError):
    """Raised when a monetary amount cannot be read as a finite number."""

    def __init__(self, raw: object, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"invalid amount {raw!r}: {reason}")


class InvalidRateError(FlowError):
    """Raised when an exchange rate table contains a non-positive or non-numeric rate."""


class InvalidStageError(FlowError):
    """Raised when a lead is moved to a stage the pipeline does not know."""


class InvalidRecordError(FlowError):
    """Raised when a document record cannot be turned into a domain object."""

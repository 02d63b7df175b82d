"""Exceptions related to chart-synth."""

__all__ = [
    "SynthException",
    "ValidationError",
    "DanglingReferenceError",
    "DuplicateIdError",
    "InputException",
]


class SynthException(Exception):
    """Generic base exception used for this library."""


class ValidationError(SynthException):
    """Raised when a resource or chart is missing required identity fields."""


class DuplicateIdError(ValidationError):
    """Raised when two nodes or outputs would share the same identifier."""


class DanglingReferenceError(ValidationError):
    """Raised when an aggregation document references a chart that is not synthesized."""

    def __init__(self, referrer: str, chart_name: str) -> None:
        super().__init__(
            f"Chart {referrer} references chart '{chart_name}' which is not "
            "part of the synthesized app"
        )
        self.referrer = referrer
        self.chart_name = chart_name


class InputException(SynthException):
    """Raised when synthesized output files are not formatted as expected."""

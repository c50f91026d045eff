"""Exceptions raised by the service and adapter layers.

The metric functions themselves never raise for bad input; they return zero
values instead.
"""


class LearnMetError(Exception):
    """Base class for LearnMet errors."""


class RepositoryError(LearnMetError):
    """The backing store could not return records."""


class InvalidPeriodError(LearnMetError, ValueError):
    """A reporting period whose start falls after its end."""

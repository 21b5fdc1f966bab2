"""Exceptions raised by the pricing engine."""


class InvalidParameterError(ValueError):
    """A pricing input is out of range or inconsistent; not retryable."""


class MissingPathsError(RuntimeError):
    """A path-dependent payoff was evaluated without retained paths."""

"""
Risk-free rate term structure and expiry conversion.

A RateCurve holds (tenor in years, rate) points and linearly interpolates
between them, extrapolating flat beyond the first and last tenor.
"""

import logging
from datetime import date
from typing import Iterable, Mapping, Optional, Tuple

import numpy as np

from .errors import InvalidParameterError

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.0


def year_fraction(expiry: date, as_of: Optional[date] = None) -> float:
    """
    Time from as_of (today by default) to expiry in years of 365 days.

    Raises:
        InvalidParameterError: If the option has expired or expires on as_of
    """
    as_of = as_of or date.today()
    days = (expiry - as_of).days
    if days <= 0:
        raise InvalidParameterError(
            f"Option has expired or expires today. Expiry date: {expiry.isoformat()}"
        )
    return days / DAYS_PER_YEAR


class RateCurve:
    """Zero-rate curve with linear interpolation and flat extrapolation."""

    def __init__(self, points: Iterable[Tuple[float, float]]):
        """
        Initialize the curve.

        Args:
            points: (tenor_years, rate) pairs in any order
        """
        ordered = sorted((float(t), float(r)) for t, r in points)
        if not ordered:
            raise InvalidParameterError("Rate curve must have at least one point")

        tenors = np.array([t for t, _ in ordered])
        if np.any(tenors <= 0):
            raise InvalidParameterError("Rate curve tenors must be positive")
        if np.any(np.diff(tenors) == 0):
            raise InvalidParameterError("Rate curve tenors must be unique")

        self._tenors = tenors
        self._rates = np.array([r for _, r in ordered])

    @classmethod
    def from_mapping(cls, points: Mapping[float, float]) -> "RateCurve":
        """Build a curve from a {tenor_years: rate} mapping."""
        return cls(points.items())

    @property
    def points(self) -> Tuple[Tuple[float, float], ...]:
        return tuple(zip(self._tenors.tolist(), self._rates.tolist()))

    def rate(self, time_to_expiry: float) -> float:
        """
        Interpolated rate for a time to expiry in years.

        Raises:
            InvalidParameterError: If time_to_expiry is not positive
        """
        if time_to_expiry <= 0:
            raise InvalidParameterError("Time to expiry must be positive")
        # np.interp holds the end values flat outside the tenor range
        rate = float(np.interp(time_to_expiry, self._tenors, self._rates))
        logger.debug(f"Rate for T={time_to_expiry:.4f}y: {rate:.6f}")
        return rate

    def __repr__(self) -> str:
        return f"RateCurve({list(self.points)!r})"

"""
Option configuration: per-instrument contract terms.

An OptionConfiguration is a closed tagged variant. The style tag selects the
payoff strategy and the archetype-specific fields parameterize it; fields
that do not apply to the chosen style are ignored.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

import numpy as np

from .errors import InvalidParameterError


class OptionStyle(Enum):
    """Option archetype."""

    EUROPEAN = "european"
    ASIAN = "asian"
    DIGITAL = "digital"
    BARRIER = "barrier"
    LOOKBACK = "lookback"
    RANGE = "range"


class AveragingType(Enum):
    ARITHMETIC = "arithmetic"
    GEOMETRIC = "geometric"


class BarrierType(Enum):
    KNOCK_IN = "knock_in"
    KNOCK_OUT = "knock_out"


class BarrierDirection(Enum):
    UP = "up"
    DOWN = "down"


class LookbackType(Enum):
    """Fixed strike compares the path extremum with K; floating uses it as the strike."""

    FIXED_STRIKE = "fixed_strike"
    FLOATING_STRIKE = "floating_strike"


@dataclass(frozen=True)
class OptionConfiguration:
    """
    Contract terms of one option.

    Attributes:
        style: Option archetype
        strike: Strike price K (unused by RANGE)
        is_call: Call (True) or put (False)
        expiry: Expiry date; needed only when pricing from dates
        initial_price: Current price of the underlying
        averaging_type: ASIAN averaging style
        is_cash_or_nothing: DIGITAL pays `payout` (True) or the asset value (False)
        payout: DIGITAL cash amount
        barrier_type: BARRIER knock-in or knock-out
        barrier_direction: BARRIER up or down
        barrier_level: BARRIER level
        lookback_type: LOOKBACK fixed or floating strike
        label: Free-form identifier echoed into pricing records
    """

    style: OptionStyle
    strike: float
    is_call: bool = True
    expiry: Optional[date] = None
    initial_price: float = 100.0
    averaging_type: AveragingType = AveragingType.ARITHMETIC
    is_cash_or_nothing: bool = True
    payout: float = 1.0
    barrier_type: BarrierType = BarrierType.KNOCK_OUT
    barrier_direction: BarrierDirection = BarrierDirection.UP
    barrier_level: float = 0.0
    lookback_type: LookbackType = LookbackType.FIXED_STRIKE
    label: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.style, OptionStyle):
            raise InvalidParameterError(f"Unsupported option style: {self.style!r}")
        # Written as "not (accepted range)" so that NaN is rejected too
        if not np.isfinite(self.strike):
            raise InvalidParameterError(f"Strike price must be finite, got {self.strike}")
        if self.style is OptionStyle.RANGE:
            if not self.strike >= 0:
                raise InvalidParameterError("Strike price cannot be negative")
        elif not self.strike > 0:
            raise InvalidParameterError("Strike price must be positive")
        if not (np.isfinite(self.initial_price) and self.initial_price > 0):
            raise InvalidParameterError("Initial price must be positive and finite")
        if self.style is OptionStyle.DIGITAL and not (
            np.isfinite(self.payout) and self.payout >= 0
        ):
            raise InvalidParameterError("Digital payout cannot be negative or non-finite")
        if self.style is OptionStyle.BARRIER and not (
            np.isfinite(self.barrier_level) and self.barrier_level > 0
        ):
            raise InvalidParameterError("Barrier level must be positive and finite")

    @property
    def requires_paths(self) -> bool:
        """Whether pricing needs full paths rather than terminal prices."""
        return self.style not in (OptionStyle.EUROPEAN, OptionStyle.DIGITAL)

    def check_barrier(self, spot: float) -> None:
        """
        Reject a barrier that the spot price has already crossed.

        Raises:
            InvalidParameterError: If an up barrier is not above spot or a
                down barrier is not below it
        """
        if self.style is not OptionStyle.BARRIER:
            return
        if self.barrier_direction is BarrierDirection.UP and self.barrier_level <= spot:
            raise InvalidParameterError(
                f"Up barrier {self.barrier_level} must be above initial price {spot}"
            )
        if self.barrier_direction is BarrierDirection.DOWN and self.barrier_level >= spot:
            raise InvalidParameterError(
                f"Down barrier {self.barrier_level} must be below initial price {spot}"
            )

    # --- Factory methods ---

    @classmethod
    def european(cls, strike: float, is_call: bool = True, **kwargs) -> "OptionConfiguration":
        return cls(style=OptionStyle.EUROPEAN, strike=strike, is_call=is_call, **kwargs)

    @classmethod
    def asian(
        cls,
        strike: float,
        is_call: bool = True,
        averaging_type: AveragingType = AveragingType.ARITHMETIC,
        **kwargs,
    ) -> "OptionConfiguration":
        return cls(
            style=OptionStyle.ASIAN,
            strike=strike,
            is_call=is_call,
            averaging_type=averaging_type,
            **kwargs,
        )

    @classmethod
    def digital(
        cls,
        strike: float,
        is_call: bool = True,
        is_cash_or_nothing: bool = True,
        payout: float = 1.0,
        **kwargs,
    ) -> "OptionConfiguration":
        return cls(
            style=OptionStyle.DIGITAL,
            strike=strike,
            is_call=is_call,
            is_cash_or_nothing=is_cash_or_nothing,
            payout=payout,
            **kwargs,
        )

    @classmethod
    def barrier(
        cls,
        strike: float,
        barrier_level: float,
        barrier_type: BarrierType = BarrierType.KNOCK_OUT,
        barrier_direction: BarrierDirection = BarrierDirection.UP,
        is_call: bool = True,
        **kwargs,
    ) -> "OptionConfiguration":
        return cls(
            style=OptionStyle.BARRIER,
            strike=strike,
            is_call=is_call,
            barrier_level=barrier_level,
            barrier_type=barrier_type,
            barrier_direction=barrier_direction,
            **kwargs,
        )

    @classmethod
    def lookback(
        cls,
        strike: float,
        is_call: bool = True,
        lookback_type: LookbackType = LookbackType.FIXED_STRIKE,
        **kwargs,
    ) -> "OptionConfiguration":
        return cls(
            style=OptionStyle.LOOKBACK,
            strike=strike,
            is_call=is_call,
            lookback_type=lookback_type,
            **kwargs,
        )

    @classmethod
    def range_option(cls, strike: float = 0.0, **kwargs) -> "OptionConfiguration":
        """Range option paying max(path) - min(path); the strike is carried but unused."""
        return cls(style=OptionStyle.RANGE, strike=strike, **kwargs)

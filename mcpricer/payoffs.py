"""
Payoff strategies for the six option archetypes.

Each strategy subclasses Payoff and implements evaluate(), which maps
terminal prices (1D) or full paths (2D) to one payoff per output path.
build_payoffs() wraps evaluate() with the shared rules:

- path-dependent strategies refuse to run without retained paths
- under antithetic generation the payoffs of each (+Z, -Z) pair, stored at
  indices 2i and 2i+1, are averaged into a single value

payoff_for() selects and parameterizes the strategy for an OptionConfiguration.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import InvalidParameterError, MissingPathsError
from .options import (
    AveragingType,
    BarrierDirection,
    BarrierType,
    LookbackType,
    OptionConfiguration,
    OptionStyle,
)
from .parameters import SimulationParameters


def collapse_antithetic(values: np.ndarray) -> np.ndarray:
    """Average interleaved antithetic pairs: out[i] = (v[2i] + v[2i+1]) / 2."""
    values = np.asarray(values, dtype=np.float64)
    if len(values) % 2 != 0:
        raise ValueError(f"Antithetic output must have even length, got {len(values)}")
    return 0.5 * (values[0::2] + values[1::2])


def _terminal(prices: np.ndarray) -> np.ndarray:
    # Handle both terminal prices (1D) and full paths (2D)
    return prices if prices.ndim == 1 else prices[:, -1]


def _vanilla(spot: np.ndarray, strike: float, is_call: bool) -> np.ndarray:
    if is_call:
        return np.maximum(spot - strike, 0.0)
    return np.maximum(strike - spot, 0.0)


class Payoff(ABC):
    """
    Abstract base class for option payoffs.

    Attributes:
        requires_paths: True if evaluate() needs full paths, False if
            terminal prices are enough
    """

    requires_paths: bool = False

    @abstractmethod
    def evaluate(self, prices: np.ndarray) -> np.ndarray:
        """
        Evaluate the payoff for given prices.

        Args:
            prices: Terminal prices with shape (n,) or paths with shape
                (n, n_steps + 1); path-dependent payoffs require the latter

        Returns:
            Array of payoff values with shape (n,)
        """

    def build_payoffs(
        self,
        terminals: np.ndarray,
        paths: Optional[np.ndarray],
        params: SimulationParameters,
    ) -> np.ndarray:
        """
        Payoffs for one simulation output, collapsed per antithetic pair.

        Args:
            terminals: Terminal prices from the path generator
            paths: Full paths, or None if they were not retained
            params: Parameters of the run that produced the output

        Returns:
            One payoff per output path, or per pair under antithetic modes

        Raises:
            MissingPathsError: If the payoff needs paths and none were given
        """
        if self.requires_paths:
            if paths is None:
                raise MissingPathsError(
                    f"{type(self).__name__} requires full paths but path retention was disabled"
                )
            payoffs = self.evaluate(np.asarray(paths, dtype=np.float64))
        else:
            payoffs = self.evaluate(np.asarray(terminals, dtype=np.float64))

        if params.sim_mode.is_antithetic:
            return collapse_antithetic(payoffs)
        return payoffs

    def _require_2d(self, prices: np.ndarray) -> None:
        if prices.ndim != 2:
            raise MissingPathsError(f"{type(self).__name__} requires full paths")


@dataclass
class EuropeanPayoff(Payoff):
    """
    European option: max(S(T) - K, 0) for a call, max(K - S(T), 0) for a put.
    """

    strike: float
    is_call: bool = True

    def __post_init__(self):
        if not self.strike > 0:
            raise InvalidParameterError("Strike price must be positive")

    def evaluate(self, prices: np.ndarray) -> np.ndarray:
        return _vanilla(_terminal(prices), self.strike, self.is_call)


@dataclass
class AsianPayoff(Payoff):
    """
    Average-price option on the arithmetic or geometric mean of every
    price on the path, S(0) included.
    """

    strike: float
    is_call: bool = True
    averaging_type: AveragingType = AveragingType.ARITHMETIC
    requires_paths: bool = True

    def __post_init__(self):
        if not self.strike > 0:
            raise InvalidParameterError("Strike price must be positive")

    def evaluate(self, prices: np.ndarray) -> np.ndarray:
        self._require_2d(prices)
        if self.averaging_type is AveragingType.GEOMETRIC:
            average = np.exp(np.mean(np.log(prices), axis=1))
        else:
            average = np.mean(prices, axis=1)
        return _vanilla(average, self.strike, self.is_call)


@dataclass
class DigitalPayoff(Payoff):
    """
    Binary option paying if S(T) ends above (call) or below (put) the strike.

    Cash-or-nothing pays `payout`; asset-or-nothing pays S(T).
    """

    strike: float
    is_call: bool = True
    is_cash_or_nothing: bool = True
    payout: float = 1.0

    def __post_init__(self):
        if not self.strike > 0:
            raise InvalidParameterError("Strike price must be positive")

    def evaluate(self, prices: np.ndarray) -> np.ndarray:
        st = _terminal(prices)
        in_the_money = st > self.strike if self.is_call else st < self.strike
        amount = self.payout if self.is_cash_or_nothing else st
        return np.where(in_the_money, amount, 0.0)


@dataclass
class BarrierPayoff(Payoff):
    """
    Knock-in / knock-out option monitored at every simulated step.

    The barrier is hit when any price on the path reaches the level
    (>= for up, <= for down). A knock-in is active only if hit, a
    knock-out only if not; an active option pays the vanilla payoff on S(T).
    """

    strike: float
    barrier_level: float
    barrier_type: BarrierType = BarrierType.KNOCK_OUT
    barrier_direction: BarrierDirection = BarrierDirection.UP
    is_call: bool = True
    requires_paths: bool = True

    def __post_init__(self):
        if not self.strike > 0:
            raise InvalidParameterError("Strike price must be positive")
        if not self.barrier_level > 0:
            raise InvalidParameterError("Barrier level must be positive")

    def barrier_hit(self, paths: np.ndarray) -> np.ndarray:
        """Boolean mask of paths that touched the barrier."""
        self._require_2d(paths)
        if self.barrier_direction is BarrierDirection.UP:
            return np.max(paths, axis=1) >= self.barrier_level
        return np.min(paths, axis=1) <= self.barrier_level

    def evaluate(self, prices: np.ndarray) -> np.ndarray:
        hit = self.barrier_hit(prices)
        active = hit if self.barrier_type is BarrierType.KNOCK_IN else ~hit
        return np.where(active, _vanilla(prices[:, -1], self.strike, self.is_call), 0.0)


@dataclass
class LookbackPayoff(Payoff):
    """
    Lookback option on the path extremum.

    Fixed strike:    call max(max(S) - K, 0),   put max(K - min(S), 0)
    Floating strike: call max(S(T) - min(S), 0), put max(max(S) - S(T), 0)
    """

    strike: float
    is_call: bool = True
    lookback_type: LookbackType = LookbackType.FIXED_STRIKE
    requires_paths: bool = True

    def evaluate(self, prices: np.ndarray) -> np.ndarray:
        self._require_2d(prices)
        s_max = np.max(prices, axis=1)
        s_min = np.min(prices, axis=1)
        st = prices[:, -1]

        if self.lookback_type is LookbackType.FIXED_STRIKE:
            if self.is_call:
                return np.maximum(s_max - self.strike, 0.0)
            return np.maximum(self.strike - s_min, 0.0)
        if self.is_call:
            return np.maximum(st - s_min, 0.0)
        return np.maximum(s_max - st, 0.0)


@dataclass
class RangePayoff(Payoff):
    """Range option: max(S) - min(S) over the path. No strike, no call/put."""

    requires_paths: bool = True

    def evaluate(self, prices: np.ndarray) -> np.ndarray:
        self._require_2d(prices)
        return np.max(prices, axis=1) - np.min(prices, axis=1)


def payoff_for(option: OptionConfiguration) -> Payoff:
    """Build the payoff strategy for an option configuration."""
    style = option.style
    if style is OptionStyle.EUROPEAN:
        return EuropeanPayoff(strike=option.strike, is_call=option.is_call)
    if style is OptionStyle.ASIAN:
        return AsianPayoff(
            strike=option.strike,
            is_call=option.is_call,
            averaging_type=option.averaging_type,
        )
    if style is OptionStyle.DIGITAL:
        return DigitalPayoff(
            strike=option.strike,
            is_call=option.is_call,
            is_cash_or_nothing=option.is_cash_or_nothing,
            payout=option.payout,
        )
    if style is OptionStyle.BARRIER:
        return BarrierPayoff(
            strike=option.strike,
            barrier_level=option.barrier_level,
            barrier_type=option.barrier_type,
            barrier_direction=option.barrier_direction,
            is_call=option.is_call,
        )
    if style is OptionStyle.LOOKBACK:
        return LookbackPayoff(
            strike=option.strike,
            is_call=option.is_call,
            lookback_type=option.lookback_type,
        )
    if style is OptionStyle.RANGE:
        return RangePayoff()
    raise InvalidParameterError(f"Unsupported option style: {style!r}")

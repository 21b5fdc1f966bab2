"""
Monte Carlo Exotic Option Pricing Library

Prices European, Asian, digital, barrier, lookback and range options by
Monte Carlo simulation of Geometric Brownian Motion (GBM), with antithetic,
control-variate and quasi-random variance reduction and seed-synchronized
finite-difference Greeks.
"""

from .batch import PricingRecord, price_batch
from .config import DEFAULT_SETTINGS, EngineSettings
from .errors import InvalidParameterError, MissingPathsError
from .gbm import GBMPathGenerator, SimulationOutput
from .options import (
    AveragingType,
    BarrierDirection,
    BarrierType,
    LookbackType,
    OptionConfiguration,
    OptionStyle,
)
from .parameters import SimulationMode, SimulationParameters
from .payoffs import Payoff, payoff_for
from .pricing import MonteCarloPricer, PricingResult
from .random_source import RandomSource
from .rates import RateCurve

__all__ = [
    "AveragingType",
    "BarrierDirection",
    "BarrierType",
    "DEFAULT_SETTINGS",
    "EngineSettings",
    "GBMPathGenerator",
    "InvalidParameterError",
    "LookbackType",
    "MissingPathsError",
    "MonteCarloPricer",
    "OptionConfiguration",
    "OptionStyle",
    "Payoff",
    "PricingRecord",
    "PricingResult",
    "RandomSource",
    "RateCurve",
    "SimulationMode",
    "SimulationOutput",
    "SimulationParameters",
    "payoff_for",
    "price_batch",
]

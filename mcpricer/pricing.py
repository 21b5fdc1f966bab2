"""
Monte Carlo pricing engine and finite-difference Greeks.

Prices an option as the discounted average payoff under the risk-neutral
measure. Greeks are estimated by bump-and-reprice: every bumped run is
reseeded to the seed of the base run so that base and bumped simulations
share their random draws, and the finite difference measures sensitivity to
the bumped input rather than simulation noise.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional, Tuple, Union

import numpy as np

from .config import DEFAULT_SETTINGS, EngineSettings
from .errors import InvalidParameterError
from .gbm import GBMPathGenerator
from .options import OptionConfiguration
from .parameters import SimulationMode, SimulationParameters
from .payoffs import Payoff, collapse_antithetic, payoff_for
from .random_source import RandomSource
from .rates import year_fraction

logger = logging.getLogger(__name__)

_GREEKS = ("delta", "gamma", "vega", "theta", "rho")


@dataclass(frozen=True)
class PricingResult:
    """
    Result of Monte Carlo pricing.

    Greeks are either all present or all None. std_error is None in
    quasi-random mode, where the sample is deterministic.
    """

    price: float  # Present value
    std_error: Optional[float]  # Standard error of the estimate
    n_paths: int  # Paths sampled (2 * points in quasi-random mode)
    sim_mode: SimulationMode = SimulationMode.PLAIN
    seed: Optional[int] = None  # Seed shared by the base and bumped runs
    delta: Optional[float] = None
    gamma: Optional[float] = None
    vega: Optional[float] = None
    theta: Optional[float] = None
    rho: Optional[float] = None

    def __post_init__(self):
        present = [getattr(self, name) is not None for name in _GREEKS]
        if any(present) and not all(present):
            raise ValueError("Greeks must be either all set or all absent")

    @property
    def has_greeks(self) -> bool:
        return self.delta is not None

    @property
    def confidence_interval_95(self) -> Optional[Tuple[float, float]]:
        """95% confidence interval (1.96 standard errors), if a standard error exists."""
        if self.std_error is None:
            return None
        return (
            self.price - 1.96 * self.std_error,
            self.price + 1.96 * self.std_error,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["sim_mode"] = self.sim_mode.value
        return data

    def __str__(self) -> str:
        if self.std_error is None:
            text = f"Price: {self.price:.6f} (SE: n/a)"
        else:
            low, high = self.confidence_interval_95
            text = (
                f"Price: {self.price:.6f} "
                f"(SE: {self.std_error:.6f}, "
                f"95% CI: [{low:.6f}, {high:.6f}])"
            )
        if self.has_greeks:
            text += (
                f" Delta: {self.delta:.4f} Gamma: {self.gamma:.4f} "
                f"Vega: {self.vega:.4f} Theta: {self.theta:.4f} Rho: {self.rho:.4f}"
            )
        return text


def new_seed() -> int:
    """Fresh non-negative 31-bit seed from OS entropy."""
    return int(np.random.default_rng().integers(0, 2**31 - 1))


class MonteCarloPricer:
    """
    Monte Carlo engine for pricing options.

    Prices options by:
    1. Simulating price paths (or terminals) under the risk-neutral measure
    2. Evaluating the payoff for each path
    3. Discounting and averaging the payoffs

    The price estimate is E[e^(-rT) * payoff(S)]; in control-variate modes
    the zero-mean discounted hedge P&L is added to each discounted payoff.
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        generator: Optional[GBMPathGenerator] = None,
    ):
        """
        Initialize the pricer.

        Args:
            settings: Engine settings (limits and finite-difference bumps)
            generator: Path generator; built from settings if omitted
        """
        self.settings = settings or DEFAULT_SETTINGS
        self.generator = generator or GBMPathGenerator(self.settings)

    # --- Entry points ---

    def price(
        self,
        option: OptionConfiguration,
        volatility: float,
        risk_free_rate: float,
        time_steps: int,
        n_paths: int,
        compute_greeks: bool = False,
        use_parallel: bool = True,
        sim_mode: Union[SimulationMode, int, str] = SimulationMode.PLAIN,
        seed: Optional[int] = None,
        valuation_date: Optional[date] = None,
    ) -> PricingResult:
        """
        Price an option from its own spot and expiry date.

        Args:
            option: Option configuration; must carry an expiry date
            volatility: Annualized volatility
            risk_free_rate: Continuously compounded risk-free rate
            time_steps: Number of discretization steps
            n_paths: Number of base paths
            compute_greeks: Also estimate Delta, Gamma, Vega, Theta and Rho
            use_parallel: Compute path chunks on a thread pool
            sim_mode: Simulation mode (enum, name or integer code)
            seed: Seed for the random source (fresh if omitted)
            valuation_date: Date to measure time to expiry from (today if omitted)

        Returns:
            PricingResult
        """
        if option.expiry is None:
            raise InvalidParameterError("Option has no expiry date")

        params = SimulationParameters(
            initial_price=option.initial_price,
            volatility=volatility,
            risk_free_rate=risk_free_rate,
            time_to_expiry=year_fraction(option.expiry, valuation_date),
            time_steps=time_steps,
            n_paths=n_paths,
            sim_mode=sim_mode,
            reference_strike=self.reference_strike(option),
            reference_is_call=option.is_call,
            use_parallel=use_parallel,
        )
        return self.price_with_parameters(option, params, compute_greeks, seed)

    def price_with_parameters(
        self,
        option: OptionConfiguration,
        params: SimulationParameters,
        compute_greeks: bool = False,
        seed: Optional[int] = None,
    ) -> PricingResult:
        """
        Price an option with explicit simulation parameters.

        Args:
            option: Option configuration
            params: Simulation parameters (never mutated)
            compute_greeks: Also estimate the five Greeks
            seed: Seed for the random source (fresh if omitted)

        Returns:
            PricingResult

        Raises:
            InvalidParameterError: If the request is out of range, or a Greek
                bump would produce invalid parameters
        """
        self.validate(option, params)

        payoff = payoff_for(option)
        seed = new_seed() if seed is None else seed
        source = RandomSource(seed)

        price, std_error = self._run(payoff, params, source)
        logger.info(
            f"Priced {option.label or option.style.value} "
            f"(mode={params.sim_mode.value}, paths={params.effective_n_paths}, "
            f"steps={params.time_steps}): {price:.6f}"
        )

        greeks = {}
        if compute_greeks:
            greeks = self.compute_greeks(payoff, params, price, source, seed)

        return PricingResult(
            price=price,
            std_error=std_error,
            n_paths=params.effective_n_paths,
            sim_mode=params.sim_mode,
            seed=seed,
            **greeks,
        )

    # --- Validation ---

    def validate(self, option: OptionConfiguration, params: SimulationParameters) -> None:
        """
        Check a pricing request against the engine limits.

        Raises:
            InvalidParameterError: On the first violated limit
        """
        s = self.settings
        # Each check accepts only its range, so NaN fails it
        if not params.volatility <= s.max_volatility:
            raise InvalidParameterError(
                f"Volatility cannot exceed {s.max_volatility}, got {params.volatility}"
            )
        if not s.min_rate <= params.risk_free_rate <= s.max_rate:
            raise InvalidParameterError(
                f"Risk-free rate must be between {s.min_rate} and {s.max_rate}, "
                f"got {params.risk_free_rate}"
            )
        if not params.time_to_expiry <= s.max_time_to_expiry:
            raise InvalidParameterError(
                f"Time to expiry cannot exceed {s.max_time_to_expiry} years"
            )
        if not params.time_steps <= s.max_time_steps:
            raise InvalidParameterError(f"Time steps cannot exceed {s.max_time_steps}")
        if not params.n_paths <= s.max_paths:
            raise InvalidParameterError(f"Number of paths cannot exceed {s.max_paths}")
        option.check_barrier(params.initial_price)

    # --- Greeks ---

    def compute_greeks(
        self,
        payoff: Payoff,
        params: SimulationParameters,
        base_price: float,
        source: RandomSource,
        seed: int,
    ) -> dict:
        """
        Finite-difference Greeks against a base price computed with `seed`.

        Delta, Vega, Rho and Theta are forward differences; Gamma is the
        central second difference in the initial price. Theta bumps time to
        expiry down by one day, so it reports the price change per year of
        elapsed time.
        """
        s = self.settings
        bumps = {
            "delta": (s.spot_bump, {"initial_price": params.initial_price + s.spot_bump}),
            "vega": (s.vol_bump, {"volatility": params.volatility + s.vol_bump}),
            "rho": (s.rate_bump, {"risk_free_rate": params.risk_free_rate + s.rate_bump}),
            "theta": (s.time_bump, {"time_to_expiry": params.time_to_expiry - s.time_bump}),
        }

        prices = {}
        for name, (_, changes) in bumps.items():
            prices[name] = self._bumped_price(payoff, params, source, seed, name, changes)
        down = self._bumped_price(
            payoff,
            params,
            source,
            seed,
            "gamma",
            {"initial_price": params.initial_price - s.spot_bump},
        )

        greeks = {
            name: (prices[name] - base_price) / eps for name, (eps, _) in bumps.items()
        }
        greeks["gamma"] = (prices["delta"] - 2.0 * base_price + down) / s.spot_bump**2
        logger.debug(f"Greeks (seed={seed}): {greeks}")
        return greeks

    def _bumped_price(self, payoff, params, source, seed, name, changes) -> float:
        try:
            bumped = params.bumped(**changes)
        except InvalidParameterError as exc:
            raise InvalidParameterError(f"Cannot estimate {name}: {exc}") from exc
        source.seed(seed)
        price, _ = self._run(payoff, bumped, source)
        return price

    # --- Core ---

    def _run(
        self, payoff: Payoff, params: SimulationParameters, source: RandomSource
    ) -> Tuple[float, Optional[float]]:
        """One simulate -> payoff -> discount pass; returns (price, std_error)."""
        sim = self.generator.simulate(params, source, keep_paths=payoff.requires_paths)
        payoffs = payoff.build_payoffs(sim.terminals, sim.paths, params)

        discounted = params.discount_factor * payoffs
        if sim.hedge_pnl is not None:
            hedge = sim.hedge_pnl
            if params.sim_mode.is_antithetic:
                hedge = collapse_antithetic(hedge)
            discounted = discounted + hedge

        price = float(np.mean(discounted))
        if params.sim_mode.is_quasi_random:
            return price, None

        n = len(discounted)
        if n < 2:
            return price, 0.0
        return price, float(np.std(discounted, ddof=1) / np.sqrt(n))

    @staticmethod
    def reference_strike(option: OptionConfiguration) -> float:
        # Range options carry no meaningful strike; hedge at the money
        if option.strike > 0:
            return option.strike
        return option.initial_price

"""
Batch valuation of a list of options.

Each option is priced with its own underlying price, a time to expiry from
its expiry date and a risk-free rate read off the rate curve. One failing
option does not stop the batch: its record carries the error message instead
of a result.

PricingRecord echoes the inputs of every call so that a persistence layer can
append it to a pricing history as-is.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import List, Optional, Sequence, Union

from .errors import InvalidParameterError
from .options import OptionConfiguration
from .parameters import SimulationMode, SimulationParameters
from .pricing import MonteCarloPricer, PricingResult
from .rates import RateCurve, year_fraction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingRecord:
    """One pricing call: inputs, outcome and timing."""

    label: Optional[str]
    style: str
    initial_price: float
    volatility: float
    risk_free_rate: Optional[float]
    time_to_expiry: Optional[float]
    time_steps: int
    n_paths: int
    use_parallel: bool
    sim_mode: str
    result: Optional[PricingResult] = None
    error: Optional[str] = None
    execution_time_ms: float = 0.0
    priced_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    request_source: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    def to_dict(self) -> dict:
        """Flat dictionary with one key per history column."""
        data = {
            "label": self.label,
            "style": self.style,
            "initial_price": self.initial_price,
            "volatility": self.volatility,
            "risk_free_rate": self.risk_free_rate,
            "time_to_expiry": self.time_to_expiry,
            "time_steps": self.time_steps,
            "n_paths": self.n_paths,
            "use_parallel": self.use_parallel,
            "sim_mode": self.sim_mode,
            "error": self.error,
            "execution_time_ms": self.execution_time_ms,
            "priced_at": self.priced_at.isoformat(),
            "request_source": self.request_source,
        }
        result = self.result.to_dict() if self.result is not None else {}
        for key in ("price", "std_error", "seed", "delta", "gamma", "vega", "theta", "rho"):
            data[key] = result.get(key)
        return data


def price_batch(
    options: Sequence[OptionConfiguration],
    rate_curve: RateCurve,
    volatility: float = 0.2,
    time_steps: int = 252,
    n_paths: int = 10_000,
    compute_greeks: bool = True,
    use_parallel: bool = True,
    sim_mode: Union[SimulationMode, int, str] = SimulationMode.PLAIN,
    valuation_date: Optional[date] = None,
    pricer: Optional[MonteCarloPricer] = None,
    request_source: Optional[str] = "batch",
) -> List[PricingRecord]:
    """
    Price every option in the batch.

    Args:
        options: Options to price; each needs an expiry date
        rate_curve: Curve supplying the rate for each option's time to expiry
        volatility: Volatility applied to every option
        time_steps: Discretization steps per path
        n_paths: Base paths per option
        compute_greeks: Also estimate Greeks for each option
        use_parallel: Compute path chunks on a thread pool
        sim_mode: Simulation mode for every option
        valuation_date: Date to measure expiries from (today if omitted)
        pricer: Pricer to use (a default one if omitted)
        request_source: Tag copied into every record

    Returns:
        One PricingRecord per option, in input order
    """
    pricer = pricer or MonteCarloPricer()
    mode = SimulationMode.parse(sim_mode)
    records = []

    for option in options:
        started = time.perf_counter()
        t = r = None
        sampled_paths = n_paths
        result = None
        error = None
        try:
            if option.expiry is None:
                raise InvalidParameterError("Option has no expiry date")
            t = year_fraction(option.expiry, valuation_date)
            r = rate_curve.rate(t)
            params = SimulationParameters(
                initial_price=option.initial_price,
                volatility=volatility,
                risk_free_rate=r,
                time_to_expiry=t,
                time_steps=time_steps,
                n_paths=n_paths,
                sim_mode=mode,
                reference_strike=pricer.reference_strike(option),
                reference_is_call=option.is_call,
                use_parallel=use_parallel,
            )
            sampled_paths = params.effective_n_paths
            result = pricer.price_with_parameters(option, params, compute_greeks)
        except InvalidParameterError as exc:
            error = f"Failed to price option {option.label or option.style.value}: {exc}"
            logger.warning(error)

        records.append(
            PricingRecord(
                label=option.label,
                style=option.style.value,
                initial_price=option.initial_price,
                volatility=volatility,
                risk_free_rate=r,
                time_to_expiry=t,
                time_steps=time_steps,
                n_paths=sampled_paths,
                use_parallel=use_parallel,
                sim_mode=mode.value,
                result=result,
                error=error,
                execution_time_ms=(time.perf_counter() - started) * 1000.0,
                request_source=request_source,
            )
        )

    n_failed = sum(1 for record in records if not record.ok)
    logger.info(f"Priced {len(records) - n_failed}/{len(records)} options ({n_failed} failed)")
    return records

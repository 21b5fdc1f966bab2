"""
Simulation parameters and generation modes.

SimulationParameters is immutable: the Greeks engine measures sensitivities by
cloning it with one bumped field, never by mutating the caller's instance.
"""

from dataclasses import dataclass, replace
from enum import Enum

import numpy as np

from .errors import InvalidParameterError


class SimulationMode(Enum):
    """Path generation strategy."""

    PLAIN = "plain"
    ANTITHETIC = "antithetic"
    CONTROL_VARIATE = "control_variate"
    ANTITHETIC_CONTROL_VARIATE = "antithetic_control_variate"
    VAN_DER_CORPUT = "van_der_corput"

    @property
    def is_antithetic(self) -> bool:
        return self in (
            SimulationMode.ANTITHETIC,
            SimulationMode.ANTITHETIC_CONTROL_VARIATE,
        )

    @property
    def uses_control_variate(self) -> bool:
        return self in (
            SimulationMode.CONTROL_VARIATE,
            SimulationMode.ANTITHETIC_CONTROL_VARIATE,
        )

    @property
    def is_quasi_random(self) -> bool:
        return self is SimulationMode.VAN_DER_CORPUT

    @classmethod
    def parse(cls, value) -> "SimulationMode":
        """
        Resolve a mode from an enum member, its name, its value or an integer code.

        Integer codes follow the order Plain=0, Antithetic=1, ControlVariate=2,
        AntitheticAndControlVariate=3, VanDerCorput=4.

        Raises:
            InvalidParameterError: If the value names no supported mode
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
            if 0 <= value < len(_MODE_CODES):
                return _MODE_CODES[int(value)]
        elif isinstance(value, str):
            key = value.strip()
            for mode in cls:
                if key.lower() in (mode.value, mode.name.lower()):
                    return mode
        raise InvalidParameterError(f"Unsupported simulation mode: {value!r}")


_MODE_CODES = (
    SimulationMode.PLAIN,
    SimulationMode.ANTITHETIC,
    SimulationMode.CONTROL_VARIATE,
    SimulationMode.ANTITHETIC_CONTROL_VARIATE,
    SimulationMode.VAN_DER_CORPUT,
)


def _is_positive(value) -> bool:
    # NaN fails every comparison, so check the accepted range directly
    return bool(np.isfinite(value) and value > 0)


@dataclass(frozen=True)
class SimulationParameters:
    """Inputs for one GBM simulation run."""

    initial_price: float = 100.0  # Spot price S(0)
    volatility: float = 0.2  # Annualized volatility
    risk_free_rate: float = 0.05  # Continuously compounded rate
    time_to_expiry: float = 1.0  # Years
    time_steps: int = 100
    n_paths: int = 10_000  # Base paths (doubled under antithetic pairing)
    sim_mode: SimulationMode = SimulationMode.PLAIN
    reference_strike: float = 100.0  # Strike of the control-variate hedge
    reference_is_call: bool = True  # Hedge with a call (True) or put delta
    vdc_base1: int = 2  # Quasi-random settings, used only in VAN_DER_CORPUT
    vdc_base2: int = 5
    vdc_points: int = 1024
    use_parallel: bool = False

    def __post_init__(self):
        object.__setattr__(self, "sim_mode", SimulationMode.parse(self.sim_mode))

        if not _is_positive(self.initial_price):
            raise InvalidParameterError("Initial price must be positive and finite")
        if not _is_positive(self.volatility):
            raise InvalidParameterError("Volatility must be positive and finite")
        if not np.isfinite(self.risk_free_rate):
            raise InvalidParameterError("Risk-free rate must be finite")
        if not _is_positive(self.time_to_expiry):
            raise InvalidParameterError("Time to expiry must be positive and finite")
        if self.time_steps <= 0:
            raise InvalidParameterError("Number of time steps must be positive")
        if self.n_paths <= 0:
            raise InvalidParameterError("Number of paths must be positive")
        if not _is_positive(self.reference_strike):
            raise InvalidParameterError("Reference strike must be positive and finite")
        if self.sim_mode.is_quasi_random:
            if self.vdc_base1 < 2 or self.vdc_base2 < 2:
                raise InvalidParameterError("Van der Corput bases must be >= 2")
            if self.vdc_base1 == self.vdc_base2:
                raise InvalidParameterError("Van der Corput bases must be distinct")
            if self.vdc_points <= 0:
                raise InvalidParameterError("Number of Van der Corput points must be positive")

    # --- Derived quantities ---

    @property
    def dt(self) -> float:
        return self.time_to_expiry / self.time_steps

    @property
    def drift_per_step(self) -> float:
        """Log drift per step: (r - σ²/2) dt."""
        return (self.risk_free_rate - 0.5 * self.volatility**2) * self.dt

    @property
    def diffusion_per_step(self) -> float:
        """Log diffusion scale per step: σ √dt."""
        return self.volatility * np.sqrt(self.dt)

    @property
    def discount_factor(self) -> float:
        return float(np.exp(-self.risk_free_rate * self.time_to_expiry))

    @property
    def n_outputs(self) -> int:
        """Number of terminal prices one simulation emits."""
        if self.sim_mode.is_quasi_random:
            return 2 * self.vdc_points
        if self.sim_mode.is_antithetic:
            return 2 * self.n_paths
        return self.n_paths

    @property
    def effective_n_paths(self) -> int:
        """Paths a run actually samples; quasi-random mode ignores n_paths."""
        if self.sim_mode.is_quasi_random:
            return self.n_outputs
        return self.n_paths

    def bumped(self, **changes) -> "SimulationParameters":
        """Validated copy with the given fields replaced."""
        return replace(self, **changes)

    # --- Factory methods ---

    @classmethod
    def default(cls) -> "SimulationParameters":
        """Plain Monte Carlo with the default inputs."""
        return cls()

    @classmethod
    def antithetic(cls, n_paths: int, time_steps: int, **kwargs) -> "SimulationParameters":
        return cls(
            n_paths=n_paths,
            time_steps=time_steps,
            sim_mode=SimulationMode.ANTITHETIC,
            **kwargs,
        )

    @classmethod
    def van_der_corput(
        cls, base1: int, base2: int, points: int, **kwargs
    ) -> "SimulationParameters":
        return cls(
            vdc_base1=base1,
            vdc_base2=base2,
            vdc_points=points,
            sim_mode=SimulationMode.VAN_DER_CORPUT,
            **kwargs,
        )

    @classmethod
    def control_variate(
        cls, n_paths: int, time_steps: int, **kwargs
    ) -> "SimulationParameters":
        return cls(
            n_paths=n_paths,
            time_steps=time_steps,
            sim_mode=SimulationMode.CONTROL_VARIATE,
            **kwargs,
        )

    @classmethod
    def antithetic_control_variate(
        cls, n_paths: int, time_steps: int, **kwargs
    ) -> "SimulationParameters":
        return cls(
            n_paths=n_paths,
            time_steps=time_steps,
            sim_mode=SimulationMode.ANTITHETIC_CONTROL_VARIATE,
            **kwargs,
        )

"""
Engine settings for the Monte Carlo pricer.

All settings are immutable (frozen dataclasses) so that a pricing call can
never change the limits or finite-difference bumps another call relies on.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class EngineSettings:
    """
    Tunables shared by the path generator and the pricer.

    Attributes:
        max_volatility: Upper bound accepted for annualized volatility
        min_rate: Lower bound accepted for the risk-free rate
        max_rate: Upper bound accepted for the risk-free rate
        max_time_to_expiry: Longest accepted expiry, in years
        max_time_steps: Largest accepted number of discretization steps
        max_paths: Largest accepted number of base paths
        spot_bump: Initial price bump for Delta and Gamma
        vol_bump: Volatility bump for Vega
        rate_bump: Risk-free rate bump for Rho
        time_bump: Time-to-expiry decrement for Theta (one day)
        chunk_size: Base paths per parallel work item
        max_workers: Thread pool size (None lets the executor decide)
    """

    # Request limits
    max_volatility: float = 5.0
    min_rate: float = -0.10
    max_rate: float = 1.0
    max_time_to_expiry: float = 50.0
    max_time_steps: int = 10_000
    max_paths: int = 1_000_000

    # Finite-difference bumps
    spot_bump: float = 1.0
    vol_bump: float = 0.01
    rate_bump: float = 0.0001
    time_bump: float = 1.0 / 365.0

    # Parallel execution
    chunk_size: int = 2048
    max_workers: Optional[int] = None

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {self.chunk_size}")
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError(f"max_workers must be > 0, got {self.max_workers}")
        for name in ("spot_bump", "vol_bump", "rate_bump", "time_bump"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)}")

    @classmethod
    def from_env(cls, **overrides) -> "EngineSettings":
        """
        Build settings with parallelism overrides read from the environment.

        Recognized variables are MCPRICER_MAX_WORKERS and MCPRICER_CHUNK_SIZE.
        Keyword overrides take precedence over the environment.
        """
        settings = cls()
        env_workers = os.environ.get("MCPRICER_MAX_WORKERS")
        env_chunk = os.environ.get("MCPRICER_CHUNK_SIZE")
        if env_workers:
            settings = replace(settings, max_workers=int(env_workers))
        if env_chunk:
            settings = replace(settings, chunk_size=int(env_chunk))
        if overrides:
            settings = replace(settings, **overrides)
        return settings


DEFAULT_SETTINGS = EngineSettings()

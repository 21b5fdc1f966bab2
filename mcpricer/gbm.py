"""
Geometric Brownian Motion (GBM) path generation for risk-neutral pricing.

The GBM model assumes stock prices follow:
    dS = rS dt + σS dW

and each step is advanced with the exact log-normal update:
    S(t+dt) = S(t) * exp((r - σ²/2)dt + σ√dt * Z)

Supported generation modes:
    PLAIN                       N terminals from fresh draws
    ANTITHETIC                  2N terminals, +Z path at 2i and -Z path at 2i+1
    VAN_DER_CORPUT              2 * points terminals from quasi-random normals
    CONTROL_VARIATE             N terminals plus a discounted delta-hedge P&L
    ANTITHETIC_CONTROL_VARIATE  2N terminals plus hedge P&L, paired as above

Base paths are processed in fixed-size chunks. Normals for every chunk are
drawn on the calling thread in chunk order, so the output for a given seed
does not depend on whether chunks are then computed serially or on a pool.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .analytics import black_scholes_delta
from .config import DEFAULT_SETTINGS, EngineSettings
from .parameters import SimulationMode, SimulationParameters
from .random_source import RandomSource, quasi_normal_pairs

logger = logging.getLogger(__name__)


@dataclass
class SimulationOutput:
    """
    Output of one simulation run.

    Attributes:
        terminals: Terminal prices with shape (n_outputs,)
        paths: Full price paths with shape (n_outputs, n_steps + 1), or None
            when path retention was not requested
        hedge_pnl: Discounted delta-hedge P&L per output path (control-variate
            modes only), or None
    """

    terminals: np.ndarray
    paths: Optional[np.ndarray] = None
    hedge_pnl: Optional[np.ndarray] = None

    def __post_init__(self):
        if self.paths is not None and len(self.paths) != len(self.terminals):
            raise ValueError(
                f"paths ({len(self.paths)}) and terminals ({len(self.terminals)}) "
                "must be index-aligned"
            )
        if self.hedge_pnl is not None and len(self.hedge_pnl) != len(self.terminals):
            raise ValueError(
                f"hedge_pnl ({len(self.hedge_pnl)}) and terminals ({len(self.terminals)}) "
                "must be index-aligned"
            )

    @property
    def n_outputs(self) -> int:
        return len(self.terminals)


@dataclass
class _Chunk:
    """Slice [start, stop) of base paths and the normals that drive it."""

    start: int
    stop: int
    normals: np.ndarray  # shape (stop - start, n_steps)


class GBMPathGenerator:
    """
    Generator for GBM terminal prices and full paths.

    The generator is stateless between calls; all randomness comes from the
    RandomSource passed to simulate(), which the caller owns.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        """
        Initialize the path generator.

        Args:
            settings: Engine settings (chunk size and thread pool size)
        """
        self.settings = settings or DEFAULT_SETTINGS

    # --- Entry points ---

    def simulate(
        self,
        params: SimulationParameters,
        source: RandomSource,
        keep_paths: bool = False,
    ) -> SimulationOutput:
        """
        Run one simulation in the mode selected by params.sim_mode.

        Args:
            params: Simulation parameters
            source: Random source, already seeded by the caller
            keep_paths: Retain every step's price (needed by path-dependent payoffs)

        Returns:
            SimulationOutput with index-aligned terminals, paths and hedge P&L
        """
        mode = params.sim_mode
        logger.debug(
            f"Simulating {params.n_outputs} outputs "
            f"(mode={mode.value}, steps={params.time_steps}, "
            f"keep_paths={keep_paths}, parallel={params.use_parallel})"
        )

        if mode is SimulationMode.VAN_DER_CORPUT:
            return self._simulate_quasi_random(params, keep_paths)
        if mode in (SimulationMode.PLAIN, SimulationMode.ANTITHETIC):
            return self._run_chunks(params, source, keep_paths, self._advance_chunk)
        if mode.uses_control_variate:
            return self._run_chunks(params, source, keep_paths, self._advance_chunk_hedged)
        raise ValueError(f"Unsupported simulation mode: {mode!r}")

    def simulate_terminals(
        self, params: SimulationParameters, source: RandomSource
    ) -> np.ndarray:
        """Terminal prices only."""
        return self.simulate(params, source).terminals

    def simulate_paths(
        self, params: SimulationParameters, source: RandomSource
    ) -> np.ndarray:
        """
        Full price paths.

        Returns:
            Array with shape (n_outputs, n_steps + 1); the first column is S(0)
        """
        return self.simulate(params, source, keep_paths=True).paths

    def get_time_grid(self, params: SimulationParameters) -> np.ndarray:
        """
        Get the time grid for path simulation.

        Returns:
            Array of time points with shape (n_steps + 1,)
        """
        return np.linspace(0, params.time_to_expiry, params.time_steps + 1)

    # --- Chunked stepping (plain, antithetic, control variate) ---

    def _iter_chunks(
        self, params: SimulationParameters, source: RandomSource
    ) -> Iterator[_Chunk]:
        chunk_size = self.settings.chunk_size
        for start in range(0, params.n_paths, chunk_size):
            stop = min(start + chunk_size, params.n_paths)
            normals = source.standard_normals((stop - start, params.time_steps))
            yield _Chunk(start, stop, normals)

    def _run_chunks(self, params, source, keep_paths, advance) -> SimulationOutput:
        n_out = params.n_outputs
        antithetic = params.sim_mode.is_antithetic

        # Pre-sized outputs; every chunk writes only its own index slice
        terminals = np.empty(n_out)
        paths = np.empty((n_out, params.time_steps + 1)) if keep_paths else None
        hedge = np.empty(n_out) if params.sim_mode.uses_control_variate else None

        def work(chunk: _Chunk) -> None:
            signs = (1.0, -1.0) if antithetic else (1.0,)
            for offset, sign in enumerate(signs):
                if antithetic:
                    idx = slice(2 * chunk.start + offset, 2 * chunk.stop, 2)
                else:
                    idx = slice(chunk.start, chunk.stop)
                chunk_terminals, chunk_paths, chunk_hedge = advance(
                    params, sign * chunk.normals, keep_paths
                )
                terminals[idx] = chunk_terminals
                if paths is not None:
                    paths[idx] = chunk_paths
                if hedge is not None:
                    hedge[idx] = chunk_hedge

        chunks = self._iter_chunks(params, source)
        if params.use_parallel:
            self._run_parallel(work, chunks)
        else:
            for chunk in chunks:
                work(chunk)

        return SimulationOutput(terminals=terminals, paths=paths, hedge_pnl=hedge)

    def _run_parallel(self, work, chunks: Iterator[_Chunk]) -> None:
        """
        Run work over chunks on a thread pool.

        Chunks are drawn in batches of one per worker so that at most one
        batch of normals is held in memory at a time.
        """
        # Same default as ThreadPoolExecutor
        batch_size = self.settings.max_workers or min(32, (os.cpu_count() or 1) + 4)
        with ThreadPoolExecutor(max_workers=batch_size) as executor:
            while True:
                batch: List[_Chunk] = []
                for chunk in chunks:
                    batch.append(chunk)
                    if len(batch) == batch_size:
                        break
                if not batch:
                    break
                # list() re-raises the first worker exception, if any
                list(executor.map(work, batch))

    @staticmethod
    def _advance_chunk(
        params: SimulationParameters, z: np.ndarray, keep_paths: bool
    ) -> Tuple[np.ndarray, Optional[np.ndarray], None]:
        """Step a block of paths driven by normals z of shape (m, n_steps)."""
        s0 = params.initial_price
        log_returns = params.drift_per_step + params.diffusion_per_step * z

        if not keep_paths:
            return s0 * np.exp(np.sum(log_returns, axis=1)), None, None

        paths = np.empty((z.shape[0], z.shape[1] + 1))
        paths[:, 0] = s0
        paths[:, 1:] = s0 * np.exp(np.cumsum(log_returns, axis=1))
        return paths[:, -1].copy(), paths, None

    @staticmethod
    def _advance_chunk_hedged(
        params: SimulationParameters, z: np.ndarray, keep_paths: bool
    ) -> Tuple[np.ndarray, Optional[np.ndarray], np.ndarray]:
        """
        Step a block of paths while rebalancing a Black-Scholes delta hedge.

        The hedge is short Δ(t_j, S_j) shares over each step. Its P&L,
        discounted to time 0, is

            -Σ_j Δ_j (S_{j+1} - S_j e^{r dt}) e^{-r t_{j+1}}

        which has zero risk-neutral expectation, so adding it to the
        discounted payoff reduces variance without biasing the price.
        """
        m, n_steps = z.shape
        r = params.risk_free_rate
        sigma = params.volatility
        dt = params.dt
        drift = params.drift_per_step
        diffusion = params.diffusion_per_step
        growth = np.exp(r * dt)

        s = np.full(m, params.initial_price)
        hedge = np.zeros(m)
        paths = None
        if keep_paths:
            paths = np.empty((m, n_steps + 1))
            paths[:, 0] = s

        for j in range(n_steps):
            tau = params.time_to_expiry - j * dt
            delta = black_scholes_delta(
                s, params.reference_strike, tau, r, sigma, params.reference_is_call
            )
            s_next = s * np.exp(drift + diffusion * z[:, j])
            hedge -= delta * (s_next - s * growth) * np.exp(-r * (j + 1) * dt)
            s = s_next
            if paths is not None:
                paths[:, j + 1] = s

        return s, paths, hedge

    # --- Quasi-random ---

    def _simulate_quasi_random(
        self, params: SimulationParameters, keep_paths: bool
    ) -> SimulationOutput:
        """
        Terminal sampling from Van der Corput normals.

        Each point yields two terminals from the closed-form GBM solution
        S(T) = S(0) * exp((r - σ²/2)T + σ√T * Z), stored at 2i and 2i+1.
        There is no per-step discretization; retained paths are [S(0), S(T)].
        """
        z1, z2 = quasi_normal_pairs(params.vdc_points, params.vdc_base1, params.vdc_base2)
        z = np.empty(2 * params.vdc_points)
        z[0::2] = z1
        z[1::2] = z2

        t = params.time_to_expiry
        sigma = params.volatility
        s0 = params.initial_price
        terminals = s0 * np.exp(
            (params.risk_free_rate - 0.5 * sigma**2) * t + sigma * np.sqrt(t) * z
        )

        paths = None
        if keep_paths:
            paths = np.empty((len(terminals), 2))
            paths[:, 0] = s0
            paths[:, 1] = terminals

        return SimulationOutput(terminals=terminals, paths=paths)

"""
Closed-form Black-Scholes formulas.

Used by the control-variate hedge (delta) and for validating Monte Carlo
prices against analytical references.
"""

import numpy as np
from scipy.stats import norm

# Remaining time below which the delta collapses to its expiry value
_EXPIRY_EPS = 1e-12


def _d1_d2(s0, k, t, r, sigma):
    d1 = (np.log(s0 / k) + (r + 0.5 * sigma**2) * t) / (sigma * np.sqrt(t))
    d2 = d1 - sigma * np.sqrt(t)
    return d1, d2


def black_scholes_call(s0: float, k: float, t: float, r: float, sigma: float) -> float:
    """
    Black-Scholes value of a European call: S·N(d1) - K·e^(-rT)·N(d2).

    Shares d1/d2 with the digital closed form. The Monte Carlo estimate of a
    European call converges to this value.
    """
    d1, d2 = _d1_d2(s0, k, t, r, sigma)
    return float(s0 * norm.cdf(d1) - k * np.exp(-r * t) * norm.cdf(d2))


def black_scholes_put(s0: float, k: float, t: float, r: float, sigma: float) -> float:
    """Black-Scholes value of a European put."""
    d1, d2 = _d1_d2(s0, k, t, r, sigma)
    return float(k * np.exp(-r * t) * norm.cdf(-d2) - s0 * norm.cdf(-d1))


def digital_cash_or_nothing_price(
    s0: float,
    k: float,
    t: float,
    r: float,
    sigma: float,
    is_call: bool = True,
    payout: float = 1.0,
) -> float:
    """Price of a cash-or-nothing digital: payout * e^(-rT) * N(±d2)."""
    _, d2 = _d1_d2(s0, k, t, r, sigma)
    prob = norm.cdf(d2) if is_call else norm.cdf(-d2)
    return float(payout * np.exp(-r * t) * prob)


def black_scholes_delta(spot, strike: float, tau: float, r: float, sigma: float, is_call: bool = True):
    """
    Black-Scholes delta for a spot price or an array of spot prices.

    At (or numerically at) expiry the delta is the payoff slope: 1 or 0 for
    a call, -1 or 0 for a put, depending on moneyness.

    Args:
        spot: Current underlying price(s)
        strike: Option strike
        tau: Remaining time to expiry in years
        r: Risk-free rate
        sigma: Volatility
        is_call: Call delta N(d1) if True, put delta N(d1) - 1 otherwise

    Returns:
        Delta with the shape of spot (a float for scalar input)
    """
    spot = np.asarray(spot, dtype=np.float64)

    if tau <= _EXPIRY_EPS:
        if is_call:
            delta = np.where(spot > strike, 1.0, 0.0)
        else:
            delta = np.where(spot < strike, -1.0, 0.0)
    else:
        d1 = (np.log(spot / strike) + (r + 0.5 * sigma**2) * tau) / (sigma * np.sqrt(tau))
        delta = norm.cdf(d1) if is_call else norm.cdf(d1) - 1.0

    return float(delta) if delta.ndim == 0 else delta

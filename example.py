#!/usr/bin/env python3
"""
Example usage of the Monte Carlo option pricing library.

Prices a European call under every simulation mode and compares it with the
Black-Scholes price, then prices one option of each exotic archetype with
Greeks, and finally values a small book against a rate curve.
"""

import logging
from datetime import date, timedelta

from mcpricer import (
    AveragingType,
    BarrierDirection,
    BarrierType,
    LookbackType,
    MonteCarloPricer,
    OptionConfiguration,
    RateCurve,
    SimulationMode,
    SimulationParameters,
    price_batch,
)
from mcpricer.analytics import black_scholes_call


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    # Market parameters
    s0 = 100.0  # Initial stock price
    k = 100.0  # Strike price
    t = 1.0  # Time to maturity (1 year)
    r = 0.05  # Risk-free rate (5%)
    sigma = 0.2  # Volatility (20%)

    print("=" * 60)
    print("Monte Carlo Exotic Option Pricing")
    print("=" * 60)
    print(f"\nMarket Parameters:")
    print(f"  Initial price (S0): ${s0:.2f}")
    print(f"  Strike price (K):   ${k:.2f}")
    print(f"  Time to maturity:   {t:.2f} years")
    print(f"  Risk-free rate:     {r:.1%}")
    print(f"  Volatility:         {sigma:.1%}")

    pricer = MonteCarloPricer()
    call = OptionConfiguration.european(strike=k, initial_price=s0)
    bs_call = black_scholes_call(s0, k, t, r, sigma)

    # European call under each simulation mode
    print("\n" + "-" * 60)
    print(f"European Call (Black-Scholes: {bs_call:.6f})")
    print("-" * 60)

    for mode in SimulationMode:
        params = SimulationParameters(
            initial_price=s0,
            volatility=sigma,
            risk_free_rate=r,
            time_to_expiry=t,
            time_steps=100,
            n_paths=50_000,
            sim_mode=mode,
            reference_strike=k,
            use_parallel=True,
        )
        result = pricer.price_with_parameters(call, params, seed=42)
        print(f"  {mode.value:<28} {result}")

    # Exotic archetypes with Greeks
    print("\n" + "-" * 60)
    print("Exotic Options (antithetic, 252 steps, with Greeks)")
    print("-" * 60)

    exotics = {
        "Asian arithmetic call": OptionConfiguration.asian(k, averaging_type=AveragingType.ARITHMETIC),
        "Asian geometric call": OptionConfiguration.asian(k, averaging_type=AveragingType.GEOMETRIC),
        "Digital cash call": OptionConfiguration.digital(k, payout=1.0),
        "Up-and-out call (B=130)": OptionConfiguration.barrier(
            k, 130.0, BarrierType.KNOCK_OUT, BarrierDirection.UP
        ),
        "Down-and-in put (B=80)": OptionConfiguration.barrier(
            k, 80.0, BarrierType.KNOCK_IN, BarrierDirection.DOWN, is_call=False
        ),
        "Lookback fixed call": OptionConfiguration.lookback(k),
        "Lookback floating put": OptionConfiguration.lookback(
            k, is_call=False, lookback_type=LookbackType.FLOATING_STRIKE
        ),
        "Range": OptionConfiguration.range_option(),
    }
    params = SimulationParameters.antithetic(
        n_paths=20_000,
        time_steps=252,
        initial_price=s0,
        volatility=sigma,
        risk_free_rate=r,
        time_to_expiry=t,
    )
    for name, option in exotics.items():
        result = pricer.price_with_parameters(option, params, compute_greeks=True, seed=7)
        print(f"  {name:<26} {result}")

    # Portfolio valuation against a rate curve
    print("\n" + "-" * 60)
    print("Book Valuation")
    print("-" * 60)

    today = date.today()
    curve = RateCurve([(0.25, 0.045), (1.0, 0.048), (2.0, 0.042), (5.0, 0.040)])
    book = [
        OptionConfiguration.european(105, expiry=today + timedelta(days=90), initial_price=102, label="ACME 3M C105"),
        OptionConfiguration.asian(95, is_call=False, expiry=today + timedelta(days=365), initial_price=98, label="ACME 1Y AP95"),
        OptionConfiguration.barrier(
            100, 90, BarrierType.KNOCK_OUT, BarrierDirection.DOWN,
            expiry=today + timedelta(days=180), initial_price=88, label="BAD already knocked",
        ),
    ]
    for record in price_batch(book, curve, n_paths=10_000, time_steps=100, valuation_date=today):
        outcome = record.result if record.ok else record.error
        print(f"  {record.label:<22} r={record.risk_free_rate} {outcome}")

    print("\n" + "=" * 60)
    print("Simulation complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()

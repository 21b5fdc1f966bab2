"""Unit tests for option configurations."""

from datetime import date

import pytest

from mcpricer.errors import InvalidParameterError
from mcpricer.options import (
    AveragingType,
    BarrierDirection,
    BarrierType,
    LookbackType,
    OptionConfiguration,
    OptionStyle,
)


class TestOptionConfiguration:
    """Tests for OptionConfiguration validation and factories."""

    def test_european_factory(self):
        option = OptionConfiguration.european(105.0, is_call=False, expiry=date(2030, 1, 1))
        assert option.style is OptionStyle.EUROPEAN
        assert option.strike == 105.0
        assert not option.is_call
        assert option.expiry == date(2030, 1, 1)
        assert not option.requires_paths

    def test_asian_factory(self):
        option = OptionConfiguration.asian(100.0, averaging_type=AveragingType.GEOMETRIC)
        assert option.style is OptionStyle.ASIAN
        assert option.averaging_type is AveragingType.GEOMETRIC
        assert option.requires_paths

    def test_digital_factory(self):
        option = OptionConfiguration.digital(100.0, is_cash_or_nothing=False, payout=5.0)
        assert option.style is OptionStyle.DIGITAL
        assert not option.is_cash_or_nothing
        assert option.payout == 5.0
        assert not option.requires_paths

    def test_barrier_factory(self):
        option = OptionConfiguration.barrier(
            100.0, 80.0, BarrierType.KNOCK_IN, BarrierDirection.DOWN, is_call=False
        )
        assert option.style is OptionStyle.BARRIER
        assert option.barrier_level == 80.0
        assert option.barrier_type is BarrierType.KNOCK_IN
        assert option.barrier_direction is BarrierDirection.DOWN
        assert option.requires_paths

    def test_lookback_factory(self):
        option = OptionConfiguration.lookback(
            100.0, lookback_type=LookbackType.FLOATING_STRIKE
        )
        assert option.style is OptionStyle.LOOKBACK
        assert option.lookback_type is LookbackType.FLOATING_STRIKE

    def test_range_allows_zero_strike(self):
        option = OptionConfiguration.range_option()
        assert option.style is OptionStyle.RANGE
        assert option.strike == 0.0
        assert option.requires_paths

    def test_range_negative_strike_raises(self):
        with pytest.raises(InvalidParameterError, match="cannot be negative"):
            OptionConfiguration.range_option(strike=-1.0)

    @pytest.mark.parametrize("strike", [0.0, -10.0])
    def test_non_positive_strike_raises(self, strike):
        with pytest.raises(InvalidParameterError, match="Strike price must be positive"):
            OptionConfiguration.european(strike)

    @pytest.mark.parametrize("strike", [float("nan"), float("inf")])
    def test_non_finite_strike_raises(self, strike):
        with pytest.raises(InvalidParameterError, match="Strike price"):
            OptionConfiguration.european(strike)

    def test_nan_strike_rejected_for_range(self):
        with pytest.raises(InvalidParameterError, match="Strike price"):
            OptionConfiguration.range_option(strike=float("nan"))

    @pytest.mark.parametrize("spot", [float("nan"), float("inf")])
    def test_non_finite_initial_price_raises(self, spot):
        with pytest.raises(InvalidParameterError, match="Initial price"):
            OptionConfiguration.european(100.0, initial_price=spot)

    def test_nan_payout_raises(self):
        with pytest.raises(InvalidParameterError, match="payout"):
            OptionConfiguration.digital(100.0, payout=float("nan"))

    def test_nan_barrier_level_raises(self):
        with pytest.raises(InvalidParameterError, match="Barrier level"):
            OptionConfiguration.barrier(100.0, float("nan"))

    def test_non_positive_initial_price_raises(self):
        with pytest.raises(InvalidParameterError, match="Initial price must be positive"):
            OptionConfiguration.european(100.0, initial_price=0.0)

    def test_negative_payout_raises(self):
        with pytest.raises(InvalidParameterError, match="payout cannot be negative"):
            OptionConfiguration.digital(100.0, payout=-1.0)

    def test_barrier_level_required(self):
        with pytest.raises(InvalidParameterError, match="Barrier level must be positive"):
            OptionConfiguration.barrier(100.0, 0.0)

    def test_unknown_style_raises(self):
        with pytest.raises(InvalidParameterError):
            OptionConfiguration(style="exotic", strike=100.0)

    def test_immutable(self):
        option = OptionConfiguration.european(100.0)
        with pytest.raises(AttributeError):
            option.strike = 90.0


class TestCheckBarrier:
    """Tests for the barrier-vs-spot check."""

    def test_up_barrier_above_spot_ok(self):
        OptionConfiguration.barrier(100.0, 120.0).check_barrier(100.0)

    def test_up_barrier_at_spot_raises(self):
        option = OptionConfiguration.barrier(100.0, 100.0)
        with pytest.raises(InvalidParameterError, match="Up barrier"):
            option.check_barrier(100.0)

    def test_down_barrier_below_spot_ok(self):
        option = OptionConfiguration.barrier(
            100.0, 80.0, barrier_direction=BarrierDirection.DOWN
        )
        option.check_barrier(100.0)

    def test_down_barrier_above_spot_raises(self):
        option = OptionConfiguration.barrier(
            100.0, 90.0, barrier_direction=BarrierDirection.DOWN
        )
        with pytest.raises(InvalidParameterError, match="Down barrier 90.0 must be below"):
            option.check_barrier(88.0)

    def test_ignored_for_other_styles(self):
        OptionConfiguration.european(100.0).check_barrier(1.0)

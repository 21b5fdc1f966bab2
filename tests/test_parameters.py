"""Unit tests for SimulationParameters and SimulationMode."""

import numpy as np
import pytest

from mcpricer.config import EngineSettings
from mcpricer.errors import InvalidParameterError
from mcpricer.parameters import SimulationMode, SimulationParameters


class TestSimulationMode:
    """Tests for mode flags and parsing."""

    def test_flags(self):
        assert SimulationMode.ANTITHETIC.is_antithetic
        assert SimulationMode.ANTITHETIC_CONTROL_VARIATE.is_antithetic
        assert not SimulationMode.CONTROL_VARIATE.is_antithetic
        assert SimulationMode.CONTROL_VARIATE.uses_control_variate
        assert SimulationMode.ANTITHETIC_CONTROL_VARIATE.uses_control_variate
        assert not SimulationMode.PLAIN.uses_control_variate
        assert SimulationMode.VAN_DER_CORPUT.is_quasi_random
        assert not SimulationMode.VAN_DER_CORPUT.is_antithetic

    @pytest.mark.parametrize(
        "code, expected",
        [
            (0, SimulationMode.PLAIN),
            (1, SimulationMode.ANTITHETIC),
            (2, SimulationMode.CONTROL_VARIATE),
            (3, SimulationMode.ANTITHETIC_CONTROL_VARIATE),
            (4, SimulationMode.VAN_DER_CORPUT),
        ],
    )
    def test_parse_integer_codes(self, code, expected):
        assert SimulationMode.parse(code) is expected

    def test_parse_names_and_values(self):
        assert SimulationMode.parse("antithetic") is SimulationMode.ANTITHETIC
        assert SimulationMode.parse("VAN_DER_CORPUT") is SimulationMode.VAN_DER_CORPUT
        assert SimulationMode.parse(SimulationMode.PLAIN) is SimulationMode.PLAIN

    @pytest.mark.parametrize("value", [5, -1, "sobol", None, True, 1.5])
    def test_parse_unsupported_raises(self, value):
        with pytest.raises(InvalidParameterError, match="Unsupported simulation mode"):
            SimulationMode.parse(value)


class TestSimulationParameters:
    """Tests for the SimulationParameters value object."""

    def test_defaults(self):
        params = SimulationParameters()
        assert params.initial_price == 100.0
        assert params.sim_mode is SimulationMode.PLAIN
        assert params.vdc_base1 == 2
        assert params.vdc_base2 == 5
        assert params.vdc_points == 1024

    def test_mode_coerced_from_code(self):
        params = SimulationParameters(sim_mode=1)
        assert params.sim_mode is SimulationMode.ANTITHETIC

    def test_unsupported_mode_raises(self):
        with pytest.raises(InvalidParameterError):
            SimulationParameters(sim_mode="heston")

    @pytest.mark.parametrize(
        "field, value, message",
        [
            ("initial_price", 0.0, "Initial price must be positive"),
            ("volatility", 0.0, "Volatility must be positive"),
            ("volatility", -0.2, "Volatility must be positive"),
            ("time_to_expiry", 0.0, "Time to expiry must be positive"),
            ("time_steps", 0, "time steps must be positive"),
            ("n_paths", 0, "paths must be positive"),
            ("reference_strike", 0.0, "Reference strike must be positive"),
            ("initial_price", float("nan"), "Initial price must be positive"),
            ("volatility", float("nan"), "Volatility must be positive"),
            ("volatility", float("inf"), "Volatility must be positive"),
            ("time_to_expiry", float("nan"), "Time to expiry must be positive"),
            ("time_to_expiry", float("inf"), "Time to expiry must be positive"),
            ("reference_strike", float("nan"), "Reference strike must be positive"),
            ("risk_free_rate", float("nan"), "Risk-free rate must be finite"),
        ],
    )
    def test_invalid_values_raise(self, field, value, message):
        with pytest.raises(InvalidParameterError, match=message):
            SimulationParameters(**{field: value})

    def test_invalid_parameter_error_is_value_error(self):
        with pytest.raises(ValueError):
            SimulationParameters(volatility=-1.0)

    def test_quasi_random_bases_must_differ(self):
        with pytest.raises(InvalidParameterError, match="distinct"):
            SimulationParameters.van_der_corput(3, 3, 100)

    def test_quasi_random_bases_ignored_in_other_modes(self):
        params = SimulationParameters(vdc_base1=3, vdc_base2=3)
        assert params.sim_mode is SimulationMode.PLAIN

    def test_immutable(self):
        params = SimulationParameters()
        with pytest.raises(AttributeError):
            params.volatility = 0.3

    def test_bumped_returns_copy(self):
        params = SimulationParameters(initial_price=100.0)
        bumped = params.bumped(initial_price=101.0)
        assert bumped.initial_price == 101.0
        assert params.initial_price == 100.0
        assert bumped.volatility == params.volatility

    def test_bumped_is_validated(self):
        params = SimulationParameters(time_to_expiry=0.001)
        with pytest.raises(InvalidParameterError):
            params.bumped(time_to_expiry=params.time_to_expiry - 1.0 / 365.0)

    def test_step_quantities(self):
        params = SimulationParameters(
            volatility=0.2, risk_free_rate=0.05, time_to_expiry=1.0, time_steps=4
        )
        assert params.dt == pytest.approx(0.25)
        assert params.drift_per_step == pytest.approx((0.05 - 0.02) * 0.25)
        assert params.diffusion_per_step == pytest.approx(0.1)
        assert params.discount_factor == pytest.approx(np.exp(-0.05))

    def test_n_outputs(self):
        assert SimulationParameters(n_paths=10).n_outputs == 10
        assert SimulationParameters.antithetic(10, 5).n_outputs == 20
        assert SimulationParameters.control_variate(10, 5).n_outputs == 10
        assert SimulationParameters.antithetic_control_variate(10, 5).n_outputs == 20
        assert SimulationParameters.van_der_corput(2, 3, 64).n_outputs == 128

    def test_effective_n_paths(self):
        assert SimulationParameters(n_paths=10).effective_n_paths == 10
        assert SimulationParameters.antithetic(10, 5).effective_n_paths == 10
        params = SimulationParameters.van_der_corput(2, 5, 64, n_paths=10_000)
        assert params.effective_n_paths == 128

    def test_factories_set_mode(self):
        assert SimulationParameters.default().sim_mode is SimulationMode.PLAIN
        assert SimulationParameters.antithetic(100, 10).sim_mode is SimulationMode.ANTITHETIC
        assert (
            SimulationParameters.control_variate(100, 10).sim_mode
            is SimulationMode.CONTROL_VARIATE
        )
        assert (
            SimulationParameters.antithetic_control_variate(100, 10).sim_mode
            is SimulationMode.ANTITHETIC_CONTROL_VARIATE
        )
        params = SimulationParameters.van_der_corput(2, 3, 256, initial_price=50.0)
        assert params.sim_mode is SimulationMode.VAN_DER_CORPUT
        assert (params.vdc_base1, params.vdc_base2, params.vdc_points) == (2, 3, 256)
        assert params.initial_price == 50.0


class TestEngineSettings:
    """Tests for EngineSettings."""

    def test_default_bumps(self):
        settings = EngineSettings()
        assert settings.spot_bump == 1.0
        assert settings.vol_bump == 0.01
        assert settings.rate_bump == 0.0001
        assert settings.time_bump == pytest.approx(1.0 / 365.0)

    def test_invalid_chunk_size_raises(self):
        with pytest.raises(ValueError, match="chunk_size"):
            EngineSettings(chunk_size=0)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MCPRICER_MAX_WORKERS", "3")
        monkeypatch.setenv("MCPRICER_CHUNK_SIZE", "512")
        settings = EngineSettings.from_env()
        assert settings.max_workers == 3
        assert settings.chunk_size == 512

    def test_from_env_keyword_overrides(self, monkeypatch):
        monkeypatch.setenv("MCPRICER_CHUNK_SIZE", "512")
        settings = EngineSettings.from_env(chunk_size=64)
        assert settings.chunk_size == 64

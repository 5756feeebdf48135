"""
Tests for the rates provider: curve roles, immutability, FX and fixings.
"""

import datetime
import numpy as np
import pytest
import jax.numpy as jnp

from ratescal.utils.error import ConfigurationError, MarketDataMissingError
from ratescal.utils.global_types import CurrencyTypes
from ratescal.market.indices.rate_index import USD_LIBOR_3M, USD_SOFR
from ratescal.market.curves.discount_curve import InterpolatedNodalCurve
from ratescal.market.curves.jacobian import CurveParameterSize
from ratescal.models.rates_provider import RatesProvider


@pytest.fixture
def provider(standard_value_date):
    dsc = InterpolatedNodalCurve("USD-DSC", standard_value_date,
                                 [1.0, 2.0], [0.04, 0.04])
    fwd = InterpolatedNodalCurve("USD-3M", standard_value_date,
                                 [1.0, 2.0, 3.0], [0.05, 0.05, 0.05])
    fixings = {USD_LIBOR_3M: {standard_value_date - datetime.timedelta(days=1): 0.0531,
                              standard_value_date: 0.0533}}
    return RatesProvider(standard_value_date,
                         {"USD-DSC": dsc, "USD-3M": fwd},
                         {CurrencyTypes.USD: "USD-DSC"},
                         {USD_LIBOR_3M: "USD-3M", USD_SOFR: "USD-DSC"},
                         fx_rates={"EURUSD": 1.10},
                         time_series=fixings)


class TestRatesProviderLookups:
    """Test curve lookups by role"""

    def test_discount_factor(self, provider):
        """Test discounting on the currency curve"""
        assert float(provider.discount_factor(CurrencyTypes.USD, 1.0)) == \
            pytest.approx(np.exp(-0.04))

    def test_forward_rate_uses_index_curve(self, provider):
        """Test that forwards come from the index curve"""
        fwd = float(provider.forward_rate(USD_LIBOR_3M, 1.0, 2.0))
        assert fwd == pytest.approx(np.exp(0.05) - 1.0)

    def test_missing_roles(self, provider):
        """Test that missing curves raise ConfigurationError"""
        with pytest.raises(ConfigurationError):
            provider.discount_curve(CurrencyTypes.EUR)
        with pytest.raises(ConfigurationError):
            provider.curve("NOPE")

    def test_curve_accessor(self, provider):
        """Test attribute and item access to curves"""
        assert provider.curves.USD_DSC is provider.curve("USD-DSC")
        assert provider.curves["USD-3M"].name == "USD-3M"
        assert "USD-DSC" in provider.curves
        assert len(provider.curves) == 2
        with pytest.raises(AttributeError):
            provider.curves.EUR_DSC

    def test_unknown_role_curve_rejected(self, standard_value_date):
        """Test that a role must point to a curve of the provider"""
        with pytest.raises(ConfigurationError):
            RatesProvider(standard_value_date, {}, {CurrencyTypes.USD: "USD-DSC"})


class TestFixingsAndFx:
    """Test fixing and FX rate rules"""

    def test_past_fixing_used(self, provider, standard_value_date):
        """Test that a past fixing comes from the time series"""
        rate = provider.ibor_rate(USD_LIBOR_3M,
                                  standard_value_date - datetime.timedelta(days=1),
                                  0.0, 0.25)
        assert rate == 0.0531

    def test_today_fixing_used_when_present(self, provider, standard_value_date):
        """Test that a fixing published today is used"""
        assert provider.ibor_rate(USD_LIBOR_3M, standard_value_date, 0.0, 0.25) == 0.0533

    def test_today_fixing_forecast_when_absent(self, standard_value_date):
        """Test that a missing fixing today is forecast from the curve"""
        curve = InterpolatedNodalCurve("USD-3M", standard_value_date, [1.0], [0.05])
        provider = RatesProvider(standard_value_date, {"USD-3M": curve},
                                 index_curves={USD_LIBOR_3M: "USD-3M"})
        rate = float(provider.ibor_rate(USD_LIBOR_3M, standard_value_date, 0.0, 0.25))
        assert rate == pytest.approx((np.exp(0.0125) - 1.0) / 0.25)

    def test_missing_past_fixing(self, provider, standard_value_date):
        """Test that a missing past fixing raises MarketDataMissingError"""
        with pytest.raises(MarketDataMissingError):
            provider.ibor_rate(USD_LIBOR_3M,
                               standard_value_date - datetime.timedelta(days=7),
                               0.0, 0.25)

    def test_fx_rates(self, provider):
        """Test direct, inverse and identity FX rates"""
        assert provider.fx_rate(CurrencyTypes.EUR, CurrencyTypes.USD) == 1.10
        assert provider.fx_rate(CurrencyTypes.USD, CurrencyTypes.EUR) == pytest.approx(1 / 1.10)
        assert provider.fx_rate(CurrencyTypes.GBP, CurrencyTypes.GBP) == 1.0
        with pytest.raises(MarketDataMissingError):
            provider.fx_rate(CurrencyTypes.GBP, CurrencyTypes.USD)


class TestRatesProviderImmutability:
    """Test that providers are never modified"""

    def test_with_curves_returns_new_provider(self, provider, standard_value_date):
        """Test that adding curves leaves the original provider unchanged"""
        eur = InterpolatedNodalCurve("EUR-DSC", standard_value_date, [1.0], [0.03])
        extended = provider.with_curves([eur], {CurrencyTypes.EUR: "EUR-DSC"})
        assert "EUR-DSC" in extended.curves
        assert "EUR-DSC" not in provider.curves
        assert CurrencyTypes.EUR not in provider.discount_curve_names

    def test_mappings_are_read_only(self, provider):
        """Test that the stored mappings cannot be written"""
        with pytest.raises(TypeError):
            provider.fx_rates["GBPUSD"] = 1.27
        with pytest.raises(TypeError):
            provider.discount_curve_names[CurrencyTypes.EUR] = "USD-DSC"

    def test_parameters_round_trip(self, provider):
        """Test parameter extraction and replacement along an ordering"""
        order = (CurveParameterSize("USD-3M", 3), CurveParameterSize("USD-DSC", 2))
        np.testing.assert_array_equal(provider.parameters(order),
                                      [0.05, 0.05, 0.05, 0.04, 0.04])
        moved = provider.with_parameters(order, jnp.asarray([0.01, 0.02, 0.03, 0.04, 0.05]))
        np.testing.assert_array_equal(np.asarray(moved.curve("USD-DSC").parameters),
                                      [0.04, 0.05])
        np.testing.assert_array_equal(provider.parameters(order),
                                      [0.05, 0.05, 0.05, 0.04, 0.04])

    def test_parameter_length_checked(self, provider):
        """Test that a vector of the wrong size is rejected"""
        with pytest.raises(ConfigurationError):
            provider.with_parameters((CurveParameterSize("USD-DSC", 2),), jnp.zeros(3))

    def test_parameter_count_checked(self, provider):
        """Test that an ordering must match the curve sizes"""
        with pytest.raises(ConfigurationError):
            provider.parameters((CurveParameterSize("USD-DSC", 3),))

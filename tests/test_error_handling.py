"""
Error handling tests for calibration runs.

Focus areas:
- Configuration rejected before any work starts
- Missing market data
- Singular calibration blocks
- Non convergence
"""

import numpy as np
import pytest

from ratescal.utils.error import (LibError,
                                  ConfigurationError,
                                  MarketDataMissingError,
                                  NonConvergenceError,
                                  NumericalError)
from ratescal.utils.global_types import CurrencyTypes
from ratescal.market.indices.rate_index import USD_LIBOR_3M
from ratescal.market.curves.curve_node import TermDepositCurveNode
from ratescal.market.curves.curve_definition import NodalCurveDefinition
from ratescal.market.curves.curve_group import CurveGroupDefinition
from ratescal.marketdata.market_data import MarketData
from ratescal.calibration.calibrator import CurveCalibrator
from ratescal.calibration.provider_generator import ImmutableRatesProviderGenerator


class TestErrorHierarchy:
    """Test the library exception classes"""

    @pytest.mark.parametrize("cls", [ConfigurationError, MarketDataMissingError,
                                     NonConvergenceError, NumericalError])
    def test_subclasses_of_lib_error(self, cls):
        """Test that all errors derive from LibError and keep the message"""
        err = cls("boom")
        assert isinstance(err, LibError)
        assert err._message == "boom"
        assert str(err) == "boom"


class TestConfigurationRejection:
    """Test configuration errors"""

    def test_duplicate_curve_across_groups(self, ois_group, known_data,
                                           usd_market_data, ref_data):
        """Test that a curve calibrated by two groups is rejected"""
        calibrator = CurveCalibrator.standard()
        with pytest.raises(ConfigurationError):
            calibrator.calibrate([ois_group, ois_group], known_data,
                                 usd_market_data, ref_data)

    def test_duplicate_rejected_before_market_data_is_read(self, ois_group, known_data,
                                                           standard_value_date, ref_data):
        """Test that the duplicate check runs before any trade is resolved"""
        empty = MarketData(standard_value_date)
        with pytest.raises(ConfigurationError):
            CurveCalibrator.standard().calibrate([ois_group, ois_group], known_data,
                                                 empty, ref_data)

    def test_external_curve_must_be_known(self, libor_group, known_data,
                                          usd_market_data, ref_data):
        """Test that an external entry needs the curve in the known data"""
        with pytest.raises(ConfigurationError):
            CurveCalibrator.standard().calibrate(libor_group, known_data,
                                                 usd_market_data, ref_data)

    def test_generator_parameter_length(self, ois_group, known_data, ref_data):
        """Test that the generator rejects a vector of the wrong size"""
        generator = ImmutableRatesProviderGenerator.of(known_data, ois_group, ref_data)
        with pytest.raises(ConfigurationError):
            generator.generate(np.full(3, 0.05))

    @pytest.mark.parametrize("kwargs", [dict(max_steps=-1), dict(tol_abs=0.0),
                                        dict(tol_rel=-1e-9)])
    def test_invalid_calibrator_settings(self, kwargs):
        """Test that invalid tolerances and step counts are rejected"""
        with pytest.raises(ConfigurationError):
            CurveCalibrator(**kwargs)

    def test_group_without_calibrated_curves(self, calibrated_chain, usd_market_data,
                                             ref_data):
        """Test that a group of external curves passes the known data through"""
        group = (CurveGroupDefinition.builder()
                 .name("EXTERNAL")
                 .add_forward_curve("USD-DSC", USD_LIBOR_3M)
                 .build())
        provider = CurveCalibrator.standard().calibrate(group, calibrated_chain,
                                                        usd_market_data, ref_data)
        assert provider.index_curve(USD_LIBOR_3M).name == "USD-DSC"
        assert provider.curve("USD-LIBOR-3M") is calibrated_chain.curve("USD-LIBOR-3M")


class TestCalibrationFailures:
    """Test failures during a calibration run"""

    def test_missing_quote(self, ois_group, known_data, standard_value_date, ref_data):
        """Test that a missing quote aborts the run"""
        md = MarketData(standard_value_date, quotes={"USD-DEP-3M": 0.053})
        with pytest.raises(MarketDataMissingError):
            CurveCalibrator.standard().calibrate(ois_group, known_data, md, ref_data)

    def test_non_convergence(self, ois_group, known_data, usd_market_data, ref_data):
        """Test that running out of steps raises NonConvergenceError"""
        calibrator = CurveCalibrator.of(1e-9, 1e-9, 0)
        with pytest.raises(NonConvergenceError):
            calibrator.calibrate(ois_group, known_data, usd_market_data, ref_data)

    def test_singular_block(self, known_data, standard_value_date, ref_data):
        """Test that a forward curve no trade depends on makes the block singular"""
        dsc = NodalCurveDefinition("USD-DSC", [
            TermDepositCurveNode("USD-DEPOSIT", "6M", "DEP-6M")])
        fwd = NodalCurveDefinition("USD-FWD", [
            TermDepositCurveNode("USD-DEPOSIT", "6M", "DEP-6M")])
        group = (CurveGroupDefinition.builder()
                 .name("SINGULAR")
                 .add_discount_curve(dsc, CurrencyTypes.USD)
                 .add_forward_curve(fwd, USD_LIBOR_3M)
                 .build())
        md = MarketData(standard_value_date, quotes={"DEP-6M": 0.05})
        with pytest.raises(NumericalError):
            CurveCalibrator.standard().calibrate(group, known_data, md, ref_data)

"""
Pytest configuration file for ratescal library tests
Provides common fixtures and test configuration
"""
import os
import sys
import datetime
import pytest

# Add the ratescal package to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Import key modules for fixtures
from ratescal.utils.global_types import CurrencyTypes
from ratescal.market.indices.rate_index import USD_SOFR, USD_LIBOR_3M
from ratescal.marketdata.market_data import MarketData, ReferenceData
from ratescal.market.curves.curve_node import (TermDepositCurveNode,
                                               FraCurveNode,
                                               FixedFloatSwapCurveNode)
from ratescal.market.curves.curve_definition import NodalCurveDefinition
from ratescal.market.curves.curve_group import CurveGroupDefinition
from ratescal.models.rates_provider import RatesProvider
from ratescal.calibration.calibrator import CurveCalibrator


@pytest.fixture(scope="session")
def standard_value_date():
    """Standard valuation date for tests"""
    return datetime.date(2024, 1, 2)


@pytest.fixture(scope="session")
def ref_data():
    """Reference data holding the standard conventions"""
    return ReferenceData.standard()


@pytest.fixture(scope="session")
def usd_quotes():
    """Sample USD market quotes (as decimals)"""
    return {
        "USD-DEP-3M": 0.0530,
        "USD-DEP-6M": 0.0525,
        "USD-OIS-1Y": 0.0500,
        "USD-OIS-2Y": 0.0460,
        "USD-FRA-0X3": 0.0555,
        "USD-FRA-3X6": 0.0548,
        "USD-FRA-6X9": 0.0537,
        "USD-IRS-2Y": 0.0505,
    }


@pytest.fixture(scope="session")
def usd_market_data(standard_value_date, usd_quotes):
    """USD market data snapshot with an FX rate"""
    return MarketData(standard_value_date,
                      quotes=usd_quotes,
                      fx_rates={"EURUSD": 1.10, "GBPUSD": 1.27})


@pytest.fixture(scope="session")
def usd_dsc_definition():
    """USD discounting curve calibrated to deposits and SOFR swaps"""
    return NodalCurveDefinition("USD-DSC", [
        TermDepositCurveNode("USD-DEPOSIT", "3M", "USD-DEP-3M"),
        TermDepositCurveNode("USD-DEPOSIT", "6M", "USD-DEP-6M"),
        FixedFloatSwapCurveNode("USD-FIXED-1Y-SOFR", "1Y", "USD-OIS-1Y"),
        FixedFloatSwapCurveNode("USD-FIXED-1Y-SOFR", "2Y", "USD-OIS-2Y"),
    ])


@pytest.fixture(scope="session")
def usd_libor_definition():
    """USD LIBOR 3M forward curve calibrated to FRAs and a swap"""
    return NodalCurveDefinition("USD-LIBOR-3M", [
        FraCurveNode("USD-LIBOR-3M-FRA", "0M", "USD-FRA-0X3"),
        FraCurveNode("USD-LIBOR-3M-FRA", "3M", "USD-FRA-3X6"),
        FraCurveNode("USD-LIBOR-3M-FRA", "6M", "USD-FRA-6X9"),
        FixedFloatSwapCurveNode("USD-FIXED-6M-LIBOR-3M", "2Y", "USD-IRS-2Y"),
    ])


@pytest.fixture(scope="session")
def ois_group(usd_dsc_definition):
    """Group calibrating the USD discount curve, also forecasting SOFR"""
    return (CurveGroupDefinition.builder()
            .name("USD-OIS")
            .add_curve(usd_dsc_definition, CurrencyTypes.USD, USD_SOFR)
            .build())


@pytest.fixture(scope="session")
def libor_group(usd_libor_definition):
    """Group calibrating the LIBOR curve on top of the known discount curve"""
    return (CurveGroupDefinition.builder()
            .name("USD-LIBOR")
            .add_forward_curve(usd_libor_definition, USD_LIBOR_3M)
            .add_discount_curve("USD-DSC", CurrencyTypes.USD)
            .build())


@pytest.fixture(scope="session")
def known_data(standard_value_date, usd_market_data):
    """Known data with no curves"""
    return RatesProvider.from_market_data(standard_value_date, usd_market_data)


@pytest.fixture(scope="session")
def tight_calibrator():
    """Calibrator with tolerances tight enough for finite difference checks"""
    return CurveCalibrator.of(1e-12, 1e-12, 100)


@pytest.fixture(scope="session")
def calibrated_chain(tight_calibrator, ois_group, libor_group, known_data,
                     usd_market_data, ref_data):
    """Provider from the OIS then LIBOR calibration"""
    return tight_calibrator.calibrate([ois_group, libor_group], known_data,
                                      usd_market_data, ref_data)


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom test markers"""
    config.addinivalue_line("markers", "slow: marks tests as slow (may take longer to run)")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "numerical: marks tests with numerical precision requirements")


# Pytest collection hooks
def pytest_collection_modifyitems(config, items):
    """Modify test collection to add default markers"""
    for item in items:
        # Add 'unit' marker to all tests by default
        if not any(item.iter_markers()):
            item.add_marker(pytest.mark.unit)

        # Mark integration tests
        if "integration" in item.name or item.fspath.basename.startswith("test_integration"):
            item.add_marker(pytest.mark.integration)


# Utility functions for tests
@pytest.fixture
def tolerance():
    """Standard numerical tolerance for floating point comparisons"""
    return 1e-6


@pytest.fixture
def strict_tolerance():
    """Strict numerical tolerance for high precision tests"""
    return 1e-10

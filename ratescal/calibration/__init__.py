"""
Curve calibration package.

Provides:
- CurveCalibrator: calibration of curve groups and their Jacobians
- CalibrationMeasures: par spread and present value measures
- BroydenVectorRootFinder: root finder used by the calibrator
- ImmutableRatesProviderGenerator: curves from a parameter vector
- MarketQuoteSensitivityCalculator: market quote risk from the Jacobians
"""

from .calibrator import CurveCalibrator
from .measures import CalibrationMeasure, CalibrationMeasures
from .root_finder import BroydenVectorRootFinder
from .provider_generator import RatesProviderGenerator, ImmutableRatesProviderGenerator
from .sensitivity import MarketQuoteSensitivityCalculator, CurveSensitivities

__all__ = ['CurveCalibrator', 'CalibrationMeasure', 'CalibrationMeasures',
           'BroydenVectorRootFinder', 'RatesProviderGenerator',
           'ImmutableRatesProviderGenerator', 'MarketQuoteSensitivityCalculator',
           'CurveSensitivities']

"""
Calibration measures: the quantity each calibrating trade must bring to zero.

A CalibrationMeasure handles one resolved trade type. Its value is a plain
float and its derivative is the exact gradient of the value with respect to
the curve parameters of an ordering, obtained by reverse mode AD through the
rates provider.

CalibrationMeasures dispatches on the trade type. Two sets are provided:

- PAR_SPREAD: model par rate minus the quoted rate (the default)
- PRESENT_VALUE: present value of the trade struck at the quoted rate
"""

from typing import Callable, Sequence

import numpy as np
import jax
import jax.numpy as jnp

from ratescal.utils.error import LibError, ConfigurationError
from ratescal.market.curves.jacobian import CurveParameterSize
from ratescal.trades.rates.deposit import ResolvedTermDeposit
from ratescal.trades.rates.fra import ResolvedFra
from ratescal.trades.rates.swap import ResolvedFixedFloatSwap

jax.config.update("jax_enable_x64", True)

###############################################################################


class CalibrationMeasure:
    """
    Measure of one trade type.

    Attributes:
        name (str): Name of the measure
        trade_type (type): Resolved trade class handled
    """

    def __init__(self,
                 name: str,
                 trade_type: type,
                 value_fn: Callable):
        self._name = name
        self._trade_type = trade_type
        self._value_fn = value_fn

    @property
    def name(self):
        return self._name

    @property
    def trade_type(self):
        return self._trade_type

    def value(self, trade, provider):
        return float(self._value_fn(trade, provider))

    def derivative(self,
                   trade,
                   provider,
                   order: Sequence[CurveParameterSize]):
        """ Gradient of the value with respect to the parameters of the
        curves in order, laid out along the order. Parameters the trade does
        not depend on get a zero. """
        x0 = jnp.asarray(provider.parameters(order), dtype=jnp.float64)
        if x0.shape[0] == 0:
            return np.zeros(0)

        def value_of_params(x):
            return self._value_fn(trade, provider.with_parameters(order, x))

        return np.asarray(jax.grad(value_of_params)(x0), dtype=np.float64)

    def __repr__(self):
        return f"{self._name}[{self._trade_type.__name__}]"

###############################################################################


class CalibrationMeasures:
    """ Set of calibration measures, one per trade type. """

    PAR_SPREAD = None
    PRESENT_VALUE = None

    def __init__(self, name: str, measures: Sequence[CalibrationMeasure]):
        by_type = {}
        for measure in measures:
            if measure.trade_type in by_type:
                raise ConfigurationError(
                    f"Duplicate calibration measure for "
                    f"{measure.trade_type.__name__}")
            by_type[measure.trade_type] = measure
        self._name = name
        self._measures = by_type

    @staticmethod
    def of(name: str, *measures: CalibrationMeasure):
        return CalibrationMeasures(name, measures)

    @property
    def name(self):
        return self._name

    @property
    def trade_types(self):
        return tuple(self._measures)

    def measure_for(self, trade):
        try:
            return self._measures[type(trade)]
        except KeyError:
            raise LibError(
                f"Trade type {type(trade).__name__} is not supported by "
                f"calibration measures {self._name}") from None

    def value(self, trade, provider):
        return self.measure_for(trade).value(trade, provider)

    def derivative(self, trade, provider, order: Sequence[CurveParameterSize]):
        return self.measure_for(trade).derivative(trade, provider, order)

    def __repr__(self):
        return self._name

###############################################################################


CalibrationMeasures.PAR_SPREAD = CalibrationMeasures.of(
    "ParSpread",
    CalibrationMeasure("TermDepositParSpread", ResolvedTermDeposit,
                       lambda trade, p: trade.par_rate(p) - trade.rate),
    CalibrationMeasure("FraParSpread", ResolvedFra,
                       lambda trade, p: trade.par_rate(p) - trade.fixed_rate),
    CalibrationMeasure("SwapParSpread", ResolvedFixedFloatSwap,
                       lambda trade, p: trade.par_rate(p) - trade.fixed_rate))

CalibrationMeasures.PRESENT_VALUE = CalibrationMeasures.of(
    "PresentValue",
    CalibrationMeasure("TermDepositPresentValue", ResolvedTermDeposit,
                       lambda trade, p: trade.present_value(p)),
    CalibrationMeasure("FraPresentValue", ResolvedFra,
                       lambda trade, p: trade.present_value(p)),
    CalibrationMeasure("SwapPresentValue", ResolvedFixedFloatSwap,
                       lambda trade, p: trade.present_value(p)))

"""
Immutable rates provider combining calibrated and known curves.

Provides the RatesProvider class used by the reference trades and the
calibration:
- Curves stored by name, with discount roles by currency and forward roles
  by index
- FX rates and historical fixings supplied with the known data
- Parameter extraction and replacement along a curve parameter ordering,
  which is how calibration derivatives are traced through the curves
- Attribute-style curve access through CurveAccessor

Every method that changes something returns a new provider; existing
providers are never modified, so they can be shared freely between pricers
and calibration runs.
"""

import datetime
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence

import numpy as np

from ratescal.utils.error import (ConfigurationError,
                                  MarketDataMissingError)
from ratescal.utils.helpers import check_argument_types, _func_name
from ratescal.utils.global_types import CurrencyTypes
from ratescal.market.indices.rate_index import RateIndex
from ratescal.market.curves.discount_curve import InterpolatedNodalCurve
from ratescal.market.curves.jacobian import CurveParameterSize, total_parameter_count


class CurveAccessor:
    """
    Provides attribute-style access to the curves of a RatesProvider.

    Allows accessing curves via dot notation (provider.curves.USD_DSC for a
    curve named "USD-DSC" or "USD_DSC") as well as dictionary notation
    (provider.curves["USD-DSC"]).
    """
    def __init__(self, curves: Mapping[str, InterpolatedNodalCurve]):
        self._curves = curves

    def __getattr__(self, item):
        for name in (item, item.replace("_", "-")):
            if name in self._curves:
                return self._curves[name]
        raise AttributeError(f"No such curve: {item}")

    def __getitem__(self, item):
        return self._curves[item]

    def __contains__(self, item):
        return item in self._curves

    def __iter__(self):
        return iter(self._curves)

    def __len__(self):
        return len(self._curves)


class RatesProvider:
    """
    Curves, FX rates and fixings as of a valuation date.

    Attributes:
        value_dt (date): Valuation date
        curves (CurveAccessor): Curves by name
        discount_curve_names (Mapping[CurrencyTypes, str]): Discount roles
        index_curve_names (Mapping[RateIndex, str]): Forward roles
        fx_rates (Mapping[str, float]): Pair code -> rate
        time_series (Mapping[RateIndex, Mapping[date, float]]): Fixings

    Example:
        >>> provider = RatesProvider(value_dt, fx_rates={"EURUSD": 1.1})
        >>> provider = provider.with_curves([dsc_curve],
        ...                                 discount_curves={CurrencyTypes.USD: "USD-DSC"})
        >>> provider.discount_factor(CurrencyTypes.USD, 1.0)
    """

    def __init__(self,
                 value_dt: datetime.date,
                 curves: Optional[Mapping[str, InterpolatedNodalCurve]] = None,
                 discount_curves: Optional[Mapping[CurrencyTypes, str]] = None,
                 index_curves: Optional[Mapping[RateIndex, str]] = None,
                 fx_rates: Optional[Mapping[str, float]] = None,
                 time_series: Optional[Mapping[RateIndex, Mapping]] = None):

        check_argument_types(getattr(self, _func_name(), None), locals())

        curves = dict(curves or {})
        discount_curves = dict(discount_curves or {})
        index_curves = dict(index_curves or {})

        for name, curve in curves.items():
            if curve.name != name:
                raise ConfigurationError(
                    f"Curve {curve.name} stored under the name {name}")
        for role, name in list(discount_curves.items()) + list(index_curves.items()):
            if name not in curves:
                raise ConfigurationError(
                    f"Curve {name} for {role} is not in the provider")

        self._value_dt = value_dt
        self._curves = MappingProxyType(curves)
        self._discount_curves = MappingProxyType(discount_curves)
        self._index_curves = MappingProxyType(index_curves)
        self._fx_rates = MappingProxyType(dict(fx_rates or {}))
        self._time_series = MappingProxyType(
            {idx: MappingProxyType(dict(ts))
             for idx, ts in (time_series or {}).items()})

    @staticmethod
    def from_market_data(value_dt: datetime.date,
                         market_data,
                         time_series: Optional[Mapping[RateIndex, Mapping]] = None):
        """ Known data holding the FX rates of the market data and the
        supplied fixings (falling back to those of the market data). """
        series = dict(market_data.time_series)
        series.update(time_series or {})
        return RatesProvider(value_dt,
                             fx_rates=market_data.fx_rates,
                             time_series=series)

###############################################################################

    @property
    def value_dt(self):
        return self._value_dt

    @property
    def curves(self):
        return CurveAccessor(self._curves)

    @property
    def curve_names(self):
        return tuple(self._curves)

    @property
    def discount_curve_names(self):
        return self._discount_curves

    @property
    def index_curve_names(self):
        return self._index_curves

    @property
    def fx_rates(self):
        return self._fx_rates

    @property
    def time_series(self):
        return self._time_series

    @property
    def jacobians(self) -> Dict[str, object]:
        """ Calibration Jacobians of the curves that carry one. """
        return {name: curve.jacobian for name, curve in self._curves.items()
                if curve.jacobian is not None}

###############################################################################

    def curve(self, name: str):
        try:
            return self._curves[name]
        except KeyError:
            raise ConfigurationError(f"No curve named {name!r}") from None

    def discount_curve(self, currency: CurrencyTypes):
        try:
            return self._curves[self._discount_curves[currency]]
        except KeyError:
            raise ConfigurationError(
                f"No discount curve for {currency.name}") from None

    def index_curve(self, index: RateIndex):
        try:
            return self._curves[self._index_curves[index]]
        except KeyError:
            raise ConfigurationError(
                f"No forward curve for index {index.name}") from None

    def discount_factor(self, currency: CurrencyTypes, t):
        return self.discount_curve(currency).df(t)

    def forward_rate(self, index: RateIndex, t1, t2, year_fraction=None):
        """ Simply compounded forward of an index over [t1, t2]. """
        return self.index_curve(index).fwd_rate(t1, t2, year_fraction)

    def ibor_rate(self,
                  index: RateIndex,
                  fixing_dt: datetime.date,
                  t1,
                  t2,
                  year_fraction=None):
        """ Rate of an index fixing. Fixings on or before the valuation date
        come from the time series; a fixing due today that has not been
        published yet is forecast from the curve. """
        if fixing_dt <= self._value_dt:
            fixing = self._time_series.get(index, {}).get(fixing_dt)
            if fixing is not None:
                return fixing
            if fixing_dt < self._value_dt:
                raise MarketDataMissingError(
                    f"No fixing of {index.name} on {fixing_dt}")
        return self.forward_rate(index, t1, t2, year_fraction)

    def fx_rate(self, base: CurrencyTypes, counter: CurrencyTypes):
        """ Units of counter per unit of base. """
        if base == counter:
            return 1.0
        direct = f"{base.name}{counter.name}"
        if direct in self._fx_rates:
            return self._fx_rates[direct]
        inverse = f"{counter.name}{base.name}"
        if inverse in self._fx_rates:
            return 1.0 / self._fx_rates[inverse]
        raise MarketDataMissingError(f"No FX rate for {direct}")

###############################################################################

    def parameters(self, order: Sequence[CurveParameterSize]):
        """ Current parameters of the curves in order as one flat vector. """
        chunks = []
        for size in order:
            curve = self.curve(size.name)
            if curve.parameter_count != size.parameter_count:
                raise ConfigurationError(
                    f"Curve {size.name} has {curve.parameter_count} "
                    f"parameters, expected {size.parameter_count}")
            chunks.append(np.asarray(curve.parameters, dtype=np.float64))
        if not chunks:
            return np.zeros(0)
        return np.concatenate(chunks)

    def with_parameters(self, order: Sequence[CurveParameterSize], x):
        """ Provider whose curves in order take consecutive slices of x.
        x may be a JAX tracer. """
        if x.shape[0] != total_parameter_count(order):
            raise ConfigurationError(
                f"Parameter vector of size {x.shape[0]} does not match "
                f"the order with {total_parameter_count(order)} parameters")

        curves = dict(self._curves)
        start = 0
        for size in order:
            end = start + size.parameter_count
            curves[size.name] = self.curve(size.name).with_parameters(x[start:end])
            start = end

        return self._copy(curves, self._discount_curves, self._index_curves)

    def with_curves(self,
                    curves: Sequence[InterpolatedNodalCurve],
                    discount_curves: Optional[Mapping[CurrencyTypes, str]] = None,
                    index_curves: Optional[Mapping[RateIndex, str]] = None):
        """ Provider extended with extra curves and roles. Curves and roles
        with the same key replace the existing ones. """
        all_curves = dict(self._curves)
        all_curves.update({c.name: c for c in curves})
        all_discount = dict(self._discount_curves)
        all_discount.update(discount_curves or {})
        all_index = dict(self._index_curves)
        all_index.update(index_curves or {})
        return self._copy(all_curves, all_discount, all_index)

    def _copy(self, curves, discount_curves, index_curves):
        return RatesProvider(self._value_dt,
                             curves,
                             discount_curves,
                             index_curves,
                             self._fx_rates,
                             self._time_series)

###############################################################################

    def __repr__(self):
        return (f"RatesProvider(value_dt={self._value_dt}, "
                f"curves={list(self._curves)}, "
                f"discount={ {c.name: n for c, n in self._discount_curves.items()} }, "
                f"forward={ {i.name: n for i, n in self._index_curves.items()} })")

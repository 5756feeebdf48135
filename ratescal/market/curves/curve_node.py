"""
Curve nodes: one calibrating instrument per curve parameter.

Each node knows how to turn the market quote it is attached to into a
resolved reference trade and into a starting value for its curve parameter.
Conventions are referenced by name and looked up in the reference data when
the trade is resolved.

Example:
    >>> nodes = [TermDepositCurveNode("USD-DEPOSIT", "3M", "USD-DEP-3M"),
    ...          FixedFloatSwapCurveNode("USD-FIXED-1Y-SOFR", "2Y", "USD-OIS-2Y")]
    >>> trade = nodes[0].resolved_trade(value_dt, market_data, ref_data)
"""

import datetime
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ratescal.utils.error import ConfigurationError
from ratescal.utils.global_types import ValueTypes
from ratescal.utils.helpers import add_tenor, year_frac
from ratescal.marketdata.conventions import (TermDepositConvention,
                                             FraConvention,
                                             FixedFloatSwapConvention)
from ratescal.trades.rates.deposit import ResolvedTermDeposit
from ratescal.trades.rates.fra import ResolvedFra
from ratescal.trades.rates.swap import ResolvedFixedFloatSwap

###############################################################################


class CurveNode(ABC):
    """ A single calibration point contributing one parameter to a curve.

    Subclasses carry the attributes label, quote_id, convention (name of the
    convention in the reference data) and spread (added to the quote). """

    @abstractmethod
    def node_date(self, value_dt: datetime.date, ref_data) -> datetime.date:
        """ Date the node's parameter is placed at on the curve. """

    @abstractmethod
    def resolved_trade(self, value_dt: datetime.date, market_data, ref_data):
        """ Reference trade priced at the quoted rate. """

    @abstractmethod
    def _approximate_maturity(self, value_dt: datetime.date) -> float:
        pass

    def rate(self, market_data):
        return market_data.quote(self.quote_id) + self.spread

    def initial_guess(self,
                      value_dt: datetime.date,
                      market_data,
                      value_type: ValueTypes):
        """ Starting value of the node parameter: the quoted rate for zero
        rate curves, exp(-rate * t) for discount factor curves. """
        rate = self.rate(market_data)
        if value_type == ValueTypes.DISCOUNT_FACTOR:
            return math.exp(-rate * self._approximate_maturity(value_dt))
        return rate

    def _convention(self, ref_data, expected_type):
        convention = ref_data.get(self.convention)
        if not isinstance(convention, expected_type):
            raise ConfigurationError(
                f"Convention {self.convention} of node {self.label} is a "
                f"{type(convention).__name__}, expected {expected_type.__name__}")
        return convention

###############################################################################


@dataclass(frozen=True)
class TermDepositCurveNode(CurveNode):
    """ Node backed by a spot starting term deposit of a fixed tenor. """
    convention: str
    tenor: str
    quote_id: str
    spread: float = 0.0
    label: Optional[str] = None

    def __post_init__(self):
        if self.label is None:
            object.__setattr__(self, "label", self.tenor)

    def node_date(self, value_dt, ref_data):
        convention = self._convention(ref_data, TermDepositConvention)
        start_dt = value_dt + datetime.timedelta(days=convention.spot_days)
        return add_tenor(start_dt, self.tenor)

    def resolved_trade(self, value_dt, market_data, ref_data):
        convention = self._convention(ref_data, TermDepositConvention)
        return ResolvedTermDeposit.of(convention, value_dt, self.tenor,
                                      self.rate(market_data))

    def _approximate_maturity(self, value_dt):
        return year_frac(value_dt, add_tenor(value_dt, self.tenor))

###############################################################################


@dataclass(frozen=True)
class FraCurveNode(CurveNode):
    """ Node backed by a FRA starting period_to_start after spot, e.g. "3M"
    on a 3M index for the 3x6 FRA. The node sits at the FRA end date. """
    convention: str
    period_to_start: str
    quote_id: str
    spread: float = 0.0
    label: Optional[str] = None

    def __post_init__(self):
        if self.label is None:
            object.__setattr__(self, "label", f"FRA-{self.period_to_start}")

    def node_date(self, value_dt, ref_data):
        convention = self._convention(ref_data, FraConvention)
        spot_dt = value_dt + datetime.timedelta(days=convention.spot_days)
        return add_tenor(add_tenor(spot_dt, self.period_to_start),
                         convention.index.tenor)

    def resolved_trade(self, value_dt, market_data, ref_data):
        convention = self._convention(ref_data, FraConvention)
        return ResolvedFra.of(convention, value_dt, self.period_to_start,
                              self.rate(market_data))

    def _approximate_maturity(self, value_dt):
        return year_frac(value_dt, add_tenor(value_dt, self.period_to_start))

###############################################################################


@dataclass(frozen=True)
class FixedFloatSwapCurveNode(CurveNode):
    """ Node backed by a spot starting par swap, fixed against an IBOR or
    overnight index. """
    convention: str
    tenor: str
    quote_id: str
    spread: float = 0.0
    label: Optional[str] = None

    def __post_init__(self):
        if self.label is None:
            object.__setattr__(self, "label", self.tenor)

    def node_date(self, value_dt, ref_data):
        convention = self._convention(ref_data, FixedFloatSwapConvention)
        start_dt = value_dt + datetime.timedelta(days=convention.spot_days)
        return add_tenor(start_dt, self.tenor)

    def resolved_trade(self, value_dt, market_data, ref_data):
        convention = self._convention(ref_data, FixedFloatSwapConvention)
        return ResolvedFixedFloatSwap.of(convention, value_dt, self.tenor,
                                         self.rate(market_data))

    def _approximate_maturity(self, value_dt):
        return year_frac(value_dt, add_tenor(value_dt, self.tenor))

"""
Resolved fixed versus floating swap used as a calibration instrument.

The floating leg references either an IBOR index (one fixing per period) or
an overnight index (rate compounded over each period, forecast as the simple
forward of the index curve). Both legs pay at the end of each accrual
period and are discounted on the curve of the swap currency.

    annuity   = sum_i tau_i * P_d(T_i)
    float PV  = sum_j L_j * tau_j * P_d(T_j)
    par rate  = float PV / annuity
    PV        = sign * N * (K * annuity - float PV)

with sign +1 when receiving fixed.
"""

import datetime
from dataclasses import dataclass
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta

from ratescal.utils.error import LibError
from ratescal.utils.global_types import SwapTypes
from ratescal.utils.helpers import add_tenor, tenor_to_months, year_frac
from ratescal.market.indices.rate_index import RateIndex
from ratescal.marketdata.conventions import FixedFloatSwapConvention

###############################################################################


@dataclass(frozen=True)
class AccrualPeriod:
    """ One accrual period of a leg, paid on its end date. """
    start_dt: datetime.date
    end_dt: datetime.date
    start_time: float
    end_time: float
    year_fraction: float
    fixing_dt: Optional[datetime.date] = None


def _schedule(start_dt, end_dt, period_months):
    """ Unadjusted dates from start to end stepping forward by a number of
    months, with a final short stub when the period does not divide the
    term. """
    dts = [start_dt]
    k = 1
    while True:
        dt = start_dt + relativedelta(months=k * period_months)
        if dt >= end_dt:
            break
        dts.append(dt)
        k += 1
    dts.append(end_dt)
    return dts


def _periods(value_dt, start_dt, end_dt, period_tenor, with_fixing):
    dts = _schedule(start_dt, end_dt, tenor_to_months(period_tenor))
    periods = []
    for d0, d1 in zip(dts[:-1], dts[1:]):
        periods.append(AccrualPeriod(d0,
                                     d1,
                                     year_frac(value_dt, d0),
                                     year_frac(value_dt, d1),
                                     year_frac(d0, d1),
                                     d0 if with_fixing else None))
    return tuple(periods)

###############################################################################


@dataclass(frozen=True)
class ResolvedFixedFloatSwap:
    index: RateIndex
    fixed_rate: float
    fixed_periods: Tuple[AccrualPeriod, ...]
    float_periods: Tuple[AccrualPeriod, ...]
    fixed_leg_type: SwapTypes = SwapTypes.RECEIVE
    notional: float = 1.0

    @property
    def currency(self):
        return self.index.currency

    @property
    def start_dt(self):
        return self.fixed_periods[0].start_dt

    @property
    def end_dt(self):
        return self.fixed_periods[-1].end_dt

    @staticmethod
    def of(convention: FixedFloatSwapConvention,
           value_dt: datetime.date,
           tenor: str,
           fixed_rate: float,
           notional: float = 1.0):
        """ Build a spot starting swap of the given tenor. """
        start_dt = value_dt + datetime.timedelta(days=convention.spot_days)
        end_dt = add_tenor(start_dt, tenor)
        if end_dt <= start_dt:
            raise LibError(f"Swap tenor {tenor} has no length")

        fixed_periods = _periods(value_dt, start_dt, end_dt,
                                 convention.fixed_tenor, False)
        float_periods = _periods(value_dt, start_dt, end_dt,
                                 convention.float_period,
                                 convention.index.is_ibor)

        return ResolvedFixedFloatSwap(convention.index,
                                      fixed_rate,
                                      fixed_periods,
                                      float_periods,
                                      convention.fixed_leg_type,
                                      notional)

###############################################################################

    def annuity(self, provider):
        return sum(p.year_fraction * provider.discount_factor(self.currency, p.end_time)
                   for p in self.fixed_periods)

    def float_leg_value(self, provider):
        pv = 0.0
        for p in self.float_periods:
            if self.index.is_ibor:
                rate = provider.ibor_rate(self.index, p.fixing_dt,
                                          p.start_time, p.end_time,
                                          p.year_fraction)
            else:
                rate = provider.forward_rate(self.index, p.start_time,
                                             p.end_time, p.year_fraction)
            pv = pv + rate * p.year_fraction * provider.discount_factor(self.currency, p.end_time)
        return pv

    def par_rate(self, provider):
        return self.float_leg_value(provider) / self.annuity(provider)

    def present_value(self, provider):
        sign = 1.0 if self.fixed_leg_type == SwapTypes.RECEIVE else -1.0
        value = self.fixed_rate * self.annuity(provider) - self.float_leg_value(provider)
        return sign * self.notional * value

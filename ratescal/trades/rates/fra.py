"""
Resolved forward rate agreement on an IBOR index.

The FRA fixes the index at the start of its period and settles the
discounted difference on the start date:

    PV = N * tau * (F - K) / (1 + tau * F) * P_d(start)

where F is the index rate (a historical fixing when the fixing date is not in
the future) and P_d the discount curve of the index currency.
"""

import datetime
from dataclasses import dataclass

from ratescal.utils.helpers import add_tenor, year_frac
from ratescal.market.indices.rate_index import RateIndex
from ratescal.marketdata.conventions import FraConvention


@dataclass(frozen=True)
class ResolvedFra:
    index: RateIndex
    fixing_dt: datetime.date
    start_dt: datetime.date
    end_dt: datetime.date
    start_time: float
    end_time: float
    year_fraction: float
    fixed_rate: float
    notional: float = 1.0

    @property
    def currency(self):
        return self.index.currency

    @staticmethod
    def of(convention: FraConvention,
           value_dt: datetime.date,
           period_to_start: str,
           fixed_rate: float,
           notional: float = 1.0):
        """ Build the FRA starting period_to_start after spot and ending one
        index tenor later, e.g. "3M" for a 3x6 FRA on a 3M index. """
        spot_dt = value_dt + datetime.timedelta(days=convention.spot_days)
        start_dt = add_tenor(spot_dt, period_to_start)
        end_dt = add_tenor(start_dt, convention.index.tenor)
        return ResolvedFra(convention.index,
                           start_dt,
                           start_dt,
                           end_dt,
                           year_frac(value_dt, start_dt),
                           year_frac(value_dt, end_dt),
                           year_frac(start_dt, end_dt),
                           fixed_rate,
                           notional)

    def forward_rate(self, provider):
        return provider.ibor_rate(self.index,
                                  self.fixing_dt,
                                  self.start_time,
                                  self.end_time,
                                  self.year_fraction)

    def par_rate(self, provider):
        return self.forward_rate(provider)

    def present_value(self, provider):
        fwd = self.forward_rate(provider)
        df_start = provider.discount_factor(self.currency, self.start_time)
        tau = self.year_fraction
        return self.notional * tau * (fwd - self.fixed_rate) / (1.0 + tau * fwd) * df_start

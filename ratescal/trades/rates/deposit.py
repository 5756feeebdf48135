"""
Resolved term deposit used as a calibration instrument.

The deposit starts on the spot date, pays back notional plus simple interest
at the end date, and is priced on the discount curve of its currency.

    par rate = (P(start) / P(end) - 1) / tau
    PV       = N * (-P(start) + (1 + r * tau) * P(end))

A single deposit starting today therefore calibrates P(end) = 1 / (1 + r*tau).
"""

import datetime
from dataclasses import dataclass

from ratescal.utils.error import LibError
from ratescal.utils.global_types import CurrencyTypes
from ratescal.utils.helpers import add_tenor, year_frac
from ratescal.marketdata.conventions import TermDepositConvention


@dataclass(frozen=True)
class ResolvedTermDeposit:
    """
    A term deposit with times already measured from the valuation date.

    Attributes:
        currency (CurrencyTypes): Currency of the deposit and discounting
        start_dt (date): Start date
        end_dt (date): End date
        start_time (float): Years from the valuation date to start
        end_time (float): Years from the valuation date to end
        year_fraction (float): Accrual fraction used for interest
        rate (float): Quoted simple rate
        notional (float): Amount lent
    """
    currency: CurrencyTypes
    start_dt: datetime.date
    end_dt: datetime.date
    start_time: float
    end_time: float
    year_fraction: float
    rate: float
    notional: float = 1.0

    @staticmethod
    def of(convention: TermDepositConvention,
           value_dt: datetime.date,
           tenor: str,
           rate: float,
           notional: float = 1.0):
        """ Build the deposit starting on spot and ending after the tenor. """
        start_dt = value_dt + datetime.timedelta(days=convention.spot_days)
        end_dt = add_tenor(start_dt, tenor)
        if end_dt <= start_dt:
            raise LibError(f"Deposit tenor {tenor} has no length")
        return ResolvedTermDeposit(convention.currency,
                                   start_dt,
                                   end_dt,
                                   year_frac(value_dt, start_dt),
                                   year_frac(value_dt, end_dt),
                                   year_frac(start_dt, end_dt),
                                   rate,
                                   notional)

    def par_rate(self, provider):
        df_start = provider.discount_factor(self.currency, self.start_time)
        df_end = provider.discount_factor(self.currency, self.end_time)
        return (df_start / df_end - 1.0) / self.year_fraction

    def present_value(self, provider):
        df_start = provider.discount_factor(self.currency, self.start_time)
        df_end = provider.discount_factor(self.currency, self.end_time)
        repay = 1.0 + self.rate * self.year_fraction
        return self.notional * (repay * df_end - df_start)

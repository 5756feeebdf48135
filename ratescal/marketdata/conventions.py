"""
Trade conventions used to turn curve nodes into reference trades.

Conventions carry the static terms of a calibration instrument (currency,
index, leg frequencies, spot lag) and are looked up by name in the reference
data. Dates are shifted by calendar days and tenors without business day
adjustment.
"""

from dataclasses import dataclass
from typing import Optional

from ratescal.utils.error import LibError
from ratescal.utils.global_types import CurrencyTypes, SwapTypes
from ratescal.market.indices.rate_index import RateIndex


@dataclass(frozen=True)
class TermDepositConvention:
    name: str
    currency: CurrencyTypes
    spot_days: int = 0


@dataclass(frozen=True)
class FraConvention:
    name: str
    index: RateIndex
    spot_days: int = 0

    def __post_init__(self):
        if not self.index.is_ibor:
            raise LibError(f"FRA convention {self.name} needs an IBOR index")


@dataclass(frozen=True)
class FixedFloatSwapConvention:
    """
    Fixed versus floating swap terms.

    The floating leg accrues on the index tenor for IBOR indices. Overnight
    legs use the fixed leg frequency unless float_tenor is given, with the
    compounded rate of each period forecast from the index curve.

    Attributes:
        name (str): Convention name used as reference data key
        index (RateIndex): Floating index
        fixed_tenor (str): Fixed leg period length (e.g., "1Y", "6M")
        float_tenor (str | None): Floating leg period length override
        spot_days (int): Calendar days between trade date and start
        fixed_leg_type (SwapTypes): PAY or RECEIVE fixed for present values
    """
    name: str
    index: RateIndex
    fixed_tenor: str = "1Y"
    float_tenor: Optional[str] = None
    spot_days: int = 0
    fixed_leg_type: SwapTypes = SwapTypes.RECEIVE

    @property
    def currency(self):
        return self.index.currency

    @property
    def float_period(self):
        if self.float_tenor is not None:
            return self.float_tenor
        if self.index.is_ibor:
            return self.index.tenor
        return self.fixed_tenor

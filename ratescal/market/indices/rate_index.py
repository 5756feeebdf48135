"""
Interest rate indices referenced by forward curves.

A RateIndex is identified by its name and belongs to one family: IBOR style
term rates that fix once for a tenor, or OVERNIGHT rates that are compounded
over an accrual period. Curve group entries keep the two families in separate
sets, and the rates provider maps each index to the curve that forecasts it.

Example:
    >>> USD_LIBOR_3M.family
    <IndexFamilyTypes.IBOR: 1>
    >>> USD_SOFR.currency
    <CurrencyTypes.USD: 1>
"""

from dataclasses import dataclass
from typing import Optional

from ratescal.utils.error import LibError
from ratescal.utils.global_types import CurrencyTypes, IndexFamilyTypes


@dataclass(frozen=True)
class RateIndex:
    """
    An interest rate index.

    Attributes:
        name (str): Unique index name (e.g., "USD-LIBOR-3M")
        currency (CurrencyTypes): Currency of the index
        family (IndexFamilyTypes): IBOR or OVERNIGHT
        tenor (str | None): Fixing tenor for IBOR indices (e.g., "3M")
    """
    name: str
    currency: CurrencyTypes
    family: IndexFamilyTypes
    tenor: Optional[str] = None

    def __post_init__(self):
        if self.family == IndexFamilyTypes.IBOR and self.tenor is None:
            raise LibError(f"IBOR index {self.name} needs a tenor")
        if self.family == IndexFamilyTypes.OVERNIGHT and self.tenor is not None:
            raise LibError(f"Overnight index {self.name} cannot have a tenor")

    @property
    def is_ibor(self):
        return self.family == IndexFamilyTypes.IBOR

    @property
    def is_overnight(self):
        return self.family == IndexFamilyTypes.OVERNIGHT

    def __repr__(self):
        return self.name


USD_LIBOR_3M = RateIndex("USD-LIBOR-3M", CurrencyTypes.USD, IndexFamilyTypes.IBOR, "3M")
USD_LIBOR_6M = RateIndex("USD-LIBOR-6M", CurrencyTypes.USD, IndexFamilyTypes.IBOR, "6M")
USD_SOFR = RateIndex("USD-SOFR", CurrencyTypes.USD, IndexFamilyTypes.OVERNIGHT)
USD_FED_FUND = RateIndex("USD-FED-FUND", CurrencyTypes.USD, IndexFamilyTypes.OVERNIGHT)
GBP_SONIA = RateIndex("GBP-SONIA", CurrencyTypes.GBP, IndexFamilyTypes.OVERNIGHT)
EUR_ESTR = RateIndex("EUR-ESTR", CurrencyTypes.EUR, IndexFamilyTypes.OVERNIGHT)
EUR_EURIBOR_3M = RateIndex("EUR-EURIBOR-3M", CurrencyTypes.EUR, IndexFamilyTypes.IBOR, "3M")
EUR_EURIBOR_6M = RateIndex("EUR-EURIBOR-6M", CurrencyTypes.EUR, IndexFamilyTypes.IBOR, "6M")

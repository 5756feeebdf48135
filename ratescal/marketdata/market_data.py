"""
Market data and reference data containers consumed by the calibration.

MarketData holds observable quotes keyed by identifier, FX rates keyed by
currency pair (e.g. "EURUSD") and historical fixings keyed by index. All of
it must be supplied up front; nothing is fetched during calibration.

ReferenceData resolves convention names used by curve nodes into convention
objects.

Example:
    >>> md = MarketData(datetime.date(2024, 1, 2),
    ...                 quotes={"USD-DEP-3M": 0.0525, "USD-DEP-6M": 0.053},
    ...                 fx_rates={"EURUSD": 1.10})
    >>> md.quote("USD-DEP-3M")
    0.0525
    >>> ref_data = ReferenceData.standard()
    >>> ref_data.get("USD-DEPOSIT")
"""

import datetime
from types import MappingProxyType
from typing import Mapping, Optional

from ratescal.utils.error import ConfigurationError, MarketDataMissingError
from ratescal.utils.global_types import CurrencyTypes
from ratescal.market.indices.rate_index import (RateIndex,
                                                USD_LIBOR_3M,
                                                USD_LIBOR_6M,
                                                USD_SOFR,
                                                USD_FED_FUND,
                                                GBP_SONIA,
                                                EUR_ESTR,
                                                EUR_EURIBOR_3M,
                                                EUR_EURIBOR_6M)
from ratescal.marketdata.conventions import (TermDepositConvention,
                                             FraConvention,
                                             FixedFloatSwapConvention)

###############################################################################


class MarketData:
    """
    Immutable snapshot of observable market data for one valuation date.

    Attributes:
        value_dt (date): Date the snapshot applies to
        quotes (Mapping[str, float]): Quote id -> value
        fx_rates (Mapping[str, float]): Pair code -> rate (counter per base)
        time_series (Mapping[RateIndex, Mapping[date, float]]): Fixings
    """

    def __init__(self,
                 value_dt: datetime.date,
                 quotes: Optional[Mapping[str, float]] = None,
                 fx_rates: Optional[Mapping[str, float]] = None,
                 time_series: Optional[Mapping[RateIndex, Mapping]] = None):

        self._value_dt = value_dt
        self._quotes = MappingProxyType(
            {k: float(v) for k, v in (quotes or {}).items()})
        self._fx_rates = MappingProxyType(
            {k: float(v) for k, v in (fx_rates or {}).items()})
        self._time_series = MappingProxyType(
            {idx: MappingProxyType(dict(ts))
             for idx, ts in (time_series or {}).items()})

    @property
    def value_dt(self):
        return self._value_dt

    @property
    def quotes(self):
        return self._quotes

    @property
    def fx_rates(self):
        return self._fx_rates

    @property
    def time_series(self):
        return self._time_series

    def contains(self, quote_id: str):
        return quote_id in self._quotes

    def quote(self, quote_id: str):
        """ Value of a quote. Raises MarketDataMissingError if absent. """
        try:
            return self._quotes[quote_id]
        except KeyError:
            raise MarketDataMissingError(
                f"No market quote found for {quote_id!r}") from None

    def fx_rate(self, pair: str):
        """ FX rate for a six letter pair code such as "EURUSD". """
        try:
            return self._fx_rates[pair]
        except KeyError:
            raise MarketDataMissingError(
                f"No FX rate found for {pair!r}") from None

    def fixings(self, index: RateIndex):
        """ Fixing time series for an index, empty if none was supplied. """
        return self._time_series.get(index, MappingProxyType({}))

    def with_quote(self, quote_id: str, value: float):
        """ New snapshot with one quote replaced or added. Used for bumping
        a single input in scenario and finite difference runs. """
        quotes = dict(self._quotes)
        quotes[quote_id] = value
        return MarketData(self._value_dt, quotes,
                          self._fx_rates, self._time_series)

    def __repr__(self):
        return (f"MarketData(value_dt={self._value_dt}, "
                f"quotes={len(self._quotes)}, fx_rates={len(self._fx_rates)}, "
                f"time_series={len(self._time_series)})")

###############################################################################


class ReferenceData:
    """
    Lookup of trade conventions by name.

    Example:
        >>> ref_data = ReferenceData({"USD-DEPOSIT": TermDepositConvention(
        ...     "USD-DEPOSIT", CurrencyTypes.USD)})
    """

    def __init__(self, conventions: Mapping[str, object]):
        self._conventions = MappingProxyType(dict(conventions))

    def get(self, name: str):
        try:
            return self._conventions[name]
        except KeyError:
            raise ConfigurationError(
                f"Reference data not found for {name!r}") from None

    def contains(self, name: str):
        return name in self._conventions

    def combined_with(self, other: "ReferenceData"):
        """ New reference data with the entries of other taking priority. """
        merged = dict(self._conventions)
        merged.update(other._conventions)
        return ReferenceData(merged)

    @staticmethod
    def standard():
        """ Reference data holding the standard conventions. """
        return ReferenceData({c.name: c for c in _STANDARD_CONVENTIONS})

    def __repr__(self):
        return f"ReferenceData({sorted(self._conventions)})"

###############################################################################


_STANDARD_CONVENTIONS = (
    TermDepositConvention("USD-DEPOSIT", CurrencyTypes.USD, spot_days=0),
    TermDepositConvention("GBP-DEPOSIT", CurrencyTypes.GBP, spot_days=0),
    TermDepositConvention("EUR-DEPOSIT", CurrencyTypes.EUR, spot_days=0),
    FraConvention("USD-LIBOR-3M-FRA", USD_LIBOR_3M),
    FraConvention("USD-LIBOR-6M-FRA", USD_LIBOR_6M),
    FraConvention("EUR-EURIBOR-3M-FRA", EUR_EURIBOR_3M),
    FraConvention("EUR-EURIBOR-6M-FRA", EUR_EURIBOR_6M),
    FixedFloatSwapConvention("USD-FIXED-6M-LIBOR-3M", USD_LIBOR_3M, fixed_tenor="6M"),
    FixedFloatSwapConvention("USD-FIXED-6M-LIBOR-6M", USD_LIBOR_6M, fixed_tenor="6M"),
    FixedFloatSwapConvention("USD-FIXED-1Y-SOFR", USD_SOFR, fixed_tenor="1Y"),
    FixedFloatSwapConvention("USD-FIXED-1Y-FED-FUND", USD_FED_FUND, fixed_tenor="1Y"),
    FixedFloatSwapConvention("GBP-FIXED-1Y-SONIA", GBP_SONIA, fixed_tenor="1Y"),
    FixedFloatSwapConvention("EUR-FIXED-1Y-ESTR", EUR_ESTR, fixed_tenor="1Y"),
    FixedFloatSwapConvention("EUR-FIXED-1Y-EURIBOR-3M", EUR_EURIBOR_3M, fixed_tenor="1Y"),
    FixedFloatSwapConvention("EUR-FIXED-1Y-EURIBOR-6M", EUR_EURIBOR_6M, fixed_tenor="1Y"),
)

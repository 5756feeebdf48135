"""
Market indices package for interest rate indices.

Provides:
- RateIndex: IBOR (term rate) and overnight indices
- Standard USD, GBP and EUR indices
"""

from .rate_index import (RateIndex,
                         USD_LIBOR_3M,
                         USD_LIBOR_6M,
                         USD_SOFR,
                         USD_FED_FUND,
                         GBP_SONIA,
                         EUR_ESTR,
                         EUR_EURIBOR_3M,
                         EUR_EURIBOR_6M)

__all__ = ['RateIndex', 'USD_LIBOR_3M', 'USD_LIBOR_6M', 'USD_SOFR',
           'USD_FED_FUND', 'GBP_SONIA', 'EUR_ESTR', 'EUR_EURIBOR_3M',
           'EUR_EURIBOR_6M']

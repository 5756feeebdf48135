"""
Global type enumerations for currencies, indices, curves and trades.

Enumerations:
- CurrencyTypes: ISO currencies used by discount curves and FX lookups
- IndexFamilyTypes: IBOR (term rate) or OVERNIGHT index family
- ValueTypes: What the parameters of a nodal curve represent
- InterpTypes: Curve interpolation methods supported by the AD interpolator
- SwapTypes: Direction of the fixed leg of a reference swap

Example:
    >>> definition = NodalCurveDefinition(
    ...     name="USD-DSC",
    ...     nodes=nodes,
    ...     value_type=ValueTypes.DISCOUNT_FACTOR,
    ...     interp_type=InterpTypes.LINEAR_ZERO_RATES
    ... )
"""

from enum import Enum


class CurrencyTypes(Enum):
    USD = 1
    EUR = 2
    GBP = 3
    CHF = 4
    JPY = 5
    CAD = 6
    AUD = 7

class IndexFamilyTypes(Enum):
    IBOR = 1
    OVERNIGHT = 2

class ValueTypes(Enum):
    ZERO_RATE = 1
    DISCOUNT_FACTOR = 2

class InterpTypes(Enum):
    FLAT_FWD_RATES = 1
    LINEAR_ZERO_RATES = 4

class SwapTypes(Enum):
    PAY = 1
    RECEIVE = 2

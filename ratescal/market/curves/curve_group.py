"""
Curve groups: the unit of simultaneous calibration.

A CurveGroupDefinition lists entries, one per curve the group makes
available, together with the definitions of the curves calibrated by the
group. An entry without a definition names a curve that is supplied
externally, through the known data of the calibration.

Groups are built with CurveGroupDefinitionBuilder:

    >>> group = (CurveGroupDefinition.builder()
    ...          .name("USD")
    ...          .add_discount_curve(dsc_defn, CurrencyTypes.USD)
    ...          .add_forward_curve(fwd_defn, USD_LIBOR_3M)
    ...          .build())

Registering the same curve name twice merges the roles of the two
registrations into one entry.
"""

import datetime
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple, Union

from ratescal.utils.error import ConfigurationError
from ratescal.utils.global_types import CurrencyTypes
from ratescal.market.indices.rate_index import RateIndex
from ratescal.market.curves.curve_definition import NodalCurveDefinition
from ratescal.market.curves.jacobian import total_parameter_count

###############################################################################


@dataclass(frozen=True)
class CurveGroupEntry:
    """ The roles one curve plays in a group: discounting for a set of
    currencies and forecasting for a set of indices. """
    curve_name: str
    discount_currencies: FrozenSet[CurrencyTypes] = field(default_factory=frozenset)
    ibor_indices: FrozenSet[RateIndex] = field(default_factory=frozenset)
    overnight_indices: FrozenSet[RateIndex] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "discount_currencies",
                           frozenset(self.discount_currencies))
        object.__setattr__(self, "ibor_indices", frozenset(self.ibor_indices))
        object.__setattr__(self, "overnight_indices",
                           frozenset(self.overnight_indices))

        for index in self.ibor_indices:
            if not index.is_ibor:
                raise ConfigurationError(f"{index.name} is not an IBOR index")
        for index in self.overnight_indices:
            if not index.is_overnight:
                raise ConfigurationError(f"{index.name} is not an overnight index")

    @staticmethod
    def of(curve_name: str, currencies=(), indices=()):
        """ Entry whose indices are split into IBOR and overnight sets by
        family. """
        indices = tuple(indices)
        return CurveGroupEntry(curve_name,
                               frozenset(currencies),
                               frozenset(i for i in indices if i.is_ibor),
                               frozenset(i for i in indices if i.is_overnight))

    @property
    def indices(self):
        return self.ibor_indices | self.overnight_indices

    def merge(self, other: "CurveGroupEntry"):
        """ Entry with the union of the roles of both entries. """
        if other.curve_name != self.curve_name:
            raise ConfigurationError(
                f"Cannot merge entries for different curves: "
                f"{self.curve_name} and {other.curve_name}")

        return CurveGroupEntry(self.curve_name,
                               self.discount_currencies | other.discount_currencies,
                               self.ibor_indices | other.ibor_indices,
                               self.overnight_indices | other.overnight_indices)

###############################################################################


@dataclass(frozen=True)
class CurveGroupDefinition:
    """
    Entries and calibrated curve definitions of one group.

    Attributes:
        name (str): Group name
        entries (tuple[CurveGroupEntry]): Entries in registration order
        curve_definitions (tuple[NodalCurveDefinition]): Curves calibrated by
            the group in registration order, which is their parameter order
    """
    name: str
    entries: Tuple[CurveGroupEntry, ...]
    curve_definitions: Tuple[NodalCurveDefinition, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "entries", tuple(self.entries))
        object.__setattr__(self, "curve_definitions", tuple(self.curve_definitions))

        entry_names = [e.curve_name for e in self.entries]
        if len(set(entry_names)) != len(entry_names):
            raise ConfigurationError(
                f"Group {self.name} has duplicate entries: {entry_names}")

        defn_names = [d.name for d in self.curve_definitions]
        if len(set(defn_names)) != len(defn_names):
            raise ConfigurationError(
                f"Group {self.name} has duplicate curve definitions: {defn_names}")

        missing = set(defn_names) - set(entry_names)
        if missing:
            raise ConfigurationError(
                f"Group {self.name} has definitions without entries: "
                f"{sorted(missing)}")

    @staticmethod
    def builder():
        return CurveGroupDefinitionBuilder()

    @property
    def curve_names(self):
        return tuple(e.curve_name for e in self.entries)

    @property
    def calibrated_curve_names(self):
        return tuple(d.name for d in self.curve_definitions)

    def entry(self, curve_name: str) -> Optional[CurveGroupEntry]:
        for e in self.entries:
            if e.curve_name == curve_name:
                return e
        return None

    def find_curve_definition(self, curve_name: str) -> Optional[NodalCurveDefinition]:
        for d in self.curve_definitions:
            if d.name == curve_name:
                return d
        return None

    def to_curve_parameter_sizes(self):
        return tuple(d.to_curve_parameter_size() for d in self.curve_definitions)

    @property
    def total_parameter_count(self):
        return total_parameter_count(self.to_curve_parameter_sizes())

    def resolved_trades(self, value_dt: datetime.date, market_data, ref_data):
        """ Reference trades of every node, curve by curve in parameter
        order. """
        trades = []
        for defn in self.curve_definitions:
            trades.extend(defn.resolved_trades(value_dt, market_data, ref_data))
        return trades

    def initial_guesses(self, value_dt: datetime.date, market_data):
        guesses = []
        for defn in self.curve_definitions:
            guesses.extend(defn.initial_guesses(value_dt, market_data))
        return guesses

###############################################################################


class CurveGroupDefinitionBuilder:
    """ Mutable builder of a CurveGroupDefinition. Each call to build()
    takes a snapshot, so the builder can keep being used afterwards. """

    def __init__(self):
        self._name = None
        self._entries = {}
        self._definitions = {}

    def name(self, name: str):
        self._name = name
        return self

    def add_discount_curve(self,
                           curve: Union[NodalCurveDefinition, str],
                           currency: CurrencyTypes,
                           *other_currencies: CurrencyTypes):
        """ Register a curve used for discounting in the currencies. """
        entry = CurveGroupEntry.of(self._curve_name(curve),
                                   currencies=(currency,) + other_currencies)
        return self._merge(entry, curve)

    def add_forward_curve(self,
                          curve: Union[NodalCurveDefinition, str],
                          index: RateIndex,
                          *other_indices: RateIndex):
        """ Register a curve used to forecast the indices. """
        entry = CurveGroupEntry.of(self._curve_name(curve),
                                   indices=(index,) + other_indices)
        return self._merge(entry, curve)

    def add_curve(self,
                  curve: Union[NodalCurveDefinition, str],
                  currency: CurrencyTypes,
                  index: RateIndex,
                  *other_indices: RateIndex):
        """ Register a curve used both for discounting and forecasting. """
        entry = CurveGroupEntry.of(self._curve_name(curve),
                                   currencies=(currency,),
                                   indices=(index,) + other_indices)
        return self._merge(entry, curve)

    def build(self):
        if self._name is None:
            raise ConfigurationError("Curve group must have a name")
        return CurveGroupDefinition(self._name,
                                    tuple(self._entries.values()),
                                    tuple(self._definitions.values()))

    @staticmethod
    def _curve_name(curve):
        if isinstance(curve, NodalCurveDefinition):
            return curve.name
        if isinstance(curve, str):
            return curve
        raise ConfigurationError(
            f"Expected a curve definition or a curve name, got {curve!r}")

    def _merge(self, entry, curve):
        if isinstance(curve, NodalCurveDefinition):
            self._definitions[curve.name] = curve
        existing = self._entries.get(entry.curve_name)
        self._entries[entry.curve_name] = (entry if existing is None
                                           else existing.merge(entry))
        return self

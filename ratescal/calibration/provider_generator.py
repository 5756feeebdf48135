"""
Generation of rates providers from a calibration parameter vector.

The generator is the bridge between the flat parameter vector of the root
finder and the curves of a group: it slices the vector along the group's
curve definitions, builds one curve per definition and layers the curves on
top of the known provider with the roles given by the group entries.

generate() is a pure function of its arguments, so it can be called
repeatedly by the root finder and traced by jax.grad.
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional

import jax.numpy as jnp

from ratescal.utils.error import ConfigurationError
from ratescal.market.curves.curve_group import CurveGroupDefinition
from ratescal.market.curves.jacobian import JacobianCalibrationMatrix
from ratescal.models.rates_provider import RatesProvider


class RatesProviderGenerator(ABC):

    @abstractmethod
    def generate(self,
                 parameters,
                 jacobians: Optional[Mapping[str, JacobianCalibrationMatrix]] = None):
        """ Provider whose group curves take the values in parameters. """


class ImmutableRatesProviderGenerator(RatesProviderGenerator):
    """ Generator layering the curves of one group on an immutable known
    provider. """

    def __init__(self,
                 known_provider: RatesProvider,
                 group: CurveGroupDefinition,
                 ref_data):

        for entry in group.entries:
            if (group.find_curve_definition(entry.curve_name) is None
                    and entry.curve_name not in known_provider.curves):
                raise ConfigurationError(
                    f"Curve {entry.curve_name} of group {group.name} is neither "
                    f"calibrated nor present in the known data")

        discount_curves = {}
        index_curves = {}
        for entry in group.entries:
            for ccy in entry.discount_currencies:
                discount_curves[ccy] = entry.curve_name
            for index in entry.indices:
                index_curves[index] = entry.curve_name

        self._known_provider = known_provider
        self._group = group
        self._ref_data = ref_data
        self._definitions = group.curve_definitions
        self._parameter_count = group.total_parameter_count
        self._discount_curves = discount_curves
        self._index_curves = index_curves

    @staticmethod
    def of(known_provider: RatesProvider,
           group: CurveGroupDefinition,
           ref_data):
        return ImmutableRatesProviderGenerator(known_provider, group, ref_data)

    @property
    def known_provider(self):
        return self._known_provider

    @property
    def group(self):
        return self._group

    def generate(self,
                 parameters,
                 jacobians: Optional[Mapping[str, JacobianCalibrationMatrix]] = None):

        x = jnp.asarray(parameters, dtype=jnp.float64)
        if x.shape != (self._parameter_count,):
            raise ConfigurationError(
                f"Group {self._group.name} has {self._parameter_count} "
                f"parameters, got a vector of shape {x.shape}")

        jacobians = jacobians or {}
        value_dt = self._known_provider.value_dt
        curves = []
        start = 0
        for defn in self._definitions:
            end = start + defn.parameter_count
            curves.append(defn.curve(value_dt,
                                     self._ref_data,
                                     x[start:end],
                                     jacobians.get(defn.name)))
            start = end

        return self._known_provider.with_curves(curves,
                                                self._discount_curves,
                                                self._index_curves)

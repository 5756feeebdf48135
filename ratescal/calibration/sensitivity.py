"""
Sensitivity of a value to calibrated curve parameters and market quotes.

The parameter sensitivity of a function of a rates provider is its exact
gradient with respect to the parameters of the curves that carry calibration
Jacobians. Multiplying each curve's parameter sensitivity by its Jacobian
turns it into sensitivities to the market quotes of every curve in the
Jacobian's ordering; contributions to the same curve are summed.
"""

from collections.abc import Mapping
from typing import Callable, Dict, Optional

import numpy as np
import pandas as pd
import jax
import jax.numpy as jnp

from ratescal.utils.error import ConfigurationError
from ratescal.market.curves.jacobian import CurveParameterSize
from ratescal.models.rates_provider import RatesProvider

jax.config.update("jax_enable_x64", True)

###############################################################################


class CurveSensitivities(Mapping):
    """
    Immutable curve name -> sensitivity vector mapping.

    Example:
        >>> sens = calculator.sensitivity(param_sens, provider)
        >>> sens["USD-DSC"]
        >>> sens.df
    """

    def __init__(self,
                 values: Dict[str, np.ndarray],
                 labels: Optional[Dict[str, tuple]] = None):
        self._values = {}
        for name, v in values.items():
            arr = np.array(v, dtype=np.float64)
            arr.setflags(write=False)
            self._values[name] = arr
        self._labels = dict(labels or {})

    def __getitem__(self, name):
        return self._values[name]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def labels(self, name):
        labels = self._labels.get(name)
        if labels is None:
            return tuple(str(i) for i in range(self._values[name].size))
        return tuple(labels)

    @property
    def df(self) -> pd.DataFrame:
        """ One row per curve node with its sensitivity. """
        rows = [(name, label, float(value))
                for name, arr in self._values.items()
                for label, value in zip(self.labels(name), arr)]
        df = pd.DataFrame(rows, columns=["Curve", "Node", "Sensitivity"])
        return df.set_index(["Curve", "Node"])

    def __add__(self, other):
        if not isinstance(other, CurveSensitivities):
            return NotImplemented
        values = {name: arr.copy() for name, arr in self._values.items()}
        labels = dict(self._labels)
        for name, arr in other.items():
            if name in values:
                if values[name].shape != arr.shape:
                    raise ConfigurationError(
                        f"Cannot add sensitivities of different sizes for {name}")
                values[name] = values[name] + arr
            else:
                values[name] = arr.copy()
                labels.setdefault(name, other._labels.get(name))
        return CurveSensitivities(values, labels)

    def __repr__(self):
        return f"CurveSensitivities({ {k: v.tolist() for k, v in self._values.items()} })"

###############################################################################


class MarketQuoteSensitivityCalculator:
    """ Converts parameter sensitivities into market quote sensitivities
    using the Jacobians stamped on calibrated curves. """

    def parameter_sensitivity(self,
                              fn: Callable,
                              provider: RatesProvider):
        """ Gradient of fn(provider) with respect to the parameters of every
        curve carrying a Jacobian. fn must be written in jax.numpy. """
        names = list(provider.jacobians)
        order = tuple(CurveParameterSize(name, provider.curve(name).parameter_count)
                      for name in names)
        if not order:
            return CurveSensitivities({})

        x0 = jnp.asarray(provider.parameters(order), dtype=jnp.float64)
        grad = np.asarray(jax.grad(lambda x: fn(provider.with_parameters(order, x)))(x0))

        values = {}
        labels = {}
        start = 0
        for size in order:
            values[size.name] = grad[start:start + size.parameter_count]
            labels[size.name] = provider.curve(size.name).node_labels
            start += size.parameter_count
        return CurveSensitivities(values, labels)

    def sensitivity(self,
                    parameter_sensitivity: CurveSensitivities,
                    provider: RatesProvider):
        """ Market quote sensitivity from a parameter sensitivity. """
        values = {}
        for name, sens in parameter_sensitivity.items():
            jacobian = provider.curve(name).jacobian
            if jacobian is None:
                raise ConfigurationError(
                    f"Curve {name} has no calibration Jacobian")
            quote_sens = np.asarray(sens) @ jacobian.jacobian_matrix
            for other, part in jacobian.split(quote_sens).items():
                values[other] = values.get(other, 0.0) + part

        labels = {name: provider.curve(name).node_labels
                  for name in values if name in provider.curves}
        return CurveSensitivities(values, labels)

##############################################################################

##############################################################################

"""
Nodal discount curve defined by parameters at fixed node times.

The curve parameters are the values at the nodes (zero rates or discount
factors depending on the value type). They may be plain floats or JAX
tracers, which is what lets the calibration differentiate any price through
the curve with respect to its parameters.

Example:
    >>> curve = InterpolatedNodalCurve(
    ...     name="USD-DSC",
    ...     value_dt=datetime.date(2024, 1, 2),
    ...     times=[0.25, 0.5, 1.0],
    ...     parameters=[0.052, 0.051, 0.049],
    ...     value_type=ValueTypes.ZERO_RATE,
    ...     interp_type=InterpTypes.LINEAR_ZERO_RATES
    ... )
    >>> curve.df(0.75)
"""

import datetime
from typing import Optional

import numpy as np
import jax
import jax.numpy as jnp

from ratescal.utils.error import LibError, ConfigurationError
from ratescal.utils.helpers import (check_argument_types,
                                   _func_name,
                                   year_frac,
                                   format_table)
from ratescal.utils.global_types import InterpTypes, ValueTypes
from ratescal.market.curves.interpolator_ad import InterpolatorAd
from ratescal.market.curves.jacobian import JacobianCalibrationMatrix

jax.config.update("jax_enable_x64", True)


class InterpolatedNodalCurve:
    """ A named curve whose discount factors are interpolated from one
    parameter per node. Instances are immutable: every change returns a new
    curve. """

###############################################################################

    def __init__(self,
                 name: str,
                 value_dt: datetime.date,
                 times: list,
                 parameters,
                 value_type: ValueTypes = ValueTypes.ZERO_RATE,
                 interp_type: InterpTypes = InterpTypes.LINEAR_ZERO_RATES,
                 node_labels: Optional[list] = None,
                 jacobian: Optional[JacobianCalibrationMatrix] = None):

        check_argument_types(getattr(self, _func_name(), None), locals())

        times = np.array(times, dtype=np.float64)
        params = jnp.asarray(parameters, dtype=jnp.float64)

        if times.ndim != 1 or times.size == 0:
            raise ConfigurationError(f"Curve {name} needs at least one node")
        if params.shape != times.shape:
            raise ConfigurationError(
                f"Curve {name} has {times.size} nodes but "
                f"{params.size} parameters")
        if np.any(times <= 0.0):
            raise ConfigurationError(
                f"Curve {name} node times must be after the valuation date")
        if np.any(np.diff(times) <= 0.0):
            raise ConfigurationError(
                f"Curve {name} node times must be strictly increasing")
        if node_labels is not None and len(node_labels) != times.size:
            raise ConfigurationError(
                f"Curve {name} has {len(node_labels)} labels for "
                f"{times.size} nodes")
        if jacobian is not None and jacobian.jacobian_matrix.shape[0] != times.size:
            raise ConfigurationError(
                f"Jacobian of curve {name} has "
                f"{jacobian.jacobian_matrix.shape[0]} rows for "
                f"{times.size} parameters")

        times.setflags(write=False)
        self._name = name
        self._value_dt = value_dt
        self._times = times
        self._parameters = params
        self._value_type = value_type
        self._interp_type = interp_type
        self._node_labels = tuple(node_labels) if node_labels is not None else None
        self._jacobian = jacobian

        self._interpolator = InterpolatorAd(interp_type)
        self._interpolator.fit(times, params, value_type)

###############################################################################

    @property
    def name(self):
        return self._name

    @property
    def value_dt(self):
        return self._value_dt

    @property
    def times(self):
        return self._times

    @property
    def parameters(self):
        return self._parameters

    @property
    def parameter_count(self):
        return self._times.size

    @property
    def value_type(self):
        return self._value_type

    @property
    def interp_type(self):
        return self._interp_type

    @property
    def node_labels(self):
        return self._node_labels

    @property
    def jacobian(self):
        """ Calibration Jacobian stamped on the curve, or None. """
        return self._jacobian

###############################################################################

    def _to_time(self, t):
        if isinstance(t, datetime.date):
            t = year_frac(self._value_dt, t)
        if np.any(np.asarray(t) < 0.0):
            raise LibError(f"Time {t} is before the curve valuation date")
        return t

    def df(self, t):
        """ Discount factor at a time in years or a date. """
        return self._interpolator.interpolate(self._to_time(t))

    def zero_rate(self, t):
        """ Continuously compounded zero rate at a positive time or date. """
        t = self._to_time(t)
        return -jnp.log(self.df(t)) / t

    def fwd_rate(self, t1, t2, year_fraction=None):
        """ Simply compounded forward rate between two times or dates. """
        t1 = self._to_time(t1)
        t2 = self._to_time(t2)
        acc = (t2 - t1) if year_fraction is None else year_fraction
        return (self.df(t1) / self.df(t2) - 1.0) / acc

###############################################################################

    def with_parameters(self, parameters):
        """ Same curve with new node values. The Jacobian is not carried
        over since it belongs to the old parameters. """
        return InterpolatedNodalCurve(self._name,
                                      self._value_dt,
                                      self._times,
                                      parameters,
                                      self._value_type,
                                      self._interp_type,
                                      self._node_labels)

    def with_jacobian(self, jacobian: JacobianCalibrationMatrix):
        return InterpolatedNodalCurve(self._name,
                                      self._value_dt,
                                      self._times,
                                      self._parameters,
                                      self._value_type,
                                      self._interp_type,
                                      self._node_labels,
                                      jacobian)

###############################################################################

    def __repr__(self):
        header = ["LABEL", "TIME", self._value_type.name, "DF"]
        labels = self._node_labels or [str(i) for i in range(self.parameter_count)]
        params = np.asarray(self._parameters)
        dfs = np.atleast_1d(np.asarray(self.df(self._times)))
        rows = []
        for i in range(self.parameter_count):
            rows.append([labels[i],
                         round(float(self._times[i]), 4),
                         round(float(params[i]), 8),
                         round(float(dfs[i]), 8)])

        s = f"{type(self).__name__}({self._name}, {self._interp_type.name})\n"
        return s + format_table(header, rows)

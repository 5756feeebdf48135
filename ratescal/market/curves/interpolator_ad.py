"""
JAX interpolation of discount factors from nodal curve parameters.

Node values are first mapped to continuously compounded zero rates and the
discount factor at time t is obtained from one of two schemes:

- LINEAR_ZERO_RATES: zero rates linear between nodes, flat outside
- FLAT_FWD_RATES: r(t)*t linear between nodes (piecewise flat forwards),
  anchored at zero on the valuation date and extrapolated with the last
  forward

Every operation is written in jax.numpy so that the parameters can be traced
by jax.grad when calibration derivatives are computed.
"""

import jax
import jax.numpy as jnp

from ratescal.utils.error import LibError
from ratescal.utils.global_types import InterpTypes, ValueTypes

jax.config.update("jax_enable_x64", True)


@jax.jit
def _df_linear_zero(t, x, z):
    if x.shape[0] == 1:
        return jnp.exp(-z[0] * t)
    return jnp.exp(-jnp.interp(t, x, z) * t)

@jax.jit
def _df_flat_fwd(t, x, z):
    xx = jnp.concatenate([jnp.zeros(1), x])
    rt = jnp.concatenate([jnp.zeros(1), z * x])
    last_fwd = (rt[-1] - rt[-2]) / (xx[-1] - xx[-2])
    inside = jnp.interp(t, xx, rt)
    beyond = rt[-1] + (t - xx[-1]) * last_fwd
    return jnp.exp(-jnp.where(t > xx[-1], beyond, inside))


class InterpolatorAd:
    """ Discount factor interpolator over curve nodes. Fitting does not
    modify the inputs and a fitted interpolator is never refitted by the
    curves that own it. """

    def __init__(self, interpolator_type: InterpTypes):
        self._interp_type = interpolator_type
        self._times = None
        self._zero_rates = None

    def fit(self, times, values, value_type: ValueTypes):
        x = jnp.asarray(times, dtype=jnp.float64)
        v = jnp.asarray(values, dtype=jnp.float64)
        if value_type == ValueTypes.DISCOUNT_FACTOR:
            z = -jnp.log(v) / x
        elif value_type == ValueTypes.ZERO_RATE:
            z = v
        else:
            raise LibError(f"Unsupported value type {value_type}")
        self._times = x
        self._zero_rates = z

    def interpolate(self, t):
        if self._zero_rates is None:
            raise LibError("Interpolator has not been fitted.")
        tt = jnp.asarray(t, dtype=jnp.float64)
        if self._interp_type == InterpTypes.LINEAR_ZERO_RATES:
            return _df_linear_zero(tt, self._times, self._zero_rates)
        elif self._interp_type == InterpTypes.FLAT_FWD_RATES:
            return _df_flat_fwd(tt, self._times, self._zero_rates)
        raise LibError("Invalid interpolation scheme.")

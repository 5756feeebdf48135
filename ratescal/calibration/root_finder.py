"""
Broyden root finder for square systems of calibration equations.

The first Jacobian is computed exactly and then maintained with Broyden
rank-one updates. Each step is the Newton direction damped by a backtracking
line search on the squared residual. When the line search cannot reduce the
residual the exact Jacobian is recomputed and the step retried; if even the
exact Jacobian gives no decrease the search has failed.

Linear systems are solved by SVD least squares so that a nearly singular
Jacobian still gives a usable direction.
"""

import logging
from typing import Callable

import numpy as np
import scipy.linalg

from ratescal.utils.error import NonConvergenceError
from ratescal.utils.helpers import check_argument_types, _func_name
from ratescal.utils.global_vars import (DEFAULT_TOLERANCE_ABS,
                                        DEFAULT_TOLERANCE_REL,
                                        DEFAULT_MAX_STEPS)

logger = logging.getLogger(__name__)

MAX_LINE_SEARCH_HALVINGS = 30


class BroydenVectorRootFinder:
    """
    Root finder for f: R^n -> R^n.

    Converged when every |f_i(x)| <= tol_abs and every component of the last
    step satisfies |dx_i| <= tol_abs + tol_rel * |x_i|.

    Example:
        >>> finder = BroydenVectorRootFinder(1e-9, 1e-9, 100)
        >>> x = finder.find_root(f, jacobian, np.array([0.01, 0.02]))
    """

    def __init__(self,
                 tol_abs: float = DEFAULT_TOLERANCE_ABS,
                 tol_rel: float = DEFAULT_TOLERANCE_REL,
                 max_steps: int = DEFAULT_MAX_STEPS):
        check_argument_types(getattr(self, _func_name(), None), locals())

        self._tol_abs = tol_abs
        self._tol_rel = tol_rel
        self._max_steps = max_steps

    @property
    def tol_abs(self):
        return self._tol_abs

    @property
    def tol_rel(self):
        return self._tol_rel

    @property
    def max_steps(self):
        return self._max_steps

###############################################################################

    def find_root(self,
                  fn: Callable,
                  jacobian_fn: Callable,
                  x0):
        """ Solve fn(x) = 0 starting from x0. jacobian_fn(x) returns the
        exact Jacobian dfn/dx. Raises NonConvergenceError if no root is found
        within max_steps. """

        x = np.array(x0, dtype=np.float64)
        y = self._evaluate(fn, x)
        if not np.all(np.isfinite(y)):
            raise NonConvergenceError(
                "Calibration residuals are not finite at the initial guess")

        if np.all(np.abs(y) <= self._tol_abs):
            return x

        jac = np.array(jacobian_fn(x), dtype=np.float64)
        jac_is_exact = True

        for step in range(1, self._max_steps + 1):

            x_new, y_new = self._line_search(fn, x, y, jac)

            if x_new is None:
                # residual already at machine precision
                if np.all(np.abs(y) <= self._tol_abs):
                    return x
                if jac_is_exact:
                    logger.error("Line search failed at step %d with max residual %.3e",
                                 step, np.max(np.abs(y)))
                    raise NonConvergenceError(
                        f"Root finder line search failed after {step} steps")
                logger.debug("Step %d: line search stalled, recomputing Jacobian",
                             step)
                jac = np.array(jacobian_fn(x), dtype=np.float64)
                jac_is_exact = True
                continue

            dx = x_new - x
            dy = y_new - y
            jac = jac + np.outer(dy - jac @ dx, dx) / np.dot(dx, dx)
            jac_is_exact = False
            x, y = x_new, y_new

            logger.debug("Step %d: max residual %.3e, max step %.3e",
                         step, np.max(np.abs(y)), np.max(np.abs(dx)))

            if self._is_converged(x, dx, y):
                return x

        logger.error("Root finder did not converge in %d steps, max residual %.3e",
                     self._max_steps, np.max(np.abs(y)))
        raise NonConvergenceError(
            f"Root finder failed to converge in {self._max_steps} steps")

###############################################################################

    @staticmethod
    def _evaluate(fn, x):
        return np.array(fn(x), dtype=np.float64)

    @staticmethod
    def _newton_direction(jac, y):
        dx, _, _, _ = scipy.linalg.lstsq(jac, -y, lapack_driver="gelsd")
        return dx

    def _line_search(self, fn, x, y, jac):
        """ Damped Newton step with a lower squared residual, or (None, None)
        when no damping reduces it. Non-finite residuals count as no
        decrease. """
        dx = self._newton_direction(jac, y)
        if not np.all(np.isfinite(dx)) or not np.any(dx):
            return None, None

        g0 = np.dot(y, y)
        lam = 1.0
        for _ in range(MAX_LINE_SEARCH_HALVINGS):
            x_new = x + lam * dx
            y_new = self._evaluate(fn, x_new)
            if np.all(np.isfinite(y_new)) and np.dot(y_new, y_new) < g0:
                return x_new, y_new
            lam *= 0.5
        return None, None

    def _is_converged(self, x, dx, y):
        if np.any(np.abs(y) > self._tol_abs):
            return False
        return bool(np.all(np.abs(dx) <= self._tol_abs + self._tol_rel * np.abs(x)))

    def __repr__(self):
        return (f"BroydenVectorRootFinder(tol_abs={self._tol_abs}, "
                f"tol_rel={self._tol_rel}, max_steps={self._max_steps})")

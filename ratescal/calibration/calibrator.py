"""
Calibration of curve groups and of their market quote Jacobians.

Groups are calibrated in order. The curves of each group are solved for
simultaneously so that every calibrating trade has a zero measure, then the
Jacobian of the group's curve parameters to the market quotes is computed,
including the part flowing through curves calibrated by earlier groups:

    direct   = inverse(dM/dp_group)
    indirect = -direct @ dM/dp_prev @ J_prev

where M are the measures of the group trades, p_prev the parameters of the
earlier curves and J_prev their Jacobians to the earlier quotes. Each
calibrated curve is stamped with its rows of [indirect | direct] as a
JacobianCalibrationMatrix against the ordering of all curves so far.

Example:
    >>> calibrator = CurveCalibrator.standard()
    >>> provider = calibrator.calibrate([ois_group, libor_group],
    ...                                 known_data, market_data, ref_data)
    >>> provider.curve("USD-3M").jacobian.df
"""

import logging
from typing import Sequence, Union

import numpy as np
import scipy.linalg

from ratescal.utils.error import ConfigurationError, NumericalError
from ratescal.utils.global_vars import (DEFAULT_TOLERANCE_ABS,
                                        DEFAULT_TOLERANCE_REL,
                                        DEFAULT_MAX_STEPS)
from ratescal.market.curves.curve_group import CurveGroupDefinition
from ratescal.market.curves.jacobian import (JacobianCalibrationMatrix,
                                             order_offsets,
                                             total_parameter_count)
from ratescal.models.rates_provider import RatesProvider
from ratescal.calibration.measures import CalibrationMeasures
from ratescal.calibration.provider_generator import ImmutableRatesProviderGenerator
from ratescal.calibration.root_finder import BroydenVectorRootFinder

logger = logging.getLogger(__name__)

###############################################################################


class CurveCalibrator:
    """ Calibrates curve groups with a Broyden root finder and the given
    calibration measures. Holds no state between calls. """

    def __init__(self,
                 tol_abs: float = DEFAULT_TOLERANCE_ABS,
                 tol_rel: float = DEFAULT_TOLERANCE_REL,
                 max_steps: int = DEFAULT_MAX_STEPS,
                 measures: CalibrationMeasures = None):

        if max_steps < 0:
            raise ConfigurationError(f"max_steps must not be negative: {max_steps}")
        if tol_abs <= 0.0 or tol_rel < 0.0:
            raise ConfigurationError(
                f"Invalid tolerances tol_abs={tol_abs}, tol_rel={tol_rel}")

        self._root_finder = BroydenVectorRootFinder(tol_abs, tol_rel, max_steps)
        self._measures = measures if measures is not None else CalibrationMeasures.PAR_SPREAD

    @staticmethod
    def standard():
        return CurveCalibrator()

    @staticmethod
    def of(tol_abs: float,
           tol_rel: float,
           max_steps: int,
           measures: CalibrationMeasures = None):
        return CurveCalibrator(tol_abs, tol_rel, max_steps, measures)

    @property
    def measures(self):
        return self._measures

    @property
    def root_finder(self):
        return self._root_finder

###############################################################################

    def calibrate_group(self,
                        group: CurveGroupDefinition,
                        value_dt,
                        market_data,
                        ref_data,
                        time_series=None):
        """ Calibrate a single group with no known curves. FX rates come from
        the market data and fixings from time_series or the market data. """
        known_data = RatesProvider.from_market_data(value_dt, market_data, time_series)
        return self.calibrate([group], known_data, market_data, ref_data)

    def calibrate(self,
                  groups: Union[CurveGroupDefinition, Sequence[CurveGroupDefinition]],
                  known_data: RatesProvider,
                  market_data,
                  ref_data):
        """ Calibrate the groups in order on top of the known data. Returns a
        provider holding the known curves and every calibrated curve, the
        latter carrying their Jacobians. """

        if isinstance(groups, CurveGroupDefinition):
            groups = [groups]
        groups = list(groups)

        seen = set()
        for group in groups:
            for name in group.calibrated_curve_names:
                if name in seen:
                    raise ConfigurationError(
                        f"Curve {name} is calibrated by more than one group")
                seen.add(name)

        provider = known_data
        order_prev = ()
        jacobians = {}
        for group in groups:
            provider, order_prev = self._calibrate_group(group, provider,
                                                         order_prev, jacobians,
                                                         market_data, ref_data)
        return provider

###############################################################################

    def _calibrate_group(self,
                         group,
                         provider,
                         order_prev,
                         jacobians,
                         market_data,
                         ref_data):

        generator = ImmutableRatesProviderGenerator.of(provider, group, ref_data)

        if not group.curve_definitions:
            logger.info("Group %s has no curves to calibrate", group.name)
            return generator.generate(np.zeros(0)), order_prev

        value_dt = provider.value_dt
        trades = group.resolved_trades(value_dt, market_data, ref_data)
        guesses = group.initial_guesses(value_dt, market_data)
        order_group = group.to_curve_parameter_sizes()
        n_group = total_parameter_count(order_group)

        if len(trades) != n_group or len(guesses) != n_group:
            raise ConfigurationError(
                f"Group {group.name} has {len(trades)} trades and "
                f"{len(guesses)} initial guesses for {n_group} parameters")

        logger.info("Calibrating group %s: curves %s, %d parameters",
                    group.name, list(group.calibrated_curve_names), n_group)

        measures = self._measures

        def residuals(x):
            p = generator.generate(x)
            return np.array([measures.value(t, p) for t in trades])

        def jacobian(x):
            p = generator.generate(x)
            return np.vstack([measures.derivative(t, p, order_group) for t in trades])

        params = self._root_finder.find_root(residuals, jacobian, np.array(guesses))
        calibrated = generator.generate(params)

        order_all = tuple(order_prev) + tuple(order_group)
        group_jac = self._jacobian(trades, calibrated, order_prev, order_all, jacobians)

        start = 0
        for size in order_group:
            rows = group_jac[start:start + size.parameter_count, :]
            jacobians[size.name] = JacobianCalibrationMatrix(order_all, rows)
            start += size.parameter_count

        logger.info("Calibrated group %s", group.name)
        return generator.generate(params, jacobians), order_all

    def _jacobian(self, trades, provider, order_prev, order_all, jacobians):
        """ Sensitivity of the group parameters to all market quotes so far,
        as a matrix of shape [group parameters, parameters of order_all]. """
        res = np.vstack([self._measures.derivative(t, provider, order_all)
                         for t in trades])
        n_prev = total_parameter_count(order_prev)

        block = res[:, n_prev:]
        try:
            cond = np.linalg.cond(block)
            if not np.isfinite(cond) or cond > 1.0 / np.finfo(np.float64).eps:
                raise NumericalError(
                    f"Calibration Jacobian is singular, condition number {cond:.3e}")
            direct = scipy.linalg.inv(block)
        except (np.linalg.LinAlgError, scipy.linalg.LinAlgError) as e:
            raise NumericalError(f"Calibration Jacobian is singular: {e}") from e

        if n_prev == 0:
            return direct

        transition = self._transition(order_prev, jacobians)
        indirect = -(direct @ res[:, :n_prev]) @ transition
        return np.hstack([indirect, direct])

    @staticmethod
    def _transition(order_prev, jacobians):
        """ Jacobians of the earlier curves stacked along order_prev, each
        placed at the columns of the curves in its own order. """
        n_prev = total_parameter_count(order_prev)
        offsets = {size.name: start for size, start
                   in zip(order_prev, order_offsets(order_prev))}

        transition = np.zeros((n_prev, n_prev))
        for size, row in zip(order_prev, order_offsets(order_prev)):
            jac = jacobians[size.name]
            col = 0
            for inner in jac.order:
                start = offsets[inner.name]
                transition[row:row + size.parameter_count,
                           start:start + inner.parameter_count] = \
                    jac.jacobian_matrix[:, col:col + inner.parameter_count]
                col += inner.parameter_count
        return transition

    def __repr__(self):
        return f"CurveCalibrator[{self._measures}]"

"""
Parameter ordering and Jacobian metadata attached to calibrated curves.

A CurveParameterSize pairs a curve name with its number of parameters. An
ordered tuple of them is the parameter ordering used across one calibration
run: earlier groups first, then the curves of the current group in
definition order. The ordering is only ever extended by concatenation.

A JacobianCalibrationMatrix holds, for one curve, the derivatives of its own
parameters (rows) with respect to the market quotes (columns) of every curve
in the ordering it was computed against.

Example:
    >>> order = (CurveParameterSize("USD-DSC", 3), CurveParameterSize("USD-3M", 4))
    >>> jac = JacobianCalibrationMatrix(order, matrix)   # matrix shape (4, 7)
    >>> jac.split(quote_sensitivity)["USD-DSC"]
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from ratescal.utils.error import ConfigurationError


@dataclass(frozen=True)
class CurveParameterSize:
    """ Name and number of parameters of one curve in a parameter ordering. """
    name: str
    parameter_count: int

    def __post_init__(self):
        if self.parameter_count < 1:
            raise ConfigurationError(
                f"Curve {self.name} must have at least one parameter")


def total_parameter_count(order: Sequence[CurveParameterSize]):
    """ Sum of the parameter counts of an ordering. """
    return sum(size.parameter_count for size in order)


def order_offsets(order: Sequence[CurveParameterSize]):
    """ Start index of each curve of an ordering in the flat vector. """
    offsets = []
    start = 0
    for size in order:
        offsets.append(start)
        start += size.parameter_count
    return offsets


class JacobianCalibrationMatrix:
    """
    Sensitivity of one curve's parameters to the calibrating market quotes.

    Attributes:
        order (tuple[CurveParameterSize]): Ordering of the matrix columns
        jacobian_matrix (np.ndarray): Read-only matrix of shape
            [curve parameter count, total parameter count of order]
    """

    def __init__(self,
                 order: Sequence[CurveParameterSize],
                 jacobian_matrix):

        order = tuple(order)
        matrix = np.array(jacobian_matrix, dtype=np.float64)
        if matrix.ndim != 2:
            raise ConfigurationError("Jacobian matrix must be two dimensional")

        names = [size.name for size in order]
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Curve order has duplicate names: {names}")

        if matrix.shape[1] != total_parameter_count(order):
            raise ConfigurationError(
                f"Jacobian has {matrix.shape[1]} columns but the curve order "
                f"has {total_parameter_count(order)} parameters")

        matrix.setflags(write=False)
        self._order = order
        self._matrix = matrix

    @staticmethod
    def of(order, jacobian_matrix):
        return JacobianCalibrationMatrix(order, jacobian_matrix)

    @property
    def order(self):
        return self._order

    @property
    def jacobian_matrix(self):
        return self._matrix

    @property
    def curve_names(self):
        return tuple(size.name for size in self._order)

    @property
    def total_parameter_count(self):
        return self._matrix.shape[1]

    def contains_curve(self, name: str):
        return any(size.name == name for size in self._order)

    def split(self, array):
        """ Split a vector laid out along the order into one slice per
        curve. """
        arr = np.asarray(array, dtype=np.float64)
        if arr.shape != (self.total_parameter_count,):
            raise ConfigurationError(
                f"Array of shape {arr.shape} does not match the "
                f"{self.total_parameter_count} parameters of the order")

        out = {}
        for size, start in zip(self._order, order_offsets(self._order)):
            out[size.name] = arr[start:start + size.parameter_count].copy()
        return out

    def column_labels(self):
        return [f"{size.name}[{i}]" for size in self._order
                for i in range(size.parameter_count)]

    @property
    def df(self) -> pd.DataFrame:
        """ The matrix as a DataFrame with one column per market quote. """
        return pd.DataFrame(self._matrix, columns=self.column_labels())

    def __eq__(self, other):
        if not isinstance(other, JacobianCalibrationMatrix):
            return NotImplemented
        return (self._order == other._order
                and np.array_equal(self._matrix, other._matrix))

    __hash__ = None

    def __repr__(self):
        return (f"JacobianCalibrationMatrix(curves={list(self.curve_names)}, "
                f"shape={self._matrix.shape})")

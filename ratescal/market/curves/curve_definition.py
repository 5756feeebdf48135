"""
Definition of a calibrated nodal curve.

The definition is configuration: a name, an ordered list of nodes and the
interpolation set-up. The node order is the parameter order of the curve and
must follow the node dates, since the curve is built with one parameter at
each node date.
"""

import datetime
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ratescal.utils.error import ConfigurationError
from ratescal.utils.global_types import InterpTypes, ValueTypes
from ratescal.utils.helpers import year_frac
from ratescal.market.curves.curve_node import CurveNode
from ratescal.market.curves.discount_curve import InterpolatedNodalCurve
from ratescal.market.curves.jacobian import (CurveParameterSize,
                                             JacobianCalibrationMatrix)


@dataclass(frozen=True)
class NodalCurveDefinition:
    """
    Nodes and interpolation of one curve to calibrate.

    Attributes:
        name (str): Curve name, unique within a calibration
        nodes (tuple[CurveNode]): Ordered calibration nodes
        value_type (ValueTypes): Meaning of the node parameters
        interp_type (InterpTypes): Interpolation between nodes

    Example:
        >>> defn = NodalCurveDefinition("USD-DSC", [
        ...     TermDepositCurveNode("USD-DEPOSIT", "6M", "USD-DEP-6M"),
        ...     FixedFloatSwapCurveNode("USD-FIXED-1Y-SOFR", "2Y", "USD-OIS-2Y")])
        >>> defn.to_curve_parameter_size()
        CurveParameterSize(name='USD-DSC', parameter_count=2)
    """
    name: str
    nodes: Tuple[CurveNode, ...]
    value_type: ValueTypes = ValueTypes.ZERO_RATE
    interp_type: InterpTypes = InterpTypes.LINEAR_ZERO_RATES

    def __post_init__(self):
        nodes = tuple(self.nodes)
        object.__setattr__(self, "nodes", nodes)

        if len(nodes) == 0:
            raise ConfigurationError(f"Curve {self.name} has no nodes")

        labels = [node.label for node in nodes]
        if len(set(labels)) != len(labels):
            raise ConfigurationError(
                f"Curve {self.name} has duplicate node labels: {labels}")

    @property
    def parameter_count(self):
        return len(self.nodes)

    def to_curve_parameter_size(self):
        return CurveParameterSize(self.name, self.parameter_count)

    def node_labels(self):
        return [node.label for node in self.nodes]

    def node_times(self, value_dt: datetime.date, ref_data):
        return [year_frac(value_dt, node.node_date(value_dt, ref_data))
                for node in self.nodes]

    def resolved_trades(self, value_dt: datetime.date, market_data, ref_data):
        return [node.resolved_trade(value_dt, market_data, ref_data)
                for node in self.nodes]

    def initial_guesses(self, value_dt: datetime.date, market_data):
        return [node.initial_guess(value_dt, market_data, self.value_type)
                for node in self.nodes]

    def curve(self,
              value_dt: datetime.date,
              ref_data,
              parameters: Sequence,
              jacobian: Optional[JacobianCalibrationMatrix] = None):
        """ Build the curve from its parameter slice. The slice may hold JAX
        tracers. """
        if len(parameters) != self.parameter_count:
            raise ConfigurationError(
                f"Curve {self.name} needs {self.parameter_count} parameters, "
                f"got {len(parameters)}")

        return InterpolatedNodalCurve(self.name,
                                      value_dt,
                                      self.node_times(value_dt, ref_data),
                                      parameters,
                                      self.value_type,
                                      self.interp_type,
                                      self.node_labels(),
                                      jacobian)

"""
Tests for nodal curves, interpolation and Jacobian matrices.
"""

import datetime
import numpy as np
import pytest
import jax
import jax.numpy as jnp

from ratescal.utils.error import LibError, ConfigurationError
from ratescal.utils.global_types import InterpTypes, ValueTypes
from ratescal.market.curves.discount_curve import InterpolatedNodalCurve
from ratescal.market.curves.jacobian import (CurveParameterSize,
                                             JacobianCalibrationMatrix,
                                             order_offsets,
                                             total_parameter_count)


@pytest.fixture
def zero_curve(standard_value_date):
    return InterpolatedNodalCurve("USD-DSC", standard_value_date,
                                  [0.5, 1.0, 2.0], [0.05, 0.045, 0.04],
                                  node_labels=["6M", "1Y", "2Y"])


class TestInterpolatedNodalCurve:
    """Test discount factors and rates of nodal curves"""

    def test_df_at_nodes(self, zero_curve):
        """Test that zero rates are recovered at the nodes"""
        for t, z in zip([0.5, 1.0, 2.0], [0.05, 0.045, 0.04]):
            assert float(zero_curve.df(t)) == pytest.approx(np.exp(-z * t), abs=1e-14)

    def test_linear_zero_between_nodes(self, zero_curve):
        """Test linear interpolation of zero rates"""
        assert float(zero_curve.zero_rate(1.5)) == pytest.approx(0.0425, abs=1e-14)

    def test_flat_extrapolation(self, zero_curve):
        """Test flat zero rates before the first and after the last node"""
        assert float(zero_curve.zero_rate(0.1)) == pytest.approx(0.05, abs=1e-14)
        assert float(zero_curve.zero_rate(5.0)) == pytest.approx(0.04, abs=1e-14)

    def test_df_from_date(self, zero_curve, standard_value_date):
        """Test that a date is converted with ACT/365F"""
        dt = standard_value_date + datetime.timedelta(days=365)
        assert float(zero_curve.df(dt)) == pytest.approx(float(zero_curve.df(1.0)))

    def test_discount_factor_values(self, standard_value_date):
        """Test a curve whose parameters are discount factors"""
        curve = InterpolatedNodalCurve("C", standard_value_date, [1.0, 2.0],
                                       [0.95, 0.90],
                                       value_type=ValueTypes.DISCOUNT_FACTOR)
        assert float(curve.df(1.0)) == pytest.approx(0.95, abs=1e-14)
        assert float(curve.df(2.0)) == pytest.approx(0.90, abs=1e-14)

    def test_flat_forward_interpolation(self, standard_value_date):
        """Test that flat forward interpolation keeps the node values"""
        curve = InterpolatedNodalCurve("C", standard_value_date, [1.0, 2.0],
                                       [0.03, 0.04],
                                       interp_type=InterpTypes.FLAT_FWD_RATES)
        assert float(curve.df(2.0)) == pytest.approx(np.exp(-0.08), abs=1e-14)
        # forward between the nodes is constant: 0.05 continuously compounded
        assert float(curve.df(1.5)) == pytest.approx(np.exp(-0.03 - 0.025), abs=1e-14)

    def test_single_node_curve(self, standard_value_date):
        """Test that a one node curve is flat"""
        curve = InterpolatedNodalCurve("C", standard_value_date, [1.0], [0.05])
        assert float(curve.df(3.0)) == pytest.approx(np.exp(-0.15), abs=1e-14)

    def test_forward_rate(self, zero_curve):
        """Test simply compounded forwards"""
        fwd = float(zero_curve.fwd_rate(0.5, 1.0))
        expected = (float(zero_curve.df(0.5)) / float(zero_curve.df(1.0)) - 1.0) / 0.5
        assert fwd == pytest.approx(expected)

    def test_gradient_through_parameters(self, zero_curve):
        """Test that jax.grad gives the analytic node sensitivity"""
        grad = jax.grad(lambda p: zero_curve.with_parameters(p).df(1.0))(
            jnp.asarray([0.05, 0.045, 0.04]))
        expected = np.array([0.0, -np.exp(-0.045), 0.0])
        np.testing.assert_allclose(np.asarray(grad), expected, atol=1e-14)

    def test_negative_time_rejected(self, zero_curve):
        """Test that times before the valuation date are rejected"""
        with pytest.raises(LibError):
            zero_curve.df(-0.5)

    @pytest.mark.parametrize("times,params", [
        ([], []),
        ([1.0, 2.0], [0.05]),
        ([0.0, 1.0], [0.05, 0.05]),
        ([2.0, 1.0], [0.05, 0.05]),
    ])
    def test_invalid_nodes_rejected(self, standard_value_date, times, params):
        """Test validation of node times and parameter counts"""
        with pytest.raises(ConfigurationError):
            InterpolatedNodalCurve("C", standard_value_date, times, params)

    def test_argument_types_checked(self, standard_value_date):
        """Test that a non string name raises LibError"""
        with pytest.raises(LibError):
            InterpolatedNodalCurve(42, standard_value_date, [1.0], [0.05])

    def test_with_parameters_is_new_curve(self, zero_curve):
        """Test that replacing parameters leaves the original untouched"""
        bumped = zero_curve.with_parameters([0.06, 0.06, 0.06])
        assert float(zero_curve.parameters[0]) == 0.05
        assert float(bumped.parameters[0]) == 0.06
        assert bumped.node_labels == zero_curve.node_labels

    def test_repr_has_labels(self, zero_curve):
        """Test the table representation"""
        text = repr(zero_curve)
        assert "USD-DSC" in text
        assert "1Y" in text


class TestJacobianCalibrationMatrix:
    """Test Jacobian metadata"""

    def test_parameter_size_must_be_positive(self):
        """Test that a curve needs at least one parameter"""
        with pytest.raises(ConfigurationError):
            CurveParameterSize("C", 0)

    def test_order_helpers(self):
        """Test totals and offsets of an ordering"""
        order = (CurveParameterSize("A", 2), CurveParameterSize("B", 3))
        assert total_parameter_count(order) == 5
        assert order_offsets(order) == [0, 2]

    def test_column_count_checked(self):
        """Test that the matrix must match the ordering"""
        with pytest.raises(ConfigurationError):
            JacobianCalibrationMatrix([CurveParameterSize("A", 2)], np.eye(3))

    def test_split(self):
        """Test splitting a vector along the ordering"""
        order = (CurveParameterSize("A", 1), CurveParameterSize("B", 2))
        jac = JacobianCalibrationMatrix(order, np.ones((2, 3)))
        parts = jac.split([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(parts["A"], [1.0])
        np.testing.assert_array_equal(parts["B"], [2.0, 3.0])
        assert jac.contains_curve("B")
        assert not jac.contains_curve("C")

    def test_matrix_is_read_only(self):
        """Test that the stored matrix cannot be modified"""
        source = np.eye(2)
        jac = JacobianCalibrationMatrix([CurveParameterSize("A", 2)], source)
        source[0, 0] = 5.0
        assert jac.jacobian_matrix[0, 0] == 1.0
        with pytest.raises(ValueError):
            jac.jacobian_matrix[0, 0] = 2.0

    def test_dataframe_view(self):
        """Test the pandas view of the matrix"""
        order = (CurveParameterSize("A", 1), CurveParameterSize("B", 1))
        jac = JacobianCalibrationMatrix(order, [[1.0, 2.0]])
        assert list(jac.df.columns) == ["A[0]", "B[0]"]
        assert jac.df.iloc[0, 1] == 2.0

"""
Tests for dsplab.analysis
=========================

Validates:
    - Integration rules against known integrals and scipy
    - Sampling grids and plot-ready frames
    - The energy/power decision policy and batch classification
    - Numerical derivatives
    - Value formatting
"""

import math

import numpy as np
import polars as pl
import pytest
from scipy.integrate import simpson, trapezoid

from dsplab.analysis import (
    EnergyClass,
    IntegrationMethod,
    SampleSeries,
    SignalDuration,
    analyze_all,
    analyze_formula,
    analyze_signal,
    average_power,
    classify,
    derivative,
    derivative_table,
    energy_over_interval,
    energy_simpson,
    energy_trapezoidal,
    format_energy,
    format_result,
    integrate_energy,
    linspace,
    measure_signal,
    sample_formula,
    sample_function,
    second_derivative,
    threshold_heuristic,
    validate_interval,
)
from dsplab.catalog import CatalogSignal, SignalCatalog, default_catalog
from dsplab.errors import CatalogError, FormulaError, PreconditionError
from dsplab.utils import is_null_result, normalize_plot_value, to_plot_series


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def ones():
    return np.ones(1001)


@pytest.fixture
def small_catalog():
    """Three signals, one of which does not compile."""
    return SignalCatalog([
        CatalogSignal("a(t)", "rect(t)", SignalDuration.FINITE),
        CatalogSignal("broken(t)", "foo(t)", SignalDuration.FINITE),
        CatalogSignal("c(t)", "sin(t)", SignalDuration.INFINITE),
    ])


# =============================================================================
# Integration
# =============================================================================

class TestIntegration:
    """Test the quadrature rules."""

    def test_constant_signal_both_methods(self, ones):
        assert energy_over_interval(ones, 0, 10, 'trapeze') == pytest.approx(10.0)
        assert energy_over_interval(ones, 0, 10, 'simpson') == pytest.approx(10.0)

    def test_trapezoid_matches_scipy(self):
        t = np.linspace(-3, 3, 400)
        x = np.exp(-t ** 2)
        dt = t[1] - t[0]
        assert energy_trapezoidal(x, dt) == pytest.approx(trapezoid(x ** 2, dx=dt))

    def test_simpson_exact_for_quadratic(self):
        t = np.linspace(0, 1, 101)
        assert energy_simpson(t, t[1] - t[0]) == pytest.approx(1 / 3, abs=1e-12)

    def test_simpson_matches_scipy_on_odd_count(self):
        t = np.linspace(0, math.pi, 51)
        x = np.sin(t)
        dt = t[1] - t[0]
        assert energy_simpson(x, dt) == pytest.approx(simpson(x ** 2, dx=dt))

    def test_simpson_even_count_closes_with_trapezoid(self):
        assert energy_simpson([1, 1, 1, 1], 1.0) == pytest.approx(3.0)

    def test_simpson_falls_back_below_three_samples(self):
        assert energy_simpson([1, 1], 1.0) == pytest.approx(1.0)
        assert energy_simpson([2], 1.0) == 0.0

    def test_simpson_closer_than_trapezoid(self):
        t = np.linspace(0, 2, 21)
        dt = t[1] - t[0]
        exact = 2 ** 5 / 5
        x = t ** 2
        assert abs(energy_simpson(x, dt) - exact) < abs(energy_trapezoidal(x, dt) - exact)

    def test_nan_propagates(self):
        assert math.isnan(integrate_energy([1.0, np.nan, 1.0], 1.0))
        assert integrate_energy([1.0, np.inf, 1.0], 1.0, 'simpson') == math.inf

    def test_method_parse(self):
        assert IntegrationMethod.parse('Simpson') is IntegrationMethod.SIMPSON
        assert IntegrationMethod.parse('trapezoidal') is IntegrationMethod.TRAPEZOIDAL
        with pytest.raises(PreconditionError):
            IntegrationMethod.parse('romberg')

    def test_negative_dt_rejected(self):
        with pytest.raises(PreconditionError):
            energy_trapezoidal([1, 1], -0.1)

    def test_average_power_spacing(self):
        # dt = span / len(values)
        values = np.ones(1000)
        assert average_power(values, 0, 10) == pytest.approx(999 * 0.01 / 10)

    def test_average_power_window_checks(self):
        with pytest.raises(PreconditionError):
            average_power([1.0, 1.0], 5, 5)
        with pytest.raises(PreconditionError):
            average_power([1.0, 1.0], 0, math.inf)
        with pytest.raises(PreconditionError):
            average_power([], 0, 1)

    def test_single_sample_energy_is_zero(self):
        assert energy_over_interval([3.0], 0, 1) == 0.0


# =============================================================================
# Sampling
# =============================================================================

class TestSampling:
    """Test grids, SampleSeries and plot normalization."""

    def test_linspace_includes_endpoints(self):
        t = linspace(-5, 5, 11)
        assert t[0] == -5.0
        assert t[-1] == 5.0
        assert len(t) == 11

    @pytest.mark.parametrize("start,end,n", [
        (1, 1, 10),
        (2, 1, 10),
        (0, math.inf, 10),
        (math.nan, 1, 10),
        (0, 1, 0),
        (0, 1, 2.5),
        (0, 1, True),
        ("a", 1, 10),
    ])
    def test_invalid_interval(self, start, end, n):
        with pytest.raises(PreconditionError):
            validate_interval(start, end, n)

    def test_non_finite_samples_are_missing_points(self):
        series = sample_formula("1/t", -1, 1, 3)
        assert series.finite_fraction == pytest.approx(2 / 3)

        df = series.to_frame()
        assert df.columns == ['t', 'value']
        assert df['value'].null_count() == 1
        assert df['value'][1] is None

        points = series.plot_points()
        assert points[1] == {'t': 0.0, 'value': None}
        assert points[0]['value'] == -1.0

    def test_sample_order_and_values(self):
        series = sample_formula("2t", 0, 1, 3)
        np.testing.assert_allclose(series.values, [0.0, 1.0, 2.0])
        assert series.dt == pytest.approx(0.5)

    def test_compile_error_before_sampling(self):
        with pytest.raises(FormulaError):
            sample_formula("foo(t)", 1, 0, 10)

    def test_sample_function(self):
        series = sample_function(np.cos, 0, math.pi, 3)
        np.testing.assert_allclose(series.values, [1.0, 0.0, -1.0], atol=1e-12)

    def test_length_mismatch(self):
        with pytest.raises(PreconditionError):
            SampleSeries(t=np.zeros(3), values=np.zeros(2))

    def test_normalize_plot_value(self):
        assert normalize_plot_value(np.float64(1.5)) == 1.5
        assert normalize_plot_value(3) == 3.0
        assert normalize_plot_value(math.inf) is None
        assert normalize_plot_value(math.nan) is None
        assert normalize_plot_value(True) is None
        assert normalize_plot_value(None) is None

    def test_is_null_result(self):
        assert is_null_result(None)
        assert is_null_result(np.float64('nan'))
        assert not is_null_result(0.0)

    def test_to_plot_series(self):
        s = to_plot_series('x', np.array([1.0, np.inf, -np.inf, np.nan, 2.0]))
        assert s.dtype == pl.Float64
        assert s.null_count() == 3
        assert s.drop_nulls().to_list() == [1.0, 2.0]


# =============================================================================
# Classification
# =============================================================================

class TestClassify:
    """Test the duration-based decision policy."""

    def test_finite_duration_is_energy_signal(self):
        assert classify(2.0, 0.0, 'finite') is EnergyClass.FINITE_ENERGY

    def test_infinite_duration(self):
        assert classify(math.inf, 0.4, 'infinite') is EnergyClass.FINITE_POWER
        assert classify(math.inf, math.inf, 'infinite') is EnergyClass.INFINITE_POWER
        assert classify(math.inf, math.nan, SignalDuration.INFINITE) is EnergyClass.INFINITE_POWER

    def test_bad_duration(self):
        with pytest.raises(PreconditionError):
            classify(1.0, 1.0, 'forever')

    def test_labels(self):
        assert EnergyClass.FINITE_ENERGY.label == "Finite-energy signal"
        assert EnergyClass.FINITE_POWER.is_power
        assert not EnergyClass.COMPUTATION_ERROR.is_power

    def test_threshold_heuristic(self):
        assert threshold_heuristic(0.5, 10) is EnergyClass.FINITE_ENERGY
        assert threshold_heuristic(1e11, 100) is EnergyClass.FINITE_POWER
        assert threshold_heuristic(1e12, 10) is EnergyClass.INFINITE_POWER
        assert threshold_heuristic(math.inf, 10) is EnergyClass.INFINITE_POWER


class TestAnalyzeFormula:
    """Test analyze_formula() on user formulas."""

    def test_sine_is_power_signal(self):
        analysis = analyze_formula("sin(t)", -10, 10, 1000)
        assert analysis.label is EnergyClass.FINITE_POWER
        assert analysis.energy == math.inf
        # (10 - sin(20)/2) / 20, scaled by the (n-1)/n spacing convention
        assert analysis.average_power == pytest.approx(0.477, abs=0.01)

    def test_finite_declaration(self):
        analysis = analyze_formula("exp(-t)*u(t)", 0, 10, duration='finite')
        assert analysis.label is EnergyClass.FINITE_ENERGY
        assert analysis.energy == pytest.approx(0.5, rel=1e-2)
        assert analysis.average_power == 0.0

    def test_user_formulas_default_to_infinite(self):
        analysis = analyze_formula("exp(-t)*u(t)", 0, 10)
        assert analysis.label is EnergyClass.FINITE_POWER
        assert analysis.heuristic_label() is EnergyClass.FINITE_ENERGY
        assert analysis.window_energy == pytest.approx(0.5, rel=1e-2)

    def test_infinite_power(self):
        analysis = analyze_formula("1/t", -1, 1, 3)
        assert analysis.label is EnergyClass.INFINITE_POWER

    def test_simpson_method(self):
        analysis = analyze_formula("rect(t)", -2, 2, 401, method='simpson', duration='finite')
        assert analysis.energy == pytest.approx(1.0, abs=0.02)

    def test_repr_of_deep_formula(self):
        analysis = analyze_formula("+".join(["t"] * 900), 0, 1, 11)
        assert "FormulaAnalysis" in repr(analysis)
        assert analysis.average_power > 0

    def test_signal_id_is_source(self):
        assert analyze_formula("2t").result.signal_id == "2t"

    def test_errors_propagate(self):
        with pytest.raises(FormulaError):
            analyze_formula("sin(")
        with pytest.raises(PreconditionError):
            analyze_formula("t", 5, -5)
        with pytest.raises(PreconditionError):
            analyze_formula("t", method='midpoint')


class TestBatch:
    """Test catalog-wide classification."""

    def test_default_catalog(self):
        batch = analyze_all()
        assert len(batch) == 13
        assert [r.signal_id for r in batch] == default_catalog().names()
        assert batch.error_count == 0
        assert batch.energy_count == 10
        assert batch.power_count == 3

    def test_known_values(self):
        batch = analyze_all()
        assert batch.get("x1(t)").energy == pytest.approx(2.0, abs=0.1)
        assert batch.get("x3(t)").energy == pytest.approx(1 / 3, abs=0.01)

        x4 = batch.get("x4(t)")
        assert x4.label is EnergyClass.FINITE_POWER
        assert x4.energy == math.inf
        assert x4.average_power == pytest.approx(0.4, abs=0.02)

        x11 = batch.get("x11(t)")
        assert x11.label is EnergyClass.FINITE_POWER
        assert x11.average_power == pytest.approx(0.0, abs=1e-12)

    def test_simpson_batch(self):
        batch = analyze_all(method='simpson')
        assert batch.method is IntegrationMethod.SIMPSON
        assert batch.get("x3(t)").energy == pytest.approx(1 / 3, abs=0.01)

    def test_failure_is_isolated(self, small_catalog):
        batch = analyze_all(small_catalog)
        assert len(batch) == 3
        broken = batch.get("broken(t)")
        assert broken.label is EnergyClass.COMPUTATION_ERROR
        assert not broken.ok
        assert math.isnan(broken.energy)
        assert broken.error == "Unknown function: foo"

        assert batch.get("a(t)").label is EnergyClass.FINITE_ENERGY
        assert batch.get("c(t)").label is EnergyClass.FINITE_POWER
        assert batch.error_count == 1

    def test_thread_pool_keeps_order(self):
        sequential = analyze_all()
        threaded = analyze_all(max_workers=4)
        assert [r.signal_id for r in threaded] == [r.signal_id for r in sequential]
        for a, b in zip(sequential, threaded):
            assert a.label is b.label
            assert a.energy == b.energy

    def test_invalid_window_rejected_up_front(self, small_catalog):
        with pytest.raises(PreconditionError):
            analyze_all(small_catalog, t_start=1, t_end=1)
        with pytest.raises(PreconditionError):
            analyze_all(small_catalog, num_points=0)

    def test_aggregates(self, small_catalog):
        batch = analyze_all(small_catalog)
        assert batch.min_energy == batch.max_energy == batch.get("a(t)").energy
        summary = batch.summary()
        assert summary['signals'] == 3
        assert summary['errors'] == 1

    def test_empty_batch(self):
        batch = analyze_all([])
        assert len(batch) == 0
        assert batch.min_energy is None
        assert batch.to_frame().height == 0

    def test_to_frame(self, small_catalog):
        df = analyze_all(small_catalog).to_frame()
        assert df.columns == ['signal', 'energy', 'average_power', 'classification', 'error']
        assert df['classification'].to_list()[1] == "Computation error"

    def test_analyze_signal_by_name(self):
        result = analyze_signal("x14")
        assert result.signal_id == "x14(t)"
        assert result.energy == pytest.approx(2 / 3, abs=0.01)

    def test_unknown_name_is_computation_error(self):
        result = analyze_signal("x99")
        assert result.label is EnergyClass.COMPUTATION_ERROR
        assert result.signal_id == "x99"
        assert "x99" in result.error
        assert math.isnan(result.energy)


class TestMeasureSignal:
    """Test windowed energy and power of catalog signals."""

    def test_x11_is_zero_on_default_window(self):
        m = measure_signal("x11")
        assert (m.t_start, m.t_end) == (0.0, 10.0)
        assert m.signal_id == "x11(t)"
        assert m.energy == pytest.approx(0.0, abs=1e-12)
        assert m.average_power == pytest.approx(0.0, abs=1e-12)

    def test_duration_is_ignored(self):
        m = measure_signal("x4(t)", 0, 10)
        assert m.energy == pytest.approx(8.0, abs=0.05)
        assert m.average_power == pytest.approx(0.8, abs=0.02)
        assert math.isfinite(m.energy)

    def test_method(self):
        m = measure_signal("x3", -1, 1, 1001, method='simpson')
        assert m.method is IntegrationMethod.SIMPSON
        assert m.energy == pytest.approx(1 / 3, abs=1e-3)
        assert m.to_dict()['method'] == 'simpson'

    def test_errors(self):
        with pytest.raises(CatalogError):
            measure_signal("x99")
        with pytest.raises(PreconditionError):
            measure_signal("x11", 10, 0)


# =============================================================================
# Derivatives
# =============================================================================

class TestDerivatives:
    """Test central differences."""

    def test_polynomial(self):
        d1 = derivative("t**3", h=1e-4)
        assert d1(np.array([2.0]))[0] == pytest.approx(12.0, rel=1e-6)
        d2 = second_derivative("t**3", h=1e-3)
        assert d2(np.array([2.0]))[0] == pytest.approx(12.0, rel=1e-3)

    def test_plain_function(self):
        d1 = derivative(np.sin)
        np.testing.assert_allclose(d1(np.array([0.0, math.pi])), [1.0, -1.0], atol=1e-6)

    def test_triangle_slope(self):
        t = np.array([-0.5, -0.25, 0.25, 0.5])
        np.testing.assert_allclose(derivative("tri(t)")(t), -np.sign(t), atol=1e-6)

    def test_step_must_be_positive(self):
        with pytest.raises(PreconditionError):
            derivative("t", h=0)

    def test_table_clips_spikes(self):
        df = derivative_table("tri(t)", -2, 2, 401)
        assert df.columns == ['t', 'value', 'd1', 'd2']
        assert df.height == 401
        # kinks at -1, 0, 1 produce second-derivative spikes
        assert df['d2'].null_count() > 0
        assert df['value'].null_count() == 0


# =============================================================================
# Formatting
# =============================================================================

class TestFormatting:
    """Test format_energy() and format_result()."""

    def test_special_values(self):
        assert format_energy(math.inf) == "∞"
        assert format_energy(-math.inf) == "-∞"
        assert format_energy(math.nan) == "NaN"
        assert format_energy(None) == "NaN"
        assert format_energy(0.0) == "0"

    def test_ranges(self):
        assert format_energy(2.0) == "2.000"
        assert format_energy(1e-5) == "1.000e-05"
        assert format_energy(25000.0) == "2.500e+04"

    def test_format_result(self):
        result = analyze_formula("sin(t)").result
        line = format_result(result)
        assert line.startswith("sin(t): E = ∞")
        assert "Finite average power signal" in line

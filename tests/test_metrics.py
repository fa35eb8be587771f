"""Unit tests for metrics.py module."""

import numpy as np
import pytest

from rtshare.bounds import compute_bounds
from rtshare.channel import ChannelParams, SupportGrid
from rtshare.distribution import evaluate_cdf
from rtshare.errors import DimensionMismatchError, InvalidCurveError
from rtshare.metrics import compute_rse, compute_violation, invert_cdf, validate_curve


GRID = SupportGrid.linspace(100.0, 700.0, 601)


def linear_cdf(start, stop, grid=GRID):
    """CDF rising linearly from 0 at ``start`` to 1 at ``stop``."""
    return np.clip((grid.values - start) / (stop - start), 0.0, 1.0)


class TestValidateCurve:
    """Test curve validation."""

    def test_accepts_cdf(self):
        curve = linear_cdf(200.0, 400.0)
        np.testing.assert_allclose(validate_curve(GRID, curve), curve)

    def test_length_mismatch(self):
        with pytest.raises(DimensionMismatchError) as excinfo:
            validate_curve(GRID, np.linspace(0.0, 1.0, 10), name="model_cdf")
        assert excinfo.value.name == "model_cdf"

    def test_non_monotone(self):
        curve = linear_cdf(200.0, 400.0)
        curve[300] = curve[299] - 0.1
        with pytest.raises(InvalidCurveError, match="monotone"):
            validate_curve(GRID, curve)

    def test_out_of_range(self):
        curve = linear_cdf(200.0, 400.0) * 1.2
        with pytest.raises(InvalidCurveError, match=r"\[0, 1\]"):
            validate_curve(GRID, curve)

    def test_non_finite(self):
        curve = linear_cdf(200.0, 400.0)
        curve[5] = np.nan
        with pytest.raises(InvalidCurveError, match="non-finite"):
            validate_curve(GRID, curve)

    def test_round_off_is_absorbed(self):
        curve = linear_cdf(200.0, 400.0)
        curve[-1] = 1.0 + 1e-12
        curve[250] = curve[249] - 1e-13
        cleaned = validate_curve(GRID, curve)
        assert cleaned.max() == 1.0
        assert np.all(np.diff(cleaned) >= 0.0)


class TestInvertCDF:
    """Test probability-to-time inversion."""

    def test_linear_curve(self):
        curve = linear_cdf(200.0, 400.0)
        np.testing.assert_allclose(invert_cdf(GRID, curve, [0.25, 0.5, 0.75]), [250.0, 300.0, 350.0])

    def test_interpolates_between_grid_points(self):
        grid = SupportGrid(np.array([100.0, 200.0, 300.0]))
        curve = np.array([0.0, 0.4, 1.0])
        np.testing.assert_allclose(invert_cdf(grid, curve, [0.2, 0.7]), [150.0, 250.0])

    def test_plateau_maps_to_first_reach(self):
        grid = SupportGrid(np.array([100.0, 200.0, 300.0, 400.0]))
        curve = np.array([0.0, 0.5, 0.5, 1.0])
        assert float(invert_cdf(grid, curve, 0.5)) == 200.0
        assert float(invert_cdf(grid, curve, 0.75)) == 350.0

    def test_lower_plateau_uses_last_zero(self):
        grid = SupportGrid(np.array([100.0, 200.0, 300.0, 400.0]))
        curve = np.array([0.0, 0.0, 0.0, 1.0])
        assert float(invert_cdf(grid, curve, 0.5)) == 350.0

    def test_out_of_range_levels_clamp(self):
        grid = SupportGrid(np.array([100.0, 200.0, 300.0]))
        curve = np.array([0.2, 0.5, 0.8])
        np.testing.assert_allclose(invert_cdf(grid, curve, [0.1, 0.9]), [100.0, 300.0])


class TestRSE:
    """Test the redundancy-gain metric and its sign convention."""

    def test_identity_is_zero(self):
        curve = linear_cdf(200.0, 400.0)
        assert compute_rse(GRID, curve, curve) == pytest.approx(0.0, abs=1e-12)

    def test_positive_when_model_faster(self):
        reference = linear_cdf(250.0, 450.0)
        model = linear_cdf(200.0, 400.0)
        assert compute_rse(GRID, model, reference) == pytest.approx(50.0, rel=1e-6)

    def test_negative_when_model_slower(self):
        reference = linear_cdf(200.0, 400.0)
        model = linear_cdf(230.0, 430.0)
        assert compute_rse(GRID, model, reference) == pytest.approx(-30.0, rel=1e-6)

    def test_restricted_to_common_probability_range(self):
        grid = SupportGrid.linspace(100.0, 700.0, 601)
        # Model only reaches 0.5 inside the grid.
        model = np.clip((grid.values - 200.0) / 1000.0, 0.0, 1.0)
        reference = np.clip((grid.values - 250.0) / 1000.0, 0.0, 1.0)
        # Over p in [0, 0.45] the shift is a constant 50 ms.
        assert compute_rse(grid, model, reference) == pytest.approx(50.0 * 0.45, rel=1e-6)

    def test_disjoint_ranges_give_zero(self):
        grid = SupportGrid.linspace(0.0, 1.0, 11)
        model = np.full(11, 0.2)
        reference = np.full(11, 0.8)
        assert compute_rse(grid, model, reference) == 0.0

    def test_raab_gain_over_grice_is_positive(self):
        bounds = compute_bounds(GRID, ChannelParams("a", 400.0, 6400.0), ChannelParams("v", 350.0, 5500.0))
        rse = compute_rse(GRID, bounds.raab, bounds.grice)
        assert rse > 0.0
        assert rse < 600.0

    def test_rejects_invalid_curve(self):
        model = linear_cdf(200.0, 400.0)[::-1].copy()
        with pytest.raises(InvalidCurveError):
            compute_rse(GRID, model, linear_cdf(200.0, 400.0))

    def test_rejects_length_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            compute_rse(GRID, linear_cdf(200.0, 400.0)[:-1], linear_cdf(200.0, 400.0))


class TestViolation:
    """Test the race-model violation metric."""

    def test_identity_is_zero(self):
        bounds = compute_bounds(GRID, ChannelParams("a", 400.0, 6400.0), ChannelParams("v", 350.0, 5500.0))
        assert compute_violation(GRID, bounds.miller, bounds.miller) == 0.0

    def test_no_violation_for_slower_model(self):
        miller = linear_cdf(200.0, 400.0)
        model = linear_cdf(240.0, 440.0)
        assert compute_violation(GRID, model, miller) == 0.0

    def test_positive_for_faster_model(self):
        miller = linear_cdf(200.0, 400.0)
        model = linear_cdf(180.0, 380.0)
        assert compute_violation(GRID, model, miller) == pytest.approx(20.0, rel=1e-6)

    def test_model_faster_everywhere_matches_rse(self):
        grid = SupportGrid(np.array([100.0, 200.0, 300.0]))
        miller = np.array([0.0, 0.5, 1.0])
        model = np.array([0.0, 0.75, 1.0])
        violation = compute_violation(grid, model, miller)
        rse = compute_rse(grid, model, miller)
        assert violation > 0.0
        assert violation == pytest.approx(rse, rel=1e-9)

    def test_only_faster_region_counts(self):
        grid = SupportGrid(np.array([100.0, 200.0, 300.0, 400.0]))
        miller = np.array([0.0, 0.5, 1.0, 1.0])
        # Faster than the bound at low probabilities, slower near p=1.
        model = np.array([0.0, 0.75, 0.9, 1.0])
        violation = compute_violation(grid, model, miller)
        rse = compute_rse(grid, model, miller)
        assert violation > 0.0
        assert violation > rse

    def test_raab_never_violates_miller(self):
        bounds = compute_bounds(GRID, ChannelParams("a", 400.0, 6400.0), ChannelParams("v", 350.0, 5500.0))
        assert compute_violation(GRID, bounds.raab, bounds.miller) == pytest.approx(0.0, abs=1e-9)

    def test_wald_curves(self):
        miller = evaluate_cdf(GRID, 400.0, 6400.0)
        model = evaluate_cdf(GRID, 380.0, 6400.0)
        assert compute_violation(GRID, model, miller) > 0.0

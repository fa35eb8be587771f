"""Unit tests for distribution.py module."""

import numpy as np
import pytest
from scipy.stats import invgauss

from rtshare.channel import ChannelParams, SupportGrid
from rtshare.distribution import evaluate_cdf, stage_cdf, wald_cdf, wald_ppf
from rtshare.errors import DegenerateWeightError, InvalidParameterError


GRID = SupportGrid.linspace(100.0, 700.0, 100)


class TestWaldCDF:
    """Test the closed-form Wald CDF."""

    @pytest.mark.parametrize("mean, shape", [(400.0, 6400.0), (350.0, 5500.0), (250.0, 200.0)])
    def test_matches_scipy_invgauss(self, mean, shape):
        t = np.linspace(10.0, 1500.0, 200)
        expected = invgauss.cdf(t, mean / shape, scale=shape)
        np.testing.assert_allclose(wald_cdf(t, mean, shape), expected, atol=1e-10)

    def test_zero_and_negative_times(self):
        values = wald_cdf(np.array([-10.0, 0.0]), 400.0, 6400.0)
        np.testing.assert_array_equal(values, [0.0, 0.0])

    def test_scalar_input(self):
        value = wald_cdf(400.0, 400.0, 6400.0)
        assert value.shape == ()
        assert 0.5 < float(value) < 0.6

    def test_no_overflow_for_sharp_channel(self):
        # 2*lambda/mu = 4000 would overflow exp() if evaluated directly
        values = wald_cdf(np.array([50.0, 100.0, 150.0]), 100.0, 200000.0)
        assert np.all(np.isfinite(values))
        assert values[0] == pytest.approx(0.0, abs=1e-12)
        assert values[1] == pytest.approx(0.5, abs=0.01)
        assert values[2] == pytest.approx(1.0, abs=1e-12)

    def test_small_times_are_near_zero(self):
        assert float(wald_cdf(1.0, 400.0, 6400.0)) == pytest.approx(0.0, abs=1e-12)

    def test_large_times_approach_one(self):
        assert float(wald_cdf(1.0e5, 400.0, 6400.0)) == pytest.approx(1.0, abs=1e-12)

    @pytest.mark.parametrize("mean, shape", [(0.0, 10.0), (400.0, -1.0)])
    def test_invalid_parameters(self, mean, shape):
        with pytest.raises(InvalidParameterError):
            wald_cdf(np.array([100.0]), mean, shape)


class TestWaldPPF:
    """Test the inverse CDF."""

    def test_inverts_cdf(self):
        p = np.array([0.05, 0.25, 0.5, 0.75, 0.95])
        t = wald_ppf(p, 400.0, 6400.0)
        np.testing.assert_allclose(wald_cdf(t, 400.0, 6400.0), p, atol=1e-6)

    def test_probability_out_of_range(self):
        with pytest.raises(InvalidParameterError, match=r"\[0, 1\]"):
            wald_ppf(np.array([0.5, 1.5]), 400.0, 6400.0)


class TestEvaluateCDF:
    """Test grid evaluation properties."""

    @pytest.mark.parametrize("mean, shape", [(400.0, 6400.0), (350.0, 5500.0), (300.0, 50.0), (600.0, 1e5)])
    def test_monotone_and_bounded(self, mean, shape):
        curve = evaluate_cdf(GRID, mean, shape)
        assert curve.shape == (GRID.size,)
        assert np.all(np.diff(curve) >= 0.0)
        assert curve.min() >= 0.0
        assert curve.max() <= 1.0

    def test_accepts_plain_array(self):
        curve = evaluate_cdf(np.array([300.0, 400.0, 500.0]), 400.0, 6400.0)
        assert curve.shape == (3,)

    def test_rejects_unsorted_grid(self):
        with pytest.raises(InvalidParameterError, match="strictly increasing"):
            evaluate_cdf(np.array([300.0, 200.0]), 400.0, 6400.0)

    def test_approaches_one_far_beyond_mean(self):
        grid = SupportGrid.linspace(100.0, 10_000.0, 50)
        curve = evaluate_cdf(grid, 400.0, 6400.0)
        assert curve[-1] == pytest.approx(1.0, abs=1e-9)


class TestStageCDF:
    """Test stage curves built from a share weight."""

    def test_first_stage_parameters(self):
        channel = ChannelParams("a", 400.0, 6400.0)
        np.testing.assert_allclose(
            stage_cdf(GRID, channel, 0.3, stage=1),
            evaluate_cdf(GRID, 120.0, 1920.0),
        )

    def test_second_stage_parameters(self):
        channel = ChannelParams("a", 400.0, 6400.0)
        np.testing.assert_allclose(
            stage_cdf(GRID, channel, 0.3, stage=2),
            evaluate_cdf(GRID, 280.0, 4480.0),
        )

    def test_first_stage_is_faster(self):
        channel = ChannelParams("v", 350.0, 5500.0)
        first = stage_cdf(GRID, channel, 0.3, stage=1)
        second = stage_cdf(GRID, channel, 0.3, stage=2)
        assert np.all(first >= second)

    @pytest.mark.parametrize("share, stage", [(0.0, 1), (1.0, 2)])
    def test_zero_share_stage_raises(self, share, stage):
        with pytest.raises(DegenerateWeightError):
            stage_cdf(GRID, ChannelParams("a", 400.0, 6400.0), share, stage=stage)

    def test_invalid_stage_index(self):
        with pytest.raises(InvalidParameterError, match="stage must be 1 or 2"):
            stage_cdf(GRID, ChannelParams("a", 400.0, 6400.0), 0.3, stage=3)

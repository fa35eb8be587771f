"""Unit tests for bounds.py module."""

import numpy as np
import pytest

from rtshare.bounds import BoundCurves, compute_bounds, grice_cdf, miller_cdf, raab_cdf
from rtshare.channel import ChannelParams, SupportGrid
from rtshare.distribution import evaluate_cdf
from rtshare.errors import InvalidParameterError


GRID = SupportGrid.linspace(100.0, 700.0, 100)
AUDIO = ChannelParams("a", 400.0, 6400.0)
VISUAL = ChannelParams("v", 350.0, 5500.0)


class TestCombinators:
    """Test the pointwise bound formulas."""

    def test_grice_is_pointwise_max(self):
        fa = np.array([0.0, 0.2, 0.6, 0.9])
        fv = np.array([0.1, 0.1, 0.7, 0.95])
        np.testing.assert_allclose(grice_cdf(fa, fv), [0.1, 0.2, 0.7, 0.95])

    def test_miller_caps_at_one(self):
        fa = np.array([0.0, 0.2, 0.6, 0.9])
        fv = np.array([0.1, 0.1, 0.7, 0.95])
        np.testing.assert_allclose(miller_cdf(fa, fv), [0.1, 0.3, 1.0, 1.0])

    def test_raab_is_independent_race(self):
        fa = np.array([0.0, 0.5, 1.0])
        fv = np.array([0.5, 0.5, 0.3])
        np.testing.assert_allclose(raab_cdf(fa, fv), [0.5, 0.75, 1.0])


class TestComputeBounds:
    """Test the BoundCurves built from two channels."""

    def test_curves_match_channels(self):
        bounds = compute_bounds(GRID, AUDIO, VISUAL)
        assert isinstance(bounds, BoundCurves)
        np.testing.assert_allclose(bounds.audio, evaluate_cdf(GRID, 400.0, 6400.0))
        np.testing.assert_allclose(bounds.visual, evaluate_cdf(GRID, 350.0, 5500.0))

    def test_ordering_grice_raab_miller(self):
        bounds = compute_bounds(GRID, AUDIO, VISUAL)
        assert np.all(bounds.grice <= bounds.raab + 1e-12)
        assert np.all(bounds.raab <= bounds.miller + 1e-12)
        assert np.all(bounds.grice <= bounds.miller)

    @pytest.mark.parametrize(
        "audio, visual",
        [
            (ChannelParams("a", 250.0, 300.0), ChannelParams("v", 600.0, 40000.0)),
            (ChannelParams("a", 500.0, 1e5), ChannelParams("v", 500.0, 1e5)),
            (ChannelParams("a", 150.0, 20.0), ChannelParams("v", 700.0, 900.0)),
        ],
    )
    def test_grice_below_miller_for_any_pair(self, audio, visual):
        bounds = compute_bounds(GRID, audio, visual)
        assert np.all(bounds.grice <= bounds.miller)

    def test_every_curve_monotone_and_bounded(self):
        bounds = compute_bounds(GRID, AUDIO, VISUAL)
        for name, curve in bounds.as_dict().items():
            assert curve.shape == (GRID.size,), name
            assert np.all(np.diff(curve) >= 0.0), name
            assert curve.min() >= 0.0 and curve.max() <= 1.0, name

    def test_curves_are_read_only(self):
        bounds = compute_bounds(GRID, AUDIO, VISUAL)
        with pytest.raises(ValueError):
            bounds.miller[0] = 0.5

    def test_miller_reaches_one_before_raab(self):
        bounds = compute_bounds(GRID, AUDIO, VISUAL)
        first_miller = int(np.argmax(bounds.miller >= 1.0))
        assert bounds.miller[-1] == 1.0
        assert bounds.raab[first_miller] < 1.0

    def test_invalid_grid(self):
        with pytest.raises(InvalidParameterError):
            compute_bounds(np.array([300.0, 300.0]), AUDIO, VISUAL)

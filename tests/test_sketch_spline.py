"""Tests for sketch point normalisation and Catmull-Rom evaluation."""
import numpy as np
import pytest

from sketch_spline import (
    FALLBACK_HEIGHT,
    catmull_rom,
    evaluate_sketch,
    normalize_sketch_points,
)


class TestNormalize:
    """Control points are cleaned before interpolation."""

    def test_sorted_by_x(self):
        points = normalize_sketch_points([(1.0, 0.1), (0.0, 0.2), (0.5, 0.9)])
        assert [p[0] for p in points] == [0.0, 0.5, 1.0]

    def test_clamped_to_unit_square(self):
        points = normalize_sketch_points([(-0.5, 2.0), (1.5, -1.0)])
        assert points == [(0.0, 1.0), (1.0, 0.0)]

    def test_ends_padded_flat(self):
        points = normalize_sketch_points([(0.2, 0.3), (0.8, 0.6)])
        assert points == [(0.0, 0.3), (0.2, 0.3), (0.8, 0.6), (1.0, 0.6)]

    def test_ends_near_edge_not_padded(self):
        points = normalize_sketch_points([(0.005, 0.3), (0.995, 0.6)])
        assert len(points) == 2

    def test_duplicates_dropped(self):
        points = normalize_sketch_points([(0.0, 0.1), (0.5, 0.2), (0.5, 0.9), (1.0, 0.3)])
        assert len(points) == 3

    def test_non_finite_points_dropped(self):
        points = normalize_sketch_points([(0.0, 0.1), (float("nan"), 0.5), (1.0, float("inf"))])
        assert points == [(0.0, 0.1)]

    def test_single_point_not_padded(self):
        assert normalize_sketch_points([(0.5, 0.7)]) == [(0.5, 0.7)]


class TestCatmullRom:
    """The spline segment itself."""

    def test_endpoints(self):
        assert catmull_rom(0.0, 0.2, 0.9, 1.0, 0.0) == pytest.approx(0.2)
        assert catmull_rom(0.0, 0.2, 0.9, 1.0, 1.0) == pytest.approx(0.9)

    def test_linear_data_stays_linear(self):
        assert catmull_rom(0.0, 1.0, 2.0, 3.0, 0.5) == pytest.approx(1.5)
        assert catmull_rom(0.0, 1.0, 2.0, 3.0, 0.25) == pytest.approx(1.25)


class TestEvaluateSketch:
    """Sampling the normalised curve."""

    def test_passes_through_control_points(self):
        points = normalize_sketch_points([(0.0, 0.0), (0.5, 0.8), (1.0, 0.0)])
        assert evaluate_sketch(points, 0.0) == pytest.approx(0.0)
        assert evaluate_sketch(points, 0.5) == pytest.approx(0.8)
        assert evaluate_sketch(points, 1.0) == pytest.approx(0.0)

    def test_symmetric_sketch_gives_symmetric_curve(self):
        points = normalize_sketch_points([(0.0, 0.0), (0.5, 0.8), (1.0, 0.0)])
        for u in (0.1, 0.2, 0.35):
            assert evaluate_sketch(points, u) == pytest.approx(evaluate_sketch(points, 1.0 - u))

    def test_overshoot_clamped(self):
        points = normalize_sketch_points([(0.0, 0.0), (0.1, 1.0), (0.2, 0.0), (1.0, 1.0)])
        values = np.array([evaluate_sketch(points, u) for u in np.linspace(0, 1, 201)])
        assert values.min() >= 0.0
        assert values.max() <= 1.0

    def test_outside_range_clamped_to_ends(self):
        points = normalize_sketch_points([(0.0, 0.2), (1.0, 0.6)])
        assert evaluate_sketch(points, -1.0) == pytest.approx(0.2)
        assert evaluate_sketch(points, 2.0) == pytest.approx(0.6)

    @pytest.mark.parametrize("raw", [[], [(0.3, 0.9)]])
    def test_too_few_points_fallback(self, raw):
        points = normalize_sketch_points(raw)
        assert evaluate_sketch(points, 0.4) == FALLBACK_HEIGHT

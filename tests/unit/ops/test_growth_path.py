"""
Unit tests for the growth path generator.

Tests verify:
- frame count and base frame
- constant segment spacing along each frame's forward axis
- determinism for a fixed seed
- degenerate curvature inputs do not fail
"""

import numpy as np
import pytest

from treemaker.ops.growth import generate_growth_path, frame_positions, path_length


class TestGrowthPath:
    """Tests for generate_growth_path."""

    def test_frame_count(self):
        frames = generate_growth_path(6, 0.5, 0.1, 0.1, seed=1)
        assert len(frames) == 6

    def test_single_frame(self):
        frames = generate_growth_path(1, 0.5, 0.1, 0.1, seed=1)
        assert len(frames) == 1
        np.testing.assert_allclose(frames[0].position, [0.0, 0.0, 0.0])

    def test_base_frame_is_origin_identity(self):
        frames = generate_growth_path(5, 1.0, 0.3, 0.3, seed=3)
        np.testing.assert_allclose(frames[0].position, [0.0, 0.0, 0.0])
        np.testing.assert_allclose(frames[0].quaternion, [0.0, 0.0, 0.0, 1.0])

    def test_segments_follow_forward_axis(self):
        frames = generate_growth_path(8, 0.75, 0.2, 0.4, seed=5)
        for prev, cur in zip(frames, frames[1:]):
            step = cur.position - prev.position
            np.testing.assert_allclose(step, cur.forward * 0.75, atol=1e-12)

    def test_path_length(self):
        frames = generate_growth_path(5, 2.0, 0.2, 0.2, seed=8)
        assert path_length(frames) == pytest.approx(8.0)

    def test_deterministic(self):
        a = generate_growth_path(10, 0.3, 0.2, 0.1, seed=99)
        b = generate_growth_path(10, 0.3, 0.2, 0.1, seed=99)

        np.testing.assert_array_equal(frame_positions(a), frame_positions(b))
        for fa, fb in zip(a, b):
            np.testing.assert_array_equal(fa.quaternion, fb.quaternion)

    def test_different_seeds_differ(self):
        a = frame_positions(generate_growth_path(10, 0.3, 0.2, 0.1, seed=1))
        b = frame_positions(generate_growth_path(10, 0.3, 0.2, 0.1, seed=2))
        assert not np.array_equal(a, b)

    def test_zero_curvature_does_not_fail(self):
        frames = generate_growth_path(12, 0.5, 0.0, 0.0, seed=4)
        assert len(frames) == 12

        positions = frame_positions(frames)
        cumulative = np.concatenate([[0.0], np.cumsum(np.linalg.norm(np.diff(positions, axis=0), axis=1))])
        assert np.all(np.diff(cumulative) > 0)

    def test_zero_curvature_is_nearly_straight(self):
        frames = generate_growth_path(12, 0.5, 0.0, 0.0, seed=4)
        tip = frames[-1].position
        assert tip[2] > 0.99 * 11 * 0.5

    def test_higher_curvature_bends_more(self):
        def mean_deviation(frames):
            return np.mean([1.0 - f.forward[2] for f in frames])

        straight = generate_growth_path(20, 1.0, 0.001, 0.001, seed=6)
        bent = generate_growth_path(20, 1.0, 0.2, 0.001, seed=6)
        assert mean_deviation(bent) > mean_deviation(straight)

    def test_orientations_are_unit(self):
        for frame in generate_growth_path(6, 1.0, 0.4, 0.4, seed=12):
            assert np.linalg.norm(frame.forward) == pytest.approx(1.0)

    @pytest.mark.parametrize("count,length", [(0, 1.0), (3, 0.0), (3, -1.0)])
    def test_invalid_arguments(self, count, length):
        with pytest.raises(ValueError):
            generate_growth_path(count, length, 0.1, 0.1, seed=1)

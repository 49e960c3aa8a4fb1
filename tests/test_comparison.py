"""Tests for tolerance-based comparison."""

import numpy as np
import pytest

from meshcore.comparison import ToleranceComparator, compare_values, relative_noise_threshold
from meshcore.exceptions import PreconditionViolation


class TestCompareValues:
    """Scalar comparison under a threshold."""

    def test_within_threshold_is_equal(self):
        assert compare_values(1.0, 1.0 + 1e-12, 1e-9) == 0
        assert compare_values(1.0 + 1e-12, 1.0, 1e-9) == 0

    def test_threshold_is_inclusive(self):
        assert compare_values(0.0, 0.5, 0.5) == 0

    def test_ordering(self):
        assert compare_values(0.0, 1.0, 1e-9) == -1
        assert compare_values(1.0, 0.0, 1e-9) == 1

    def test_zero_threshold_is_exact(self):
        assert compare_values(0.0, 1e-300, 0.0) == -1
        assert compare_values(2.0, 2.0, 0.0) == 0


class TestToleranceComparator:
    """Lexicographic comparison of key tuples."""

    def test_first_unequal_key_decides(self):
        cmp = ToleranceComparator((1e-9, 1e-9, 1e-9))
        assert cmp.compare((0.0, 5.0, 0.0), (1e-12, 1.0, 9.0)) == 1
        assert cmp.compare((0.0, 1.0, 9.0), (1e-12, 1.0, 0.0)) == 1
        assert cmp.compare((0.0, 1.0, 0.0), (0.0, 1.0, 0.0)) == 0

    def test_per_key_thresholds(self):
        cmp = ToleranceComparator([0.5, 0.0])
        assert cmp.equal((0.0, 1.0), (0.4, 1.0))
        assert not cmp.equal((0.0, 1.0), (0.4, 1.0 + 1e-15))

    def test_equality_is_symmetric_not_transitive(self):
        """Chains of near-duplicates are not collapsed by the comparator itself."""
        cmp = ToleranceComparator([1.0])
        a, b, c = (0.0,), (0.6,), (1.2,)
        assert cmp.equal(a, b) and cmp.equal(b, a)
        assert cmp.equal(b, c)
        assert not cmp.equal(a, c)

    def test_key_count_mismatch(self):
        cmp = ToleranceComparator([1e-9, 1e-9, 1e-9])
        with pytest.raises(PreconditionViolation):
            cmp.compare((0.0, 0.0), (0.0, 0.0))

    def test_negative_threshold_rejected(self):
        with pytest.raises(PreconditionViolation):
            ToleranceComparator([1e-9, -1.0])

    def test_nan_threshold_rejected(self):
        with pytest.raises(PreconditionViolation):
            ToleranceComparator([np.nan])


class TestRelativeNoiseThreshold:
    """Threshold derived from the bounding box."""

    def test_scales_with_extent(self):
        coords = [0, 0, 0, 2, 4, 8]
        assert np.allclose(relative_noise_threshold(coords, 1e-3), [2e-3, 4e-3, 8e-3])

    def test_flat_axis_uses_largest_extent(self):
        coords = [0, 0, 0, 1, 10, 0]
        assert np.allclose(relative_noise_threshold(coords, 1e-3), [1e-3, 1e-2, 1e-2])

    def test_single_point(self):
        assert np.allclose(relative_noise_threshold([3, 3, 3], 1e-6), [1e-6] * 3)

"""Tests for renumbering and vector helpers."""

import numpy as np
import pytest
from scipy import sparse

from meshcore.exceptions import PreconditionViolation
from meshcore.renumbering import (
    chain_renumbering,
    concatenate,
    csr_to_ijk,
    csr_to_triples,
    duplicate,
    get_equally_spaced,
    get_reordering,
    invert_renumbering,
    norm_blocks,
    reorder,
    separate,
    split_by_selection,
    split_vector,
    to_address_data,
)


class TestRenumbering:
    """Inversion, reordering and chaining."""

    def test_invert(self):
        renum = np.array([2, 0, 3, 1])
        inverse = invert_renumbering(renum)
        np.testing.assert_array_equal(inverse[renum], np.arange(4))
        np.testing.assert_array_equal(renum[inverse], np.arange(4))

    def test_invert_rejects_non_permutation(self):
        with pytest.raises(PreconditionViolation):
            invert_renumbering([0, 0, 1])

    def test_reordering_is_stable(self):
        # Old indexes 1 and 3 both map to 0; they keep their relative order
        np.testing.assert_array_equal(get_reordering([1, 0, 2, 0]), [1, 3, 0, 2])

    def test_chain(self):
        original = np.array([1, 1, 0])
        new = np.array([5, 7])
        np.testing.assert_array_equal(chain_renumbering(original, new), [7, 7, 5])

    def test_chain_out_of_range(self):
        with pytest.raises(PreconditionViolation):
            chain_renumbering([0, 3], [0, 1, 2])


class TestAddressData:
    """Address-data pairs produced by point location."""

    def test_reorder_blocks(self):
        addresses, data = reorder([0, 2, 3, 6], [1, 2, 3, 4, 5, 6], [2, 0, 1])
        np.testing.assert_array_equal(addresses, [0, 1, 4, 6])
        np.testing.assert_array_equal(data, [3, 4, 5, 6, 1, 2])

    def test_reorder_empty_block(self):
        addresses, data = reorder([0, 0, 2], [7, 8], [1, 0])
        np.testing.assert_array_equal(addresses, [0, 2, 2])
        np.testing.assert_array_equal(data, [7, 8])

    def test_reorder_malformed(self):
        with pytest.raises(PreconditionViolation):
            reorder([0, 2], [1, 2, 3], [0])
        with pytest.raises(PreconditionViolation):
            reorder([0, 1, 2], [1, 2], [0, 0])
        with pytest.raises(PreconditionViolation):
            reorder([0, 1, 2], [1, 2], [0])

    def test_to_address_data(self):
        elems = [2, 1, 5, 0, 2, 0, -1, -1, 2, 1]
        refcoords = np.repeat(np.arange(5.0), 3)
        ads, rcs, index = to_address_data(elems, refcoords, [0, 0, 3, 0, 0, 1])

        assert len(ads) == len(rcs) == 6
        np.testing.assert_array_equal(ads[2], [0, 1, 3, 3])
        np.testing.assert_array_equal(rcs[2], [2, 2, 2, 0, 0, 0, 4, 4, 4])
        np.testing.assert_array_equal(ads[5], [0, 1])
        np.testing.assert_array_equal(rcs[5], [1, 1, 1])
        np.testing.assert_array_equal(ads[0], [0])
        assert len(rcs[0]) == 0
        np.testing.assert_array_equal(index, [1, 0, 0, -1, 2])

    def test_to_address_data_malformed(self):
        with pytest.raises(PreconditionViolation):
            to_address_data([2, 3], [0.0, 0.0, 0.0], [0, 0, 3])
        with pytest.raises(PreconditionViolation):
            to_address_data([7, 0], [0.0, 0.0, 0.0], [0, 0, 3])
        with pytest.raises(PreconditionViolation):
            to_address_data([2, 0, 2], [0.0] * 6, [0, 0, 3])
        with pytest.raises(PreconditionViolation):
            to_address_data([2, 0], [0.0] * 6, [0, 0, 3])


class TestSparse:
    """CSR row expansion."""

    def test_csr_to_ijk(self):
        np.testing.assert_array_equal(csr_to_ijk([0, 2, 2, 5]), [0, 0, 2, 2, 2])

    def test_csr_to_ijk_rejects_decreasing_pointer(self):
        with pytest.raises(PreconditionViolation):
            csr_to_ijk([0, 3, 1])

    def test_csr_to_triples(self):
        dense = np.array([[1.0, 0.0, 2.0], [0.0, 0.0, 0.0], [0.0, 3.0, 0.0]])
        rows, cols, vals = csr_to_triples(sparse.csr_matrix(dense))
        np.testing.assert_array_equal(rows, [0, 0, 2])
        np.testing.assert_array_equal(cols, [0, 2, 1])
        np.testing.assert_array_equal(vals, [1.0, 2.0, 3.0])


class TestVectors:
    """Block splitting and assembly helpers."""

    def test_split_vector(self):
        a, b = split_vector([1, 10, 2, 20, 3, 30], 2)
        np.testing.assert_array_equal(a, [1, 2, 3])
        np.testing.assert_array_equal(b, [10, 20, 30])

    def test_split_vector_bad_length(self):
        with pytest.raises(PreconditionViolation):
            split_vector([1, 2, 3], 2)

    def test_split_by_selection(self):
        unselected, selected = split_by_selection([4, 5, 6, 7], [True, False, False, True])
        np.testing.assert_array_equal(unselected, [5, 6])
        np.testing.assert_array_equal(selected, [4, 7])

    def test_norm_blocks(self):
        np.testing.assert_allclose(norm_blocks([3, 4, 0, 0, 0, 2], 3), [5.0, 2.0])

    def test_separate(self):
        v = [1, 2, 3, 4, 5, 6]
        np.testing.assert_array_equal(separate(v, 3, [0, 2]), [1, 4, 3, 6])

    def test_duplicate_and_concatenate(self):
        np.testing.assert_array_equal(duplicate([1, 2], 3), [1, 2, 1, 2, 1, 2])
        np.testing.assert_array_equal(concatenate([[1], [], [2, 3]]), [1, 2, 3])
        assert len(concatenate([])) == 0

    def test_equally_spaced(self):
        np.testing.assert_array_equal(get_equally_spaced(3, 2, 4), [3, 5, 7, 9])

"""Tests for meshio node canonicalization."""

import meshio
import numpy as np
import pytest

from meshcore.datastructures import CanonicalizationParameters
from meshcore.io import canonicalize_file, coordinates_from_meshio, merge_duplicate_nodes


@pytest.fixture
def split_square():
    """Unit square as two triangles that do not share their diagonal nodes."""
    points = np.array(
        [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0 + 1e-14]]
    )
    cells = [("triangle", np.array([[0, 1, 2], [3, 4, 5]]))]
    return meshio.Mesh(points, cells, point_data={"id": np.arange(6.0)})


class TestMergeDuplicateNodes:
    """Merging a meshio mesh in memory."""

    def test_coordinates_are_padded(self, split_square):
        coords = coordinates_from_meshio(split_square)
        assert coords.shape == (18,)
        np.testing.assert_array_equal(coords[2::3], 0.0)

    def test_merges_shared_nodes(self, split_square):
        merged, renumbering = merge_duplicate_nodes(split_square)
        assert len(merged.points) == 4
        assert merged.points.shape[1] == 2
        assert renumbering[1] == renumbering[3]
        assert renumbering[2] == renumbering[5]
        assert len(set(renumbering.tolist())) == 4

    def test_cells_keep_their_geometry(self, split_square):
        merged, _ = merge_duplicate_nodes(split_square)
        before = split_square.points[split_square.cells[0].data]
        after = merged.points[merged.cells[0].data]
        np.testing.assert_allclose(after, before, atol=1e-12)

    def test_point_data_keeps_first_node(self, split_square):
        merged, renumbering = merge_duplicate_nodes(split_square)
        ids = merged.point_data["id"]
        assert ids[renumbering[3]] == 1.0
        assert ids[renumbering[5]] == 2.0

    def test_zero_tolerance_keeps_near_duplicates(self, split_square):
        merged, _ = merge_duplicate_nodes(split_square, relative_tolerance=0.0)
        assert len(merged.points) == 5


def test_canonicalize_file(tmp_path):
    points = np.array(
        [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]]
    )
    mesh = meshio.Mesh(points, [("triangle", np.array([[0, 1, 2], [3, 4, 5]]))])
    infile = tmp_path / "in.vtu"
    outfile = tmp_path / "out.vtu"
    meshio.write(infile, mesh)

    renumbering = canonicalize_file(infile, outfile, CanonicalizationParameters())

    result = meshio.read(outfile)
    assert len(renumbering) == 6
    assert len(result.points) == 4
    expected = renumbering[np.array([[0, 1, 2], [3, 4, 5]])]
    np.testing.assert_array_equal(result.cells[0].data, expected)

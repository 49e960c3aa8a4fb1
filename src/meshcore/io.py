"""Node canonicalization of mesh files through meshio."""

from __future__ import annotations

import logging
from pathlib import Path

import meshio
import numpy as np
from numpy.typing import NDArray

from .comparison import relative_noise_threshold
from .datastructures import DEFAULT_RELATIVE_TOLERANCE, NODE_DIM, CanonicalizationParameters
from .duplicates import get_unique_coordinates, remove_duplicated_coordinates

log = logging.getLogger(__name__)


def coordinates_from_meshio(mesh: meshio.Mesh) -> NDArray[np.float64]:
    """Flat ``[x1 y1 z1 x2 ...]`` coordinates, 2D points padded with z = 0."""
    points = np.asarray(mesh.points, dtype=np.float64)
    coords = np.zeros((len(points), NODE_DIM))
    ndim = min(points.shape[1], NODE_DIM) if points.ndim == 2 else 0
    coords[:, :ndim] = points[:, :ndim]
    return coords.ravel()


def merge_duplicate_nodes(
    mesh: meshio.Mesh,
    relative_tolerance: float = DEFAULT_RELATIVE_TOLERANCE,
) -> tuple[meshio.Mesh, NDArray[np.int64]]:
    """
    Merge nodes closer than a fraction of the mesh extent.

    Parameters
    ----------
    mesh : meshio.Mesh
        Input mesh, left untouched.
    relative_tolerance : float
        Noise threshold relative to the bounding box extent of every axis.

    Returns
    -------
    merged : meshio.Mesh
        Mesh with canonical nodes; cells are renumbered and point data keeps the
        values of the first node merged into each canonical node.
    renumbering : ndarray (n_points,)
        Canonical number of every original node.
    """
    coords = coordinates_from_meshio(mesh)
    thresholds = relative_noise_threshold(coords, relative_tolerance)
    renumbering, count = remove_duplicated_coordinates(thresholds, coords)

    ndim = np.asarray(mesh.points).shape[1]
    points = get_unique_coordinates(coords, renumbering, count)[:, :ndim]
    _, first = np.unique(renumbering, return_index=True)

    cells = [
        meshio.CellBlock(block.type, renumbering[np.asarray(block.data)])
        for block in mesh.cells
    ]
    point_data = {
        name: np.asarray(values)[first] for name, values in mesh.point_data.items()
    }
    merged = meshio.Mesh(
        points,
        cells,
        point_data=point_data,
        cell_data=dict(mesh.cell_data),
        field_data=dict(mesh.field_data),
    )

    log.info(f"Merged {len(mesh.points)} nodes into {count} ({len(mesh.points) - count} duplicates)")
    return merged, renumbering


def canonicalize_file(
    input_path: str | Path,
    output_path: str | Path,
    params: CanonicalizationParameters | None = None,
) -> NDArray[np.int64]:
    """Read a mesh file, merge its duplicate nodes and write the result."""
    params = params or CanonicalizationParameters()
    mesh = meshio.read(input_path)
    merged, renumbering = merge_duplicate_nodes(mesh, params.relative_tolerance)
    meshio.write(output_path, merged)
    log.info(f"Wrote {output_path}")
    return renumbering

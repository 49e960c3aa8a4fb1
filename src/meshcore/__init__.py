"""Noise-tolerant mesh canonicalization primitives.

This package implements the building blocks used to construct and query
finite element meshes: stable tolerance-aware sorting of coordinates,
duplicate node collapsing, interval slicing, inversion of element mappings
with a bounded Newton solver, and set algebra over physical regions.

Main components:
- ToleranceComparator: noise-aware equality and ordering
- stable_coordinate_sort, stable_sort_blocks: stable tolerant sorts
- remove_duplicated_coordinates, assign_edge_numbers: canonical node and edge numbering
- slice_coordinates, find_interval: bucketing of scalar values
- get_root, get_reference_coordinates: reference coordinate recovery
- PhysicalRegions: union/intersection/exclusion of physical regions
"""

from .comparison import ToleranceComparator, compare_values, relative_noise_threshold
from .datastructures import (
    DEFAULT_BOXSIZE,
    DEFAULT_MAXIT,
    DEFAULT_RELATIVE_TOLERANCE,
    DEFAULT_TOL,
    ROOT_CONVERGED,
    ROOT_FAILED,
    ROOT_OUT_OF_BOX,
    UNLOCATED,
    WILDCARD,
    CanonicalizationParameters,
    RootParameters,
)
from .duplicates import assign_edge_numbers, get_unique_coordinates, remove_duplicated_coordinates
from .exceptions import PreconditionViolation, terminate_on_violation
from .polynomials import Polynomial, Polynomials
from .regions import DisjointRegionStructure, PhysicalRegion, PhysicalRegions, intersect
from .roots import PolynomialSystem, get_reference_coordinates, get_root
from .slicing import find_interval, get_coord_bounds, slice_coordinates, slice_indices
from .sorting import stable_coordinate_sort, stable_sort, stable_sort_blocks, tuple3_sort

__all__ = [
    # Comparison
    "ToleranceComparator",
    "compare_values",
    "relative_noise_threshold",
    # Configuration
    "DEFAULT_BOXSIZE",
    "DEFAULT_MAXIT",
    "DEFAULT_RELATIVE_TOLERANCE",
    "DEFAULT_TOL",
    "ROOT_CONVERGED",
    "ROOT_FAILED",
    "ROOT_OUT_OF_BOX",
    "UNLOCATED",
    "WILDCARD",
    "CanonicalizationParameters",
    "RootParameters",
    # Errors
    "PreconditionViolation",
    "terminate_on_violation",
    # Sorting
    "stable_coordinate_sort",
    "stable_sort",
    "stable_sort_blocks",
    "tuple3_sort",
    # Duplicates
    "remove_duplicated_coordinates",
    "get_unique_coordinates",
    "assign_edge_numbers",
    # Slicing
    "slice_indices",
    "slice_coordinates",
    "find_interval",
    "get_coord_bounds",
    # Root finding
    "Polynomial",
    "Polynomials",
    "PolynomialSystem",
    "get_root",
    "get_reference_coordinates",
    # Regions
    "DisjointRegionStructure",
    "PhysicalRegion",
    "PhysicalRegions",
    "intersect",
]

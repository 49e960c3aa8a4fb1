"""Shared fixtures: a stand-in for the external disjoint region structure."""

import pytest

# Element type number -> dimension (point, line, triangle, quadrangle, tetrahedron, hexahedron)
ELEMENT_DIMENSIONS = {0: 0, 1: 1, 2: 2, 3: 2, 4: 3, 5: 3}


class FakeDisjointRegions:
    """Disjoint regions given as {number: (element type, element count)}."""

    def __init__(self, regions):
        self.regions = dict(regions)
        self.removal_masks = []

    def element_type(self, disjreg):
        return self.regions[disjreg][0]

    def element_dimension(self, disjreg):
        return ELEMENT_DIMENSIONS[self.regions[disjreg][0]]

    def count_elements(self, disjreg):
        return self.regions[disjreg][1]

    def remove_physical_regions(self, mask):
        self.removal_masks.append(list(mask))


@pytest.fixture
def disjoint_regions():
    """Two triangle regions, one quadrangle region, two line regions and a point."""
    return FakeDisjointRegions(
        {
            0: (2, 10),
            1: (2, 5),
            2: (3, 4),
            3: (1, 3),
            4: (1, 2),
            5: (0, 1),
        }
    )

"""Physical regions and their set algebra over disjoint regions.

A disjoint region is the smallest mesh partition (one element type, one
topology); it is owned by an external structure. A physical region is a
user-facing group of disjoint regions. ``PhysicalRegions`` owns its
physical regions and only holds a weak, non-owning reference to the
disjoint region structure: the caller must keep that structure alive for
as long as the collection is used.
"""

from __future__ import annotations

import logging
import weakref
from typing import Iterable, Iterator, Protocol, Sequence

import numpy as np

from .datastructures import WILDCARD
from .exceptions import violation

log = logging.getLogger(__name__)


class DisjointRegionStructure(Protocol):
    """What the region layer needs from the external disjoint region owner."""

    def element_type(self, disjreg: int) -> int: ...

    def element_dimension(self, disjreg: int) -> int: ...

    def count_elements(self, disjreg: int) -> int: ...

    def remove_physical_regions(self, mask: Sequence[bool]) -> None: ...


def intersect(a: Iterable[int], b: Iterable[int]) -> list[int]:
    """Ascending list of the values present in both ``a`` and ``b``."""
    common = np.intersect1d(
        np.asarray(list(a), dtype=np.int64), np.asarray(list(b), dtype=np.int64)
    )
    return common.tolist()


def _resolve(handle: weakref.ReferenceType) -> DisjointRegionStructure:
    structure = handle()
    if structure is None:
        raise violation("The disjoint region structure was released before its physical regions")
    return structure


class PhysicalRegion:
    """Ordered list of disjoint region numbers under a physical region number."""

    def __init__(self, number: int, handle: weakref.ReferenceType):
        self._number = number
        self._handle = handle
        self._disjregs: list[int] = []

    def __repr__(self) -> str:
        return f"PhysicalRegion(number={self._number}, disjoint_regions={self._disjregs})"

    @property
    def number(self) -> int:
        return self._number

    def get_disjoint_regions(self, element_type: int = WILDCARD) -> list[int]:
        """Disjoint regions of one element type, or all of them for -1."""
        if element_type == WILDCARD:
            return list(self._disjregs)
        structure = _resolve(self._handle)
        return [d for d in self._disjregs if structure.element_type(d) == element_type]

    def set_disjoint_regions(self, disjregs: Iterable[int]) -> None:
        self._disjregs = [int(d) for d in disjregs]

    def add_disjoint_region(self, disjreg: int) -> None:
        if int(disjreg) not in self._disjregs:
            self._disjregs.append(int(disjreg))

    def get_element_dimension(self) -> int:
        """Highest element dimension in the region, -1 when it is empty."""
        if not self._disjregs:
            return -1
        structure = _resolve(self._handle)
        return max(structure.element_dimension(d) for d in self._disjregs)

    def count_elements(self) -> int:
        structure = _resolve(self._handle)
        return sum(structure.count_elements(d) for d in self._disjregs)


class PhysicalRegions:
    """
    Registry of physical regions keyed by number, in creation order.

    Parameters
    ----------
    disjoint_regions : DisjointRegionStructure
        External owner of the disjoint regions. Only a weak reference is kept.
    """

    def __init__(self, disjoint_regions: DisjointRegionStructure):
        self._handle = weakref.ref(disjoint_regions)
        self._regions: dict[int, PhysicalRegion] = {}

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[PhysicalRegion]:
        return iter(list(self._regions.values()))

    def __contains__(self, number: int) -> bool:
        return int(number) in self._regions

    @property
    def disjoint_regions(self) -> DisjointRegionStructure:
        return _resolve(self._handle)

    # ------------------------------------------------------------------
    # Lookup and creation
    # ------------------------------------------------------------------

    def create(self, number: int) -> PhysicalRegion:
        """Register a new empty physical region."""
        number = int(number)
        if number in self._regions:
            raise violation(f"Physical region number {number} is already defined")
        region = PhysicalRegion(number, self._handle)
        self._regions[number] = region
        log.debug(f"Created physical region {number}")
        return region

    def lookup(self, number: int) -> PhysicalRegion:
        """Existing physical region; an undefined number is a precondition violation."""
        self._require_defined([number])
        return self._regions[int(number)]

    def get(self, number: int) -> PhysicalRegion:
        """Existing physical region, created empty on first use."""
        region = self._regions.get(int(number))
        return region if region is not None else self.create(number)

    def _require_defined(self, numbers: Iterable[int]) -> None:
        for number in numbers:
            if int(number) not in self._regions:
                raise violation(f"Physical region number {int(number)} is not defined")

    def _new_region(self, disjregs: list[int]) -> int:
        number = self.get_max_physical_region_number() + 1
        self.create(number).set_disjoint_regions(disjregs)
        return number

    # ------------------------------------------------------------------
    # Set algebra
    # ------------------------------------------------------------------

    def create_union(self, numbers: Sequence[int]) -> int:
        """New region holding the disjoint regions of every input, concatenated."""
        self._require_defined(numbers)
        disjregs: list[int] = []
        for number in numbers:
            disjregs.extend(self._regions[int(number)].get_disjoint_regions(WILDCARD))
        return self._new_region(disjregs)

    def create_intersection(self, numbers: Sequence[int]) -> int:
        """New region holding the disjoint regions shared by every input."""
        self._require_defined(numbers)
        disjregs: list[int] = []
        for i, number in enumerate(numbers):
            current = self._regions[int(number)].get_disjoint_regions(WILDCARD)
            disjregs = intersect(disjregs, current) if i > 0 else current
        return self._new_region(disjregs)

    def create_exclusion(self, number: int, toexclude: int) -> int:
        """New region holding the disjoint regions of ``number`` not in ``toexclude``."""
        self._require_defined([number, toexclude])
        excluded = set(self._regions[int(toexclude)].get_disjoint_regions(WILDCARD))
        disjregs = [
            d for d in self._regions[int(number)].get_disjoint_regions(WILDCARD)
            if d not in excluded
        ]
        return self._new_region(disjregs)

    def create_union_of_all(self, problem_dimension: int) -> int:
        """Union of every region whose element dimension is ``problem_dimension``."""
        tounite = [
            number for number, region in self._regions.items()
            if region.get_element_dimension() == problem_dimension
        ]
        return self.create_union(tounite)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_max_physical_region_number(self) -> int:
        """Largest region number, -1 when the collection is empty."""
        return max(self._regions, default=-1)

    def count(self, dim: int = WILDCARD) -> int:
        """Number of regions of element dimension ``dim`` (-1 for all)."""
        return len(self.get_all_numbers(dim))

    def count_elements(self) -> int:
        return sum(region.count_elements() for region in self._regions.values())

    def get_all_numbers(self, dim: int = WILDCARD) -> list[int]:
        if dim == WILDCARD:
            return list(self._regions)
        return [
            number for number, region in self._regions.items()
            if region.get_element_dimension() == dim
        ]

    def get_number(self, index: int) -> int:
        return list(self._regions)[index]

    def get_index(self, number: int) -> int:
        """Position of ``number`` in the collection, -1 if it is not defined."""
        for index, current in enumerate(self._regions):
            if current == int(number):
                return index
        return -1

    def get_at_index(self, index: int) -> PhysicalRegion:
        return list(self._regions.values())[index]

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove(self, numbers: Iterable[int], propagate: bool = False) -> None:
        """
        Drop the listed regions (undefined numbers are ignored).

        With ``propagate`` the disjoint region structure receives a mask over
        the positions before removal, true for every removed region.
        """
        # Fail before compacting if the structure is gone
        structure = self.disjoint_regions if propagate else None
        toremove = {int(n) for n in numbers}
        mask = [number in toremove for number in self._regions]
        self._regions = {
            number: region for number, region in self._regions.items()
            if number not in toremove
        }
        log.debug(f"Removed {sum(mask)} physical regions, {len(self._regions)} left")
        if structure is not None:
            structure.remove_physical_regions(mask)

    def clear(self) -> None:
        self._regions = {}

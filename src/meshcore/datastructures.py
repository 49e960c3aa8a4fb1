"""Constants and parameter containers shared by the meshcore modules.

             Params (input/config)
             ─────────────────────
Newton       RootParameters
             boxsize, tol, maxit

Nodes        CanonicalizationParameters
             relative_tolerance, abort_on_violation
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping

from omegaconf import DictConfig, OmegaConf

# Newton iteration defaults (half-width of the reference box, step tolerance, iterations)
DEFAULT_BOXSIZE = 2.0
DEFAULT_TOL = 1e-10
DEFAULT_MAXIT = 20

# get_root return codes
ROOT_CONVERGED = 1
ROOT_OUT_OF_BOX = 0
ROOT_FAILED = -1

# Element type / dimension lookups: -1 selects everything
WILDCARD = -1

# Element slot of a point that no element contains (yet)
UNLOCATED = -1

# Fraction of the bounding box extent below which coordinates are merged
DEFAULT_RELATIVE_TOLERANCE = 1e-10

# Number of coordinates per node
NODE_DIM = 3

# Element types: point, line, triangle, quadrangle, tetrahedron, hexahedron, prism, pyramid
CORNER_COUNTS = (1, 2, 3, 4, 4, 8, 6, 5)

# Corner pairs of every edge, gmsh ordering
EDGE_DEFINITIONS = (
    (),
    ((0, 1),),
    ((0, 1), (1, 2), (2, 0)),
    ((0, 1), (1, 2), (2, 3), (3, 0)),
    ((0, 1), (1, 2), (2, 0), (3, 0), (3, 2), (3, 1)),
    (
        (0, 1), (0, 3), (0, 4), (1, 2), (1, 5), (2, 3),
        (2, 6), (3, 7), (4, 5), (4, 7), (5, 6), (6, 7),
    ),
    ((0, 1), (0, 2), (0, 3), (1, 2), (1, 4), (2, 5), (3, 4), (3, 5), (4, 5)),
    ((0, 1), (0, 3), (0, 4), (1, 2), (1, 4), (2, 3), (2, 4), (3, 4)),
)


def _select_fields(cls, cfg: DictConfig | Mapping[str, Any] | None) -> dict:
    if cfg is None:
        return {}
    if isinstance(cfg, DictConfig):
        cfg = OmegaConf.to_container(cfg, resolve=True)
    known = {f.name for f in fields(cls)}
    return {k: v for k, v in cfg.items() if k in known}


@dataclass
class RootParameters:
    """Bounds of the Newton iteration used to invert element mappings."""

    boxsize: float = DEFAULT_BOXSIZE
    tol: float = DEFAULT_TOL
    maxit: int = DEFAULT_MAXIT

    @classmethod
    def from_config(cls, cfg: DictConfig | Mapping[str, Any] | None) -> RootParameters:
        return cls(**_select_fields(cls, cfg))

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CanonicalizationParameters:
    """Node merging configuration."""

    relative_tolerance: float = DEFAULT_RELATIVE_TOLERANCE
    abort_on_violation: bool = False

    @classmethod
    def from_config(
        cls, cfg: DictConfig | Mapping[str, Any] | None
    ) -> CanonicalizationParameters:
        return cls(**_select_fields(cls, cfg))

    def to_dict(self) -> dict:
        return {
            k: (int(v) if isinstance(v, bool) else v) for k, v in asdict(self).items()
        }

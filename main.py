"""
Mesh canonicalization - merge duplicated nodes of a mesh file.

Usage:
    uv run python main.py input=mesh.msh
    uv run python main.py input=mesh.msh output=clean.vtu canonicalization.relative_tolerance=1e-8
"""

import logging
import sys
from pathlib import Path

import hydra
from omegaconf import DictConfig, OmegaConf

sys.path.insert(0, str(Path(__file__).parent / "src"))

from meshcore.datastructures import CanonicalizationParameters  # noqa: E402
from meshcore.exceptions import terminate_on_violation  # noqa: E402
from meshcore.io import canonicalize_file  # noqa: E402

log = logging.getLogger(__name__)


@hydra.main(config_path="conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> int:
    """Main entry point. Returns the number of canonical nodes."""
    params = CanonicalizationParameters.from_config(cfg.canonicalization)
    log.info(f"Config:\n{OmegaConf.to_yaml(cfg)}")

    input_path = hydra.utils.to_absolute_path(cfg.input)
    output_path = hydra.utils.to_absolute_path(cfg.output)

    with terminate_on_violation(params.abort_on_violation):
        renumbering = canonicalize_file(input_path, output_path, params)

    count = int(renumbering.max()) + 1 if len(renumbering) else 0
    log.info(f"{len(renumbering)} nodes -> {count} canonical nodes")
    return count


if __name__ == "__main__":
    main()

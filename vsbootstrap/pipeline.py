"""Sequential bootstrap orchestrator with timing."""

from __future__ import annotations

import time
from pathlib import Path

from vsbootstrap.assembler import SolutionAssembler
from vsbootstrap.config import BootstrapConfig
from vsbootstrap.graph.module_tree import ModuleDefinition, ModuleTree
from vsbootstrap.output import BootstrapResult, build_result


def create_root(config: BootstrapConfig) -> tuple[ModuleDefinition, ModuleTree]:
    """Create the root module the solution's projects are attached to."""
    base_dir = Path(config.base_dir).resolve()
    tree = ModuleTree()
    root = ModuleDefinition.create(
        key=config.project_key or base_dir.name,
        name=config.project_name or base_dir.name,
        tree=tree,
    )
    root.set_base_dir(base_dir)
    root.set_work_dir(config.work_dir or base_dir / ".vsbootstrap")
    root.set_source_dirs(base_dir)
    return root, tree


def run_pipeline(
    config: BootstrapConfig,
    progress_callback=None,
) -> BootstrapResult:
    """Build the module tree for the solution under ``config.base_dir``.

    Args:
        config: Bootstrap configuration.
        progress_callback: Optional callable(phase_name, label) invoked
            when each phase starts. Used by the CLI for Rich progress.
    """
    timings: dict[str, float] = {}
    total_start = time.monotonic()

    if progress_callback:
        progress_callback("modules", "Reading the Visual Studio solution")
    start = time.monotonic()
    root, tree = create_root(config)
    SolutionAssembler(config.settings).build(root)
    timings["modules"] = time.monotonic() - start

    total_ms = (time.monotonic() - total_start) * 1000
    return build_result(config, tree, root, timings, total_ms)

"""JSON serialisation of the module tree."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from vsbootstrap import __version__
from vsbootstrap.config import BootstrapConfig
from vsbootstrap.graph.module_tree import ModuleDefinition, ModuleTree


@dataclass
class BootstrapResult:
    version: str = "1.0"
    metadata: dict[str, Any] = field(default_factory=dict)
    stats: dict[str, Any] = field(default_factory=dict)
    root: dict[str, Any] = field(default_factory=dict)
    modules: list[dict] = field(default_factory=list)


def build_result(
    config: BootstrapConfig,
    tree: ModuleTree,
    root: ModuleDefinition,
    timings: dict[str, float],
    total_ms: float,
) -> BootstrapResult:
    """Build the BootstrapResult from the module tree."""
    modules = tree.children(root.key)
    test_modules = [m for m in modules if m.test_dirs]

    return BootstrapResult(
        version="1.0",
        metadata={
            "base_dir": str(Path(config.base_dir).resolve()),
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "vsbootstrap_version": __version__,
            "duration_ms": round(total_ms, 1),
            "phase_timings": timings,
        },
        stats={
            "modules": len(modules),
            "test_modules": len(test_modules),
            "source_files": sum(len(m.source_files) for m in modules),
            "test_files": sum(len(m.test_files) for m in modules),
            "assemblies": sum(1 for m in modules if "sonar.cs.fxcop.assembly" in m.properties),
        },
        root=root.to_dict(),
        modules=[m.to_dict() for m in modules],
    )


def write_output(result: BootstrapResult, output_path: str) -> None:
    """Write the bootstrap result to a JSON file."""
    data = asdict(result)
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(data, f, indent=2, default=str)

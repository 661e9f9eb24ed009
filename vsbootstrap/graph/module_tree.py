"""In-memory module tree backed by networkx.DiGraph."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import networkx as nx

from vsbootstrap.errors import ConfigurationError


@dataclass
class ModuleDefinition:
    """One analysable module: a key, its directories, files and properties."""
    key: str
    name: str = ""
    base_dir: str = ""
    work_dir: str = ""
    source_dirs: list[str] = field(default_factory=list)
    test_dirs: list[str] = field(default_factory=list)
    source_files: list[str] = field(default_factory=list)
    test_files: list[str] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)
    tree: ModuleTree | None = field(default=None, repr=False, compare=False)

    @classmethod
    def create(cls, key: str, name: str, tree: ModuleTree | None = None) -> ModuleDefinition:
        module = cls(key=key, name=name, tree=tree)
        if tree is not None:
            tree.add_module(module)
        return module

    def add_sub_project(self, module: ModuleDefinition) -> None:
        if self.tree is None:
            self.tree = ModuleTree()
            self.tree.add_module(self)
        module.tree = self.tree
        self.tree.add_module(module, parent=self)

    def set_base_dir(self, path: str | Path) -> None:
        self.base_dir = str(path)

    def set_work_dir(self, path: str | Path) -> None:
        self.work_dir = str(path)

    def set_source_dirs(self, *paths: str | Path) -> None:
        self.source_dirs = [str(p) for p in paths]

    def set_test_dirs(self, *paths: str | Path) -> None:
        self.test_dirs = [str(p) for p in paths]

    def reset_source_dirs(self) -> None:
        self.source_dirs = []

    def add_source_files(self, *paths: str | Path) -> None:
        self.source_files.extend(str(p) for p in paths)

    def add_test_files(self, *paths: str | Path) -> None:
        self.test_files.extend(str(p) for p in paths)

    def set_property(self, key: str, value: str) -> None:
        self.properties[key] = value

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "base_dir": self.base_dir,
            "work_dir": self.work_dir,
            "source_dirs": list(self.source_dirs),
            "test_dirs": list(self.test_dirs),
            "source_files": list(self.source_files),
            "test_files": list(self.test_files),
            "properties": dict(self.properties),
        }


class ModuleTree:
    """Wrapper around networkx.DiGraph holding module containment edges."""

    def __init__(self) -> None:
        self.graph = nx.DiGraph()

    def add_module(self, module: ModuleDefinition, parent: ModuleDefinition | None = None) -> None:
        """Add ``module`` under ``parent``; a key already held by another module is fatal."""
        existing = self.get_module(module.key)
        if existing is not None and existing is not module:
            raise ConfigurationError(
                f'Two modules share the key "{module.key}": "{existing.name}" and "{module.name}"'
            )
        self.graph.add_node(module.key, module=module)
        if parent is not None:
            if not self.graph.has_node(parent.key):
                self.graph.add_node(parent.key, module=parent)
            self.graph.add_edge(parent.key, module.key, edge_type="CONTAINS")

    def get_module(self, key: str) -> ModuleDefinition | None:
        if not self.graph.has_node(key):
            return None
        return self.graph.nodes[key]["module"]

    def children(self, key: str) -> list[ModuleDefinition]:
        if not self.graph.has_node(key):
            return []
        return [self.graph.nodes[k]["module"] for k in self.graph.successors(key)]

    def roots(self) -> list[ModuleDefinition]:
        return [data["module"] for k, data in self.graph.nodes(data=True) if self.graph.in_degree(k) == 0]

    def modules(self) -> list[ModuleDefinition]:
        """All modules, parents before children, siblings in insertion order."""
        result = []
        for root in self.roots():
            result.append(root)
            for key in nx.dfs_preorder_nodes(self.graph, root.key):
                if key != root.key:
                    result.append(self.graph.nodes[key]["module"])
        return result

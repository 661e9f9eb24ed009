"""Settings store and configuration types for the bootstrapper."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

# Property keys
ENABLE = "sonar.visualstudio.enable"
SOLUTION = "sonar.visualstudio.solution"
OUTPUT_PATH = "sonar.visualstudio.outputPath"
OLD_BUILD_CONFIGURATION = "sonar.dotnet.buildConfiguration"
OLD_BUILD_PLATFORM = "sonar.dotnet.buildPlatform"
UNIT_TEST_PATTERN = "sonar.visualstudio.unitTestProjectPattern"
INTEG_TEST_PATTERN = "sonar.visualstudio.integTestProjectPattern"
TEST_PROJECT_PATTERN = "sonar.visualstudio.testProjectPattern"
OLD_SKIPPED_PROJECTS = "sonar.visualstudio.skippedProjects"
SKIPPED_PROJECT_PATTERN = "sonar.visualstudio.skippedProjectPattern"
SKIP_IF_NOT_BUILT = "sonar.visualstudio.skipIfNotBuilt"
PROJECT_KEY_STRATEGY = "sonar.visualstudio.projectKeyStrategy"
MODULES = "sonar.modules"

DEFAULTS: dict[str, str] = {
    ENABLE: "true",
    UNIT_TEST_PATTERN: "*Test;*Tests",
    SKIP_IF_NOT_BUILT: "false",
}


class Settings:
    """Read-only key to string lookup, with declared defaults."""

    def __init__(self, properties: Mapping[str, str] | None = None) -> None:
        self._properties: dict[str, str] = dict(properties or {})

    @classmethod
    def from_pairs(cls, pairs: Iterable[str]) -> Settings:
        """Build settings from ``key=value`` strings (as given on the command line)."""
        properties = {}
        for pair in pairs:
            key, sep, value = pair.partition("=")
            if not sep:
                raise ValueError(f"Expected key=value, got: {pair!r}")
            properties[key.strip()] = value.strip()
        return cls(properties)

    def has_key(self, key: str) -> bool:
        return key in self._properties

    def get_string(self, key: str) -> str | None:
        if key in self._properties:
            return self._properties[key]
        return DEFAULTS.get(key)

    def get_bool(self, key: str) -> bool:
        value = self.get_string(key)
        return value is not None and value.strip().lower() == "true"

    @property
    def properties(self) -> dict[str, str]:
        """Explicitly set properties (defaults excluded)."""
        return dict(self._properties)


@dataclass
class BootstrapConfig:
    base_dir: str = ""
    project_key: str = ""
    project_name: str = ""
    work_dir: str | None = None
    output_path: str | None = None
    properties: dict[str, str] = field(default_factory=dict)
    verbose: bool = False
    quiet: bool = False

    @property
    def settings(self) -> Settings:
        return Settings(self.properties)

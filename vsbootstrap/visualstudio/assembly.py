"""Locate the compiled assembly of a Visual Studio project."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from vsbootstrap import config
from vsbootstrap.config import Settings
from vsbootstrap.visualstudio.project import ProjectModel

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "library": "dll",
    "exe": "exe",
    "winexe": "exe",
}


@dataclass(frozen=True)
class LocatorConfig:
    """Operator overrides for the assembly search.

    ``output_paths`` switches the search to the given directories instead of
    the output paths declared in the project file. ``build_configuration``
    and ``build_platform`` are the deprecated condition filter.
    """
    output_paths: tuple[str, ...] | None = None
    build_configuration: str | None = None
    build_platform: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> LocatorConfig:
        output_paths = None
        data = settings.get_string(config.OUTPUT_PATH)
        if data is not None:
            output_paths = tuple(p.strip() for p in data.split(",") if p.strip())
        return cls(
            output_paths=output_paths,
            build_configuration=settings.get_string(config.OLD_BUILD_CONFIGURATION),
            build_platform=settings.get_string(config.OLD_BUILD_PLATFORM),
        )


def _normalise(path: str) -> str:
    return path.replace("\\", "/")


class AssemblyLocator:
    """Picks the most recently built assembly among the candidate output paths."""

    def __init__(self, locator_config: LocatorConfig | None = None) -> None:
        self.config = locator_config or LocatorConfig()

    def locate(self, project_name: str, project_file: str | Path, project: ProjectModel) -> Path | None:
        """Return the newest built assembly of ``project``, or None if there is none."""
        project_file = Path(project_file)
        logger.info("Locating the assembly for the project: %s...", project_name)
        if project.output_type is None or project.assembly_name is None:
            logger.info(
                "Unable to locate the assembly as either the output type or the assembly name is missing."
            )
            return None

        extension = self.extension(project_file, project.output_type)
        if extension is None:
            logger.error("Unable to locate the assembly of the unsupported output type: %s", project.output_type)
            return None

        assembly_file_name = f"{project.assembly_name}.{extension}"
        candidates = self.candidates(assembly_file_name, project_file, project)

        if not candidates:
            logger.warning("Unable to locate the assembly of project %s", project_file.absolute())
            return None

        # Stable sort: equal mtimes keep enumeration order
        candidates.sort(key=lambda c: c.stat().st_mtime, reverse=True)

        if len(candidates) > 1:
            logger.info("Picking the most recently generated assembly file: %s", candidates[0].absolute())

        return candidates[0]

    def extension(self, project_file: str | Path, output_type: str) -> str | None:
        """Map an ``OutputType`` value to the assembly file extension."""
        result = _EXTENSIONS.get(output_type.lower())
        if result is None:
            logger.info(
                "ProjectFile not Supported: %s : OutputType = %s : Supported[Library, Exe, WinExe]",
                project_file, output_type,
            )
        return result

    def candidates(self, assembly_file_name: str, project_file: Path, project: ProjectModel) -> list[Path]:
        """Existing assembly files, from the override paths if set, else the declared ones."""
        if self.config.output_paths is not None:
            return self._override_candidates(assembly_file_name)
        return self._declared_candidates(assembly_file_name, project_file, project)

    def _override_candidates(self, assembly_file_name: str) -> list[Path]:
        # No configuration/platform filtering in override mode
        candidates = []
        for output_path in self.config.output_paths or ():
            candidate = Path(_normalise(output_path)) / assembly_file_name
            logger.info("Trying to locate: %s", candidate.absolute())
            if candidate.is_file():
                logger.info("The following candidate assembly was found: %s", candidate.absolute())
                candidates.append(candidate)
        return candidates

    def _declared_candidates(self, assembly_file_name: str, project_file: Path, project: ProjectModel) -> list[Path]:
        project_dir = project_file.parent
        candidates = []
        for output_path, condition in project.output_path_pairs():
            candidate = Path(os.path.join(project_dir, _normalise(output_path), assembly_file_name))

            if not candidate.is_file():
                logger.info("The following candidate assembly was not built: %s", candidate.absolute())
            elif self.matches_build_configuration_and_platform(condition):
                logger.info("The following candidate assembly was found: %s", candidate.absolute())
                candidates.append(candidate)
            else:
                logger.info(
                    "The following candidate assembly was found, but rejected because it does not "
                    "match the requested build configuration and platform: %s",
                    candidate.absolute(),
                )
        return candidates

    def matches_build_configuration_and_platform(self, condition: str) -> bool:
        build_configuration = self.config.build_configuration
        build_platform = self.config.build_platform

        if build_configuration is not None and build_platform is not None:
            logger.warning(
                'The properties "%s" and "%s" are deprecated',
                config.OLD_BUILD_CONFIGURATION, config.OLD_BUILD_PLATFORM,
            )
            # Substring test only, the condition expression is never evaluated
            return build_configuration in condition and build_platform in condition

        return True

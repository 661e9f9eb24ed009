"""Turn a Visual Studio solution into one module per project."""

from __future__ import annotations

import logging
import os
import unicodedata
from pathlib import Path

from vsbootstrap import config
from vsbootstrap.config import Settings
from vsbootstrap.errors import ConfigurationError, ProjectParseError, ProjectReadError
from vsbootstrap.graph.module_tree import ModuleDefinition
from vsbootstrap.visualstudio.assembly import AssemblyLocator, LocatorConfig
from vsbootstrap.visualstudio.classifier import NamePatterns, matches_regex
from vsbootstrap.visualstudio.project import ProjectFileParser, ProjectModel
from vsbootstrap.visualstudio.solution import SolutionProjectReference, parse_solution

logger = logging.getLogger(__name__)

SUPPORTED_PROJECT_EXTENSIONS = (".csproj", ".vbproj", ".vcxproj")
WEB_APPLICATION_PROJECT_TYPE_GUID = "{349C5851-65DF-11DA-9384-00065B846F21}"


def escape_project_name(project_name: str) -> str:
    """Strip diacritics and replace characters not allowed in module keys."""
    escaped = unicodedata.normalize("NFD", project_name)
    escaped = "".join(c for c in escaped if not unicodedata.category(c).startswith("M"))
    return escaped.replace(" ", "_").replace("+", "_")


def _relative_path_file(directory: Path, relative_path: str) -> Path:
    return directory / relative_path.replace("\\", "/")


def _is_in_source_dir(file: Path, folder: Path) -> bool:
    file_path = os.path.realpath(file).replace("\\", "/")
    folder_path = os.path.realpath(folder).replace("\\", "/")
    return file_path.startswith(folder_path + "/")


class SolutionAssembler:
    """Reads the solution found under a root module and attaches project modules to it."""

    def __init__(self, settings: Settings, assembly_locator: AssemblyLocator | None = None) -> None:
        self.settings = settings
        self.assembly_locator = assembly_locator or AssemblyLocator(LocatorConfig.from_settings(settings))
        self.test_patterns = NamePatterns.from_settings(settings)
        self.project_parser = ProjectFileParser()

    def build(self, root: ModuleDefinition) -> list[ModuleDefinition]:
        """Add one sub-module to ``root`` per usable project and return them."""
        if not self.settings.get_bool(config.ENABLE):
            logger.info(
                'To enable the analysis bootstrapper for Visual Studio projects, set the property "%s" to "true"',
                config.ENABLE,
            )
            return []

        solution_file = self.solution_file(Path(root.base_dir))
        if solution_file is None:
            logger.info("No Visual Studio solution file found.")
            return []

        logger.info("Using the following Visual Studio solution: %s", solution_file.absolute())

        if self.settings.has_key(config.MODULES):
            raise ConfigurationError(
                f'Do not use the Visual Studio bootstrapper and set the "{config.MODULES}" property at the same time.'
            )

        root.reset_source_dirs()

        skipped_projects = self._skipped_projects_by_names()
        modules = []

        for solution_project in parse_solution(solution_file):
            module = self._build_project(root, solution_project, solution_file, skipped_projects)
            if module is not None:
                modules.append(module)

        if not modules:
            raise ConfigurationError("No Visual Studio projects were found.")
        return modules

    def _build_project(
        self,
        root: ModuleDefinition,
        solution_project: SolutionProjectReference,
        solution_file: Path,
        skipped_projects: set[str],
    ) -> ModuleDefinition | None:
        name = solution_project.name

        if not solution_project.relative_path.lower().endswith(SUPPORTED_PROJECT_EXTENSIONS):
            _log_skipped(name, f"because its project type is unsupported: {solution_project.path}")
            return None
        if name in skipped_projects:
            _log_skipped(name, f'because it is listed in the property "{config.OLD_SKIPPED_PROJECTS}".')
            return None
        if matches_regex(self.settings, config.SKIPPED_PROJECT_PATTERN, name):
            _log_skipped(name, f'because it matches the property "{config.SKIPPED_PROJECT_PATTERN}".')
            return None

        project_file = _relative_path_file(solution_file.parent, solution_project.path)
        if not project_file.is_file():
            logger.warning("Unable to find the Visual Studio project file %s", project_file.absolute())
            return None

        try:
            project = self.project_parser.parse(project_file)
        except (ProjectParseError, ProjectReadError) as e:
            logger.error("Skipping the project \"%s\": %s", name, e)
            return None

        assembly = self.assembly_locator.locate(name, project_file, project)
        if assembly is None and self.settings.get_bool(config.SKIP_IF_NOT_BUILT):
            _log_skipped(name, f'because it is not built and "{config.SKIP_IF_NOT_BUILT}" is set.')
            return None

        project = project.assess_test_project(self.test_patterns.unit, self.test_patterns.integ)
        return self.build_module(root, name, project_file, project, assembly, solution_file)

    def build_module(
        self,
        root: ModuleDefinition,
        project_name: str,
        project_file: Path,
        project: ProjectModel,
        assembly: Path | None,
        solution_file: Path,
    ) -> ModuleDefinition:
        escaped_name = escape_project_name(project_name)
        project_dir = project_file.parent

        module = ModuleDefinition.create(
            key=f"{self._project_key(root.key)}:{escaped_name}",
            name=project_name,
        )
        root.add_sub_project(module)

        module.set_base_dir(project_dir)
        module.set_work_dir(Path(root.work_dir) / f"{root.key.replace(':', '_')}_{escaped_name}")

        is_test = project.is_test or matches_regex(self.settings, config.TEST_PROJECT_PATTERN, project_name)
        logger.info(
            "Adding the Visual Studio %sproject: %s... %s",
            "test " if is_test else "", project_name, project_file.absolute(),
        )

        if is_test:
            module.set_test_dirs(project_dir)
        else:
            module.set_source_dirs(project_dir)

        for file_path in project.files:
            file = _relative_path_file(project_dir, file_path)
            if not file.is_file():
                logger.warning("Cannot find the file %s of project %s", file.absolute(), project_name)
            elif not _is_in_source_dir(file, project_dir):
                logger.warning(
                    "Skipping the file %s of project %s located outside of the source directory.",
                    file.absolute(), project_name,
                )
            elif is_test:
                module.add_test_files(file.absolute())
            else:
                module.add_source_files(file.absolute())

        self._forward_module_properties(module)
        self._set_fxcop_properties(module, project, assembly)
        module.set_property("sonar.resharper.solutionFile", str(solution_file.absolute()))
        module.set_property("sonar.resharper.projectName", project_name)
        module.set_property("sonar.stylecop.projectFilePath", str(project_file.absolute()))
        return module

    def solution_file(self, base_dir: Path) -> Path | None:
        """Explicitly configured solution, or the single .sln in ``base_dir``."""
        solution_path = self.settings.get_string(config.SOLUTION)
        if solution_path:
            return base_dir / solution_path

        solution_files = sorted(p for p in base_dir.glob("*.sln") if p.is_file())
        if not solution_files:
            return None
        if len(solution_files) > 1:
            raise ConfigurationError(
                f"Found several .sln files in {base_dir.absolute()}. "
                f'Please set "{config.SOLUTION}" to explicitly tell which one to use.'
            )
        return solution_files[0]

    def _forward_module_properties(self, module: ModuleDefinition) -> None:
        prefix = module.name + "."
        for key, value in self.settings.properties.items():
            if key.startswith(prefix):
                module.set_property(key[len(prefix):], value)

    def _set_fxcop_properties(self, module: ModuleDefinition, project: ProjectModel, assembly: Path | None) -> None:
        if assembly is None:
            return
        if _is_web_application(project):
            module.set_property("sonar.cs.fxcop.aspnet", "true")
        module.set_property("sonar.cs.fxcop.assembly", str(assembly.absolute()))
        module.set_property("sonar.vbnet.fxcop.assembly", str(assembly.absolute()))

    def _project_key(self, project_key: str) -> str:
        if self.settings.get_string(config.PROJECT_KEY_STRATEGY) != "unsafe":
            return project_key

        unsafe_key, sep, _ = project_key.partition(":")
        if not sep:
            logger.warning(
                'Unset the deprecated unnecessary property "%s" used to analyze this project. '
                "This property support will soon be removed, and unsetting it will *NOT* affect this particular project.",
                config.PROJECT_KEY_STRATEGY,
            )
            return project_key

        logger.warning(
            'Unset the deprecated unnecessary property "%s" used to analyze this project. '
            'You will need to update the project key from the unsafe "%s" value to "%s".',
            config.PROJECT_KEY_STRATEGY, unsafe_key, project_key,
        )
        return unsafe_key

    def _skipped_projects_by_names(self) -> set[str]:
        skipped_projects = self.settings.get_string(config.OLD_SKIPPED_PROJECTS)
        if skipped_projects is None:
            return set()

        logger.warning(
            'Replace the deprecated property "%s" by the new "%s".',
            config.OLD_SKIPPED_PROJECTS, config.SKIPPED_PROJECT_PATTERN,
        )
        return {name for name in skipped_projects.split(",") if name}


def _is_web_application(project: ProjectModel) -> bool:
    return (
        project.project_type_guids is not None
        and WEB_APPLICATION_PROJECT_TYPE_GUID in project.project_type_guids.upper()
    )


def _log_skipped(project_name: str, reason: str) -> None:
    logger.info('Skipping the project "%s" %s', project_name, reason)

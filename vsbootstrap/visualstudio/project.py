"""Parse .csproj/.vbproj/.vcxproj files (XML with MSBuild schema).

Only a handful of fields are extracted, in a single forward pass over the
document. Legacy managed projects and C++ projects nest the same logical
fields differently, so every element is interpreted through the
``(enclosing group, tag)`` table ``SIGNALS`` below.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path

from vsbootstrap.errors import ProjectParseError, ProjectReadError
from vsbootstrap.visualstudio.classifier import classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectModel:
    """Facts extracted from a single project file."""
    files: tuple[str, ...] = ()
    output_type: str | None = None
    assembly_name: str | None = None
    property_group_conditions: tuple[str, ...] = ()
    output_paths: tuple[str, ...] = ()
    project_type_guids: str | None = None
    is_unit_test: bool = False
    is_integ_test: bool = False

    def __post_init__(self) -> None:
        for name in ("files", "property_group_conditions", "output_paths"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        if len(self.property_group_conditions) != len(self.output_paths):
            raise ValueError(
                "Each output path needs exactly one property group condition: "
                f"{len(self.output_paths)} paths, {len(self.property_group_conditions)} conditions"
            )

    @property
    def is_test(self) -> bool:
        return self.is_unit_test or self.is_integ_test

    def output_path_pairs(self) -> Iterator[tuple[str, str]]:
        """Yield ``(output_path, condition)`` in declaration order."""
        return zip(self.output_paths, self.property_group_conditions)

    def with_test_flags(self, unit_test: bool, integ_test: bool) -> ProjectModel:
        return replace(self, is_unit_test=unit_test, is_integ_test=integ_test)

    def assess_test_project(self, unit_patterns: str | None, integ_patterns: str | None) -> ProjectModel:
        """Return a copy classified against ``;``-separated wildcard patterns."""
        result = classify(self.assembly_name, unit_patterns, integ_patterns)
        return self.with_test_flags(result.is_unit_test, result.is_integ_test)


class Group(str, Enum):
    PROPERTY_GROUP = "PropertyGroup"
    ITEM_GROUP = "ItemGroup"


class Signal(str, Enum):
    ENTER_PROPERTY_GROUP = "enter_property_group"
    ENTER_ITEM_GROUP = "enter_item_group"
    SOURCE_FILE = "source_file"
    OUTPUT_TYPE = "output_type"
    ASSEMBLY_NAME = "assembly_name"
    OUTPUT_PATH = "output_path"
    PROJECT_TYPE_GUIDS = "project_type_guids"


# (enclosing group, local tag name) -> signal. A ``None`` group applies in
# any context; group-specific entries take precedence.
SIGNALS: dict[tuple[Group | None, str], Signal] = {
    (None, "PropertyGroup"): Signal.ENTER_PROPERTY_GROUP,
    (None, "ItemGroup"): Signal.ENTER_ITEM_GROUP,
    (None, "OutputType"): Signal.OUTPUT_TYPE,
    (Group.ITEM_GROUP, "Compile"): Signal.SOURCE_FILE,
    (Group.ITEM_GROUP, "ClCompile"): Signal.SOURCE_FILE,
    (Group.ITEM_GROUP, "ClInclude"): Signal.SOURCE_FILE,
    (Group.ITEM_GROUP, "Page"): Signal.SOURCE_FILE,
    # AssemblyName: C#/VB, ProjectName: C++
    (Group.PROPERTY_GROUP, "AssemblyName"): Signal.ASSEMBLY_NAME,
    (Group.PROPERTY_GROUP, "ProjectName"): Signal.ASSEMBLY_NAME,
    # OutputPath: C#/VB, ConfigurationType: C++
    (Group.PROPERTY_GROUP, "OutputPath"): Signal.OUTPUT_PATH,
    (Group.PROPERTY_GROUP, "ConfigurationType"): Signal.OUTPUT_PATH,
    (Group.PROPERTY_GROUP, "ProjectTypeGuids"): Signal.PROJECT_TYPE_GUIDS,
}

_INCLUDE_ATTRIBUTE = "Include"
_CONDITION_ATTRIBUTE = "Condition"


@dataclass(frozen=True)
class ScanState:
    """Enclosing group and the condition of the last opened PropertyGroup."""
    group: Group | None = None
    condition: str = ""


def lookup_signal(state: ScanState, tag: str) -> Signal | None:
    signal = SIGNALS.get((state.group, tag))
    if signal is None:
        signal = SIGNALS.get((None, tag))
    return signal


def _local_name(name: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on tags and attributes."""
    if name.startswith("{"):
        return name.split("}", 1)[1]
    return name


def _attribute(elem: ET.Element, name: str) -> str | None:
    for key, value in elem.attrib.items():
        if _local_name(key) == name:
            return value
    return None


@dataclass
class _ModelBuilder:
    files: list[str] = field(default_factory=list)
    output_type: str | None = None
    assembly_name: str | None = None
    property_group_conditions: list[str] = field(default_factory=list)
    output_paths: list[str] = field(default_factory=list)
    project_type_guids: str | None = None

    def build(self) -> ProjectModel:
        return ProjectModel(
            files=tuple(self.files),
            output_type=self.output_type,
            assembly_name=self.assembly_name,
            property_group_conditions=tuple(self.property_group_conditions),
            output_paths=tuple(self.output_paths),
            project_type_guids=self.project_type_guids,
        )


class ProjectFileParser:
    """Streaming reader turning one project file into a ``ProjectModel``."""

    def parse(self, path: str | Path) -> ProjectModel:
        path = Path(path)
        logger.debug("Parsing project file %s", path)

        builder = _ModelBuilder()
        state = ScanState()
        parser = ET.XMLPullParser(events=("start", "end"))
        line_no = 0

        try:
            with open(path, "rb") as f:
                # Fed line by line so start tags can be located for errors
                for line_no, line in enumerate(f, start=1):
                    parser.feed(line)
                    state = self._drain(parser, state, builder, path, line_no)
            parser.close()
            self._drain(parser, state, builder, path, line_no)
        except OSError as e:
            raise ProjectReadError(path) from e
        except ET.ParseError as e:
            line = e.position[0] if getattr(e, "position", None) else line_no
            raise ProjectParseError(f"Malformed project file ({e})", path, line) from e

        return builder.build()

    def _drain(
        self,
        parser: ET.XMLPullParser,
        state: ScanState,
        builder: _ModelBuilder,
        path: Path,
        line_no: int,
    ) -> ScanState:
        for event, elem in parser.read_events():
            if event == "start":
                state = handle_start(state, elem, builder, path, line_no)
            else:
                handle_end(state, elem, builder)
                elem.clear()
        return state


def handle_start(
    state: ScanState,
    elem: ET.Element,
    builder: _ModelBuilder,
    path: str | Path = "<string>",
    line_no: int | None = None,
) -> ScanState:
    """Apply a start tag and return the resulting scan state."""
    tag = _local_name(elem.tag)
    signal = lookup_signal(state, tag)

    if signal is Signal.ENTER_PROPERTY_GROUP:
        condition = _attribute(elem, _CONDITION_ATTRIBUTE) or ""
        if condition:
            logger.debug("PropertyGroup condition = %s", condition)
        return ScanState(group=Group.PROPERTY_GROUP, condition=condition)

    if signal is Signal.ENTER_ITEM_GROUP:
        return replace(state, group=Group.ITEM_GROUP)

    if signal is Signal.SOURCE_FILE:
        include = _attribute(elem, _INCLUDE_ATTRIBUTE)
        if include is None:
            raise ProjectParseError(
                f'Missing attribute "{_INCLUDE_ATTRIBUTE}" in element <{tag}>', path, line_no,
            )
        builder.files.append(include)

    return state


def handle_end(state: ScanState, elem: ET.Element, builder: _ModelBuilder) -> None:
    """Record the text content of elements that carry a value."""
    signal = lookup_signal(state, _local_name(elem.tag))
    if signal is None:
        return
    text = (elem.text or "").strip()

    if signal is Signal.OUTPUT_TYPE:
        builder.output_type = text
    elif signal is Signal.ASSEMBLY_NAME:
        builder.assembly_name = text
        logger.debug("Assembly name = %s", text)
    elif signal is Signal.OUTPUT_PATH:
        builder.property_group_conditions.append(state.condition)
        builder.output_paths.append(text)
    elif signal is Signal.PROJECT_TYPE_GUIDS:
        builder.project_type_guids = text


def parse_project(project_path: str | Path) -> ProjectModel:
    """Parse a project file and return its ``ProjectModel``."""
    return ProjectFileParser().parse(project_path)

"""Tests for the project file parser."""

from __future__ import annotations

import os
import xml.etree.ElementTree as ET

import pytest

from vsbootstrap.errors import ProjectParseError, ProjectReadError
from vsbootstrap.visualstudio.project import (
    Group,
    ProjectFileParser,
    ProjectModel,
    ScanState,
    Signal,
    _ModelBuilder,
    handle_end,
    handle_start,
    lookup_signal,
    parse_project,
)

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures", "solution")
PROJECTS_DIR = os.path.join(FIXTURES_DIR, "projects")
EXAMPLE_DIR = os.path.join(FIXTURES_DIR, "Example")
CORE_PROJECT = os.path.join(EXAMPLE_DIR, "Example.Core", "Example.Core.vcxproj")


class TestProjectModel:
    def test_defaults(self):
        project = ProjectModel()
        assert project.files == ()
        assert project.output_type is None
        assert project.assembly_name is None
        assert not project.is_test

    def test_lists_are_frozen_to_tuples(self):
        project = ProjectModel(files=["a.cs"], property_group_conditions=[""], output_paths=["bin"])
        assert project.files == ("a.cs",)
        assert project.output_paths == ("bin",)

    def test_mismatched_pairs_rejected(self):
        with pytest.raises(ValueError):
            ProjectModel(property_group_conditions=["a", "b"], output_paths=["bin"])

    def test_with_test_flags_returns_copy(self):
        project = ProjectModel(assembly_name="Foo")
        flagged = project.with_test_flags(True, False)
        assert flagged.is_unit_test and flagged.is_test
        assert not project.is_test

    def test_assess_test_project(self):
        unit = "*Test"
        integ = "*.IT"
        assert ProjectModel(assembly_name="MyProjectTest").assess_test_project(unit, integ).is_unit_test
        assert ProjectModel(assembly_name="MyProject.IT").assess_test_project(unit, integ).is_integ_test
        assert not ProjectModel(assembly_name="MyProject").assess_test_project(unit, integ).is_test


class TestSignalTable:
    def test_group_scoped_lookup(self):
        in_items = ScanState(group=Group.ITEM_GROUP)
        in_props = ScanState(group=Group.PROPERTY_GROUP)

        assert lookup_signal(in_items, "Compile") is Signal.SOURCE_FILE
        assert lookup_signal(in_props, "Compile") is None
        assert lookup_signal(in_props, "AssemblyName") is Signal.ASSEMBLY_NAME
        assert lookup_signal(in_items, "AssemblyName") is None
        assert lookup_signal(ScanState(), "OutputPath") is None

    def test_group_independent_lookup(self):
        for state in (ScanState(), ScanState(group=Group.ITEM_GROUP), ScanState(group=Group.PROPERTY_GROUP)):
            assert lookup_signal(state, "OutputType") is Signal.OUTPUT_TYPE
            assert lookup_signal(state, "PropertyGroup") is Signal.ENTER_PROPERTY_GROUP
            assert lookup_signal(state, "ItemGroup") is Signal.ENTER_ITEM_GROUP

    def test_handlers_thread_state(self):
        builder = _ModelBuilder()
        state = handle_start(ScanState(), ET.Element("PropertyGroup", Condition="'Debug|x86'"), builder)
        assert state == ScanState(group=Group.PROPERTY_GROUP, condition="'Debug|x86'")

        output_path = ET.Element("OutputPath")
        output_path.text = "bin\\Debug\\"
        handle_end(state, output_path, builder)

        state = handle_start(state, ET.Element("ItemGroup"), builder)
        assert state.group is Group.ITEM_GROUP
        assert state.condition == "'Debug|x86'"
        handle_start(state, ET.Element("Compile", Include="A.cs"), builder)

        project = builder.build()
        assert project.files == ("A.cs",)
        assert project.output_paths == ("bin\\Debug\\",)
        assert project.property_group_conditions == ("'Debug|x86'",)

    def test_missing_include_in_fragment(self):
        with pytest.raises(ProjectParseError) as exc_info:
            handle_start(ScanState(group=Group.ITEM_GROUP), ET.Element("ClCompile"), _ModelBuilder(), "frag.vcxproj", 3)
        assert exc_info.value.line == 3


class TestProjectFileParser:
    def test_read_cpp_files(self):
        project = ProjectFileParser().parse(CORE_PROJECT)
        assert len(project.files) == 7
        assert project.files[:2] == ("Money.h", "MoneyBag.h")
        assert project.files[-1] == "stdafx.cpp"

    def test_cpp_project_name_and_configuration_types(self):
        project = parse_project(CORE_PROJECT)
        assert project.assembly_name == "Example.Core"
        assert project.output_type is None
        assert project.output_paths == ("StaticLibrary", "StaticLibrary")
        assert project.property_group_conditions == (
            "'$(Configuration)|$(Platform)'=='Debug|Win32'",
            "'$(Configuration)|$(Platform)'=='Release|Win32'",
        )

    def test_legacy_project_fields(self):
        project = parse_project(os.path.join(PROJECTS_DIR, "Legacy.csproj"))
        assert project.output_type == "Library"
        assert project.assembly_name == "Calculator"
        assert project.output_paths == ("bin\\Shared\\", "bin\\x86\\Debug\\", "bin\\x86\\Release\\")
        assert project.property_group_conditions == (
            "",
            " '$(Configuration)|$(Platform)' == 'Debug|x86' ",
            " '$(Configuration)|$(Platform)' == 'Release|x86' ",
        )

    def test_duplicate_files_kept_in_document_order(self):
        project = parse_project(os.path.join(PROJECTS_DIR, "Legacy.csproj"))
        assert project.files == ("Calculator.cs", "Operations\\Add.cs", "Calculator.cs")

    def test_same_file_list_across_schemas(self):
        legacy = parse_project(os.path.join(PROJECTS_DIR, "Legacy.csproj"))
        native = parse_project(os.path.join(PROJECTS_DIR, "Native.vcxproj"))
        assert legacy.files == native.files
        assert legacy.assembly_name == native.assembly_name

    def test_item_definition_group_is_not_a_source(self):
        native = parse_project(os.path.join(PROJECTS_DIR, "Native.vcxproj"))
        assert len(native.files) == 3

    def test_without_namespace_and_last_output_type_wins(self):
        project = parse_project(os.path.join(PROJECTS_DIR, "NoNamespace.csproj"))
        assert project.output_type == "Exe"
        assert project.assembly_name == "Plain"
        assert project.files == ("Main.cs",)
        assert project.output_paths == ()

    def test_no_item_groups(self):
        project = parse_project(os.path.join(PROJECTS_DIR, "NoItemGroups.csproj"))
        assert project.files == ()
        assert project.output_type is None
        assert project.assembly_name is None

    def test_context_disambiguates_elements(self):
        project = parse_project(os.path.join(PROJECTS_DIR, "CompileOutsideItemGroup.csproj"))
        assert project.files == ("Kept.cs",)
        assert project.assembly_name is None
        assert project.output_paths == ()

    def test_project_type_guids(self):
        project = parse_project(os.path.join(EXAMPLE_DIR, "Example.Core.Tests", "Example.Core.Tests.csproj"))
        assert project.project_type_guids.startswith("{3AC096D0")
        assert len(project.files) == 4

    def test_conditions_and_paths_pair_up(self):
        for name in ("Legacy.csproj", "Native.vcxproj", "NoNamespace.csproj", "CompileOutsideItemGroup.csproj"):
            project = parse_project(os.path.join(PROJECTS_DIR, name))
            assert len(project.property_group_conditions) == len(project.output_paths)

    def test_parse_is_idempotent(self):
        path = os.path.join(PROJECTS_DIR, "Legacy.csproj")
        first = parse_project(path)
        second = parse_project(path)
        assert list(first.output_path_pairs()) == list(second.output_path_pairs())
        assert first == second

    def test_missing_include_attribute(self):
        path = os.path.join(PROJECTS_DIR, "MissingInclude.csproj")
        with pytest.raises(ProjectParseError) as exc_info:
            parse_project(path)

        error = exc_info.value
        assert error.line == 5
        assert error.path == path
        assert 'Missing attribute "Include" in element <Compile>' in str(error)
        assert "MissingInclude.csproj at line 5" in str(error)

    def test_malformed_markup(self):
        path = os.path.join(PROJECTS_DIR, "Malformed.csproj")
        with pytest.raises(ProjectParseError) as exc_info:
            parse_project(path)
        assert exc_info.value.line == 5
        assert isinstance(exc_info.value.__cause__, ET.ParseError)

    def test_empty_file_is_malformed(self, tmp_path):
        path = tmp_path / "Empty.csproj"
        path.write_text("")
        with pytest.raises(ProjectParseError):
            parse_project(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProjectReadError) as exc_info:
            parse_project(tmp_path / "Nope.csproj")
        assert isinstance(exc_info.value.__cause__, OSError)

"""Tests for the solution file parser."""

from __future__ import annotations

import logging
import os

import pytest

from vsbootstrap.errors import SolutionReadError
from vsbootstrap.visualstudio.project import parse_project
from vsbootstrap.visualstudio.solution import SolutionProjectReference, parse_solution

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures", "solution")


class TestSolutionParser:
    def test_parse_sln(self):
        projects = parse_solution(os.path.join(FIXTURES_DIR, "Example", "Example.sln"))

        assert [p.name for p in projects] == [
            "Example.Application",
            "Example.Core",
            "Example.Core.Tests",
            "Example.Web",
        ]

    def test_declaration_fields(self):
        projects = parse_solution(os.path.join(FIXTURES_DIR, "Example", "Example.sln"))
        core = projects[1]

        assert core.type_guid == "8BC9CEB8-8B4A-11D0-8D11-00A0C91BC942"
        assert core.project_guid == "1C2D3E4F-5A6B-4C7D-8E9F-0A1B2C3D4E03"
        assert core.path == "Example.Core\\Example.Core.vcxproj"
        assert core.relative_path == "Example.Core/Example.Core.vcxproj"

    def test_read_project_by_position(self):
        solution_dir = os.path.join(FIXTURES_DIR, "Example")
        project = parse_solution(os.path.join(solution_dir, "Example.sln"))[2]
        model = parse_project(os.path.join(solution_dir, project.relative_path))

        assert project.name == "Example.Core.Tests"
        assert len(model.files) == 4

    def test_skips_unparsable_lines(self, tmp_path, caplog):
        sln = tmp_path / "Odd.sln"
        sln.write_text(
            'Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "Only name"\n'
            "EndProject\n"
            'Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "Good", "Good\\Good.csproj", "{AAAAAAAA-0000-0000-0000-000000000001}"\n'
            "EndProject\n"
        )
        with caplog.at_level(logging.DEBUG):
            projects = parse_solution(sln)

        assert projects == [SolutionProjectReference(
            type_guid="FAE04EC0-301F-11D3-BF4B-00C04F79EFBC",
            name="Good",
            path="Good\\Good.csproj",
            project_guid="AAAAAAAA-0000-0000-0000-000000000001",
        )]
        assert "line 1" in caplog.text

    def test_custom_build_solution(self):
        solution_dir = os.path.join(FIXTURES_DIR, "CustomBuild")
        projects = parse_solution(os.path.join(solution_dir, "CustomBuild.sln"))
        assert len(projects) == 1

        model = parse_project(os.path.join(solution_dir, projects[0].relative_path))
        assert len(model.property_group_conditions) == 3
        assert "'$(Configuration)|$(Platform)'=='Debug|Win32'" in model.property_group_conditions
        assert "'$(Configuration)|$(Platform)'=='Release|Win32'" in model.property_group_conditions
        assert "'$(Configuration)|$(Platform)'=='CustomCompil|Win32'" in model.property_group_conditions

    def test_duplicate_assembly_names(self):
        solution_dir = os.path.join(FIXTURES_DIR, "DuplicatesExample")
        projects = parse_solution(os.path.join(solution_dir, "Example.sln"))
        assert len(projects) == 2

        first = parse_project(os.path.join(solution_dir, projects[0].relative_path))
        second = parse_project(os.path.join(solution_dir, projects[1].relative_path))

        assert first.assembly_name == second.assembly_name == "Shared.Assembly"
        assert first is not second
        assert first.files != second.files

    def test_empty_solution(self, tmp_path):
        sln = tmp_path / "Empty.sln"
        sln.write_text("Microsoft Visual Studio Solution File, Format Version 12.00\n")
        assert parse_solution(sln) == []

    def test_parse_nonexistent_sln(self):
        with pytest.raises(SolutionReadError) as exc_info:
            parse_solution("/nonexistent/path.sln")
        assert isinstance(exc_info.value.__cause__, OSError)

"""Parse .sln files (custom text format, not XML)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from vsbootstrap.errors import SolutionReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolutionProjectReference:
    """A project entry from a .sln file."""
    type_guid: str
    name: str
    path: str
    project_guid: str

    @property
    def relative_path(self) -> str:
        """Project file path relative to the solution directory, with ``/`` separators."""
        return self.path.replace("\\", "/")


# Project("{TYPE-GUID}") = "Name", "Path\To\Project.csproj", "{PROJECT-GUID}"
_PROJECT_RE = re.compile(
    r'^Project\(\"\{([^}]+)\}\"\)\s*=\s*\"([^\"]+)\"\s*,\s*\"([^\"]+)\"\s*,\s*\"\{([^}]+)\}\"'
)

SOLUTION_FOLDER_GUID = "2150E333-8FDC-42A3-9474-1A3956D46DE8"


def parse_solution(sln_path: str | Path) -> list[SolutionProjectReference]:
    """Parse a .sln file and return its project entries in declaration order.

    Solution folders and unparsable ``Project(`` lines are skipped.
    """
    try:
        with open(sln_path, "r", encoding="utf-8-sig") as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        raise SolutionReadError(sln_path) from e

    projects = []
    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line.startswith("Project("):
            continue

        match = _PROJECT_RE.match(line)
        if match is None:
            logger.debug("Skipping unparsable project declaration at line %d of %s", line_no, sln_path)
            continue

        type_guid = match.group(1).upper()
        if type_guid == SOLUTION_FOLDER_GUID:
            continue

        projects.append(SolutionProjectReference(
            type_guid=type_guid,
            name=match.group(2),
            path=match.group(3),
            project_guid=match.group(4).upper(),
        ))

    return projects

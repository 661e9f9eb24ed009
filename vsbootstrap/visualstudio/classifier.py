"""Classify projects as unit or integration tests by name patterns."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import NamedTuple

from vsbootstrap import config
from vsbootstrap.config import Settings
from vsbootstrap.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Classification(NamedTuple):
    """Unit and integration test flags derived from an assembly name."""
    is_unit_test: bool
    is_integ_test: bool

    @property
    def is_test(self) -> bool:
        return self.is_unit_test or self.is_integ_test


@dataclass(frozen=True)
class NamePatterns:
    """Semicolon-separated wildcard patterns matched against assembly names."""

    unit: str | None = None
    integ: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> NamePatterns:
        return cls(
            unit=settings.get_string(config.UNIT_TEST_PATTERN),
            integ=settings.get_string(config.INTEG_TEST_PATTERN),
        )


def name_matches_patterns(name: str | None, patterns: str | None) -> bool:
    """True if ``name`` matches one of the ``;``-separated shell wildcards."""
    if not patterns or name is None:
        return False
    for pattern in patterns.split(";"):
        pattern = pattern.strip()
        if pattern and fnmatchcase(name, pattern):
            return True
    return False


def classify(
    assembly_name: str | None,
    unit_patterns: str | None,
    integ_patterns: str | None,
) -> Classification:
    """Match ``assembly_name`` against the unit and integration test patterns."""
    return Classification(
        is_unit_test=name_matches_patterns(assembly_name, unit_patterns),
        is_integ_test=name_matches_patterns(assembly_name, integ_patterns),
    )


def matches_regex(settings: Settings, property_key: str, value: str) -> bool:
    """Full-match ``value`` against the regular expression stored under ``property_key``."""
    pattern = settings.get_string(property_key)
    if pattern is None:
        return False
    try:
        return re.fullmatch(pattern, value) is not None
    except re.error as e:
        logger.error(
            'The syntax of the regular expression of the "%s" property is invalid: %s',
            property_key, pattern,
        )
        raise ConfigurationError(f"Invalid regular expression in {property_key}: {pattern}") from e

"""Pytest fixtures for census-query tests."""

import ast
import re
from pathlib import Path

import pytest


# =============================================================================
# Import enforcement: functional tests should only use the public API
# =============================================================================

# Allowed import patterns for census_query in tests/functional
# - "census_query" (the public API)
# - "census_query.cli" or "census_query.cli.commands" (CLI testing is allowed)
ALLOWED_IMPORT_PATTERNS = [
    r"^census_query$",  # Public API root
    r"^census_query\.cli(\..+)?$",  # CLI module and submodules
]


def _is_allowed_import(module_name: str) -> bool:
    """Check if a census_query import is allowed."""
    if not module_name.startswith("census_query"):
        return True  # Not a census_query import, always allowed
    return any(re.match(pattern, module_name) for pattern in ALLOWED_IMPORT_PATTERNS)


def _check_file_imports(filepath: Path) -> list[str]:
    """Check a test file for disallowed internal imports.

    Returns list of error messages for any violations found.
    """
    try:
        content = filepath.read_text()
        tree = ast.parse(content)
    except (SyntaxError, UnicodeDecodeError):
        return []  # Skip files that can't be parsed

    errors = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if not _is_allowed_import(alias.name):
                    errors.append(
                        f"{filepath}:{node.lineno}: "
                        f"Internal import not allowed: 'import {alias.name}'. "
                        f"Use 'from census_query import ...' instead."
                    )
        elif isinstance(node, ast.ImportFrom):
            if node.module and not _is_allowed_import(node.module):
                names = ", ".join(a.name for a in node.names)
                errors.append(
                    f"{filepath}:{node.lineno}: "
                    f"Internal import not allowed: 'from {node.module} import {names}'. "
                    f"Use 'from census_query import ...' instead."
                )
    return errors


def pytest_collect_file(parent, file_path):
    """Check functional test files for internal imports during collection."""
    if (
        file_path.suffix == ".py"
        and file_path.name.startswith("test_")
        and "functional" in file_path.parts
    ):
        errors = _check_file_imports(file_path)
        if errors:
            # Raise an error during collection to fail fast
            error_msg = "\n".join(errors)
            pytest.fail(
                f"\n\nInternal import violations detected:\n{error_msg}\n\n"
                "Functional tests should only import from the public API:\n"
                "  - from census_query import CensusClient, Query, ...\n"
                "  - from census_query.cli.commands import cli  (for CLI tests)\n"
            )


@pytest.fixture
def state_payload():
    """API response with one data column and a state geography column."""
    return [
        ["B00001_001E", "state"],
        ["372109", "01"],
        ["72384", "02"],
    ]


@pytest.fixture
def county_payload():
    """API response for counties in California."""
    return [
        ["NAME", "B01001_001E", "state", "county"],
        ["Alameda County, California", "1656754", "06", "001"],
        ["Alpine County, California", "1117", "06", "003"],
        ["Amador County, California", "39023", "06", "005"],
    ]


@pytest.fixture
def county_income_payload():
    """Second chunk for the same counties as county_payload."""
    return [
        ["B19013_001E", "B19301_001E", "state", "county"],
        ["99406", "50097", "06", "001"],
        ["63648", "42805", "06", "003"],
        ["62772", "35004", "06", "005"],
    ]


@pytest.fixture
def key_file(tmp_path):
    """Path for an isolated installed-key file."""
    return tmp_path / "census-query" / "installed_key"

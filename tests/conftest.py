"""Shared test fixtures for postmangen.

Provides fixtures for isolating configuration, managing output state,
building generators and running CLI commands. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from postmangen import PostmanGen
from postmangen.output import reset_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_DATA_HOME into tmp_path, clears all POSTMANGEN_*
    environment variables and changes the working directory to tmp_path so
    no project config file is picked up by accident.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in [
        "POSTMANGEN_NAME",
        "POSTMANGEN_DESCRIPTION",
        "POSTMANGEN_BASE_URL",
        "POSTMANGEN_TOKEN",
        "POSTMANGEN_SCHEMA",
        "POSTMANGEN_OUTPUT",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Generator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def generator() -> PostmanGen:
    """An empty generator with the usual base_url and token variables."""
    gen = PostmanGen("Test API", "Generated in tests")
    gen.add_variable("base_url", "http://localhost:8080/api/v1")
    gen.add_variable("token", "YOUR_INITIAL_JWT_TOKEN")
    return gen


@pytest.fixture
def routes_file(isolated_config: Path) -> Path:
    """Copy the sample route module into the isolated working directory."""
    target = isolated_config / "routes.py"
    target.write_text((FIXTURES_DIR / "routes.py").read_text(encoding="utf-8"), encoding="utf-8")
    return target


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()

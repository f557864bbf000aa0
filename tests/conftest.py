"""Shared test fixtures for specdesk.

Provides the sample document (raw and compiled), isolated config
directories, output managers and the CLI runner.  Fixtures are discovered
by pytest and available to every test module.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from specdesk.models import Catalog, ParsedOperation
from specdesk.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"
SAMPLE_DOCUMENT = FIXTURES_DIR / "tikhub_sample.json"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The manager keeps references to sys.stdout/sys.stderr from creation
    time; CliRunner swaps those streams, so a manager left over from one
    test would write to closed files in the next.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_raw() -> dict[str, Any]:
    """The raw sample document."""
    with open(SAMPLE_DOCUMENT, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def sample_catalog(sample_raw: dict[str, Any]) -> Catalog:
    """The sample document compiled with the default app table."""
    from specdesk.parser import build_catalog

    return build_catalog(sample_raw)


@pytest.fixture
def profile_op(sample_catalog: Catalog) -> ParsedOperation:
    """GET /api/v1/tiktok/web/fetch_user_profile (auth, query/header/cookie params)."""
    op = sample_catalog.get("fetch_user_profile")
    assert op is not None
    return op


@pytest.fixture
def video_op(sample_catalog: Catalog) -> ParsedOperation:
    """GET /api/v1/douyin/app/fetch_video/{aweme_id} (path param, no auth)."""
    op = sample_catalog.get("fetch_video")
    assert op is not None
    return op


@pytest.fixture
def note_op(sample_catalog: Catalog) -> ParsedOperation:
    """POST /api/v1/tikhub/user/notes (auth, JSON body)."""
    op = sample_catalog.get("create_note")
    assert op is not None
    return op


@pytest.fixture
def echo_op(sample_catalog: Catalog) -> ParsedOperation:
    """POST /api/v1/demo/echo (text/plain body)."""
    op = sample_catalog.get("fetch_user_profile_2")
    assert op is not None
    return op


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG variables at subdirectories of tmp_path, forces the XDG
    layout on every platform, clears the SPECDESK_* variables and changes the
    working directory to tmp_path.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("specdesk.config._is_xdg_platform", lambda: True)

    for var in [
        "SPECDESK_DOCUMENT",
        "SPECDESK_BASE_URL",
        "SPECDESK_RELAY_URL",
        "SPECDESK_API_KEY",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """A quiet PLAIN output manager installed globally."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()

"""Exit code contract tests: enforce stable CLI exit semantics.

Code  Meaning
----  -------
  0   Success
  1   Violation: the checked data is invalid
  2   Error: usage error, missing file, runtime failure
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from lms_plugins.utils.exit_codes import ExitCode

REPO_ROOT = Path(__file__).resolve().parents[1]


def _run(*args: str) -> subprocess.CompletedProcess[str]:
    env = {**os.environ}
    env["PYTHONPATH"] = str(REPO_ROOT / "src") + (
        os.pathsep + env["PYTHONPATH"] if env.get("PYTHONPATH") else ""
    )
    return subprocess.run(
        [sys.executable, "-m", "lms_plugins", *args],
        capture_output=True,
        text=True,
        env=env,
    )


def test_exit_code_values_are_frozen() -> None:
    assert [int(c) for c in ExitCode] == [0, 1, 2]
    assert [c.name for c in ExitCode] == ["SUCCESS", "VIOLATION", "ERROR"]


# ── check-feedback ──────────────────────────────────────────────────

class TestCheckFeedbackExitCodes:
    def test_valid_boundaries_return_0(self) -> None:
        r = _run("check-feedback", "--grade", "10", "80%", "4")
        assert r.returncode == 0, r.stderr

    @pytest.mark.parametrize("boundaries", [["abc"], ["5", "6"], ["100%"]])
    def test_rejected_boundaries_return_1(self, boundaries: list[str]) -> None:
        r = _run("check-feedback", "--grade", "10", *boundaries)
        assert r.returncode == 1, r.stderr

    def test_bad_grade_returns_2(self) -> None:
        r = _run("check-feedback", "--grade", "-3", "1")
        assert r.returncode == 2


# ── usage and files ─────────────────────────────────────────────────

class TestUsageExitCodes:
    def test_no_command_returns_2(self) -> None:
        assert _run().returncode == 2

    def test_argparse_error_returns_2(self) -> None:
        assert _run("check-feedback").returncode == 2

    def test_missing_site_returns_2(self, tmp_path: Path) -> None:
        r = _run("seed", str(tmp_path / "missing.yaml"))
        assert r.returncode == 2
        assert "ERROR" in r.stderr

    def test_version(self) -> None:
        r = _run("--version")
        assert r.returncode == 0
        assert r.stdout.startswith("lms-plugins ")

from __future__ import annotations

"""
End-to-End (E2E) CLI Tests.

Subprocess runs cover the entry point, exit codes and configuration dump.
Full analysis runs go through main() in-process so token counting can be
patched and no tiktoken encoding download is attempted.
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import List
from unittest.mock import patch

import pytest

from filescope.infra.logging import shutdown_logging
from filescope.interface.cli.app import main

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"


def run_cli(args: List[str], home: Path) -> subprocess.CompletedProcess:
    """
    Execute 'python -m filescope' with src on PYTHONPATH and an isolated HOME.
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")
    env["HOME"] = str(home)
    env["LOCALAPPDATA"] = str(home)

    return subprocess.run(
        [sys.executable, "-m", "filescope"] + args,
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8",
    )


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """
    /input
      src/main.py
      src/Button.test.tsx
      styles/site.css
      empty.py
      big.js          (over the size cap used by the tests)
    """
    root = tmp_path / "input"
    (root / "src").mkdir(parents=True)
    (root / "styles").mkdir()
    (root / "src" / "main.py").write_text("def main():\n    return 1\n", encoding="utf-8")
    (root / "src" / "Button.test.tsx").write_text("it('renders', () => {});\n", encoding="utf-8")
    (root / "styles" / "site.css").write_text("body { margin: 0; }\n", encoding="utf-8")
    (root / "empty.py").write_text("", encoding="utf-8")
    (root / "big.js").write_text("x" * 5000, encoding="utf-8")
    return root


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    shutdown_logging()


@pytest.fixture(autouse=True)
def isolated_options(tmp_path: Path):
    with patch("filescope.domain.config.get_user_data_dir", return_value=str(tmp_path / "userdata")):
        yield


# -----------------------------------------------------------------------------
# Subprocess
# -----------------------------------------------------------------------------

def test_dump_config_subprocess(tmp_path: Path) -> None:
    result = run_cli(["--dump-config", "--concurrency", "2"], tmp_path)

    assert result.returncode == 0, result.stderr
    data = json.loads(result.stdout)
    assert data["concurrent_limit"] == 2
    assert data["batch_size"] == 10


def test_invalid_option_exit_code(tmp_path: Path) -> None:
    result = run_cli(["--concurrency", "0", "--dump-config"], tmp_path)

    assert result.returncode == 2
    assert "concurrent_limit" in result.stderr


def test_missing_input_exit_code(tmp_path: Path) -> None:
    result = run_cli(["-i", str(tmp_path / "does-not-exist")], tmp_path)

    assert result.returncode == 2
    assert "Invalid input directory" in result.stderr

# -----------------------------------------------------------------------------
# In-process
# -----------------------------------------------------------------------------

@patch("filescope.core.analysis.heuristic.count_tokens", return_value=5)
def test_json_report(mock_tokens, sample_project: Path, capsys: pytest.CaptureFixture) -> None:
    code = main(["-i", str(sample_project), "--json", "--max-file-size", "1000", "--no-progress"])

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    metrics = report["metrics"]
    assert metrics["total_files"] == 5
    assert metrics["skipped"] == 1
    assert metrics["processed"] == 4
    assert metrics["failed"] == 0

    paths = [Path(r["path"]).name for r in report["results"]]
    assert "empty.py" not in paths
    assert "big.js" not in paths
    # Core code first, tests after it, the stylesheet last
    assert paths == ["main.py", "Button.test.tsx", "site.css"]
    types = {Path(r["path"]).name: r["payload"]["type"] for r in report["results"]}
    assert types == {"main.py": "component", "Button.test.tsx": "test", "site.css": "style"}


@patch("filescope.core.analysis.heuristic.count_tokens", return_value=5)
def test_human_summary(mock_tokens, sample_project: Path, capsys: pytest.CaptureFixture) -> None:
    code = main(["-i", str(sample_project), "--ext", "py", "--perf"])

    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("SUCCESS: analysis done")
    assert "Files processed: 2" in out
    assert "[component]" in out


def test_strict_mode_fails_on_terminal_failures(sample_project: Path, capsys: pytest.CaptureFixture) -> None:
    with patch("filescope.core.analysis.heuristic.stream_file_content", side_effect=OSError("disk")):
        lenient = main(["-i", str(sample_project), "--ext", "py", "--retries", "0"])
        strict = main(["-i", str(sample_project), "--ext", "py", "--retries", "0", "--strict"])

    out = capsys.readouterr().out
    assert lenient == 0
    assert strict == 1
    assert "OSError: disk" in out
    assert out.startswith("COMPLETED WITH FAILURES: analysis done")
    assert "SUCCESS" not in out


def test_options_file_precedence(sample_project: Path, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    options_file = tmp_path / "opts.json"
    options_file.write_text(json.dumps({"concurrent_limit": 7, "batch_size": 3}), encoding="utf-8")

    code = main(["--config", str(options_file), "--batch-size", "4", "--dump-config"])

    data = json.loads(capsys.readouterr().out)
    assert code == 0
    assert data["concurrent_limit"] == 7
    assert data["batch_size"] == 4

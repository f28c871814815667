from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from exverify.cli import verify
from tests.mocks.exercise_content import unique_package_name, verify_source, write_content_package

runner = CliRunner()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty working directory (no config/verifier.yaml) with sys.path restored afterwards."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "path", list(sys.path))
    monkeypatch.setattr(verify, "_configure_logging", lambda verbose: None)
    return tmp_path


def _content(base: Path, *, broken: bool = False) -> str:
    package = unique_package_name()
    files = {"hooks/ex_01_state/verify.py": verify_source("hooks/01-state", "uses state", "useState")}
    if broken:
        files["broken/ex_01_bad/verify.py"] = "raise RuntimeError('content bug')\n"
    write_content_package(base / "content", package, files)
    return package


def test_stats_reports_registry(workspace: Path) -> None:
    package = _content(workspace)
    result = runner.invoke(verify.app, ["stats", "--package", package, "--search-path", str(workspace / "content")])

    assert result.exit_code == 0
    assert "Verification Registry" in result.stdout
    assert "category: hooks" in result.stdout
    assert "All registered exercises are verifiable." in result.stdout


def test_stats_json_lists_counts(workspace: Path) -> None:
    package = _content(workspace)
    result = runner.invoke(
        verify.app, ["stats", "--package", package, "--search-path", str(workspace / "content"), "--json"]
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["totalRegistered"] == 1
    assert payload["categories"] == {"hooks": 1}
    assert payload["unreachable"] == []


def test_stats_fail_on_unreachable(workspace: Path) -> None:
    package = _content(workspace, broken=True)
    args = ["stats", "--package", package, "--search-path", str(workspace / "content")]

    lenient = runner.invoke(verify.app, args)
    assert lenient.exit_code == 0
    assert "broken/01-bad" in lenient.stdout

    strict = runner.invoke(verify.app, [*args, "--fail-on-unreachable"])
    assert strict.exit_code == 1
    assert "broken/01-bad" in strict.stdout


def test_check_passes_and_fails(workspace: Path) -> None:
    package = _content(workspace)
    good = workspace / "good.js"
    good.write_text("function Counter() { const [c, s] = useState(0); return c; }", encoding="utf-8")
    bad = workspace / "bad.js"
    bad.write_text("function Counter() { return 0; }", encoding="utf-8")
    options = ["--package", package, "--search-path", str(workspace / "content")]

    passed = runner.invoke(verify.app, ["check", "hooks/01-state", str(good), *options])
    assert passed.exit_code == 0
    assert "uses state" in passed.stdout

    failed = runner.invoke(verify.app, ["check", "hooks/01-state", str(bad), *options])
    assert failed.exit_code == 1
    assert "missing `useState`" in failed.stdout


def test_check_unknown_exercise_reports_no_verification(workspace: Path) -> None:
    blob = workspace / "blob.js"
    blob.write_text("function Foo() {}", encoding="utf-8")
    result = runner.invoke(verify.app, ["check", "nowhere/01", str(blob), "--package", unique_package_name("absent")])
    assert result.exit_code == 0
    assert "No verification available" in result.stdout


def test_check_invalid_id_exits_with_usage_error(workspace: Path) -> None:
    blob = workspace / "blob.js"
    blob.write_text("function Foo() {}", encoding="utf-8")
    result = runner.invoke(verify.app, ["check", "a//b", str(blob)])
    assert result.exit_code == 2


def test_invalid_config_exits_with_usage_error(workspace: Path) -> None:
    config = workspace / "bad.yaml"
    config.write_text("registry:\n  conventions: ['{root}.verify']\n", encoding="utf-8")
    result = runner.invoke(verify.app, ["stats", "--config", str(config)])
    assert result.exit_code == 2


def test_extract_shows_segment(workspace: Path) -> None:
    blob = workspace / "blob.js"
    blob.write_text("function Foo() { if (a) { b(); } }\nconst x = 1;", encoding="utf-8")

    found = runner.invoke(verify.app, ["extract", str(blob), "Foo"])
    assert found.exit_code == 0
    assert "Foo via" in found.stdout
    assert "balance=0" in found.stdout
    assert "b();" in found.stdout

    missing = runner.invoke(verify.app, ["extract", str(blob), "Bar", "--kind", "function"])
    assert missing.exit_code == 1
    assert "Bar not found" in missing.stdout


def test_extract_blank_name_exits_with_usage_error(workspace: Path) -> None:
    blob = workspace / "blob.js"
    blob.write_text("function Foo() {}", encoding="utf-8")
    result = runner.invoke(verify.app, ["extract", str(blob), "   "])
    assert result.exit_code == 2

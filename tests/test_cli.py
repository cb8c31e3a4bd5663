from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import pytest

from agent_qa.browser import FakePage, FakeSessionProvider

SITE = "https://example.com/"


def _load_diag():
    module_path = Path(__file__).resolve().parents[1] / "scripts" / "agent_qa_diag.py"
    spec = importlib.util.spec_from_file_location("agent_qa_diag_test_module", module_path)
    assert spec and spec.loader
    diag = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(diag)
    return diag


@pytest.fixture
def diag(monkeypatch, tmp_path: Path, provider):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AGENT_QA_CONSOLE_WINDOW", "0")
    monkeypatch.setenv("AGENT_QA_PROJECT_PATHS", str(tmp_path))
    module = _load_diag()
    monkeypatch.setattr(module, "make_provider", lambda _settings: provider)
    return module


def test_test_command_prints_json(diag, capsys) -> None:
    diag.main(["test", SITE, "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["suite"] == "basic"
    assert payload["summary"] == {"total": 4, "passed": 4, "failed": 0, "skipped": 0}


def test_test_command_prints_summary(diag, capsys) -> None:
    diag.main(["test", SITE, "--suite", "accessibility"])

    output = capsys.readouterr().out
    assert "2/2 passed, quality score 100" in output


def test_screenshot_command_writes_file(diag, capsys, tmp_path: Path) -> None:
    target = tmp_path / "shot.png"

    diag.main(["screenshot", SITE, "--output", str(target)])

    assert target.read_bytes() == FakePage().screenshot
    assert "Saved" in capsys.readouterr().out


def test_assess_command_for_adhoc_url(diag, capsys) -> None:
    diag.main(["assess", "--url", SITE, "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["quality_score"] == 100
    assert payload["report"]["trend"] == "baseline"


def test_assess_command_reports_missing_project(diag, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        diag.main(["assess", "nowhere"])

    assert excinfo.value.code == 1
    assert "Project unavailable" in capsys.readouterr().out


def test_assess_command_reports_failure(diag, capsys, monkeypatch) -> None:
    monkeypatch.setattr(diag, "make_provider", lambda _settings: FakeSessionProvider({}))

    with pytest.raises(SystemExit) as excinfo:
        diag.main(["assess", "--url", SITE])

    assert excinfo.value.code == 1
    assert "Assessment failed" in capsys.readouterr().out


def test_status_command_lists_projects(diag, capsys, tmp_path: Path) -> None:
    (tmp_path / "demo.yaml").write_text(f"id: demo\nname: Demo\nurl: {SITE}\n", encoding="utf-8")

    diag.main(["status"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["projects"] == ["demo"]
    assert payload["project_error"] is None
    assert payload["thresholds"]["maintainability"] == 94

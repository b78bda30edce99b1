"""Tests for the command line entry point."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from typer.testing import CliRunner

from claude_usage_tracker.app import app, snapshot_summary
from claude_usage_tracker.services.usage_repository import UsageRepository
from helpers import usage_line, write_jsonl

runner = CliRunner()


@pytest.fixture
def live_root(data_root, project_dir):
    """Data root with two requests from the last few minutes of real time."""
    now = datetime.now(timezone.utc)
    write_jsonl(project_dir / "session.jsonl", [
        usage_line(now - timedelta(minutes=4), input_tokens=1000, output_tokens=2000,
                   message_id="m1", request_id="r1"),
        usage_line(now - timedelta(minutes=2), input_tokens=1000, output_tokens=2000,
                   message_id="m2", request_id="r2"),
    ])
    return data_root


class TestSummaryCommand:
    def test_json_output(self, isolated_settings, live_root):
        result = runner.invoke(app, ["summary", "--data-root", str(live_root), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["all_time"]["tokens"] == 6000
        assert data["all_time"]["cost_usd"] == pytest.approx(0.066)
        assert data["today"]["tokens"] <= data["all_time"]["tokens"]
        assert data["active_session"]["tokens"] == 6000

    def test_text_output(self, isolated_settings, live_root):
        result = runner.invoke(app, ["summary", "--data-root", str(live_root)])

        assert result.exit_code == 0, result.output
        assert "Today:" in result.stdout
        assert "All time:" in result.stdout
        assert "Session:" in result.stdout

    def test_missing_data_root_exits_with_error(self, isolated_settings, tmp_path):
        result = runner.invoke(app, ["summary", "--data-root", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_empty_data_root(self, isolated_settings, tmp_path):
        result = runner.invoke(app, ["summary", "--data-root", str(tmp_path), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["all_time"]["tokens"] == 0
        assert data["active_session"] is None


def test_watch_missing_data_root(isolated_settings, tmp_path):
    result = runner.invoke(app, ["watch", "--data-root", str(tmp_path / "missing")])
    assert result.exit_code == 1


def test_snapshot_summary_without_active_session(tmp_path, clock):
    snap = UsageRepository(data_root=tmp_path, clock=clock).snapshot()
    summary = snapshot_summary(snap)
    assert summary["active_session"] is None
    assert summary["today"]["records"] == 0
    assert summary["taken_at"] == clock.now().isoformat()


def test_main_module_importable():
    from claude_usage_tracker import __main__
    assert hasattr(__main__, "main")

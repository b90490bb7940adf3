"""CLI tests via typer's CliRunner."""

import json

import pytest
from typer.testing import CliRunner

from marketpulse import cli
from marketpulse.io.snapshot import SnapshotError

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("USAJOBS_API_KEY", "USAJOBS_USER_AGENT", "PULSE_DATA_PATH", "PULSE_WINDOW_DAYS", "PULSE_MAX_RESULTS"):
        monkeypatch.delenv(name, raising=False)


class TestRefresh:

    def test_success(self, snapshot_file, monkeypatch):
        seen = {}

        def fake_run(settings, dry_run=False):
            seen["settings"] = settings
            return {"lastUpdated": "2025-03-01", "marketLenses": {}}

        monkeypatch.setattr(cli, "run_refresh", fake_run)
        result = runner.invoke(cli.app, ["refresh", "--data-path", str(snapshot_file), "--window-days", "7"])
        assert result.exit_code == 0
        assert "2025-03-01" in result.output
        assert seen["settings"].data_path == snapshot_file
        assert seen["settings"].window_days == 7
        assert seen["settings"].max_results == 500

    def test_snapshot_failure_exits_non_zero(self, tmp_path, monkeypatch):
        def fake_run(settings, dry_run=False):
            raise SnapshotError("cannot write snapshot: disk full")

        monkeypatch.setattr(cli, "run_refresh", fake_run)
        result = runner.invoke(cli.app, ["refresh", "--data-path", str(tmp_path / "data.json")])
        assert result.exit_code == 1
        assert "disk full" in result.output

    def test_dry_run_prints_lenses(self, snapshot_file, monkeypatch):
        lenses = {"usajobsPulse": {"status": "disabled"}, "onetHotTechnologies": {"status": "active"}}

        def fake_run(settings, dry_run=False):
            assert dry_run is True
            return {"lastUpdated": "2025-03-01", "marketLenses": dict(lenses, other={})}

        monkeypatch.setattr(cli, "run_refresh", fake_run)
        result = runner.invoke(cli.app, ["refresh", "--data-path", str(snapshot_file), "--dry-run"])
        assert result.exit_code == 0
        printed = result.output[result.output.index("{"):]
        assert json.loads(printed) == lenses


class TestStatus:

    def test_lists_pipeline_lenses_and_extras(self, snapshot_file):
        result = runner.invoke(cli.app, ["status", "--data-path", str(snapshot_file)])
        assert result.exit_code == 0
        assert "lastUpdated: 2024-01-01" in result.output
        assert "onetHotTechnologies: not available" in result.output
        assert "adzunaUSSnapshot: not connected. kept as-is" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(cli.app, ["status", "--data-path", str(tmp_path / "nope.json")])
        assert result.exit_code == 1


class TestClassify:

    def test_flags(self):
        result = runner.invoke(cli.app, ["classify", "AI Engineer", "Chairperson"])
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0] == "AI AI Engineer  [ai]"
        assert lines[1] == "-- Chairperson"

"""Tests for CLI entry point.

Verifies that all CLI commands work correctly.
"""
from __future__ import annotations

import subprocess
import sys

import yaml


def _run_cli(*args: str) -> subprocess.CompletedProcess:
    """Run the CLI with the given arguments."""
    return subprocess.run(
        [sys.executable, "-m", "rshield", *args],
        capture_output=True, text=True, timeout=120,
    )


def _write_config(tmp_path, **overrides) -> str:
    raw = {
        "log_level": "WARNING",
        "parameters": {
            "population": 2000000, "beta": 2.0, "alpha": 1.0, "gamma": 0.5,
            "delay": 1.0, "step": 0.05, "horizon": 30,
            "controls": {"start": 10, "prevention": 0.1, "suppression": 0.2},
        },
        "observed": [[0, 5000], [1, 30000], [2, 150000]],
        "fit_grid": {
            "population_multipliers": [1.5, 5.0],
            "beta_values": [1.0, 2.0],
            "gamma_values": [0.5, 5.0],
            "alpha_values": [1.0],
        },
    }
    raw.update(overrides)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(raw))
    return str(path)


class TestCLI:
    """Test CLI commands."""

    def test_version(self):
        result = _run_cli("version")
        assert result.returncode == 0
        assert "rshield 0.1.0" in result.stdout

    def test_help(self):
        result = _run_cli("help")
        assert result.returncode == 0
        for command in ("simulate", "rc", "solve", "fit", "advise", "reach"):
            assert command in result.stdout

    def test_no_args(self):
        result = _run_cli()
        assert result.returncode == 0
        assert "Usage:" in result.stdout

    def test_unknown_command(self):
        result = _run_cli("nonexistent")
        assert result.returncode == 1
        assert "Unknown command" in result.stdout

    def test_reach(self):
        result = _run_cli("reach", "1")
        assert result.returncode == 0
        assert result.stdout.strip() == "5715"

    def test_reach_custom_factor(self):
        result = _run_cli("reach", "10", "6000")
        assert result.stdout.strip() == "60000"

    def test_reach_bad_number(self):
        result = _run_cli("reach", "lots")
        assert result.returncode == 1
        assert "Error" in result.stdout

    def test_simulate(self, tmp_path):
        result = _run_cli("simulate", _write_config(tmp_path))
        assert result.returncode == 0
        lines = result.stdout.splitlines()
        assert lines[0].split() == ["day", "S", "E", "I", "R", "observed"]
        assert lines[1].split()[0] == "0"
        assert lines[1].split()[3] == "5000"
        assert lines[31].split()[0] == "30"
        assert "Rc:" in result.stdout

    def test_simulate_rejects_bad_population(self, tmp_path):
        config = _write_config(tmp_path, parameters={"population": 0})
        result = _run_cli("simulate", config)
        assert result.returncode == 1
        assert "population" in result.stdout

    def test_rc(self, tmp_path):
        result = _run_cli("rc", _write_config(tmp_path))
        assert result.returncode == 0
        assert "Rc =" in result.stdout

    def test_solve(self, tmp_path):
        result = _run_cli("solve", _write_config(tmp_path))
        assert result.returncode == 0
        assert "suppression v =" in result.stdout
        assert "Rc =" in result.stdout

    def test_fit(self, tmp_path):
        result = _run_cli("fit", _write_config(tmp_path))
        assert result.returncode == 0
        assert "population =" in result.stdout
        assert "error =" in result.stdout

    def test_fit_sparse(self, tmp_path):
        result = _run_cli("fit", _write_config(tmp_path, observed=[[0, 5000]]))
        assert result.returncode == 0
        assert "Not enough observed data" in result.stdout

    def test_advise_template(self, tmp_path):
        result = _run_cli("advise", "Celebrity hoax", _write_config(tmp_path))
        assert result.returncode == 0
        assert "# Rumor Assessment: Celebrity hoax" in result.stdout

    def test_advise_requires_topic(self):
        result = _run_cli("advise")
        assert result.returncode == 1

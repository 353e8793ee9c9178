"""
Tests for the dsplab CLI.
"""

import polars as pl
import pytest

from dsplab.cli import build_parser, main


class TestCli:
    """Run subcommands through main() and check their output."""

    def test_eval(self, capsys):
        assert main(["eval", "sin(t)", "--start=-10", "--end=10"]) == 0
        out = capsys.readouterr().out
        assert "x(t) = sin(t)" in out
        assert "Finite average power signal" in out
        assert "Energy: ∞" in " ".join(out.split())

    def test_eval_finite_with_heuristic(self, capsys):
        assert main(["eval", "2rect(2t-1)", "--finite", "--heuristic", "-m", "simpson"]) == 0
        out = capsys.readouterr().out
        assert "Normalized: 2*rect(2*t-1)" in " ".join(out.split())
        assert "Finite-energy signal" in out
        assert "Heuristic" in out

    def test_eval_reports_missing_points(self, capsys):
        assert main(["eval", "1/t", "--start=-1", "--end=1", "-n", "3"]) == 0
        out = capsys.readouterr().out
        assert "Plottable:" in out
        assert "Infinite-power signal" in out

    def test_eval_writes_csv(self, tmp_path, capsys):
        output = tmp_path / "points.csv"
        assert main(["eval", "tri(t)", "-n", "11", "-o", str(output)]) == 0
        df = pl.read_csv(output)
        assert df.columns == ["t", "value"]
        assert df.height == 11

    def test_formula_error(self, capsys):
        assert main(["eval", "foo(t)"]) == 2
        assert "Error: Unknown function: foo" in capsys.readouterr().err

    def test_interval_error(self, capsys):
        assert main(["eval", "t", "--start", "3", "--end", "1"]) == 2
        assert "t_start < t_end" in capsys.readouterr().err

    def test_catalog(self, capsys):
        assert main(["catalog", "--workers", "2", "-n", "200"]) == 0
        out = capsys.readouterr().out
        assert "ENERGY CLASSIFICATION (trapeze)" in out
        words = " ".join(out.split())
        assert "Energy signals: 10" in words
        assert "Power signals: 3" in words

    def test_catalog_file(self, tmp_path, capsys):
        path = tmp_path / "catalog.yaml"
        path.write_text(
            "signals:\n"
            "  a: {formula: \"rect(t)\", duration: finite}\n"
            "  b: {formula: \"nope(t)\", duration: finite}\n",
            encoding="utf-8",
        )
        assert main(["catalog", "--catalog", str(path)]) == 0
        out = capsys.readouterr().out
        assert "Errors: 1" in " ".join(out.split())

    def test_power(self, capsys):
        assert main(["power", "x11"]) == 0
        out = capsys.readouterr().out
        assert "POWER CALCULATION: x11(t) on [0.0, 10.0]" in out
        assert "Average power:" in out

    def test_power_window(self, capsys):
        assert main(["power", "x4", "--start", "0", "--end", "10", "-m", "simpson"]) == 0
        words = " ".join(capsys.readouterr().out.split())
        assert "Energy: ∞" not in words
        assert "Method: simpson, 1000 samples" in words

    def test_power_writes_csv(self, tmp_path, capsys):
        output = tmp_path / "power.csv"
        assert main(["power", "x4", "-o", str(output)]) == 0
        df = pl.read_csv(output)
        assert df.columns == ["signal", "t_start", "t_end", "energy", "average_power", "method"]
        assert df["signal"][0] == "x4(t)"

    def test_power_unknown_signal(self, capsys):
        assert main(["power", "x99"]) == 2
        assert "Unknown catalog signal" in capsys.readouterr().err

    def test_plot(self, capsys):
        assert main(["plot", "x7", "-n", "5"]) == 0
        assert "x7(t) = Rect((t-1)/2)-Rect((t+1)/2) (finite)" in capsys.readouterr().out

    def test_plot_unknown_signal(self, capsys):
        assert main(["plot", "x42"]) == 2
        assert "Unknown catalog signal" in capsys.readouterr().err

    def test_decompose(self, capsys):
        assert main(["decompose", "x12", "-n", "5"]) == 0
        out = capsys.readouterr().out
        assert "step_3: Sum" in out

    def test_derive(self, tmp_path, capsys):
        output = tmp_path / "d.parquet"
        assert main(["derive", "tri(t)", "--start=-2", "--end=2", "-n", "101", "-o", str(output)]) == 0
        df = pl.read_parquet(output)
        assert df.columns == ["t", "value", "d1", "d2"]

    def test_functions(self, capsys):
        assert main(["functions"]) == 0
        out = capsys.readouterr().out
        assert "rect(t)" in out
        assert "Constants:" in out

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_method_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["eval", "t", "-m", "romberg"])

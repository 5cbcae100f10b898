"""Tests for the tubenet command line."""

import logging
from pathlib import Path

import pytest

from tubenet import cli


def _manifest(tmp_path: Path, sample_dir: Path, extra: str = "") -> Path:
    path = tmp_path / "ws.yaml"
    path.write_text(
        f"instance: {sample_dir / 'instance.txt'}\n"
        f"solution: {sample_dir / 'solution.txt'}\n"
        f"types: {sample_dir / 'types.txt'}\n"
        f"map: {sample_dir / 'map.geojson'}\n" + extra,
        encoding="utf-8",
    )
    return path


class TestInspect:
    def test_summary(self, sample_dir, capsys):
        cli.main(["inspect", str(sample_dir / "sample.yaml")])
        out = capsys.readouterr().out
        assert "Workspace: sample" in out
        assert "Types:        Serum, Plasma" in out
        assert "Aliquots:     10" in out
        assert "Most aliquots at Lyon [0] (10)" in out
        assert "Tubes:" in out
        assert "tube_id" in out

    def test_detail_lists_all_tubes(self, sample_dir, capsys):
        cli.main(["inspect", str(sample_dir / "sample.yaml")])
        short = capsys.readouterr().out
        cli.main(["inspect", "--detail", str(sample_dir / "sample.yaml")])
        detailed = capsys.readouterr().out
        assert len(detailed.splitlines()) == len(short.splitlines()) + 2


class TestValidate:
    def test_feasible(self, sample_dir, capsys):
        cli.main(["validate", str(sample_dir / "sample.yaml")])
        assert "Solution is feasible" in capsys.readouterr().out

    def test_draw_rule_override(self, sample_dir, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["validate", str(sample_dir / "sample.yaml"), "--draw-rule", "exactly_one"])
        assert excinfo.value.code == 1
        out = capsys.readouterr().out
        assert "Rule SINGLE_DRAW failed" in out
        assert "Plasma" in out

    def test_manifest_draw_rule(self, sample_dir, tmp_path, capsys):
        path = _manifest(tmp_path, sample_dir, "validation:\n  draw_rule: exactly_one\n")
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["validate", str(path)])
        assert excinfo.value.code == 1

    def test_missing_workspace(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["validate", str(tmp_path / "absent.yaml")])
        assert excinfo.value.code == 1
        assert "❌" in capsys.readouterr().out

    def test_invalid_manifest(self, tmp_path, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text("solution: s.txt\n", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["validate", str(path)])
        assert excinfo.value.code == 1
        assert "Invalid workspace" in capsys.readouterr().out


class TestExport:
    def test_export_to_output(self, sample_dir, tmp_path, capsys):
        target = tmp_path / "exported.txt"
        cli.main(["export", str(sample_dir / "sample.yaml"), "--output", str(target)])
        assert "Solution written to" in capsys.readouterr().out
        assert target.read_text(encoding="utf-8") == (sample_dir / "solution.txt").read_text(
            encoding="utf-8"
        )

    def test_export_default_path(self, sample_dir, tmp_path):
        path = _manifest(tmp_path, sample_dir, "export:\n  file_name: result.txt\n")
        cli.main(["export", str(path)])
        assert (tmp_path / "result.txt").is_file()

    def test_export_infeasible(self, sample_dir, tmp_path, capsys):
        path = _manifest(tmp_path, sample_dir)
        target = tmp_path / "never.txt"
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["export", str(path), "-o", str(target), "--draw-rule", "exactly_one"])
        assert excinfo.value.code == 1
        assert "Export aborted" in capsys.readouterr().out
        assert not target.exists()


class TestMain:
    def test_no_arguments_prints_help(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main([])
        assert excinfo.value.code == 0
        assert "usage: tubenet" in capsys.readouterr().out

    def test_unknown_command(self):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["frobnicate"])
        assert excinfo.value.code == 2

    @pytest.mark.parametrize(
        "flag, level", [("--verbose", logging.DEBUG), ("--quiet", logging.WARNING), (None, logging.INFO)]
    )
    def test_log_level_flags(self, sample_dir, flag, level):
        args = [flag] if flag else []
        cli.main(args + ["validate", str(sample_dir / "sample.yaml")])
        assert logging.getLogger("tubenet").level == level

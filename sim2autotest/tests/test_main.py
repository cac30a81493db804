"""
Tests for the command-line interface.

Verifies exit codes (0 pass, 1 fail, 2 input error) and output formats.
"""

import json

import pytest

from sim2autotest.main import EXIT_FAILED, EXIT_INPUT_ERROR, EXIT_OK, main


RUN_CSV = """# run_id: tank_fill
# unit.level: m
time,level
0,0.0
1,0.4
2,0.8
3,1.0
4,1.0
"""

PASSING_SUITE = """
name: tank
expectations:
  - {id: fills, signal: level, kind: monotonic, direction: increasing}
  - {id: full, signal: level, kind: final_value, target: 1.0}
"""

FAILING_SUITE = """
name: tank
expectations:
  - {id: never_full, signal: level, kind: range, max_value: 0.9}
"""


@pytest.fixture
def run_file(tmp_path):
    path = tmp_path / "tank.csv"
    path.write_text(RUN_CSV)
    return path


def _suite(tmp_path, text):
    path = tmp_path / "suite.yaml"
    path.write_text(text)
    return path


class TestCheckCommand:
    """Tests for `sim2autotest check`."""

    def test_passing_suite_exits_zero(self, run_file, tmp_path, capsys):
        code = main(["check", str(run_file), str(_suite(tmp_path, PASSING_SUITE))])
        assert code == EXIT_OK
        out = capsys.readouterr().out
        assert "# Validation report: tank_fill" in out
        assert "**PASSED**" in out

    def test_failing_suite_exits_one(self, run_file, tmp_path, capsys):
        code = main(["check", str(run_file), str(_suite(tmp_path, FAILING_SUITE))])
        assert code == EXIT_FAILED
        assert "**FAILED**" in capsys.readouterr().out

    def test_json_output(self, run_file, tmp_path, capsys):
        code = main(["check", "--json", str(run_file), str(_suite(tmp_path, PASSING_SUITE))])
        assert code == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["report"]["run_id"] == "tank_fill"
        assert [s["id"] for s in data["stages"]] == ["P0", "P1", "P2", "P3"]

    def test_no_strict_ignores_violations(self, tmp_path, capsys):
        run_path = tmp_path / "dup.csv"
        run_path.write_text("time,level\n0,1\n0,1\n")
        suite_path = _suite(tmp_path, PASSING_SUITE)
        assert main(["check", str(run_path), str(suite_path)]) == EXIT_FAILED
        assert main(["check", "--no-strict", str(run_path), str(suite_path)]) == EXIT_OK

    def test_bad_run_file_exits_two(self, tmp_path, capsys):
        run_path = tmp_path / "bad.csv"
        run_path.write_text("t,level\n0,1\n")
        code = main(["check", str(run_path), str(_suite(tmp_path, PASSING_SUITE))])
        assert code == EXIT_INPUT_ERROR
        assert "MISSING_TIME_COLUMN" in capsys.readouterr().err

    def test_missing_suite_exits_two(self, run_file, tmp_path, capsys):
        code = main(["check", str(run_file), str(tmp_path / "absent.yaml")])
        assert code == EXIT_INPUT_ERROR
        assert "FILE_NOT_FOUND" in capsys.readouterr().err

    def test_undecodable_run_file_exits_two(self, tmp_path, capsys):
        run_path = tmp_path / "latin1.csv"
        run_path.write_bytes(b"time,x\n0,\xff\xfe\n")
        code = main(["check", str(run_path), str(_suite(tmp_path, PASSING_SUITE))])
        assert code == EXIT_INPUT_ERROR
        assert "INVALID_ENCODING" in capsys.readouterr().err

    def test_undecodable_suite_file_exits_two(self, run_file, tmp_path, capsys):
        suite_path = tmp_path / "suite.yaml"
        suite_path.write_bytes(b"name: \xe9t\xe9\nexpectations: []\n")
        code = main(["check", str(run_file), str(suite_path)])
        assert code == EXIT_INPUT_ERROR
        assert "INVALID_ENCODING" in capsys.readouterr().err

    def test_misspelled_suite_key_exits_two(self, run_file, tmp_path, capsys):
        suite = "name: tank\nexpectations:\n  - {id: cap, signal: level, kind: range, max_valu: 2.0}\n"
        code = main(["check", str(run_file), str(_suite(tmp_path, suite))])
        assert code == EXIT_INPUT_ERROR
        assert "INVALID_SUITE" in capsys.readouterr().err

    def test_bad_configuration_exits_two(self, run_file, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("SIM2AUTOTEST_DEFAULT_TOLERANCE", "wide")
        code = main(["check", str(run_file), str(_suite(tmp_path, PASSING_SUITE))])
        assert code == EXIT_INPUT_ERROR
        assert "SIM2AUTOTEST_DEFAULT_TOLERANCE" in capsys.readouterr().err


class TestStatsCommand:
    """Tests for `sim2autotest stats`."""

    def test_text_output(self, run_file, capsys):
        assert main(["stats", str(run_file)]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith("run: tank_fill")
        assert "level" in out

    def test_json_output(self, run_file, capsys):
        assert main(["stats", "--json", str(run_file)]) == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["signals"]["level"]["max"] == 1.0
        assert data["signals"]["level"]["unit"] == "m"

    def test_unsupported_file(self, tmp_path, capsys):
        path = tmp_path / "run.txt"
        path.write_text("time,x\n0,1\n")
        assert main(["stats", str(path)]) == EXIT_INPUT_ERROR


class TestDemoCommand:
    def test_demo_passes(self, capsys):
        assert main(["demo"]) == EXIT_OK
        assert "sample_step_response" in capsys.readouterr().out


class TestArgumentParsing:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])

"""
Tests for expectation suite loading.

Tests verify:
- YAML and JSON suites parse into ExpectationSuite
- Syntax, structure and validation problems raise SuiteError with codes
- load_suite checks suffix and file existence
"""

import pytest

from sim2autotest.errors import SuiteError
from sim2autotest.models import ExpectationType, MonotonicDirection
from sim2autotest.suite import load_suite, parse_suite


SUITE_YAML = """
name: motor_step
description: Motor speed step response
default_tolerance: 0.05
expectations:
  - id: speed_bounded
    signal: speed
    kind: range
    min_value: 0
    max_value: 16
  - id: speed_rises
    signal: speed
    kind: monotonic
    direction: increasing
    t_end: 1.0
  - id: speed_settles
    signal: speed
    kind: settling
    target: 15
    tolerance: 0.5
    settle_by: 2.0
"""


class TestParseSuite:
    """Tests for parse_suite."""

    def test_parses_yaml(self):
        suite = parse_suite(SUITE_YAML)
        assert suite.name == "motor_step"
        assert suite.default_tolerance == 0.05
        assert [e.id for e in suite.expectations] == ["speed_bounded", "speed_rises", "speed_settles"]
        assert suite.expectations[1].kind == ExpectationType.MONOTONIC
        assert suite.expectations[1].direction == MonotonicDirection.INCREASING
        assert suite.expectations[2].tolerance == 0.5

    def test_parses_json(self):
        text = '{"name": "j", "expectations": [{"id": "a", "signal": "x", "kind": "final_value", "target": 1}]}'
        suite = parse_suite(text)
        assert suite.expectations[0].target == 1.0

    def test_empty_input(self):
        with pytest.raises(SuiteError) as exc_info:
            parse_suite("")
        assert exc_info.value.code == "EMPTY_INPUT"

    def test_yaml_syntax_error(self):
        with pytest.raises(SuiteError) as exc_info:
            parse_suite("name: [unclosed")
        assert exc_info.value.code == "INVALID_YAML"

    def test_non_mapping(self):
        with pytest.raises(SuiteError) as exc_info:
            parse_suite("- just\n- a list\n")
        assert exc_info.value.code == "INVALID_STRUCTURE"

    def test_expectations_not_a_list(self):
        with pytest.raises(SuiteError) as exc_info:
            parse_suite("name: s\nexpectations: nope\n")
        assert exc_info.value.code == "INVALID_STRUCTURE"

    def test_missing_name(self):
        with pytest.raises(SuiteError) as exc_info:
            parse_suite("expectations: []\n")
        assert exc_info.value.code == "INVALID_SUITE"
        assert any("name" in msg for msg in exc_info.value.details["errors"])

    def test_inconsistent_expectation(self):
        text = "name: s\nexpectations:\n  - id: a\n    signal: x\n    kind: settling\n    target: 1\n"
        with pytest.raises(SuiteError) as exc_info:
            parse_suite(text)
        assert exc_info.value.code == "INVALID_SUITE"
        assert "settle_by" in exc_info.value.message

    def test_duplicate_ids(self):
        text = (
            "name: s\nexpectations:\n"
            "  - {id: a, signal: x, kind: range, max_value: 1}\n"
            "  - {id: a, signal: y, kind: range, max_value: 1}\n"
        )
        with pytest.raises(SuiteError) as exc_info:
            parse_suite(text)
        assert "Duplicate" in exc_info.value.message

    def test_nan_bounds_rejected(self):
        text = "name: s\nexpectations:\n  - {id: a, signal: x, kind: range, min_value: .nan, max_value: .nan}\n"
        with pytest.raises(SuiteError) as exc_info:
            parse_suite(text)
        assert exc_info.value.code == "INVALID_SUITE"
        assert "finite" in exc_info.value.message

    def test_infinite_tolerance_rejected(self):
        text = "name: s\nexpectations:\n  - {id: a, signal: x, kind: final_value, target: 1, tolerance: .inf}\n"
        with pytest.raises(SuiteError) as exc_info:
            parse_suite(text)
        assert exc_info.value.code == "INVALID_SUITE"

    def test_nan_default_tolerance_rejected(self):
        with pytest.raises(SuiteError) as exc_info:
            parse_suite("name: s\ndefault_tolerance: .nan\nexpectations: []\n")
        assert exc_info.value.code == "INVALID_SUITE"
        assert "default_tolerance" in exc_info.value.message

    def test_misspelled_key_rejected(self):
        text = "name: s\nexpectations:\n  - {id: a, signal: x, kind: range, min_value: 0, max_valu: 1.0}\n"
        with pytest.raises(SuiteError) as exc_info:
            parse_suite(text)
        assert exc_info.value.code == "INVALID_SUITE"
        assert any("max_valu" in msg for msg in exc_info.value.details["errors"])

    def test_unknown_top_level_key_rejected(self):
        with pytest.raises(SuiteError) as exc_info:
            parse_suite("name: s\nexpectation: []\n")
        assert exc_info.value.code == "INVALID_SUITE"


class TestLoadSuite:
    """Tests for load_suite."""

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / "suite.yml"
        path.write_text(SUITE_YAML)
        assert load_suite(path).name == "motor_step"

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "suite.toml"
        path.write_text("name = 'x'")
        with pytest.raises(SuiteError) as exc_info:
            load_suite(path)
        assert exc_info.value.code == "UNSUPPORTED_FORMAT"

    def test_missing_file(self, tmp_path):
        with pytest.raises(SuiteError) as exc_info:
            load_suite(tmp_path / "absent.yaml")
        assert exc_info.value.code == "FILE_NOT_FOUND"

    def test_byte_order_mark_ignored(self, tmp_path):
        path = tmp_path / "suite.yaml"
        path.write_text(SUITE_YAML, encoding="utf-8-sig")
        suite = load_suite(path)
        assert suite.name == "motor_step"
        assert len(suite.expectations) == 3

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "suite.yaml"
        path.write_bytes(b"name: \xff\xfe\nexpectations: []\n")
        with pytest.raises(SuiteError) as exc_info:
            load_suite(path)
        assert exc_info.value.code == "INVALID_ENCODING"
        assert exc_info.value.details["path"] == str(path)

    def test_directory_is_not_a_file(self, tmp_path):
        path = tmp_path / "suite.yaml"
        path.mkdir()
        with pytest.raises(SuiteError) as exc_info:
            load_suite(path)
        assert exc_info.value.code == "FILE_NOT_FOUND"

"""Tests for reading scope records."""

import json
from datetime import date

import pytest

from scope_timeline.parser import load_items, parse_records


class TestParseRecords:
    def test_camel_case_record(self):
        result = parse_records([
            {
                "id": 7,
                "name": "Design",
                "orderIndex": 0,
                "startDate": "2024-01-01T00:00:00.000Z",
                "endDate": "2024-01-05",
                "actualStartDate": "2024-01-02",
                "actualEndDate": "2024-01-08",
                "progress": 40,
                "mandays": 4,
            }
        ])
        assert result.warnings == []
        item = result.items[0]
        assert item.id == "7"
        assert item.name == "Design"
        assert item.planned_start == date(2024, 1, 1)
        assert item.planned_end == date(2024, 1, 5)
        assert item.actual_end == date(2024, 1, 8)
        assert item.percent_complete == 40
        assert item.mandays_planned == 4
        assert item.mandays_actual is None

    def test_snake_case_record(self):
        result = parse_records([{"id": "a", "title": "Build", "planned_start": "2024-02-01", "percent_complete": 10}])
        item = result.items[0]
        assert item.name == "Build"
        assert item.planned_start == date(2024, 2, 1)
        assert item.percent_complete == 10

    def test_sorted_by_order_and_renumbered(self):
        result = parse_records([
            {"id": "c", "orderIndex": 9},
            {"id": "a", "orderIndex": 1},
            {"id": "b", "orderIndex": 5},
        ])
        assert [item.id for item in result.items] == ["a", "b", "c"]
        assert [item.order_index for item in result.items] == [0, 1, 2]

    def test_ties_keep_input_order(self):
        result = parse_records([{"id": "x", "order": 1}, {"id": "y", "order": 1}, {"id": "z", "order": 0}])
        assert [item.id for item in result.items] == ["z", "x", "y"]

    def test_missing_order_uses_position(self):
        result = parse_records([{"id": "a"}, {"id": "b"}])
        assert [item.id for item in result.items] == ["a", "b"]

    def test_missing_id_is_generated(self):
        result = parse_records([{"name": "Nameless"}, {"name": "Other"}])
        assert [item.id for item in result.items] == ["scope-1", "scope-2"]

    def test_duplicate_id_skipped(self):
        result = parse_records([{"id": "a"}, {"id": "a", "name": "dup"}])
        assert len(result.items) == 1
        assert len(result.warnings) == 1
        assert "Duplicate id" in result.warnings[0].message

    def test_non_mapping_skipped(self):
        result = parse_records(["oops", {"id": "a"}], source="scopes.json")
        assert [item.id for item in result.items] == ["a"]
        assert str(result.warnings[0]) == "scopes.json[0]: Record is not a mapping, skipped"

    def test_invalid_date_warns(self):
        result = parse_records([{"id": "a", "startDate": "next tuesday"}])
        assert result.items[0].planned_start is None
        assert "Invalid date" in result.warnings[0].message

    def test_reversed_range_warns_but_keeps_dates(self):
        result = parse_records([{"id": "a", "startDate": "2024-01-10", "endDate": "2024-01-01"}])
        assert result.items[0].planned_end == date(2024, 1, 1)
        assert any("before planned start" in w.message for w in result.warnings)

    def test_bad_progress_defaults_to_zero(self):
        result = parse_records([{"id": "a", "progress": "lots"}])
        assert result.items[0].percent_complete == 0
        assert len(result.warnings) == 1

    def test_out_of_range_progress_kept_raw_but_clamped_on_read(self):
        result = parse_records([{"id": "a", "progress": 150}])
        item = result.items[0]
        assert item.percent_complete == 150
        assert item.progress == 100
        assert "out of range" in result.warnings[0].message

    @pytest.mark.parametrize("value,expected", [(49.6, 50), (49.4, 49), (49.5, 50), ("12.5", 13), (0.4, 0)])
    def test_fractional_progress_rounds_half_up(self, value, expected):
        result = parse_records([{"id": "a", "progress": value}])
        assert result.items[0].percent_complete == expected
        assert result.warnings == []

    @pytest.mark.parametrize("value", ["nan", "inf", "-inf", "Infinity", float("nan"), float("inf"), float("-inf")])
    def test_non_finite_progress_defaults_to_zero(self, value):
        result = parse_records([{"id": "a", "progress": value}])
        assert result.items[0].percent_complete == 0
        assert len(result.warnings) == 1
        assert "Invalid progress" in result.warnings[0].message

    @pytest.mark.parametrize("key", ["orderIndex", "mandays", "actualMandays"])
    @pytest.mark.parametrize("value", ["nan", "inf", float("nan"), float("inf"), float("-inf")])
    def test_non_finite_int_fields_become_absent(self, key, value):
        result = parse_records([{"id": "a", key: value}, {"id": "b"}])
        item = result.find("a")
        assert item.mandays_planned is None
        assert item.mandays_actual is None
        assert [i.order_index for i in result.items] == [0, 1]
        assert len(result.warnings) == 1
        assert result.warnings[0].message.startswith("Invalid")

    def test_find(self):
        result = parse_records([{"id": "a"}, {"id": "b"}])
        assert result.find("b").id == "b"
        assert result.find("zzz") is None


class TestLoadItems:
    def test_json_list(self, tmp_path):
        path = tmp_path / "scopes.json"
        path.write_text(json.dumps([{"id": "a", "name": "A"}]), encoding="utf-8")
        result = load_items(path)
        assert result.source == "scopes.json"
        assert [item.name for item in result.items] == ["A"]

    def test_json_wrapped(self, tmp_path):
        path = tmp_path / "scopes.json"
        path.write_text(json.dumps({"deliverables": [{"id": "a"}, {"id": "b"}]}), encoding="utf-8")
        assert len(load_items(path).items) == 2

    def test_yaml(self, tmp_path):
        path = tmp_path / "scopes.yaml"
        path.write_text(
            "scopes:\n"
            "  - id: a\n"
            "    name: Design\n"
            "    startDate: 2024-01-01\n"
            "    endDate: 2024-01-05\n"
            "    progress: 100\n",
            encoding="utf-8",
        )
        item = load_items(path).items[0]
        assert item.planned_start == date(2024, 1, 1)
        assert item.percent_complete == 100

    def test_missing_file(self, tmp_path):
        result = load_items(tmp_path / "nope.json")
        assert result.items == []
        assert result.warnings[0].message == "File not found"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "scopes.json"
        path.write_text("{not json", encoding="utf-8")
        result = load_items(path)
        assert result.items == []
        assert result.warnings[0].message.startswith("Cannot read file")

    def test_no_scope_list(self, tmp_path):
        path = tmp_path / "scopes.json"
        path.write_text(json.dumps({"name": "x"}), encoding="utf-8")
        assert load_items(path).warnings[0].message == "No scope list found"

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_json_non_finite_literals(self, tmp_path, literal):
        path = tmp_path / "scopes.json"
        path.write_text(
            '{"scopes": [{"id": "a", "progress": %s, "orderIndex": %s, "mandays": %s}]}'
            % (literal, literal, literal),
            encoding="utf-8",
        )
        result = load_items(path)
        item = result.items[0]
        assert item.percent_complete == 0
        assert item.mandays_planned is None
        assert len(result.warnings) == 3

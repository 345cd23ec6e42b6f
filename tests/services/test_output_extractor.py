"""Tests for title and table directive extraction from advisor text."""

import json

import pytest

from src.services.output_extractor import (
    TableSpec,
    derive_title,
    detect_format_from_message,
    extract_file_intent,
    extract_structured_output,
    extract_title,
    parse_markdown_table,
)


class TestExtractTitle:
    def test_marker_with_blank_line_dropped(self):
        title, body = extract_title("TITLE: Cash flow\n\nFirst paragraph\nSecond")
        assert title == "Cash flow"
        assert body == "First paragraph\nSecond"

    def test_marker_without_blank_line_keeps_second_line(self):
        title, body = extract_title("TITLE: Cash flow\nFirst paragraph")
        assert title == "Cash flow"
        assert body == "First paragraph"

    def test_leading_whitespace_before_marker(self):
        title, _ = extract_title("   TITLE:   Spaced out   \nbody")
        assert title == "Spaced out"

    def test_title_truncated_to_80(self):
        title, _ = extract_title("TITLE: " + "a" * 120 + "\nbody")
        assert title == "a" * 80

    def test_empty_marker_yields_no_title(self):
        title, body = extract_title("TITLE:\n\nbody")
        assert title is None
        assert body == "body"

    def test_no_marker_keeps_whole_text(self):
        raw = "Just advice\n\nwith lines"
        assert extract_title(raw) == (None, raw)

    def test_marker_on_later_line_is_ignored(self):
        raw = "Intro\nTITLE: Not a title"
        assert extract_title(raw) == (None, raw)


class TestDeriveTitle:
    def test_first_non_blank_line(self):
        assert derive_title("\n  \n  Hello there \nrest") == "Hello there"

    def test_blank_text(self):
        assert derive_title("  \n\n") is None


class TestFileIntent:
    def test_fenced_json_round_trip(self):
        table = {"headers": ["A", "B"], "rows": [["1", "2"]]}
        directive = json.dumps({"output_format": "csv", "table": table})
        text = f"Some prose about numbers.\n\n```json\n{directive}\n```\nThanks!"

        intent = extract_file_intent(text)

        assert intent is not None
        assert intent.output_format == "csv"
        assert intent.table.headers == ["A", "B"]
        assert intent.table.rows == [["1", "2"]]

    def test_bare_fence(self):
        text = '```\n{"output_format": "xlsx", "table": {"headers": ["X"], "rows": [["y"]]}}\n```'
        intent = extract_file_intent(text)
        assert intent.output_format == "xlsx"

    def test_brace_span_without_fence(self):
        text = (
            'Here you go {"output_format": "xlsx", '
            '"table": {"headers": ["Q"], "rows": [["1"], ["2"]]}} enjoy'
        )
        intent = extract_file_intent(text)
        assert intent.table.rows == [["1"], ["2"]]

    def test_malformed_json_is_none(self):
        assert extract_file_intent("```json\n{not json}\n```") is None

    def test_wrong_shape_is_none(self):
        assert extract_file_intent('{"output_format": "csv"}') is None

    def test_plain_prose_is_none(self):
        assert extract_file_intent("No structure here") is None


class TestMarkdownTable:
    def test_parses_headers_and_rows(self):
        text = "Intro\n| A | B |\n|---|---|\n| 1 | 2 |\n| 3 | 4 |\nOutro"
        table = parse_markdown_table(text)
        assert table == TableSpec(headers=["A", "B"], rows=[["1", "2"], ["3", "4"]])

    def test_short_rows_padded_and_long_rows_truncated(self):
        text = "| A | B | C |\n|---|---|---|\n| 1 |\n| 1 | 2 | 3 | 4 |"
        table = parse_markdown_table(text)
        assert table.rows == [["1", "", ""], ["1", "2", "3"]]

    def test_only_first_table_is_used(self):
        text = "| A |\n|---|\n| 1 |\n\n| B |\n|---|\n| 2 |"
        assert parse_markdown_table(text).headers == ["A"]

    def test_blank_inner_cell_keeps_its_column(self):
        text = "| Q | Cost | Revenue |\n|---|---|---|\n| Q1 |  | 300 |"
        table = parse_markdown_table(text)
        assert table.rows == [["Q1", "", "300"]]

    def test_blank_inner_header_keeps_its_column(self):
        text = "| Item |  | Total |\n|---|---|---|\n| a | b | c |"
        table = parse_markdown_table(text)
        assert table.headers == ["Item", "", "Total"]
        assert table.rows == [["a", "b", "c"]]

    def test_all_blank_rows_skipped(self):
        text = "| A | B |\n|---|---|\n|  |  |\n| 1 | 2 |"
        assert parse_markdown_table(text).rows == [["1", "2"]]

    def test_header_without_rows_is_none(self):
        assert parse_markdown_table("| A | B |\n|---|---|") is None

    def test_no_table_is_none(self):
        assert parse_markdown_table("nothing tabular") is None


class TestDetectFormat:
    @pytest.mark.parametrize(
        "message,expected",
        [
            ("export as CSV please", "csv"),
            ("comma-separated list", "csv"),
            ("put it in Excel", "xlsx"),
            ("spreadsheet with totals", "xlsx"),
            ("just a table", "xlsx"),
        ],
    )
    def test_keywords(self, message, expected):
        assert detect_format_from_message(message) == expected


class TestExtractStructuredOutput:
    def test_title_and_markdown_table_scenario(self):
        raw = "TITLE: Tax tips\n\nHere's advice:\n| A | B |\n|---|---|\n| 1 | 2 |"

        extracted = extract_structured_output(raw, "give me a table")

        assert extracted.title == "Tax tips"
        assert extracted.body.startswith("Here's advice:")
        assert extracted.directive.table.headers == ["A", "B"]
        assert extracted.directive.table.rows == [["1", "2"]]
        assert extracted.directive.output_format == "xlsx"

    def test_markdown_fallback_uses_user_format(self):
        raw = "| A |\n|---|\n| 1 |"
        extracted = extract_structured_output(raw, "as csv")
        assert extracted.directive.output_format == "csv"

    def test_json_directive_wins_over_markdown_table(self):
        directive = json.dumps(
            {"output_format": "csv", "table": {"headers": ["J"], "rows": [["j"]]}}
        )
        raw = f"| M |\n|---|\n| m |\n\n```json\n{directive}\n```"
        extracted = extract_structured_output(raw, "excel")
        assert extracted.directive.table.headers == ["J"]
        assert extracted.directive.output_format == "csv"

    def test_markdown_scan_is_idempotent_on_body(self):
        raw = "TITLE: Plan\n\nText\n| A | B |\n|---|---|\n| 1 | 2 |\nmore"
        extracted = extract_structured_output(raw, "")
        assert parse_markdown_table(extracted.body) == parse_markdown_table(raw)
        assert extracted.directive.table == parse_markdown_table(raw)

    def test_explicit_format_kept_for_markdown_table(self):
        raw = "| X | Y |\n|---|---|\n| 1 | 2 |"
        extracted = extract_structured_output(raw, "excel please", output_format="csv")
        assert extracted.directive.output_format == "csv"
        assert extracted.directive.table.rows == [["1", "2"]]

    def test_explicit_table_stands_without_intent(self):
        table = TableSpec(headers=["Mine"], rows=[["row"]])
        extracted = extract_structured_output("No table here.", "", "xlsx", table)
        assert extracted.directive.table == table
        assert extracted.directive.output_format == "xlsx"

    def test_intent_fills_missing_table(self):
        directive = json.dumps(
            {"output_format": "csv", "table": {"headers": ["J"], "rows": [["j"]]}}
        )
        raw = f"```json\n{directive}\n```"
        extracted = extract_structured_output(raw, "", output_format="xlsx")
        assert extracted.directive.table.headers == ["J"]
        assert extracted.directive.output_format == "csv"

    def test_table_without_format_and_no_text_table_is_none(self):
        table = TableSpec(headers=["A"], rows=[["1"]])
        extracted = extract_structured_output("Plain.", "", table=table)
        assert extracted.directive is None

    def test_no_directive(self):
        extracted = extract_structured_output("Plain advice.", "hi")
        assert extracted.title is None
        assert extracted.body == "Plain advice."
        assert extracted.directive is None

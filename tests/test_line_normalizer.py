"""Tests for gcode_toolpath.line_normalizer."""
import pytest

from gcode_toolpath.line_normalizer import normalize_line, parse_number, split_lines


def codes(line):
    return [w.code for w in line.words]


class TestSplitLines:
    def test_empty_buffer_has_no_lines(self):
        assert split_lines("") == []

    def test_mixed_separators(self):
        assert split_lines("G0 X1\r\nG1 X2\rG1 X3\nG1 X4") == [
            "G0 X1",
            "G1 X2",
            "G1 X3",
            "G1 X4",
        ]

    def test_trailing_separator_leaves_empty_line(self):
        assert split_lines("G1 X1\n") == ["G1 X1", ""]


class TestNormalizeLine:
    def test_strips_line_number_and_splits_packed_words(self):
        line = normalize_line("N10 G01 X10Y20", 3)
        assert line.index == 3
        assert codes(line) == ["G1", "X10", "Y20"]
        assert line.text == "G01 X10 Y20"
        assert not line.is_comment

    def test_lower_case_and_gap_after_letter(self):
        line = normalize_line("g1 x 10 y-2.5", 0)
        assert [(w.letter, w.value) for w in line.words] == [
            ("G", 1.0),
            ("X", 10.0),
            ("Y", -2.5),
        ]

    def test_decimal_opcode_kept(self):
        line = normalize_line("G90.1 M09", 0)
        assert codes(line) == ["G90.1", "M9"]

    @pytest.mark.parametrize("text", ["; note", "(header)", "<Idle|MPos:0,0,0>", "%", "  ;indented"])
    def test_comment_lines(self, text):
        line = normalize_line(text, 0)
        assert line.is_comment
        assert line.words == ()
        assert line.text == text
        assert line.original == text

    def test_inline_and_trailing_comments_removed(self):
        line = normalize_line("G1 X10 (move over) Y5 ; done", 0)
        assert codes(line) == ["G1", "X10", "Y5"]
        assert line.original == "G1 X10 (move over) Y5 ; done"

    def test_blank_line_yields_no_words(self):
        line = normalize_line("   ", 7)
        assert not line.is_comment
        assert line.words == ()
        assert line.is_empty

    def test_line_number_only_is_empty(self):
        assert normalize_line("N100", 0).is_empty

    def test_malformed_number_kept_as_defect(self):
        line = normalize_line("G1 Xabc Y5", 0)
        bad = line.malformed_words()
        assert len(bad) == 1
        assert bad[0].letter == "X"
        assert bad[0].value is None
        assert line.words[-1].value == 5.0

    def test_stray_token(self):
        line = normalize_line("$H", 0)
        assert line.stray == ("$",)
        assert [w.letter for w in line.words] == ["H"]

    def test_byte_order_mark_ignored(self):
        assert codes(normalize_line("\ufeffG0 X1", 0)) == ["G0", "X1"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("10", 10.0),
        ("-2.5", -2.5),
        ("+.5", 0.5),
        ("3.", 3.0),
        ("", None),
        ("1.2.3", None),
        ("nan", None),
        ("9" * 400, None),
    ],
)
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected

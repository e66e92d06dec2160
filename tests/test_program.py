"""Tests for gcode_toolpath.program, run end to end through the dispatcher."""
import math

import pytest

from gcode_toolpath import ParserConfig, parse_lines, parse_program
from gcode_toolpath.segment_emitter import Marker, MotionSegment, bucket_range
from gcode_toolpath.types import MotionKind, Opcode, Plane
from gcode_toolpath.utils.exceptions import GcodeParseError

H = math.sqrt(75.0)


def parse(text, **kwargs):
    result = parse_program(text, **kwargs)
    assert result is not None
    return result


class TestLinearMotion:
    def test_straight_feed_move(self):
        result = parse("G1 X10 Y0 F200")
        seg = result.entries[0]
        assert isinstance(seg, MotionSegment)
        assert seg.kind is MotionKind.FEED
        assert seg.start == (0.0, 0.0, 0.0)
        assert seg.end == (10.0, 0.0, 0.0)
        assert seg.distance == pytest.approx(10.0)
        assert seg.distance_sum == pytest.approx(10.0)
        assert seg.time == pytest.approx(0.066)

    def test_rapid_without_feed_uses_fallback(self):
        seg = parse("G0 X10").entries[0]
        assert seg.kind is MotionKind.RAPID
        assert seg.time == pytest.approx(0.132)

    def test_feed_is_modal(self):
        result = parse("G1 X10 F200\nG1 X20")
        assert result.entries[1].feed_rate == 200.0

    def test_coordinates_reuse_last_motion(self):
        result = parse("G1 X1\nX2\nY3")
        assert all(isinstance(e, MotionSegment) for e in result.entries)
        assert [e.opcode for e in result.entries] == [Opcode.G1] * 3
        assert result.position_at(2) == (2.0, 3.0, 0.0)

    def test_bare_coordinates_before_any_motion(self):
        entry = parse("X10").entries[0]
        assert isinstance(entry, Marker)
        assert entry.fake
        assert entry.position == (0.0, 0.0, 0.0)

    def test_incremental(self):
        assert parse("G91\nG1 X5\nX5").position_at(2) == (10.0, 0.0, 0.0)

    def test_packed_mode_words(self):
        seg = parse("G17 G21 G90 G0 X1 Y2 Z3").entries[0]
        assert seg.kind is MotionKind.RAPID
        assert seg.end == (1.0, 2.0, 3.0)

    def test_malformed_number_keeps_axis(self):
        result = parse("G1 X10\nG1 Xabc Y5")
        assert result.position_at(1) == (10.0, 5.0, 0.0)
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].line_index == 1

    def test_number_too_large_for_float_is_diagnosed(self):
        result = parse("G1 X1\nG" + "9" * 400 + "\nG1 X2")
        assert result.line_count == 3
        assert result.entries[1].fake
        assert result.position_at(2) == (2.0, 0.0, 0.0)
        assert [d.line_index for d in result.diagnostics] == [1]

    def test_huge_tool_number_is_diagnosed(self):
        result = parse("T" + "9" * 400 + "\nG1 X2")
        assert result.entries[1].tool is None
        assert result.position_at(1) == (2.0, 0.0, 0.0)
        assert len(result.diagnostics) == 1

    def test_huge_axis_value_keeps_axis(self):
        result = parse("G1 X5\nG1 X" + "9" * 400 + " Y1")
        assert result.position_at(1) == (5.0, 1.0, 0.0)


class TestOffsets:
    def test_g92_shifts_later_moves(self):
        result = parse("G1 X10\nG92 X0\nG1 X5")
        marker = result.entries[1]
        assert isinstance(marker, Marker)
        assert not marker.fake
        assert marker.opcode == "G92"
        assert result.position_at(2) == (15.0, 0.0, 0.0)

    def test_g92_repeated_does_not_stack(self):
        result = parse("G1 X10\nG92 X0\nG92 X0\nG1 X0")
        assert result.position_at(3) == (10.0, 0.0, 0.0)

    def test_incremental_after_g92(self):
        result = parse("G1 X10\nG92 X0\nG91 G1 X5")
        assert result.position_at(2) == (15.0, 0.0, 0.0)

    def test_g92_1_clears_offsets(self):
        result = parse("G1 X10\nG92 X0\nG92.1\nG1 X5")
        assert result.entries[2].opcode == "G92.1"
        assert result.position_at(3) == (5.0, 0.0, 0.0)


class TestArcs:
    def test_full_circle(self):
        result = parse("G2 X0 Y0 I5 J0")
        seg = result.entries[0]
        assert seg.kind is MotionKind.ARC
        assert len(seg.points) == 21
        assert seg.points[10] == pytest.approx((10.0, 0.0, 0.0), abs=1e-9)
        assert len(result.arcs[Plane.XY]) == 1
        assert result.bounds[1] == pytest.approx(10.0)

    def test_radius_minor_arc(self):
        seg = parse("G2 X10 Y0 R10").entries[0]
        assert seg.points[10] == pytest.approx((5.0, 10.0 - H, 0.0), abs=1e-9)

    def test_negative_radius_major_arc(self):
        seg = parse("G2 X10 Y0 R-10").entries[0]
        assert seg.points[10] == pytest.approx((5.0, 10.0 + H, 0.0), abs=1e-9)

    def test_counter_clockwise_radius(self):
        seg = parse("G3 X10 Y0 R10").entries[0]
        assert seg.points[10] == pytest.approx((5.0, H - 10.0, 0.0), abs=1e-9)

    def test_zero_radius_uses_center_words(self):
        seg = parse("G2 X10 Y0 R0 I5 J0").entries[0]
        assert seg.points[10] == pytest.approx((5.0, 5.0, 0.0), abs=1e-9)

    def test_xz_plane(self):
        result = parse("G18\nG2 X10 Z0 I5 K0")
        assert len(result.arcs[Plane.XZ]) == 1
        assert result.arcs[Plane.XY] == []
        seg = result.entries[1]
        assert seg.plane is Plane.XZ
        assert seg.points[10] == pytest.approx((5.0, 0.0, 5.0), abs=1e-9)

    def test_absolute_arc_centers(self):
        result = parse("G90.1\nG1 X10\nG2 X0 Y0 I5 J0")
        assert result.entries[2].points[10] == pytest.approx((5.0, -5.0, 0.0), abs=1e-9)

    def test_arc_resolution_from_config(self):
        config = ParserConfig(arc_segments=8)
        seg = parse("G2 X0 Y0 I5 J0", config=config).entries[0]
        assert len(seg.points) == 9

    def test_center_words_alone_repeat_the_arc(self):
        result = parse("G2 X0 Y0 I5 J0\nI5 J0")
        seg = result.entries[1]
        assert isinstance(seg, MotionSegment)
        assert seg.opcode is Opcode.G2
        assert seg.points[10] == pytest.approx((10.0, 0.0, 0.0), abs=1e-9)
        assert len(result.arcs[Plane.XY]) == 2

    def test_radius_word_alone_repeats_the_arc(self):
        result = parse("G2 X10 Y0 R10\nR5")
        assert result.entries[1].kind is MotionKind.ARC
        assert result.arcs[Plane.XY][1].radius == pytest.approx(5.0)
        assert result.position_at(1) == (10.0, 0.0, 0.0)

    def test_center_words_after_linear_move_do_not_move(self):
        result = parse("G1 X1\nI5 J0")
        assert isinstance(result.entries[1], Marker)
        assert result.entries[1].fake

    def test_feed_alone_after_arc_does_not_move(self):
        result = parse("G2 X0 Y0 I5 J0\nF300")
        assert isinstance(result.entries[1], Marker)


# Start (0, 0) and end (6, 8) in the plane: 10 mm chord, so with |R| = 10 the
# candidates sit H along the chord normal (-8, 6)/10 either side of (3, 4).
RIGHT_CENTER = (3.0 + 0.8 * H, 4.0 - 0.6 * H)
LEFT_CENTER = (3.0 - 0.8 * H, 4.0 + 0.6 * H)

PLANE_SETUP = {
    Plane.XZ: ("G0 Y2\nG18", "X6 Z8", 1, 2.0),
    Plane.YZ: ("G0 X1\nG19", "Y6 Z8", 0, 1.0),
}


@pytest.mark.parametrize("plane", [Plane.XZ, Plane.YZ])
@pytest.mark.parametrize(
    "command, radius, center, minor",
    [
        ("G2", "10", RIGHT_CENTER, True),
        ("G2", "-10", LEFT_CENTER, False),
        ("G3", "10", LEFT_CENTER, True),
        ("G3", "-10", RIGHT_CENTER, False),
    ],
)
def test_radius_arcs_outside_xy_plane(plane, command, radius, center, minor):
    setup, target, fixed_axis, fixed = PLANE_SETUP[plane]
    result = parse(f"{setup}\n{command} {target} R{radius}")
    detail = result.arcs[plane][0]
    assert detail.center == pytest.approx(center, abs=1e-9)
    assert detail.radius == pytest.approx(10.0)
    sweep = detail.end_angle - detail.start_angle
    assert (abs(sweep) < math.pi) is minor
    assert (sweep < 0) is (command == "G2")
    seg = result.entries[2]
    assert all(p[fixed_axis] == pytest.approx(fixed) for p in seg.points)
    assert seg.points[-1] == result.position_at(2)


class TestMarkers:
    def test_tool_change(self):
        result = parse("T2 M6")
        marker = result.entries[0]
        assert isinstance(marker, Marker)
        assert not marker.fake
        assert marker.opcode == "M6"
        assert marker.tool == 2
        assert [(t.code, t.tool) for t in result.tool_markers] == [("M6", 2)]

    def test_tool_carries_to_segments(self):
        result = parse("T3\nG1 X1")
        assert result.entries[0].opcode == "T3"
        assert result.entries[1].tool == 3

    def test_spindle_codes(self):
        result = parse("M3 S1000\nG1 X1\nM5")
        start = result.entries[0]
        assert start.opcode == "M3"
        assert not start.fake
        assert [t.code for t in result.tool_markers] == ["M3", "M5"]
        assert result.tool_markers[1].position == (1.0, 0.0, 0.0)

    def test_program_end(self):
        result = parse("G1 X1\nM30")
        assert result.entries[1].opcode == "M30"
        assert not result.entries[1].fake
        assert result.tool_markers[-1].code == "M30"

    def test_unknown_command(self):
        marker = parse("G4 P1").entries[0]
        assert marker.fake
        assert marker.opcode == "G4"

    def test_comment_and_blank_lines(self):
        result = parse("; header\n\nG0 X1\n(done)")
        assert result.line_count == 4
        assert result.entries[0].is_comment
        assert result.entries[1].fake
        assert not result.entries[1].is_comment
        assert result.entries[3].position == (1.0, 0.0, 0.0)


class TestProgramShape:
    PROGRAM = "\n".join(
        [
            "%",
            "(sample)",
            "G21 G90",
            "G0 Z5",
            "G0 X0 Y0",
            "M3 S12000",
            "G1 Z-1 F300",
            "G1 X20",
            "G2 X20 Y0 I-10 J0",
            "G3 X0 Y0 R10",
            "",
            "G0 Z5",
            "M5",
            "M30",
        ]
    )

    def test_one_entry_per_line(self):
        result = parse(self.PROGRAM)
        assert result.line_count == 14
        assert [e.line_index for e in result.entries] == list(range(14))

    def test_histogram_counts_every_move(self):
        result = parse(self.PROGRAM)
        assert sum(result.histogram) == len(result.motion_segments()) == 7
        for seg in result.motion_segments():
            low, high = bucket_range(seg.bucket)
            assert low <= seg.distance < high

    def test_segments_are_continuous(self):
        result = parse(self.PROGRAM)
        previous = (0.0, 0.0, 0.0)
        for entry in result.entries:
            if isinstance(entry, MotionSegment):
                assert entry.start == previous
            previous = entry.position

    def test_totals_match_segments(self):
        result = parse(self.PROGRAM)
        segments = result.motion_segments()
        assert result.total_distance == pytest.approx(sum(s.distance for s in segments))
        assert result.total_time == pytest.approx(segments[-1].time_sum)

    def test_line_endings(self):
        result = parse("G1 X1\r\nG1 X2\rG1 X3")
        assert result.line_count == 3
        assert result.position_at(2) == (3.0, 0.0, 0.0)

    def test_trailing_newline_adds_empty_line(self):
        assert parse("G1 X1\n").line_count == 2

    def test_empty_program(self):
        result = parse("")
        assert result.entries == []
        assert result.bounds is None
        assert result.total_time == 0.0
        assert result.progress_fraction(0) == 0.0


class TestUnits:
    def test_last_unit_code_wins(self):
        result = parse("G20\nG1 X1\nG21\nG1 X2\nG20")
        assert result.inch
        assert result.scale_to_mm == 25.4
        assert result.position_at(3) == (2.0, 0.0, 0.0)

    def test_metric_by_default(self):
        result = parse("G1 X1")
        assert not result.inch
        assert result.scale_to_mm == 1.0

    def test_default_units_from_config(self):
        result = parse("G1 X1", config=ParserConfig(default_units="inch"))
        assert result.inch


class TestTimeQueries:
    def test_time_and_progress(self):
        result = parse("G1 X10 F100\n; halfway\nG1 X20")
        assert result.total_time == pytest.approx(0.264)
        assert result.time_at(1) == pytest.approx(0.132)
        assert result.remaining_time(1) == pytest.approx(0.132)
        assert result.progress_fraction(1) == pytest.approx(0.5)
        assert result.progress_fraction(2) == pytest.approx(1.0)
        assert result.position_at(1) == (10.0, 0.0, 0.0)

    def test_progress_without_motion_counts_lines(self):
        result = parse("; a\n; b")
        assert result.progress_fraction(0) == pytest.approx(0.5)


class TestProgressAndCancel:
    def test_progress_reports(self):
        seen = []
        parse_program("\n".join(["G1 X1"] * 25), progress=seen.append)
        assert seen == [0, 40, 80, 100]

    def test_custom_progress_interval(self):
        seen = []
        config = ParserConfig(progress_interval=2)
        parse_program("G1 X1\nG1 X2\nG1 X3\nG1 X4", config=config, progress=seen.append)
        assert seen == [0, 50, 100]

    def test_cancel_returns_none(self):
        assert parse_program("G1 X1\nG1 X2", keep_running=lambda: False) is None

    def test_cancel_mid_parse(self):
        answers = iter([True, False])
        result = parse_program(
            "\n".join(["G1 X1"] * 25), keep_running=lambda: next(answers)
        )
        assert result is None

    def test_parse_lines_accepts_lists(self):
        result = parse_lines(["G0 X1", "G0 X2"])
        assert result.position_at(1) == (2.0, 0.0, 0.0)

    @pytest.mark.parametrize("bad", [b"G1 X1", None, 42])
    def test_non_text_rejected(self, bad):
        with pytest.raises(GcodeParseError):
            parse_program(bad)

    def test_non_text_line_reports_its_position(self):
        with pytest.raises(GcodeParseError) as excinfo:
            parse_lines(["G1 X1", b"G1 X2"])
        assert excinfo.value.line_number == 2
        assert excinfo.value.line_content == repr(b"G1 X2")

    def test_options_are_keyword_only(self):
        with pytest.raises(TypeError):
            parse_program("G1 X1", ParserConfig())
        with pytest.raises(TypeError):
            parse_lines(["G1 X1"], ParserConfig())

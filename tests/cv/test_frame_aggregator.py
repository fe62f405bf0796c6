"""
Tests for colorvision.cv.frame_aggregator: display color priority,
region outlines, telemetry and the three-region scenario.
"""

import numpy as np
import pytest

from colorvision.cv.colors import Color, ColorObservation, TelemetryEntry
from colorvision.cv.frame_aggregator import aggregate_frame, select_display_color
from colorvision.cv.queries import find_best_region
from colorvision.cv.region_analysis import Region, RegionConfigError
from colorvision.cv.region_scanner import RegionResult

GREEN = (75, 200, 150)
YELLOW = (30, 150, 150)
RED = (178, 200, 150)
GRAY = (0, 20, 150)

REGIONS = [Region(0, 0, 50, 50), Region(50, 0, 50, 50), Region(100, 0, 50, 50)]


def make_result(**observations) -> RegionResult:
    """Helper building a RegionResult from color-name keyword arguments."""
    slots = []
    for color in (Color.GREEN, Color.RED, Color.BLUE, Color.YELLOW):
        slots.append(observations.get(color.value, ColorObservation()))
    return RegionResult(slots)


def seen(color: Color, score: float = 90.0, count: int = 1) -> ColorObservation:
    return ColorObservation(color=color, score=score, tile_count=count)


@pytest.fixture
def scenario_frame():
    """150x50 frame: region 0 saturated green, regions 1-2 neutral gray."""
    frame = np.full((50, 150, 3), GRAY, dtype=np.uint8)
    frame[:, 0:50] = GREEN
    return frame


class TestSelectDisplayColor:

    def test_nothing_detected_is_white(self):
        assert select_display_color(RegionResult()) == Color.WHITE

    def test_green_beats_everything(self):
        result = make_result(
            green=seen(Color.GREEN, 10.0),
            yellow=seen(Color.YELLOW, 99.0),
            red=seen(Color.RED, 99.0),
        )
        assert select_display_color(result) == Color.GREEN

    def test_yellow_beats_red_and_blue(self):
        result = make_result(
            yellow=seen(Color.YELLOW, 50.0),
            red=seen(Color.RED, 99.0),
            blue=seen(Color.BLUE, 99.0),
        )
        assert select_display_color(result) == Color.YELLOW

    def test_red_beats_blue(self):
        result = make_result(red=seen(Color.RED), blue=seen(Color.BLUE))
        assert select_display_color(result) == Color.RED

    def test_blue_alone(self):
        assert select_display_color(make_result(blue=seen(Color.BLUE))) == Color.BLUE

    def test_yellow_selected_on_presence_not_score(self):
        # A recorded yellow tile wins even with a non-positive score
        result = make_result(
            yellow=ColorObservation(color=Color.YELLOW, score=0.0, tile_count=1),
            red=seen(Color.RED),
        )
        assert select_display_color(result) == Color.YELLOW


class TestAggregateFrame:

    def test_three_region_scenario(self, scenario_frame):
        result = aggregate_frame(scenario_frame, REGIONS, num_regions=3)

        assert len(result.snapshot) == 3
        green = result.snapshot[0][Color.GREEN]
        assert green.color == Color.GREEN
        assert green.tile_count == 100
        assert green.score == pytest.approx(100.0)
        assert result.snapshot[1][Color.GREEN].tile_count == 0
        assert result.snapshot[2][Color.GREEN].tile_count == 0

        assert find_best_region(result.snapshot, Color.GREEN, 3) == 0

        outlines = result.marks[-3:]
        assert [m.color for m in outlines] == [Color.GREEN, Color.WHITE, Color.WHITE]
        assert all(m.line_width == 2 for m in outlines)
        assert outlines[1].upper_left == (50, 0)
        assert outlines[1].lower_right == (100, 50)

        # 100 tile marks plus 3 outlines
        assert len(result.marks) == 103

    def test_telemetry(self, scenario_frame):
        result = aggregate_frame(scenario_frame, REGIONS, num_regions=3)
        telemetry = {entry.label: entry.value for entry in result.telemetry}

        assert telemetry["Region 0 green score"] == pytest.approx(100.0)
        assert telemetry["Region 1 red score"] == 0.0
        assert telemetry["Red region"] is None
        assert telemetry["Blue region"] is None
        assert telemetry["Region 0 color"] == Color.GREEN
        assert telemetry["Region 2 color"] == Color.WHITE
        assert all(isinstance(entry, TelemetryEntry) for entry in result.telemetry)

    def test_idempotent(self, scenario_frame):
        scenario_frame[10:20, 60:70] = RED
        scenario_frame[30:40, 120:130] = YELLOW
        first = aggregate_frame(scenario_frame, REGIONS, num_regions=3)
        second = aggregate_frame(scenario_frame, REGIONS, num_regions=3)
        assert first.snapshot == second.snapshot
        assert first.marks == second.marks

    def test_capture_time_passed_through(self, scenario_frame):
        result = aggregate_frame(scenario_frame, REGIONS, 3, capture_time_ns=1234)
        assert result.capture_time_ns == 1234

    def test_extra_regions_skipped(self, scenario_frame):
        regions = REGIONS + [Region(0, 0, 10, 10)]
        result = aggregate_frame(scenario_frame, regions, num_regions=3)
        assert len(result.snapshot) == 3
        boxes = [(m.upper_left, m.lower_right) for m in result.marks]
        assert ((0, 0), (10, 10)) not in boxes

    def test_too_few_regions(self, scenario_frame):
        with pytest.raises(RegionConfigError):
            aggregate_frame(scenario_frame, REGIONS[:2], num_regions=3)

    def test_region_outside_frame(self, scenario_frame):
        regions = REGIONS[:2] + [Region(120, 0, 50, 50)]
        with pytest.raises(RegionConfigError):
            aggregate_frame(scenario_frame, regions, num_regions=3)

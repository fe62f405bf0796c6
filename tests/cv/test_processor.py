"""
Unit tests for colorvision.cv.processor module.

Tests cover:
- VisionConfig defaults and validation
- End-to-end classification of HSV and camera frames
- Query passthroughs before and after the first frame
- Region reconfiguration and stream-size checks
- Debug drawing and performance statistics
"""

import threading
import unittest

import numpy as np

from colorvision.cv.colors import Color
from colorvision.cv.processor import ColorVisionProcessor, VisionConfig
from colorvision.cv.region_analysis import DEFAULT_REGIONS, Region, RegionConfigError
from colorvision.cv.tile_classifier import ClassifierConfig

GREEN_HSV = (75, 200, 150)
GRAY_HSV = (0, 20, 150)


def scenario_config() -> VisionConfig:
    return VisionConfig(
        regions=[Region(0, 0, 50, 50), Region(50, 0, 50, 50), Region(100, 0, 50, 50)],
    )


def scenario_hsv_frame() -> np.ndarray:
    frame = np.full((50, 150, 3), GRAY_HSV, dtype=np.uint8)
    frame[:, 0:50] = GREEN_HSV
    return frame


class TestVisionConfig(unittest.TestCase):
    """Test VisionConfig defaults and validation."""

    def test_defaults(self):
        config = VisionConfig()
        self.assertEqual(config.num_regions, 3)
        self.assertEqual(config.regions, list(DEFAULT_REGIONS))
        self.assertEqual(config.regions[0], Region(109, 98, 60, 80))
        self.assertEqual(config.classifier.min_saturation, 100)
        self.assertEqual(config.classifier.min_brightness, 75)
        self.assertEqual(config.classifier.max_std_dev, 10.0)
        self.assertEqual(config.classifier.tile_size, 5)
        self.assertEqual(config.input_color_order, "RGB")

    def test_default_regions_not_shared(self):
        a, b = VisionConfig(), VisionConfig()
        a.regions[0] = Region(0, 0, 5, 5)
        self.assertEqual(b.regions[0], DEFAULT_REGIONS[0])

    def test_invalid_values_reported_together(self):
        config = VisionConfig(
            regions=[Region(0, 0, 10, 10)],
            classifier=ClassifierConfig(tile_size=0, max_std_dev=-1),
            input_color_order="YUV",
        )
        with self.assertRaises(RegionConfigError) as ctx:
            config.validate()
        message = str(ctx.exception)
        self.assertIn("Expected at least 3 regions", message)
        self.assertIn("tile_size", message)
        self.assertIn("max_std_dev", message)
        self.assertIn("input_color_order", message)

    def test_processor_rejects_invalid_config(self):
        with self.assertRaises(RegionConfigError):
            ColorVisionProcessor(VisionConfig(num_regions=0))

    def test_malformed_region_geometry(self):
        with self.assertRaises(RegionConfigError):
            Region(0, 0, 0, 10)
        with self.assertRaises(RegionConfigError):
            Region(-1, 0, 10, 10)


class TestProcessHsv(unittest.TestCase):
    """Test the three-region scenario through the processor."""

    def setUp(self):
        self.processor = ColorVisionProcessor(scenario_config())

    def test_not_initialized_before_first_frame(self):
        self.assertFalse(self.processor.is_camera_initialized())
        self.assertIsNone(self.processor.get_region(Color.GREEN))
        self.assertFalse(self.processor.region_has_color(0, Color.GREEN))
        self.assertEqual(self.processor.get_color_data(), ())

    def test_scenario(self):
        result = self.processor.process_hsv(scenario_hsv_frame(), capture_time_ns=42)

        self.assertTrue(self.processor.is_camera_initialized())
        self.assertEqual(self.processor.get_region(Color.GREEN), 0)
        self.assertTrue(self.processor.region_has_color(0, Color.GREEN))
        self.assertTrue(self.processor.is_region_green(0))
        self.assertFalse(self.processor.region_has_color(1, Color.GREEN))
        self.assertFalse(self.processor.is_region_red(0))
        self.assertFalse(self.processor.is_region_blue(0))
        self.assertFalse(self.processor.is_region_yellow(0))

        outlines = [m.color for m in result.marks[-3:]]
        self.assertEqual(outlines, [Color.GREEN, Color.WHITE, Color.WHITE])

        self.assertIs(self.processor.get_color_data(), self.processor.store.current())
        self.assertEqual(self.processor.store.metadata().capture_time_ns, 42)
        labels = [entry.label for entry in self.processor.get_telemetry_data()]
        self.assertIn("Region 0 color", labels)

    def test_same_frame_twice_is_identical(self):
        frame = scenario_hsv_frame()
        self.processor.process_hsv(frame)
        first = self.processor.get_color_data()
        self.processor.process_hsv(frame)
        self.assertEqual(first, self.processor.get_color_data())

    def test_out_of_range_query(self):
        with self.assertRaises(IndexError):
            self.processor.region_has_color(3, Color.GREEN)

    def test_performance_stats(self):
        self.assertEqual(self.processor.get_performance_stats()["count"], 0)
        self.processor.process_hsv(scenario_hsv_frame())
        stats = self.processor.get_performance_stats()
        self.assertEqual(stats["count"], 1)
        self.assertGreaterEqual(stats["max_ms"], stats["min_ms"])
        self.processor.reset_performance_stats()
        self.assertEqual(self.processor.get_performance_stats()["count"], 0)

    def test_query_from_other_thread(self):
        self.processor.process_hsv(scenario_hsv_frame())
        answers = []
        worker = threading.Thread(target=lambda: answers.append(self.processor.get_region(Color.GREEN)))
        worker.start()
        worker.join(timeout=5)
        self.assertEqual(answers, [0])


class TestProcessFrame(unittest.TestCase):
    """Test camera frame conversion and debug drawing with default regions."""

    def _make_rgb_frame(self) -> np.ndarray:
        frame = np.full((240, 320, 3), 128, dtype=np.uint8)  # gray
        frame[98:178, 109:169] = (255, 0, 0)  # region 0 pure red
        return frame

    def test_rgb_frame(self):
        processor = ColorVisionProcessor()
        frame = self._make_rgb_frame()
        original = frame.copy()

        output = processor.process_frame(frame, capture_time_ns=1)

        np.testing.assert_array_equal(frame, original)
        self.assertEqual(output.shape, frame.shape)
        self.assertEqual(processor.get_region(Color.RED), 0)
        self.assertTrue(processor.is_region_red(0))
        self.assertFalse(processor.is_region_red(1))

        # Region outlines: red for region 0, white for region 1
        self.assertEqual(tuple(output[98, 109]), (255, 0, 0))
        self.assertEqual(tuple(output[98, 181]), (255, 255, 255))

        red = processor.get_color_data()[0][Color.RED]
        self.assertEqual(red.tile_count, 12 * 16)
        self.assertAlmostEqual(red.score, 100.0)
        self.assertEqual((red.x, red.y), (109, 98))

    def test_bgr_frame(self):
        processor = ColorVisionProcessor(VisionConfig(input_color_order="BGR"))
        frame = self._make_rgb_frame()[:, :, ::-1].copy()

        output = processor.process_frame(frame)

        self.assertEqual(processor.get_region(Color.RED), 0)
        self.assertEqual(tuple(output[98, 109]), (0, 0, 255))


class TestRegionConfiguration(unittest.TestCase):
    """Test init() and set_region()."""

    def test_init_checks_regions_against_stream(self):
        processor = ColorVisionProcessor()
        processor.init(320, 240)
        with self.assertRaises(RegionConfigError):
            ColorVisionProcessor().init(160, 120)

    def test_set_region(self):
        processor = ColorVisionProcessor(scenario_config())
        processor.set_region(2, Region(0, 0, 50, 50))
        processor.process_hsv(scenario_hsv_frame())
        self.assertTrue(processor.is_region_green(2))

    def test_set_region_index_out_of_range(self):
        processor = ColorVisionProcessor()
        with self.assertRaises(IndexError):
            processor.set_region(3, Region(0, 0, 10, 10))

    def test_set_region_outside_stream(self):
        processor = ColorVisionProcessor()
        processor.init(320, 240)
        with self.assertRaises(RegionConfigError):
            processor.set_region(0, Region(300, 200, 60, 80))

    def test_region_outside_frame_fails_processing(self):
        processor = ColorVisionProcessor()
        with self.assertRaises(RegionConfigError):
            processor.process_hsv(np.zeros((100, 100, 3), dtype=np.uint8))
        self.assertFalse(processor.is_camera_initialized())

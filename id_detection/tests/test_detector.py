"""
End-to-end tests for DocumentDetector on synthetic card images
"""

from concurrent.futures import ThreadPoolExecutor

import cv2
import numpy as np
import pytest

from id_detection import DocumentDetector, FailureReason, GENERIC_PROFILE
from id_detection.params import ParameterBundle
from id_detection.synthetic import SCENARIOS, blank_image, generate_document, generate_suite


def edge_angles(corners):
    """Undirected edge angles in degrees, [0, 180)"""
    pts = np.asarray(corners, dtype=np.float64)
    deltas = np.roll(pts, -1, axis=0) - pts
    return np.degrees(np.arctan2(deltas[:, 1], deltas[:, 0])) % 180.0


def angle_difference(a, b):
    diff = abs(a - b) % 180.0
    return min(diff, 180.0 - diff)


class TestDocumentDetector:
    """Test cases for DocumentDetector"""

    @pytest.fixture
    def detector(self):
        """Fixture to create detector instance"""
        return DocumentDetector()

    @pytest.fixture
    def plain(self):
        return generate_document((800, 600))

    def test_detect_plain_card(self, detector, plain):
        """Test a centered card is found with high confidence"""
        image, truth = plain
        bounds = detector.detect(image)

        assert bounds is not None, "Card should be detected"
        assert bounds.confidence >= 0.8, f"Confidence too low: {bounds.confidence}"

        expected = truth / np.array([800, 600], dtype=np.float32)
        np.testing.assert_allclose(bounds.as_array(), expected, atol=0.01)

    def test_corners_in_unit_square(self, detector, plain):
        bounds = detector.detect(plain[0])
        for x, y in bounds.corners:
            assert 0.0 <= x <= 1.0
            assert 0.0 <= y <= 1.0
        assert 0.0 <= bounds.confidence <= 1.0

    def test_first_corner_top_left(self, detector, plain):
        """Test the first corner is the one nearest the image origin"""
        bounds = detector.detect(plain[0])
        distances = [np.hypot(x, y) for x, y in bounds.corners]
        assert int(np.argmin(distances)) == 0

    @pytest.mark.parametrize("angle", [15.0, 30.0])
    def test_rotated_card(self, detector, angle):
        """Test rotated cards keep the true edge directions"""
        image, truth = generate_document((800, 600), angle=angle)
        bounds = detector.detect(image)

        assert bounds is not None, f"Card rotated {angle} degrees should be detected"

        detected = bounds.to_pixels(800, 600)
        true_angles = edge_angles(truth)
        for found in edge_angles(detected):
            assert min(angle_difference(found, t) for t in true_angles) < 3.0

        for corner in detected:
            assert np.min(np.hypot(*(truth - corner).T)) < 8.0

    def test_scale_invariance(self, detector):
        """Test the same scene at two resolutions gives the same normalized corners"""
        large, _ = generate_document((1600, 1200), card_size=(856, 540))
        small = cv2.resize(large, (800, 600), interpolation=cv2.INTER_AREA)

        large_bounds = detector.detect(large)
        small_bounds = detector.detect(small)

        assert large_bounds is not None and small_bounds is not None
        np.testing.assert_allclose(large_bounds.as_array(), small_bounds.as_array(), atol=0.01)

    def test_working_corners_round_trip(self, detector):
        """Test working corners divided by the scale factor match denormalized bounds"""
        image, _ = generate_document((1600, 1200), card_size=(856, 540))
        result = detector.run(image)

        assert result.found
        assert result.scale_factor == pytest.approx(0.75)
        np.testing.assert_allclose(
            result.working_corners / result.scale_factor,
            result.bounds.to_pixels(1600, 1200),
            atol=0.1
        )

    def test_blank_image(self, detector):
        """Test a uniform image yields no document"""
        result = detector.run(blank_image((800, 600)))

        assert not result.found
        assert result.failure == FailureReason.NO_CANDIDATES
        assert detector.detect(blank_image((800, 600))) is None

    @pytest.mark.parametrize("image", [
        None,
        np.zeros((0, 0, 3), dtype=np.uint8),
        np.zeros(5, dtype=np.uint8),
        np.zeros((10, 10, 2), dtype=np.uint8),
        np.zeros((10, 10, 5), dtype=np.uint8),
        np.zeros((4, 10, 10, 3), dtype=np.uint8),
    ])
    def test_invalid_image(self, detector, image):
        """Test unusable images are reported as a failure, not raised"""
        result = detector.run(image)
        assert result.failure == FailureReason.INVALID_IMAGE
        assert detector.detect(image) is None

    def test_grayscale_and_bgra(self, detector, plain):
        image, _ = plain
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        bgra = cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)

        reference = detector.detect(image)
        for variant in (gray, bgra):
            bounds = detector.detect(variant)
            assert bounds is not None
            np.testing.assert_allclose(bounds.as_array(), reference.as_array(), atol=0.005)

    @pytest.fixture(scope="class")
    def suite(self):
        return generate_suite((800, 600))

    @pytest.mark.parametrize("name", SCENARIOS)
    def test_scenario_detected(self, detector, suite, name):
        """Test every synthetic scenario is found close to the true card corners"""
        image, truth = suite[name]
        bounds = detector.detect(image)

        assert bounds is not None, f"Scenario {name} should be detected"
        assert 0.5 <= bounds.confidence <= 1.0, f"{name}: confidence {bounds.confidence}"

        detected = bounds.to_pixels(800, 600)
        for corner in detected:
            distance = np.min(np.hypot(*(truth - corner).T))
            assert distance < 15.0, f"{name}: corner {corner} is {distance:.1f}px from the card"

        nearest = [int(np.argmin(np.hypot(*(truth - corner).T))) for corner in detected]
        assert sorted(nearest) == [0, 1, 2, 3], f"{name}: corners do not cover all four card corners"

    def test_overrides_applied(self, detector, plain):
        """Test explicit overrides replace the adaptive values"""
        image, _ = plain
        result = detector.run(image, overrides={'min_area_ratio': '0.5'})

        assert not result.found
        assert result.failure == FailureReason.NO_CANDIDATES

    def test_invalid_override(self, detector, plain):
        with pytest.raises(ValueError):
            detector.run(plain[0], overrides={'min_area_ratio': 'abc'})

    def test_explicit_params(self, detector, plain):
        params = ParameterBundle(min_area_ratio=0.01, max_area_ratio=0.9)
        assert detector.detect(plain[0], params) is not None

    def test_generic_profile(self, plain):
        bounds = DocumentDetector(profile=GENERIC_PROFILE).detect(plain[0])
        assert bounds is not None
        assert bounds.confidence >= 0.8

    def test_small_working_dimension(self, plain):
        """Test a lower working resolution still finds the card"""
        detector = DocumentDetector(max_working_dimension=400)
        result = detector.run(plain[0])

        assert result.found
        assert result.scale_factor == pytest.approx(0.5)

    def test_concurrent_calls(self, detector):
        """Test one detector shared between threads gives sequential results"""
        images = [generate_document((800, 600), angle=angle)[0] for angle in (0.0, 10.0, 20.0, 30.0)]
        sequential = [detector.detect(image) for image in images]

        with ThreadPoolExecutor(max_workers=4) as pool:
            concurrent = list(pool.map(detector.detect, images))

        assert concurrent == sequential

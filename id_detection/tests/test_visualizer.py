"""
Tests for BoundsVisualizer and the synthetic image generators
"""

import numpy as np
import pytest

from id_detection import BoundsVisualizer, DocumentBounds
from id_detection.synthetic import (
    ID1_CARD_SIZE,
    SCENARIOS,
    blank_image,
    generate_document,
    generate_suite,
    with_perspective,
)


class TestBoundsVisualizer:
    """Test cases for BoundsVisualizer"""

    @pytest.fixture
    def visualizer(self):
        return BoundsVisualizer()

    @pytest.fixture
    def bounds(self):
        return DocumentBounds((0.25, 0.25), (0.75, 0.25), (0.75, 0.75), (0.25, 0.75), 0.9)

    @pytest.fixture
    def image(self):
        return blank_image((400, 300))

    def test_visualize_draws(self, visualizer, image, bounds):
        """Test drawing changes a copy and leaves the input untouched"""
        original = image.copy()
        result = visualizer.visualize(image, bounds)

        assert result.shape == image.shape
        assert not np.array_equal(result, image), "Visualization should change pixels"
        np.testing.assert_array_equal(image, original)

    def test_border_color(self, visualizer, image, bounds):
        """Test the frame is drawn at the document edge"""
        result = visualizer.visualize(image, bounds, draw_overlay=False)
        # Middle of the top edge at (200, 75)
        blue, green, red = (int(c) for c in result[75, 200])
        assert green > 150 and green > blue and green > red

    def test_no_bounds(self, visualizer, image):
        assert visualizer.visualize(image, None) is image

    def test_grayscale_input(self, visualizer, bounds):
        gray = np.full((300, 400), 128, dtype=np.uint8)
        result = visualizer.visualize(gray, bounds)
        assert result.shape == (300, 400, 3)

    def test_visualize_with_info(self, visualizer, image, bounds):
        result = visualizer.visualize_with_info(image, bounds)
        assert result.shape == image.shape
        assert visualizer.visualize_with_info(image, None) is image

    def test_side_by_side(self, visualizer, image, bounds):
        combined = visualizer.create_side_by_side(image, visualizer.visualize(image, bounds))
        assert combined.shape == (300, 800, 3)


class TestSynthetic:
    """Tests for the synthetic card generator"""

    def test_plain_card(self):
        """Test card pixels, background pixels and returned corners agree"""
        image, corners = generate_document((800, 600), text_blocks=False)
        width, height = ID1_CARD_SIZE

        assert image.shape == (600, 800, 3)
        np.testing.assert_allclose(corners[0], [400 - width / 2, 300 - height / 2], atol=1e-3)
        np.testing.assert_allclose(corners[2], [400 + width / 2, 300 + height / 2], atol=1e-3)
        assert tuple(image[300, 400]) == (230, 235, 240)
        assert tuple(image[5, 5]) == (60, 70, 80)

    def test_rotation_preserves_size(self):
        _, corners = generate_document(angle=30.0)
        assert np.linalg.norm(corners[1] - corners[0]) == pytest.approx(ID1_CARD_SIZE[0], abs=1e-3)
        assert np.linalg.norm(corners[3] - corners[0]) == pytest.approx(ID1_CARD_SIZE[1], abs=1e-3)

    def test_seed_is_deterministic(self):
        first, _ = generate_document(seed=3)
        second, _ = generate_document(seed=3)
        np.testing.assert_array_equal(first, second)

    def test_perspective_narrows_top(self):
        image, corners = generate_document()
        _, target = with_perspective(image, corners, 0.1)
        assert np.linalg.norm(target[1] - target[0]) < np.linalg.norm(corners[1] - corners[0])

    def test_suite(self):
        suite = generate_suite()
        assert set(suite) == set(SCENARIOS)
        for image, corners in suite.values():
            assert image.shape == (600, 800, 3)
            assert corners.shape == (4, 2)

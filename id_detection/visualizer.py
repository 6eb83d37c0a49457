"""
Visualization of detected document bounds
"""

import cv2
import numpy as np
from typing import List, Optional, Tuple

from .bounds import DocumentBounds


class BoundsVisualizer:
    """
    Draws detected document bounds onto the image they came from.

    Corners are drawn as a frame with a translucent fill, the top-left
    corner gets a larger marker so the ordering is visible.
    """

    def __init__(
        self,
        border_color: Tuple[int, int, int] = (0, 200, 0),  # Green in BGR
        border_thickness: int = 3,
        overlay_color: Tuple[int, int, int] = (120, 230, 120),
        overlay_alpha: float = 0.25,
        first_corner_color: Tuple[int, int, int] = (0, 0, 255)  # Red in BGR
    ):
        """
        Initialize the visualizer.

        Args:
            border_color: Frame color in BGR format
            border_thickness: Frame thickness in pixels
            overlay_color: Transparent overlay color in BGR format
            overlay_alpha: Overlay transparency (0.0 = transparent, 1.0 = opaque)
            first_corner_color: Marker color of the top-left corner
        """
        self.border_color = border_color
        self.border_thickness = border_thickness
        self.overlay_color = overlay_color
        self.overlay_alpha = overlay_alpha
        self.first_corner_color = first_corner_color

    def visualize(
        self,
        image: np.ndarray,
        bounds: Optional[DocumentBounds],
        draw_border: bool = True,
        draw_overlay: bool = True
    ) -> np.ndarray:
        """
        Draw the bounds on a copy of the image.

        Args:
            image: Input image (BGR or grayscale)
            bounds: Detected bounds in normalized coordinates
            draw_border: Whether to draw the frame and corner markers
            draw_overlay: Whether to draw the translucent fill

        Returns:
            BGR image with visualization, the input unchanged when bounds is None
        """
        if image is None or bounds is None:
            return image

        result = image.copy()
        if result.ndim == 2:
            result = cv2.cvtColor(result, cv2.COLOR_GRAY2BGR)

        h, w = result.shape[:2]
        corners = np.round(bounds.to_pixels(w, h)).astype(np.int32)

        if draw_overlay:
            overlay = result.copy()
            cv2.fillPoly(overlay, [corners], self.overlay_color)
            result = cv2.addWeighted(overlay, self.overlay_alpha, result, 1 - self.overlay_alpha, 0)

        if draw_border:
            cv2.polylines(result, [corners], True, self.border_color, self.border_thickness, cv2.LINE_AA)
            radius = max(4, self.border_thickness * 2)
            for i, corner in enumerate(corners):
                color = self.first_corner_color if i == 0 else self.border_color
                cv2.circle(result, tuple(int(c) for c in corner), radius if i else radius * 2, color, -1)

        return result

    def _put_lines(self, image: np.ndarray, lines: List[str]):
        y_offset = 30
        for i, text in enumerate(lines):
            position = (10, y_offset + i * 30)
            # White outline, black text
            cv2.putText(image, text, position, cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2, cv2.LINE_AA)
            cv2.putText(image, text, position, cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 0, 0), 1, cv2.LINE_AA)

    def visualize_with_info(self, image: np.ndarray, bounds: Optional[DocumentBounds]) -> np.ndarray:
        """
        Draw the bounds plus confidence and pixel size of the document.

        Args:
            image: Input image
            bounds: Detected bounds

        Returns:
            Image with visualization and information
        """
        result = self.visualize(image, bounds)
        if bounds is None or result is None:
            return result

        h, w = result.shape[:2]
        corners = bounds.to_pixels(w, h)
        width = int(max(np.linalg.norm(corners[1] - corners[0]), np.linalg.norm(corners[2] - corners[3])))
        height = int(max(np.linalg.norm(corners[3] - corners[0]), np.linalg.norm(corners[2] - corners[1])))

        self._put_lines(result, [
            f"Confidence: {bounds.confidence:.2f}",
            f"Size: {width}x{height}px",
        ])
        return result

    def create_side_by_side(self, original: np.ndarray, visualized: np.ndarray) -> np.ndarray:
        """
        Create an image with original and visualized image side by side.

        Returns:
            Combined image
        """
        if original is None or visualized is None:
            return original if original is not None else visualized

        if original.ndim == 2:
            original = cv2.cvtColor(original, cv2.COLOR_GRAY2BGR)

        if original.shape[0] != visualized.shape[0]:
            height = original.shape[0]
            width = int(visualized.shape[1] * height / visualized.shape[0])
            visualized = cv2.resize(visualized, (width, height))

        return np.hstack([original, visualized])

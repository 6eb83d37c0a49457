"""
Synthetic ID-1 card images for tests and smoke runs.

Every generator returns the image together with the true card corners
in pixel coordinates (top-left, top-right, bottom-right, bottom-left of
the unrotated card).
"""

from typing import Dict, Optional, Tuple

import cv2
import numpy as np

# 85.6 x 53.98 mm at 5 px/mm
ID1_CARD_SIZE = (428, 270)

SCENARIOS = ('plain', 'rotated_15', 'rotated_30', 'perspective', 'lighting', 'blur', 'noise')


def _card_corners(center: Tuple[float, float], size: Tuple[int, int], angle: float) -> np.ndarray:
    """Corners of a card rotated by angle degrees around its center."""
    cx, cy = center
    w, h = size
    local = np.array([
        [-w / 2.0, -h / 2.0],
        [w / 2.0, -h / 2.0],
        [w / 2.0, h / 2.0],
        [-w / 2.0, h / 2.0],
    ])
    theta = np.deg2rad(angle)
    rotation = np.array([
        [np.cos(theta), -np.sin(theta)],
        [np.sin(theta), np.cos(theta)],
    ])
    return (local @ rotation.T + np.array([cx, cy])).astype(np.float32)


def _add_text_blocks(image: np.ndarray, corners: np.ndarray, rng: np.random.Generator, count: int = 6):
    """Dark rectangles inside the card, standing in for printed fields."""
    tl, tr, _, bl = corners.astype(np.float64)
    u = tr - tl
    v = bl - tl
    for _ in range(count):
        # Local coordinates in [0, 1], kept away from the card edge
        x0 = rng.uniform(0.08, 0.60)
        y0 = rng.uniform(0.10, 0.80)
        x1 = min(0.92, x0 + rng.uniform(0.10, 0.30))
        y1 = min(0.90, y0 + rng.uniform(0.04, 0.08))
        block = np.array([
            tl + x0 * u + y0 * v,
            tl + x1 * u + y0 * v,
            tl + x1 * u + y1 * v,
            tl + x0 * u + y1 * v,
        ])
        shade = int(rng.integers(40, 110))
        cv2.fillPoly(image, [np.round(block).astype(np.int32)], (shade, shade, shade))


def generate_document(
    canvas_size: Tuple[int, int] = (800, 600),
    card_size: Tuple[int, int] = ID1_CARD_SIZE,
    angle: float = 0.0,
    center: Optional[Tuple[float, float]] = None,
    background_color: Tuple[int, int, int] = (60, 70, 80),
    card_color: Tuple[int, int, int] = (230, 235, 240),
    text_blocks: bool = True,
    seed: int = 0
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Draw a single card on a plain background.

    Args:
        canvas_size: Image (width, height)
        card_size: Card (width, height) before rotation
        angle: Rotation in degrees, clockwise in image coordinates
        center: Card center; image center when omitted
        background_color: BGR background
        card_color: BGR card fill
        text_blocks: Draw field-like dark blocks on the card
        seed: Random seed for text blocks

    Returns:
        Tuple (BGR image, corners as float32 array of shape (4, 2))
    """
    width, height = canvas_size
    if center is None:
        center = (width / 2.0, height / 2.0)

    image = np.full((height, width, 3), background_color, dtype=np.uint8)
    corners = _card_corners(center, card_size, angle)
    cv2.fillPoly(image, [np.round(corners).astype(np.int32)], card_color, lineType=cv2.LINE_AA)

    if text_blocks:
        _add_text_blocks(image, corners, np.random.default_rng(seed))

    return image, corners


def with_perspective(image: np.ndarray, corners: np.ndarray, factor: float = 0.1) -> Tuple[np.ndarray, np.ndarray]:
    """Pull the top edge inwards to mimic a camera tilted towards the card."""
    tl, tr, br, bl = corners
    offset = np.linalg.norm(tr - tl) * factor
    direction = (tr - tl) / max(np.linalg.norm(tr - tl), 1e-6)
    target = np.array([
        tl + direction * offset,
        tr - direction * offset,
        br,
        bl,
    ], dtype=np.float32)

    matrix = cv2.getPerspectiveTransform(corners.astype(np.float32), target)
    h, w = image.shape[:2]
    warped = cv2.warpPerspective(image, matrix, (w, h), borderMode=cv2.BORDER_REPLICATE)
    return warped, target


def with_lighting(image: np.ndarray, variation: float = 0.3) -> np.ndarray:
    """Radial falloff: full brightness in the center, darker towards the corners."""
    h, w = image.shape[:2]
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
    distance = np.hypot(xs - w / 2.0, ys - h / 2.0) / np.hypot(w / 2.0, h / 2.0)
    mask = 1.0 - variation * distance
    lit = image.astype(np.float32) * mask[:, :, None]
    return np.clip(lit, 0, 255).astype(np.uint8)


def with_blur(image: np.ndarray, amount: float = 2.0) -> np.ndarray:
    ksize = int(amount * 2) * 2 + 1
    return cv2.GaussianBlur(image, (ksize, ksize), amount)


def with_noise(image: np.ndarray, intensity: float = 0.05, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    noise = rng.normal(0.0, 255.0 * intensity, image.shape)
    return np.clip(image.astype(np.float32) + noise, 0, 255).astype(np.uint8)


def blank_image(canvas_size: Tuple[int, int] = (800, 600), color: Tuple[int, int, int] = (128, 128, 128)) -> np.ndarray:
    width, height = canvas_size
    return np.full((height, width, 3), color, dtype=np.uint8)


def generate_suite(canvas_size: Tuple[int, int] = (800, 600)) -> Dict[str, Tuple[np.ndarray, np.ndarray]]:
    """
    Named set of test scenarios.

    Returns:
        Name -> (image, true corners)
    """
    base, corners = generate_document(canvas_size)
    suite = {
        'plain': (base, corners),
        'rotated_15': generate_document(canvas_size, angle=15.0),
        'rotated_30': generate_document(canvas_size, angle=30.0),
        'perspective': with_perspective(base, corners, 0.08),
        'lighting': (with_lighting(base, 0.3), corners),
        'blur': (with_blur(base, 1.5), corners),
        'noise': (with_noise(base, 0.03), corners),
    }
    return suite

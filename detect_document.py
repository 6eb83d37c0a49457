#!/usr/bin/env python3
"""
Detect an ID-1 document in an image and print its corners.

Usage:
    python3 detect_document.py -i card.jpg
    python3 detect_document.py -i card.jpg -o detected.jpg --set min_area_ratio=0.02
    python3 detect_document.py --synthetic rotated_15 -o synthetic.jpg
"""

import argparse
import logging
import sys
from pathlib import Path

import cv2

from id_detection import BoundsVisualizer
from id_detection.params import load_overrides_from_env
from id_detection.synthetic import SCENARIOS, generate_suite
from id_reader import IdReader, ErrorCode, version_string


CORNER_NAMES = ["Top-left", "Top-right", "Bottom-right", "Bottom-left"]


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='ISO/IEC 7810 ID-1 document boundary detection',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:

  # Detect and print normalized corners
  python3 detect_document.py -i card.jpg

  # Save a visualization next to the input
  python3 detect_document.py -i card.jpg -o detected_card.jpg

  # Override parameters (same keys as ID_READER_* environment variables)
  python3 detect_document.py -i card.jpg --set canny_threshold1=20 --set canny_threshold2=60
        """
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('-i', '--input', help='Input image')
    source.add_argument(
        '--synthetic',
        choices=SCENARIOS,
        help='Use a generated test image instead of a file'
    )

    parser.add_argument('-o', '--output', help='Write visualization to this file')
    parser.add_argument(
        '--profile',
        choices=['id1', 'generic'],
        help='Scoring profile (default: id1)'
    )
    parser.add_argument(
        '--set',
        action='append',
        default=[],
        metavar='KEY=VALUE',
        help='Configuration override, may be repeated'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    parser.add_argument('--version', action='version', version=version_string())

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main CLI function"""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s'
    )

    if args.synthetic:
        image, _ = generate_suite()[args.synthetic]
        print(f"Synthetic image: {args.synthetic}")
    else:
        image_path = Path(args.input)
        if not image_path.exists():
            print(f"Error: Image not found: {image_path}")
            return 1

        image = cv2.imread(str(image_path))
        if image is None:
            print(f"Error: Failed to load image: {image_path}")
            return 1
        print(f"Loading image: {image_path}")

    h, w = image.shape[:2]
    print(f"Image dimensions: {w}x{h} px")

    config = load_overrides_from_env()
    if args.profile:
        config['scoring_profile'] = args.profile

    reader = IdReader()
    for key, value in config.items():
        code = reader.set_config(key, value)
        if code != ErrorCode.SUCCESS:
            print(f"Error: Invalid value for {key} in environment: {code.description}")
            return 1
    for item in args.set:
        key, sep, value = item.partition('=')
        if not sep:
            print(f"Error: Expected KEY=VALUE, got {item!r}")
            return 1
        code = reader.set_config(key.strip(), value.strip())
        if code != ErrorCode.SUCCESS:
            print(f"Error: Invalid value for {key}: {code.description}")
            return 1

    result = reader.process_array(image)

    if not result.ok:
        print(f"✗ {result.error.description}")
        return 1

    bounds = result.bounds
    pixels = bounds.to_pixels(w, h)
    print(f"✓ Document detected (confidence {bounds.confidence:.3f})")
    for name, corner, pixel in zip(CORNER_NAMES, bounds.corners, pixels):
        print(f"  {name:<13} ({corner[0]:.4f}, {corner[1]:.4f})  ->  ({pixel[0]:.1f}, {pixel[1]:.1f}) px")

    if args.output:
        visualizer = BoundsVisualizer()
        output = visualizer.visualize_with_info(image, bounds)
        cv2.imwrite(str(args.output), output)
        print(f"\n✓ Result saved: {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path

from ..core import apply_difference_of_mean, open_image, save_image
from ..processing import UnsupportedPixelModelError


def run_filter(input_path, output_path, primary=(0, 0), secondary=(0, 0), quiet=False):
    input_path = Path(input_path).expanduser().resolve()
    output_path = Path(output_path).expanduser().resolve()

    if not quiet:
        print(f"Filtering {input_path.name} with kernels {tuple(primary)} - {tuple(secondary)}...")

    try:
        image = open_image(input_path)
        result = apply_difference_of_mean(image, primary, secondary)
    except (OSError, UnsupportedPixelModelError, ValueError) as e:
        print(f"Error filtering {input_path}: {e}", file=sys.stderr)
        return False

    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        save_image(result, output_path)
    except (OSError, ValueError) as e:
        print(f"Error saving {output_path}: {e}", file=sys.stderr)
        return False

    if not quiet:
        print(f"Saved {output_path}")
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="pymeandiff-apply",
        description="Apply a difference of mean filter to an image file",
    )
    parser.add_argument("input", help="Image to filter")
    parser.add_argument("output", help="Where to write the filtered image")
    parser.add_argument(
        "--radius",
        nargs=2,
        type=int,
        default=(0, 0),
        metavar=("RX", "RY"),
        help="Primary kernel radius",
    )
    parser.add_argument(
        "--secondary",
        nargs=2,
        type=int,
        default=(0, 0),
        metavar=("RX", "RY"),
        help="Secondary kernel radius",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress output")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    ok = run_filter(
        args.input, args.output, tuple(args.radius), tuple(args.secondary), args.quiet
    )
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()

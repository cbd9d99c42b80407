"""Run one local image through the background remover and write the PNG."""

import argparse
import mimetypes
import sys
from pathlib import Path

import config
from data_url import build_data_url, is_image_type
from errors import RemovalError


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Remove the background from a local image")
    parser.add_argument("input", help="Path to the input image")
    parser.add_argument(
        "-o", "--output", default="background-removed.png",
        help="Where to write the transparent PNG",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    mime_type, _ = mimetypes.guess_type(input_path.name)
    if not is_image_type(mime_type):
        print("Please upload a valid image file.", file=sys.stderr)
        return 1

    config.setup_logging()
    # imported late so a missing API key only fails once the file looks usable
    import gemini_service

    data_url = build_data_url(mime_type, input_path.read_bytes())
    try:
        png_bytes = gemini_service.remove_background(data_url)
    except RemovalError as e:
        print(f"Failed to process image. {e}", file=sys.stderr)
        return 1

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(png_bytes)
    print(f"Wrote {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Command-line entry point: clean one image file with imgclean."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from text_cleaner.cleaning import Algorithm, CleanError, CleaningService, CleanRequest
from text_cleaner.cleaning.metrics import metrics
from text_cleaner.logger import CATEGORIES, ENV_CATS, ENV_LEVEL, get_logger
from text_cleaner.ops.file_operations import save_cleaned_image
from text_cleaner.settings_manager import SettingsManager, default_settings_path

SUPPORTED_EXTENSIONS = ("jpg", "jpeg", "png", "ppm")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="text-cleaner", description="Binarize a scanned text image with imgclean")
    parser.add_argument("input", help="Image to clean (jpg, jpeg, png or ppm)")
    parser.add_argument("-o", "--output", help="Where to write the cleaned image (default: <name>.cleaned.<ext>)")
    parser.add_argument(
        "-a",
        "--algorithm",
        choices=[a.value for a in Algorithm],
        help="Binarization approach (default: the tool's own default)",
    )
    parser.add_argument("--tool", help="Path to the imgclean executable")
    parser.add_argument("--timeout", type=float, help="Stop imgclean after this many seconds")
    parser.add_argument("--settings", help="Settings file (JSON)")
    parser.add_argument("--log-level", help="debug, info, warning, error or critical")
    parser.add_argument("--log-cats", help=f"Comma-separated categories to show ({', '.join(CATEGORIES)})")
    return parser


def _apply_logging_options(args: argparse.Namespace) -> None:
    # Reflected into env so every get_logger() call picks them up
    if args.log_level:
        os.environ[ENV_LEVEL] = args.log_level
    if args.log_cats:
        os.environ[ENV_CATS] = args.log_cats


def default_output_path(input_path: Path) -> Path:
    return input_path.with_name(f"{input_path.stem}.cleaned{input_path.suffix}")


def run(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _apply_logging_options(args)
    logger = get_logger("main")

    input_path = Path(args.input)
    ext = input_path.suffix.lstrip(".").lower()
    if ext not in SUPPORTED_EXTENSIONS:
        parser.error(f"unsupported file type: {input_path.suffix or '(none)'}")

    settings = SettingsManager(args.settings or default_settings_path())
    try:
        data = input_path.read_bytes()
    except OSError as e:
        print(f"error: cannot read {input_path}: {e}", file=sys.stderr)
        return 1

    # Command-line overrides apply to this run only (not saved)
    if args.tool:
        settings.data["tool_path"] = args.tool
    if args.timeout is not None:
        settings.data["timeout_seconds"] = args.timeout

    with CleaningService.from_settings(settings) as service:
        try:
            result = service.clean(CleanRequest(data, ext, args.algorithm))
        except CleanError as e:
            logger.debug("clean failed: %s", e.kind)
            print(f"error: {e.kind}: {e.message}", file=sys.stderr)
            return 1
        finally:
            logger.debug("metrics: %s", metrics.summary())

    output = Path(args.output) if args.output else default_output_path(input_path)
    try:
        written = save_cleaned_image(result, output)
    except OSError as e:
        print(f"error: cannot write {output}: {e}", file=sys.stderr)
        result.release()
        return 1
    logger.info("cleaned image written: %s", written)
    return 0


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()

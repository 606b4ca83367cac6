"""Saving cleaned images.

Saving is the step that ends the life of a result's output artifact: once the
bytes are written to their destination the scratch file is released.
"""

from pathlib import Path

from text_cleaner.cleaning.types import CleanResult
from text_cleaner.logger import get_logger
from text_cleaner.path_utils import abs_path

_logger = get_logger("file_operations")


def generate_unique_filename(dest_dir: str, filename: str) -> str:
    """Return `dest_dir/filename`, or `stem (n).ext` when that already exists."""
    dest = Path(dest_dir) / filename
    if not dest.exists():
        return str(dest)
    stem = dest.stem
    suffix = dest.suffix
    counter = 1
    while dest.exists():
        dest = Path(dest_dir) / f"{stem} ({counter}){suffix}"
        counter += 1

    return str(dest)


def save_cleaned_image(result: CleanResult, dest: str | Path, unique: bool = False) -> str:
    """Write the cleaned bytes to `dest` and release the scratch artifact.

    Args:
        result: Result of a successful clean
        dest: Target file path; its directory must exist
        unique: Pick a free " (n)" name instead of overwriting

    Returns:
        The path written

    Raises:
        OSError: If the write fails. The artifact is kept so the save can be retried.
    """
    target = abs_path(dest)
    if unique:
        target = Path(generate_unique_filename(str(target.parent), target.name))
    _logger.debug("saving cleaned image: %s -> %s", result.output_path, target)
    try:
        target.write_bytes(result.data)
    except OSError as e:
        _logger.error("save failed: %s -> %s", target, e)
        raise
    result.release()
    _logger.debug("save success: %s", target)
    return str(target)

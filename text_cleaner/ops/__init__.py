"""Use-case / operations layer.

Actions a front end or the CLI performs on cleaning results.
"""

from text_cleaner.ops.file_operations import generate_unique_filename, save_cleaned_image

__all__ = ["generate_unique_filename", "save_cleaned_image"]

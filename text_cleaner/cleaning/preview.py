"""Decode cleaned image bytes for display.

The original and cleaned images are decoded with pyvips into RGB numpy arrays
on a worker thread; `to_qimage` turns an array into a QImage that a GUI thread
can wrap in a QPixmap.
"""

import contextlib
from typing import Any

import numpy as np

from text_cleaner.logger import get_logger

_logger = get_logger("preview")

RGB_CHANNELS = 3
_EXPECTED_NDIM = 3


class PreviewError(Exception):
    pass


_pyvips: Any | None = None


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        _pyvips = pyvips
        # Previews are one-shot; keep the operation cache from growing
        with contextlib.suppress(Exception):
            pyvips.cache_set_max(0)
            pyvips.cache_set_max_mem(0)
    return _pyvips


def decode_preview(data: bytes, max_size: int | None = None) -> np.ndarray:
    """Decode image bytes into an (H, W, 3) uint8 array.

    `max_size` bounds the longer side; smaller images are not upscaled.
    """
    if not data:
        raise PreviewError("no image data")
    pyvips = _get_pyvips_module()
    try:
        if max_size and max_size > 0:
            image = pyvips.Image.thumbnail_buffer(data, int(max_size), height=int(max_size), size="down")
        else:
            image = pyvips.Image.new_from_buffer(data, "", access="sequential")

        with contextlib.suppress(Exception):
            image = image.colourspace("srgb")
        if image.hasalpha():
            # Binarized scans are black on white
            image = image.flatten(background=[255, 255, 255])
        if image.bands > RGB_CHANNELS:
            image = image.extract_band(0, n=RGB_CHANNELS)
        elif image.bands < RGB_CHANNELS:
            image = pyvips.Image.bandjoin([image] * RGB_CHANNELS)
        if image.format != "uchar":
            image = image.cast("uchar")

        mem = image.write_to_memory()
        array = np.frombuffer(mem, dtype=np.uint8).reshape(image.height, image.width, image.bands)
    except pyvips.Error as e:
        _logger.debug("preview decode failed: %s", e)
        raise PreviewError(str(e)) from e
    return array.copy()


def to_qimage(array: np.ndarray):
    """Convert an (H, W, 3) uint8 array into a detached QImage."""
    from PySide6.QtGui import QImage

    if array.ndim != _EXPECTED_NDIM or array.shape[2] < RGB_CHANNELS:
        raise PreviewError("unexpected image array shape")
    arr = np.ascontiguousarray(array[:, :, :RGB_CHANNELS], dtype=np.uint8)
    height, width = arr.shape[0], arr.shape[1]
    bytes_per_line = RGB_CHANNELS * width
    # .copy() so the QImage does not keep referencing the numpy buffer
    return QImage(arr.data, width, height, bytes_per_line, QImage.Format.Format_RGB888).copy()

"""Text Cleaner: binarize scanned text images with the imgclean tool."""

__version__ = "0.1.0"

"""Project logging: one stderr handler on the ``text_cleaner`` logger.

Every module logs through a child named after its concern. Those names are the
categories accepted by ``TEXT_CLEANER_LOG_CATS`` (or ``--log-cats``):

    settings         settings file load/save, invalid values
    types            output artifact release
    workspace        scratch files and the orphan sweep
    tool_locator     where imgclean is expected and why it was rejected
    invoker          imgclean spawn, exit status, timeouts
    service          request outcomes
    controller       Qt bridge, stale results
    preview          pyvips decode errors
    file_operations  saving cleaned images
    main             command-line runs

``TEXT_CLEANER_LOG_LEVEL`` takes debug/info/warning/error/critical. Both
variables are read on every call so the CLI can set them after import.
"""

import logging
import os
import sys

BASE_NAME = "text_cleaner"
ENV_LEVEL = "TEXT_CLEANER_LOG_LEVEL"
ENV_CATS = "TEXT_CLEANER_LOG_CATS"

CATEGORIES = (
    "settings",
    "types",
    "workspace",
    "tool_locator",
    "invoker",
    "service",
    "controller",
    "preview",
    "file_operations",
    "main",
)

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

# Unknown category names already reported, so get_logger() does not repeat them
_reported_unknown: set[str] = set()


def parse_categories(text: str | None) -> tuple[set[str], list[str]]:
    """Split a comma-separated category list into (known, unknown)."""
    known: set[str] = set()
    unknown: list[str] = []
    for raw in (text or "").split(","):
        cat = raw.strip().lower()
        if not cat:
            continue
        if cat in CATEGORIES:
            known.add(cat)
        else:
            unknown.append(cat)
    return known, unknown


class _CategoryFilter(logging.Filter):
    """Pass records from the listed categories; the base logger always passes."""

    def __init__(self, base: str, allowed: set[str]):
        super().__init__()
        self._base = base
        self._allowed = allowed

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == self._base:
            return True
        # text_cleaner.invoker -> invoker
        return record.name.rsplit(".", 1)[-1] in self._allowed


def setup_logger(level: int = logging.INFO, name: str = BASE_NAME) -> logging.Logger:
    """Create or update the project logger and its single stderr handler."""
    logger = logging.getLogger(name)

    env_level = (os.getenv(ENV_LEVEL) or "").strip().lower()
    if env_level:
        level = _LEVELS.get(env_level, level)
    logger.setLevel(level)

    stream_handler: logging.StreamHandler | None = None
    for h in list(logger.handlers):
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr:
            stream_handler = h
    if stream_handler is None:
        stream_handler = logging.StreamHandler(stream=sys.stderr)
        logger.addHandler(stream_handler)

    stream_handler.setFormatter(logging.Formatter(fmt="[%(asctime)s] %(levelname)s: %(message)s", datefmt="%H:%M:%S"))

    stream_handler.filters.clear()
    known, unknown = parse_categories(os.getenv(ENV_CATS))
    if known or unknown:
        stream_handler.addFilter(_CategoryFilter(name, known))
    logger.propagate = False

    fresh = [c for c in unknown if c not in _reported_unknown]
    if fresh:
        _reported_unknown.update(fresh)
        logger.warning("unknown log categories ignored: %s (known: %s)", ", ".join(fresh), ", ".join(CATEGORIES))
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = setup_logger()
    return base if not name else base.getChild(name)

"""Terminal logging for the DevBrain CLI and dashboard.

Log lines look like ``12:04:31 INFO    [LLM] Challenge ready``. Levels get a
color, and so do the bracketed tags that modules put at the start of their
messages to say which part of DevBrain is talking. Colors are dropped when
the stream is not a terminal or ``NO_COLOR`` is set.
"""

import logging
import os
import re
import sys
from typing import Optional, TextIO

RESET = "\033[0m"
BOLD = "\033[1m"

LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}

# Tag -> color for the "[TAG]" message prefixes
TAG_COLORS = {
    "LLM": "\033[93m",
    "CAPTURE": "\033[96m",
    "DIAGRAM": "\033[94m",
    "PRACTICE": "\033[92m",
    "STORE": "\033[97m",
    "DASHBOARD": "\033[95m",
}
TAG_RE = re.compile(r"\[(" + "|".join(TAG_COLORS) + r")\]")

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
DATE_FORMAT = "%H:%M:%S"
LEVEL_WIDTH = 7

# Third-party loggers that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "uvicorn.access")


def color_enabled(stream: TextIO) -> bool:
    """Whether ANSI colors should be written to ``stream``."""
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class ColoredFormatter(logging.Formatter):
    """Formatter that pads level names and colors levels and service tags.

    The record passed in is never modified. Other handlers on the same
    logger see the plain message.
    """

    def __init__(self, fmt: str = LOG_FORMAT, datefmt: str = DATE_FORMAT, use_color: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def _paint(self, text: str, color: str, bold: bool = False) -> str:
        if not self.use_color or not color:
            return text
        return f"{color}{BOLD if bold else ''}{text}{RESET}"

    def _paint_tag(self, match: re.Match) -> str:
        return self._paint(match.group(0), TAG_COLORS[match.group(1)], bold=True)

    def format(self, record: logging.LogRecord) -> str:
        styled = logging.makeLogRecord(record.__dict__)
        styled.levelname = self._paint(
            f"{record.levelname:<{LEVEL_WIDTH}}", LEVEL_COLORS.get(record.levelno, "")
        )
        # Merge args first so a "%s" argument containing a tag is colored too
        styled.msg = TAG_RE.sub(self._paint_tag, record.getMessage())
        styled.args = None
        return super().format(styled)


def setup_colored_logging(verbose: bool = False, stream: Optional[TextIO] = None) -> logging.Handler:
    """Send DevBrain logs to ``stream`` (stderr by default).

    Replaces any handlers already on the root logger, so calling this twice
    does not duplicate lines. Returns the installed handler.

    Args:
        verbose: Log at DEBUG instead of INFO.
        stream: Where to write; colors follow ``color_enabled(stream)``.
    """
    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColoredFormatter(use_color=color_enabled(stream)))

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler

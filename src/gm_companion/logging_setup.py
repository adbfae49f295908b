# src/gm_companion/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

from colorama import Fore, Style
from colorama import init as colorama_init

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_GLYPHS = {
    logging.DEBUG: (Fore.WHITE, "·"),
    logging.INFO: (Fore.CYAN, "ℹ"),
    SUCCESS: (Fore.GREEN, "✔"),
    logging.WARNING: (Fore.YELLOW, "⚠"),
    logging.ERROR: (Fore.RED, "✖"),
    logging.CRITICAL: (Fore.RED, "✖"),
}


class _ConsoleFormatter(logging.Formatter):
    """`✔ 12:34:56 message` with a coloured level glyph and a dimmed timestamp."""

    def __init__(self, *, color: bool = True) -> None:
        super().__init__(datefmt="%H:%M:%S")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        color, glyph = _GLYPHS.get(record.levelno, (Fore.WHITE, "•"))
        ts = self.formatTime(record, self.datefmt)
        msg = record.getMessage()
        if record.exc_info and record.levelno >= logging.ERROR:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        if not self.color:
            return f"{glyph} {ts} {msg}"
        return f"{color}{glyph}{Style.RESET_ALL} {Style.DIM}{ts}{Style.RESET_ALL} {msg}"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - allow gm_companion logs
    - web3 / urllib3 / asyncio chatter only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("gm_companion.") or record.name == "__main__":
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/gm",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with:
    - Console handler: coloured glyph lines (info / success / warn / error)
    - File handler: full logs for debugging

    Call this ONCE, very early (before first logger.info).
    """
    colorama_init()

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "gm.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(console_level)
    ch.setFormatter(_ConsoleFormatter(color=sys.stdout.isatty()))
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(fh)

    logging.captureWarnings(True)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("web3").setLevel(logging.INFO)

"""Runtime settings and logging setup.

Everything is read from the environment once at startup; there is no config file.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from platformdirs import user_log_dir

# ── Constants ─────────────────────────────────────────────────────────

APP_NAME = "mpris-tui"
POLL_INTERVAL = 2.0
TICK_RATE = 0.25
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

ENV_ASCII = "MPRIS_TUI_ASCII"
ENV_LOG = "MPRIS_TUI_LOG"
ENV_LOG_LEVEL = "MPRIS_TUI_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    use_ascii: bool = False
    log_file: Optional[Path] = None
    log_level: str = "INFO"
    poll_interval: float = POLL_INTERVAL
    tick_rate: float = TICK_RATE


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    term = env.get("TERM", "").lower()
    # ghostty draws half-blocks badly, same as the box-drawing fallback rule
    use_ascii = env.get(ENV_ASCII, "") == "1" or "ghostty" in term
    log_file = Path(env[ENV_LOG]) if env.get(ENV_LOG) else None
    level = env.get(ENV_LOG_LEVEL, "INFO").upper()
    return Settings(use_ascii=use_ascii, log_file=log_file, log_level=level)


def default_log_file() -> Path:
    return Path(user_log_dir(APP_NAME)) / f"{APP_NAME}.log"


def init_logging(settings: Settings) -> Path:
    """Send all log records to a file; the terminal belongs to the UI."""
    path = settings.log_file or default_log_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        filename=str(path),
        filemode="a",
        level=level,
        format=LOG_FORMAT,
        encoding="utf-8",
    )
    return path

from __future__ import annotations

import logging
import os

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(debug: bool) -> None:
    """
    stderr by default; TERMINAL_KARAOKE_LOG_FILE sends records to a file so
    --debug output does not scroll the lyrics away.
    """
    level = logging.DEBUG if debug else logging.INFO
    level_name = os.getenv("TERMINAL_KARAOKE_LOG_LEVEL")
    if level_name:
        try:
            level = getattr(logging, level_name.upper())
        except AttributeError:
            pass

    log_file = os.getenv("TERMINAL_KARAOKE_LOG_FILE")
    if log_file:
        logging.basicConfig(level=level, format=_FORMAT, filename=log_file, encoding="utf-8", force=True)
    else:
        logging.basicConfig(level=level, format=_FORMAT)

    # per-timer scheduling records only show up with --debug
    sync_logger = logging.getLogger("terminal_karaoke.sync")
    sync_logger.setLevel(logging.NOTSET if debug else max(level, logging.INFO))

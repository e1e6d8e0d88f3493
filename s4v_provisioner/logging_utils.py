from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

DEFAULT_LOG_PATH = "/var/log/s4v-provision.log"
FALLBACK_LOG_NAME = "s4v-provision.log"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Set on handlers installed here so repeated calls can find them.
_OWNER_ATTR = "_s4v_provision"


def _open_log_file(requested: str) -> Tuple[logging.FileHandler, str]:
    """Open the requested log file, or ./s4v-provision.log when that is not writable.

    The preflight has not run yet, so an unprivileged invocation still gets a
    log to report its failure in.
    """
    try:
        Path(requested).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(requested, encoding="utf-8"), requested
    except OSError:
        fallback = str(Path.cwd() / FALLBACK_LOG_NAME)
        return logging.FileHandler(fallback, encoding="utf-8"), fallback


def _installed_handlers(root: logging.Logger) -> list[logging.Handler]:
    return [h for h in root.handlers if getattr(h, _OWNER_ATTR, False)]


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Send every record to the provisioning log and, by default, the console.

    Both handlers share one format. Calling again only adjusts the level.
    Returns the path of the file actually written.
    """

    root = logging.getLogger()
    root.setLevel(level)

    existing = _installed_handlers(root)
    if existing:
        for h in existing:
            if isinstance(h, logging.FileHandler):
                return h.baseFilename
        return log_path

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    file_handler, actual = _open_log_file(log_path)
    handlers: list[logging.Handler] = [file_handler]
    if also_console:
        handlers.append(logging.StreamHandler())

    for h in handlers:
        h.setFormatter(formatter)
        setattr(h, _OWNER_ATTR, True)
        root.addHandler(h)

    if actual != log_path:
        logging.getLogger(__name__).warning("Cannot write %s, logging to %s instead", log_path, actual)
    else:
        logging.getLogger(__name__).info("Logging to %s", actual)
    return actual

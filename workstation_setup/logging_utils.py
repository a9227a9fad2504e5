from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = "/var/log/workstation-setup.log"
FALLBACK_LOG_NAME = "workstation-setup.log"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Set on handlers we install so repeated calls can find them.
_MARKER = "workstation_setup_log_path"


def _installed_log_path(root: logging.Logger) -> Optional[str]:
    for h in root.handlers:
        path = getattr(h, _MARKER, None)
        if path:
            return path
    return None


def _open_log_file(log_path: str) -> tuple[logging.FileHandler, Optional[str]]:
    """Open log_path, or a file in the working directory if that fails.

    Returns the handler and, on fallback, the reason the requested path failed.
    """

    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path, encoding="utf-8"), None
    except OSError as e:
        fallback = Path.cwd() / FALLBACK_LOG_NAME
        return logging.FileHandler(fallback, encoding="utf-8"), str(e)


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    console_level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Send every record (DEBUG and up) to the log file, console_level and up to stderr.

    The file gets the captured STDOUT/STDERR of commands; the console stays terse
    unless console_level is DEBUG. Calling again is a no-op.

    Returns the actual file path being used.
    """

    root = logging.getLogger()
    existing = _installed_log_path(root)
    if existing:
        return existing

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler, open_error = _open_log_file(log_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(fmt)
    actual_path = file_handler.baseFilename
    handlers: list[logging.Handler] = [file_handler]

    if also_console:
        console = logging.StreamHandler()
        console.setLevel(console_level)
        console.setFormatter(fmt)
        handlers.append(console)

    root.setLevel(logging.DEBUG)
    for h in handlers:
        setattr(h, _MARKER, actual_path)
        root.addHandler(h)

    log = logging.getLogger(__name__)
    if open_error:
        log.warning("Cannot write %s (%s); logging to %s", log_path, open_error, actual_path)
    else:
        log.info("Logging to %s", actual_path)
    return actual_path

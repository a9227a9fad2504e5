from __future__ import annotations

import logging
from pathlib import Path

from .command import CmdResult, Runner, run_cmd

logger = logging.getLogger(__name__)


def download(url: str, dest: str | Path, *, runner: Runner = run_cmd) -> CmdResult:
    """Best-effort download via wget; the caller owns cleanup of dest."""

    r = runner(["wget", "-O", str(dest), url], check=False, capture=False)
    if not r.ok:
        logger.warning("Download failed (%s): %s", r.returncode, url)
    return r


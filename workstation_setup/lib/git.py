from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ..errors import FetchError
from .command import CmdResult, Runner, remove_path, run_cmd
from .prompt import ConfirmFn, confirm

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 4
DEFAULT_BACKOFF_S = 2.0


@dataclass(frozen=True)
class FetchResult:
    repo_url: str
    target_dir: Path
    attempts: int


def shallow_clone(repo_url: str, target_dir: str | Path, *, runner: Runner = run_cmd) -> CmdResult:
    return runner(["git", "clone", "--depth=1", repo_url, str(target_dir)], check=False)


def fetch_repo(
    repo_url: str,
    target_dir: str | Path,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    backoff_s: float = DEFAULT_BACKOFF_S,
    runner: Runner = run_cmd,
    confirm_fn: ConfirmFn = confirm,
    sleep: Callable[[float], None] = time.sleep,
) -> FetchResult:
    """Shallow-clone repo_url into target_dir with bounded, fixed-backoff retries.

    An existing target_dir is removed only with the operator's consent; a refused
    removal still attempts the clone against it. Raises FetchError once
    max_attempts clones have failed. Sleeps happen only between attempts.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    target = Path(target_dir)
    attempt = 0
    while True:
        if target.exists():
            if confirm_fn(f"The directory {target} already exists. Do you want to remove it and clone again?"):
                remove_path(target, runner=runner)

        attempt += 1
        r = shallow_clone(repo_url, target, runner=runner)
        if r.ok:
            return FetchResult(repo_url=repo_url, target_dir=target, attempts=attempt)

        logger.warning("Failed to clone %s (attempt %d/%d)", repo_url, attempt, max_attempts)
        if attempt >= max_attempts:
            break
        logger.info("Retrying in %ss", backoff_s)
        sleep(backoff_s)

    logger.error("Failed to clone the repository after %d attempts", max_attempts)
    raise FetchError(repo_url, attempt)

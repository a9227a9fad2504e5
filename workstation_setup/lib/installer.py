from __future__ import annotations

import logging
from typing import Callable

from .command import Runner, run_cmd
from .distro import Distro
from .pkg import is_installed
from .prompt import ConfirmFn, confirm

logger = logging.getLogger(__name__)


def install_if_needed(
    package: str,
    action: Callable[[], object],
    *,
    distro: Distro,
    query: Runner = run_cmd,
    confirm_fn: ConfirmFn = confirm,
) -> bool:
    """Run action for a missing package; ask first when it is already installed.

    The action's outcome is not inspected. Returns True if the action ran.
    """

    if is_installed(distro, package, runner=query):
        if not confirm_fn(f"{package} is already installed. Do you want to reinstall it?"):
            logger.info("Keeping installed %s", package)
            return False
    action()
    return True

from __future__ import annotations

import functools
import logging

from ..lib.installer import install_if_needed
from ..lib.pkg import install_argv, refresh_argv
from ..pipeline import SetupCtx

logger = logging.getLogger(__name__)


class InstallPackagesStep:
    step_id = "10_install_packages"

    def run(self, ctx: SetupCtx) -> None:
        packages = ctx.cfg.packages
        sudo = ctx.cfg.sudo

        # Interactive on pacman (-Syu prompts), so output goes to the terminal.
        r = ctx.run(refresh_argv(ctx.distro, sudo=sudo), capture=False)
        if not r.ok:
            logger.warning("Package database refresh exited %s; continuing", r.returncode)

        for package in packages:
            action = functools.partial(ctx.run, install_argv(ctx.distro, [package], sudo=sudo), capture=False)
            install_if_needed(
                package,
                action,
                distro=ctx.distro,
                query=ctx.query,
                confirm_fn=ctx.confirm,
            )

        logger.info("Package list processed (%d packages)", len(packages))

from __future__ import annotations

import logging

from ..lib.command import remove_path
from ..lib.net import download
from ..lib.pkg import backend_for, install_local_package, is_installed
from ..pipeline import SetupCtx
from ..settings import ExternalSoftware

logger = logging.getLogger(__name__)


class InstallExternalSoftwareStep:
    step_id = "20_install_external_software"

    def _install_one(self, ctx: SetupCtx, item: ExternalSoftware, fmt: str) -> None:
        if is_installed(ctx.distro, item.package, runner=ctx.query):
            logger.info("%s already installed", item.label)
            return

        url = item.downloads.get(fmt)
        if not url:
            logger.warning("No %s download for %s; skipping", fmt, item.label)
            return

        if not ctx.confirm(f"{item.label} is not installed. Do you want to install it?"):
            return

        dest = ctx.workdir / f"{item.package}.{fmt}"
        try:
            if download(url, dest, runner=ctx.run).ok:
                install_local_package(fmt, dest, runner=ctx.run, sudo=ctx.cfg.sudo)
        finally:
            remove_path(dest, runner=ctx.run)

    def run(self, ctx: SetupCtx) -> None:
        fmt = backend_for(ctx.distro).package_format
        for item in ctx.cfg.external_software:
            self._install_one(ctx, item, fmt)

from __future__ import annotations

import functools
import logging
from pathlib import Path

from ..errors import FetchError, SetupAborted
from ..lib.git import fetch_repo
from ..lib.installer import install_if_needed
from ..lib.pkg import install_local_package, package_format
from ..lib.textpatch import replace_literal
from ..pipeline import SetupCtx

logger = logging.getLogger(__name__)


class BuildDeskflowStep:
    """Clone, patch, build, test and package Deskflow, then install the artifact."""

    step_id = "40_build_deskflow"

    def _install_artifact(self, ctx: SetupCtx, dist: Path) -> None:
        entries = sorted(p.name for p in dist.iterdir())
        artifact = entries[0] if entries else ""

        fmt = package_format(artifact)
        if fmt is None:
            logger.warning("Unknown package type. Package: %s", artifact)
            return

        action = functools.partial(
            install_local_package, fmt, dist / artifact, runner=ctx.run, sudo=ctx.cfg.sudo
        )
        install_if_needed(
            artifact,
            action,
            distro=ctx.distro,
            query=ctx.query,
            confirm_fn=ctx.confirm,
        )

    def run(self, ctx: SetupCtx) -> None:
        spec = ctx.cfg.deskflow
        repo_dir = ctx.workdir / spec.dir

        try:
            fetch_repo(
                spec.repo_url,
                repo_dir,
                max_attempts=spec.max_attempts,
                backoff_s=spec.backoff_s,
                runner=ctx.run,
                confirm_fn=ctx.confirm,
                sleep=ctx.sleep,
            )
        except FetchError as e:
            logger.error("Skipping Deskflow build: %s", e)
            return

        if spec.config_patch is not None:
            patch = spec.config_patch
            replace_literal(repo_dir / patch.file, patch.old, patch.new, dry_run=ctx.dry_run)

        for argv in spec.build_commands:
            r = ctx.run(argv, cwd=str(repo_dir), capture=False)
            if not r.ok:
                logger.warning("Deskflow command exited %s: %s", r.returncode, " ".join(argv))

        dist = repo_dir / spec.dist_dir
        if ctx.dry_run:
            logger.info("Would install the package found in %s", dist)
            return
        if not dist.is_dir():
            raise SetupAborted(f"Deskflow package directory missing: {dist}")

        self._install_artifact(ctx, dist)

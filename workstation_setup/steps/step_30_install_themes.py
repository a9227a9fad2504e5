from __future__ import annotations

import logging

from ..lib.command import remove_path
from ..lib.git import shallow_clone
from ..pipeline import SetupCtx
from ..settings import ThemeSpec

logger = logging.getLogger(__name__)


class InstallThemesStep:
    step_id = "30_install_themes"

    def _install_theme(self, ctx: SetupCtx, theme: ThemeSpec) -> None:
        target = ctx.workdir / theme.dir

        # Always a fresh checkout, removed again afterwards.
        if target.exists():
            remove_path(target, runner=ctx.run)

        r = shallow_clone(theme.repo_url, target, runner=ctx.run)
        if not r.ok:
            logger.warning("Clone of %s failed (%s); continuing", theme.repo_url, r.returncode)

        try:
            if not ctx.confirm(f"Do you want to install the {theme.name}?"):
                return
            if not ctx.dry_run and not (target / "install.sh").is_file():
                logger.warning("%s has no install.sh; skipping %s", target, theme.name)
                return
            r = ctx.run(["./install.sh", *theme.install_args], cwd=str(target), capture=False)
            if not r.ok:
                logger.warning("%s installer exited %s", theme.name, r.returncode)
        finally:
            remove_path(target, runner=ctx.run)

    def run(self, ctx: SetupCtx) -> None:
        for theme in ctx.cfg.themes:
            self._install_theme(ctx, theme)

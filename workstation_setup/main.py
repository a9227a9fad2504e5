from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from .errors import SetupAborted, UnsupportedDistroError
from .lib.command import Runner, run_cmd
from .lib.distro import Distro, classify
from .lib.pkg import BACKENDS
from .lib.prompt import ConfirmFn, confirm
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, SetupCtx, run_pipeline
from .settings import load_setup_config
from .steps import (
    BuildDeskflowStep,
    InstallExternalSoftwareStep,
    InstallPackagesStep,
    InstallThemesStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return [
        InstallPackagesStep(),
        InstallExternalSoftwareStep(),
        InstallThemesStep(),
        BuildDeskflowStep(),
    ]


def run(
    *,
    config_path: Optional[str] = None,
    log_path: str = DEFAULT_LOG_PATH,
    workdir: str = ".",
    dry_run: bool = False,
    verbose: bool = False,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    confirm_fn: ConfirmFn = confirm,
    etc_dir: str = "/etc",
    runner: Runner = run_cmd,
    query_runner: Runner = run_cmd,
) -> PipelineResult:
    """Provision this host. Raises SetupAborted when the run must stop."""

    configure_logging(log_path=log_path, console_level=logging.DEBUG if verbose else logging.INFO)
    cfg = load_setup_config(config_path)

    if not confirm_fn("This script will install various packages on your system. Do you want to continue?"):
        raise SetupAborted("Declined by operator")

    distro = classify(etc_dir=etc_dir, aliases=cfg.distro_aliases, runner=query_runner)
    logger.info("Detected distribution: %s", distro.value)
    if distro is Distro.UNKNOWN or distro not in BACKENDS:
        raise UnsupportedDistroError(distro.value)

    ctx = SetupCtx(
        cfg=cfg,
        distro=distro,
        workdir=Path(workdir).resolve(),
        dry_run=dry_run,
        runner=runner,
        query_runner=query_runner,
        confirm=confirm_fn,
    )

    try:
        result = run_pipeline(ctx=ctx, steps=build_steps(), start_at=start_at, stop_after=stop_after)
    except SetupAborted:
        raise
    except Exception:
        logger.exception("Setup failed")
        raise

    logger.info("All tasks completed.")
    return result


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="workstation-setup")
    p.add_argument("--config", default=None, help="Setup manifest (YAML); defaults to the bundled one")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to setup log")
    p.add_argument("--workdir", default=".", help="Directory for downloads and clones")
    p.add_argument("--dry-run", action="store_true", help="Log mutating commands without running them")
    p.add_argument("--verbose", action="store_true", help="Also show captured command output on the console")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 30_install_themes)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")

    args = p.parse_args(argv)

    try:
        run(
            config_path=args.config,
            log_path=args.log,
            workdir=args.workdir,
            dry_run=bool(args.dry_run),
            verbose=bool(args.verbose),
            start_at=args.start_at,
            stop_after=args.stop_after,
        )
    except SetupAborted as e:
        logger.error("%s", e)
        return e.exit_code
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

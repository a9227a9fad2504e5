from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Protocol, Sequence

from .lib.command import CmdResult, Runner, run_cmd
from .lib.distro import Distro
from .lib.prompt import ConfirmFn, confirm
from .settings import SetupConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetupCtx:
    """Everything a step needs; the distribution is fixed for the whole run."""

    cfg: SetupConfig
    distro: Distro
    workdir: Path
    dry_run: bool = False
    runner: Runner = run_cmd
    query_runner: Runner = run_cmd
    confirm: ConfirmFn = confirm
    sleep: Callable[[float], None] = time.sleep

    def run(self, argv: Sequence[str], **kwargs: Any) -> CmdResult:
        """Run a mutating command (skipped under dry-run)."""
        kwargs.setdefault("check", False)
        return self.runner(argv, dry_run=self.dry_run, **kwargs)

    def query(self, argv: Sequence[str], **kwargs: Any) -> CmdResult:
        """Run a read-only command; executes even under dry-run."""
        kwargs.setdefault("check", False)
        return self.query_runner(argv, **kwargs)


class Step(Protocol):
    """A single best-effort step."""

    step_id: str

    def run(self, ctx: SetupCtx) -> None:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ran_steps: List[str]
    skipped_steps: List[str]


def run_pipeline(
    *,
    ctx: SetupCtx,
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order, optionally limited to [start_at, stop_after]."""

    known = {s.step_id for s in steps}
    for step_id in (start_at, stop_after):
        if step_id is not None and step_id not in known:
            raise ValueError(f"Unknown step_id: {step_id}")

    ran: List[str] = []
    skipped: List[str] = []

    started = start_at is None
    stopped = False

    for step in steps:
        if not started and step.step_id == start_at:
            started = True
        if not started or stopped:
            skipped.append(step.step_id)
            continue

        logger.info("Running step %s", step.step_id)
        step.run(ctx)
        ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            stopped = True

    return PipelineResult(ran_steps=ran, skipped_steps=skipped)

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Sequence

import pytest

from workstation_setup.lib.command import CmdResult
from workstation_setup.lib.distro import Distro
from workstation_setup.pipeline import SetupCtx
from workstation_setup.settings import SetupConfig, load_setup_config


class FakeRunner:
    """Records every command; returncode comes from rc_for(argv) (default 0)."""

    def __init__(self, rc_for: Optional[Callable[[List[str]], int]] = None) -> None:
        self.calls: List[List[str]] = []
        self.kwargs: List[dict] = []
        self.rc_for = rc_for or (lambda argv: 0)

    def __call__(self, argv: Sequence[str], **kwargs) -> CmdResult:
        argv_list = list(argv)
        self.calls.append(argv_list)
        self.kwargs.append(kwargs)
        return CmdResult(argv=argv_list, returncode=self.rc_for(argv_list), stdout="", stderr="")

    def commands(self, program: str) -> List[List[str]]:
        return [c for c in self.calls if program in c]


class ScriptedConfirm:
    """Answers prompts from a list (or a constant) and records them."""

    def __init__(self, answers=True) -> None:
        self.prompts: List[str] = []
        self._answers = answers

    def __call__(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        if isinstance(self._answers, list):
            return self._answers.pop(0)
        return bool(self._answers)


@pytest.fixture
def bundled_cfg() -> SetupConfig:
    return load_setup_config()


def make_ctx(
    tmp_path: Path,
    *,
    cfg: SetupConfig,
    distro: Distro = Distro.UBUNTU,
    runner: Optional[FakeRunner] = None,
    query: Optional[FakeRunner] = None,
    confirm=None,
    dry_run: bool = False,
) -> SetupCtx:
    return SetupCtx(
        cfg=cfg,
        distro=distro,
        workdir=tmp_path,
        dry_run=dry_run,
        runner=runner or FakeRunner(),
        query_runner=query or FakeRunner(lambda argv: 1),
        confirm=confirm or ScriptedConfirm(True),
        sleep=lambda s: None,
    )

from __future__ import annotations

import errno
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Callable, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


Runner = Callable[..., CmdResult]


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    cwd: str | None = None,
    capture: bool = True,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - capture=False streams output to the terminal (interactive tools, builds).
    - check=False never raises: a missing program yields 127, a non-executable one 126.
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s", _fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    stream = subprocess.PIPE if capture else None
    try:
        p = subprocess.run(
            argv_list,
            text=True,
            stdout=stream,
            stderr=stream,
            cwd=cwd,
        )
    except OSError as e:
        if check:
            raise RuntimeError(f"Command could not start: {_fmt_argv(argv_list)}: {e}") from e
        code = 126 if e.errno in (errno.EACCES, errno.ENOEXEC) else 127
        logger.warning("Command could not start (%s): %s", e, _fmt_argv(argv_list))
        return CmdResult(argv=argv_list, returncode=code, stdout="", stderr=str(e))

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode != 0:
        raise RuntimeError(f"Command failed ({p.returncode}): {_fmt_argv(argv_list)}\n{stderr}")

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)


def remove_path(path: str | os.PathLike, *, runner: Runner = run_cmd) -> CmdResult:
    return runner(["rm", "-rf", str(path)], check=False)

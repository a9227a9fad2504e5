from __future__ import annotations

import enum
import logging
import shlex
import shutil
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from .command import Runner, run_cmd

logger = logging.getLogger(__name__)


class Distro(str, enum.Enum):
    DEBIAN = "debian"
    UBUNTU = "ubuntu"
    ARCH = "arch"
    FEDORA = "fedora"
    RHEL = "rhel"
    UNKNOWN = "unknown"


# Derivatives folded into their base family. Extend here or via the manifest.
DEFAULT_ALIASES: Dict[str, str] = {
    "endeavouros": "arch",
    "manjaro": "arch",
}

# Checked in order when neither os-release nor lsb_release is available.
_MARKER_FILES = (
    ("debian_version", Distro.DEBIAN),
    ("fedora-release", Distro.FEDORA),
    ("arch-release", Distro.ARCH),
)


def parse_os_release(text: str) -> Dict[str, str]:
    """Parse KEY=value lines of an os-release file (shell quoting allowed)."""

    fields: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw.strip().strip("\"'")]
        fields[key.strip()] = " ".join(parts)
    return fields


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="ignore")
    except OSError:
        return None


def _raw_identifier(etc_dir: Path, runner: Runner, which: Callable[[str], Optional[str]]) -> str:
    os_release = etc_dir / "os-release"
    if os_release.is_file():
        text = _read_text(os_release) or ""
        return parse_os_release(text).get("ID", "").lower()

    if which("lsb_release"):
        r = runner(["lsb_release", "-si"], check=False)
        if r.ok and r.stdout.strip():
            return r.stdout.strip().lower()

    for name, distro in _MARKER_FILES:
        if (etc_dir / name).exists():
            return distro.value

    return Distro.UNKNOWN.value


def normalize(identifier: str, aliases: Mapping[str, str] = DEFAULT_ALIASES) -> Distro:
    ident = identifier.strip().lower()
    ident = aliases.get(ident, ident)
    try:
        return Distro(ident)
    except ValueError:
        return Distro.UNKNOWN


def classify(
    *,
    etc_dir: str | Path = "/etc",
    aliases: Mapping[str, str] = DEFAULT_ALIASES,
    runner: Runner = run_cmd,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> Distro:
    """Detect the host distribution family. Never raises; worst case UNKNOWN."""

    raw = _raw_identifier(Path(etc_dir), runner, which)
    distro = normalize(raw, aliases)
    if raw and distro.value != raw:
        logger.info("Distribution id %r normalized to %s", raw, distro.value)
    return distro

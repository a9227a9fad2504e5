from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

from ..errors import UnsupportedDistroError
from .command import CmdResult, Runner, run_cmd
from .distro import Distro

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageBackend:
    name: str
    query: Tuple[str, ...]
    install: Tuple[str, ...]
    refresh: Tuple[str, ...]
    package_format: str


APT = PackageBackend(
    name="apt",
    query=("dpkg", "-s"),
    install=("apt", "install", "-y"),
    refresh=("apt", "update"),
    package_format="deb",
)
PACMAN = PackageBackend(
    name="pacman",
    query=("pacman", "-Qi"),
    install=("pacman", "-S", "--noconfirm"),
    refresh=("pacman", "-Syu"),
    package_format="pkg.tar.zst",
)
DNF = PackageBackend(
    name="dnf",
    query=("rpm", "-q"),
    install=("dnf", "install", "-y"),
    refresh=("dnf", "update"),
    package_format="rpm",
)

BACKENDS: Dict[Distro, PackageBackend] = {
    Distro.DEBIAN: APT,
    Distro.UBUNTU: APT,
    Distro.ARCH: PACMAN,
    Distro.FEDORA: DNF,
    Distro.RHEL: DNF,
}

# Local archive installers by package format; later entries are fallbacks.
LOCAL_INSTALLERS: Dict[str, Tuple[Tuple[str, ...], ...]] = {
    "deb": (("apt", "install", "-y"),),
    "rpm": (("dnf", "install", "-y"), ("rpm", "-ivh")),
    "pkg.tar.zst": (("pacman", "-U", "--noconfirm"),),
}


def backend_for(distro: Distro) -> PackageBackend:
    backend = BACKENDS.get(distro)
    if backend is None:
        raise UnsupportedDistroError(distro.value)
    return backend


def _privileged(argv: Sequence[str], sudo: bool) -> list[str]:
    return ["sudo", *argv] if sudo else list(argv)


def is_installed(distro: Distro, package: str, *, runner: Runner = run_cmd) -> bool:
    """Read-only query of the native package database.

    Unsupported distributions report "not installed" so the install path runs.
    """

    backend = BACKENDS.get(distro)
    if backend is None:
        logger.debug("No package database for %s; assuming %s is not installed", distro.value, package)
        return False
    r = runner([*backend.query, package], check=False)
    return r.ok


def install_argv(distro: Distro, packages: Sequence[str], *, sudo: bool = True) -> list[str]:
    return _privileged([*backend_for(distro).install, *packages], sudo)


def refresh_argv(distro: Distro, *, sudo: bool = True) -> list[str]:
    return _privileged(backend_for(distro).refresh, sudo)


def package_format(filename: str) -> Optional[str]:
    """Return the known package format of an artifact filename, longest suffix first."""

    for fmt in sorted(LOCAL_INSTALLERS, key=len, reverse=True):
        if filename.endswith(f".{fmt}"):
            return fmt
    return None


def install_local_package(
    fmt: str,
    path: str | Path,
    *,
    runner: Runner = run_cmd,
    sudo: bool = True,
) -> Optional[CmdResult]:
    """Install a downloaded/built archive, trying each installer of its format in turn."""

    chain = LOCAL_INSTALLERS.get(fmt)
    if not chain:
        raise ValueError(f"Unknown package format: {fmt}")

    r: Optional[CmdResult] = None
    for prefix in chain:
        r = runner(_privileged([*prefix, str(path)], sudo), check=False, capture=False)
        if r.ok:
            return r
        logger.warning("%s exited %s for %s", prefix[0], r.returncode, path)
    return r

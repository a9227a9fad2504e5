from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .lib.distro import DEFAULT_ALIASES

BUNDLED_MANIFEST = Path(__file__).resolve().parent / "manifests" / "setup.yaml"


@dataclass(frozen=True)
class ExternalSoftware:
    label: str
    package: str
    downloads: Dict[str, str]


@dataclass(frozen=True)
class ThemeSpec:
    name: str
    repo_url: str
    dir: str
    install_args: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ConfigPatch:
    file: str
    old: str
    new: str


@dataclass(frozen=True)
class DeskflowSpec:
    repo_url: str
    dir: str
    max_attempts: int
    backoff_s: float
    config_patch: Optional[ConfigPatch]
    build_commands: Tuple[Tuple[str, ...], ...]
    dist_dir: str


@dataclass(frozen=True)
class SetupConfig:
    raw: Dict[str, Any]

    @property
    def sudo(self) -> bool:
        return bool(self.raw.get("sudo", True))

    @property
    def distro_aliases(self) -> Dict[str, str]:
        aliases = self.raw.get("distro_aliases")
        if aliases is None:
            return dict(DEFAULT_ALIASES)
        return {str(k).lower(): str(v).lower() for k, v in aliases.items()}

    @property
    def packages(self) -> List[str]:
        return [str(p).strip() for p in (self.raw.get("packages") or []) if str(p).strip()]

    @property
    def external_software(self) -> List[ExternalSoftware]:
        out: List[ExternalSoftware] = []
        for item in self.raw.get("external_software") or []:
            package = str(item["package"])
            out.append(
                ExternalSoftware(
                    label=str(item.get("label") or package),
                    package=package,
                    downloads={str(k): str(v) for k, v in (item.get("downloads") or {}).items()},
                )
            )
        return out

    @property
    def themes(self) -> List[ThemeSpec]:
        return [
            ThemeSpec(
                name=str(t.get("name") or t["dir"]),
                repo_url=str(t["repo_url"]),
                dir=str(t["dir"]),
                install_args=tuple(str(a) for a in (t.get("install_args") or [])),
            )
            for t in self.raw.get("themes") or []
        ]

    @property
    def deskflow(self) -> DeskflowSpec:
        d = self.raw.get("deskflow") or {}
        patch = d.get("config_patch")
        return DeskflowSpec(
            repo_url=str(d.get("repo_url") or "https://github.com/deskflow/deskflow"),
            dir=str(d.get("dir") or "deskflow"),
            max_attempts=int(d.get("max_attempts", 4)),
            backoff_s=float(d.get("backoff_s", 2)),
            config_patch=(
                ConfigPatch(file=str(patch["file"]), old=str(patch["old"]), new=str(patch["new"]))
                if patch
                else None
            ),
            build_commands=tuple(tuple(str(a) for a in cmd) for cmd in (d.get("build_commands") or [])),
            dist_dir=str(d.get("dist_dir") or "dist"),
        )


def load_setup_config(path: str | Path | None = None) -> SetupConfig:
    """Load the setup manifest (YAML mapping); the bundled one when path is None."""

    p = Path(path) if path else BUNDLED_MANIFEST
    if not p.exists():
        raise FileNotFoundError(str(p))

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("setup config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML is required to read the setup config") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Setup config must contain a mapping/object: {p}")

    return SetupConfig(raw=raw)

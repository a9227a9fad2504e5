from pathlib import Path

import pytest

from tests.conftest import FakeRunner, ScriptedConfirm, make_ctx
from workstation_setup.errors import SetupAborted
from workstation_setup.lib.distro import Distro
from workstation_setup.settings import SetupConfig
from workstation_setup.steps import (
    BuildDeskflowStep,
    InstallExternalSoftwareStep,
    InstallPackagesStep,
    InstallThemesStep,
)


def _cfg(**raw) -> SetupConfig:
    raw.setdefault("sudo", False)
    return SetupConfig(raw=raw)


# -- packages ---------------------------------------------------------------


def test_packages_refresh_then_install_missing(tmp_path):
    runner = FakeRunner()
    ctx = make_ctx(tmp_path, cfg=_cfg(packages=["vlc", "git"]), distro=Distro.ARCH, runner=runner)
    InstallPackagesStep().run(ctx)
    assert runner.calls == [
        ["pacman", "-Syu"],
        ["pacman", "-S", "--noconfirm", "vlc"],
        ["pacman", "-S", "--noconfirm", "git"],
    ]


def test_ubuntu_git_installed_reinstall_declined(tmp_path):
    runner = FakeRunner()
    query = FakeRunner(lambda argv: 0 if argv[-1] == "git" else 1)
    gate = ScriptedConfirm(False)
    ctx = make_ctx(tmp_path, cfg=_cfg(packages=["git"]), runner=runner, query=query, confirm=gate)

    InstallPackagesStep().run(ctx)

    assert runner.calls == [["apt", "update"]]
    assert gate.prompts == ["git is already installed. Do you want to reinstall it?"]


def test_install_failures_do_not_stop_the_list(tmp_path):
    runner = FakeRunner(lambda argv: 100)
    ctx = make_ctx(tmp_path, cfg=_cfg(packages=["a", "b"]), distro=Distro.FEDORA, runner=runner)
    InstallPackagesStep().run(ctx)
    assert runner.calls[-2:] == [["dnf", "install", "-y", "a"], ["dnf", "install", "-y", "b"]]


# -- external software --------------------------------------------------------

EXTERNAL = [
    {"label": "Editor", "package": "code", "downloads": {"deb": "https://x/code.deb", "rpm": "https://x/code.rpm"}},
    {"label": "Chat", "package": "discord", "downloads": {"deb": "https://x/discord.deb"}},
]


def test_external_download_install_and_cleanup(tmp_path):
    runner = FakeRunner()
    ctx = make_ctx(tmp_path, cfg=_cfg(external_software=EXTERNAL[:1]), runner=runner)
    InstallExternalSoftwareStep().run(ctx)

    dest = str(tmp_path / "code.deb")
    assert runner.calls == [
        ["wget", "-O", dest, "https://x/code.deb"],
        ["apt", "install", "-y", dest],
        ["rm", "-rf", dest],
    ]


def test_external_cleanup_even_when_install_fails(tmp_path):
    runner = FakeRunner(lambda argv: 1 if argv[0] == "apt" else 0)
    ctx = make_ctx(tmp_path, cfg=_cfg(external_software=EXTERNAL[:1]), runner=runner)
    InstallExternalSoftwareStep().run(ctx)
    assert runner.calls[-1] == ["rm", "-rf", str(tmp_path / "code.deb")]


def test_external_skips_installed_declined_and_missing_format(tmp_path):
    runner = FakeRunner()
    query = FakeRunner(lambda argv: 0 if argv[-1] == "code" else 1)
    gate = ScriptedConfirm(True)
    ctx = make_ctx(
        tmp_path, cfg=_cfg(external_software=EXTERNAL), distro=Distro.FEDORA, runner=runner, query=query, confirm=gate
    )
    InstallExternalSoftwareStep().run(ctx)

    # code is installed; discord has no rpm download, so the operator is never asked.
    assert gate.prompts == []
    assert runner.calls == []


def test_external_declined_downloads_nothing(tmp_path):
    runner = FakeRunner()
    ctx = make_ctx(tmp_path, cfg=_cfg(external_software=EXTERNAL), runner=runner, confirm=ScriptedConfirm(False))
    InstallExternalSoftwareStep().run(ctx)
    assert runner.calls == []


# -- themes -----------------------------------------------------------------

THEMES = [{"name": "Theme", "repo_url": "https://x/theme.git", "dir": "theme", "install_args": ["--color", "Dark"]}]


def _clone_creates_installer(argv):
    if argv[:2] == ["git", "clone"]:
        target = Path(argv[-1])
        target.mkdir()
        (target / "install.sh").write_text("#!/bin/sh\n", encoding="utf-8")
    return 0


def test_theme_clone_install_and_remove(tmp_path):
    runner = FakeRunner(_clone_creates_installer)
    ctx = make_ctx(tmp_path, cfg=_cfg(themes=THEMES), runner=runner)
    InstallThemesStep().run(ctx)

    target = str(tmp_path / "theme")
    assert runner.calls == [
        ["git", "clone", "--depth=1", "https://x/theme.git", target],
        ["./install.sh", "--color", "Dark"],
        ["rm", "-rf", target],
    ]
    assert runner.kwargs[1]["cwd"] == target


def test_theme_declined_still_removes_clone(tmp_path):
    runner = FakeRunner(_clone_creates_installer)
    ctx = make_ctx(tmp_path, cfg=_cfg(themes=THEMES), runner=runner, confirm=ScriptedConfirm(False))
    InstallThemesStep().run(ctx)
    assert [c[0] for c in runner.calls] == ["git", "rm"]


def test_theme_clone_failure_is_best_effort(tmp_path):
    runner = FakeRunner(lambda argv: 128 if argv[0] == "git" else 0)
    ctx = make_ctx(tmp_path, cfg=_cfg(themes=THEMES), runner=runner)
    InstallThemesStep().run(ctx)
    assert [c[0] for c in runner.calls] == ["git", "rm"]


# -- deskflow ---------------------------------------------------------------

DESKFLOW = {
    "repo_url": "https://x/deskflow",
    "dir": "deskflow",
    "max_attempts": 2,
    "backoff_s": 0,
    "config_patch": {"file": "config.yaml", "old": "manjaro", "new": "endeavouros"},
    "build_commands": [["cmake", "-B", "build"], ["./build/bin/unittests"]],
    "dist_dir": "dist",
}


def _deskflow_runner(artifact):
    def rc_for(argv):
        if argv[:2] == ["git", "clone"]:
            repo = Path(argv[-1])
            repo.mkdir()
            (repo / "config.yaml").write_text("distro: manjaro\n", encoding="utf-8")
            if artifact is not None:
                (repo / "dist").mkdir()
                if artifact:
                    (repo / "dist" / artifact).write_text("", encoding="utf-8")
        return 0

    return FakeRunner(rc_for)


@pytest.mark.parametrize(
    "artifact,installer",
    [
        ("deskflow_1.0_amd64.deb", ["apt", "install", "-y"]),
        ("deskflow-1.0.x86_64.rpm", ["dnf", "install", "-y"]),
        ("deskflow-1.0-x86_64.pkg.tar.zst", ["pacman", "-U", "--noconfirm"]),
    ],
)
def test_deskflow_pipeline_dispatches_by_extension(tmp_path, artifact, installer):
    runner = _deskflow_runner(artifact)
    ctx = make_ctx(tmp_path, cfg=_cfg(deskflow=DESKFLOW), runner=runner)
    BuildDeskflowStep().run(ctx)

    repo = tmp_path / "deskflow"
    assert (repo / "config.yaml").read_text(encoding="utf-8") == "distro: endeavouros\n"
    assert runner.calls[1:3] == [["cmake", "-B", "build"], ["./build/bin/unittests"]]
    assert runner.kwargs[1]["cwd"] == str(repo)
    assert runner.calls[-1] == [*installer, str(repo / "dist" / artifact)]


def test_deskflow_unknown_package_type_installs_nothing(tmp_path, caplog):
    runner = _deskflow_runner("deskflow.tar.gz")
    ctx = make_ctx(tmp_path, cfg=_cfg(deskflow=DESKFLOW), runner=runner)
    BuildDeskflowStep().run(ctx)
    assert runner.calls[-1] == ["./build/bin/unittests"]
    assert "Unknown package type. Package: deskflow.tar.gz" in caplog.text


def test_deskflow_fetch_exhaustion_skips_the_rest(tmp_path):
    runner = FakeRunner(lambda argv: 128)
    ctx = make_ctx(tmp_path, cfg=_cfg(deskflow=DESKFLOW), runner=runner)
    BuildDeskflowStep().run(ctx)
    assert all(c[:2] == ["git", "clone"] for c in runner.calls)
    assert len(runner.calls) == 2


def test_deskflow_missing_dist_aborts(tmp_path):
    ctx = make_ctx(tmp_path, cfg=_cfg(deskflow=DESKFLOW), runner=_deskflow_runner(None))
    with pytest.raises(SetupAborted):
        BuildDeskflowStep().run(ctx)


def test_deskflow_build_failures_are_best_effort(tmp_path):
    base = _deskflow_runner("deskflow_1.0_amd64.deb")

    def rc_for(argv):
        rc = base.rc_for(argv)
        return 2 if argv[0] in {"cmake", "./build/bin/unittests"} else rc

    runner = FakeRunner(rc_for)
    ctx = make_ctx(tmp_path, cfg=_cfg(deskflow=DESKFLOW), runner=runner)
    BuildDeskflowStep().run(ctx)
    assert runner.calls[-1][:3] == ["apt", "install", "-y"]


def test_deskflow_installed_artifact_asks_before_reinstall(tmp_path):
    runner = _deskflow_runner("deskflow_1.0_amd64.deb")
    gate = ScriptedConfirm(False)
    ctx = make_ctx(tmp_path, cfg=_cfg(deskflow=DESKFLOW), runner=runner, query=FakeRunner(), confirm=gate)
    BuildDeskflowStep().run(ctx)
    assert gate.prompts == ["deskflow_1.0_amd64.deb is already installed. Do you want to reinstall it?"]
    assert runner.calls[-1] == ["./build/bin/unittests"]

from __future__ import annotations


class SetupError(RuntimeError):
    pass


class SetupAborted(SetupError):
    """Stops the whole run; the CLI exits non-zero."""

    exit_code = 1


class UnsupportedDistroError(SetupAborted):
    def __init__(self, distro: str) -> None:
        super().__init__(f"Unsupported distribution: {distro}")
        self.distro = distro


class FetchError(SetupError):
    def __init__(self, repo_url: str, attempts: int) -> None:
        super().__init__(f"Failed to clone {repo_url} after {attempts} attempts")
        self.repo_url = repo_url
        self.attempts = attempts

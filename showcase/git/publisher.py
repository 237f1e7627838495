"""Git publishing utilities for the generated pages."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

from ..logging import get_logger
from .runner import RUNNER_ERRORS, GitRunner, default_runner, describe_failure

_GITHUB_OWNER = re.compile(r"github\.com[:/]([^/]+)/")

PUSH_TIMEOUT_SECONDS = 90.0


class PushFailure(RuntimeError):
    """Raised when committing or pushing generated pages fails."""


class Publisher:
    """Commits generated pages in the workspace repository and pushes them."""

    def __init__(self, runner: GitRunner | None = None, *, timeout: float = PUSH_TIMEOUT_SECONDS) -> None:
        self._runner = runner or default_runner
        self.timeout = timeout
        self.logger = get_logger("publisher")

    def remote_owner(
        self, repo_path: Path | str, *, environ: Mapping[str, str] | None = None
    ) -> Optional[str]:
        """Return the GitHub owner of ``origin``, or ``GITHUB_USERNAME`` as a fallback."""
        repo = Path(repo_path)
        try:
            origin = self._run(["git", "remote", "get-url", "origin"], cwd=repo, capture_output=True)
        except RUNNER_ERRORS as exc:
            self.logger.debug("Could not read origin remote: %s", describe_failure(exc))
            origin = ""
        match = _GITHUB_OWNER.search(origin.strip())
        if match:
            return match.group(1)
        env = os.environ if environ is None else environ
        return env.get("GITHUB_USERNAME") or None

    def commit(
        self,
        repo_path: Path | str,
        files: Sequence[Path | str],
        *,
        message: str,
    ) -> bool:
        """Stage the provided files and create a commit if changes exist."""
        repo = Path(repo_path)
        relative_files = [self._to_relative(repo, Path(file)) for file in files]
        try:
            for rel in relative_files:
                self._run(["git", "add", rel], cwd=repo)

            status = self._run(["git", "status", "--porcelain"], cwd=repo, capture_output=True)
            if not status.strip():
                return False

            self._run(["git", "commit", "-m", message], cwd=repo)
        except RUNNER_ERRORS as exc:
            raise PushFailure(f"git commit failed: {describe_failure(exc)}") from exc
        return True

    def commit_and_push(
        self,
        repo_path: Path | str,
        files: Sequence[Path | str],
        *,
        message: str,
    ) -> bool:
        """Commit ``files`` and push; returns False when there was nothing to commit."""
        if not self.commit(repo_path, files, message=message):
            return False
        try:
            self._run(["git", "push"], cwd=Path(repo_path))
        except RUNNER_ERRORS as exc:
            raise PushFailure(f"git push failed: {describe_failure(exc)}") from exc
        return True

    # ------------------------------------------------------------------
    # Helpers

    @staticmethod
    def _to_relative(repo: Path, file_path: Path) -> str:
        try:
            return file_path.relative_to(repo).as_posix()
        except ValueError:
            return file_path.as_posix()

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        return self._runner(args, cwd=cwd, capture_output=capture_output, timeout=self.timeout)


__all__ = ["Publisher", "PushFailure"]

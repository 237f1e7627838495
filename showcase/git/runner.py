"""Subprocess runner shared by the git collaborators."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Callable, Iterable

GitRunner = Callable[..., str]


def default_runner(
    args: Iterable[str],
    *,
    cwd: Path,
    env: dict[str, str] | None = None,
    capture_output: bool = False,
    timeout: float | None = None,
) -> str:
    """Run a command, raising ``CalledProcessError``/``TimeoutExpired`` on failure."""
    merged_env = os.environ.copy()
    # Never block on credential prompts for private or missing repositories.
    merged_env["GIT_TERMINAL_PROMPT"] = "0"
    if env:
        merged_env.update(env)
    completed = subprocess.run(
        list(args),
        cwd=str(cwd),
        env=merged_env,
        check=True,
        text=True,
        capture_output=True,
        timeout=timeout,
    )
    if capture_output:
        return completed.stdout
    return ""


def describe_failure(exc: BaseException) -> str:
    """Return a short, single-line description of a failed command."""
    if isinstance(exc, subprocess.CalledProcessError):
        stderr = exc.stderr.strip() if isinstance(exc.stderr, str) else ""
        detail = stderr.splitlines()[-1] if stderr else f"exit code {exc.returncode}"
        return detail[:120]
    if isinstance(exc, subprocess.TimeoutExpired):
        return f"timed out after {exc.timeout:g}s"
    return str(exc)[:120]


RUNNER_ERRORS: tuple[type[BaseException], ...] = (
    subprocess.CalledProcessError,
    subprocess.TimeoutExpired,
    OSError,
)


__all__ = ["GitRunner", "RUNNER_ERRORS", "default_runner", "describe_failure"]

"""Shallow checkouts of the repositories being showcased."""

from __future__ import annotations

import shutil
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator

from ..logging import get_logger
from ..models import RepositoryReference
from ..reporting import LoggingReporter, Reporter
from .runner import RUNNER_ERRORS, GitRunner, default_runner, describe_failure

CLONE_TIMEOUT_SECONDS = 90.0

# One lock per checkout directory, shared by every manager in the process.
_CHECKOUT_LOCKS: Dict[str, threading.Lock] = {}
_CHECKOUT_LOCKS_GUARD = threading.Lock()


def _checkout_lock(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _CHECKOUT_LOCKS_GUARD:
        return _CHECKOUT_LOCKS.setdefault(key, threading.Lock())


class CloneFailure(RuntimeError):
    """Raised when a repository cannot be cloned."""


class CheckoutManager:
    """Clones, refreshes and reuses checkouts under a shared directory.

    Checkouts are only ever read; nothing inside them is executed.
    """

    def __init__(
        self,
        checkout_root: Path,
        runner: GitRunner | None = None,
        *,
        timeout: float = CLONE_TIMEOUT_SECONDS,
    ) -> None:
        self.checkout_root = Path(checkout_root)
        self._runner = runner or default_runner
        self.timeout = timeout
        self.logger = get_logger("checkout")

    def path_for(self, reference: RepositoryReference) -> Path:
        return self.checkout_root / f"{reference.owner}-{reference.name}"

    @contextmanager
    def checked_out(
        self,
        reference: RepositoryReference,
        *,
        skip_refresh: bool = False,
        reporter: Reporter | None = None,
    ) -> Iterator[Path]:
        """Acquire ``reference`` and hold its checkout exclusively until the block exits.

        Concurrent batches naming the same repository wait here instead of
        refreshing or deleting a tree another batch is still reading.
        """
        with _checkout_lock(self.path_for(reference)):
            yield self.acquire(reference, skip_refresh=skip_refresh, reporter=reporter)

    def acquire(
        self,
        reference: RepositoryReference,
        *,
        skip_refresh: bool = False,
        reporter: Reporter | None = None,
    ) -> Path:
        """Return a ready checkout for ``reference``, cloning when needed."""
        reporter = reporter or LoggingReporter(self.logger)
        target = self.path_for(reference)
        self.checkout_root.mkdir(parents=True, exist_ok=True)

        if target.exists() and skip_refresh:
            reporter.info("  ⟳  Using existing clone")
            return target

        if target.exists():
            reporter.info("  ⟳  Refreshing existing clone…")
            try:
                self._refresh(target)
                return target
            except RUNNER_ERRORS as exc:
                self.logger.debug("Refresh of %s failed: %s", target, describe_failure(exc))
                reporter.info("  ↓  Clone refresh failed, re-cloning…")
                shutil.rmtree(target, ignore_errors=True)
        else:
            reporter.info(f"  ↓  Cloning https://github.com/{reference.full_name} …")

        self._clone(reference, target)
        return target

    def _refresh(self, target: Path) -> None:
        self._run(["git", "-C", str(target), "fetch", "--depth", "1", "origin", "HEAD"])
        self._run(["git", "-C", str(target), "reset", "--hard", "FETCH_HEAD"])

    def _clone(self, reference: RepositoryReference, target: Path) -> None:
        try:
            self._run(["git", "clone", "--depth", "1", reference.clone_url, str(target)])
        except RUNNER_ERRORS as exc:
            shutil.rmtree(target, ignore_errors=True)
            raise CloneFailure(
                f"Clone failed for {reference.full_name}: {describe_failure(exc)}"
            ) from exc

    def _run(self, args: list[str]) -> str:
        return self._runner(args, cwd=self.checkout_root, timeout=self.timeout)


__all__ = ["CLONE_TIMEOUT_SECONDS", "CheckoutManager", "CloneFailure"]

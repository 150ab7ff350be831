"""Per-commit check dispatch.

Every commit of an accepted push is checked by its own task on a bounded
thread pool: fetch the commit from GitHub, build its diff, inspect it and
log the verdict. Tasks share nothing, and a failing task only ever logs;
it cannot affect its siblings or the webhook response that was already
sent.
"""

from __future__ import annotations

import concurrent.futures
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING

from diffcheck_service.inspection.engine import InspectionError
from diffcheck_service.models.inspection import InspectionReport
from diffcheck_service.tools.diff import build_commit_diff
from diffcheck_service.tools.github import GitHubToolError, get_commit_detail
from diffcheck_service.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from github import Github

    from diffcheck_service.inspection.engine import InspectionEngine
    from diffcheck_service.models.event import CommitRef

logger = get_logger("checks.dispatcher")


class CommitCheckDispatcher:
    """Runs commit checks in the background.

    ``max_workers`` bounds the number of concurrent GitHub requests; a push
    with more commits than workers queues the rest.

    Shutdown is best effort: :meth:`shutdown` waits up to the grace period,
    cancels checks that never started and leaves running ones behind.
    """

    def __init__(
        self,
        github_client: Github,
        engine: InspectionEngine,
        max_workers: int = 8,
        shutdown_grace: float = 5.0,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            github_client: Client used for commit lookups.
            engine: Inspection engine called with each commit's diff.
            max_workers: Upper bound on concurrently running checks.
            shutdown_grace: Default seconds :meth:`shutdown` waits.
        """
        self._client = github_client
        self._engine = engine
        self._shutdown_grace = shutdown_grace
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="commit-check"
        )
        # Bookkeeping for shutdown only; checks never read it
        self._pending: set[Future[InspectionReport | None]] = set()
        self._pending_lock = threading.Lock()
        self._closed = False

    @property
    def pending_count(self) -> int:
        """Checks submitted but not yet finished."""
        with self._pending_lock:
            return len(self._pending)

    def dispatch_checks(
        self,
        repo_full_name: str,
        commit_refs: Iterable[CommitRef],
    ) -> list[Future[InspectionReport | None]]:
        """Start one check per commit and return without waiting.

        Args:
            repo_full_name: Repository in owner/repo format.
            commit_refs: Commits referenced by the push.

        Returns:
            One future per submitted check. Futures resolve to the report,
            or None when the commit could not be verified; they never raise.
        """
        futures: list[Future[InspectionReport | None]] = []

        for ref in commit_refs:
            try:
                if self._closed:
                    raise RuntimeError("dispatcher is shut down")
                future = self._executor.submit(self.check_commit, repo_full_name, ref.id)
            except RuntimeError:
                logger.warning(
                    "Dispatcher shut down, dropping commit check",
                    extra={"repo": repo_full_name, "sha": ref.id},
                )
                continue

            with self._pending_lock:
                self._pending.add(future)
            future.add_done_callback(self._forget)
            futures.append(future)

        logger.info(
            "Dispatched commit checks",
            extra={"repo": repo_full_name, "count": len(futures)},
        )
        return futures

    def check_commit(self, repo_full_name: str, sha: str) -> InspectionReport | None:
        """Check a single commit. Never raises.

        Args:
            repo_full_name: Repository in owner/repo format.
            sha: Commit SHA.

        Returns:
            The inspection report, or None when the commit could not be
            fetched or inspected.
        """
        context = {"repo": repo_full_name, "sha": sha}
        logger.info("Checking commit", extra=context)

        try:
            commit = get_commit_detail(self._client, repo_full_name, sha)
        except GitHubToolError as e:
            logger.error(
                "Failed to retrieve commit info",
                extra={**context, "error": str(e), "status": e.status},
            )
            return None
        except Exception as e:
            logger.exception(
                "Unexpected error retrieving commit info", extra={**context, "error": str(e)}
            )
            return None

        diff = build_commit_diff(commit.files)
        if not diff:
            logger.info(
                "No patch to inspect, treating commit as clean",
                extra={**context, "file_count": len(commit.files)},
            )
            return InspectionReport.clean()

        try:
            report = self._engine.inspect(diff)
        except InspectionError as e:
            logger.warning("Unable to verify commit", extra={**context, "error": str(e)})
            return None
        except Exception as e:
            logger.exception("Inspection engine failed", extra={**context, "error": str(e)})
            return None

        logger.info("Inspection complete", extra={**context, "ok": report.passed})

        if report.passed:
            logger.info("No issues found in commit", extra=context)
            return report

        for warning in report.warnings:
            logger.warning(
                "Warning found",
                extra={
                    **context,
                    "warning": warning.description,
                    "type": warning.category,
                    "line": warning.line,
                },
            )
        return report

    def shutdown(self, grace_period: float | None = None) -> int:
        """Stop accepting checks and release the pool.

        Args:
            grace_period: Seconds to wait for in-flight checks. Defaults to
                the value given at construction.

        Returns:
            Number of checks still unfinished when the grace period ended.
        """
        if grace_period is None:
            grace_period = self._shutdown_grace

        with self._pending_lock:
            self._closed = True
            pending = set(self._pending)

        if pending:
            logger.info("Waiting for commit checks", extra={"pending": len(pending)})
            _, not_done = concurrent.futures.wait(pending, timeout=grace_period)
        else:
            not_done = set()

        self._executor.shutdown(wait=False, cancel_futures=True)

        if not_done:
            logger.warning(
                "Abandoning unfinished commit checks", extra={"pending": len(not_done)}
            )
        return len(not_done)

    def _forget(self, future: Future[InspectionReport | None]) -> None:
        with self._pending_lock:
            self._pending.discard(future)

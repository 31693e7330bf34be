"""Concurrent fan-out of independent report reads.

Each task gets its own SQLAlchemy session (sessions are not shared between
threads) and a ``ReportingRepository`` bound to it. Results are joined before
the caller assembles the report; the first failure, the overall deadline, or
a cancellation signal abandons all outstanding tasks.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from siteops.core.errors import DataAccessFailure, ReportCancelled, ReportGenerationError, ReportTimeout
from siteops.repositories.reporting_repository import ReportingRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")
ReportTask = Callable[[ReportingRepository], Any]

POLL_INTERVAL_SECONDS = 0.05


class ReportFanOut:
    """Per-report executor; use as a context manager so threads are released.

    On timeout or cancellation the executor is shut down without waiting:
    queued tasks are dropped, but a task already inside a query keeps its
    worker thread and session until the database returns, since a running
    synchronous SQLAlchemy query cannot be interrupted. A database-side
    statement timeout is what bounds how long such stragglers live.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        max_workers: int,
        timeout_seconds: float,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._deadline = time.monotonic() + timeout_seconds
        self._timeout_seconds = timeout_seconds
        self._cancel_event = cancel_event
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="report-fanout")

    def __enter__(self) -> ReportFanOut:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _run_task(
        self,
        stage: str,
        task: ReportTask,
        failure_cls: type[ReportGenerationError],
    ) -> Any:
        try:
            with self._session_factory() as session:
                return task(ReportingRepository(session))
        except SQLAlchemyError as exc:
            raise failure_cls(stage, f"Read failed at stage '{stage}': {exc}") from exc
        except ReportGenerationError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error in report task %s", stage)
            raise failure_cls(stage, f"Task failed at stage '{stage}': {exc}") from exc

    def _check_interrupted(self, stage: str) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise ReportCancelled(stage, f"Report cancelled while running '{stage}'.")
        if time.monotonic() >= self._deadline:
            raise ReportTimeout(
                stage,
                f"Report exceeded {self._timeout_seconds:g}s deadline while running '{stage}'.",
            )

    def gather(
        self,
        tasks: dict[str, ReportTask],
        *,
        failure_cls: type[ReportGenerationError] = DataAccessFailure,
    ) -> dict[str, Any]:
        """Run ``tasks`` concurrently and return their results keyed by stage name."""

        if not tasks:
            return {}
        batch = ", ".join(tasks)
        self._check_interrupted(batch)

        futures: dict[Future, str] = {
            self._executor.submit(self._run_task, stage, task, failure_cls): stage
            for stage, task in tasks.items()
        }
        pending: set[Future] = set(futures)
        try:
            while pending:
                self._check_interrupted(", ".join(sorted(futures[future] for future in pending)))
                remaining = self._deadline - time.monotonic()
                done, pending = wait(
                    pending,
                    timeout=max(0.0, min(remaining, POLL_INTERVAL_SECONDS)),
                    return_when=FIRST_EXCEPTION,
                )
                for future in done:
                    error = future.exception()
                    if error is not None:
                        raise error
        except BaseException:
            for future in pending:
                future.cancel()
            raise

        logger.debug("Fan-out batch finished: %s", batch)
        return {stage: future.result() for future, stage in futures.items()}

    def run(
        self,
        stage: str,
        task: Callable[[ReportingRepository], T],
        *,
        failure_cls: type[ReportGenerationError] = DataAccessFailure,
    ) -> T:
        return self.gather({stage: task}, failure_cls=failure_cls)[stage]

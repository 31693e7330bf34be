"""Report generation failures surfaced to callers as a single error."""

from __future__ import annotations

from fastapi import HTTPException, status


class ReportGenerationError(Exception):
    """Base failure for a report request; ``stage`` names the step that failed."""

    def __init__(self, stage: str, message: str | None = None) -> None:
        self.stage = stage
        super().__init__(message or f"Report generation failed at stage '{stage}'.")


class ScopeResolutionFailure(ReportGenerationError):
    """Employee or assignment lookup errored while resolving report scope."""


class DataAccessFailure(ReportGenerationError):
    """An underlying read failed; the whole report is abandoned."""


class ReportTimeout(ReportGenerationError):
    """Report did not finish before its deadline."""


class ReportCancelled(ReportGenerationError):
    """Caller signalled cancellation while sub-queries were in flight."""


def to_http_exception(exc: ReportGenerationError) -> HTTPException:
    """Single HTTP failure for a report; the detail names the failed stage."""

    if isinstance(exc, ReportTimeout):
        status_code = status.HTTP_504_GATEWAY_TIMEOUT
    else:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HTTPException(status_code=status_code, detail=f"Dashboard unavailable ({exc.stage}): {exc}")

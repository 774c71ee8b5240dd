"""What a service operation hands back to the CLI.

Operations never raise for expected failures (no scope directories, an
unknown layer name); they return ``ok=False`` with a :class:`ServiceError`
whose ``code`` is one of :class:`ErrorCode`. The CLI renders the result or
dumps it as JSON.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    NO_SCOPES = "NO_SCOPES"
    INVALID_LAYER = "INVALID_LAYER"
    INVALID_SEVERITY = "INVALID_SEVERITY"


class ServiceError(BaseModel):
    """Why an operation failed; ``detail`` carries machine-readable context."""

    model_config = {"frozen": True}

    code: ErrorCode
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of a ``DoctorService`` operation.

    ``op`` names the operation and selects the renderer. ``data`` holds the
    report on success. ``warnings`` lists layer files that were skipped
    while loading; they never fail the run. ``meta`` carries the telemetry
    span tree under ``--verbose``.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @property
    def error_code(self) -> ErrorCode | None:
        return self.error.code if self.error else None

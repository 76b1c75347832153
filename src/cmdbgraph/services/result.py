"""ServiceResult and ServiceError — the universal service contract.

INVARIANT: All CmdbGraphService methods return ServiceResult.
The rendering layer and any API adapter consume this type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type for graph pipeline operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (``"build"``, ``"impact"``, ``"layout"``, ``"view"``).
        data: Operation-specific payload. Present on failure too when a
            partial answer is meaningful (an empty impacted set).
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry spans).
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

"""ServiceResult and ServiceError: the contract between services and CLI.

Services never raise for domain failures: a
:class:`~promptseal.errors.PromptSealError` becomes ``ok=False`` with the
error's stable code, and the CLI decides how to print it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from promptseal.errors import PromptSealError


class ServiceError(BaseModel):
    """Stable error code, message and optional detail for a failed operation."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: PromptSealError, **detail: Any) -> ServiceError:
        """Build from *exc*; a chained ``__cause__`` is kept as ``detail["cause"]``."""
        cause = exc.__cause__
        if cause is not None:
            detail.setdefault("cause", f"{type(cause).__name__}: {cause}")
        return cls(code=exc.code, message=str(exc), detail=detail)


class ServiceResult(BaseModel):
    """Return type of every service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name (``"seal_prompt"``, ``"exec_prompt"``, ...).
        data: Operation payload on success, e.g. ``{"text": ..., "empty": ...}``.
        warnings: Non-fatal issues, such as a sealed prompt that could not
            be opened or a flow file that failed to load.
        error: Set when ``ok`` is False.
        meta: Telemetry spans, filled in under ``--verbose``.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

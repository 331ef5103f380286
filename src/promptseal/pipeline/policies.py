"""The two failure strategies used by the orchestrators.

FATAL (delivery, composite resolution, flows, and the configuration and
backend steps of execution): every error reaches the caller as a
:class:`~promptseal.errors.PromptSealError` with the original exception
chained as ``__cause__``.

SOFT (the decryption stage of execution): routine client-side conditions
such as stale, foreign or tampered payloads end the call with
:data:`SOFT_EMPTY` and one warning log line, never an exception.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum
from typing import Any

import structlog

from promptseal.errors import PromptSealError

log = structlog.get_logger(__name__)

SOFT_EMPTY = ""


class FailurePolicy(StrEnum):
    FATAL = "fatal"
    SOFT = "soft"


@contextmanager
def fatal_step(step: str, error_cls: type[PromptSealError], message: str) -> Iterator[None]:
    """Run one fatal-policy step.

    ``PromptSealError`` passes through untouched.  Any other exception is
    wrapped in *error_cls* with the cause chained.
    """
    try:
        yield
    except PromptSealError as exc:
        log.error("pipeline.step_failed", step=step, policy=FailurePolicy.FATAL, code=exc.code)
        raise
    except Exception as exc:
        log.error("pipeline.step_failed", step=step, policy=FailurePolicy.FATAL, code=error_cls.code)
        raise error_cls(f"{message}: {exc}") from exc


class SoftFailure(Exception):
    """Signal for a soft-policy condition; caught at the orchestrator boundary.

    Attributes:
        reason: Stable reason code (``key_missing``, ``auth_failed``, ...).
        fields: Extra structured log fields.  Never plaintext or key material.
    """

    def __init__(self, reason: str, **fields: Any) -> None:
        super().__init__(reason)
        self.reason = reason
        self.fields = fields


def soft_empty(failure: SoftFailure, *, event: str) -> str:
    """Log *failure* once and return the soft sentinel."""
    log.warning(event, policy=FailurePolicy.SOFT, reason=failure.reason, **failure.fields)
    return SOFT_EMPTY

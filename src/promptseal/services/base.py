"""BaseService — foundation for promptseal services.

Every service receives a :class:`PromptRuntime` at construction time and
turns pipeline exceptions into ``ok=False`` results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from promptseal.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from promptseal.errors import PromptSealError
    from promptseal.runtime import PromptRuntime

log = structlog.get_logger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class PromptService(BaseService):
            def seal_prompt(self, generator: str, prompt_name: str) -> ServiceResult:
                try:
                    payload = self._runtime.delivery.deliver(generator, prompt_name)
                except PromptSealError as exc:
                    return self._failure("seal_prompt", exc)
                ...
    """

    def __init__(self, runtime: PromptRuntime) -> None:
        self._runtime = runtime

    @staticmethod
    def _failure(op: str, exc: PromptSealError, **detail: Any) -> ServiceResult:
        """Convert *exc* into a failed result."""
        log.debug("service.failed", op=op, code=exc.code)
        return ServiceResult(ok=False, op=op, error=ServiceError.from_exception(exc, **detail))

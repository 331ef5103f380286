"""AppContext — shared Click context for all commands.

Created once by the root group and passed down via ``@click.pass_obj``.
The runtime (and with it the HTTP client) is built lazily, so ``--help``,
``--examples`` and ``keygen`` never touch the backend.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from promptseal.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from promptseal.config.settings import PromptSealSettings
    from promptseal.infrastructure.completion import CompletionBackend
    from promptseal.runtime import PromptRuntime
    from promptseal.services.result import ServiceResult


class AppContext:
    """Settings, lazy runtime, and result emission for one CLI invocation.

    *backend* replaces the HTTP completion backend; tests pass a fake
    through ``CliRunner.invoke(..., obj=...)``.
    """

    def __init__(
        self,
        settings: PromptSealSettings,
        *,
        backend: CompletionBackend | None = None,
    ) -> None:
        self.settings = settings
        self._backend = backend
        self._runtime: PromptRuntime | None = None

        from promptseal.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from promptseal.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def runtime(self) -> PromptRuntime:
        """The runtime (created on first access, closed when the CLI exits)."""
        if self._runtime is None:
            from promptseal.runtime import PromptRuntime

            self._runtime = PromptRuntime(self.settings, backend=self._backend)
            ctx = click.get_current_context(silent=True)
            if ctx is not None:
                ctx.call_on_close(self._runtime.close)
        return self._runtime

    def emit(self, result: ServiceResult) -> None:
        """Print *result* and set the exit status.

        Success goes to stdout, with warnings on stderr outside JSON mode.
        Failure goes to stderr and exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

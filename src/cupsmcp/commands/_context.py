"""AppContext: what every subcommand receives through ``@click.pass_obj``.

Holds the loaded settings, builds the print backend on first use, and owns
result emission: where output goes and which exit code a result maps to.
"""

from __future__ import annotations

from functools import cached_property
from typing import TYPE_CHECKING

import click

from cupsmcp.config.logging import configure_logging
from cupsmcp.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from cupsmcp.config.settings import CupsSettings
    from cupsmcp.infrastructure.backend import PrintBackend
    from cupsmcp.services.printing import PrintService
    from cupsmcp.services.result import ServiceResult


class AppContext:
    """Per-invocation state shared by all commands.

    ``--help`` and ``--version`` never reach :attr:`backend`, so they work
    on machines without CUPS.
    """

    def __init__(self, settings: CupsSettings, *, backend: PrintBackend | None = None) -> None:
        self.settings = settings
        self._backend = backend
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def backend(self) -> PrintBackend:
        if self._backend is None:
            from cupsmcp.infrastructure.backend import PrintBackend

            self._backend = PrintBackend.from_settings(self.settings)
        return self._backend

    @cached_property
    def service(self) -> PrintService:
        from cupsmcp.services.printing import PrintService

        return PrintService(self.backend)

    @cached_property
    def output(self) -> OutputSettings:
        return OutputSettings(json_output=self.settings.json_output, verbose=self.settings.verbose)

    def confirm_large_job(self, result: ServiceResult) -> bool:
        """Ask on the terminal whether a job held for confirmation should print.

        Always False in JSON mode, where output must stay machine-readable.
        """
        if self.output.json_output or not result.awaiting_confirmation:
            return False
        data = result.data
        return click.confirm(
            f"{data.get('file')}: {data.get('pages')} pages, {data.get('sheets')} sheets. Print?",
            default=False,
            err=True,
        )

    def emit(self, result: ServiceResult) -> None:
        """Write *result* and exit 1 if it failed.

        Successful results go to stdout; their warnings go to stderr unless
        they are already part of the JSON payload. Failures go to stderr.
        """
        text = format_result(result, settings=self.output)
        if not result.ok:
            click.echo(text, err=True)
            raise SystemExit(1)
        click.echo(text)
        if not self.output.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)

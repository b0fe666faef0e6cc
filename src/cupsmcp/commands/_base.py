"""Click command class with an on-demand ``--examples`` flag."""

from __future__ import annotations

import textwrap
from typing import Any

import click


class CupsCommand(click.Command):
    """Command that keeps usage examples out of ``--help``.

    Pass ``examples=`` to ``@click.command(cls=CupsCommand, ...)``; the
    command then accepts ``--examples``, which prints them and exits.
    """

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = textwrap.dedent(examples).strip("\n") if examples else None

    def get_params(self, ctx: click.Context) -> list[click.Parameter]:
        params = super().get_params(ctx)
        if self.examples is None:
            return params
        flag = click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=self._show_examples,
            help="Show usage examples and exit.",
        )
        return [*params, flag]

    def _show_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(self.examples)
        ctx.exit(0)

# SPDX-License-Identifier: MIT

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from multicalendar.terminal import configuration, grid
from multicalendar.terminal.custom_typer import AliasedTyperGroup
from multicalendar.view import state as view_state

app = typer.Typer(
    cls=AliasedTyperGroup,
    help="multicalendar - Resource x date calendar grid in the CLI",
    no_args_is_help=True,
)
app.add_typer(configuration.app, name="config, c")
app.command(name="show, s", no_args_is_help=True)(grid.show)
app.command(name="lanes, l", no_args_is_help=True)(grid.lanes)
app.command(name="select, sel", no_args_is_help=True)(grid.select)


@app.callback()
def main_callback(
    no_header: Annotated[
        bool,
        typer.Option(
            "--no-header",
            "-nh",
            help="Suppress header output in reports",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log grid activity such as data loads",
        ),
    ] = False,
) -> None:
    """
    multicalendar - Resource x date calendar grid in the CLI

    Global options that apply to all commands.
    """
    if no_header:
        view_state.set_show_header(False)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def run() -> None:
    app()

# SPDX-License-Identifier: MIT

import re
from typing import Optional

import click
import typer.core


class AliasedTyperGroup(typer.core.TyperGroup):
    """TyperGroup whose command names may list aliases, e.g. "show, s"."""

    _ALIAS_SPLIT = re.compile(r" ?, ?")

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        for name in self.commands:
            if cmd_name in self._ALIAS_SPLIT.split(name):
                return super().get_command(ctx, name)
        return super().get_command(ctx, cmd_name)

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(self.commands)

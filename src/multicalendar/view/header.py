# SPDX-License-Identifier: MIT

from typing import Optional

from rich import print
from rich.padding import Padding

from multicalendar.view.state import get_show_header


def header(title: str, sub_header: Optional[str] = None) -> None:
    """Print the application header.

    Args:
        title: Name of the view being printed
        sub_header: Optional line under the title, e.g. the visible range
    """
    if not get_show_header():
        return

    print(Padding("[dark_orange]multicalendar[/dark_orange]", (1, 0, 0, 1)))
    print(Padding(f"[sandy_brown]{title}[/sandy_brown]", (0, 1)))
    if sub_header is not None:
        print(Padding(f"[plum1]{sub_header}[/plum1]", (0, 1)))

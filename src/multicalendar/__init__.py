# SPDX-License-Identifier: MIT

from multicalendar.cleanup import register_cleanup
from multicalendar.initialize import initialize
from multicalendar.terminal.app import run


def main() -> None:
    initialize()
    register_cleanup()
    run()


if __name__ == "__main__":
    main()

"""
lc3 - LC-3 Virtual Machine Command-Line Interface
=================================================

This module implements the command-line runner for LC-3 object images.
Images are loaded in argument order (later images overwrite earlier ones
where they overlap) and the machine starts at $3000 with the terminal in
raw, non-echoing input mode.

Usage Examples
--------------
Run a program:
    $ lc3 2048.obj

Load an OS image and a user program:
    $ lc3 os.obj program.obj

Debug logging on stderr:
    $ lc3 -v rogue.obj

Exit Codes
----------
    0    Program executed HALT
    1    An image failed to load
    2    No image given
    254  Interrupted with Ctrl-C
"""

import contextlib
import io
import logging
import signal
import sys
from pathlib import Path

import click

from lc3_vm import __version__
from lc3_vm.cli.errors import ExitCode, handle_cli_exception
from lc3_vm.emulator import (
    BufferedInput,
    Console,
    Emulator,
    InputSource,
    StopReason,
    TerminalInput,
    raw_terminal,
)

logger = logging.getLogger(__name__)


def _stdin_source() -> InputSource:
    """
    Character source for the process stdin.

    A stdin without a file descriptor (an in-process harness such as
    click's CliRunner) cannot be polled with select(), so its contents are
    read up front and served from a buffer.
    """
    try:
        return TerminalInput(sys.stdin.fileno())
    except (AttributeError, ValueError, io.UnsupportedOperation):
        return BufferedInput(sys.stdin.read())


def _stdout_stream():
    """Binary stream for program output."""
    return getattr(sys.stdout, "buffer", sys.stdout)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "images",
    nargs=-1,
    required=True,
    type=click.Path(path_type=Path),
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Debug logging on stderr",
)
@click.version_option(version=__version__, prog_name="lc3")
def main(images: tuple[Path, ...], verbose: bool) -> None:
    """
    Run LC-3 object images.

    IMAGES are one or more .obj files. Each starts with its big-endian load
    origin; execution always begins at $3000.

    Examples:

        # Run a game
        lc3 2048.obj

        # Show image loading and halt details
        lc3 -v rogue.obj
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )

    try:
        source = _stdin_source()
        emu = Emulator(console=Console(source, _stdout_stream()))

        def on_interrupt(signum, frame):
            emu.request_stop()

        if isinstance(source, TerminalInput):
            terminal = raw_terminal(source.fd)
        else:
            terminal = contextlib.nullcontext(False)

        # Ctrl-C while loading stops the run before its first instruction
        previous_handler = signal.signal(signal.SIGINT, on_interrupt)
        try:
            for path in images:
                emu.load_image(path)
            with terminal:
                event = emu.run()
        finally:
            signal.signal(signal.SIGINT, previous_handler)

        logger.debug(f"{event} after {emu.total_instructions} instructions")

        if event.reason == StopReason.INTERRUPTED:
            click.echo()
            sys.exit(ExitCode.INTERRUPTED)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


if __name__ == "__main__":
    main()

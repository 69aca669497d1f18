"""CLI entry point for the kilo viewer. Uses Click for argument parsing."""

from __future__ import annotations

import logging
import sys

import click

from pi.kilo.buffer import LineBuffer
from pi.kilo.config import Config
from pi.kilo.editor import EditorSession
from pi.kilo.errors import KiloError
from pi.kilo.terminal import CLEAR_SCREEN, CURSOR_HOME, ProcessTerminal, Terminal

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(config: Config) -> None:
    """Send log records to ``config.log_file``, never to the terminal."""
    if config.log_file:
        logging.basicConfig(
            filename=config.log_file,
            level=getattr(logging, config.log_level.upper()),
            format=_LOG_FORMAT,
        )
    else:
        logging.getLogger("pi.kilo").addHandler(logging.NullHandler())

    for problem in config.problems:
        logger.warning("%s", problem)


def run_editor(
    filename: str | None,
    terminal: Terminal | None = None,
    config: Config | None = None,
) -> int:
    """Run one viewer session and return the process exit status.

    Any :class:`KiloError` is fatal: raw mode is undone, the screen is
    cleared, the error goes to stderr and the status is 1.
    """
    if terminal is None:
        terminal = ProcessTerminal(config=config)

    try:
        with terminal.enable_raw_mode():
            buffer = LineBuffer()
            session = EditorSession(terminal, buffer)
            if filename:
                buffer.load_file(filename)
            session.run()
    except KiloError as exc:
        logger.error("Fatal: %s", exc)
        terminal.write(CLEAR_SCREEN + CURSOR_HOME)
        click.echo(str(exc), err=True)
        return 1

    logger.info("Exited normally")
    return 0


@click.command()
@click.argument("filename", required=False)
def main(filename):
    """View FILENAME in the terminal. Arrow keys move, Ctrl+Q quits."""
    config = Config.from_env()
    configure_logging(config)
    sys.exit(run_editor(filename, config=config))

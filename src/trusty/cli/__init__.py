"""Trusty CLI -- ask whether a dependency is safe to use.

This module is NEVER imported from trusty/__init__.py.
It is only loaded via the ``trusty`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

import click
from dotenv import load_dotenv

from trusty.cli.formatting import configure_logging, format_error, get_console
from trusty.config import load_config
from trusty.exceptions import TrustyError
from trusty.llm import create_backend
from trusty.orchestrator import Orchestrator, OrchestratorConfig
from trusty.report import create_report_client
from trusty.toolkit import ToolRegistry, TrustyReportTool

if TYPE_CHECKING:
    from collections.abc import Iterator

    from trusty.models.config import TrustyConfig

logger = logging.getLogger(__name__)


@contextmanager
def _advisor_session(config: TrustyConfig) -> Iterator[Orchestrator]:
    """Build the backend, report client and orchestrator; close clients on exit."""
    backend = create_backend(config.backend)
    try:
        report_client = create_report_client(config.report)
        try:
            registry = ToolRegistry([TrustyReportTool(report_client)])
            yield Orchestrator(
                backend,
                registry,
                OrchestratorConfig(turn_timeout=config.turn_timeout),
            )
        finally:
            report_client.close()
    finally:
        backend.close()


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("words", nargs=-1, required=True, type=click.UNPROCESSED)
def cli(words: tuple[str, ...]) -> None:
    """Ask whether a dependency is safe to use.

    All WORDS are joined with spaces into one question, e.g.

        trusty is left-pad safe to use in my npm project
    """
    load_dotenv()
    console = get_console()
    configure_logging(console)

    query = " ".join(words)
    stage = "startup"
    try:
        config = load_config()
        with _advisor_session(config) as orchestrator:
            try:
                result = orchestrator.run(query)
            finally:
                if orchestrator.failed_from is not None:
                    stage = orchestrator.failed_from.value
    except TrustyError as e:
        logger.error("%s failed: %s: %s", stage, type(e).__name__, e)
        format_error(f"{type(e).__name__}: {e}", console)
        raise SystemExit(1) from None

    click.echo(result.answer)

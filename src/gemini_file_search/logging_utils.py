"""Logging utilities for the File Search client."""

import logging

import logfire

PACKAGE_LOGGER = "gemini_file_search"


def setup_logging(level: str = "WARNING", use_logfire: bool = False) -> None:
    """
    Configure logging to show only gemini_file_search logs.

    The root logger is set to WARNING to silence third-party libraries
    (httpx, httpcore, etc.), while gemini_file_search is set to the requested
    level.

    Args:
        level: Logging level for gemini_file_search (DEBUG, INFO, WARNING, ERROR)
        use_logfire: Also send spans to the Logfire console and trace httpx calls
    """
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(getattr(logging, level.upper()))

    if use_logfire:
        # Console only, don't send to web
        logfire.configure(
            send_to_logfire=False,
            console=logfire.ConsoleOptions(span_style="simple"),
        )
        logfire.instrument_httpx()
        logging.getLogger(PACKAGE_LOGGER).addHandler(logfire.LogfireLoggingHandler())

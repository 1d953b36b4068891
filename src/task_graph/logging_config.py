"""Logging configuration for task_graph."""

import logging

from rich.logging import RichHandler


def setup_logging(verbose: bool = False) -> None:
    """Configure application logging levels.

    Args:
        verbose: If True, show debug logs with timestamps and paths.
                 If False, only show task_graph INFO logs and keep third-party libraries quiet.
    """
    logging.getLogger().setLevel(logging.WARNING)

    app_logger = logging.getLogger("task_graph")
    app_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for name in (
        "aiohttp",
        "httpx",
        "httpcore",
        "openai",
        "langchain",
        "langchain_core",
        "langchain_openai",
        "langgraph",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)

    if not app_logger.handlers:
        handler = RichHandler(
            show_time=verbose,
            show_path=verbose,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        app_logger.addHandler(handler)
        app_logger.propagate = False

"""
speakerscribe.logging - Logging setup for the CLI and the proxy.

The CLI logs at WARNING unless ``--verbose``; ``serve`` asks for INFO so
request milestones show up. Chatty third-party loggers (litellm, httpx,
the uvicorn access log) stay at WARNING unless debugging.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(levelname)s: %(message)s"

THIRD_PARTY_LOGGERS = ("LiteLLM", "litellm", "httpx", "httpcore", "uvicorn.access")

logger = logging.getLogger("speakerscribe")


def configure_logging(verbose: bool = False, level: int | None = None) -> int:
    """Configure the speakerscribe logger and tame dependency logging.

    Args:
        verbose: DEBUG for everything, third-party loggers included
        level: Explicit level for speakerscribe, overriding ``verbose``

    Returns:
        The level applied to the speakerscribe logger
    """
    if level is None:
        level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.setLevel(level)

    dependency_level = logging.DEBUG if verbose else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(dependency_level)

    return level

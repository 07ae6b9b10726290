"""
Centralized logging using Loguru with context-aware verbosity.

Library code calls LOG() freely; messages only appear once a state object
with a ``verbosity`` attribute has been connected (the CLI connects its
ProgramState). Using the package as a library therefore stays silent.

Usage:
    from ejshtml.lib.log import LOG, state_connectToLogger

    # At start of pipeline function:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("Compiled page.ejs", level=1)
    LOG("Reduced to 12 instructions", level=3)
"""

import sys
from contextvars import ContextVar
from typing import Any, Optional

from loguru import logger

# Context variable to hold the connected state
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

# Loguru level used for each verbosity level
LEVEL_NAMES = {1: "INFO", 2: "DEBUG", 3: "TRACE"}

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{module: <10}</cyan>:<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="TRACE")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a state object to the logging context.

    Args:
        state: Object with a ``verbosity`` attribute (e.g. ProgramState),
               or None to silence LOG() again
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if the connected state's verbosity allows.

    The record is attributed to the caller, not to this function.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru arguments for formatting the message

    Example:
        LOG("Template compiled", level=1)
        LOG("Parsed 42 top-level tokens", level=3)
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        logger.opt(depth=1).log(LEVEL_NAMES.get(level, "TRACE"), message, **kwargs)

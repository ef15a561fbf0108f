"""Exceptions raised by the generation flows.

``ValidationError`` subclasses ``ValueError`` so a boundary layer that
already maps ``ValueError`` to a client error keeps working.
"""

from typing import Callable, Optional, TypeVar

from pocket_chef.utils.logger import logger

T = TypeVar("T")


class PocketChefError(Exception):
    """Base class for Pocket Chef errors."""


class ValidationError(PocketChefError, ValueError):
    """Input failed a domain rule or the request contract.

    The message is meant for direct display to the end user.
    """


class GenerationFailure(PocketChefError):
    """The model backend returned nothing, malformed output, or raised.

    ``reason`` is one of BACKEND_ERROR, NO_OUTPUT or INVALID_OUTPUT.
    """

    BACKEND_ERROR = "backend_error"
    NO_OUTPUT = "no_output"
    INVALID_OUTPUT = "invalid_output"

    def __init__(self, message: str, reason: str = BACKEND_ERROR, raw_output: Optional[str] = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.raw_output = raw_output


def safe_execute_sync(
    func: Callable[[], T],
    operation_name: str,
    log_level: str = "warning",
    default_return: Optional[T] = None,
    reraise: bool = False,
) -> Optional[T]:
    """Run ``func`` and log any exception under ``operation_name``.

    Args:
        func: Callable to execute (no args).
        operation_name: Description for logging.
        log_level: "debug", "warning" or "error". Default: "warning".
        default_return: Value returned on exception when ``reraise`` is False.
        reraise: Re-raise the original exception after logging.

    Returns:
        Result of ``func``, or ``default_return`` on exception.
    """
    try:
        return func()
    except Exception as e:
        msg = f"{operation_name}: {e}"
        if log_level == "debug":
            logger.debug(msg)
        elif log_level == "error":
            logger.error(msg)
        else:
            logger.warning(msg)
        if reraise:
            raise
        return default_return

"""
Helpers for turning exceptions into log lines and client-facing detail strings.
"""

import logging


def _safe_str(obj) -> str:
    """
    Convert an object to string, falling back to repr and then to the type name
    when ``__str__`` fails.
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def format_exception_message(exception: Exception) -> str:
    """
    Describe an exception in one line.

    httpx raises several exceptions with an empty message (``ConnectTimeout()``,
    ``ReadTimeout('')``); for those the exception type name is used instead so
    that the ``details`` field of an error envelope is never blank.
    """
    if exception is None:
        return "None"
    text = _safe_str(exception).strip()
    if text:
        return text
    return type(exception).__name__


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: Exception,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with its traceback and the chain of causes.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g., "[Forward]", "[Probe]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
    """
    message = f"{prefix} {type(exception).__name__}: {format_exception_message(exception)}"
    cause = exception.__cause__ or exception.__context__
    if cause is not None:
        message += f" (caused by {type(cause).__name__}: {format_exception_message(cause)})"
    logger.log(level, message, exc_info=exception)

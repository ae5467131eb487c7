"""
Exception logging helpers for the proxy boundary.

Both helpers tolerate exceptions whose ``__str__`` fails and exception groups
raised from task groups inside the HTTP client.
"""

import logging


def _safe_str(obj) -> str:
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def _sub_exceptions(exception) -> list:
    try:
        return list(getattr(exception, "exceptions", None) or [])
    except Exception:
        return []


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: BaseException,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception, expanding sub-exceptions of an exception group.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g. "[Proxy]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
    """
    message = _safe_str(exception) if exception is not None else "None"
    subs = _sub_exceptions(exception)
    try:
        if subs:
            logger.log(level, f"{prefix} Exception with {len(subs)} sub-exceptions: {message}")
            for i, sub in enumerate(subs, start=1):
                logger.log(
                    level,
                    f"{prefix} Sub-exception {i}: {type(sub).__name__}: {_safe_str(sub)}",
                    exc_info=sub,
                )
        else:
            logger.log(
                level,
                f"{prefix} Exception: {message}",
                exc_info=exception if exception is not None else False,
            )
    except Exception:
        logger.log(level, f"{prefix} Exception (logging details failed)")


def format_exception_message(exception: BaseException) -> str:
    """Readable one-line message, including sub-exceptions of a group."""
    if exception is None:
        return "None"
    subs = _sub_exceptions(exception)
    if not subs:
        return _safe_str(exception)
    joined = "; ".join(f"{type(sub).__name__}: {_safe_str(sub)}" for sub in subs)
    return f"{_safe_str(exception)} (Sub-exceptions: {joined})"

"""
Error types and common error handling utilities for the OPR Data package.
"""

import logging
from typing import Optional, Any, Callable

logger = logging.getLogger(__name__)


class OPRDataError(Exception):
    """Base class for all fetcher errors."""


class NavigationTimeout(OPRDataError):
    """A navigation or content-settle wait exceeded its bound."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class ElementNotFound(OPRDataError):
    """A required page element never appeared."""

    def __init__(self, selector: str, timeout: Optional[float] = None):
        detail = f" within {timeout}s" if timeout is not None else ""
        super().__init__(f"Element '{selector}' not found{detail}")
        self.selector = selector
        self.timeout = timeout


class FetchError(OPRDataError):
    """A download returned a non-success status or a page failed to render."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class FilesystemError(OPRDataError):
    """An output directory or file could not be created."""

    def __init__(self, message: str, path: Any = None):
        super().__init__(message)
        self.path = path


def safe_execute(func: Callable, *args, default_return: Any = None,
                 error_msg: Optional[str] = None, **kwargs) -> Any:
    """
    Run an optional step, logging and absorbing any failure.

    Only for steps whose failure must not stop the caller, such as
    dismissing a menu or a cookie banner.

    Args:
        func: Function to execute
        *args: Arguments for the function
        default_return: Value to return on error
        error_msg: Custom error message
        **kwargs: Keyword arguments for the function

    Returns:
        Function result or default_return on error
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        if error_msg:
            logger.warning(f"{error_msg}: {e}")
        else:
            logger.warning(f"Error in {func.__name__}: {e}")
        return default_return

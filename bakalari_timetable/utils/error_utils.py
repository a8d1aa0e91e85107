#!/usr/bin/env python3
"""
Error types and error handling utilities for the Bakalari Timetable application.

Every failure of the core is raised as a subclass of BakalariError so callers
can tell a credentials problem (LoginError) from a portal format change
(TimetableParseError, UnknownResponseError) or a network outage
(LoginTransportError, RequestTransportError).
"""
import enum
import functools
import inspect
import logging
from typing import Any, Callable, Optional, Tuple, Type, TypeVar, cast

import httpx

logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


class BakalariError(Exception):
    """Base exception class for all Bakalari application errors."""
    pass


class ConfigError(BakalariError):
    """Exception raised for invalid or incomplete configuration."""
    pass


# --- Login errors ---

class LoginError(BakalariError):
    """Exception raised when a token cannot be obtained."""
    pass


class LoginTransportError(LoginError):
    """The login request itself failed (connection, timeout, ...)."""
    pass


class LoginFailedError(LoginError):
    """The portal did not accept the login (probably wrong credentials).

    The raw response is kept for diagnostics.
    """

    def __init__(self, response: httpx.Response):
        super().__init__(f"login failed with status {response.status_code}")
        self.response = response


class CookieParseError(LoginError):
    """The portal redirected after login but did not set the auth cookie."""

    def __init__(self, message: str = "failed to parse auth cookie from login response"):
        super().__init__(message)


# --- Request errors ---

class RequestError(BakalariError):
    """Exception raised when a portal page cannot be retrieved."""
    pass


class RequestTransportError(RequestError):
    """The page request failed on the network level."""
    pass


class UnknownResponseError(RequestError):
    """The portal returned something that does not look like the expected page."""

    def __init__(self, reason: str):
        super().__init__(f"server returned unknown response: {reason}")
        self.reason = reason


class AuthRequiredError(RequestError):
    """The portal redirected to its login page: the token is invalid or expired."""

    def __init__(self, location: str):
        super().__init__(f"authentication required (redirected to {location})")
        self.location = location


class UnknownSelectorError(RequestError):
    """The selector does not name an entity known to the session's directory."""

    def __init__(self, selector: Any):
        super().__init__(f"unknown selector: {selector}")
        self.selector = selector


# --- Parse errors ---

class ParseErrorKind(enum.Enum):
    """Exact variant of a timetable parse failure."""

    # Hours
    NO_NUM = "no number"
    NO_NUM_TEXT = "no number text"
    PARSE_NUM = "failed to parse number"
    MISMATCHED_NUM = "mismatched number"
    NO_FROM = "no from"
    NO_FROM_TEXT = "no from text"
    PARSE_FROM = "failed to parse from"
    NO_DASH = "no dash"
    NO_TO = "no to"
    NO_TO_TEXT = "no to text"
    PARSE_TO = "failed to parse to"
    # Days
    NO_DATE = "no date"
    PARSE_DATE = "failed to parse date"
    # Lessons
    NO_DATA = "missing data-detail attribute"
    JSON = "failed to parse json"
    MISSING_PROPERTY = "missing property"
    BAD_SUBJECT_TEXT = "bad subjecttext"
    DATA_TYPE_MISMATCH = "data type mismatch"
    # Assembly
    MISMATCHED_LESSON_COUNT = "lesson count does not match hour count"


class TimetableParseError(BakalariError):
    """Base exception for timetable decoding failures."""

    def __init__(self, kind: ParseErrorKind, detail: Optional[str] = None):
        message = kind.value if detail is None else f"{kind.value}: {detail}"
        super().__init__(message)
        self.kind = kind
        self.detail = detail


class HourParseError(TimetableParseError):
    """An hour header block could not be decoded."""

    def __init__(self, kind: ParseErrorKind, index: int, detail: Optional[str] = None):
        super().__init__(kind, detail)
        self.index = index

    def __str__(self) -> str:
        return f"failed to parse hour {self.index + 1}: {super().__str__()}"


class DayParseError(TimetableParseError):
    """A day row could not be decoded."""

    def __init__(self, kind: ParseErrorKind, index: int, detail: Optional[str] = None):
        super().__init__(kind, detail)
        self.index = index

    def __str__(self) -> str:
        return f"failed to parse day {self.index + 1}: {super().__str__()}"


class LessonParseError(TimetableParseError):
    """A lesson entry could not be decoded."""

    def __init__(self, kind: ParseErrorKind, detail: Optional[str] = None, prop: Optional[str] = None):
        super().__init__(kind, detail if detail is not None else prop)
        self.prop = prop


def handle_errors(
    error_class: Type[BakalariError],
    catch: Tuple[Type[BaseException], ...] = (httpx.HTTPError,),
    error_message: Optional[str] = None
) -> Callable[[F], F]:
    """
    Decorator that converts low-level exceptions into application errors.

    The error is logged and always re-raised as ``error_class``, chained to the
    original exception. Exceptions that are not listed in ``catch`` propagate
    unchanged.

    Args:
        error_class: The BakalariError subclass to raise.
        catch: Exception types to convert.
        error_message: A message template formatted with ``error`` and ``function``.

    Returns:
        The decorated function.
    """
    def decorator(func: F) -> F:
        function_name = f"{func.__module__}.{func.__qualname__}"

        def convert(e: BaseException) -> BakalariError:
            msg = error_message or "Error in {function}: {error}"
            formatted_msg = msg.format(error=str(e) or type(e).__name__, function=function_name)
            logger.error(formatted_msg)
            return error_class(formatted_msg)

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    return await func(*args, **kwargs)
                except catch as e:
                    raise convert(e) from e
            return cast(F, async_wrapper)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except catch as e:
                raise convert(e) from e
        return cast(F, wrapper)
    return decorator

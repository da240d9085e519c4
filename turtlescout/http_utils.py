"""Single-shot HTTP requests against the Turtle API with classified failures."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

import aiohttp


class HttpErrorType(Enum):
    TIMEOUT = "timeout"
    CANCELED = "canceled"
    HTTP_EXCEPTION = "http_exception"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class HttpError:
    error_type: HttpErrorType
    exception: BaseException | None = None


@dataclass(frozen=True)
class HttpResult:
    value: Any = None
    error: HttpError | None = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value) -> "HttpResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error_type: HttpErrorType, exception: BaseException | None = None) -> "HttpResult":
        return cls(error=HttpError(error_type, exception))


def build_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _being_cancelled() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


async def do_request(
    session: aiohttp.ClientSession,
    base_url: str,
    method: str,
    path: str,
    body: Any,
    timeout: float,
    parse_response: Callable[[Any], Any] | None = None,
) -> HttpResult:
    '''
    Sends one JSON request and classifies the outcome. Never retries.

    On success the result holds the response text, or parse_response(json) when a
    parser is given. A parser that raises makes the outcome UNKNOWN.
    A CancelledError while the calling task is itself being cancelled is re-raised
    rather than classified, so cancellation reaches the caller straight away.

    :param session: aiohttp session used for the request.
    :param base_url: Turtle API base URL.
    :param method: HTTP method, e.g. "PATCH" or "POST".
    :param path: Path relative to base_url.
    :param body: JSON-serializable request body.
    :param timeout: Total request timeout in seconds.
    :param parse_response: Maps the decoded JSON response to the caller's value.
    '''
    url = build_url(base_url, path)
    try:
        async with session.request(
            method,
            url,
            json=body,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as response:
            response.raise_for_status()
            if parse_response is None:
                return HttpResult.success(await response.text())
            payload = await response.json(content_type=None)
            return HttpResult.success(parse_response(payload))
    except asyncio.TimeoutError as e:
        return HttpResult.failure(HttpErrorType.TIMEOUT, e)
    except asyncio.CancelledError as e:
        if _being_cancelled():
            raise
        return HttpResult.failure(HttpErrorType.CANCELED, e)
    except aiohttp.ClientError as e:
        return HttpResult.failure(HttpErrorType.HTTP_EXCEPTION, e)
    except Exception as e:
        return HttpResult.failure(HttpErrorType.UNKNOWN, e)


def log_http_error(
    logger: logging.Logger,
    error: HttpError,
    timeout_message: str,
    canceled_message: str,
    http_exception_message: str,
    unknown_message: str,
) -> str:
    """Log an HttpError with the message for its type and return that message."""
    match error.error_type:
        case HttpErrorType.TIMEOUT:
            logger.warning(timeout_message)
            return timeout_message
        case HttpErrorType.CANCELED:
            logger.warning(canceled_message)
            return canceled_message
        case HttpErrorType.HTTP_EXCEPTION:
            logger.error(http_exception_message, exc_info=error.exception)
            return http_exception_message
        case _:
            logger.error(unknown_message, exc_info=error.exception)
            return unknown_message

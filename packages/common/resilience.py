"""Retrying request execution for LaunchDarkly API calls.

Wraps a single httpx request with bounded retry logic using tenacity:
- 429 responses back off exponentially (base * 2^(attempt-1)), as LaunchDarkly asks
- other failures back off linearly (base * attempt)
- 404 responses are never retried

Every failure surfaces as a RequestError carrying the HTTP status code (None for
transport failures), so callers branch on status instead of message text.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from packages.common.config import ThrottleConfig

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]

_STATUS_GUIDANCE: dict[int, str] = {
    400: "Check the request format and parameters.",
    401: "Please check your API key is valid and has the required permissions.",
    404: "Resource may not exist or you don't have access to it.",
}


class RequestError(Exception):
    """Raised when an API request fails.

    Attributes:
        status_code: HTTP status of the failed response, or None for transport errors.
        status_text: HTTP reason phrase, empty for transport errors.
    """

    def __init__(self, message: str, status_code: int | None = None, status_text: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class RateLimitedError(RequestError):
    """Raised when the API answered 429 Too Many Requests."""

    pass


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, RequestError) and not error.is_not_found


def build_error(response: httpx.Response) -> RequestError:
    """Classify a non-success response into a RequestError.

    The message embeds status code, reason phrase, the response body when
    present, and guidance for common statuses.
    """
    status_text = response.reason_phrase
    message = f"HTTP {response.status_code}: {status_text}"

    if response.status_code == 429:
        return RateLimitedError(message, status_code=429, status_text=status_text)

    body = response.text
    if body:
        logger.debug(f"API error response body: {body}")
        message += f". Response: {body}"

    guidance = _STATUS_GUIDANCE.get(response.status_code)
    if guidance:
        message += f". {guidance}"

    return RequestError(message, status_code=response.status_code, status_text=status_text)


class RetryingRequestExecutor:
    """Send httpx requests with rate-limit aware retries.

    Exactly one request is in flight per execute_with_retry call.

    Example:
        >>> async with httpx.AsyncClient() as client:
        ...     executor = RetryingRequestExecutor(client, ThrottleConfig())
        ...     response = await executor.execute_with_retry(client.build_request("GET", url))
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        throttle: ThrottleConfig | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize the executor.

        Args:
            client: httpx client used to send requests.
            throttle: Retry configuration (default: ThrottleConfig()).
            sleep: Awaitable sleep used between attempts; injectable for tests.
        """
        self.client = client
        self.throttle = throttle or ThrottleConfig()
        self._sleep = sleep

    async def execute_with_retry(
        self, request: httpx.Request, max_attempts: int | None = None
    ) -> httpx.Response:
        """Send a request, retrying transient failures.

        Args:
            request: Prepared request (see httpx.AsyncClient.build_request).
            max_attempts: Attempt budget; defaults to throttle.max_retries.

        Returns:
            httpx.Response: The first successful response.

        Raises:
            RequestError: When attempts are exhausted or the error is not retryable.
        """
        attempts = max_attempts or self.throttle.max_retries

        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=self._compute_wait,
            retry=retry_if_exception(_is_retryable),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        response: httpx.Response = await retrying(self._send_once, request)
        return response

    async def _send_once(self, request: httpx.Request) -> httpx.Response:
        try:
            response = await self.client.send(request)
        except httpx.HTTPError as e:
            raise RequestError(f"Network error: {e}") from e

        if response.is_success:
            return response

        raise build_error(response)

    def _compute_wait(self, retry_state: RetryCallState) -> float:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        attempt = retry_state.attempt_number
        base = self.throttle.retry_base_delay
        if isinstance(error, RateLimitedError):
            return float(base * 2 ** (attempt - 1))
        return float(base * attempt)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        attempt = retry_state.attempt_number
        total = getattr(retry_state.retry_object.stop, "max_attempt_number", "?")
        if isinstance(error, RateLimitedError):
            logger.warning(f"Rate limited (attempt {attempt}/{total}), waiting {delay}s")
        else:
            logger.warning(
                f"Request failed (attempt {attempt}/{total}): {error}. Retrying in {delay}s"
            )


__all__ = ["RateLimitedError", "RequestError", "RetryingRequestExecutor", "build_error"]

"""Tests for the retrying request executor.

Uses httpx.MockTransport to script response sequences and an AsyncMock sleep to
observe backoff delays without waiting.
"""

from collections.abc import Callable
from unittest.mock import AsyncMock

import httpx
import pytest

from packages.common.config import ThrottleConfig
from packages.common.resilience import (
    RateLimitedError,
    RequestError,
    RetryingRequestExecutor,
    build_error,
)

URL = "https://ld.test/api/v2/flags/default"


def scripted(responses: list[httpx.Response | Exception]) -> tuple[Callable, list[httpx.Request]]:
    """Return a MockTransport handler that replays responses in order, plus its call log."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        item = responses[len(calls) - 1]
        if isinstance(item, Exception):
            raise item
        return item

    return handler, calls


def make_executor(
    responses: list[httpx.Response | Exception],
    mock_sleep: AsyncMock,
    throttle: ThrottleConfig | None = None,
) -> tuple[RetryingRequestExecutor, httpx.AsyncClient, list[httpx.Request]]:
    handler, calls = scripted(responses)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    executor = RetryingRequestExecutor(client, throttle or ThrottleConfig(), sleep=mock_sleep)
    return executor, client, calls


def sleeps(mock_sleep: AsyncMock) -> list[float]:
    return [call.args[0] for call in mock_sleep.await_args_list]


@pytest.mark.unit
class TestExecuteWithRetry:
    """Retry policy of RetryingRequestExecutor.execute_with_retry."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, mock_sleep: AsyncMock) -> None:
        executor, client, calls = make_executor(
            [httpx.Response(200, json={"ok": True})], mock_sleep
        )
        async with client:
            response = await executor.execute_with_retry(client.build_request("GET", URL))

        assert response.json() == {"ok": True}
        assert len(calls) == 1
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rate_limit_backs_off_exponentially(self, mock_sleep: AsyncMock) -> None:
        executor, client, calls = make_executor(
            [httpx.Response(429), httpx.Response(429), httpx.Response(200, json={})],
            mock_sleep,
        )
        async with client:
            response = await executor.execute_with_retry(client.build_request("GET", URL))

        assert response.status_code == 200
        assert len(calls) == 3
        assert sleeps(mock_sleep) == [5.0, 10.0]

    @pytest.mark.asyncio
    async def test_rate_limit_doubles_each_time(self, mock_sleep: AsyncMock) -> None:
        executor, client, _ = make_executor(
            [httpx.Response(429) for _ in range(3)] + [httpx.Response(200, json={})],
            mock_sleep,
        )
        async with client:
            await executor.execute_with_retry(client.build_request("GET", URL), max_attempts=4)

        assert sleeps(mock_sleep) == [5.0, 10.0, 20.0]

    @pytest.mark.asyncio
    async def test_server_errors_back_off_linearly(self, mock_sleep: AsyncMock) -> None:
        executor, client, _ = make_executor(
            [httpx.Response(500) for _ in range(3)] + [httpx.Response(200, json={})],
            mock_sleep,
        )
        async with client:
            await executor.execute_with_retry(client.build_request("GET", URL), max_attempts=4)

        assert sleeps(mock_sleep) == [5.0, 10.0, 15.0]

    @pytest.mark.asyncio
    async def test_exhausted_attempts_raise_last_error(self, mock_sleep: AsyncMock) -> None:
        executor, client, calls = make_executor(
            [httpx.Response(500, text="boom"), httpx.Response(500, text="boom")],
            mock_sleep,
        )
        async with client:
            with pytest.raises(RequestError, match="500") as exc_info:
                await executor.execute_with_retry(
                    client.build_request("GET", URL), max_attempts=2
                )

        assert len(calls) == 2
        assert exc_info.value.status_code == 500
        assert "Response: boom" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_rate_limit_on_final_attempt_raises_rate_limited(
        self, mock_sleep: AsyncMock
    ) -> None:
        executor, client, calls = make_executor([httpx.Response(429) for _ in range(3)], mock_sleep)
        async with client:
            with pytest.raises(RateLimitedError):
                await executor.execute_with_retry(client.build_request("GET", URL))

        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self, mock_sleep: AsyncMock) -> None:
        executor, client, calls = make_executor(
            [httpx.Response(404), httpx.Response(200, json={})], mock_sleep
        )
        async with client:
            with pytest.raises(RequestError) as exc_info:
                await executor.execute_with_retry(client.build_request("GET", URL))

        assert exc_info.value.is_not_found
        assert len(calls) == 1
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_network_error_is_retried(self, mock_sleep: AsyncMock) -> None:
        executor, client, calls = make_executor(
            [httpx.ConnectError("connection refused"), httpx.Response(200, json={})],
            mock_sleep,
        )
        async with client:
            response = await executor.execute_with_retry(client.build_request("GET", URL))

        assert response.status_code == 200
        assert len(calls) == 2
        assert sleeps(mock_sleep) == [5.0]

    @pytest.mark.asyncio
    async def test_network_error_surfaces_without_status(self, mock_sleep: AsyncMock) -> None:
        executor, client, _ = make_executor(
            [httpx.ConnectError("connection refused")], mock_sleep
        )
        async with client:
            with pytest.raises(RequestError, match="Network error") as exc_info:
                await executor.execute_with_retry(
                    client.build_request("GET", URL), max_attempts=1
                )

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_default_attempts_follow_throttle(self, mock_sleep: AsyncMock) -> None:
        executor, client, calls = make_executor(
            [httpx.Response(503) for _ in range(5)],
            mock_sleep,
            ThrottleConfig(max_retries=5, retry_base_delay=1.0),
        )
        async with client:
            with pytest.raises(RequestError):
                await executor.execute_with_retry(client.build_request("GET", URL))

        assert len(calls) == 5
        assert sleeps(mock_sleep) == [1.0, 2.0, 3.0, 4.0]


@pytest.mark.unit
class TestBuildError:
    """Error classification and messages."""

    def _response(self, status: int, text: str = "") -> httpx.Response:
        return httpx.Response(status, text=text, request=httpx.Request("GET", URL))

    def test_rate_limited(self) -> None:
        error = build_error(self._response(429))
        assert isinstance(error, RateLimitedError)
        assert str(error) == "HTTP 429: Too Many Requests"

    def test_unauthorized_guidance(self) -> None:
        error = build_error(self._response(401))
        assert error.is_unauthorized
        assert str(error) == (
            "HTTP 401: Unauthorized. Please check your API key is valid and has the "
            "required permissions."
        )

    def test_not_found_guidance(self) -> None:
        error = build_error(self._response(404))
        assert error.is_not_found
        assert "Resource may not exist or you don't have access to it." in str(error)

    def test_bad_request_includes_body(self) -> None:
        error = build_error(self._response(400, '{"message":"invalid patch"}'))
        assert str(error) == (
            'HTTP 400: Bad Request. Response: {"message":"invalid patch"}. '
            "Check the request format and parameters."
        )
        assert error.status_text == "Bad Request"

    def test_other_status_has_no_guidance(self) -> None:
        error = build_error(self._response(502))
        assert str(error) == "HTTP 502: Bad Gateway"
        assert not isinstance(error, RateLimitedError)

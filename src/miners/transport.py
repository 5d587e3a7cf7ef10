"""
GitHub Transport Module.

Executes single authenticated GitHub REST calls and classifies their failures.
Rate-limited calls are retried with exponential backoff; every other failure
surfaces immediately. All callers of one transport share a single
``BackoffGate`` so concurrent workers pause together instead of each
hammering the API with its own retry schedule.
"""

import asyncio
import re
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from github import Auth, Github, GithubException, RateLimitExceededException
from github import UnknownObjectException
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import settings, logger
from miners.errors import (
    AnalysisCancelledError,
    GitHubAPIError,
    MalformedResponseError,
    NotFoundError,
    RateLimitedError,
    TransportError,
)

RATE_LIMIT_PATTERN = re.compile(
    r"rate limit|throttl|abuse detection|too many requests", re.IGNORECASE
)

Sleep = Callable[[float], Awaitable[None]]


class BackoffGate:
    """
    Shared pause point for every request of one pipeline run.

    A worker that hits a rate limit holds the gate for its backoff delay;
    other workers wait on the gate before sending their next request.
    """

    def __init__(
        self, sleep: Sleep = asyncio.sleep, clock: Callable[[], float] = time.monotonic
    ):
        self._sleep = sleep
        self._clock = clock
        self._resume_at = 0.0

    @property
    def remaining(self) -> float:
        return max(0.0, self._resume_at - self._clock())

    def hold(self, seconds: float) -> None:
        self._resume_at = max(self._resume_at, self._clock() + seconds)

    async def wait(self) -> None:
        remaining = self.remaining
        if remaining > 0:
            await self._sleep(remaining)

    async def backoff(self, seconds: float) -> None:
        """Hold the gate for ``seconds`` and sleep through it."""
        self.hold(seconds)
        await self.wait()


class GitHubTransport:
    """
    One-call-at-a-time GitHub REST client with failure classification.

    Attributes:
        requester: Object exposing PyGithub's ``requestJsonAndCheck``
        gate (BackoffGate): Backoff state shared by all callers
        max_attempts (int): Attempts per rate-limited request
        base_delay (float): First backoff delay, doubled on each retry
    """

    def __init__(
        self,
        requester: Any,
        gate: Optional[BackoffGate] = None,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        cancel_event: Optional[asyncio.Event] = None,
    ):
        self.requester = requester
        self.gate = gate or BackoffGate()
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.cancel_event = cancel_event

    @classmethod
    def from_settings(
        cls,
        token: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> "GitHubTransport":
        """
        Build a transport backed by a PyGithub requester.

        PyGithub's own retry policy is disabled so backoff stays under
        this transport's control.

        Args:
            token (Optional[str]): GitHub token; falls back to settings
            cancel_event (Optional[asyncio.Event]): External cancellation signal

        Returns:
            GitHubTransport: Configured transport
        """
        if token is None and settings.github_token is not None:
            token = settings.github_token.get_secret_value()
        github = Github(
            auth=Auth.Token(token) if token else None,
            base_url=settings.github_api_url,
            timeout=settings.request_timeout,
            per_page=100,
            retry=None,
        )
        return cls(
            github.requester,
            max_attempts=settings.rate_limit_max_attempts,
            base_delay=settings.rate_limit_base_delay,
            cancel_event=cancel_event,
        )

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    async def request(
        self, endpoint: str, path: str, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Execute one GET call and return its decoded JSON payload.

        Args:
            endpoint (str): Logical endpoint name used in logs and errors
            path (str): API path relative to the base URL
            params (Optional[Dict[str, Any]]): Query parameters

        Returns:
            Any: Decoded JSON payload (dict or list)

        Raises:
            NotFoundError: Upstream answered 404
            MalformedResponseError: Body could not be decoded
            GitHubAPIError: Any other failure, including exhausted rate-limit retries
            AnalysisCancelledError: The cancellation signal fired
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(RateLimitedError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.base_delay),
            sleep=self._backoff_sleep,
            before_sleep=self._log_backoff,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await self._wait_for_gate()
                    payload = await self._execute(endpoint, path, params)
        except RateLimitedError as e:
            logger.error(
                {
                    "message": "GitHub rate limit retries exhausted",
                    "endpoint": endpoint,
                    "attempts": self.max_attempts,
                }
            )
            raise GitHubAPIError(
                endpoint, f"rate limited after {self.max_attempts} attempts", e.status
            ) from e
        return payload

    async def _wait_for_gate(self) -> None:
        if self.cancelled:
            raise AnalysisCancelledError("analysis cancelled")
        await self._until_cancelled(self.gate.wait())

    async def _backoff_sleep(self, seconds: float) -> None:
        await self._until_cancelled(self.gate.backoff(seconds))

    def _log_backoff(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            {
                "message": "GitHub API rate limited, backing off",
                "endpoint": getattr(error, "endpoint", None),
                "attempt": retry_state.attempt_number,
                "delay_seconds": retry_state.next_action.sleep
                if retry_state.next_action
                else None,
            }
        )

    async def _until_cancelled(self, awaitable: Awaitable[Any]) -> Any:
        """Await ``awaitable`` unless the cancellation signal fires first."""
        task = asyncio.ensure_future(awaitable)
        if self.cancel_event is None:
            return await task

        cancel_wait = asyncio.ensure_future(self.cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, cancel_wait}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            cancel_wait.cancel()
        if task not in done:
            task.cancel()
            raise AnalysisCancelledError("analysis cancelled")
        return task.result()

    async def _execute(
        self, endpoint: str, path: str, params: Optional[Dict[str, Any]]
    ) -> Any:
        logger.debug({"message": "GitHub API request", "endpoint": endpoint, "path": path})
        try:
            _, payload = await self._until_cancelled(
                asyncio.to_thread(
                    self.requester.requestJsonAndCheck, "GET", path, parameters=params
                )
            )
        except (AnalysisCancelledError, TransportError):
            raise
        except GithubException as e:
            raise self._classify(endpoint, e) from e
        except ValueError as e:
            raise MalformedResponseError(endpoint, f"undecodable body: {e}") from e
        except Exception as e:
            raise GitHubAPIError(endpoint, str(e)) from e

        # PyGithub wraps bodies it cannot parse as JSON in {"data": <text>}
        if payload is None or (
            isinstance(payload, dict)
            and set(payload) == {"data"}
            and isinstance(payload["data"], str)
        ):
            raise MalformedResponseError(endpoint, "response body is not JSON")
        return payload

    @staticmethod
    def _classify(endpoint: str, error: GithubException) -> TransportError:
        """Map a PyGithub exception onto the transport error taxonomy."""
        status = error.status
        data = error.data
        message = data.get("message", "") if isinstance(data, dict) else str(data or "")

        if isinstance(error, UnknownObjectException) or status == 404:
            return NotFoundError(endpoint, message or "not found", status)
        if (
            isinstance(error, RateLimitExceededException)
            or status in (403, 429)
            or RATE_LIMIT_PATTERN.search(message)
        ):
            return RateLimitedError(endpoint, message or "rate limited", status)
        return GitHubAPIError(endpoint, message or f"HTTP {status}", status)

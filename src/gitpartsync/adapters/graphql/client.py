"""
GraphQL Client - HTTP client for the desired-state (qontract) server.

Transient failures are retried on a fixed backoff ladder before giving up.
"""

import logging
import time
from typing import Any, Callable, Optional, Sequence

import requests

from ...core.exceptions import FetchError


class GraphQLClient:
    """
    Minimal GraphQL-over-HTTP client with basic auth and retries.

    Connection errors, timeouts, HTTP 429 and 5xx responses are retried;
    anything else fails immediately.
    """

    RETRY_STATUS = {429, 500, 502, 503, 504}

    def __init__(
        self,
        url: str,
        username: str = "",
        password: str = "",
        timeout: float = 30.0,
        retry_delays: Sequence[float] = (1.0, 3.0, 10.0),
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the GraphQL client.

        Args:
            url: GraphQL endpoint of the current bundle (ends in ``/graphql``)
            username: Basic auth user
            password: Basic auth password
            timeout: Seconds before a single attempt is abandoned
            retry_delays: Sleep before each retry; its length bounds retries
            session: Optional preconfigured session
            sleep: Sleep function (injectable for tests)
        """
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.retry_delays = tuple(retry_delays)
        self.logger = logging.getLogger("GraphQLClient")
        self._sleep = sleep

        self._session = session or requests.Session()
        if username or password:
            self._session.auth = (username, password)
        self._session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })

    def bundle_url(self, bundle_sha: Optional[str] = None) -> str:
        """
        Endpoint serving a specific bundle.

        The last path segment (``graphql``) is replaced by
        ``graphqlsha/<sha>``; with no sha the current endpoint is returned.
        """
        if not bundle_sha:
            return self.url
        base = self.url.rsplit("/", 1)[0]
        return f"{base}/graphqlsha/{bundle_sha}"

    def query(
        self,
        query: str,
        variables: Optional[dict[str, Any]] = None,
        bundle_sha: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Run a query and return its ``data`` object.

        Raises:
            FetchError: If every attempt failed or the server reported errors
        """
        url = self.bundle_url(bundle_sha)
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        attempts = len(self.retry_delays) + 1
        last_error: Optional[BaseException] = None

        for attempt in range(attempts):
            if attempt:
                delay = self.retry_delays[attempt - 1]
                self.logger.warning(
                    f"Retrying desired-state fetch in {delay:g}s ({attempt}/{attempts - 1}): {last_error}"
                )
                self._sleep(delay)

            try:
                response = self._session.post(url, json=payload, timeout=self.timeout)
            except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
                last_error = e
                continue

            if response.status_code in self.RETRY_STATUS:
                last_error = FetchError(f"GraphQL server returned {response.status_code}")
                continue

            return self._handle_response(response, url)

        raise FetchError(
            f"GraphQL query against {url} failed after {attempts} attempt(s)",
            cause=last_error,
        )

    def _handle_response(self, response: requests.Response, url: str) -> dict[str, Any]:
        if not response.ok:
            body = response.text[:500] if response.text else ""
            raise FetchError(f"GraphQL server returned {response.status_code}: {body}")

        try:
            document = response.json()
        except ValueError as e:
            raise FetchError(f"GraphQL response from {url} is not JSON", cause=e) from e

        if not isinstance(document, dict):
            raise FetchError(f"GraphQL response from {url} is not an object")

        errors = document.get("errors")
        if errors:
            messages = "; ".join(str(err.get("message", err)) if isinstance(err, dict) else str(err) for err in errors)
            raise FetchError(f"GraphQL errors: {messages}")

        data = document.get("data")
        if not isinstance(data, dict):
            raise FetchError(f"GraphQL response from {url} has no data")
        return data

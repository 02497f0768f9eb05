"""
GitLab API Client - Low-level HTTP client for the GitLab REST API.

This handles the raw HTTP communication with GitLab.
The GitLabAdapter uses this to implement the GitHostPort.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

from ...core.ports.git_host import (
    GitHostError,
    AuthenticationError,
    NotFoundError,
)


class GitLabApiClient:
    """
    Low-level GitLab REST API client.

    Handles authentication, request/response, and error handling.
    """

    API_VERSION = "v4"

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the GitLab client.

        Args:
            base_url: GitLab instance URL (e.g., https://gitlab.example.com)
            token: Personal or project access token
            timeout: Seconds before a request is abandoned
            session: Optional preconfigured session
        """
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/api/{self.API_VERSION}"
        self.timeout = timeout
        self.logger = logging.getLogger("GitLabApiClient")

        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "PRIVATE-TOKEN": token,
        })

    # -------------------------------------------------------------------------
    # Core Request Methods
    # -------------------------------------------------------------------------

    def request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make an authenticated request to the GitLab API.

        Args:
            method: HTTP method
            endpoint: API endpoint (e.g., 'projects/123')
            **kwargs: Additional arguments for requests

        Returns:
            Decoded JSON response

        Raises:
            GitHostError: On API errors
        """
        url = f"{self.api_url}/{endpoint}"
        kwargs.setdefault("timeout", self.timeout)

        try:
            response = self._session.request(method, url, **kwargs)
        except requests.exceptions.ConnectionError as e:
            raise GitHostError(f"Connection failed: {e}", cause=e) from e
        except requests.exceptions.Timeout as e:
            raise GitHostError(f"Request timed out: {e}", cause=e) from e

        return self._handle_response(response, endpoint)

    def get(self, endpoint: str, **kwargs) -> Any:
        """GET request."""
        return self.request("GET", endpoint, **kwargs)

    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------

    def _handle_response(
        self,
        response: requests.Response,
        endpoint: str
    ) -> Any:
        """Handle API response and errors."""
        if response.ok:
            if response.text:
                return response.json()
            return {}

        status = response.status_code
        error_body = response.text[:500] if response.text else ""

        if status == 401:
            raise AuthenticationError(
                "Authentication failed. Check GITLAB_TOKEN."
            )

        if status == 404:
            raise NotFoundError(
                f"Not found: {endpoint}",
                identity=endpoint
            )

        raise GitHostError(
            f"API error {status}: {error_body}",
            identity=endpoint
        )

    # -------------------------------------------------------------------------
    # Convenience Methods
    # -------------------------------------------------------------------------

    def get_commit(self, project_path: str, ref: str) -> dict[str, Any]:
        """Fetch the commit a ref points at."""
        endpoint = (
            f"projects/{quote(project_path, safe='')}"
            f"/repository/commits/{quote(ref, safe='')}"
        )
        return self.get(endpoint)

"""GitHub REST API client.

Only the authenticated user endpoint is used: it resolves which account a
bearer token belongs to.
"""

from typing import Optional

import httpx
import logfire

from gitswitch.adapter.error import GitHubAPIError
from gitswitch.domain.value import RemoteUser


class GitHubAPIClient:
    """Direct calls to the GitHub REST API."""

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize GitHub API client.

        Args:
            api_url: REST API base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def fetch_user(self, token: str) -> RemoteUser:
        """Fetch the account that owns a token.

        Args:
            token: Bearer credential

        Returns:
            Username and avatar of the token's owner

        Raises:
            GitHubAPIError: On transport failure, non-200 status, or a body
                without a ``login`` field
        """
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
        }

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.get(
                    f"{self.api_url}/user", headers=headers, timeout=self.timeout
                )
        except httpx.HTTPError as e:
            logfire.error("GitHub user request HTTP error", error=str(e))
            raise GitHubAPIError(f"HTTP error fetching user: {e}") from e

        if response.status_code != 200:
            logfire.error(
                "GitHub user request failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise GitHubAPIError(response.text, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise GitHubAPIError("Failed to parse JSON response") from e

        username = data.get("login") if isinstance(data, dict) else None
        if not isinstance(username, str) or not username:
            raise GitHubAPIError("Response missing 'login' field")

        logfire.info("GitHub user resolved", username=username)
        return RemoteUser(username=username, avatar_url=data.get("avatar_url"))

"""GitHub repository listing proxy."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from devconnector.config import Settings
from devconnector.errors import NotFound
from devconnector.logging import get_logger

logger = get_logger("devconnector.github")

NO_GITHUB_PROFILE = "No Github profile found"


@dataclass(frozen=True)
class GitHubConfig:
    """Credentials and endpoint for the GitHub REST API."""

    token: str | None
    api_url: str = "https://api.github.com"
    timeout_seconds: float = 10.0
    user_agent: str = "devconnector-api"
    per_page: int = 5

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubConfig":
        return cls(
            token=settings.github_token,
            api_url=settings.github_api_url.rstrip("/"),
            timeout_seconds=settings.github_timeout_seconds,
            user_agent=settings.github_user_agent,
        )


class RepositoryProxy:
    """
    Fetch a user's oldest-created public repositories.

    The provider body is returned as-is. Every failure, including a missing
    token, is reported as ``NotFound`` to the caller and logged with its cause.
    """

    def __init__(
        self,
        config: GitHubConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._transport = transport

    def repos_url(self, username: str) -> str:
        return f"{self.config.api_url}/users/{quote(username, safe='')}/repos"

    def _params(self) -> dict[str, Any]:
        return {"per_page": self.config.per_page, "sort": "created", "direction": "asc"}

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.config.user_agent,
            "Authorization": f"Bearer {self.config.token}",
        }

    async def fetch_repositories(self, username: str) -> Any:
        if not self.config.token:
            logger.warning("github_token_missing", username=username)
            raise NotFound(NO_GITHUB_PROFILE)

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self.config.timeout_seconds,
            ) as client:
                response = await client.get(
                    self.repos_url(username),
                    params=self._params(),
                    headers=self._headers(),
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            logger.info(
                "github_request_rejected",
                username=username,
                status=exc.response.status_code,
            )
            raise NotFound(NO_GITHUB_PROFILE) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "github_request_failed",
                username=username,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise NotFound(NO_GITHUB_PROFILE) from exc
        except ValueError as exc:
            logger.error("github_invalid_body", username=username, error=str(exc))
            raise NotFound(NO_GITHUB_PROFILE) from exc

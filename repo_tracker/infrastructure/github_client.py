import aiohttp
import asyncio
import logging
from typing import Dict, Any, List, Optional
from urllib.parse import quote

from repo_tracker.domain.exceptions import GitHubRequestException, UserNotFoundException
from repo_tracker.domain.models import PAGE_SIZE

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
# Fixed ordering for repository pages
REPO_SORT = "stars"
REPO_DIRECTION = "desc"

class GitHubRestClient:
    """
    Client for the public, unauthenticated GitHub REST API.
    Issues single GET requests; errors are raised, never retried.
    """

    def __init__(self, api_url: str = DEFAULT_API_URL, request_timeout: Optional[float] = None):
        self.headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "github-repo-tracker",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self.api_url = api_url.rstrip("/")
        # total=None disables aiohttp's default five minute limit
        self.timeout = aiohttp.ClientTimeout(total=request_timeout)

    async def fetch_profile(self, session: aiohttp.ClientSession, username: str) -> Dict[str, Any]:
        """
        Fetches the public profile of a user.

        Raises:
            UserNotFoundException: GitHub answered 404.
            GitHubRequestException: any other failure.
        """
        path = f"/users/{quote(username, safe='')}"
        return await self._get_json(session, path, username)

    async def fetch_repos(
        self,
        session: aiohttp.ClientSession,
        username: str,
        page: int = 1,
        per_page: int = PAGE_SIZE,
    ) -> List[Dict[str, Any]]:
        """
        Fetches one page of a user's public repositories, most starred first.

        Returns:
            The raw JSON array; fewer than per_page items means no further pages.
        """
        path = f"/users/{quote(username, safe='')}/repos"
        params = {
            "page": str(page),
            "per_page": str(per_page),
            "sort": REPO_SORT,
            "direction": REPO_DIRECTION,
        }
        return await self._get_json(session, path, username, params=params)

    async def _get_json(
        self,
        session: aiohttp.ClientSession,
        path: str,
        username: str,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = f"{self.api_url}{path}"
        logger.debug(f"GET {url} params={params}")
        try:
            async with session.get(url, params=params, headers=self.headers, timeout=self.timeout) as response:
                if response.status == 404:
                    raise UserNotFoundException(path, username)

                if response.status == 403:
                    # Anonymous rate limit; surfaced like any other failure
                    logger.warning(
                        f"GitHub refused {path} (403). "
                        f"Rate limit remaining: {response.headers.get('X-RateLimit-Remaining')}"
                    )

                if response.status >= 400:
                    raise GitHubRequestException(path, status=response.status)

                return await response.json()

        except GitHubRequestException:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Request to {path} failed: {e}")
            raise GitHubRequestException(path, message=f"GitHub request failed: {e}.") from e
        except ValueError as e:
            # Body was not valid JSON
            raise GitHubRequestException(path, message="GitHub returned a malformed response.") from e

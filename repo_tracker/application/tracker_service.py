import asyncio
import logging
from typing import List, Optional, Set

import aiohttp

from repo_tracker.application.filter_view import FilterResult, filter_repositories
from repo_tracker.domain.exceptions import (
    EmptyUsernameException,
    GitHubRequestException,
    UserNotFoundException,
)
from repo_tracker.domain.models import (
    PAGE_SIZE,
    OperationState,
    PaginationCursor,
    Profile,
    RepoQuery,
    Repository,
    normalize_username,
)
from repo_tracker.infrastructure.acl import GitHubTranslator
from repo_tracker.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)

PROFILE_FAILED_MESSAGE = "Failed to fetch profile data. Please try again later."
REPOS_FAILED_MESSAGE = "Failed to fetch repositories. Please try again later."


class RepoTrackerService:
    """
    Holds the state of one tracker session: the typed username, the loaded
    profile, the current page of repositories and the filter term.

    Repository pages are fetched from a single place, `_sync_query`, whenever
    the (username, page) pair changes. Every fetch carries a token and a
    response is only applied if its token is still the latest one, so a slow
    answer for an old username or page never overwrites newer state.
    """

    def __init__(
            self,
            github_client: GitHubRestClient,
            session: Optional[aiohttp.ClientSession],
            page_size: int = PAGE_SIZE,
    ):
        self.github_client = github_client
        self.session = session

        self.username = ""
        self.filter_term = ""
        self.profile: Optional[Profile] = None
        self.repositories: List[Repository] = []
        self.cursor = PaginationCursor(page_size=page_size)
        self.profile_state = OperationState()
        self.repos_state = OperationState()

        # Login the repositories are shown for; set once its profile loaded
        self._active_username: Optional[str] = None
        self._query: Optional[RepoQuery] = None
        self._profile_token = 0
        self._repos_token = 0
        self._tasks: Set[asyncio.Task] = set()

    # -- derived state -------------------------------------------------

    @property
    def loading(self) -> bool:
        return self.profile_state.is_loading or self.repos_state.is_loading

    @property
    def error(self) -> Optional[str]:
        return self.profile_state.message or self.repos_state.message

    @property
    def query(self) -> Optional[RepoQuery]:
        return self._query

    @property
    def can_go_next(self) -> bool:
        return self._query is not None and self.cursor.has_more and not self.loading

    @property
    def can_go_previous(self) -> bool:
        return self._query is not None and self.cursor.page > 1 and not self.loading

    @property
    def visible_repositories(self) -> FilterResult:
        return filter_repositories(self.repositories, self.filter_term)

    # -- input ---------------------------------------------------------

    def set_username(self, raw: str) -> None:
        """
        Updates the typed username. A different (or empty) username drops
        everything loaded for the previous one and goes back to page 1.
        """
        previous = self.username.strip()
        self.username = raw
        if raw.strip() and raw.strip() == previous:
            return

        logger.debug(f"Username changed to '{raw.strip()}'. Resetting state.")
        self._profile_token += 1
        self._clear_loaded()
        self.profile_state = OperationState()

    def set_filter(self, term: str) -> None:
        # Local only; the loaded page is filtered on read
        self.filter_term = term

    # -- profile -------------------------------------------------------

    async def submit(self) -> bool:
        """
        Fetches the profile of the typed username and, on success, makes
        page 1 of its repositories current.

        Returns:
            True if the profile was loaded and applied.
        """
        self._profile_token += 1
        token = self._profile_token
        self._clear_loaded()

        try:
            username = normalize_username(self.username)
        except EmptyUsernameException as e:
            self.profile_state = OperationState.error(str(e))
            return False

        self.profile_state = OperationState.loading()
        logger.info(f"Fetching profile for '{username}'.")

        try:
            raw_user = await self.github_client.fetch_profile(self.session, username)
            profile = GitHubTranslator.to_profile(raw_user)
        except UserNotFoundException:
            if self._profile_is_stale(token, username):
                return False
            logger.warning(f"GitHub user '{username}' not found.")
            self.profile_state = OperationState.error(f'GitHub user "{username}" not found.')
            return False
        except (GitHubRequestException, ValueError) as e:
            if self._profile_is_stale(token, username):
                return False
            logger.error(f"Error fetching profile for '{username}': {e}")
            self.profile_state = OperationState.error(PROFILE_FAILED_MESSAGE)
            return False

        if self._profile_is_stale(token, username):
            return False

        self.profile = profile
        self.profile_state = OperationState.success()
        self._active_username = username
        self.cursor = self.cursor.reset()
        self._sync_query()
        return True

    def _profile_is_stale(self, token: int, username: str) -> bool:
        if token != self._profile_token:
            logger.debug(f"Discarding stale profile response for '{username}'.")
            return True
        return False

    # -- pagination ----------------------------------------------------

    def next_page(self) -> bool:
        if not self.can_go_next:
            return False
        self.cursor = self.cursor.next()
        self._sync_query()
        return True

    def previous_page(self) -> bool:
        if not self.can_go_previous:
            return False
        self.cursor = self.cursor.previous()
        self._sync_query()
        return True

    def refresh_repos(self) -> bool:
        """Re-fetches the current page without moving the cursor."""
        if self._query is None or self.loading:
            return False
        self._schedule_repo_fetch(self._query)
        return True

    # -- repositories --------------------------------------------------

    def _sync_query(self) -> None:
        """Starts a repository fetch whenever the (username, page) pair changes."""
        if self._active_username is None:
            query = None
        else:
            query = RepoQuery(username=self._active_username, page=self.cursor.page)

        if query == self._query:
            return
        self._query = query
        if query is not None:
            self._schedule_repo_fetch(query)

    def _schedule_repo_fetch(self, query: RepoQuery) -> None:
        self._repos_token += 1
        self.repos_state = OperationState.loading()
        task = asyncio.get_running_loop().create_task(
            self._fetch_repos(query, self._repos_token)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fetch_repos(self, query: RepoQuery, token: int) -> None:
        logger.info(f"Fetching repositories for '{query.username}', page {query.page}.")
        try:
            raw_page = await self.github_client.fetch_repos(
                self.session, query.username, query.page, self.cursor.page_size
            )
            repositories = GitHubTranslator.to_repositories(raw_page)
        except UserNotFoundException:
            if self._repos_is_stale(token, query):
                return
            logger.warning(f"No repositories available for '{query.username}'.")
            self._fail_repos(f'Could not retrieve public repositories for "{query.username}".')
            return
        except (GitHubRequestException, ValueError) as e:
            if self._repos_is_stale(token, query):
                return
            logger.error(f"Error fetching repositories for '{query.username}': {e}")
            self._fail_repos(REPOS_FAILED_MESSAGE)
            return

        if self._repos_is_stale(token, query):
            return

        self.repositories = repositories
        self.cursor = self.cursor.with_page_count(len(repositories))
        self.repos_state = OperationState.success()
        logger.info(
            f"Loaded {len(repositories)} repositories for '{query.username}' "
            f"(page {query.page}, has more: {self.cursor.has_more})."
        )

    def _repos_is_stale(self, token: int, query: RepoQuery) -> bool:
        if token != self._repos_token or query != self._query:
            logger.debug(f"Discarding stale repositories for '{query.username}', page {query.page}.")
            return True
        return False

    def _fail_repos(self, message: str) -> None:
        self.repositories = []
        self.cursor = self.cursor.with_page_count(0)
        self.repos_state = OperationState.error(message)

    def _clear_loaded(self) -> None:
        self._repos_token += 1
        self.profile = None
        self.repositories = []
        self.cursor = self.cursor.reset()
        self.repos_state = OperationState()
        self._active_username = None
        self._sync_query()

    async def wait_idle(self) -> None:
        """Waits until no repository fetch is outstanding."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

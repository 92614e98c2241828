import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock

import aiohttp

from repo_tracker.domain.exceptions import GitHubRequestException, UserNotFoundException
from repo_tracker.infrastructure.github_client import GitHubRestClient


def _response(status: int, payload=None, json_error: Exception = None):
    resp = AsyncMock()
    resp.status = status
    resp.headers = {}
    if json_error is not None:
        resp.json = AsyncMock(side_effect=json_error)
    else:
        resp.json = AsyncMock(return_value=payload)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _session(*responses):
    session = AsyncMock()
    session.get = MagicMock(side_effect=list(responses))
    return session


class TestGitHubRestClient(unittest.TestCase):
    def test_headers_are_unauthenticated(self) -> None:
        client = GitHubRestClient()

        self.assertIsInstance(client.headers, dict)
        self.assertNotIn("Authorization", client.headers)
        self.assertIn("User-Agent", client.headers)
        self.assertIn("Accept", client.headers)

    def test_api_url_trailing_slash_is_stripped(self) -> None:
        client = GitHubRestClient(api_url="http://localhost:8080/")
        self.assertEqual(client.api_url, "http://localhost:8080")

    def test_no_timeout_by_default(self) -> None:
        client = GitHubRestClient()
        self.assertIsNone(client.timeout.total)


class TestFetchProfile(unittest.IsolatedAsyncioTestCase):
    async def test_returns_decoded_json(self) -> None:
        client = GitHubRestClient()
        session = _session(_response(200, {"login": "octocat"}))

        data = await client.fetch_profile(session, "octocat")

        self.assertEqual(data, {"login": "octocat"})
        url = session.get.call_args.args[0]
        self.assertEqual(url, "https://api.github.com/users/octocat")

    async def test_404_raises_user_not_found(self) -> None:
        client = GitHubRestClient()
        session = _session(_response(404))

        with self.assertRaises(UserNotFoundException) as ctx:
            await client.fetch_profile(session, "doesnotexist12345")

        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(ctx.exception.username, "doesnotexist12345")

    async def test_rate_limit_403_is_not_retried(self) -> None:
        client = GitHubRestClient()
        session = _session(_response(403))

        with self.assertRaises(GitHubRequestException) as ctx:
            await client.fetch_profile(session, "octocat")

        self.assertEqual(ctx.exception.status, 403)
        self.assertEqual(session.get.call_count, 1)

    async def test_client_error_is_wrapped(self) -> None:
        client = GitHubRestClient()
        session = AsyncMock()
        session.get = MagicMock(side_effect=aiohttp.ClientConnectionError("boom"))

        with self.assertRaises(GitHubRequestException) as ctx:
            await client.fetch_profile(session, "octocat")

        self.assertIsNone(ctx.exception.status)
        self.assertNotIsInstance(ctx.exception, UserNotFoundException)

    async def test_timeout_is_wrapped(self) -> None:
        client = GitHubRestClient()
        session = AsyncMock()
        session.get = MagicMock(side_effect=asyncio.TimeoutError())

        with self.assertRaises(GitHubRequestException):
            await client.fetch_profile(session, "octocat")

    async def test_malformed_json_is_wrapped(self) -> None:
        client = GitHubRestClient()
        session = _session(_response(200, json_error=ValueError("Expecting value")))

        with self.assertRaises(GitHubRequestException):
            await client.fetch_profile(session, "octocat")


class TestFetchRepos(unittest.IsolatedAsyncioTestCase):
    async def test_sends_page_and_sort_parameters(self) -> None:
        client = GitHubRestClient()
        session = _session(_response(200, [{"id": 1}]))

        data = await client.fetch_repos(session, "torvalds", page=2, per_page=30)

        self.assertEqual(data, [{"id": 1}])
        call = session.get.call_args
        self.assertEqual(call.args[0], "https://api.github.com/users/torvalds/repos")
        self.assertEqual(
            call.kwargs["params"],
            {"page": "2", "per_page": "30", "sort": "stars", "direction": "desc"},
        )

    async def test_username_is_path_quoted(self) -> None:
        client = GitHubRestClient()
        session = _session(_response(200, []))

        await client.fetch_repos(session, "a/b")

        self.assertEqual(session.get.call_args.args[0], "https://api.github.com/users/a%2Fb/repos")

    async def test_server_error_raises(self) -> None:
        client = GitHubRestClient()
        session = _session(_response(502))

        with self.assertRaises(GitHubRequestException) as ctx:
            await client.fetch_repos(session, "octocat")

        self.assertEqual(ctx.exception.status, 502)

import unittest
from datetime import datetime, timezone

from pydantic import ValidationError

from repo_tracker.infrastructure.acl import GitHubTranslator


def _raw_repo(**overrides):
    raw = {
        "id": 1296269,
        "name": "Hello-World",
        "description": "My first repository on GitHub!",
        "html_url": "https://github.com/octocat/Hello-World",
        "stargazers_count": 80,
        "forks_count": 9,
        "updated_at": "2024-01-02T03:04:05Z",
        "language": "Python",
    }
    raw.update(overrides)
    return raw


class TestGitHubTranslatorProfile(unittest.TestCase):
    def test_to_profile_maps_fields(self) -> None:
        raw_user = {
            "login": "octocat",
            "name": "The Octocat",
            "bio": None,
            "followers": 20,
            "following": 0,
            "public_repos": 8,
            "location": "San Francisco",
            "avatar_url": "https://avatars.githubusercontent.com/u/583231",
            "html_url": "https://github.com/octocat",
        }

        profile = GitHubTranslator.to_profile(raw_user)

        self.assertEqual(profile.login, "octocat")
        self.assertEqual(profile.public_repos, 8)
        self.assertIsNone(profile.bio)
        self.assertEqual(profile.location, "San Francisco")

    def test_null_counters_default_to_zero(self) -> None:
        profile = GitHubTranslator.to_profile(
            {"login": "ghost", "html_url": "https://github.com/ghost", "followers": None}
        )

        self.assertEqual(profile.followers, 0)
        self.assertEqual(profile.public_repos, 0)

    def test_non_object_payload_raises(self) -> None:
        with self.assertRaises(ValueError):
            GitHubTranslator.to_profile(["not", "a", "user"])


class TestGitHubTranslatorRepository(unittest.TestCase):
    def test_to_repository_parses_updated_at(self) -> None:
        repo = GitHubTranslator.to_repository(_raw_repo())

        self.assertEqual(repo.id, 1296269)
        self.assertEqual(repo.stargazers_count, 80)
        self.assertEqual(
            repo.updated_at,
            datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        )

    def test_missing_updated_at_raises(self) -> None:
        raw_repo = _raw_repo()
        del raw_repo["updated_at"]

        with self.assertRaises(ValueError):
            GitHubTranslator.to_repository(raw_repo)

    def test_non_string_updated_at_raises(self) -> None:
        for raw_date in (1700000000, {"at": "2024-01-02"}, ["2024-01-02T03:04:05Z"]):
            with self.subTest(raw_date=raw_date):
                with self.assertRaises(ValueError):
                    GitHubTranslator.to_repository(_raw_repo(updated_at=raw_date))

    def test_missing_id_raises_validation_error(self) -> None:
        raw_repo = _raw_repo()
        del raw_repo["id"]

        with self.assertRaises(ValidationError):
            GitHubTranslator.to_repository(raw_repo)

    def test_to_repositories_requires_array(self) -> None:
        with self.assertRaises(ValueError):
            GitHubTranslator.to_repositories({"message": "Not Found"})

    def test_to_repositories_keeps_order(self) -> None:
        repos = GitHubTranslator.to_repositories(
            [_raw_repo(id=1, name="b"), _raw_repo(id=2, name="a")]
        )

        self.assertEqual([r.name for r in repos], ["b", "a"])

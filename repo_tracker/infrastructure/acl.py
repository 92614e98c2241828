from datetime import datetime
from typing import Any, Dict
from repo_tracker.domain.models import Profile, Repository

class GitHubTranslator:
    """
    Anti-corruption layer that translates raw GitHub REST JSON payloads into Profile and Repository instances.
    """

    @staticmethod
    def to_profile(raw_user: Dict[str, Any]) -> Profile:
        """
        Transforms a raw `GET /users/{username}` payload into a Profile.

        Args:
            raw_user (Dict[str, Any]): The decoded JSON object returned by GitHub.

        Returns:
            Profile: The domain model instance representing the user.
        """
        if not isinstance(raw_user, dict):
            raise ValueError("User payload must be a JSON object.")

        return Profile(
            login=raw_user.get('login', ''),
            name=raw_user.get('name'),
            bio=raw_user.get('bio'),
            followers=raw_user.get('followers') or 0,
            following=raw_user.get('following') or 0,
            public_repos=raw_user.get('public_repos') or 0,
            location=raw_user.get('location'),
            avatar_url=raw_user.get('avatar_url'),
            html_url=raw_user.get('html_url', ''),
        )

    @staticmethod
    def to_repository(raw_repo: Dict[str, Any]) -> Repository:
        """Transforms one element of a `GET /users/{username}/repos` array into a Repository."""
        if not isinstance(raw_repo, dict):
            raise ValueError("Repository payload must be a JSON object.")

        raw_date = raw_repo.get('updated_at')
        if not isinstance(raw_date, str) or not raw_date:
            raise ValueError("updated_at must be an ISO 8601 string to build Repository.")
        updated_at_dt = datetime.fromisoformat(raw_date.replace("Z", "+00:00"))

        return Repository(
            id=raw_repo.get('id'),
            name=raw_repo.get('name', ''),
            description=raw_repo.get('description'),
            html_url=raw_repo.get('html_url', ''),
            stargazers_count=raw_repo.get('stargazers_count') or 0,
            forks_count=raw_repo.get('forks_count') or 0,
            updated_at=updated_at_dt,
            language=raw_repo.get('language'),
        )

    @classmethod
    def to_repositories(cls, raw_page: Any) -> list[Repository]:
        if not isinstance(raw_page, list):
            raise ValueError("Repository page must be a JSON array.")
        return [cls.to_repository(raw_repo) for raw_repo in raw_page]

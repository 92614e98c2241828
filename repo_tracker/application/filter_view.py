from typing import List, Optional, Sequence
from pydantic import BaseModel, ConfigDict

from repo_tracker.domain.models import Repository


class FilterResult(BaseModel):
    """The repositories of the loaded page that pass the current filter term."""
    model_config = ConfigDict(frozen=True)

    repositories: List[Repository]
    term: str = ""

    @property
    def is_filtered(self) -> bool:
        return bool(self.term)

    @property
    def is_empty(self) -> bool:
        return not self.repositories

    @property
    def empty_message(self) -> Optional[str]:
        """Why nothing is shown, or None when at least one repository passes."""
        if self.repositories:
            return None
        if self.is_filtered:
            return f'No repositories found matching "{self.term}".'
        return "No public repositories found for this user."


def filter_repositories(repositories: Sequence[Repository], term: str) -> FilterResult:
    """
    Keeps the repositories whose name contains `term`, ignoring case.

    Only the currently loaded page is searched. An empty term passes everything.
    """
    needle = term.lower()
    matches = [repo for repo in repositories if needle in repo.name.lower()]
    return FilterResult(repositories=matches, term=term)

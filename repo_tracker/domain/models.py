from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from repo_tracker.domain.exceptions import EmptyUsernameException

# Number of repositories requested per page
PAGE_SIZE = 30


def normalize_username(raw: Optional[str]) -> str:
    """Trim the raw input, rejecting empty or whitespace-only usernames."""
    username = (raw or "").strip()
    if not username:
        raise EmptyUsernameException()
    return username


class Profile(BaseModel):
    """
    Immutable domain model representing a GitHub user's public profile.
    Replaced wholesale whenever a new profile is fetched.
    """
    model_config = ConfigDict(frozen=True)

    login: str = Field(..., description="Login name of the user")
    name: Optional[str] = Field(None, description="Display name, if set")
    bio: Optional[str] = Field(None, description="Profile bio, if set")
    followers: int = Field(0, ge=0)
    following: int = Field(0, ge=0)
    public_repos: int = Field(0, ge=0, description="Total number of public repositories")
    location: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: str = Field(..., description="Link to the profile on github.com")


class Repository(BaseModel):
    """
    Immutable domain model representing a single public repository.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="The numeric GitHub repository ID, used as identity key")
    name: str = Field(..., description="Name of the repository")
    description: Optional[str] = None
    html_url: str
    stargazers_count: int = Field(0, ge=0)
    forks_count: int = Field(0, ge=0)
    updated_at: datetime = Field(..., description="Timestamp of the last update")
    language: Optional[str] = None


class RepoQuery(BaseModel):
    """The (username, page) pair a repository page is fetched for."""
    model_config = ConfigDict(frozen=True)

    username: str
    page: int = Field(1, ge=1)


class PaginationCursor(BaseModel):
    """
    Current page plus the has-more heuristic.

    has_more is true iff the most recently fetched page came back full. A last
    page that happens to be exactly full is indistinguishable from "more exist".
    """
    model_config = ConfigDict(frozen=True)

    page: int = Field(1, ge=1)
    page_size: int = Field(PAGE_SIZE, ge=1)
    has_more: bool = False

    def with_page_count(self, count: int) -> "PaginationCursor":
        return self.model_copy(update={"has_more": count == self.page_size})

    def next(self) -> "PaginationCursor":
        return self.model_copy(update={"page": self.page + 1})

    def previous(self) -> "PaginationCursor":
        return self.model_copy(update={"page": max(1, self.page - 1)})

    def reset(self) -> "PaginationCursor":
        return PaginationCursor(page_size=self.page_size)


class RequestStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class OperationState(BaseModel):
    """Status slot owned by one kind of fetch."""
    model_config = ConfigDict(frozen=True)

    status: RequestStatus = RequestStatus.IDLE
    message: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.status is RequestStatus.LOADING

    @classmethod
    def loading(cls) -> "OperationState":
        return cls(status=RequestStatus.LOADING)

    @classmethod
    def success(cls) -> "OperationState":
        return cls(status=RequestStatus.SUCCESS)

    @classmethod
    def error(cls, message: str) -> "OperationState":
        return cls(status=RequestStatus.ERROR, message=message)

from typing import Optional


class TrackerException(Exception):
    """Base exception for all tracker-related errors."""
    pass

class EmptyUsernameException(TrackerException):
    """Raised when the username is empty or whitespace only."""
    def __init__(self, message: str = "Please enter a GitHub username."):
        super().__init__(message)

class GitHubRequestException(TrackerException):
    """Raised when a GitHub REST call fails for any reason."""
    def __init__(self, path: str, status: Optional[int] = None, message: str = "GitHub request failed."):
        self.path = path
        self.status = status
        detail = f" (HTTP {status})" if status is not None else ""
        super().__init__(f"{message}{detail} Path: {path}")

class UserNotFoundException(GitHubRequestException):
    """Raised when GitHub answers 404 for a user resource."""
    def __init__(self, path: str, username: str):
        self.username = username
        super().__init__(path, status=404, message=f"GitHub user '{username}' not found.")

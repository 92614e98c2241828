"""Text rendering and command handling for the interactive console."""

from typing import List

import click

from repo_tracker.application.tracker_service import RepoTrackerService
from repo_tracker.domain.models import Profile, Repository


HELP_TEXT = """\
Commands:
  user <name>     fetch a profile and its repositories (a bare name works too)
  next / prev     move between repository pages
  filter [term]   filter the loaded page by name; no term clears the filter
  refresh         re-fetch the current page
  clear           forget the current user
  help            show this text
  quit            exit"""

STATE_COMMANDS = {"next", "n", "prev", "p", "filter", "f", "refresh", "r", "clear"}


def render_profile(profile: Profile) -> List[str]:
    lines = [
        f"Profile: {profile.login}",
        f"  Name: {profile.name or 'N/A'}",
        f"  Bio: {profile.bio or 'N/A'}",
        f"  Followers: {profile.followers}",
        f"  Following: {profile.following}",
        f"  Public Repos: {profile.public_repos}",
        f"  Location: {profile.location or 'N/A'}",
    ]
    if profile.avatar_url:
        lines.append(f"  Avatar: {profile.avatar_url}")
    if profile.html_url:
        lines.append(f"  {profile.html_url}")
    return lines


def render_repository(repo: Repository) -> List[str]:
    header = f"- {repo.name}"
    if repo.language:
        header += f" [{repo.language}]"
    return [
        header,
        f"    {repo.description or 'No description provided.'}",
        f"    stars {repo.stargazers_count} | forks {repo.forks_count} | "
        f"last updated {repo.updated_at.date().isoformat()}",
        f"    {repo.html_url}",
    ]


def render(service: RepoTrackerService) -> str:
    """Maps the tracker state to text. Holds no state of its own."""
    lines: List[str] = []

    if service.loading:
        lines.append("Loading data...")
    if service.error:
        lines.append(f"Error: {service.error}")

    profile = service.profile
    if profile is not None:
        lines.extend(render_profile(profile))
        lines.append("")
        lines.append(f"Repositories ({profile.public_repos})")
        if service.filter_term:
            lines.append(f'Filter: "{service.filter_term}"')

        prev_hint = "< prev" if service.can_go_previous else "      "
        next_hint = "next >" if service.can_go_next else ""
        lines.append(f"{prev_hint}  Page {service.cursor.page}  {next_hint}".rstrip())

        view = service.visible_repositories
        if view.is_empty and not service.loading:
            lines.append(view.empty_message)
        else:
            for repo in view.repositories:
                lines.extend(render_repository(repo))

    return "\n".join(lines)


class ConsoleApp:
    """Turns typed command lines into tracker operations."""

    def __init__(self, service: RepoTrackerService):
        self.service = service

    async def handle(self, line: str) -> bool:
        """
        Runs one command line and waits for any fetch it started.

        Returns:
            False when the user asked to quit.
        """
        command, _, argument = line.strip().partition(" ")
        command = command.lower()
        argument = argument.strip()

        if not command:
            return True

        if command in ("quit", "exit", "q"):
            return False

        if command == "help":
            click.echo(HELP_TEXT)
            return True

        if command in ("user", "u"):
            await self._submit(argument)
        elif command not in STATE_COMMANDS:
            # Enter on a bare name submits it
            await self._submit(line.strip())
        elif command in ("next", "n"):
            if not self.service.next_page():
                click.echo("There is no next page.")
                return True
        elif command in ("prev", "p"):
            if not self.service.previous_page():
                click.echo("Already on the first page.")
                return True
        elif command in ("filter", "f"):
            self.service.set_filter(argument)
        elif command in ("refresh", "r"):
            if not self.service.refresh_repos():
                click.echo("Nothing to refresh. Look up a user first.")
                return True
        elif command == "clear":
            self.service.set_username("")

        await self.service.wait_idle()
        click.echo(render(self.service))
        return True

    async def _submit(self, username: str) -> None:
        self.service.set_username(username)
        await self.service.submit()

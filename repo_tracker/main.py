import asyncio
import sys
import logging
from typing import Optional

import aiohttp
import click
from pydantic import ValidationError

from repo_tracker.config import Settings, load_settings
from repo_tracker.infrastructure.github_client import GitHubRestClient
from repo_tracker.application.tracker_service import RepoTrackerService
from repo_tracker.presentation.console import ConsoleApp, HELP_TEXT

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    # stderr keeps log lines apart from the rendered output
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


async def run(settings: Settings, initial_username: Optional[str] = None) -> None:
    github_client = GitHubRestClient(
        api_url=settings.api_url,
        request_timeout=settings.request_timeout,
    )

    async with aiohttp.ClientSession() as session:
        service = RepoTrackerService(github_client=github_client, session=session)
        app = ConsoleApp(service)

        if initial_username:
            await app.handle(f"user {initial_username}")

        while True:
            try:
                line = await asyncio.to_thread(
                    click.prompt, "repo-tracker", default="", show_default=False, prompt_suffix="> "
                )
            except click.Abort:
                break
            if not await app.handle(line):
                break


@click.command()
@click.argument("username", required=False)
def main(username: Optional[str]) -> None:
    """Browse a GitHub user's profile and public repositories."""
    try:
        settings = load_settings()
    except ValidationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    configure_logging(settings.log_level)
    click.echo(HELP_TEXT)

    try:
        asyncio.run(run(settings, username))
    except KeyboardInterrupt:
        logger.info("Interrupted by user. Exiting gracefully.")
    except Exception as e:
        logger.exception(f"An unexpected error occurred: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()

"""
Preflight checks run before generating a deck.

Each check logs its own diagnostics and returns a bool; `run_preflight`
stops at the first failing check.
"""
import logging
from pathlib import Path
from typing import Mapping, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackClientError

from .config import CHANNEL_VAR, TOKEN_VAR, missing_variables

logger = logging.getLogger(__name__)

ENV_FILENAME = ".env"


def check_env_file(base_dir: Path) -> bool:
    env_path = Path(base_dir) / ENV_FILENAME
    if not env_path.is_file():
        logger.error("✗ .env file not found!")
        logger.info("  Please create a .env file by copying .env.example and filling in your values.")
        return False
    logger.info("✓ .env file exists")
    return True


def check_environment_variables(environ: Mapping[str, str]) -> bool:
    missing = missing_variables(environ)
    if missing:
        logger.error("✗ Missing required environment variables: %s", ", ".join(missing))
        return False
    logger.info("✓ All required environment variables are present")
    return True


def validate_slack_token(client: WebClient) -> bool:
    try:
        auth = client.auth_test()
    except (SlackClientError, OSError) as exc:
        logger.error("✗ Slack token validation failed!")
        logger.error("  Error: %s", exc)
        return False

    logger.info("✓ Slack token is valid")
    logger.info("  Connected as: %s (%s)", auth.get("user"), auth.get("user_id"))
    logger.info("  Workspace: %s (%s)", auth.get("team"), auth.get("team_id"))
    return True


def validate_channel(client: WebClient, channel_id: str) -> bool:
    try:
        info = client.conversations_info(channel=channel_id)
        channel = info["channel"]
        logger.info("✓ Channel ID is valid")
        logger.info("  Channel: %s (%s)", channel.get("name"), channel.get("id"))

        members = client.conversations_members(channel=channel_id)
        logger.info("  Members: %d", len(members["members"]))
    except (SlackClientError, OSError, KeyError, TypeError) as exc:
        logger.error("✗ Channel ID validation failed!")
        logger.error("  Error: %s", exc)
        logger.info(
            "  Note: Make sure the bot is a member of the channel. "
            "For private channels, you need to invite the bot."
        )
        return False
    return True


def run_preflight(
    environ: Mapping[str, str],
    base_dir: Path,
    client: Optional[WebClient] = None,
) -> bool:
    logger.info("Validating Slack to PowerPoint configuration...")

    if not check_env_file(base_dir):
        return False
    if not check_environment_variables(environ):
        return False

    client = client or WebClient(token=environ[TOKEN_VAR])
    if not validate_slack_token(client):
        return False
    if not validate_channel(client, environ[CHANNEL_VAR]):
        return False

    logger.info("✓ All validation checks passed! Your configuration is valid.")
    logger.info("  You can now run the main script: team-directory")
    return True

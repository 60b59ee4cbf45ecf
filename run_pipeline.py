import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from team_directory.config import load_config
from team_directory.core import DirectoryPipeline
from team_directory.errors import DirectoryError
from team_directory.logging_utils import LOGGER_NAME, setup_logging

logger = logging.getLogger(LOGGER_NAME)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate a PowerPoint team directory from the members of a Slack channel."
    )
    parser.add_argument("--verbose", action="store_true", help="Verbose logging.")
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write the run log to this file.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    # Load SLACK_TOKEN / SLACK_CHANNEL_ID from a local .env file if present.
    load_dotenv()

    args = parse_args(argv)
    setup_logging(verbose=args.verbose, log_path=args.log_file)

    try:
        config = load_config(os.environ)
    except DirectoryError as err:
        logger.error("Error: %s", err)
        return 1

    pipeline = DirectoryPipeline(config)
    try:
        pipeline.run()
    except (DirectoryError, OSError) as err:
        logger.error("Error: %s", err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

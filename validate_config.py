import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from team_directory.logging_utils import setup_logging
from team_directory.preflight import run_preflight


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Check the .env file, Slack token and channel access before a run."
    )
    parser.add_argument("--verbose", action="store_true", help="Verbose logging.")
    args = parser.parse_args(argv)

    load_dotenv()
    setup_logging(verbose=args.verbose)

    return 0 if run_preflight(os.environ, base_dir=Path.cwd()) else 1


if __name__ == "__main__":
    sys.exit(main())

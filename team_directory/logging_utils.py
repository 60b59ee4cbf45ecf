"""Logging setup for line-oriented progress output."""
import logging
import sys
from pathlib import Path
from typing import List, Optional


LOGGER_NAME = "team_directory"


def setup_logging(verbose: bool = False, log_path: Optional[Path] = None) -> None:
    """Configure root logging for the CLI entry points."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_path is not None:
        log_path = Path(log_path)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path, mode="w", encoding="utf-8"))
        except OSError as exc:
            print(
                f"[WARN] Failed to open log file at {log_path} ({exc}). "
                "Continuing without file logging.",
                file=sys.stderr,
            )
    logging.basicConfig(
        level=level,
        format="[%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )

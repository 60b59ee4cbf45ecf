import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from .errors import ConfigurationError


TOKEN_VAR = "SLACK_TOKEN"
CHANNEL_VAR = "SLACK_CHANNEL_ID"
REQUIRED_VARS = (TOKEN_VAR, CHANNEL_VAR)

OUTPUT_FILENAME = "team_directory.pptx"
TEMP_DIRNAME = "temp_images"
DECK_TITLE = "Team Directory"


@dataclass(frozen=True)
class DirectoryConfig:
    """
    Everything a run needs, built once at startup and handed to each component.

    Output and temp locations are fixed names resolved against the working
    directory at load time.
    """

    slack_token: str
    channel_id: str
    output_path: Path
    temp_dir: Path
    deck_title: str = DECK_TITLE


def missing_variables(environ: Mapping[str, str]) -> List[str]:
    return [name for name in REQUIRED_VARS if not environ.get(name)]


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    base_dir: Optional[Path] = None,
) -> DirectoryConfig:
    environ = os.environ if environ is None else environ
    base_dir = Path.cwd() if base_dir is None else Path(base_dir)

    missing = missing_variables(environ)
    if missing:
        raise ConfigurationError(
            f"{', '.join(missing)} is required in .env file"
            if len(missing) == 1
            else f"Missing required environment variables: {', '.join(missing)}"
        )

    return DirectoryConfig(
        slack_token=environ[TOKEN_VAR],
        channel_id=environ[CHANNEL_VAR],
        output_path=base_dir / OUTPUT_FILENAME,
        temp_dir=base_dir / TEMP_DIRNAME,
    )

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from .errors import CleanupError

logger = logging.getLogger(__name__)

IMAGE_SUFFIX = ".jpg"


@dataclass(frozen=True)
class ImageAsset:
    user_id: str
    path: Path


class AssetStore:
    """
    Ephemeral local directory holding the profile photos of one run.

    One file per user, named after the user id. The whole directory is
    removed on release, whatever it contains.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def create(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info("Created temp directory at %s", self.root)
        return self.root

    def path_for(self, user_id: str) -> Path:
        # User ids are opaque; keep them from escaping the store.
        safe_id = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in user_id)
        return self.root / f"{safe_id or 'user'}{IMAGE_SUFFIX}"

    def discard(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove partial image %s: %s", path, exc)

    def release(self) -> None:
        """Delete the directory and its contents; raises CleanupError on failure."""
        if not self.root.exists():
            return
        try:
            shutil.rmtree(self.root)
        except OSError as exc:
            raise CleanupError(f"Error cleaning up temp directory {self.root}: {exc}") from exc
        logger.info("Cleaned up temporary files")

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

import requests
from PIL import Image

from .assets import AssetStore, ImageAsset
from .errors import AssetRetrievalError
from .roster import UserProfile, first_non_empty

logger = logging.getLogger(__name__)

HIGH_RES_TOKEN = "512"
CHUNK_SIZE = 64 * 1024

_TRAILING_DIGITS = re.compile(r"\d+$")


def select_image_url(candidates: Iterable[Optional[str]]) -> Optional[str]:
    return first_non_empty(candidates)


def upscale_image_url(url: str) -> str:
    """Ask for the 512px rendition; URLs without a trailing number pass through."""
    return _TRAILING_DIGITS.sub(HIGH_RES_TOKEN, url)


class AssetAcquirer:
    """
    Downloads one profile photo per user into the asset store.

    Failures never propagate: they are logged, collected on `failures`
    and reported to the caller as "no asset".
    """

    def __init__(self, store: AssetStore, session: Optional[requests.Session] = None) -> None:
        self.store = store
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.failures: List[AssetRetrievalError] = []

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def acquire(self, profile: UserProfile) -> Optional[ImageAsset]:
        try:
            return self._download(profile)
        except AssetRetrievalError as err:
            logger.warning("Error downloading profile image for %s: %s", profile.user_id, err)
            self.failures.append(err)
            return None

    def _download(self, profile: UserProfile) -> ImageAsset:
        url = select_image_url(profile.image_candidates)
        if not url:
            raise AssetRetrievalError("no profile image URL", user_id=profile.user_id)

        high_res_url = upscale_image_url(url)
        image_path = self.store.path_for(profile.user_id)

        try:
            with self.session.get(high_res_url, stream=True) as response:
                response.raise_for_status()
                with image_path.open("wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
            normalize_image(image_path)
        except (requests.RequestException, OSError, ValueError, Image.DecompressionBombError) as exc:
            self.store.discard(image_path)
            raise AssetRetrievalError(str(exc), user_id=profile.user_id) from exc

        logger.info("Downloaded profile image for %s", profile.user_id)
        return ImageAsset(user_id=profile.user_id, path=image_path)


def normalize_image(path: Path) -> None:
    """
    Re-encode a downloaded file as RGB JPEG in place.

    Raises OSError (PIL.UnidentifiedImageError) if the payload is not an image
    and PIL.Image.DecompressionBombError if it claims an absurd pixel count.
    """
    with Image.open(path) as img:
        rgb = img.convert("RGB")
    rgb.save(path, format="JPEG", quality=90)

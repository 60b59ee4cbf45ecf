import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import requests
from slack_sdk import WebClient

from .acquirer import AssetAcquirer
from .assets import AssetStore
from .config import DirectoryConfig
from .errors import (
    AssetRetrievalError,
    CleanupError,
    PersistenceError,
    RosterResolutionError,
    SlideCompositionError,
)
from .render import DocumentComposer
from .roster import ExcludedMember, RosterFetcher

logger = logging.getLogger(__name__)


class PipelineState(enum.Enum):
    IDLE = "idle"
    ROSTER_RESOLVED = "roster_resolved"
    FINALIZED = "finalized"
    CLEANED_UP = "cleaned_up"
    ABORTED = "aborted"


@dataclass
class PipelineResult:
    state: PipelineState
    output_path: Optional[Path] = None
    slide_count: int = 0
    excluded: List[ExcludedMember] = field(default_factory=list)
    skipped: List[SlideCompositionError] = field(default_factory=list)
    asset_failures: List[AssetRetrievalError] = field(default_factory=list)
    cleanup_error: Optional[CleanupError] = None


class DirectoryPipeline:
    """
    Orchestrates one team directory run:
    - create the temp image store
    - resolve channel members into active user profiles
    - for each profile, in roster order:
        * download the profile photo (best effort)
        * append a slide
    - save the deck, then remove the temp image store

    Roster resolution and saving are fatal and re-raised after cleanup.
    Everything per-user is logged and skipped.
    """

    def __init__(
        self,
        config: DirectoryConfig,
        client: Optional[WebClient] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.client = client or WebClient(token=config.slack_token)
        self.session = session
        self.state = PipelineState.IDLE

    def run(self) -> PipelineResult:
        store = AssetStore(self.config.temp_dir)
        result = PipelineResult(state=self.state)
        try:
            store.create()
            self._generate(store, result)
        except (RosterResolutionError, PersistenceError, OSError):
            self.state = PipelineState.ABORTED
            raise
        finally:
            self._cleanup(store, result)
            result.state = self.state
        return result

    def _generate(self, store: AssetStore, result: PipelineResult) -> None:
        roster = RosterFetcher(self.client).fetch(self.config.channel_id)
        self.state = PipelineState.ROSTER_RESOLVED
        result.excluded = roster.excluded

        if not roster.roster:
            logger.info("No users found in the channel")
            return
        if not roster.survivors:
            logger.warning("No active users left after filtering; writing title slide only")

        acquirer = AssetAcquirer(store, session=self.session)
        composer = DocumentComposer(deck_title=self.config.deck_title)
        try:
            for profile in roster.survivors:
                asset = acquirer.acquire(profile)
                composer.add_profile(profile, asset)
        finally:
            acquirer.close()

        result.asset_failures = acquirer.failures
        result.skipped = composer.skipped
        result.output_path = composer.save(self.config.output_path)
        result.slide_count = composer.slide_count
        self.state = PipelineState.FINALIZED
        logger.info("Success! Presentation created at: %s", result.output_path)

    def _cleanup(self, store: AssetStore, result: PipelineResult) -> None:
        try:
            store.release()
        except CleanupError as err:
            logger.error("%s", err)
            result.cleanup_error = err
            return
        if self.state in (PipelineState.ROSTER_RESOLVED, PipelineState.FINALIZED):
            self.state = PipelineState.CLEANED_UP

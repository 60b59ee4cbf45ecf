import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from slack_sdk import WebClient
from slack_sdk.errors import SlackClientError

from .errors import ProfileFetchError, RosterResolutionError

logger = logging.getLogger(__name__)

# Highest resolution first.
IMAGE_FIELDS = ("image_original", "image_512", "image_192")

EXCLUDED_FETCH_FAILED = "fetch_failed"
EXCLUDED_BOT = "bot"
EXCLUDED_DELETED = "deleted"


def first_non_empty(candidates: Iterable[Optional[str]]) -> Optional[str]:
    for candidate in candidates:
        if candidate:
            return candidate
    return None


@dataclass(frozen=True)
class UserProfile:
    """
    Normalized view of a Slack `users.info` payload.

    Only the fields the deck needs are kept; everything else in the
    payload is dropped.
    """

    user_id: str
    name: Optional[str] = None
    real_name: Optional[str] = None
    title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    timezone: Optional[str] = None
    image_candidates: Tuple[Optional[str], ...] = ()
    is_bot: bool = False
    is_deleted: bool = False

    @property
    def display_name_candidates(self) -> Tuple[Optional[str], ...]:
        return (self.real_name, self.name)

    @property
    def display_name(self) -> Optional[str]:
        return first_non_empty(self.display_name_candidates)

    @classmethod
    def from_api(cls, user: Dict[str, Any]) -> "UserProfile":
        profile = user.get("profile") or {}
        return cls(
            user_id=user["id"],
            name=user.get("name"),
            real_name=profile.get("real_name"),
            title=profile.get("title"),
            email=profile.get("email"),
            phone=profile.get("phone"),
            timezone=user.get("tz"),
            image_candidates=tuple(profile.get(key) for key in IMAGE_FIELDS),
            is_bot=bool(user.get("is_bot")),
            is_deleted=bool(user.get("deleted")),
        )


@dataclass(frozen=True)
class ExcludedMember:
    user_id: str
    reason: str
    error: Optional[ProfileFetchError] = None


@dataclass
class RosterResult:
    roster: Tuple[str, ...]
    survivors: List[UserProfile] = field(default_factory=list)
    excluded: List[ExcludedMember] = field(default_factory=list)


class RosterFetcher:
    """
    Resolves a channel's membership into the profiles that get a slide.

    Only the first page of `conversations.members` is read. Failing to read
    it is fatal; failing to read one member's profile only drops that member.
    """

    def __init__(self, client: WebClient) -> None:
        self.client = client

    def fetch(self, channel_id: str) -> RosterResult:
        roster = self.fetch_members(channel_id)
        result = RosterResult(roster=roster)

        for user_id in roster:
            try:
                profile = self.fetch_profile(user_id)
            except ProfileFetchError as err:
                logger.error("Error fetching info for user %s: %s", user_id, err)
                result.excluded.append(
                    ExcludedMember(user_id=user_id, reason=EXCLUDED_FETCH_FAILED, error=err)
                )
                continue

            reason = exclusion_reason(profile)
            if reason:
                logger.debug("Skipping user %s (%s)", user_id, reason)
                result.excluded.append(ExcludedMember(user_id=user_id, reason=reason))
                continue
            result.survivors.append(profile)

        logger.info("Retrieved details for %d users", len(result.survivors))
        return result

    def fetch_members(self, channel_id: str) -> Tuple[str, ...]:
        try:
            response = self.client.conversations_members(channel=channel_id)
            members: Sequence[str] = response["members"]
            roster = tuple(members)
        except (SlackClientError, OSError, KeyError, TypeError) as exc:
            raise RosterResolutionError(
                f"Error getting channel members for {channel_id}: {exc}"
            ) from exc

        logger.info("Found %d users in channel", len(roster))
        return roster

    def fetch_profile(self, user_id: str) -> UserProfile:
        try:
            response = self.client.users_info(user=user_id)
            user = response["user"]
            return UserProfile.from_api(user)
        except (SlackClientError, OSError, KeyError, TypeError, AttributeError) as exc:
            raise ProfileFetchError(str(exc) or type(exc).__name__, user_id=user_id) from exc


def exclusion_reason(profile: UserProfile) -> Optional[str]:
    if profile.is_bot:
        return EXCLUDED_BOT
    if profile.is_deleted:
        return EXCLUDED_DELETED
    return None

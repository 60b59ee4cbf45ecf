import io
import struct
import zlib
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest
import requests
from PIL import Image
from slack_sdk.errors import SlackApiError

from team_directory.config import DirectoryConfig


def image_bytes(color=(200, 60, 60), fmt="PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (24, 24), color).save(buf, format=fmt)
    return buf.getvalue()


def oversized_png_header(width=20000, height=20000) -> bytes:
    """A PNG that declares a huge canvas but carries no pixel data."""

    def chunk(kind: bytes, data: bytes) -> bytes:
        body = kind + data
        return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body) & 0xFFFFFFFF)

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")


def slack_user(
    user_id: str,
    real_name: Optional[str] = None,
    name: Optional[str] = None,
    is_bot: bool = False,
    deleted: bool = False,
    image: Optional[str] = None,
    **profile_fields,
) -> Dict:
    profile = {"real_name": real_name}
    if image is not None:
        profile["image_original"] = image
    profile.update(profile_fields)
    return {
        "id": user_id,
        "name": name or user_id.lower(),
        "is_bot": is_bot,
        "deleted": deleted,
        "tz": profile.pop("tz", None),
        "profile": profile,
    }


class StubSlackClient:
    def __init__(
        self,
        members: Iterable[str] = (),
        users: Optional[Dict[str, Dict]] = None,
        members_error: Optional[Exception] = None,
        failing_users: Iterable[str] = (),
    ) -> None:
        self.members = list(members)
        self.users = users or {}
        self.members_error = members_error
        self.failing_users = set(failing_users)
        self.profile_requests: List[str] = []
        self.auth_calls = 0

    def conversations_members(self, channel):
        if self.members_error is not None:
            raise self.members_error
        return {"ok": True, "members": list(self.members)}

    def users_info(self, user):
        self.profile_requests.append(user)
        if user in self.failing_users:
            raise SlackApiError("users.info failed", {"ok": False, "error": "user_not_found"})
        return {"ok": True, "user": self.users[user]}

    def auth_test(self):
        self.auth_calls += 1
        return {"ok": True, "user": "directory-bot", "user_id": "B1", "team": "Acme", "team_id": "T1"}

    def conversations_info(self, channel):
        if self.members_error is not None:
            raise self.members_error
        return {"ok": True, "channel": {"id": channel, "name": "general"}}


class StubResponse:
    def __init__(self, payload: bytes, status_code: int = 200, url: str = "") -> None:
        self.payload = payload
        self.status_code = status_code
        self.url = url

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error for url: {self.url}")

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.payload), chunk_size):
            yield self.payload[start:start + chunk_size]


class StubSession:
    """Serves fixed payloads per URL; unknown URLs fail like a dead host."""

    def __init__(self, payloads: Optional[Dict[str, bytes]] = None, status: Optional[Dict[str, int]] = None) -> None:
        self.payloads = payloads or {}
        self.status = status or {}
        self.requested: List[str] = []
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def get(self, url, stream=False, **kwargs):
        self.requested.append(url)
        if url not in self.payloads:
            raise requests.ConnectionError(f"Failed to establish a new connection: {url}")
        return StubResponse(self.payloads[url], status_code=self.status.get(url, 200), url=url)


@pytest.fixture
def config(tmp_path: Path) -> DirectoryConfig:
    return DirectoryConfig(
        slack_token="xoxb-test",
        channel_id="C123",
        output_path=tmp_path / "team_directory.pptx",
        temp_dir=tmp_path / "temp_images",
    )

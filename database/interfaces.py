"""
Collaborator interfaces for persistence, auth, storage and configuration.

Each interface has exactly two implementations: the local mock backend
(database/mock.py) and the Supabase backend (database/live.py).
"""

import logging
import tempfile
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from models.schema import (
    EventConfiguration,
    ParticipantResult,
    UserProfile,
    GlobalScoreEntry,
    SystemConfig,
    TierConfig,
    ContactRequest,
)
from models.enums import UserTier

logger = logging.getLogger(__name__)

AuthCallback = Callable[[Optional[UserProfile]], None]
Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class StoredBlob:
    """Reference to an uploaded file. ``durable`` is False for session-local fallbacks."""
    url: str
    durable: bool = True


_session_dir: Optional[Path] = None


def local_blob_url(path: str, blob: bytes) -> StoredBlob:
    """Write ``blob`` to a per-process temp directory and return a non-durable reference."""
    global _session_dir
    if _session_dir is None:
        _session_dir = Path(tempfile.mkdtemp(prefix="quester-blobs-"))
    name = f"{uuid.uuid4().hex}-{Path(path).name or 'blob'}"
    target = _session_dir / name
    target.write_bytes(blob)
    return StoredBlob(url=target.as_uri(), durable=False)


class EventService(ABC):
    @abstractmethod
    def get_all_events(
        self, owner_id: Optional[str] = None, include_private: bool = False
    ) -> List[EventConfiguration]:
        """
        Owner's events when ``owner_id`` is given, every event when
        ``include_private``, otherwise public events only.
        """

    @abstractmethod
    def save_event(self, event: EventConfiguration) -> None:
        """Upsert by id."""

    @abstractmethod
    def delete_event(self, event_id: str) -> None: ...

    @abstractmethod
    def get_event(self, event_id: str) -> Optional[EventConfiguration]: ...

    @abstractmethod
    def save_result(self, event_id: str, result: ParticipantResult) -> None:
        """Append a result and add its id to the event's participant ids."""

    @abstractmethod
    def get_participated_events(self, user_id: str) -> List[EventConfiguration]: ...


class AuthService(ABC):
    @abstractmethod
    def login_with_provider(self, provider: str, id_token: Optional[str] = None) -> UserProfile:
        """OAuth sign-in (``google``, ``facebook``)."""

    @abstractmethod
    def login_with_email(self, email: str, password: Optional[str] = None) -> UserProfile: ...

    @abstractmethod
    def register_with_email(self, email: str, password: str, name: str) -> UserProfile: ...

    @abstractmethod
    def login_anonymously(self) -> UserProfile: ...

    @abstractmethod
    def logout(self) -> None: ...

    @abstractmethod
    def update_profile_image(self, blob: bytes) -> StoredBlob: ...

    @abstractmethod
    def on_auth_state_changed(self, callback: AuthCallback) -> Unsubscribe:
        """Register ``callback`` for sign-in/sign-out; returns an unsubscribe function."""


class UserService(ABC):
    @abstractmethod
    def get_all_users(self) -> List[UserProfile]: ...

    @abstractmethod
    def update_user_tier(self, user_id: str, tier: UserTier) -> None: ...

    @abstractmethod
    def delete_user(self, user_id: str) -> None: ...


class StorageService(ABC):
    @abstractmethod
    def upload_blob(self, path: str, blob: bytes) -> StoredBlob:
        """Upload; never raises, degrades to a local reference instead."""


class SystemConfigService(ABC):
    @abstractmethod
    def get_config(self) -> SystemConfig: ...

    @abstractmethod
    def update_config(self, config: SystemConfig) -> None: ...

    @abstractmethod
    def get_tier_configs(self) -> Dict[UserTier, TierConfig]: ...

    @abstractmethod
    def update_tier_configs(self, configs: Dict[UserTier, TierConfig]) -> None: ...


class LeaderboardService(ABC):
    @abstractmethod
    def get_all_scores(self) -> List[GlobalScoreEntry]:
        """Sorted by score descending, then time ascending."""

    @abstractmethod
    def save_score(self, entry: GlobalScoreEntry) -> None: ...


class LeadService(ABC):
    @abstractmethod
    def save_request(self, request: ContactRequest) -> None: ...

    @abstractmethod
    def get_all_requests(self) -> List[ContactRequest]: ...

    @abstractmethod
    def delete_request(self, request_id: str) -> None: ...


def sort_scores(scores: List[GlobalScoreEntry]) -> List[GlobalScoreEntry]:
    return sorted(scores, key=lambda s: (-s.score, s.time_seconds))

"""
Local mock backend: every service persists to a JSON key-value store.

The store is a single JSON file when a path is given (QUESTER_LOCAL_STORE),
otherwise it lives in memory for the lifetime of the process.
"""

import base64
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from models.schema import (
    EventConfiguration,
    ParticipantResult,
    UserProfile,
    GlobalScoreEntry,
    SystemConfig,
    TierConfig,
    ContactRequest,
)
from models.enums import UserTier, UserRole
from models.defaults import (
    INITIAL_TIER_CONFIGS,
    default_system_config,
    initial_event_state,
)
from .interfaces import (
    AuthCallback,
    AuthService,
    EventService,
    LeadService,
    LeaderboardService,
    StorageService,
    StoredBlob,
    SystemConfigService,
    Unsubscribe,
    UserService,
    local_blob_url,
    sort_scores,
)

logger = logging.getLogger(__name__)

EVENTS_KEY = "race_day_events"
LEADS_KEY = "quester_leads"
LEADERBOARD_KEY = "quester_global_leaderboard"
CONFIG_KEY = "quester_system_config"
TIER_CONFIGS_KEY = "quester_tier_configs"
AUTH_USER_KEY = "mock_auth_user"

MOCK_USER_ID = "mock-user-123"
DEMO_EVENT_ID = "demo-race-1"
DEMO_EVENT_NAME = "Demo: Äventyrsloppet"
GUEST_NAME = "Gäst"

AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"

FAKE_USERS = [
    UserProfile(id="user-1", name="Anders Andersson", email="anders@test.se",
                tier=UserTier.SCOUT, created_race_count=1),
    UserProfile(id="user-2", name="Beata Berg", email="beata@eventbolaget.se",
                tier=UserTier.CREATOR, created_race_count=5),
    UserProfile(id="user-3", name="Cecilia Ceder", email="cecilia@skolan.se",
                tier=UserTier.MASTER, created_race_count=12),
]


class LocalStore:
    """JSON key-value store, file backed or in memory."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._data: Dict[str, Any] = {}
        if self.path is not None and self.path.exists():
            try:
                self._data = json.loads(self.path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                logger.warning("Local store %s is corrupt, starting empty: %s", self.path, e)
                self._data = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def _flush(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8")


class MockEventService(EventService):

    def __init__(self, store: LocalStore):
        self.store = store

    def _load(self) -> List[EventConfiguration]:
        return [EventConfiguration.from_dict(raw) for raw in self.store.get(EVENTS_KEY, [])]

    def _write(self, events: List[EventConfiguration]) -> None:
        self.store.set(EVENTS_KEY, [e.to_dict() for e in events])

    def _seed_if_empty(self) -> None:
        if EVENTS_KEY not in self.store:
            demo = initial_event_state(DEMO_EVENT_ID, name=DEMO_EVENT_NAME, owner_id=MOCK_USER_ID)
            self._write([demo])

    def get_all_events(
        self, owner_id: Optional[str] = None, include_private: bool = False
    ) -> List[EventConfiguration]:
        self._seed_if_empty()
        events = self._load()
        if owner_id:
            # Unowned events are visible to everyone in mock mode
            return [e for e in events if e.owner_id == owner_id or not e.owner_id]
        if include_private:
            return events
        return [e for e in events if e.is_public]

    def save_event(self, event: EventConfiguration) -> None:
        self._seed_if_empty()
        events = self._load()
        for i, existing in enumerate(events):
            if existing.id == event.id:
                events[i] = event
                break
        else:
            events.append(event)
        self._write(events)

    def delete_event(self, event_id: str) -> None:
        self._write([e for e in self._load() if e.id != event_id])

    def get_event(self, event_id: str) -> Optional[EventConfiguration]:
        for event in self._load():
            if event.id == event_id:
                return event
        return None

    def save_result(self, event_id: str, result: ParticipantResult) -> None:
        event = self.get_event(event_id)
        if event is None:
            logger.warning("Result for unknown event %s dropped", event_id)
            return
        results = list(event.results)
        for i, existing in enumerate(results):
            if existing.id == result.id:
                results[i] = result
                break
        else:
            results.append(result)
        participant_ids = list(event.participant_ids)
        if result.id not in participant_ids:
            participant_ids.append(result.id)
        self.save_event(event.evolve(results=results, participant_ids=participant_ids))

    def get_participated_events(self, user_id: str) -> List[EventConfiguration]:
        return [
            e for e in self._load()
            if user_id in e.participant_ids or any(r.id == user_id for r in e.results)
        ]


class MockAuthService(AuthService):

    def __init__(self, store: LocalStore):
        self.store = store
        raw = store.get(AUTH_USER_KEY)
        self.current_user: Optional[UserProfile] = UserProfile.from_dict(raw) if raw else None
        self._listeners: List[AuthCallback] = []

    def _set_user(self, user: Optional[UserProfile]) -> Optional[UserProfile]:
        self.current_user = user
        if user is None:
            self.store.remove(AUTH_USER_KEY)
        else:
            self.store.set(AUTH_USER_KEY, user.to_dict())
        for listener in list(self._listeners):
            listener(user)
        return user

    @staticmethod
    def _pseudo_id(email: str) -> str:
        return "mock-" + base64.b64encode(email.encode("utf-8")).decode("ascii")[:12]

    def login_with_provider(self, provider: str, id_token: Optional[str] = None) -> UserProfile:
        if provider == "google":
            user = UserProfile(
                id=MOCK_USER_ID, name="Mock Google User", email="google@mock.com",
                photo_url=AVATAR_URL.format(seed="GoogleUser"),
            )
        elif provider == "facebook":
            user = UserProfile(id=MOCK_USER_ID, name="Mock Facebook User", email="fb@mock.com")
        else:
            raise ValueError(f"Unsupported auth provider: {provider}")
        return self._set_user(user)

    def login_with_email(self, email: str, password: Optional[str] = None) -> UserProfile:
        # Any password is accepted
        user = UserProfile(
            id=self._pseudo_id(email),
            name=email.split("@")[0],
            email=email,
            role=UserRole.ADMIN if "admin" in email else UserRole.USER,
            photo_url=AVATAR_URL.format(seed=email),
        )
        return self._set_user(user)

    def register_with_email(self, email: str, password: str, name: str) -> UserProfile:
        user = UserProfile(
            id=self._pseudo_id(email),
            name=name,
            email=email,
            photo_url=AVATAR_URL.format(seed=name),
        )
        return self._set_user(user)

    def login_anonymously(self) -> UserProfile:
        guest_id = f"guest-{int(time.time() * 1000)}"
        user = UserProfile(id=guest_id, name=GUEST_NAME, photo_url=AVATAR_URL.format(seed=guest_id))
        return self._set_user(user)

    def logout(self) -> None:
        self._set_user(None)

    def update_profile_image(self, blob: bytes) -> StoredBlob:
        stored = local_blob_url("profile-image", blob)
        if self.current_user is not None:
            self._set_user(self.current_user.evolve(photo_url=stored.url))
        return stored

    def on_auth_state_changed(self, callback: AuthCallback) -> Unsubscribe:
        self._listeners.append(callback)
        callback(self.current_user)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe


class MockUserService(UserService):
    """The signed-in mock user plus a few fixed accounts for the admin views."""

    def __init__(self, store: LocalStore):
        self.store = store

    def _current(self) -> Optional[UserProfile]:
        raw = self.store.get(AUTH_USER_KEY)
        return UserProfile.from_dict(raw) if raw else None

    def get_all_users(self) -> List[UserProfile]:
        current = self._current()
        users = [current] if current else []
        users.extend(u.model_copy() for u in FAKE_USERS)
        return users

    def update_user_tier(self, user_id: str, tier: UserTier) -> None:
        logger.info("[Mock] User %s set to tier %s", user_id, UserTier(tier).value)
        current = self._current()
        if current and current.id == user_id:
            self.store.set(AUTH_USER_KEY, current.evolve(tier=UserTier(tier)).to_dict())

    def delete_user(self, user_id: str) -> None:
        logger.info("[Mock] User %s deleted", user_id)
        current = self._current()
        if current and current.id == user_id:
            self.store.remove(AUTH_USER_KEY)


class MockStorageService(StorageService):

    def upload_blob(self, path: str, blob: bytes) -> StoredBlob:
        stored = local_blob_url(path, blob)
        logger.info("[Mock] Uploaded %s -> %s", path, stored.url)
        return stored


class MockConfigService(SystemConfigService):

    def __init__(self, store: LocalStore):
        self.store = store

    def get_config(self) -> SystemConfig:
        raw = self.store.get(CONFIG_KEY)
        return SystemConfig.from_dict(raw) if raw else default_system_config()

    def update_config(self, config: SystemConfig) -> None:
        self.store.set(CONFIG_KEY, config.to_dict())

    def get_tier_configs(self) -> Dict[UserTier, TierConfig]:
        raw = self.store.get(TIER_CONFIGS_KEY)
        if not raw:
            return {tier: config.model_copy(deep=True) for tier, config in INITIAL_TIER_CONFIGS.items()}
        return {UserTier(tier): TierConfig.from_dict(data) for tier, data in raw.items()}

    def update_tier_configs(self, configs: Dict[UserTier, TierConfig]) -> None:
        self.store.set(
            TIER_CONFIGS_KEY,
            {UserTier(tier).value: config.to_dict() for tier, config in configs.items()},
        )


class MockLeaderboardService(LeaderboardService):

    def __init__(self, store: LocalStore):
        self.store = store

    def get_all_scores(self) -> List[GlobalScoreEntry]:
        return [GlobalScoreEntry.from_dict(raw) for raw in self.store.get(LEADERBOARD_KEY, [])]

    def save_score(self, entry: GlobalScoreEntry) -> None:
        scores = sort_scores(self.get_all_scores() + [entry])
        self.store.set(LEADERBOARD_KEY, [s.to_dict() for s in scores])


class MockLeadService(LeadService):

    def __init__(self, store: LocalStore):
        self.store = store

    def save_request(self, request: ContactRequest) -> None:
        leads = self.store.get(LEADS_KEY, [])
        self.store.set(LEADS_KEY, leads + [request.to_dict()])

    def get_all_requests(self) -> List[ContactRequest]:
        return [ContactRequest.from_dict(raw) for raw in self.store.get(LEADS_KEY, [])]

    def delete_request(self, request_id: str) -> None:
        leads = self.store.get(LEADS_KEY, [])
        self.store.set(LEADS_KEY, [raw for raw in leads if raw.get("id") != request_id])

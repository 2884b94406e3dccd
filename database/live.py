"""
Supabase backend.

Events, leaderboard entries, leads and configuration are stored as camelCase
JSON documents in a ``data`` jsonb column, next to the few columns that are
filtered on. Table definitions are in database/schema.sql.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from models.schema import (
    EventConfiguration,
    ParticipantResult,
    UserProfile,
    GlobalScoreEntry,
    SystemConfig,
    TierConfig,
    ContactRequest,
    utc_now,
)
from models.enums import UserTier, UserRole
from models.defaults import INITIAL_TIER_CONFIGS, default_system_config
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

EVENTS_TABLE = "events"
PROFILES_TABLE = "profiles"
LEADERBOARD_TABLE = "leaderboard"
SYSTEM_CONFIG_TABLE = "system_config"
TIER_CONFIGS_TABLE = "tier_configs"
LEADS_TABLE = "leads"
SYSTEM_CONFIG_ID = "config"
DEFAULT_BUCKET = "quester-media"
ANONYMOUS_NAME = "Anonym"

AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"


def get_supabase_client() -> Optional[Client]:
    """
    Supabase client from SUPABASE_URL and the service role key (SUPABASE_KEY
    is accepted as well). None when either is missing; the services then
    raise ConnectionError on use.
    """
    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY") or os.environ.get("SUPABASE_KEY")
    if not url or not key:
        logger.warning("Live backend requested but SUPABASE_URL or its key is not set")
        return None
    logger.info("Connecting to Supabase at %s", url)
    return create_client(url, key)


class SupabaseService:
    """Shared client handling for the Supabase services."""

    def __init__(self, client: Optional[Client]):
        self.supabase = client

    def _require(self) -> Client:
        if not self.supabase:
            raise ConnectionError("Supabase not connected. Check SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY.")
        return self.supabase


class SupabaseEventService(SupabaseService, EventService):

    @staticmethod
    def _row(event: EventConfiguration) -> Dict[str, Any]:
        return {
            "id": event.id,
            "owner_id": event.owner_id,
            "is_public": event.is_public,
            "participant_ids": list(event.participant_ids),
            "data": event.to_dict(),
        }

    @staticmethod
    def _events(rows: List[Dict[str, Any]]) -> List[EventConfiguration]:
        return [EventConfiguration.from_dict(row["data"]) for row in rows]

    def get_all_events(
        self, owner_id: Optional[str] = None, include_private: bool = False
    ) -> List[EventConfiguration]:
        query = self._require().table(EVENTS_TABLE).select("data")
        if owner_id:
            query = query.eq("owner_id", owner_id)
        elif not include_private:
            query = query.eq("is_public", True)
        return self._events(query.execute().data)

    def save_event(self, event: EventConfiguration) -> None:
        if not event.id:
            raise ValueError("Event ID missing")
        self._require().table(EVENTS_TABLE).upsert(self._row(event), on_conflict="id").execute()

    def delete_event(self, event_id: str) -> None:
        self._require().table(EVENTS_TABLE).delete().eq("id", event_id).execute()

    def get_event(self, event_id: str) -> Optional[EventConfiguration]:
        response = self._require().table(EVENTS_TABLE).select("data").eq("id", event_id).execute()
        events = self._events(response.data)
        return events[0] if events else None

    def save_result(self, event_id: str, result: ParticipantResult) -> None:
        # Single statement server side, so concurrent finishers cannot overwrite each other
        self._require().rpc(
            "append_event_result",
            {"p_event_id": event_id, "p_result": result.to_dict()},
        ).execute()

    def get_participated_events(self, user_id: str) -> List[EventConfiguration]:
        client = self._require()
        participated = (
            client.table(EVENTS_TABLE).select("data").contains("participant_ids", [user_id]).execute()
        )
        owned = client.table(EVENTS_TABLE).select("data").eq("owner_id", user_id).execute()
        by_id: Dict[str, EventConfiguration] = {}
        for event in self._events(participated.data) + self._events(owned.data):
            by_id[event.id] = event
        return list(by_id.values())


def _profile_from_row(row: Dict[str, Any]) -> UserProfile:
    return UserProfile(
        id=row["id"],
        name=row.get("name") or "Okänd",
        email=row.get("email") or "",
        tier=row.get("tier") or UserTier.SCOUT,
        role=row.get("role") or UserRole.USER,
        created_race_count=row.get("created_race_count") or 0,
        photo_url=row.get("photo_url") or None,
    )


class SupabaseAuthService(SupabaseService, AuthService):
    """Supabase Auth plus a ``profiles`` row per user for tier and role."""

    def __init__(self, client: Optional[Client], bucket: Optional[str] = None):
        super().__init__(client)
        self.bucket = bucket or os.environ.get("QUESTER_STORAGE_BUCKET", DEFAULT_BUCKET)
        self.current_user: Optional[UserProfile] = None

    def _ensure_profile(self, user: Any) -> None:
        """Create or refresh the profile row. Failures are logged, not raised."""
        client = self._require()
        metadata = getattr(user, "user_metadata", None) or {}
        now = utc_now().isoformat()
        try:
            existing = client.table(PROFILES_TABLE).select("*").eq("id", user.id).execute().data
            if not existing:
                logger.info("Creating profile for %s", user.id)
                client.table(PROFILES_TABLE).insert({
                    "id": user.id,
                    "email": user.email or "",
                    "name": metadata.get("name") or ANONYMOUS_NAME,
                    "photo_url": metadata.get("photo_url") or "",
                    "tier": UserTier.SCOUT.value,
                    "role": UserRole.USER.value,
                    "created_at": now,
                    "last_login": now,
                }).execute()
            else:
                row = existing[0]
                updates = {
                    "last_login": now,
                    "email": user.email or row.get("email"),
                    "name": metadata.get("name") or row.get("name"),
                    "photo_url": metadata.get("photo_url") or row.get("photo_url"),
                }
                if not row.get("tier"):
                    updates["tier"] = UserTier.SCOUT.value
                if not row.get("role"):
                    updates["role"] = UserRole.USER.value
                client.table(PROFILES_TABLE).update(updates).eq("id", user.id).execute()
        except Exception as e:
            logger.error("Error ensuring profile for %s: %s", user.id, e)

    def _profile(self, user: Any) -> UserProfile:
        client = self._require()
        metadata = getattr(user, "user_metadata", None) or {}
        rows = []
        try:
            rows = client.table(PROFILES_TABLE).select("*").eq("id", user.id).execute().data
        except Exception as e:
            logger.warning("Failed to fetch profile for %s: %s", user.id, e)
        row = rows[0] if rows else {}
        return UserProfile(
            id=user.id,
            name=row.get("name") or metadata.get("name") or user.email or ANONYMOUS_NAME,
            email=row.get("email") or user.email or "",
            tier=row.get("tier") or UserTier.SCOUT,
            role=row.get("role") or UserRole.USER,
            created_race_count=row.get("created_race_count") or 0,
            photo_url=row.get("photo_url") or metadata.get("photo_url") or None,
        )

    def _signed_in(self, response: Any) -> UserProfile:
        user = response.user
        if user is None:
            raise PermissionError("Sign-in did not return a user")
        self._ensure_profile(user)
        self.current_user = self._profile(user)
        return self.current_user

    def login_with_provider(self, provider: str, id_token: Optional[str] = None) -> UserProfile:
        if not id_token:
            raise ValueError(f"An id token from {provider} is required")
        response = self._require().auth.sign_in_with_id_token(
            {"provider": provider, "token": id_token}
        )
        return self._signed_in(response)

    def login_with_email(self, email: str, password: Optional[str] = None) -> UserProfile:
        if not password:
            raise ValueError("Password required for production login")
        response = self._require().auth.sign_in_with_password(
            {"email": email, "password": password}
        )
        return self._signed_in(response)

    def register_with_email(self, email: str, password: str, name: str) -> UserProfile:
        response = self._require().auth.sign_up({
            "email": email,
            "password": password,
            "options": {"data": {"name": name, "photo_url": AVATAR_URL.format(seed=name)}},
        })
        return self._signed_in(response)

    def login_anonymously(self) -> UserProfile:
        client = self._require()
        response = client.auth.sign_in_anonymously()
        user = response.user
        if user is not None and not (user.user_metadata or {}).get("photo_url"):
            client.auth.update_user({"data": {"photo_url": AVATAR_URL.format(seed=user.id)}})
        return self._signed_in(response)

    def logout(self) -> None:
        if not self.supabase:
            return
        self.supabase.auth.sign_out()
        self.current_user = None

    def update_profile_image(self, blob: bytes) -> StoredBlob:
        client = self._require()
        if self.current_user is None:
            raise PermissionError("Not signed in")
        path = f"profile-images/{self.current_user.id}"
        stored = SupabaseStorageService(client, self.bucket).upload_blob(path, blob)
        client.auth.update_user({"data": {"photo_url": stored.url}})
        client.table(PROFILES_TABLE).update({"photo_url": stored.url}).eq(
            "id", self.current_user.id
        ).execute()
        self.current_user = self.current_user.evolve(photo_url=stored.url)
        return stored

    def on_auth_state_changed(self, callback: AuthCallback) -> Unsubscribe:
        if not self.supabase:
            return lambda: None

        def handle(event: str, session: Any) -> None:
            user = getattr(session, "user", None) if session else None
            if user is None:
                self.current_user = None
                callback(None)
                return
            self._ensure_profile(user)
            self.current_user = self._profile(user)
            callback(self.current_user)

        subscription = self.supabase.auth.on_auth_state_change(handle)
        return subscription.unsubscribe


class SupabaseUserService(SupabaseService, UserService):

    def get_all_users(self) -> List[UserProfile]:
        rows = self._require().table(PROFILES_TABLE).select("*").execute().data
        return [_profile_from_row(row) for row in rows]

    def update_user_tier(self, user_id: str, tier: UserTier) -> None:
        self._require().table(PROFILES_TABLE).update(
            {"tier": UserTier(tier).value}
        ).eq("id", user_id).execute()

    def delete_user(self, user_id: str) -> None:
        self._require().table(PROFILES_TABLE).delete().eq("id", user_id).execute()


class SupabaseStorageService(StorageService):

    def __init__(self, client: Optional[Client], bucket: Optional[str] = None):
        self.supabase = client
        self.bucket = bucket or os.environ.get("QUESTER_STORAGE_BUCKET", DEFAULT_BUCKET)

    def upload_blob(self, path: str, blob: bytes) -> StoredBlob:
        if not self.supabase:
            logger.warning("Storage not configured, keeping %s as a local file", path)
            return local_blob_url(path, blob)
        try:
            bucket = self.supabase.storage.from_(self.bucket)
            bucket.upload(path, blob, {"upsert": "true"})
            return StoredBlob(url=bucket.get_public_url(path), durable=True)
        except Exception as e:
            logger.warning("Upload of %s failed, falling back to a local file: %s", path, e)
            return local_blob_url(path, blob)


class SupabaseConfigService(SupabaseService, SystemConfigService):

    def get_config(self) -> SystemConfig:
        rows = (
            self._require().table(SYSTEM_CONFIG_TABLE).select("data")
            .eq("id", SYSTEM_CONFIG_ID).execute().data
        )
        if rows:
            return SystemConfig.from_dict(rows[0]["data"])
        return default_system_config()

    def update_config(self, config: SystemConfig) -> None:
        self._require().table(SYSTEM_CONFIG_TABLE).upsert(
            {"id": SYSTEM_CONFIG_ID, "data": config.to_dict()}, on_conflict="id"
        ).execute()

    def get_tier_configs(self) -> Dict[UserTier, TierConfig]:
        rows = self._require().table(TIER_CONFIGS_TABLE).select("id, data").execute().data
        configs = {tier: config.model_copy(deep=True) for tier, config in INITIAL_TIER_CONFIGS.items()}
        for row in rows:
            configs[UserTier(row["id"])] = TierConfig.from_dict(row["data"])
        return configs

    def update_tier_configs(self, configs: Dict[UserTier, TierConfig]) -> None:
        rows = [
            {"id": UserTier(tier).value, "data": config.to_dict()}
            for tier, config in configs.items()
        ]
        self._require().table(TIER_CONFIGS_TABLE).upsert(rows, on_conflict="id").execute()


class SupabaseLeaderboardService(SupabaseService, LeaderboardService):

    def get_all_scores(self) -> List[GlobalScoreEntry]:
        rows = self._require().table(LEADERBOARD_TABLE).select("data").execute().data
        return sort_scores([GlobalScoreEntry.from_dict(row["data"]) for row in rows])

    def save_score(self, entry: GlobalScoreEntry) -> None:
        self._require().table(LEADERBOARD_TABLE).insert({
            "id": entry.id,
            "mode": entry.mode.value,
            "score": entry.score,
            "time_seconds": entry.time_seconds,
            "data": entry.to_dict(),
        }).execute()


class SupabaseLeadService(SupabaseService, LeadService):

    def save_request(self, request: ContactRequest) -> None:
        self._require().table(LEADS_TABLE).insert(
            {"id": request.id, "data": request.to_dict()}
        ).execute()

    def get_all_requests(self) -> List[ContactRequest]:
        rows = self._require().table(LEADS_TABLE).select("data").execute().data
        return [ContactRequest.from_dict(row["data"]) for row in rows]

    def delete_request(self, request_id: str) -> None:
        self._require().table(LEADS_TABLE).delete().eq("id", request_id).execute()

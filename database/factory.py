"""
Backend selection.

The backend is chosen once at startup from QUESTER_BACKEND and the resulting
DataService is passed to whoever needs persistence.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from supabase import Client

from .interfaces import (
    AuthService,
    EventService,
    LeadService,
    LeaderboardService,
    StorageService,
    SystemConfigService,
    UserService,
)
from .mock import (
    LocalStore,
    MockAuthService,
    MockConfigService,
    MockEventService,
    MockLeadService,
    MockLeaderboardService,
    MockStorageService,
    MockUserService,
)
from .live import (
    SupabaseAuthService,
    SupabaseConfigService,
    SupabaseEventService,
    SupabaseLeadService,
    SupabaseLeaderboardService,
    SupabaseStorageService,
    SupabaseUserService,
    get_supabase_client,
)

logger = logging.getLogger(__name__)


class BackendMode(str, Enum):
    MOCK = "mock"
    LIVE = "live"


def resolve_backend_mode(value: Optional[str] = None) -> BackendMode:
    """
    Parse the backend setting (default: the QUESTER_BACKEND env var, then mock).

    Raises:
        ValueError: For anything other than "mock" or "live"
    """
    raw = value if value is not None else os.environ.get("QUESTER_BACKEND", BackendMode.MOCK.value)
    try:
        return BackendMode(raw.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown backend '{raw}'. Use 'mock' or 'live'.")


@dataclass
class DataService:
    """One implementation of every collaborator, all from the same backend."""
    mode: BackendMode
    events: EventService
    auth: AuthService
    users: UserService
    storage: StorageService
    config: SystemConfigService
    leaderboard: LeaderboardService
    leads: LeadService

    @property
    def is_offline(self) -> bool:
        return self.mode == BackendMode.MOCK


def create_data_service(
    mode: BackendMode,
    store: Optional[LocalStore] = None,
    client: Optional[Client] = None,
) -> DataService:
    """
    Build the collaborators for ``mode``.

    Args:
        mode: Resolved backend mode
        store: Mock backend store (default: QUESTER_LOCAL_STORE file, or memory)
        client: Supabase client for the live backend (default: from env)
    """
    mode = BackendMode(mode)
    if mode == BackendMode.MOCK:
        logger.info("DataService: using MOCK (local store) services")
        store = store or LocalStore(os.environ.get("QUESTER_LOCAL_STORE") or None)
        return DataService(
            mode=mode,
            events=MockEventService(store),
            auth=MockAuthService(store),
            users=MockUserService(store),
            storage=MockStorageService(),
            config=MockConfigService(store),
            leaderboard=MockLeaderboardService(store),
            leads=MockLeadService(store),
        )

    logger.info("DataService: using LIVE (Supabase) services")
    client = client or get_supabase_client()
    return DataService(
        mode=mode,
        events=SupabaseEventService(client),
        auth=SupabaseAuthService(client),
        users=SupabaseUserService(client),
        storage=SupabaseStorageService(client),
        config=SupabaseConfigService(client),
        leaderboard=SupabaseLeaderboardService(client),
        leads=SupabaseLeadService(client),
    )

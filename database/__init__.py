"""
Database package: collaborator interfaces with mock and Supabase backends.
"""

from .interfaces import (
    StoredBlob,
    EventService,
    AuthService,
    UserService,
    StorageService,
    SystemConfigService,
    LeaderboardService,
    LeadService,
    local_blob_url,
)
from .mock import LocalStore
from .live import get_supabase_client
from .factory import BackendMode, DataService, resolve_backend_mode, create_data_service

__all__ = [
    "StoredBlob",
    "EventService",
    "AuthService",
    "UserService",
    "StorageService",
    "SystemConfigService",
    "LeaderboardService",
    "LeadService",
    "local_blob_url",
    "LocalStore",
    "BackendMode",
    "DataService",
    "resolve_backend_mode",
    "create_data_service",
    "get_supabase_client",
]

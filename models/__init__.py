"""
Models package initialization.
"""

from .enums import (
    WinCondition,
    CheckpointOrder,
    ScoreModel,
    Archetype,
    TerrainType,
    StartMode,
    LeaderboardMode,
    EventStatus,
    MapStyle,
    CheckpointType,
    CheckInMode,
    ResultStatus,
    UserTier,
    UserRole,
    TemplateMode,
    AIComplexity,
    LeadStatus,
    FeaturedMode,
)
from .schema import (
    Coordinate,
    GeoZone,
    QuizData,
    Checkpoint,
    Rating,
    CheckpointVisitLog,
    ParticipantResult,
    EventConfiguration,
    TierConfig,
    UserProfile,
    GlobalFeatureConfig,
    SystemConfig,
    GlobalScoreEntry,
    ContactRequest,
    RaceAnalysis,
    ChatMessage,
)

__all__ = [
    "WinCondition",
    "CheckpointOrder",
    "ScoreModel",
    "Archetype",
    "TerrainType",
    "StartMode",
    "LeaderboardMode",
    "EventStatus",
    "MapStyle",
    "CheckpointType",
    "CheckInMode",
    "ResultStatus",
    "UserTier",
    "UserRole",
    "TemplateMode",
    "AIComplexity",
    "LeadStatus",
    "FeaturedMode",
    "Coordinate",
    "GeoZone",
    "QuizData",
    "Checkpoint",
    "Rating",
    "CheckpointVisitLog",
    "ParticipantResult",
    "EventConfiguration",
    "TierConfig",
    "UserProfile",
    "GlobalFeatureConfig",
    "SystemConfig",
    "GlobalScoreEntry",
    "ContactRequest",
    "RaceAnalysis",
    "ChatMessage",
]

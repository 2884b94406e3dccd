"""
Enumerations for quest event data models.
"""

from enum import Enum


class WinCondition(str, Enum):
    """What decides the winner of an event."""
    FASTEST_TIME = "fastest_time"
    MOST_POINTS = "most_points"


class CheckpointOrder(str, Enum):
    """Whether checkpoints must be visited in sequence."""
    FREE = "free"
    SEQUENTIAL = "sequential"


class ScoreModel(str, Enum):
    """How points are computed."""
    BASIC = "basic"
    ROGAINING = "rogaining"
    TIME_BONUS = "time_bonus"


class Archetype(str, Enum):
    """User-facing bundle of win condition, checkpoint order and score model."""
    CLASSIC = "classic"
    ROGAINING = "rogaining"
    ADVENTURE = "adventure"


class TerrainType(str, Enum):
    """Path preference for checkpoint placement."""
    TRAIL = "trail"
    OFF_ROAD = "off_road"
    URBAN = "urban"
    MIXED = "mixed"


class StartMode(str, Enum):
    """How participants start."""
    MASS_START = "mass_start"
    SELF_START = "self_start"


class LeaderboardMode(str, Enum):
    """Who can see the results."""
    GLOBAL = "global"
    PRIVATE = "private"


class EventStatus(str, Enum):
    """Lifecycle state of an event."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class MapStyle(str, Enum):
    STANDARD = "standard"
    DARK = "dark"
    GOOGLE_STANDARD = "google_standard"
    GOOGLE_HYBRID = "google_hybrid"
    GOOGLE_TERRAIN = "google_terrain"


class CheckpointType(str, Enum):
    MANDATORY = "mandatory"
    OPTIONAL = "optional"


class CheckInMode(str, Enum):
    """active = popup on arrival, passive = auto-pass."""
    ACTIVE = "active"
    PASSIVE = "passive"


class ResultStatus(str, Enum):
    FINISHED = "finished"
    DNF = "dnf"
    RUNNING = "running"


class UserTier(str, Enum):
    """Subscription tier."""
    SCOUT = "SCOUT"
    CREATOR = "CREATOR"
    MASTER = "MASTER"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class TemplateMode(str, Enum):
    """Template instantiation mode: exact copy or location-free blueprint."""
    FIXED = "fixed"
    FLEXIBLE = "flexible"


class AIComplexity(str, Enum):
    BASIC = "Basic"
    ADVANCED = "Advanced"
    CUSTOM = "Custom"


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    CLOSED = "closed"


class FeaturedMode(str, Enum):
    """Global seasonal game modes toggled from the back office."""
    ZOMBIE_SURVIVAL = "zombie_survival"
    CHRISTMAS_HUNT = "christmas_hunt"

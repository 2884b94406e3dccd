"""
Pydantic data models for the quest event canonical schema.

Fields are snake_case in Python and camelCase in stored documents and wire
payloads (the AI proxy and the document database both speak camelCase).
"""

from datetime import datetime
from typing import Optional, List, Dict, Any, Union
from dateutil import parser as date_parser
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel, to_snake
import pytz
from .enums import (
    WinCondition,
    CheckpointOrder,
    ScoreModel,
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
    AIComplexity,
    LeadStatus,
    FeaturedMode,
)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(pytz.UTC)


def to_utc(value: Union[str, datetime]) -> datetime:
    """
    Parse an ISO-8601 string or datetime and normalise it to UTC.

    Naive values are taken to already be in UTC.
    """
    if isinstance(value, str):
        value = date_parser.isoparse(value)
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


class QuesterModel(BaseModel):
    """Base model: snake_case attributes, camelCase documents."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a camelCase document for storage or the wire."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """Create from a camelCase (or snake_case) document."""
        return cls.model_validate(data)

    def evolve(self, **changes: Any):
        """Return a re-validated copy with ``changes`` applied."""
        data = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)

    def merge(self, patch: Dict[str, Any]):
        """Like evolve, for partial documents with camelCase or snake_case keys."""
        return self.evolve(**{to_snake(key): value for key, value in patch.items()})


class Coordinate(QuesterModel):
    """WGS84 point."""
    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lng: float = Field(..., ge=-180, le=180, description="Longitude")


class GeoZone(Coordinate):
    """A point with an arrival radius (start and finish areas)."""
    radius_meters: float = Field(50, ge=0, description="Arrival radius in meters")


class QuizData(QuesterModel):
    """Multiple choice question attached to a checkpoint."""
    question: str = Field(..., description="Question text")
    options: List[str] = Field(default_factory=list, description="Answer options")
    correct_option_index: int = Field(0, ge=0, description="0-based index of the correct option")

    @model_validator(mode='after')
    def validate_index(self) -> 'QuizData':
        """The correct index must address one of the options."""
        if self.options and self.correct_option_index >= len(self.options):
            raise ValueError(
                f"correct_option_index {self.correct_option_index} out of range "
                f"for {len(self.options)} options"
            )
        return self


class Checkpoint(QuesterModel):
    """A point of interest in an event."""
    id: str = Field(..., description="Checkpoint ID, unique within the event")
    name: str = Field(..., description="Display name")
    location: Optional[Coordinate] = Field(
        None, description="Position; null means unplaced (blueprint templates)"
    )
    radius_meters: float = Field(25, ge=0, description="Arrival radius in meters")
    type: CheckpointType = Field(CheckpointType.MANDATORY, description="Mandatory or optional")
    description: Optional[str] = None
    level: Optional[int] = None
    points: Optional[int] = None
    color: Optional[str] = None
    check_in_mode: Optional[CheckInMode] = None
    quiz: Optional[QuizData] = None
    challenge: Optional[str] = None
    time_modifier_seconds: Optional[int] = Field(
        None, description="Negative = bonus, positive = penalty"
    )
    requires_photo: Optional[bool] = None
    terrain_hint: Optional[str] = Field(None, description="Placement hint for blueprints")

    @property
    def is_placed(self) -> bool:
        return self.location is not None

    class Config:
        json_schema_extra = {
            "example": {
                "id": "cp-1",
                "name": "Gamla Kyrkogården",
                "location": {"lat": 59.3293, "lng": 18.0686},
                "radiusMeters": 25,
                "type": "mandatory",
                "points": 10,
                "quiz": {
                    "question": "Vad kallas spöket som sägs varna för dödsfall?",
                    "options": ["Vita Frun", "Mylingen", "Lyktgubben", "Näcken"],
                    "correctOptionIndex": 0,
                },
            }
        }


class Rating(QuesterModel):
    score: int = Field(..., ge=1, le=5, description="1-5 stars")
    comment: Optional[str] = None
    timestamp: str = Field(..., description="ISO-8601 submission time")
    author_name: Optional[str] = None


class CheckpointVisitLog(QuesterModel):
    """Audit entry for a visited checkpoint."""
    checkpoint_id: str
    timestamp: str
    points_earned: int = 0
    quiz_answer: Optional[str] = None
    is_quiz_correct: Optional[bool] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")


class ParticipantResult(QuesterModel):
    """One participant attempt. ``id`` is the participant's user id."""
    id: str = Field(..., description="Participant ID")
    name: str = Field(..., description="Participant display name")
    team_name: Optional[str] = None
    profile_image: Optional[str] = None
    auth_provider: Optional[str] = None
    finish_time: str = Field("", description="Elapsed time HH:MM:SS")
    total_points: int = 0
    base_points: Optional[int] = None
    time_penalty_points: Optional[int] = None
    time_bonus_points: Optional[int] = None
    checkpoints_visited: int = 0
    visited_checkpoint_ids: List[str] = Field(default_factory=list)
    log: List[CheckpointVisitLog] = Field(default_factory=list)
    status: ResultStatus = ResultStatus.RUNNING
    last_position: Optional[Coordinate] = None


class EventConfiguration(QuesterModel):
    """The canonical quest/race event record."""
    # Identity
    id: str = Field(..., description="Unique opaque event ID")
    owner_id: Optional[str] = Field(None, description="Owner user ID; null for system events")
    owner_name: Optional[str] = None
    owner_photo_url: Optional[str] = Field(None, alias="ownerPhotoURL")
    creator_tier: Optional[UserTier] = None

    # Presentation
    name: str = Field(..., description="Event name")
    description: str = ""
    cover_image: Optional[str] = None
    category: str = Field("", description="Free text, suggested from RACE_CATEGORIES")
    language: str = "sv"
    event_type: str = "Lopp"
    status: EventStatus = EventStatus.DRAFT

    # Scheduling
    start_date_time: datetime = Field(default_factory=utc_now, description="UTC start time")
    start_mode: StartMode = StartMode.MASS_START
    manual_start_enabled: bool = True
    unlock_expires_at: Optional[str] = None

    # Rule set
    win_condition: WinCondition = WinCondition.FASTEST_TIME
    checkpoint_order: CheckpointOrder = CheckpointOrder.FREE
    score_model: ScoreModel = ScoreModel.BASIC
    time_limit_minutes: Optional[int] = None
    par_time_minutes: Optional[int] = None
    points_per_minute: Optional[float] = None
    terrain_type: TerrainType = TerrainType.TRAIL
    rules: List[str] = Field(default_factory=list)
    safety_instructions: List[str] = Field(default_factory=list)
    leaderboard_metric: Optional[str] = None
    map_style: Optional[MapStyle] = None

    # Geography
    start_location: GeoZone = Field(..., description="Start area")
    start_location_confirmed: bool = False
    finish_location: GeoZone = Field(..., description="Finish area")
    finish_location_confirmed: bool = False
    start_city: str = ""
    finish_city: str = ""

    # Visibility
    is_public: bool = False
    access_code: Optional[str] = Field(None, description="Join code, used only when not public")
    leaderboard_mode: LeaderboardMode = LeaderboardMode.GLOBAL
    is_locked_by_admin: bool = False
    is_instant_game: bool = False
    is_template: bool = False

    # Content and outcome
    checkpoints: List[Checkpoint] = Field(default_factory=list)
    participant_ids: List[str] = Field(default_factory=list)
    results: List[ParticipantResult] = Field(default_factory=list)
    ratings: List[Rating] = Field(default_factory=list)

    @field_validator('start_date_time', mode='before')
    @classmethod
    def normalize_start(cls, v: Any) -> Any:
        """Parse ISO strings and normalise to UTC."""
        if isinstance(v, (str, datetime)):
            try:
                return to_utc(v)
            except (ValueError, OverflowError):
                raise ValueError(f"Invalid ISO-8601 datetime: {v}")
        return v

    @model_validator(mode='after')
    def normalize_visibility_and_participants(self) -> 'EventConfiguration':
        """An admin lock unpublishes; every result's participant is recorded."""
        if self.is_locked_by_admin and self.is_public:
            self.is_public = False

        participant_ids = list(self.participant_ids)
        for result in self.results:
            if result.id not in participant_ids:
                participant_ids.append(result.id)
        self.participant_ids = participant_ids
        return self

    @property
    def effective_access_code(self) -> Optional[str]:
        """The access code is meaningless for public events."""
        return None if self.is_public else self.access_code

    @property
    def unplaced_checkpoints(self) -> List[Checkpoint]:
        return [cp for cp in self.checkpoints if not cp.is_placed]

    @property
    def is_playable(self) -> bool:
        """Live events are playable only when every checkpoint has coordinates."""
        return not self.is_template and not self.unplaced_checkpoints

    class Config:
        json_schema_extra = {
            "example": {
                "id": "race-1718000000000",
                "ownerId": "user-123",
                "name": "Nytt Äventyr",
                "eventType": "Lopp",
                "status": "draft",
                "category": "Orientering",
                "startDateTime": "2026-05-25T10:00:00+00:00",
                "winCondition": "fastest_time",
                "checkpointOrder": "sequential",
                "scoreModel": "basic",
                "startLocation": {"lat": 59.3293, "lng": 18.0686, "radiusMeters": 50},
                "finishLocation": {"lat": 59.3293, "lng": 18.0686, "radiusMeters": 50},
                "checkpoints": [],
            }
        }


class TierConfig(QuesterModel):
    """Quotas, feature flags and presentation for one subscription tier."""
    id: UserTier = Field(..., description="Tier")
    display_name: str
    description: str = ""
    price_amount: Union[int, float, str] = Field(0, description="Number, or text such as 'Offert'")
    price_currency: str = ""
    price_frequency: str = ""
    button_text: str = ""
    is_recommended: bool = False
    features: List[str] = Field(default_factory=list)

    max_active_races: int = Field(..., ge=0)
    max_checkpoints_per_race: int = Field(..., ge=0)
    max_participants_per_race: int = Field(..., ge=0)
    ai_complexity: AIComplexity = AIComplexity.BASIC
    allow_cloud_storage: bool = False
    allow_white_label: bool = False
    allow_live_monitoring: bool = False


class UserProfile(QuesterModel):
    id: str
    name: str
    email: str = ""
    tier: UserTier = UserTier.SCOUT
    role: UserRole = UserRole.USER
    created_race_count: int = 0
    photo_url: Optional[str] = Field(None, alias="photoURL")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class GlobalFeatureConfig(QuesterModel):
    is_active: bool = False
    title: str = ""
    description: str = ""


class SystemConfig(QuesterModel):
    """Global feature toggles, keyed by FeaturedMode value."""
    featured_modes: Dict[str, GlobalFeatureConfig] = Field(default_factory=dict)

    def is_mode_active(self, mode: FeaturedMode) -> bool:
        feature = self.featured_modes.get(mode.value)
        return bool(feature and feature.is_active)


class GlobalScoreEntry(QuesterModel):
    """Score on the global leaderboard of the featured modes."""
    id: str
    player_name: str
    group_tag: Optional[str] = None
    score: int = 0
    time_seconds: float = 0
    time_string: str = ""
    timestamp: str
    location: Coordinate
    mode: FeaturedMode
    status: Optional[ResultStatus] = None


class ContactRequest(QuesterModel):
    """Sales lead from the contact form."""
    id: str
    name: str
    email: str
    organization: str = ""
    message: str = ""
    timestamp: str
    user_id: Optional[str] = None
    status: LeadStatus = LeadStatus.NEW


class RaceAnalysis(QuesterModel):
    """Structured quality report returned by the AI proxy."""
    overall_score: int = Field(..., ge=0, le=100)
    safety_score: int = Field(0, ge=0, le=100)
    fun_factor_score: int = Field(0, ge=0, le=100)
    summary: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)

    @field_validator('overall_score', 'safety_score', 'fun_factor_score', mode='before')
    @classmethod
    def clamp_score(cls, v: Any) -> Any:
        """Model output occasionally drifts outside 0-100."""
        if isinstance(v, (int, float)):
            return int(min(100, max(0, v)))
        return v


class ChatMessage(QuesterModel):
    id: str
    role: str = Field(..., description="'user' or 'model'")
    text: str
    is_tool_response: bool = False

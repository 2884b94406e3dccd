"""
Seed data: default coordinates, suggested categories, the initial event
state, tier configurations and the official blueprint templates.
"""

from datetime import timedelta
from typing import Dict, List, Optional
from .enums import (
    UserTier,
    AIComplexity,
    TerrainType,
    WinCondition,
    FeaturedMode,
    MapStyle,
)
from .schema import (
    Coordinate,
    EventConfiguration,
    TierConfig,
    SystemConfig,
    GlobalFeatureConfig,
    utc_now,
)

# Stockholm
DEFAULT_COORDINATES = Coordinate(lat=59.3293, lng=18.0686)

SYSTEM_OWNER_ID = "QUESTER_SYSTEM"
SYSTEM_OWNER_NAME = "Quester Original"

RACE_CATEGORIES = [
    "ADV (Motorcykel)",
    "Orientering",
    "Tipspromenad / Quiz",
    "Multisport",
    "Gravel Cykling",
    "MTB (Mountainbike)",
    "Trail Running",
    "Biltävling / Rally",
    "Vandring",
    "Paddling",
    "Annat",
]

EVENT_TYPES = [
    "Lopp",
    "Tävling",
    "Event",
    "Spel",
    "Äventyr",
    "Jakt",
    "Utmaning",
]


def initial_event_state(event_id: str = "new-event", **overrides) -> EventConfiguration:
    """
    Build the blank event every creation path starts from.

    Args:
        event_id: ID for the new record
        **overrides: Field values (snake_case) replacing the defaults

    Returns:
        A fresh EventConfiguration (start one hour from now)
    """
    location = {**DEFAULT_COORDINATES.model_dump(), "radius_meters": 50}
    data = {
        "id": event_id,
        "name": "Nytt Äventyr",
        "event_type": "Lopp",
        "status": "draft",
        "language": "sv",
        "is_public": False,
        "access_code": "QUEST123",
        "description": "Beskriv området och upplägget...",
        "category": RACE_CATEGORIES[0],
        "start_date_time": utc_now() + timedelta(hours=1),
        "start_mode": "mass_start",
        "manual_start_enabled": True,
        "start_location": dict(location),
        "finish_location": dict(location),
        "checkpoint_order": "free",
        "terrain_type": "trail",
        "leaderboard_metric": "Snabbast total tid",
        "win_condition": "fastest_time",
        "score_model": "basic",
        "par_time_minutes": 60,
        "points_per_minute": 10,
        "time_limit_minutes": 60,
        "leaderboard_mode": "global",
        "map_style": MapStyle.GOOGLE_STANDARD,
        "owner_name": "",
        "owner_photo_url": "",
    }
    data.update(overrides)
    return EventConfiguration.model_validate(data)


INITIAL_TIER_CONFIGS: Dict[UserTier, TierConfig] = {
    UserTier.SCOUT: TierConfig(
        id=UserTier.SCOUT,
        display_name="Scout",
        description=(
            "Perfekt för att testa idén riskfritt. Bygg småskaliga äventyr för "
            "familjen eller teamet och upptäck kraften i Quester helt utan kostnad."
        ),
        price_amount=0,
        price_currency="kr",
        price_frequency="Alltid gratis",
        button_text="Börja Gratis",
        is_recommended=False,
        features=[
            "Riskfri start & test",
            "Grundläggande AI-stöd",
            "Max 6 deltagare & 5 checkpoints",
            "Endast privat läge",
        ],
        max_active_races=1,
        max_checkpoints_per_race=5,
        max_participants_per_race=6,
        ai_complexity=AIComplexity.BASIC,
        allow_cloud_storage=False,
        allow_white_label=False,
        allow_live_monitoring=False,
    ),
    UserTier.CREATOR: TierConfig(
        id=UserTier.CREATOR,
        display_name="Creator",
        description=(
            "Ta bort alla begränsningar. Skapa storslagna upplevelser för "
            "konferenser, kick-offer och marknadsföring där du behöver full frihet."
        ),
        price_amount=149,
        price_currency="kr",
        price_frequency="engångsköp / event",
        button_text="Välj Creator",
        is_recommended=True,
        features=[
            "Total frihet (Obegränsat)",
            "Full AI-motor & Storytelling",
            "30 dagars access",
            "Professionell leverans",
        ],
        # One active event per licence
        max_active_races=1,
        max_checkpoints_per_race=9999,
        max_participants_per_race=9999,
        ai_complexity=AIComplexity.ADVANCED,
        allow_cloud_storage=True,
        allow_white_label=False,
        allow_live_monitoring=False,
    ),
    UserTier.MASTER: TierConfig(
        id=UserTier.MASTER,
        display_name="Master",
        description=(
            "För föreningar, företag och skolor som arrangerar aktiviteter "
            "regelbundet. Få tillgång till hela plattformen året runt utan "
            "begränsningar på antalet event."
        ),
        price_amount="Offert",
        price_currency="",
        price_frequency="årsabonnemang",
        button_text="Kontakta Oss",
        is_recommended=False,
        features=[
            "Obegränsat antal event",
            "Passar skolor & föreningar",
            "Inga tidsgränser",
            "Samla allt på ett konto",
            "Live Tracking & Admin",
        ],
        max_active_races=9999,
        max_checkpoints_per_race=9999,
        max_participants_per_race=9999,
        ai_complexity=AIComplexity.CUSTOM,
        allow_cloud_storage=True,
        allow_white_label=False,
        allow_live_monitoring=True,
    ),
}


def default_system_config() -> SystemConfig:
    return SystemConfig(
        featured_modes={
            FeaturedMode.ZOMBIE_SURVIVAL.value: GlobalFeatureConfig(
                is_active=False,
                title="Zombie Survival",
                description="Survive the outbreak.",
            ),
            FeaturedMode.CHRISTMAS_HUNT.value: GlobalFeatureConfig(
                is_active=False,
                title="Christmas Hunt",
                description="Find the gifts before the Grinch.",
            ),
        }
    )


def _blueprint_checkpoint(
    cp_id: str,
    name: str,
    points: int,
    radius: float,
    color: str,
    hint: str,
    description: Optional[str] = None,
    challenge: Optional[str] = None,
    quiz: Optional[dict] = None,
) -> dict:
    return {
        "id": cp_id,
        "name": name,
        "location": None,
        "type": "mandatory",
        "points": points,
        "radius_meters": radius,
        "color": color,
        "terrain_hint": hint,
        "description": description,
        "challenge": challenge,
        "quiz": quiz,
    }


def official_templates() -> List[EventConfiguration]:
    """The built-in blueprints shown in the template browser."""
    spooky = initial_event_state(
        "tpl-spooky-walk",
        is_template=True,
        name="Den Hemsökta Promenaden",
        category="Tipspromenad / Quiz",
        description=(
            "En spännande spökvandring för familjen eller vännerna. Gåtorna "
            "handlar om lokala spökhistorier och myter. Passar bra att köra i skymningen."
        ),
        event_type="Äventyr",
        win_condition=WinCondition.MOST_POINTS,
        terrain_type=TerrainType.TRAIL,
        cover_image="https://images.unsplash.com/photo-1509557965875-b88c97052f0e?auto=format&fit=crop&w=800&q=80",
        checkpoints=[
            _blueprint_checkpoint(
                "1", "Gamla Kyrkogården", 10, 25, "#8b5cf6", "Open space or near old structure",
                quiz={"question": "Vad kallas spöket som sägs varna för dödsfall?",
                      "options": ["Vita Frun", "Mylingen", "Lyktgubben", "Näcken"],
                      "correct_option_index": 0},
            ),
            _blueprint_checkpoint(
                "2", "Viskande Trädet", 10, 25, "#8b5cf6", "Near a large tree or park",
                quiz={"question": "Vilket väsen lurar i vattendrag?",
                      "options": ["Troll", "Näcken", "Vättar", "Skogsrået"],
                      "correct_option_index": 1},
            ),
            _blueprint_checkpoint(
                "3", "Övergivna Huset", 20, 25, "#8b5cf6", "Secluded area or building",
                quiz={"question": "Hur skyddar man sig mot troll enligt folktron?",
                      "options": ["Med Silver", "Med Järn", "Med Vitlök", "Med Eld"],
                      "correct_option_index": 1},
            ),
            _blueprint_checkpoint(
                "4", "Skuggornas Plats", 10, 25, "#8b5cf6", "Darker area or under bridge",
                quiz={"question": "Vad är en \"Bäckahäst\"?",
                      "options": ["En snäll ponny", "Ett vattenväsen", "En fågel", "Ett spöktåg"],
                      "correct_option_index": 1},
            ),
        ],
    )

    city_pulse = initial_event_state(
        "tpl-city-pulse",
        is_template=True,
        name="City Pulse Challenge",
        category="Multisport",
        description=(
            "Ett högintensivt stadslopp där ni navigerar mellan landmärken och "
            "löser kluriga uppgifter. Perfekt för teambuilding eller kompisgänget."
        ),
        event_type="Tävling",
        win_condition=WinCondition.FASTEST_TIME,
        terrain_type=TerrainType.URBAN,
        cover_image="https://images.unsplash.com/photo-1480714378408-67cf0d13bc1b?auto=format&fit=crop&w=800&q=80",
        checkpoints=[
            _blueprint_checkpoint("1", "Torget", 0, 30, "#3b82f6", "Central square or plaza",
                                  description="Starta klockan! Hitta statyn."),
            _blueprint_checkpoint("2", "Brofästet", 0, 30, "#3b82f6", "Bridge or crossing",
                                  challenge="Ta en gruppbild med bron i bakgrunden."),
            _blueprint_checkpoint("3", "Höjden", 0, 30, "#3b82f6", "High point or hill",
                                  description="Spring upp för trapporna!"),
            _blueprint_checkpoint(
                "4", "Parken", 0, 30, "#3b82f6", "Park area",
                quiz={"question": "Vilket år grundades er stad?",
                      "options": ["1200-talet", "1600-talet", "1800-talet", "Ingen aning"],
                      "correct_option_index": 3},
            ),
        ],
    )

    family = initial_event_state(
        "tpl-family-fun",
        is_template=True,
        name="Familjeäventyret",
        category="Vandring",
        description=(
            "En lugn och rolig runda för hela familjen med fokus på natur och lek. "
            "Ingen tidspress, bara upptäckarglädje."
        ),
        event_type="Äventyr",
        win_condition=WinCondition.MOST_POINTS,
        terrain_type=TerrainType.TRAIL,
        cover_image="https://images.unsplash.com/photo-1476514525535-07fb3b4ae5f1?auto=format&fit=crop&w=800&q=80",
        checkpoints=[
            _blueprint_checkpoint("1", "Myrstacken", 5, 20, "#10B981", "Forest edge",
                                  description="Se om ni kan hitta några myror!"),
            _blueprint_checkpoint("2", "Fågelspaning", 5, 20, "#10B981", "Open field or trees",
                                  challenge="Hitta 3 olika sorters blad."),
            _blueprint_checkpoint("3", "Picknick-gläntan", 10, 20, "#10B981", "Nice grassy area",
                                  description="Dags för fika?"),
            _blueprint_checkpoint(
                "4", "Vattenhålet", 5, 20, "#10B981", "Near water or fountain",
                quiz={"question": "Vad äter ekorrar helst?",
                      "options": ["Köttbullar", "Kottar & Nötter", "Gräs", "Fisk"],
                      "correct_option_index": 1},
            ),
        ],
    )

    return [spooky, city_pulse, family]

"""
Static booster catalog.

Reference data loaded with the process; never persisted. Activations copy
type and multiplier at purchase time, so editing an entry here never changes
boosters users already hold.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from app.core.errors import NotFoundError

ONE_TIME = "oneTime"
DURATION = "duration"
PERMANENT = "permanent"

BOOSTER_TYPES = (ONE_TIME, DURATION, PERMANENT)

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


@dataclass(frozen=True)
class Booster:
    id: str
    name: str
    description: str
    multiplier: float
    duration: int  # milliseconds, 0 for oneTime and permanent
    price: float
    type: str

    def __post_init__(self):
        if self.multiplier <= 0:
            raise ValueError(f"Booster {self.id}: multiplier must be positive")
        if self.price < 0:
            raise ValueError(f"Booster {self.id}: price must not be negative")
        if self.type not in BOOSTER_TYPES:
            raise ValueError(f"Booster {self.id}: unknown type {self.type}")
        if self.type == DURATION and self.duration <= 0:
            raise ValueError(f"Booster {self.id}: duration boosters need a duration")


AVAILABLE_BOOSTERS: List[Booster] = [
    Booster("quick-boost", "Quick Boost", "One-time 2x multiplier for your next trade",
            2, 0, 100, ONE_TIME),
    Booster("hour-boost", "Hour Power", "1.5x multiplier for 1 hour",
            1.5, HOUR_MS, 250, DURATION),
    Booster("day-boost", "Day Trader", "1.25x multiplier for 24 hours",
            1.25, DAY_MS, 500, DURATION),
    Booster("permanent-boost", "Permanent Edge", "Permanent 1.1x multiplier",
            1.1, 0, 2000, PERMANENT),
    Booster("super-quick-boost", "Super Quick Boost", "One-time 3x multiplier for your next trade",
            3, 0, 300, ONE_TIME),
    Booster("mega-quick-boost", "Mega Quick Boost", "One-time 4x multiplier for your next trade",
            4, 0, 600, ONE_TIME),
    Booster("ultra-quick-boost", "Ultra Quick Boost", "One-time 5x multiplier for your next trade",
            5, 0, 1000, ONE_TIME),
    Booster("half-day-boost", "Half Day Trader", "1.35x multiplier for 12 hours",
            1.35, 12 * HOUR_MS, 400, DURATION),
    Booster("week-boost", "Weekly Warrior", "1.15x multiplier for 7 days",
            1.15, 7 * DAY_MS, 1000, DURATION),
    Booster("month-boost", "Monthly Master", "1.1x multiplier for 30 days",
            1.1, 30 * DAY_MS, 3000, DURATION),
    Booster("silver-permanent", "Silver Edge", "Permanent 1.15x multiplier",
            1.15, 0, 3000, PERMANENT),
    Booster("gold-permanent", "Gold Edge", "Permanent 1.2x multiplier",
            1.2, 0, 5000, PERMANENT),
    Booster("platinum-permanent", "Platinum Edge", "Permanent 1.25x multiplier",
            1.25, 0, 8000, PERMANENT),
    Booster("diamond-permanent", "Diamond Edge", "Permanent 1.3x multiplier",
            1.3, 0, 12000, PERMANENT),
]

_CATALOG_BY_ID: Dict[str, Booster] = {booster.id: booster for booster in AVAILABLE_BOOSTERS}

if len(_CATALOG_BY_ID) != len(AVAILABLE_BOOSTERS):
    raise RuntimeError("Booster catalog ids must be unique")


def list_catalog() -> List[Booster]:
    return list(AVAILABLE_BOOSTERS)


def find_catalog_entry(booster_id: Optional[str]) -> Optional[Booster]:
    if not booster_id:
        return None
    return _CATALOG_BY_ID.get(booster_id)


def get_catalog_entry(booster_id: str) -> Booster:
    booster = find_catalog_entry(booster_id)
    if booster is None:
        raise NotFoundError(f"Booster {booster_id} not found")
    return booster

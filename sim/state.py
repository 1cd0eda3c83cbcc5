# sim/state.py
"""
SimulationState
---------------
The single mutable aggregate owned by the simulation engine, plus the enums
that name its discrete fields.

Everything the presentation layer renders comes out of `snapshot()`, which
returns plain Python data (strings, floats, lists, dicts) so callers can never
mutate engine state through it.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Dict, List, Optional, Tuple


class ResourceId(str, Enum):
    WATER = "water"
    LIGHT = "light"
    NUTRIENTS = "nutrients"
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    CO2 = "co2"
    ENERGY = "energy"


class GrowthStage(str, Enum):
    SEED = "seed"
    GERMINATION = "germination"
    SEEDLING = "seedling"
    VEGETATIVE = "vegetative"
    BUDDING = "budding"
    FLOWERING = "flowering"

    @property
    def index(self) -> int:
        return STAGE_ORDER.index(self)


STAGE_ORDER = list(GrowthStage)


class GamePhase(str, Enum):
    MENU = "menu"
    TUTORIAL = "tutorial"
    PLAYING = "playing"
    PAUSED = "paused"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self in (GamePhase.WON, GamePhase.LOST)


class Difficulty(str, Enum):
    EASY = "easy"
    HARD = "hard"


class StressLevel(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


# Starting values on every fresh session
INITIAL_RESOURCES: Dict[ResourceId, float] = {
    ResourceId.WATER: 50.0,
    ResourceId.LIGHT: 50.0,
    ResourceId.NUTRIENTS: 50.0,
    ResourceId.TEMPERATURE: 22.0,
    ResourceId.HUMIDITY: 50.0,
    ResourceId.CO2: 50.0,
    ResourceId.ENERGY: 100.0,
}


@dataclass
class ActiveEvent:
    """A time-boxed disruption pushing one resource each tick."""
    id: str
    effect: ResourceId
    magnitude_per_tick: float
    time_left: float

    def as_dict(self) -> dict:
        return {
            'id': self.id,
            'effect': self.effect.value,
            'magnitude_per_tick': self.magnitude_per_tick,
            'time_left': self.time_left,
        }


class EventLog:
    """Most-recent-first message log with a fixed capacity."""

    def __init__(self, maxlen: int = 5):
        self._entries: Deque[Tuple[str, float]] = deque(maxlen=maxlen)
        self.total = 0  # messages ever added, including dropped ones

    def add(self, message: str, timestamp: float):
        # appendleft on a bounded deque drops the oldest entry from the right
        self._entries.appendleft((message, round(timestamp, 1)))
        self.total += 1

    def clear(self):
        self._entries.clear()

    def entries(self) -> List[Tuple[str, float]]:
        return list(self._entries)

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)


@dataclass
class SimulationState:
    difficulty: Difficulty = Difficulty.EASY
    game_phase: GamePhase = GamePhase.MENU

    tick_count: int = 0
    elapsed_time: float = 0.0
    orbit_count: int = 0
    is_daylight: bool = True

    growth_stage: GrowthStage = GrowthStage.SEED
    growth_progress: float = 0.0
    plant_health: float = 100.0

    resources: Dict[ResourceId, float] = field(default_factory=lambda: dict(INITIAL_RESOURCES))
    stress_factors: Dict[ResourceId, StressLevel] = field(default_factory=dict)
    active_event: Optional[ActiveEvent] = None
    event_log: EventLog = field(default_factory=EventLog)

    @classmethod
    def fresh(cls, difficulty: Difficulty = Difficulty.EASY, phase: GamePhase = GamePhase.MENU,
              log_size: int = 5) -> "SimulationState":
        return cls(difficulty=difficulty, game_phase=phase, event_log=EventLog(log_size))

    def snapshot(self) -> dict:
        """Read-only view of every field as plain data."""
        return {
            'difficulty': self.difficulty.value,
            'game_phase': self.game_phase.value,
            'tick_count': self.tick_count,
            'elapsed_time': self.elapsed_time,
            'orbit_count': self.orbit_count,
            'is_daylight': self.is_daylight,
            'growth_stage': self.growth_stage.value,
            'growth_progress': self.growth_progress,
            'plant_health': self.plant_health,
            'resources': {r.value: v for r, v in self.resources.items()},
            'stress_factors': {r.value: s.value for r, s in self.stress_factors.items()},
            'active_event': self.active_event.as_dict() if self.active_event else None,
            'event_log': [{'message': m, 'time': t} for m, t in self.event_log],
            'events_logged': self.event_log.total,
        }

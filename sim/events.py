# sim/events.py
"""
EventGenerator
--------------
Random station disruptions (solar flares, leaks, power saving, ...).

At most one event is active at a time. While active it pushes its target
resource by `change * 0.01` per tick until its duration runs out.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from sim.state import ActiveEvent, Difficulty, ResourceId, SimulationState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventSpec:
    id: str
    name: str
    effect: ResourceId
    change: float
    duration: float  # seconds


_EASY_POOL = [
    EventSpec("solar_flare", "Solar flare", ResourceId.LIGHT, -15.0, 20.0),
    EventSpec("temp_spike", "Temperature spike", ResourceId.TEMPERATURE, 3.0, 15.0),
    EventSpec("water_leak", "Water leak", ResourceId.WATER, -10.0, 10.0),
]

EVENT_POOLS: Dict[Difficulty, List[EventSpec]] = {
    Difficulty.EASY: _EASY_POOL,
    Difficulty.HARD: _EASY_POOL + [
        EventSpec("air_system", "Air system fault", ResourceId.CO2, -20.0, 25.0),
        EventSpec("power_save", "Power saving mode", ResourceId.ENERGY, -30.0, 30.0),
        EventSpec("humidity_rise", "Humidity rise", ResourceId.HUMIDITY, 15.0, 20.0),
    ],
}

EVENTS_BY_ID = {spec.id: spec for spec in EVENT_POOLS[Difficulty.HARD]}


class EventGenerator:
    def __init__(self, cfg=None, rng: Optional[np.random.Generator] = None):
        cfg = cfg or {}
        self.chance = {
            Difficulty.EASY: cfg.get('chance_easy', 0.001),
            Difficulty.HARD: cfg.get('chance_hard', 0.003),
        }
        self.effect_scale = cfg.get('effect_scale', 0.01)
        self.rng = rng if rng is not None else np.random.default_rng(cfg.get('seed'))

    def seed(self, seed: Optional[int]):
        self.rng = np.random.default_rng(seed)

    def maybe_spawn(self, state: SimulationState) -> Optional[EventSpec]:
        """Draws for a new event; only ever called with no event active."""
        if state.active_event is not None:
            return None
        if self.rng.random() >= self.chance[state.difficulty]:
            return None
        pool = EVENT_POOLS[state.difficulty]
        spec = pool[int(self.rng.integers(len(pool)))]
        self.activate(state, spec)
        return spec

    def activate(self, state: SimulationState, spec: EventSpec):
        state.active_event = ActiveEvent(
            id=spec.id,
            effect=spec.effect,
            magnitude_per_tick=spec.change * self.effect_scale,
            time_left=spec.duration,
        )
        logger.info("Event %s started (%s %+.1f over %.0fs)", spec.id, spec.effect.value,
                    spec.change, spec.duration)

    def step(self, state: SimulationState, resources, tick_seconds: float = 0.1) -> List[str]:
        """
        One tick of event handling. Returns player-facing messages in the order
        they happened.

        `resources` is the ResourceModel used to apply clamped effects.
        """
        messages = []
        event = state.active_event
        if event is not None and event.time_left <= 0:
            name = EVENTS_BY_ID[event.id].name
            messages.append(f"{name} resolved, systems back to normal")
            logger.info("Event %s resolved", event.id)
            state.active_event = None
            return messages

        spawned = self.maybe_spawn(state)
        if spawned is not None:
            messages.append(f"{spawned.name} detected! {spawned.effect.value} affected")

        event = state.active_event
        if event is not None:
            resources.adjust(state, event.effect, event.magnitude_per_tick)
            event.time_left = round(event.time_left - tick_seconds, 6)
        return messages

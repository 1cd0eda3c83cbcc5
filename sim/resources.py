# sim/resources.py
"""
ResourceModel
-------------
Holds the static range table for the seven station resources and applies the
passive per-tick drift (consumption, day/night light and heat, humidity
coupling).

Every write goes through `clamp`, so no resource is ever observable outside
its valid range.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from sim.state import Difficulty, ResourceId, SimulationState


@dataclass(frozen=True)
class ResourceRange:
    valid: Tuple[float, float]
    optimal: Optional[Tuple[float, float]] = None
    critical: Optional[Tuple[float, float]] = None
    step: float = 5.0  # default command amount


# Single source of truth for health scoring and any UI colouring.
# Energy has no optimal band; hard mode checks it against ENERGY_FLOOR instead.
RESOURCE_RANGES: Dict[ResourceId, ResourceRange] = {
    ResourceId.WATER: ResourceRange((0.0, 100.0), (40.0, 70.0), (20.0, 90.0)),
    ResourceId.LIGHT: ResourceRange((0.0, 100.0), (60.0, 90.0), (30.0, 100.0)),
    ResourceId.NUTRIENTS: ResourceRange((0.0, 100.0), (45.0, 75.0), (25.0, 85.0)),
    ResourceId.TEMPERATURE: ResourceRange((15.0, 30.0), (20.0, 24.0), (15.0, 28.0), step=0.5),
    ResourceId.HUMIDITY: ResourceRange((0.0, 100.0), (50.0, 70.0), (30.0, 85.0)),
    ResourceId.CO2: ResourceRange((0.0, 100.0), (40.0, 70.0), (20.0, 90.0)),
    ResourceId.ENERGY: ResourceRange((0.0, 100.0)),
}

ENERGY_FLOOR = 20.0

EASY_RESOURCES = (
    ResourceId.WATER,
    ResourceId.LIGHT,
    ResourceId.NUTRIENTS,
    ResourceId.TEMPERATURE,
)
HARD_RESOURCES = EASY_RESOURCES + (ResourceId.HUMIDITY, ResourceId.CO2, ResourceId.ENERGY)


def active_resources(difficulty: Difficulty) -> Tuple[ResourceId, ...]:
    """Resources that exist (and can be commanded) at this difficulty."""
    return HARD_RESOURCES if Difficulty(difficulty) is Difficulty.HARD else EASY_RESOURCES


def clamp(resource: ResourceId, value: float) -> float:
    lo, hi = RESOURCE_RANGES[ResourceId(resource)].valid
    return float(np.clip(value, lo, hi))


def classify(resource: ResourceId, value: float) -> str:
    """Returns 'optimal', 'warning' or 'critical' for a scored resource.

    Bounds are inclusive: a value sitting exactly on an edge is inside it.
    """
    rng = RESOURCE_RANGES[ResourceId(resource)]
    if rng.optimal is None:
        raise ValueError(f"{resource} has no optimal range")
    c_lo, c_hi = rng.critical
    o_lo, o_hi = rng.optimal
    if value < c_lo or value > c_hi:
        return 'critical'
    if value < o_lo or value > o_hi:
        return 'warning'
    return 'optimal'


def default_step(resource: ResourceId) -> float:
    return RESOURCE_RANGES[ResourceId(resource)].step


class ResourceModel:
    def __init__(self, cfg=None):
        cfg = cfg or {}

        # Consumption per tick
        self.water_use = cfg.get('water_use', 0.08)
        self.nutrient_use = cfg.get('nutrient_use', 0.05)
        self.co2_use = cfg.get('co2_use', 0.1)
        self.energy_use = cfg.get('energy_use', 0.06)

        # Day/night swing
        self.light_gain_day = cfg.get('light_gain_day', 0.15)
        self.light_loss_night = cfg.get('light_loss_night', 0.2)
        self.temp_drift = cfg.get('temp_drift', 0.01)
        self.temp_day_target = cfg.get('temp_day_target', 30.0)
        self.temp_night_target = cfg.get('temp_night_target', 15.0)

        # Humidity coupling (hard mode)
        self.humidity_water_coeff = cfg.get('humidity_water_coeff', 0.002)
        self.humidity_temp_coeff = cfg.get('humidity_temp_coeff', -0.01)

    # Mutation ------------------------------------------------------------
    @staticmethod
    def set(state: SimulationState, resource: ResourceId, value: float) -> float:
        resource = ResourceId(resource)
        state.resources[resource] = clamp(resource, value)
        return state.resources[resource]

    def adjust(self, state: SimulationState, resource: ResourceId, delta: float) -> float:
        resource = ResourceId(resource)
        return self.set(state, resource, state.resources[resource] + delta)

    # Drift ---------------------------------------------------------------
    def drift(self, state: SimulationState):
        """Applies one tick of passive drift in place."""
        r = state.resources
        hard = state.difficulty is Difficulty.HARD

        # humidity reads the values from before this tick's drift
        water_before = r[ResourceId.WATER]
        temp_before = r[ResourceId.TEMPERATURE]

        self.adjust(state, ResourceId.WATER, -self.water_use)
        self.adjust(state, ResourceId.NUTRIENTS, -self.nutrient_use)

        if hard:
            self.adjust(state, ResourceId.CO2, -self.co2_use)
            self.adjust(state, ResourceId.ENERGY, -self.energy_use)

        if state.is_daylight:
            self.adjust(state, ResourceId.LIGHT, self.light_gain_day)
            temp = min(self.temp_day_target, r[ResourceId.TEMPERATURE] + self.temp_drift)
        else:
            self.adjust(state, ResourceId.LIGHT, -self.light_loss_night)
            temp = max(self.temp_night_target, r[ResourceId.TEMPERATURE] - self.temp_drift)
        self.set(state, ResourceId.TEMPERATURE, temp)

        if hard:
            delta = ((water_before - 50.0) * self.humidity_water_coeff
                     + (temp_before - 22.0) * self.humidity_temp_coeff)
            self.adjust(state, ResourceId.HUMIDITY, delta)

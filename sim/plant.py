# sim/plant.py
"""
PlantModel
-----------
Health and growth evaluation for the station zinnia.

Each tick the plant scores every active resource against its optimal and
critical bands, applies the summed health delta once, then accumulates growth
progress while it is healthy enough. Growth stages are threshold crossings on
cumulative progress.

Health and progress are percentages in [0, 100].
"""

import logging
from typing import Dict, List, Optional, Tuple

import numpy as np

from sim.resources import ENERGY_FLOOR, active_resources, classify
from sim.state import Difficulty, GrowthStage, ResourceId, SimulationState, StressLevel

logger = logging.getLogger(__name__)

# (stage entered, progress that must be exceeded, log message)
STAGE_THRESHOLDS: List[Tuple[GrowthStage, float, str]] = [
    (GrowthStage.GERMINATION, 20.0, "Germination started: the seed has split open"),
    (GrowthStage.SEEDLING, 35.0, "Seedling emerging: first leaves unfolding"),
    (GrowthStage.VEGETATIVE, 55.0, "Vegetative phase: stem and leaves growing fast"),
    (GrowthStage.BUDDING, 75.0, "Budding: flower buds are forming"),
    (GrowthStage.FLOWERING, 95.0, "Flowering success: the zinnia has bloomed in orbit"),
]


class PlantModel:
    def __init__(self, cfg=None):
        cfg = cfg or {}

        # Health deltas per scored resource per tick
        self.critical_penalty = cfg.get('critical_penalty', 0.5)
        self.warning_penalty = cfg.get('warning_penalty', 0.1)
        self.optimal_bonus = cfg.get('optimal_bonus', 0.05)
        self.energy_penalty = cfg.get('energy_penalty', 0.3)
        self.energy_floor = cfg.get('energy_floor', ENERGY_FLOOR)

        # Growth
        self.growth_rate = cfg.get('growth_rate', 0.05)
        self.growth_health_floor = cfg.get('growth_health_floor', 30.0)

    # Scoring --------------------------------------------------------------
    def score(self, state: SimulationState) -> Tuple[float, Dict[ResourceId, StressLevel]]:
        """Health delta and fresh stress map for the current resource levels."""
        delta = 0.0
        stress: Dict[ResourceId, StressLevel] = {}

        for resource in active_resources(state.difficulty):
            if resource is ResourceId.ENERGY:
                continue
            status = classify(resource, state.resources[resource])
            if status == 'critical':
                delta -= self.critical_penalty
                stress[resource] = StressLevel.CRITICAL
            elif status == 'warning':
                delta -= self.warning_penalty
                stress[resource] = StressLevel.WARNING
            else:
                delta += self.optimal_bonus

        if state.difficulty is Difficulty.HARD and state.resources[ResourceId.ENERGY] < self.energy_floor:
            delta -= self.energy_penalty
            stress[ResourceId.ENERGY] = StressLevel.CRITICAL

        return delta, stress

    # Step update ----------------------------------------------------------
    def update_health(self, state: SimulationState) -> float:
        delta, stress = self.score(state)
        state.stress_factors = stress
        state.plant_health = float(np.clip(state.plant_health + delta, 0.0, 100.0))
        return delta

    def update_growth(self, state: SimulationState, health: Optional[float] = None) -> Optional[str]:
        """
        Advances progress while health is above the floor and performs at most
        one stage transition. Returns the transition message, if any.

        `health` is the value the floor is checked against; the engine passes
        the health from the start of the tick. Defaults to the current health.
        """
        if health is None:
            health = state.plant_health
        if health <= self.growth_health_floor:
            return None

        progress = state.growth_progress + self.growth_rate
        message = None
        nxt = self.next_stage(state.growth_stage)
        if nxt is not None:
            stage, threshold, text = nxt
            if progress > threshold:
                state.growth_stage = stage
                message = text
                logger.info("Stage %s reached at progress %.2f", stage.value, progress)

        state.growth_progress = float(np.clip(progress, 0.0, 100.0))
        return message

    # Stage ---------------------------------------------------------------
    @staticmethod
    def next_stage(current: GrowthStage):
        """Threshold entry for the stage after `current`, or None at flowering."""
        for stage, threshold, text in STAGE_THRESHOLDS:
            if stage.index == current.index + 1:
                return stage, threshold, text
        return None

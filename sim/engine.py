# sim/engine.py
"""
SimulationEngine
----------------
Fixed-timestep core of the orbital garden game. Owns the SimulationState and
exposes the phase machine, the resource commands and `tick()`.

One tick = 0.1 simulated seconds:
    1. advance time
    2. passive resource drift, then flip day/night on each new orbit
    3. health scoring, then growth and stage transitions
    4. random events
    5. outcome check (lost on zero health, else won/lost at the time limit)

Nothing in a tick raises; every value is clamped before it is stored.
"""

import logging
from typing import Dict, List, Optional

import numpy as np

from sim.events import EventGenerator
from sim.outcome import OutcomeJudge
from sim.plant import PlantModel
from sim.resources import ResourceModel, active_resources, default_step
from sim.state import Difficulty, GamePhase, ResourceId, SimulationState

logger = logging.getLogger(__name__)

PHASE_TRANSITIONS = {
    GamePhase.MENU: {GamePhase.TUTORIAL},
    GamePhase.TUTORIAL: {GamePhase.MENU, GamePhase.PLAYING},
    GamePhase.PLAYING: {GamePhase.PAUSED, GamePhase.WON, GamePhase.LOST},
    GamePhase.PAUSED: {GamePhase.PLAYING},
    GamePhase.WON: {GamePhase.MENU, GamePhase.PLAYING},
    GamePhase.LOST: {GamePhase.MENU, GamePhase.PLAYING},
}

INSUFFICIENT_ENERGY = "Insufficient energy: recharge before adjusting systems"


class SimulationEngine:
    def __init__(self, cfg: Optional[dict] = None, seed: Optional[int] = None):
        self.cfg = cfg or {}
        engine_cfg = self.cfg.get('engine') or {}
        res_cfg = self.cfg.get('resources') or {}

        self.tick_seconds = (self.cfg.get('clock') or {}).get('tick_seconds', 0.1)
        self.orbit_duration = engine_cfg.get('orbit_duration_s', 15.0)
        self.log_size = engine_cfg.get('event_log_size', 5)
        self.command_cost = res_cfg.get('command_energy_cost', 2.0)

        if seed is None:
            seed = self.cfg.get('seed')
        self.resources = ResourceModel(res_cfg)
        self.plant = PlantModel(self.cfg.get('plant'))
        self.events = EventGenerator(self.cfg.get('events'), rng=np.random.default_rng(seed))
        self.judge = OutcomeJudge(engine_cfg)

        self.state = SimulationState.fresh(log_size=self.log_size)

    # === Queries ===
    @property
    def phase(self) -> GamePhase:
        return self.state.game_phase

    @property
    def is_playing(self) -> bool:
        return self.state.game_phase is GamePhase.PLAYING

    def snapshot(self) -> dict:
        return self.state.snapshot()

    def loss_reasons(self) -> List[Dict[str, str]]:
        if self.state.game_phase is not GamePhase.LOST:
            return []
        return self.judge.loss_reasons(self.state)

    def summary(self) -> dict:
        return self.judge.summary(self.state)

    def log_event(self, message: str):
        self.state.event_log.add(message, self.state.elapsed_time)

    # === Phase machine ===
    def start_game(self, difficulty="easy") -> bool:
        """Picks the difficulty, resets the session and opens the tutorial."""
        difficulty = Difficulty(difficulty)
        if self.state.game_phase is not GamePhase.MENU:
            logger.debug("start_game ignored in phase %s", self.state.game_phase.value)
            return False
        self.state.difficulty = difficulty
        self.reset_game()
        return self.set_phase(GamePhase.TUTORIAL)

    def reset_game(self):
        """Replaces the state with a fresh one, keeping difficulty and phase."""
        self.state = SimulationState.fresh(self.state.difficulty, self.state.game_phase, self.log_size)
        logger.info("Session reset (%s)", self.state.difficulty.value)

    def start_playing(self) -> bool:
        return self.set_phase(GamePhase.PLAYING)

    def set_phase(self, phase) -> bool:
        phase = GamePhase(phase)
        current = self.state.game_phase
        if phase not in PHASE_TRANSITIONS[current]:
            logger.debug("Rejected phase transition %s -> %s", current.value, phase.value)
            return False
        if phase is GamePhase.PLAYING and current.is_terminal:
            # play again
            self.reset_game()
        self.state.game_phase = phase
        logger.info("Phase %s -> %s", current.value, phase.value)
        return True

    # === Commands ===
    def increase_resource(self, resource, amount: Optional[float] = None) -> bool:
        return self._command(resource, amount, +1.0)

    def decrease_resource(self, resource, amount: Optional[float] = None) -> bool:
        return self._command(resource, amount, -1.0)

    def _command(self, resource, amount, sign) -> bool:
        resource = ResourceId(resource)
        state = self.state
        if state.game_phase is not GamePhase.PLAYING:
            logger.debug("Command on %s ignored in phase %s", resource.value, state.game_phase.value)
            return False
        if resource not in active_resources(state.difficulty):
            logger.debug("Command on %s ignored: not available in %s mode",
                         resource.value, state.difficulty.value)
            return False
        if amount is None:
            amount = default_step(resource)

        if state.difficulty is Difficulty.HARD and resource is not ResourceId.ENERGY:
            if state.resources[ResourceId.ENERGY] < self.command_cost:
                self.log_event(INSUFFICIENT_ENERGY)
                logger.info("Command on %s rejected: energy %.2f", resource.value,
                            state.resources[ResourceId.ENERGY])
                return False
            self.resources.adjust(state, ResourceId.ENERGY, -self.command_cost)

        self.resources.adjust(state, resource, sign * amount)
        return True

    # === Tick ===
    def tick(self) -> bool:
        """Advances one fixed step. Returns False when not playing."""
        state = self.state
        if state.game_phase is not GamePhase.PLAYING:
            return False

        state.tick_count += 1
        # derived from the tick count so 3000 ticks is exactly 300.0
        state.elapsed_time = round(state.tick_count * self.tick_seconds, 6)
        orbit = int(state.elapsed_time // self.orbit_duration)

        # the boundary tick still drifts under the previous light phase
        self.resources.drift(state)
        if orbit != state.orbit_count:
            state.orbit_count = orbit
            state.is_daylight = not state.is_daylight

        health_before = state.plant_health
        self.plant.update_health(state)
        message = self.plant.update_growth(state, health=health_before)
        if message:
            self.log_event(message)

        for message in self.events.step(state, self.resources, self.tick_seconds):
            self.log_event(message)

        outcome = self.judge.judge(state)
        if outcome is not None:
            self.set_phase(outcome)
        return True

    def run(self, n_ticks: int) -> int:
        """Runs up to n_ticks back to back; stops early on leaving `playing`."""
        done = 0
        for _ in range(n_ticks):
            if not self.tick():
                break
            done += 1
        return done

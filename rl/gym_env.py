# rl/gym_env.py
"""
Orbital Garden Environment

Gymnasium wrapper around SimulationEngine so agents (scripted or learned) can
play the game the same way the UI does: by issuing increase/decrease commands
between ticks. One env step = at most one command + one engine tick.
"""

import gymnasium as gym
from gymnasium import spaces
import numpy as np
from typing import Optional, Dict, Any, List, Tuple

from sim.engine import SimulationEngine
from sim.resources import RESOURCE_RANGES, active_resources
from sim.state import Difficulty, GamePhase, ResourceId, STAGE_ORDER

# ============================================================================
# OBSERVATION SCHEMA - AUTHORITATIVE DEFINITION
# ============================================================================
# Order and meaning of observation features. All values are in [0, 1].
# Resources are normalized over their valid range; hard-only resources stay
# at their initial value in easy mode.
# ============================================================================

OBS_KEYS = [f'resource_{r.value}' for r in ResourceId] + [
    'plant_health',
    'growth_progress',
    'growth_stage',
    'is_daylight',
    'time_fraction',
    'event_active',
]

# ============================================================================
# ACTION SCHEMA
# ============================================================================
# 0 is a no-op; then (increase, decrease) pairs per commandable resource.
# ============================================================================


def build_action_table(difficulty) -> List[Optional[Tuple[str, ResourceId]]]:
    table: List[Optional[Tuple[str, ResourceId]]] = [None]
    for resource in active_resources(difficulty):
        table.append(('increase', resource))
        table.append(('decrease', resource))
    return table


def decode_obs(obs) -> Dict[str, float]:
    """Observation array -> {key: value} using OBS_KEYS."""
    assert len(obs) == len(OBS_KEYS), f"Observation length ({len(obs)}) != OBS_KEYS length ({len(OBS_KEYS)})"
    return {key: float(obs[i]) for i, key in enumerate(OBS_KEYS)}


def denormalize_resource(resource, value: float) -> float:
    lo, hi = RESOURCE_RANGES[ResourceId(resource)].valid
    return lo + value * (hi - lo)


class OrbitalGardenEnv(gym.Env):
    """
    Rewards:
    - health change this tick (scaled)
    - +stage_bonus on every growth stage transition
    - +win_bonus / -loss_penalty on the terminal tick
    """

    metadata = {"render_modes": ["human"]}

    def __init__(self, cfg: Optional[dict] = None, render_mode: Optional[str] = None):
        super().__init__()
        self.cfg = cfg or {}
        env_cfg = self.cfg.get('env') or {}

        self.difficulty = Difficulty(env_cfg.get('difficulty', 'easy'))
        self.max_ticks = int(env_cfg.get('max_ticks', 3000))
        self.health_scale = env_cfg.get('health_reward_scale', 1.0)
        self.stage_bonus = env_cfg.get('stage_bonus', 10.0)
        self.win_bonus = env_cfg.get('win_bonus', 100.0)
        self.loss_penalty = env_cfg.get('loss_penalty', 100.0)
        self.render_mode = render_mode

        self.ACTIONS = build_action_table(self.difficulty)
        self.action_space = spaces.Discrete(len(self.ACTIONS))
        self.observation_space = spaces.Box(low=0.0, high=1.0, shape=(len(OBS_KEYS),), dtype=np.float32)

        self.engine = SimulationEngine(self.cfg)
        self.step_count = 0

    def action_for(self, op: str, resource) -> int:
        """Index of the action issuing `op` on `resource`."""
        return self.ACTIONS.index((op, ResourceId(resource)))

    def _get_obs(self) -> np.ndarray:
        state = self.engine.state
        time_limit = self.engine.judge.time_limit
        obs_resources = []
        for r in ResourceId:
            lo, hi = RESOURCE_RANGES[r].valid
            obs_resources.append((state.resources[r] - lo) / (hi - lo))
        obs = np.array(obs_resources + [
            state.plant_health / 100.0,
            state.growth_progress / 100.0,
            state.growth_stage.index / (len(STAGE_ORDER) - 1),
            1.0 if state.is_daylight else 0.0,
            min(1.0, state.elapsed_time / time_limit),
            1.0 if state.active_event is not None else 0.0,
        ], dtype=np.float32)
        obs = np.clip(obs, 0.0, 1.0)
        assert obs.shape == self.observation_space.shape
        return obs

    def _get_info(self) -> Dict[str, Any]:
        snap = self.engine.snapshot()
        return {
            'elapsed_time': snap['elapsed_time'],
            'game_phase': snap['game_phase'],
            'growth_stage': snap['growth_stage'],
            'plant_health': snap['plant_health'],
            'stress_factors': snap['stress_factors'],
            'active_event': snap['active_event'],
            'max_ticks': self.max_ticks,
        }

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        options = options or {}
        if 'difficulty' in options:
            self.difficulty = Difficulty(options['difficulty'])
            self.ACTIONS = build_action_table(self.difficulty)
            self.action_space = spaces.Discrete(len(self.ACTIONS))

        self.engine = SimulationEngine(self.cfg)
        # share the env's seeded generator so reset(seed=...) is reproducible
        self.engine.events.rng = self.np_random
        self.engine.start_game(self.difficulty)
        self.engine.start_playing()
        self.step_count = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        action = int(action)
        if not 0 <= action < len(self.ACTIONS):
            raise ValueError(f"Invalid action {action}")

        state = self.engine.state
        health_before = state.plant_health
        stage_before = state.growth_stage.index

        accepted = False
        command = self.ACTIONS[action]
        if command is not None:
            op, resource = command
            if op == 'increase':
                accepted = self.engine.increase_resource(resource)
            else:
                accepted = self.engine.decrease_resource(resource)

        self.engine.tick()
        self.step_count += 1
        state = self.engine.state

        reward = (state.plant_health - health_before) * self.health_scale
        reward += (state.growth_stage.index - stage_before) * self.stage_bonus

        terminated = state.game_phase.is_terminal
        if state.game_phase is GamePhase.WON:
            reward += self.win_bonus
        elif state.game_phase is GamePhase.LOST:
            reward -= self.loss_penalty
        truncated = (not terminated) and self.step_count >= self.max_ticks

        info = self._get_info()
        info['command_accepted'] = accepted
        if terminated:
            info['summary'] = self.engine.summary()
            info['loss_reasons'] = self.engine.loss_reasons()

        if self.render_mode == 'human':
            self.render()
        return self._get_obs(), float(reward), terminated, truncated, info

    def render(self):
        snap = self.engine.snapshot()
        res = ' '.join(f"{k}={v:.1f}" for k, v in snap['resources'].items())
        day = 'day' if snap['is_daylight'] else 'night'
        print(f"[env] t={snap['elapsed_time']:6.1f}s {day:5s} stage={snap['growth_stage']:<11s} "
              f"health={snap['plant_health']:5.1f} progress={snap['growth_progress']:5.1f} | {res}")

#!/usr/bin/env python3
"""
Baseline Controller for the orbital garden
A simple rule-based player to verify the game is winnable.

This controller should bring the zinnia to flowering on both difficulties.
If it can't, there's a bug in the engine or the tuning.
"""

import argparse
from typing import Dict, Optional, Tuple

from rl.gym_env import OrbitalGardenEnv, build_action_table, decode_obs, denormalize_resource
from sim.resources import RESOURCE_RANGES, active_resources
from sim.state import Difficulty, ResourceId


class BaselineController:
    """
    Rules:
    1. Keep every scored resource inside a band shrunk by `margin` of the
       optimal width on each side; act on the resource furthest outside it.
    2. Hard mode: recharge energy (free) when it drops under `energy_low`.
    3. At most one command per call.
    """

    def __init__(self, difficulty="easy", margin=0.2, energy_low=40.0):
        self.difficulty = Difficulty(difficulty)
        self.margin = margin
        self.energy_low = energy_low
        self.actions = build_action_table(self.difficulty)
        self.name = f"Baseline ({self.difficulty.value})"

    def _target_band(self, resource: ResourceId) -> Tuple[float, float]:
        lo, hi = RESOURCE_RANGES[resource].optimal
        pad = (hi - lo) * self.margin
        return lo + pad, hi - pad

    def decide(self, values: Dict[ResourceId, float]) -> Optional[Tuple[str, ResourceId]]:
        """(op, resource) to issue for these resource levels, or None."""
        if self.difficulty is Difficulty.HARD and values[ResourceId.ENERGY] < self.energy_low:
            return ('increase', ResourceId.ENERGY)

        worst = None
        worst_gap = 0.0
        for resource in active_resources(self.difficulty):
            if RESOURCE_RANGES[resource].optimal is None:
                continue
            lo, hi = self._target_band(resource)
            value = values[resource]
            width = hi - lo
            if value < lo:
                gap, op = (lo - value) / width, 'increase'
            elif value > hi:
                gap, op = (value - hi) / width, 'decrease'
            else:
                continue
            if gap > worst_gap:
                worst, worst_gap = (op, resource), gap
        return worst

    def decide_from_snapshot(self, snapshot: dict):
        values = {ResourceId(k): v for k, v in snapshot['resources'].items()}
        return self.decide(values)

    def predict(self, obs, deterministic=True):
        """Policy-style entry point: returns (action_index, None)."""
        obs_dict = decode_obs(obs)
        values = {r: denormalize_resource(r, obs_dict[f'resource_{r.value}']) for r in ResourceId}
        command = self.decide(values)
        if command is None:
            return 0, None
        return self.actions.index(command), None


def run_baseline_episode(difficulty="easy", seed=0, verbose=False):
    env = OrbitalGardenEnv(cfg={'env': {'difficulty': difficulty}})
    controller = BaselineController(difficulty)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    terminated = truncated = False
    while not (terminated or truncated):
        action, _ = controller.predict(obs)
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += reward
    if verbose:
        print(f"[baseline] {controller.name}: phase={info['game_phase']} "
              f"stage={info['growth_stage']} health={info['plant_health']:.1f} reward={total_reward:.1f}")
    return info, total_reward


def main():
    parser = argparse.ArgumentParser(description="Run the baseline controller")
    parser.add_argument('--difficulty', choices=['easy', 'hard'], default='easy')
    parser.add_argument('--seed', type=int, default=0)
    args = parser.parse_args()
    run_baseline_episode(args.difficulty, args.seed, verbose=True)


if __name__ == '__main__':
    main()

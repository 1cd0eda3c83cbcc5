#!/usr/bin/env python3
"""
evaluate_policy.py

Deterministic evaluation harness for orbital garden policies.
Runs N seeded episodes and prints win rate, health and stage statistics.

Any object with `predict(obs, deterministic=True) -> (action, state)` works
as a policy; by default the rule-based baseline controller is evaluated.

Usage:
    python rl/evaluate_policy.py --difficulty hard --n_episodes 20
"""

import argparse
import sys
from collections import Counter
from pathlib import Path

import numpy as np

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rl.wrappers import make_env


def evaluate_policy(policy=None, difficulty: str = "easy", n_episodes: int = 20, seed: int = 42,
                    cfg=None, deterministic: bool = True, verbose: bool = True):
    """
    Evaluate a policy with fixed seeds for reproducibility.

    Args:
        policy: object with predict(); defaults to BaselineController
        difficulty: 'easy' or 'hard'
        n_episodes: Number of episodes to run
        seed: Base seed; episode i uses seed + i
        cfg: Optional config dict passed to the environment
        verbose: Print per-episode lines and the summary table

    Returns:
        Dict with evaluation statistics
    """
    cfg = dict(cfg or {})
    cfg['env'] = {**(cfg.get('env') or {}), 'difficulty': difficulty}

    if policy is None:
        from baseline_controller import BaselineController
        policy = BaselineController(difficulty)

    env = make_env(cfg=cfg)

    episode_rewards = []
    episode_lengths = []
    final_health = []
    outcomes = Counter()
    stages = Counter()
    loss_causes = Counter()
    rejected = []

    if verbose:
        print(f"\n{'='*80}")
        print(f"EVALUATION: {n_episodes} episodes, difficulty={difficulty}, seed={seed}")
        print(f"{'='*80}\n")

    for episode in range(n_episodes):
        obs, info = env.reset(seed=seed + episode)
        terminated = truncated = False
        while not (terminated or truncated):
            action, _ = policy.predict(obs, deterministic=deterministic)
            obs, reward, terminated, truncated, info = env.step(action)

        ep = info['episode']
        episode_rewards.append(ep['r'])
        episode_lengths.append(ep['l'])
        rejected.append(ep['rejected'])
        final_health.append(info['plant_health'])
        outcomes[info['game_phase']] += 1
        stages[info['growth_stage']] += 1
        for cause in ep.get('loss_reasons', []):
            loss_causes[cause] += 1

        if verbose:
            print(f"Episode {episode+1:3d}: {info['game_phase']:<7s} stage={info['growth_stage']:<11s} "
                  f"health={info['plant_health']:5.1f} reward={ep['r']:8.2f} ticks={ep['l']}")

    stats = {
        'n_episodes': n_episodes,
        'difficulty': difficulty,
        'win_rate': 100.0 * outcomes.get('won', 0) / max(1, n_episodes),
        'mean_reward': float(np.mean(episode_rewards)) if episode_rewards else 0.0,
        'std_reward': float(np.std(episode_rewards)) if episode_rewards else 0.0,
        'mean_length': float(np.mean(episode_lengths)) if episode_lengths else 0.0,
        'mean_final_health': float(np.mean(final_health)) if final_health else 0.0,
        'mean_rejected_commands': float(np.mean(rejected)) if rejected else 0.0,
        'outcomes': dict(outcomes),
        'stages': dict(stages),
        'loss_causes': dict(loss_causes),
    }

    if verbose:
        print(f"\n{'-'*80}")
        print(f"Win rate:            {stats['win_rate']:.1f}%")
        print(f"Mean reward:         {stats['mean_reward']:.2f} ± {stats['std_reward']:.2f}")
        print(f"Mean final health:   {stats['mean_final_health']:.1f}")
        print(f"Mean episode ticks:  {stats['mean_length']:.0f}")
        print(f"Stages reached:      {stats['stages']}")
        if loss_causes:
            print(f"Loss causes:         {stats['loss_causes']}")
        print(f"{'-'*80}")

    return stats


def main():
    parser = argparse.ArgumentParser(description="Evaluate a policy on the orbital garden")
    parser.add_argument('--difficulty', choices=['easy', 'hard'], default='easy')
    parser.add_argument('--n_episodes', type=int, default=20)
    parser.add_argument('--seed', type=int, default=42)
    args = parser.parse_args()
    evaluate_policy(difficulty=args.difficulty, n_episodes=args.n_episodes, seed=args.seed)


if __name__ == '__main__':
    main()

"""
Wrappers for OrbitalGardenEnv.
"""

import gymnasium as gym


class EpisodeStats(gym.Wrapper):
    """Track episode statistics and attach them to the final info dict."""
    def __init__(self, env):
        super().__init__(env)
        self.episode_reward = 0.0
        self.episode_length = 0
        self.commands_issued = 0
        self.commands_rejected = 0
        self.episode_stats = {}

    def reset(self, **kwargs):
        self.episode_reward = 0.0
        self.episode_length = 0
        self.commands_issued = 0
        self.commands_rejected = 0
        self.episode_stats = {}
        return self.env.reset(**kwargs)

    def step(self, action):
        obs, reward, terminated, truncated, info = self.env.step(action)
        self.episode_reward += reward
        self.episode_length += 1

        if int(action) != 0:
            self.commands_issued += 1
            if not info.get('command_accepted', False):
                self.commands_rejected += 1

        if 'summary' in info:
            self.episode_stats['summary'] = info['summary']
        if info.get('loss_reasons'):
            self.episode_stats['loss_reasons'] = [r['cause'] for r in info['loss_reasons']]

        if terminated or truncated:
            info['episode'] = {
                'r': self.episode_reward,
                'l': self.episode_length,
                'commands': self.commands_issued,
                'rejected': self.commands_rejected,
                **self.episode_stats
            }

        return obs, reward, terminated, truncated, info


def make_env(cfg=None, use_wrappers=True):
    """Factory function to create and wrap environment."""
    from rl.gym_env import OrbitalGardenEnv

    env = OrbitalGardenEnv(cfg=cfg)
    if use_wrappers:
        env = EpisodeStats(env)
    return env

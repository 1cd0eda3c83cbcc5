"""
Utility plotting functions for the orbital garden.

Provides:
- time-series plotting of resources, health and growth from a run history
- an episode summary (plots + text file)

Note: uses matplotlib and expects a dict of equal-length lists as produced by
`history_recorder()`.
"""

import os

import matplotlib.pyplot as plt

from sim.resources import RESOURCE_RANGES
from sim.state import ResourceId


def history_recorder(history=None):
    """
    Returns (history, listener). Register the listener on a TickClock
    (`clock.add_listener(listener)`) and it appends one row per tick.
    """
    history = history if history is not None else {}

    def listener(snapshot):
        history.setdefault('time', []).append(snapshot['elapsed_time'])
        history.setdefault('health', []).append(snapshot['plant_health'])
        history.setdefault('progress', []).append(snapshot['growth_progress'])
        history.setdefault('daylight', []).append(1 if snapshot['is_daylight'] else 0)
        for name, value in snapshot['resources'].items():
            history.setdefault(name, []).append(value)

    return history, listener


def plot_time_series(log, out_path=None, title=None, resources=None):
    """
    Plot resources (top) and health/progress (bottom) against simulated time.

    Optimal bands are shaded for every plotted resource.
    """
    time = log.get('time', list(range(len(log.get('health', [])))))
    resources = resources or [r.value for r in ResourceId if r.value in log]

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
    for name in resources:
        line, = ax1.plot(time, log[name], label=name)
        band = RESOURCE_RANGES[ResourceId(name)].optimal
        if band is not None:
            ax1.axhspan(band[0], band[1], color=line.get_color(), alpha=0.06)
    ax1.set_ylabel('Resource level')
    ax1.legend(loc='upper left', ncol=4)

    ax2.plot(time, log.get('health', []), label='Health', color='tab:red', linewidth=2)
    ax2.plot(time, log.get('progress', []), label='Progress', color='tab:green')
    daylight = log.get('daylight')
    if daylight:
        ax2.fill_between(time, 0, [100 * d for d in daylight], color='gold', alpha=0.1, label='Daylight')
    ax2.set_xlabel('Simulated time (s)')
    ax2.set_ylabel('Health / Progress (%)')
    ax2.set_ylim(0, 105)
    ax2.legend(loc='upper left')

    if title:
        fig.suptitle(title)

    if out_path:
        fig.savefig(out_path, dpi=150)
        plt.close(fig)
    else:
        plt.show()
    return fig


def plot_episode_summary(history, summary=None, out_dir='plots', prefix='episode'):
    """Create and save a set of plots summarizing a single session"""
    os.makedirs(out_dir, exist_ok=True)
    plot_time_series(history, out_path=os.path.join(out_dir, f'{prefix}_timeseries.png'),
                     title=f'{prefix} summary')

    health = history.get('health', [])
    with open(os.path.join(out_dir, f'{prefix}_summary.txt'), 'w') as f:
        if health:
            f.write(f'final_health: {health[-1]}\n')
            f.write(f'min_health: {min(health)}\n')
        for key, value in (summary or {}).items():
            f.write(f'{key}: {value}\n')

    print(f'[viz] saved episode summary to {out_dir}/{prefix}_*')

import pytest

from sim.engine import SimulationEngine

NO_EVENTS = {'events': {'chance_easy': 0.0, 'chance_hard': 0.0}}


def playing_engine(difficulty='easy', cfg=None, seed=0):
    """Engine already through menu -> tutorial -> playing."""
    merged = dict(NO_EVENTS)
    merged.update(cfg or {})
    engine = SimulationEngine(merged, seed=seed)
    assert engine.start_game(difficulty)
    assert engine.start_playing()
    return engine


@pytest.fixture
def easy_engine():
    return playing_engine('easy')


@pytest.fixture
def hard_engine():
    return playing_engine('hard')
